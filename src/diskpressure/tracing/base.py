"""
Defines the capture adapter interface.

A capture adapter drives an external tracing tool: it starts a trace, lets it
run for the requested duration, stops it and returns the exported per-I/O
rows. Temporary artifacts are the adapter's own business.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Mapping, Optional

from ..validation import CaptureError

logger = logging.getLogger(__name__)

RawRow = Mapping[str, Any]


class AbstractCaptureAdapter(ABC):
    """
    Abstract base class for trace capture adapters.

    Subclasses implement ``start_capture`` and ``stop_and_export``; ``capture``
    ties them together and always waits the full duration, since a started
    capture cannot be cancelled.
    """

    def __init__(self, sleep: Optional[Callable[[float], None]] = None):
        self._sleep = sleep or time.sleep

    @abstractmethod
    def start_capture(self) -> None:
        """
        Start the external trace.

        Raises:
            CaptureError: If the tool cannot be started.
        """
        pass

    @abstractmethod
    def stop_and_export(self, duration_elapsed: float) -> List[RawRow]:
        """
        Stop the running trace and return its rows.

        Args:
            duration_elapsed: Seconds the trace ran for.

        Returns:
            Raw rows, one mapping of column name to text per I/O.

        Raises:
            CaptureError: If stopping or exporting fails, or the export is empty.
        """
        pass

    def capture(self, duration_seconds: float) -> List[RawRow]:
        """
        Run one capture of ``duration_seconds`` and return its raw rows.

        Raises:
            CaptureError: For any failure of the adapter; other exceptions
                are chained as its cause.
        """
        name = self.__class__.__name__
        logger.info(f"Starting {duration_seconds:g}s trace capture with {name}")
        try:
            self.start_capture()
            started = time.monotonic()
            self._sleep(duration_seconds)
            elapsed = time.monotonic() - started
            rows = self.stop_and_export(elapsed)
        except CaptureError:
            raise
        except Exception as e:
            raise CaptureError(f"{name} failed: {type(e).__name__}: {e}") from e
        logger.info(f"Trace capture returned {len(rows)} rows")
        return rows
