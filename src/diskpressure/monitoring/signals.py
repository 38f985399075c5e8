"""
Signal handling for the monitoring loop.

SIGINT and SIGTERM set a shutdown event that the loop checks between cycles.
"""

import logging
import signal
import threading
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SignalHandler:
    """
    Installs SIGINT/SIGTERM handlers that request a graceful shutdown.

    Use as a context manager so the original handlers are restored on exit.
    """

    def __init__(self, shutdown_event: Optional[threading.Event] = None):
        self.shutdown_event = shutdown_event or threading.Event()
        self._original_sigint_handler = None
        self._original_sigterm_handler = None
        self._signal_handlers_set = False

    def setup_signal_handlers(self) -> None:
        """Set up signal handlers."""
        try:
            self._original_sigint_handler = signal.signal(signal.SIGINT, self._handle_signal)
            self._original_sigterm_handler = signal.signal(signal.SIGTERM, self._handle_signal)
            self._signal_handlers_set = True
            logger.debug("Signal handlers set up for the monitoring loop")
        except (ValueError, OSError) as e:
            # signal.signal only works in the main thread
            logger.warning(f"Failed to set up signal handlers: {e}")

    def cleanup_signal_handlers(self) -> None:
        """Restore original signal handlers."""
        if not self._signal_handlers_set:
            return

        try:
            if self._original_sigint_handler is not None:
                signal.signal(signal.SIGINT, self._original_sigint_handler)
            if self._original_sigterm_handler is not None:
                signal.signal(signal.SIGTERM, self._original_sigterm_handler)
            logger.debug("Signal handlers restored")
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to restore signal handlers: {e}")
        finally:
            self._signal_handlers_set = False

    def _handle_signal(self, signum: int, frame: Any) -> None:
        if self.shutdown_event.is_set():
            logger.warning(f"Signal {signum} received again, still waiting for the current cycle")
            return
        logger.warning(f"Signal {signum} received. Stopping after the current cycle.")
        self.shutdown_event.set()

    def __enter__(self) -> "SignalHandler":
        self.setup_signal_handlers()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup_signal_handlers()
