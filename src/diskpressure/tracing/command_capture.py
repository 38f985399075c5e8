"""
Capture adapter driving an external trace tool through commands.

Two argv templates come from configuration:

- ``start_command`` is launched in the background when the capture starts.
  Tools that only start a kernel session and exit (exit code 0) are supported,
  as are tools that keep tracing in the foreground; the latter are interrupted
  with SIGINT when the duration is over so they can flush their output.
- ``stop_command`` runs after the duration and must write a CSV export to
  ``{output}``.

Both templates may use ``{output}``, ``{work_dir}`` and ``{duration}``. Each
capture gets its own temporary directory, removed afterwards unless
``keep_artifacts`` is set.
"""

import logging
import shutil
import signal
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import polars as pl

from ..system.commands import expand_command, run_command
from ..validation import CaptureError, handle_subprocess_error, ErrorSeverity
from .base import AbstractCaptureAdapter, RawRow

logger = logging.getLogger(__name__)

EXPORT_FILE_NAME = "trace_export.csv"


class CommandCaptureAdapter(AbstractCaptureAdapter):
    """
    Runs configured start/stop commands and reads the CSV export with polars.

    Attributes:
        start_command: argv template launched at capture start.
        stop_command: argv template that stops the trace and writes the export.
        work_dir: Parent directory for per-capture temp dirs (None = system tmp).
        keep_artifacts: Keep the temp dir after the capture for inspection.
        stop_timeout: Seconds to wait for the start/stop commands to finish.
    """

    def __init__(
        self,
        start_command: Sequence[str],
        stop_command: Sequence[str],
        duration_seconds: float,
        work_dir: Optional[Path] = None,
        keep_artifacts: bool = False,
        stop_timeout: float = 60.0,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        super().__init__(sleep=sleep)
        self.start_command = list(start_command)
        self.stop_command = list(stop_command)
        self.duration_seconds = duration_seconds
        self.work_dir = work_dir
        self.keep_artifacts = keep_artifacts
        self.stop_timeout = stop_timeout

        self._process: Optional[subprocess.Popen] = None
        self._capture_dir: Optional[Path] = None

    @property
    def tool_executable(self) -> str:
        return self.start_command[0]

    def _placeholders(self) -> Dict[str, str]:
        return {
            "output": str(self._capture_dir / EXPORT_FILE_NAME),
            "work_dir": str(self._capture_dir),
            "duration": f"{self.duration_seconds:g}",
        }

    def start_capture(self) -> None:
        if self._process is not None:
            raise CaptureError("A capture is already running")

        try:
            if self.work_dir is not None:
                self.work_dir.mkdir(parents=True, exist_ok=True)
            self._capture_dir = Path(
                tempfile.mkdtemp(prefix="diskpressure-", dir=self.work_dir)
            )
        except OSError as e:
            raise CaptureError(f"Cannot create trace work directory under {self.work_dir}: {e}") from e

        argv = expand_command(self.start_command, self._placeholders())
        logger.debug(f"Launching trace start command: {' '.join(argv)}")
        try:
            self._process = subprocess.Popen(
                argv,
                cwd=self._capture_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            self._cleanup()
            raise CaptureError(f"Cannot start trace tool '{argv[0]}': {e}") from e

    def stop_and_export(self, duration_elapsed: float) -> List[RawRow]:
        if self._process is None or self._capture_dir is None:
            raise CaptureError("stop_and_export called without a running capture")

        try:
            self._finish_start_process()
            export_path = self._run_stop_command()
            rows = self._read_export(export_path)
            logger.debug(
                f"Read {len(rows)} rows from {export_path} after {duration_elapsed:.2f}s"
            )
            return rows
        finally:
            self._process = None
            self._cleanup()

    def _finish_start_process(self) -> None:
        process = self._process
        if process.poll() is None:
            # Foreground tracer: ask it to stop and flush.
            process.send_signal(signal.SIGINT)
            try:
                _, stderr = process.communicate(timeout=self.stop_timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                process.communicate()
                raise CaptureError(
                    f"Trace tool '{self.tool_executable}' did not stop within {self.stop_timeout}s"
                )
            # Interrupted foreground tracers exit with the signal status.
            if process.returncode not in (0, -signal.SIGINT, 128 + signal.SIGINT):
                raise CaptureError(
                    f"Trace tool '{self.tool_executable}' exited with {process.returncode}",
                    returncode=process.returncode,
                    stderr=stderr,
                )
            return

        _, stderr = process.communicate()
        if process.returncode != 0:
            raise CaptureError(
                f"Trace start command failed with exit code {process.returncode}: {stderr.strip()}",
                returncode=process.returncode,
                stderr=stderr,
            )

    def _run_stop_command(self) -> Path:
        placeholders = self._placeholders()
        argv = expand_command(self.stop_command, placeholders)
        returncode, _, stderr = run_command(
            argv, cwd=self._capture_dir, timeout=self.stop_timeout
        )
        if returncode != 0:
            error = CaptureError(
                f"Trace stop/export command failed with exit code {returncode}: {stderr.strip()}",
                returncode=returncode,
                stderr=stderr,
            )
            handle_subprocess_error(
                error, " ".join(argv), severity=ErrorSeverity.WARNING, reraise=False, logger=logger
            )
            raise error
        return Path(placeholders["output"])

    def _read_export(self, export_path: Path) -> List[RawRow]:
        if not export_path.exists() or export_path.stat().st_size == 0:
            raise CaptureError(f"Trace export is missing or empty: {export_path}")

        try:
            # Every column as text; numeric parsing happens per row later.
            df = pl.read_csv(export_path, infer_schema_length=0, truncate_ragged_lines=True)
            df = df.rename({column: column.strip() for column in df.columns})
        except (pl.exceptions.PolarsError, OSError) as e:
            raise CaptureError(f"Cannot read trace export {export_path}: {e}") from e

        if df.height == 0:
            raise CaptureError(f"Trace export has no rows: {export_path}")
        return df.to_dicts()

    def _cleanup(self) -> None:
        if self._capture_dir is None:
            return
        if self.keep_artifacts:
            logger.info(f"Keeping trace artifacts in {self._capture_dir}")
        else:
            shutil.rmtree(self._capture_dir, ignore_errors=True)
        self._capture_dir = None
