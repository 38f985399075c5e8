"""
Command execution and startup precondition checks.

This module provides functions for running external tools, expanding command
placeholders, and checking that the trace tool and required privileges are
available before the monitor starts.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


def run_command(
    argv: Sequence[str], cwd: Optional[Path] = None, timeout: Optional[float] = None
) -> Tuple[int, str, str]:
    """Execute a command and capture its output with robust error handling.

    Args:
        argv: The command and its arguments.
        cwd: Working directory for the command, or None for the current one.
        timeout: Seconds to wait before giving up, or None to wait forever.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 for execution errors.

    Note:
        Uses UTF-8 encoding with error replacement for robust text handling.
    """
    command = " ".join(argv)
    logger.debug(f"Executing command: '{command}' in '{cwd or os.getcwd()}'")
    try:
        process = subprocess.run(
            list(argv),
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
        return process.returncode, process.stdout, process.stderr
    except FileNotFoundError as e:
        logger.error(f"Command not found: {argv[0]}: {type(e).__name__}: {e}")
        return -1, "", f"Error: Command not found '{argv[0]}'"
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out after {timeout}s: '{command[:80]}'")
        return -1, "", f"Error: Command timed out after {timeout}s"
    except Exception as e:
        error_msg = f"Unexpected error while running command '{command[:50]}...'"
        logger.error(f"{error_msg}: {type(e).__name__}: {e}", exc_info=True)
        return -1, "", f"An unexpected error occurred: {e}"


def expand_command(argv: Sequence[str], placeholders: Dict[str, str]) -> List[str]:
    """Substitute ``{name}`` placeholders in every argument.

    Examples:
        >>> expand_command(["tool", "-o", "{output}"], {"output": "/tmp/x.csv"})
        ['tool', '-o', '/tmp/x.csv']
    """
    expanded = []
    for arg in argv:
        for name, value in placeholders.items():
            arg = arg.replace("{" + name + "}", value)
        expanded.append(arg)
    return expanded


def check_tool_installed(executable: str) -> bool:
    """Check if an executable is available, either on PATH or as a path."""
    if os.sep in executable:
        return os.path.isfile(executable) and os.access(executable, os.X_OK)
    return shutil.which(executable) is not None


def has_root_privileges() -> bool:
    """Return True when running with an effective uid of 0.

    Kernel I/O tracing generally requires root. Platforms without
    ``os.geteuid`` are treated as unprivileged.
    """
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0
