"""
Command-line interface for the diskpressure monitor.

Loads the configuration, checks startup preconditions and runs the monitoring
loop until SIGINT/SIGTERM.

Exit codes:
    0: clean shutdown (or successful ``--check``)
    1: configuration error
    2: unmet startup precondition (trace tool, privilege, sink)
"""

import argparse
import logging
import sys
import tomllib
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..config.validators import LOG_LEVELS
from ..monitoring import SignalHandler
from ..validation import StartupPreconditionError, ValidationError, handle_cli_error
from .orchestrator import MonitorRunner

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 1
EXIT_PRECONDITION_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diskpressure",
        description=(
            "Watch disk queue length and capture an I/O trace when a disk "
            "stays under sustained pressure."
        ),
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config.toml (defaults to conf/config.toml in the repository).",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override monitor.general.log_level.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single sample/evaluate cycle and exit.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Verify configuration and startup preconditions, then exit.",
    )
    return parser


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for the diskpressure monitor.

    Args:
        argv: Argument list (defaults to ``sys.argv[1:]``).

    Raises:
        SystemExit: With code 1 on configuration errors and code 2 on unmet
            startup preconditions.
    """
    args = build_parser().parse_args(argv)

    if args.config is not None:
        set_config_path(args.config)

    # Load application configuration
    try:
        monitor_config = get_config().monitor
    except (FileNotFoundError, tomllib.TOMLDecodeError, ValidationError, KeyError, ValueError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=EXIT_CONFIG_ERROR,
            include_traceback=False,
            logger=logger,
        )

    log_level = args.log_level or monitor_config.log_level
    logging.getLogger().setLevel(log_level)

    runner = MonitorRunner(monitor_config)
    try:
        runner.check_preconditions()
    except StartupPreconditionError as e:
        handle_cli_error(
            error=e,
            context=f"startup check ({e.precondition})",
            exit_code=EXIT_PRECONDITION_FAILED,
            include_traceback=False,
            logger=logger,
        )

    if args.check:
        logger.info("Configuration and startup preconditions OK")
        runner.close()
        return

    logger.info("Starting disk pressure monitor")
    try:
        with SignalHandler() as signals:
            runner.run(signals.shutdown_event, once=args.once)
    finally:
        runner.close()

    logger.info("Disk pressure monitor stopped")


if __name__ == "__main__":
    main_cli()
