# =============================================================================
# Command-Line Entry Point
# =============================================================================

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

from loguru import logger

from . import __version__
from .config_loader import DEFAULT_PICKER, PICKER_ENV, load_config
from .errors import PickerError, RumenuError
from .logging_config import setup_logger
from .session import Session


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rumenu",
        description="Pick a program from $PATH, most used first, and run it.",
        epilog="Arguments after -- are passed to the picker, e.g. rumenu -- -i -l 10"
    )
    parser.add_argument(
        "--picker",
        metavar="PROGRAM",
        help=f"picker program (default: ${PICKER_ENV} or {DEFAULT_PICKER})"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="log debug messages to stderr"
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="write stderr logs as JSON lines"
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="do not write the rotating log file"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "picker_args",
        nargs="*",
        metavar="PICKER_ARG",
        help="extra picker arguments"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run one launcher session.

    Returns:
        Exit code: 0 on success or empty selection, the picker's or the
        command's exit status when they fail, 255 for anything else
    """
    args = build_parser().parse_args(argv)
    setup_logger(verbose=args.verbose, json_console=args.log_json, log_file=not args.no_log_file)

    config = load_config(picker=args.picker, picker_args=args.picker_args)
    session = Session(config)

    try:
        asyncio.run(session.run())
    except PickerError as e:
        # The picker reports its own failures (or was cancelled by the user)
        if e.returncode is None or e.returncode < 0:
            _log_failure(e, session)
        return e.exit_code
    except RumenuError as e:
        _log_failure(e, session)
        return e.exit_code

    return 0


def _log_failure(exc: RumenuError, session: Session) -> None:
    error = exc.to_error()
    logger.error(
        "{error}",
        error=error.message,
        operation="main",
        status="failed",
        error_type=error.error_type.value,
        trace_id=session.trace_id,
        state=session.state.value,
        **error.context
    )
