# =============================================================================
# Structured Logging Setup
# =============================================================================

from __future__ import annotations

import json
import sys
import traceback
from contextvars import ContextVar
from datetime import timezone
from pathlib import Path

import platformdirs
from loguru import logger

APP_NAME = "rumenu"

# Correlation ID for one launcher session
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)

# Console prefixes, e.g. "Warning: ..." / "ERROR: ..."
_CONSOLE_PREFIXES = {
    "WARNING": "Warning",
    "ERROR": "ERROR",
    "CRITICAL": "ERROR",
}


def _attach_trace_id(record) -> None:
    """Patcher: fill extra["trace_id"] from the session context if unset."""
    if not record["extra"].get("trace_id"):
        record["extra"]["trace_id"] = trace_id_var.get()


def _record_to_json(record) -> str:
    extra = record["extra"]
    entry = {
        "timestamp": record["time"].astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
        "level": record["level"].name.lower(),
        "message": record["message"],
        "component": record["name"],
        "function": record["function"],
        "trace_id": extra.get("trace_id"),
        "operation": extra.get("operation", "unknown"),
        "operation_status": extra.get("status"),
        "context": {k: v for k, v in extra.items()
                    if k not in ("operation", "status", "trace_id", "metrics")},
        "metrics": extra.get("metrics", {}),
    }

    if record["exception"]:
        exc_type, exc_value, exc_tb = record["exception"]
        entry["error"] = {
            "type": exc_type.__name__ if exc_type else "Unknown",
            "message": str(exc_value) if exc_value else "Unknown error",
            "traceback_lines": traceback.format_tb(exc_tb) if exc_tb else [],
        }

    return json.dumps(entry, default=str)


def make_console_sink(json_lines: bool = False):
    """
    Build the stderr sink.

    Plain mode writes "Warning: <msg>" / "ERROR: <msg>" lines; JSON mode
    writes one JSON object per record.
    """
    def sink(message) -> None:
        record = message.record
        if json_lines:
            line = _record_to_json(record)
        else:
            level = record["level"].name
            line = f"{_CONSOLE_PREFIXES.get(level, level.capitalize())}: {record['message']}"
        sys.stderr.write(line + "\n")

    return sink


def setup_logger(verbose: bool = False, json_console: bool = False, log_file: bool = True):
    """
    Configure Loguru for the launcher.

    Outputs:
    - stderr: prefixed plain text (or JSONL with json_console=True),
      WARNING and above unless verbose
    - File: JSONL with rotation in the OS-appropriate log directory
      Linux: ~/.local/state/rumenu/log/
      macOS: ~/Library/Logs/rumenu/
    """
    logger.remove()
    logger.configure(patcher=_attach_trace_id)

    logger.add(
        make_console_sink(json_lines=json_console),
        level="DEBUG" if verbose else "WARNING"
    )

    if not log_file:
        return logger

    try:
        log_dir = Path(platformdirs.user_log_dir(
            appname=APP_NAME,
            ensure_exists=True
        ))
    except OSError as e:
        logger.warning(
            "file logging disabled: {error}",
            error=str(e),
            operation="setup_logger",
            status="fallback"
        )
        return logger

    logger.add(
        str(log_dir / f"{APP_NAME}.jsonl"),
        format="{message}",
        serialize=True,
        rotation="10 MB",
        retention="7 days",
        compression="gz",
        level="DEBUG"
    )

    logger.debug(
        "Logger initialized",
        operation="setup_logger",
        status="success",
        log_dir=str(log_dir)
    )

    return logger
