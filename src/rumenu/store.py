# =============================================================================
# Frequency Store
# =============================================================================
# On-disk format, one entry per line, most used first:
#
#     <name>\t<count>\n
#
# The name is everything before the last tab, so names may contain tabs.

from __future__ import annotations

import errno
import os
import re
import tempfile
from collections.abc import Mapping
from pathlib import Path

from loguru import logger

from .errors import Error, ErrorType, PersistenceError, Result
from .ranker import rank

# Text encoding for the counts file; surrogateescape keeps undecodable
# filenames intact across a load/save cycle
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"

_COUNT_PATTERN = re.compile(r"[0-9]+")


def serialize_counts(table: Mapping[str, int]) -> str:
    """
    Render a frequency table in rank order.

    Raises:
        PersistenceError: A name contains a newline and cannot be stored
    """
    lines = []
    for name in rank(table, table):
        if "\n" in name:
            raise PersistenceError(f"write counts: cannot store name with newline: {name!r}")
        lines.append(f"{name}\t{table[name]}\n")
    return "".join(lines)


def parse_counts(text: str, source: str = "<counts>") -> Result[dict[str, int]]:
    """
    Parse the counts file format.

    Stops at the first malformed line; the entries before it are returned
    with the error.
    """
    counts: dict[str, int] = {}
    # Records are separated by "\n" only (not str.splitlines() boundaries)
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    for line_number, line in enumerate(lines, start=1):
        name, tab, count = line.rpartition("\t")
        if not tab:
            return _syntax_error(counts, source, line_number, line)
        if not _COUNT_PATTERN.fullmatch(count):
            return _syntax_error(counts, source, line_number, line, f"invalid count {count!r}")
        counts[name] = int(count)
    return Result.ok(counts)


def _syntax_error(counts, source, line_number, line, detail=None) -> Result[dict[str, int]]:
    message = f"{source}:{line_number} invalid syntax"
    if detail:
        message += f": {detail}"
    return Result.err(
        Error(
            error_type=ErrorType.PARSE_ERROR,
            message=message,
            context={"file": source, "line_number": line_number, "line_content": line[:50]}
        ),
        value=counts
    )


class FrequencyStore:
    """Durable name -> selection count mapping backed by a single file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Result[dict[str, int]]:
        """
        Read the persisted table.

        A missing file is a first run and yields an empty table. Read or
        parse failures are returned as an error Result whose value holds
        whatever could be parsed.
        """
        try:
            text = self.path.read_bytes().decode(ENCODING, ENCODING_ERRORS)
        except FileNotFoundError:
            logger.debug(
                "Counts file does not exist, starting empty",
                operation="load_counts",
                status="default",
                file=str(self.path)
            )
            return Result.ok({})
        except OSError as e:
            return Result.err(
                Error(
                    error_type=ErrorType.IO_ERROR,
                    message=f"{self.path}: {e.strerror or e}",
                    context={"file": str(self.path)},
                    original_exception=e
                ),
                value={}
            )

        result = parse_counts(text, source=str(self.path))
        logger.debug(
            "Counts loaded",
            operation="load_counts",
            status="success" if result.is_ok() else "partial",
            file=str(self.path),
            metrics={"entries": len(result.value)}
        )
        return result

    def save(self, table: Mapping[str, int]) -> None:
        """
        Replace the persisted table atomically.

        Uses temp file -> fsync -> rename in the target directory, so the
        file is either the old version or the new one, never a partial write.

        Raises:
            PersistenceError: Directory creation, serialization or write failed
        """
        content = serialize_counts(table)
        directory = self.path.parent

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"write counts: {e}", file=str(self.path)) from e

        try:
            temp_fd, temp_path = tempfile.mkstemp(
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp"
            )
        except OSError as e:
            raise PersistenceError(f"write counts: {e}", file=str(self.path)) from e

        committed = False
        try:
            with os.fdopen(temp_fd, "w", encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            os.replace(temp_path, self.path)
            committed = True

        except OSError as e:
            if e.errno == errno.ENOSPC:
                raise PersistenceError(f"write counts: disk full - cannot write to {self.path}") from e
            raise PersistenceError(f"write counts: {e}", file=str(self.path)) from e

        except UnicodeError as e:
            raise PersistenceError(f"write counts: cannot encode name: {e}", file=str(self.path)) from e

        finally:
            if not committed:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass

        logger.debug(
            "Atomic counts write successful",
            operation="save_counts",
            status="success",
            file=str(self.path),
            metrics={"entries": len(table)}
        )
