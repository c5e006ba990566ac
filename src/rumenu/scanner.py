# =============================================================================
# Candidate Discovery
# =============================================================================

from __future__ import annotations

import asyncio
import contextvars
import os
import time
from collections.abc import Sequence
from itertools import chain

from loguru import logger

from .errors import NoCandidatesError

SEARCH_PATH_SEPARATOR = ":"


def split_search_path(value: str) -> list[str]:
    """Split a colon-delimited search path, keeping order and empty entries."""
    return value.split(SEARCH_PATH_SEPARATOR)


def is_safe_name(name: str) -> bool:
    """Names travel to the picker one per line, so a newline would split them."""
    return "\n" not in name


def list_directory(path: str) -> list[str]:
    """
    List the entry names of one search-path directory.

    An unreadable or missing directory yields an empty list.

    Returns:
        Sorted names, excluding ones that cannot be passed to the picker
    """
    try:
        names = os.listdir(path)
    except OSError as e:
        logger.debug(
            "Skipping unreadable directory",
            operation="list_directory",
            status="skip",
            directory=path,
            error=str(e),
            error_type=type(e).__name__
        )
        return []

    return sorted(name for name in names if is_safe_name(name))


async def scan(search_path: Sequence[str]) -> list[str]:
    """
    List every directory of the search path concurrently.

    Each directory is read in its own executor thread; results are
    concatenated in search-path order. Names present in several directories
    appear once per directory.

    Raises:
        NoCandidatesError: Nothing was found in any directory
    """
    start_time = time.perf_counter()
    loop = asyncio.get_running_loop()

    listings = await asyncio.gather(*(
        loop.run_in_executor(None, contextvars.copy_context().run, list_directory, directory)
        for directory in search_path
    ))
    candidates = list(chain.from_iterable(listings))

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    if not candidates:
        logger.debug(
            "Search path produced no candidates",
            operation="scan",
            status="failed",
            metrics={"directories": len(search_path), "duration_ms": duration_ms}
        )
        raise NoCandidatesError("no candidates found on search path", directories=len(search_path))

    logger.debug(
        "Search path scanned",
        operation="scan",
        status="success",
        metrics={
            "directories": len(search_path),
            "candidates": len(candidates),
            "duration_ms": duration_ms
        }
    )
    return candidates
