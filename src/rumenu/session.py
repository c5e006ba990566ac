# =============================================================================
# Launcher Session
# =============================================================================

from __future__ import annotations

import asyncio
import contextvars
import time
from enum import Enum
from uuid import uuid4

from loguru import logger

from .config_loader import Config
from .errors import PersistenceError
from .logging_config import trace_id_var
from .processes import Picker, Shell
from .ranker import contains, rank
from .scanner import scan
from .store import FrequencyStore


class SessionState(Enum):
    INIT = "init"
    GATHERING = "gathering"
    PICKING = "picking"
    ABORTED = "aborted"
    EXECUTING = "executing"
    DONE = "done"


class Session:
    """
    One launcher run: scan + load, pick, then execute + record.

    Flow:
    1. Load the counts file and scan the search path concurrently
    2. Rank candidates and show them in the picker
    3. Empty selection: stop without side effects
    4. Run the selection in the shell and record it concurrently
    """

    def __init__(
        self,
        config: Config,
        store: FrequencyStore | None = None,
        picker: Picker | None = None,
        shell: Shell | None = None
    ):
        self.config = config
        self.store = store or FrequencyStore(config.counts_path)
        self.picker = picker or Picker(config.picker)
        self.shell = shell or Shell(config.shell)

        self.state = SessionState.INIT
        self.trace_id = str(uuid4())
        self.table: dict[str, int] = {}
        self.ranked: list[str] = []

    async def run(self) -> str | None:
        """
        Run the session to completion.

        Returns:
            The executed selection, or None if the picker returned nothing

        Raises:
            NoCandidatesError: Search path is empty or unreadable
            PickerError: Picker failed
            CommandError: Selected command failed (takes priority)
            PersistenceError: Recording the selection failed
        """
        trace_id_var.set(self.trace_id)
        start_time = time.perf_counter()

        logger.debug(
            "Session starting",
            operation="session",
            status="started",
            trace_id=self.trace_id
        )

        await self._gather()

        self.state = SessionState.PICKING
        selection = await self.picker.pick(self.ranked)

        if not selection:
            self.state = SessionState.ABORTED
            logger.debug(
                "Nothing selected",
                operation="session",
                status="aborted",
                trace_id=self.trace_id
            )
            return None

        self.state = SessionState.EXECUTING
        await self._execute_and_record(selection)
        self.state = SessionState.DONE

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        logger.debug(
            "Session complete",
            operation="session",
            status="success",
            trace_id=self.trace_id,
            selection=selection,
            metrics={"duration_ms": duration_ms}
        )
        return selection

    async def _gather(self) -> None:
        self.state = SessionState.GATHERING
        loop = asyncio.get_running_loop()

        load_result, scan_result = await asyncio.gather(
            loop.run_in_executor(None, contextvars.copy_context().run, self.store.load),
            scan(self.config.search_path),
            return_exceptions=True
        )

        if isinstance(load_result, BaseException):
            raise load_result
        if load_result.is_err():
            logger.warning(
                "{error}",
                error=load_result.error.message,
                operation="load_counts",
                status="fallback",
                trace_id=self.trace_id,
                **load_result.error.context
            )
        self.table = load_result.value or {}

        if isinstance(scan_result, BaseException):
            raise scan_result

        self.ranked = rank(scan_result, self.table)
        logger.debug(
            "Candidates ranked",
            operation="rank",
            status="success",
            trace_id=self.trace_id,
            metrics={"candidates": len(self.ranked), "known_counts": len(self.table)}
        )

    async def _execute_and_record(self, selection: str) -> None:
        loop = asyncio.get_running_loop()

        command_result, record_result = await asyncio.gather(
            self.shell.execute(selection),
            loop.run_in_executor(None, contextvars.copy_context().run, self._record, selection),
            return_exceptions=True
        )

        if isinstance(command_result, BaseException):
            if isinstance(record_result, BaseException):
                logger.error(
                    "{error}",
                    error=str(record_result),
                    operation="record",
                    status="failed",
                    trace_id=self.trace_id
                )
            raise command_result
        if isinstance(record_result, BaseException):
            raise record_result

    def _record(self, selection: str) -> None:
        """Increment the selection's count and persist, if it was scanned."""
        try:
            self.config.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"create data directory: {e}", data_dir=str(self.config.data_dir)) from e

        # Membership is checked before the table changes so the ranked
        # list and the search key agree
        if not contains(self.ranked, selection, self.table):
            logger.debug(
                "Selection is not a known candidate, not recorded",
                operation="record",
                status="skip",
                trace_id=self.trace_id,
                selection=selection
            )
            return

        self.table[selection] = self.table.get(selection, 0) + 1
        self.store.save(self.table)

        logger.debug(
            "Selection recorded",
            operation="record",
            status="success",
            trace_id=self.trace_id,
            selection=selection,
            metrics={"count": self.table[selection]}
        )
