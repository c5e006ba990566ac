# =============================================================================
# External Processes (picker + shell)
# =============================================================================

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from loguru import logger

from .errors import CommandError, PickerError
from .store import ENCODING, ENCODING_ERRORS


async def _communicate(process: asyncio.subprocess.Process, data: bytes) -> bytes | None:
    """Feed stdin and wait; kill the process if the caller is cancelled."""
    try:
        stdout, _ = await process.communicate(data)
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise
    return stdout


class Picker:
    """Line-oriented selection program, e.g. bemenu or dmenu."""

    def __init__(self, argv: Sequence[str]):
        self.argv = list(argv)

    async def pick(self, candidates: Sequence[str]) -> str:
        """
        Show candidates and return the selection.

        Returns:
            The chosen line without its trailing newline, or "" if nothing
            was chosen

        Raises:
            PickerError: Picker could not be started or exited non-zero
        """
        program = self.argv[0]
        data = ("\n".join(candidates) + "\n").encode(ENCODING, ENCODING_ERRORS)

        try:
            process = await asyncio.create_subprocess_exec(
                *self.argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise PickerError(f"{program}: {e.strerror or e}") from e

        stdout = await _communicate(process, data)
        if process.returncode != 0:
            logger.debug(
                "Picker exited non-zero",
                operation="pick",
                status="failed",
                picker=program,
                returncode=process.returncode
            )
            raise PickerError(f"{program}: exit status {process.returncode}", returncode=process.returncode)

        selection = stdout.decode(ENCODING, ENCODING_ERRORS).removesuffix("\n")
        logger.debug(
            "Picker returned",
            operation="pick",
            status="success" if selection else "empty",
            picker=program,
            metrics={"candidates": len(candidates)}
        )
        return selection


class Shell:
    """Runs a command line by writing it to the user's shell on stdin."""

    def __init__(self, program: str):
        self.program = program

    async def execute(self, command: str) -> None:
        """
        Run command in the shell; stdout and stderr are inherited.

        Raises:
            CommandError: Shell could not be started or exited non-zero
        """
        data = (command + "\n").encode(ENCODING, ENCODING_ERRORS)

        try:
            process = await asyncio.create_subprocess_exec(
                self.program,
                stdin=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise CommandError(command, f"{self.program}: {e.strerror or e}") from e

        await _communicate(process, data)
        if process.returncode != 0:
            raise CommandError(command, f"exit status {process.returncode}", returncode=process.returncode)

        logger.debug(
            "Command finished",
            operation="execute",
            status="success",
            shell=self.program
        )
