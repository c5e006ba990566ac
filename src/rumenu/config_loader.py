# =============================================================================
# Configuration Loading
# =============================================================================
# Everything is resolved once from the process environment at startup and
# handed to the session; nothing here is mutated afterwards.

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from .logging_config import APP_NAME
from .scanner import split_search_path

COUNTS_FILE_NAME = "counts"

DEFAULT_PICKER = "bemenu"
DEFAULT_SHELL = "/bin/sh"

# Environment variable overriding the picker program
PICKER_ENV = "RUMENU_PICKER"


@dataclass(frozen=True)
class Config:
    data_dir: Path
    search_path: list[str] = field(default_factory=list)
    picker: list[str] = field(default_factory=lambda: [DEFAULT_PICKER])
    shell: str = DEFAULT_SHELL

    @property
    def counts_path(self) -> Path:
        return self.data_dir / COUNTS_FILE_NAME


def find_data_dir(environ: Mapping[str, str]) -> Path:
    """
    Locate the data directory.

    $XDG_DATA_HOME/rumenu, or $HOME/.local/share/rumenu when XDG_DATA_HOME
    is unset or empty.
    """
    data_home = environ.get("XDG_DATA_HOME", "")
    if not data_home:
        data_home = environ.get("HOME", "") + "/.local/share"
    return Path(data_home) / APP_NAME


def load_config(
    environ: Mapping[str, str] | None = None,
    picker: str | None = None,
    picker_args: Sequence[str] = ()
) -> Config:
    """
    Build the launcher configuration.

    Args:
        environ: Environment to read (defaults to os.environ)
        picker: Picker program from the command line; wins over $RUMENU_PICKER
        picker_args: Extra arguments passed through to the picker

    Returns:
        Config with data directory, search path, picker argv and shell
    """
    if environ is None:
        environ = os.environ

    picker_program = picker or environ.get(PICKER_ENV) or DEFAULT_PICKER

    config = Config(
        data_dir=find_data_dir(environ),
        search_path=split_search_path(environ.get("PATH", "")),
        picker=[picker_program, *picker_args],
        shell=environ.get("SHELL") or DEFAULT_SHELL,
    )

    logger.debug(
        "Configuration resolved",
        operation="load_config",
        status="success",
        data_dir=str(config.data_dir),
        picker=config.picker,
        shell=config.shell,
        metrics={"search_path_dirs": len(config.search_path)}
    )
    return config
