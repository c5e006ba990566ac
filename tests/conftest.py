"""Shared fixtures for the rumenu test suite."""
import sys
from pathlib import Path

import pytest
from loguru import logger

# Add src/ to path so tests run without installing
SRC_DIR = Path(__file__).resolve().parent.parent / "src"
sys.path.insert(0, str(SRC_DIR))

from rumenu.config_loader import Config  # noqa: E402
from rumenu.errors import CommandError, PickerError  # noqa: E402


class FakePicker:
    """Records what it was shown and returns a canned selection."""

    def __init__(self, selection="", returncode=0):
        self.selection = selection
        self.returncode = returncode
        self.shown = None

    async def pick(self, candidates):
        self.shown = list(candidates)
        if self.returncode:
            raise PickerError(f"picker: exit status {self.returncode}", returncode=self.returncode)
        return self.selection


class FakeShell:
    def __init__(self, returncode=0):
        self.returncode = returncode
        self.executed = []

    async def execute(self, command):
        self.executed.append(command)
        if self.returncode:
            raise CommandError(command, f"exit status {self.returncode}", returncode=self.returncode)


def make_bin_dir(root: Path, name: str, entries) -> Path:
    """Create a directory with empty files named after entries."""
    directory = root / name
    directory.mkdir()
    for entry in entries:
        (directory / entry).touch()
    return directory


@pytest.fixture
def log_records():
    """Capture loguru records at WARNING and above."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="WARNING")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def config(tmp_path):
    bin_dir = make_bin_dir(tmp_path, "bin", ["vim", "cat", "ls"])
    return Config(
        data_dir=tmp_path / "data" / "rumenu",
        search_path=[str(bin_dir)],
    )
