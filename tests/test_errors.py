"""Tests for errors.py - exit codes and structured Error records."""
from rumenu.errors import (
    CommandError,
    ErrorType,
    NoCandidatesError,
    PersistenceError,
    PickerError,
    Result,
)


def test_command_error_converts_to_tagged_record():
    exc = CommandError("vim", "exit status 2", returncode=2)
    error = exc.to_error()
    assert error.error_type == ErrorType.COMMAND_ERROR
    assert error.message == "vim: exit status 2"
    assert error.context == {"returncode": 2, "selection": "vim"}
    assert error.original_exception is exc


def test_record_context_is_a_copy():
    exc = PersistenceError("write counts: boom", file="/tmp/counts")
    exc.to_error().context["file"] = "changed"
    assert exc.context == {"file": "/tmp/counts"}


def test_exit_codes():
    assert NoCandidatesError("no candidates").exit_code == 255
    assert PickerError("bemenu: exit status 1", returncode=1).exit_code == 1
    assert PickerError("bemenu: not found").exit_code == 255
    assert CommandError("vim", "killed", returncode=-9).exit_code == 255


def test_failed_result_can_carry_partial_value():
    result = Result.err(NoCandidatesError("x").to_error(), value={"vim": 1})
    assert result.is_err()
    assert result.value == {"vim": 1}
