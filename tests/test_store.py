"""Tests for store.py - counts file format and atomic persistence."""
import os

import pytest

from rumenu.errors import ErrorType, PersistenceError
from rumenu.store import FrequencyStore, parse_counts, serialize_counts


def test_load_missing_file_is_empty_first_run(tmp_path):
    result = FrequencyStore(tmp_path / "counts").load()
    assert result.is_ok()
    assert result.value == {}


def test_round_trip(tmp_path):
    store = FrequencyStore(tmp_path / "counts")
    table = {"vim": 6, "ls": 2, "name\twith tab": 1, "zero": 0}
    store.save(table)
    result = store.load()
    assert result.is_ok()
    assert result.value == table


def test_round_trip_empty_table(tmp_path):
    store = FrequencyStore(tmp_path / "counts")
    store.save({})
    assert (tmp_path / "counts").read_bytes() == b""
    assert store.load().value == {}


def test_round_trip_undecodable_filename(tmp_path):
    store = FrequencyStore(tmp_path / "counts")
    name = b"caf\xe9".decode("utf-8", "surrogateescape")
    store.save({name: 3})
    assert store.load().value == {name: 3}


def test_serialized_in_rank_order():
    assert serialize_counts({"ls": 2, "cat": 2, "vim": 6}) == "vim\t6\ncat\t2\nls\t2\n"


def test_save_is_idempotent(tmp_path):
    path = tmp_path / "counts"
    store = FrequencyStore(path)
    table = {"b": 1, "a": 1, "c": 7}
    store.save(table)
    first = path.read_bytes()
    store.save(table)
    assert path.read_bytes() == first


def test_save_creates_missing_directories(tmp_path):
    path = tmp_path / "share" / "rumenu" / "counts"
    FrequencyStore(path).save({"vim": 1})
    assert path.read_text() == "vim\t1\n"


def test_save_leaves_no_temp_files(tmp_path):
    store = FrequencyStore(tmp_path / "counts")
    store.save({"vim": 1})
    store.save({"vim": 2})
    assert sorted(os.listdir(tmp_path)) == ["counts"]


def test_failed_rename_keeps_previous_file(tmp_path, monkeypatch):
    path = tmp_path / "counts"
    store = FrequencyStore(path)
    store.save({"vim": 5})

    def broken_replace(src, dst):
        raise OSError("simulated crash before rename")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(PersistenceError):
        store.save({"vim": 6})

    assert path.read_text() == "vim\t5\n"
    assert sorted(os.listdir(tmp_path)) == ["counts"]


def test_failed_rename_with_no_previous_file(tmp_path, monkeypatch):
    def broken_replace(src, dst):
        raise OSError("boom")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(PersistenceError):
        FrequencyStore(tmp_path / "counts").save({"vim": 1})
    assert os.listdir(tmp_path) == []


def test_save_fails_when_directory_cannot_be_created(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    with pytest.raises(PersistenceError):
        FrequencyStore(blocker / "rumenu" / "counts").save({"vim": 1})


def test_name_with_newline_is_not_serialized(tmp_path):
    path = tmp_path / "counts"
    store = FrequencyStore(path)
    store.save({"vim": 1})
    with pytest.raises(PersistenceError):
        store.save({"bad\nname": 1})
    assert path.read_text() == "vim\t1\n"


def test_malformed_line_returns_partial_table_and_location(tmp_path):
    path = tmp_path / "counts"
    path.write_text("vim\t5\nbroken line\nls\t2\n")
    result = FrequencyStore(path).load()
    assert result.is_err()
    assert result.value == {"vim": 5}
    assert result.error.error_type == ErrorType.PARSE_ERROR
    assert result.error.message.startswith(f"{path}:2 invalid syntax")
    assert result.error.context["line_number"] == 2


@pytest.mark.parametrize("count", ["abc", "-1", "", "1.5", " 3"])
def test_invalid_counts_are_rejected(count):
    result = parse_counts(f"vim\t{count}\n", source="counts")
    assert result.is_err()
    assert result.error.message.startswith("counts:1 invalid syntax")


def test_blank_line_is_invalid():
    result = parse_counts("vim\t1\n\nls\t2\n", source="counts")
    assert result.is_err()
    assert result.value == {"vim": 1}


def test_last_line_without_newline():
    assert parse_counts("vim\t1\nls\t2").value == {"vim": 1, "ls": 2}


def test_unreadable_path_is_io_error(tmp_path):
    # A directory where the file should be
    (tmp_path / "counts").mkdir()
    result = FrequencyStore(tmp_path / "counts").load()
    assert result.is_err()
    assert result.error.error_type == ErrorType.IO_ERROR
    assert result.value == {}


def test_unencodable_name_is_persistence_error(tmp_path):
    path = tmp_path / "counts"
    store = FrequencyStore(path)
    store.save({"vim": 1})
    with pytest.raises(PersistenceError):
        store.save({"\ud800": 1})
    assert path.read_text() == "vim\t1\n"
    assert sorted(os.listdir(tmp_path)) == ["counts"]
