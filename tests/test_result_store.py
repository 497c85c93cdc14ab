from __future__ import annotations

import pytest

from artifacts.result_store import ResultStore


def test_write_is_byte_exact_and_creates_the_directory(tmp_path):
    store = ResultStore(tmp_path / "results")
    raw = b'{"duration": 1,  "hashes": {}}\n'
    path = store.write("mask::duration::car::caer::0", raw)
    assert path == tmp_path / "results" / "mask::duration::car::caer::0.json"
    assert path.read_bytes() == raw
    assert store.read("mask::duration::car::caer::0") == raw


def test_write_replaces_existing_record(tmp_path):
    store = ResultStore(tmp_path)
    store.write("a", b"1")
    store.write("a", b"2")
    assert store.read("a") == b"2"
    assert len(store) == 1


def test_listing_ignores_other_files(tmp_path):
    store = ResultStore(tmp_path)
    store.write("b", b"{}")
    store.write("a", b"{}")
    (tmp_path / "notes.txt").write_text("hi")
    assert store.names() == ["a", "b"]
    assert list(store) == [("a", b"{}"), ("b", b"{}")]


def test_missing_root_is_empty(tmp_path):
    store = ResultStore(tmp_path / "absent")
    assert store.names() == []
    assert len(store) == 0


@pytest.mark.parametrize("name", ["", "../escape", "nested/name"])
def test_rejects_names_with_path_separators(name, tmp_path):
    with pytest.raises(ValueError):
        ResultStore(tmp_path).path_for(name)


def test_rejects_decoded_records(tmp_path):
    with pytest.raises(TypeError):
        ResultStore(tmp_path).write("a", "text")
