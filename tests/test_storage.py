from __future__ import annotations

import json
from pathlib import Path
from typing import List

import pytest

from glk_bridge.adapter import GlkAdapter
from glk_bridge.constants import EOF, FileMode, FileUsage
from glk_bridge.presentation import PresentationHooks
from glk_bridge.storage import (
    FORMAT_TAG,
    JsonFileStore,
    MemoryStore,
    StorageBridge,
    decode,
    encode,
)


def make_adapter(store: MemoryStore | None = None) -> GlkAdapter:
    hooks = PresentationHooks(print_text=lambda text: None, wait_for_input_hook=lambda cb: None)
    return GlkAdapter(hooks, store=store if store is not None else MemoryStore())


def test_save_then_load_returns_same_sequence() -> None:
    bridge = StorageBridge()

    bridge.save("slot1", [1, 2, 3])

    assert bridge.load("slot1") == [1, 2, 3]
    assert bridge.exists("slot1") is True


def test_load_of_unknown_name_is_absent() -> None:
    bridge = StorageBridge()

    assert bridge.load("slot2") is None
    assert bridge.exists("slot2") is False


def test_blobs_are_self_describing_text() -> None:
    store = MemoryStore()
    StorageBridge(store).save("slot1", [7, 8])

    payload = json.loads(store.get_item("slot1") or "")

    assert payload == {"format": FORMAT_TAG, "length": 2, "data": [7, 8]}


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "{}",
        '"text"',
        json.dumps({"format": FORMAT_TAG, "length": 3, "data": [1, 2]}),
        json.dumps({"format": "other", "length": 1, "data": [1]}),
        json.dumps([1, "two", 3]),
        json.dumps([1, True]),
        json.dumps([-1]),
        json.dumps([0x110000]),
        json.dumps([1.5]),
    ],
)
def test_malformed_data_reads_as_absent(raw: str) -> None:
    store = MemoryStore({"slot": raw})

    assert StorageBridge(store).load("slot") is None
    assert decode(raw) is None


def test_bare_json_arrays_are_accepted() -> None:
    store = MemoryStore({"legacy": "[72, 105]"})

    assert StorageBridge(store).load("legacy") == [72, 105]


def test_encode_decode_handles_empty_sequence() -> None:
    assert decode(encode([])) == []


def test_delete_removes_blob() -> None:
    bridge = StorageBridge()
    bridge.save("slot", [1])

    bridge.delete("slot")

    assert bridge.load("slot") is None


def test_json_file_store_persists_between_instances(tmp_path: Path) -> None:
    path = tmp_path / "saves.json"
    StorageBridge(JsonFileStore(path)).save("zork", [5, 6])

    reopened = StorageBridge(JsonFileStore(path))

    assert reopened.load("zork") == [5, 6]
    assert not path.with_suffix(".json.tmp").exists()


def test_corrupt_json_file_store_starts_empty(tmp_path: Path) -> None:
    path = tmp_path / "saves.json"
    path.write_text("{broken", encoding="utf-8")

    store = JsonFileStore(path)

    assert store.get_item("anything") is None
    store.set_item("slot", "[1]")
    assert json.loads(path.read_text(encoding="utf-8")) == {"slot": "[1]"}


def test_file_stream_close_saves_written_data() -> None:
    store = MemoryStore()
    glk = make_adapter(store)
    fref = glk.glk_fileref_create_by_name(FileUsage.SAVED_GAME, "slot1", 0)

    stream = glk.glk_stream_open_file(fref, FileMode.WRITE, 0)
    glk.glk_put_buffer_stream(stream, [1, 2, 3])
    assert glk.glk_fileref_does_file_exist(fref) == 0
    glk.glk_stream_close(stream)

    assert glk.glk_fileref_does_file_exist(fref) == 1
    assert StorageBridge(store).load("slot1") == [1, 2, 3]


def test_restore_reads_back_saved_data() -> None:
    glk = make_adapter()
    fref = glk.glk_fileref_create_by_prompt(FileUsage.SAVED_GAME, FileMode.WRITE, 0)
    out = glk.glk_stream_open_file(fref, FileMode.WRITE, 0)
    glk.glk_put_string_stream(out, "ZS")
    glk.glk_stream_close(out)

    back = glk.glk_stream_open_file(fref, FileMode.READ, 0)
    buf = [0] * 4
    count = glk.glk_get_buffer_stream(back, buf)

    assert fref.filename == "glk-save"
    assert count == 2
    assert buf[:2] == [ord("Z"), ord("S")]
    assert glk.glk_get_char_stream(back) == EOF


def test_read_stream_does_not_save_on_close() -> None:
    store = MemoryStore({"slot": "[9]"})
    glk = make_adapter(store)
    fref = glk.glk_fileref_create_by_name(FileUsage.DATA, "slot", 0)

    stream = glk.glk_stream_open_file(fref, FileMode.READ, 0)
    glk.glk_stream_close(stream)

    assert store.get_item("slot") == "[9]"


def test_opening_missing_file_for_read_gives_empty_stream() -> None:
    glk = make_adapter()
    fref = glk.glk_fileref_create_by_name(FileUsage.SAVED_GAME, "slot2", 0)

    stream = glk.glk_stream_open_file(fref, FileMode.READ, 0)

    assert glk.glk_get_char_stream(stream) == EOF


def test_write_append_extends_existing_file() -> None:
    store = MemoryStore()
    glk = make_adapter(store)
    fref = glk.glk_fileref_create_by_name(FileUsage.TRANSCRIPT, "log", 0)
    first = glk.glk_stream_open_file(fref, FileMode.WRITE, 0)
    glk.glk_put_string_stream(first, "ab")
    glk.glk_stream_close(first)

    more = glk.glk_stream_open_file(fref, FileMode.WRITE_APPEND, 0)
    glk.glk_put_string_stream(more, "c")
    glk.glk_stream_close(more)

    assert StorageBridge(store).load("log") == [ord("a"), ord("b"), ord("c")]


def test_temp_fileref_is_removed_on_destroy() -> None:
    store = MemoryStore()
    glk = make_adapter(store)
    fref = glk.glk_fileref_create_temp(FileUsage.DATA, 4)
    stream = glk.glk_stream_open_file(fref, FileMode.WRITE, 0)
    glk.glk_put_char_stream(stream, 1)
    glk.glk_stream_close(stream)
    assert glk.glk_fileref_does_file_exist(fref) == 1

    glk.glk_fileref_destroy(fref)

    assert store.get_item(fref.filename) is None
    assert glk.glk_fileref_iterate(None) is None


def test_delete_file_and_fileref_iterate() -> None:
    glk = make_adapter()
    keep = glk.glk_fileref_create_by_name(FileUsage.DATA, "keep", 1)
    drop = glk.glk_fileref_create_by_name(FileUsage.DATA, "drop", 2)
    stream = glk.glk_stream_open_file(drop, FileMode.WRITE, 0)
    glk.glk_stream_close(stream)

    glk.glk_fileref_delete_file(drop)

    assert glk.glk_fileref_does_file_exist(drop) == 0
    assert glk.glk_fileref_iterate(None) is keep
    assert glk.glk_fileref_iterate(keep) is drop
    assert glk.glk_fileref_get_rock(drop) == 2


def test_malformed_save_reads_as_empty_file() -> None:
    store = MemoryStore({"slot": "garbage"})
    glk = make_adapter(store)
    fref = glk.glk_fileref_create_by_name(FileUsage.SAVED_GAME, "slot", 0)

    stream = glk.glk_stream_open_file(fref, FileMode.READ, 0)

    assert stream.data == []
    assert glk.glk_fileref_does_file_exist(fref) == 1


DEEPLY_NESTED = "[" * 100000 + "]" * 100000


def test_deeply_nested_blob_reads_as_absent() -> None:
    glk = make_adapter(MemoryStore({"slot": DEEPLY_NESTED}))
    fref = glk.glk_fileref_create_by_name(FileUsage.SAVED_GAME, "slot", 0)

    assert glk.storage.load("slot") is None
    stream = glk.glk_stream_open_file(fref, FileMode.READ, 0)
    assert glk.glk_get_char_stream(stream) == EOF


def test_deeply_nested_json_file_store_starts_empty(tmp_path: Path) -> None:
    path = tmp_path / "saves.json"
    path.write_text(DEEPLY_NESTED, encoding="utf-8")

    store = JsonFileStore(path)

    assert store.get_item("anything") is None
