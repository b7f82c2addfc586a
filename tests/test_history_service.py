"""PromptHistoryStore unit tests."""

from __future__ import annotations

import json

from modules.optimization.style_presets import MediaType
from modules.services.history_service import (
    HISTORY_FORMAT_VERSION,
    HistoryItem,
    PromptHistoryStore,
)


def make_item(index: int, media_type: MediaType = MediaType.IMAGE) -> HistoryItem:
    return HistoryItem(id=f"id-{index}", prompt=f"prompt {index}", type=media_type, timestamp=1_000 + index)


def test_load_missing_file_returns_empty(tmp_path):
    store = PromptHistoryStore(tmp_path / "history.json")
    assert store.load() == ()


def test_append_places_new_item_first(tmp_path):
    store = PromptHistoryStore(tmp_path / "history.json")
    log = store.append(make_item(1), ())
    log = store.append(make_item(2), log)

    assert [item.id for item in log] == ["id-2", "id-1"]


def test_append_never_exceeds_limit(tmp_path):
    store = PromptHistoryStore(tmp_path / "history.json")
    log: tuple[HistoryItem, ...] = ()
    for index in range(25):
        log = store.append(make_item(index), log)
        assert len(log) <= 20

    assert len(log) == 20
    assert log[0].id == "id-24"
    assert log[-1].id == "id-5"


def test_append_does_not_mutate_input(tmp_path):
    store = PromptHistoryStore(tmp_path / "history.json")
    original = (make_item(1),)
    store.append(make_item(2), original)

    assert original == (make_item(1),)


def test_remove_keeps_relative_order(tmp_path):
    store = PromptHistoryStore(tmp_path / "history.json")
    log = tuple(make_item(index) for index in range(5))

    updated = store.remove("id-2", log)

    assert [item.id for item in updated] == ["id-0", "id-1", "id-3", "id-4"]


def test_remove_unknown_id_is_noop(tmp_path):
    store = PromptHistoryStore(tmp_path / "history.json")
    log = (make_item(1),)
    assert store.remove("missing", log) == log


def test_load_reproduces_last_persisted_log(tmp_path):
    path = tmp_path / "history.json"
    store = PromptHistoryStore(path)
    log = store.append(make_item(1, MediaType.VIDEO), ())
    log = store.append(make_item(2), log)
    log = store.append(make_item(3), log)
    log = store.remove("id-2", log)

    reloaded = PromptHistoryStore(path).load()

    assert reloaded == log
    assert reloaded[1].type is MediaType.VIDEO


def test_persisted_format_is_versioned(tmp_path):
    path = tmp_path / "history.json"
    PromptHistoryStore(path).append(make_item(1), ())

    payload = json.loads(path.read_text(encoding="utf-8"))

    assert payload["version"] == HISTORY_FORMAT_VERSION
    assert payload["items"] == [
        {"id": "id-1", "prompt": "prompt 1", "type": "IMAGE", "timestamp": 1001}
    ]


def test_load_accepts_legacy_array(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps([{"id": "abc", "prompt": "old", "type": "VIDEO", "timestamp": 5}]),
        encoding="utf-8",
    )

    log = PromptHistoryStore(path).load()

    assert log == (HistoryItem(id="abc", prompt="old", type=MediaType.VIDEO, timestamp=5),)


def test_load_unparsable_file_returns_empty(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")

    assert PromptHistoryStore(path).load() == ()


def test_load_future_version_returns_empty(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(json.dumps({"version": HISTORY_FORMAT_VERSION + 1, "items": []}), encoding="utf-8")

    assert PromptHistoryStore(path).load() == ()


def test_load_skips_malformed_entries(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps(
            {
                "version": 1,
                "items": [
                    {"id": "ok", "prompt": "fine", "type": "IMAGE", "timestamp": 1},
                    {"id": "bad-type", "prompt": "x", "type": "AUDIO", "timestamp": 2},
                    {"prompt": "no id", "type": "IMAGE", "timestamp": 3},
                    "garbage",
                ],
            }
        ),
        encoding="utf-8",
    )

    log = PromptHistoryStore(path).load()

    assert [item.id for item in log] == ["ok"]


def test_create_generates_unique_ids():
    first = HistoryItem.create("a", MediaType.IMAGE, timestamp=1)
    second = HistoryItem.create("a", MediaType.IMAGE, timestamp=1)

    assert first.id != second.id
    assert first.timestamp == 1
