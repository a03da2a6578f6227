"""
Tests for the JSON-lines placement log in `adapters/storage/placement_log.py`.

Covers:
- Appending created/edited/deleted events
- Replaying the log into the current placement set
- Skipping malformed or inconsistent lines
- Event validation
"""

import json
from uuid import uuid4

import pytest

from adapters.storage.placement_log import JsonlPlacementLog, PlacementEvent
from rotation.services import PlacementNotFoundError, RotationService


def _lines(path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestJsonlPlacementLog:
    def test_missing_file_starts_empty(self, tmp_path) -> None:
        log = JsonlPlacementLog(tmp_path / "nested" / "log.jsonl")
        assert log.list_all() == []
        assert not log.path.exists()

    def test_add_appends_created_event(self, tmp_path, placement) -> None:
        path = tmp_path / "nested" / "log.jsonl"
        log = JsonlPlacementLog(path)
        record = placement("left_arm", note="ok")

        log.add(record)

        events = _lines(path)
        assert len(events) == 1
        assert events[0]["action"] == "created"
        assert events[0]["placement_id"] == str(record.id)
        assert events[0]["record"]["site_key"] == "left_arm"

    def test_replay_applies_edits_and_deletes(self, tmp_path, placement) -> None:
        path = tmp_path / "log.jsonl"
        log = JsonlPlacementLog(path)
        kept = placement("left_arm", days_ago=2)
        dropped = placement("right_arm", days_ago=1)
        log.add(kept)
        log.add(dropped)
        log.update(kept.model_copy(update={"site_key": "left_thigh"}))
        log.remove(dropped.id)

        reloaded = JsonlPlacementLog(path)

        assert [r.site_key for r in reloaded.list_all()] == ["left_thigh"]
        assert reloaded.get(kept.id).placed_at == kept.placed_at
        assert [e["action"] for e in _lines(path)] == ["created", "created", "edited", "deleted"]

    def test_bad_lines_are_skipped(self, tmp_path, placement) -> None:
        path = tmp_path / "log.jsonl"
        log = JsonlPlacementLog(path)
        log.add(placement("left_arm"))
        with path.open("a", encoding="utf-8") as handle:
            handle.write("not json\n")
            handle.write("\n")
            handle.write(json.dumps({"action": "deleted", "placement_id": str(uuid4())}) + "\n")

        reloaded = JsonlPlacementLog(path)

        assert len(reloaded.list_all()) == 1
        assert reloaded.skipped_lines == 2

    def test_remove_unknown_does_not_append(self, tmp_path) -> None:
        path = tmp_path / "log.jsonl"
        log = JsonlPlacementLog(path)
        with pytest.raises(PlacementNotFoundError):
            log.remove(uuid4())
        assert not path.exists()

    def test_service_round_trip(self, tmp_path, clock, calendar) -> None:
        path = tmp_path / "log.jsonl"
        service = RotationService(JsonlPlacementLog(path), calendar=calendar, clock=clock)
        record = service.log_placement("left_arm")
        service.edit_placement(record.id, note="moved slightly")

        restored = RotationService(JsonlPlacementLog(path), calendar=calendar, clock=clock)

        assert restored.placements == service.placements
        assert restored.recommendation() == service.recommendation()


def _failing_append(event: PlacementEvent) -> None:
    raise OSError("disk full")


class TestWriteFailures:
    def test_failed_add_leaves_state_untouched(self, tmp_path, placement, monkeypatch) -> None:
        path = tmp_path / "log.jsonl"
        log = JsonlPlacementLog(path)
        monkeypatch.setattr(log, "_append", _failing_append)

        with pytest.raises(OSError):
            log.add(placement("left_arm"))

        assert log.list_all() == []
        assert JsonlPlacementLog(path).list_all() == []

    def test_failed_update_and_remove_keep_saved_record(
        self, tmp_path, placement, monkeypatch
    ) -> None:
        log = JsonlPlacementLog(tmp_path / "log.jsonl")
        record = placement("left_arm")
        log.add(record)
        monkeypatch.setattr(log, "_append", _failing_append)

        with pytest.raises(OSError):
            log.update(record.model_copy(update={"site_key": "right_arm"}))
        with pytest.raises(OSError):
            log.remove(record.id)

        assert log.list_all() == [record]

    def test_duplicate_add_is_rejected_before_writing(self, tmp_path, placement) -> None:
        path = tmp_path / "log.jsonl"
        log = JsonlPlacementLog(path)
        record = placement("left_arm")
        log.add(record)

        with pytest.raises(ValueError, match="Duplicate"):
            log.add(record)
        assert len(path.read_text(encoding="utf-8").splitlines()) == 1

    def test_service_cache_matches_disk_after_failed_log(
        self, tmp_path, clock, calendar, monkeypatch
    ) -> None:
        path = tmp_path / "log.jsonl"
        store = JsonlPlacementLog(path)
        service = RotationService(store, calendar=calendar, clock=clock)
        service.log_placement("left_arm")
        monkeypatch.setattr(store, "_append", _failing_append)

        with pytest.raises(OSError):
            service.log_placement("right_arm")
        monkeypatch.undo()
        service.log_placement("left_thigh")

        restored = RotationService(JsonlPlacementLog(path), calendar=calendar, clock=clock)
        assert sorted(p.site_key for p in service.placements) == ["left_arm", "left_thigh"]
        assert {p.id for p in restored.placements} == {p.id for p in service.placements}


class TestPlacementEvent:
    def test_deleted_event_carries_no_record(self, placement) -> None:
        record = placement("left_arm")
        with pytest.raises(ValueError, match="no record"):
            PlacementEvent(action="deleted", placement_id=record.id, record=record)

    def test_created_event_needs_matching_record(self, placement) -> None:
        with pytest.raises(ValueError, match="same id"):
            PlacementEvent(action="created", placement_id=uuid4(), record=placement("left_arm"))
