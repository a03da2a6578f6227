"""
Append-only JSON-lines placement log.

Every mutation appends one event line; the current set of placements is the
replay of all events. The file is never rewritten in place.

Event line format (one JSON object per line):

    {"action": "created", "placement_id": "...", "record": {...}, "logged_at": "..."}
    {"action": "edited",  "placement_id": "...", "record": {...}, "logged_at": "..."}
    {"action": "deleted", "placement_id": "...", "record": null,  "logged_at": "..."}
"""

from datetime import UTC, datetime
from pathlib import Path
from typing import Literal
from uuid import UUID

import structlog
from pydantic import BaseModel, Field, ValidationError, model_validator

from rotation.domain.models import PlacementRecord
from rotation.services.repository import InMemoryPlacementRepository, PlacementNotFoundError

logger = structlog.get_logger(__name__)

PlacementAction = Literal["created", "edited", "deleted"]


class PlacementEvent(BaseModel):
    """One line of the placement log."""

    action: PlacementAction
    placement_id: UUID
    record: PlacementRecord | None = None
    logged_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def record_matches_action(self) -> "PlacementEvent":
        if self.action == "deleted":
            if self.record is not None:
                raise ValueError("deleted events carry no record")
        elif self.record is None or self.record.id != self.placement_id:
            raise ValueError(f"{self.action} events need a record with the same id")
        return self


class JsonlPlacementLog:
    """
    PlacementRepository backed by an append-only JSON-lines file.

    Design principles:
    - Unreadable lines are skipped with a warning, the rest still loads
    - Events referring to unknown placements are skipped the same way
    - File system errors propagate to the caller
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.logger = logger.bind(component="placement_log", path=str(self.path))
        self._state = InMemoryPlacementRepository()
        self.skipped_lines = 0
        self._replay()

    def _replay(self) -> None:
        if not self.path.exists():
            self.logger.info("placement_log_missing", action="starting_empty")
            return

        applied = 0
        with self.path.open("r", encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                try:
                    event = PlacementEvent.model_validate_json(line)
                    self._apply(event)
                    applied += 1
                except (ValidationError, ValueError, PlacementNotFoundError) as e:
                    self.skipped_lines += 1
                    self.logger.warning(
                        "placement_log_line_skipped", line_number=line_number, error=str(e)
                    )

        self.logger.info(
            "placement_log_loaded",
            events=applied,
            skipped=self.skipped_lines,
            placements=len(self._state.list_all()),
        )

    def _apply(self, event: PlacementEvent) -> None:
        if event.action == "created":
            self._state.add(event.record)  # type: ignore[arg-type]
        elif event.action == "edited":
            self._state.update(event.record)  # type: ignore[arg-type]
        else:
            self._state.remove(event.placement_id)

    def _append(self, event: PlacementEvent) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(event.model_dump_json() + "\n")
        self.logger.debug("placement_event_appended", action=event.action)

    def list_all(self) -> list[PlacementRecord]:
        return self._state.list_all()

    def get(self, placement_id: UUID) -> PlacementRecord:
        return self._state.get(placement_id)

    # Each mutation is checked against the current state, written to disk,
    # and only then applied in memory.

    def add(self, record: PlacementRecord) -> None:
        if record.id in self._state:
            raise ValueError(f"Duplicate placement id: {record.id}")
        self._append(PlacementEvent(action="created", placement_id=record.id, record=record))
        self._state.add(record)

    def update(self, record: PlacementRecord) -> None:
        self._state.get(record.id)
        self._append(PlacementEvent(action="edited", placement_id=record.id, record=record))
        self._state.update(record)

    def remove(self, placement_id: UUID) -> None:
        self._state.get(placement_id)
        self._append(PlacementEvent(action="deleted", placement_id=placement_id))
        self._state.remove(placement_id)
