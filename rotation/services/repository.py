"""
Placement repository protocol and an in-memory implementation.

The calculators only need "list all, newest first"; the write methods exist
for the service layer that owns mutations.
"""

from typing import Protocol
from uuid import UUID

from rotation.domain.models import PlacementRecord
from rotation.services.rest_status import sort_newest_first


class PlacementNotFoundError(KeyError):
    def __init__(self, placement_id: UUID) -> None:
        super().__init__(f"Placement not found: {placement_id}")
        self.placement_id = placement_id


class PlacementRepository(Protocol):
    """Storage for placement records."""

    def list_all(self) -> list[PlacementRecord]:
        """All records sorted descending by ``placed_at``."""
        ...

    def get(self, placement_id: UUID) -> PlacementRecord: ...

    def add(self, record: PlacementRecord) -> None: ...

    def update(self, record: PlacementRecord) -> None: ...

    def remove(self, placement_id: UUID) -> None: ...


class InMemoryPlacementRepository:
    """Dictionary-backed repository for tests and short-lived sessions."""

    def __init__(self, records: list[PlacementRecord] | None = None) -> None:
        self._records: dict[UUID, PlacementRecord] = {r.id: r for r in records or []}

    def __contains__(self, placement_id: object) -> bool:
        return placement_id in self._records

    def list_all(self) -> list[PlacementRecord]:
        return sort_newest_first(self._records.values())

    def get(self, placement_id: UUID) -> PlacementRecord:
        try:
            return self._records[placement_id]
        except KeyError:
            raise PlacementNotFoundError(placement_id) from None

    def add(self, record: PlacementRecord) -> None:
        if record.id in self._records:
            raise ValueError(f"Duplicate placement id: {record.id}")
        self._records[record.id] = record

    def update(self, record: PlacementRecord) -> None:
        self.get(record.id)
        self._records[record.id] = record

    def remove(self, placement_id: UUID) -> None:
        self.get(placement_id)
        del self._records[placement_id]
