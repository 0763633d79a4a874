"""Local change events.

The realtime fan-out converts every change-feed notification into one
:class:`CarChange`. These events are transient: they are delivered to bus
listeners and never persisted.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pymonza.floors import Floor


class ChangeKind(StrEnum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: Any) -> ChangeKind:
        if isinstance(value, ChangeKind):
            return value
        if not isinstance(value, str):
            raise ValueError(f"change kind must be a string, got {type(value).__name__}")
        return cls(value.strip().lower())


class CarChange(BaseModel):
    """A car row was inserted, updated or deleted on the backend."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    affected_floor: Floor | None = Field(
        default=None,
        description="Floor of the row after the change (before it, for deletes).",
    )
    previous_floor: Floor | None = Field(
        default=None,
        description="Floor the row left, when the change moved it.",
    )
    record: dict[str, Any] = Field(default_factory=dict, description="Row after the change")
    old_record: dict[str, Any] = Field(default_factory=dict, description="Row before the change, if sent")
    table: str = ""
    commit_timestamp: datetime | None = None
    received_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> ChangeKind:
        return ChangeKind.parse(value)

    @property
    def car_id(self) -> str | None:
        for source in (self.record, self.old_record):
            value = source.get("id")
            if value is not None and str(value):
                return str(value)
        return None

    @property
    def floors(self) -> frozenset[Floor]:
        return frozenset(floor for floor in (self.affected_floor, self.previous_floor) if floor is not None)

    def affects(self, floor: Floor) -> bool:
        """Whether a view of *floor* must refresh for this change.

        When neither floor is known (e.g. a delete that only carries the row
        id) every floor is considered affected.
        """
        floors = self.floors
        if not floors:
            return True
        return floor in floors
