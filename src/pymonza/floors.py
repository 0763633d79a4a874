"""Inventory locations ("floors") and the moves allowed between them."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

# Location codes used by older screens and imports of the dealership app.
_LEGACY_ALIASES: dict[str, str] = {
    "FLOOR_1": "SHOWROOM_1",
    "FLOOR_2": "SHOWROOM_2",
    "SHOWROOM_FLOOR_1": "SHOWROOM_1",
    "SHOWROOM_FLOOR_2": "SHOWROOM_2",
    "INVENTORY": "CAR_INVENTORY",
    "GARAGE": "GARAGE_INVENTORY",
    "GARAGE_SCHEDULE": "SCHEDULE",
}


class Floor(StrEnum):
    """A physical or logical location a car currently occupies."""

    NEW_ARRIVALS = "NEW_ARRIVALS"
    CAR_INVENTORY = "CAR_INVENTORY"
    GARAGE_INVENTORY = "GARAGE_INVENTORY"
    SHOWROOM_1 = "SHOWROOM_1"
    SHOWROOM_2 = "SHOWROOM_2"
    SCHEDULE = "SCHEDULE"

    @classmethod
    def parse(cls, value: Any) -> Floor:
        """Parse a floor code, tolerating case, separators and legacy aliases.

        Raises :class:`ValueError` for anything that is not a known floor.
        """
        if isinstance(value, Floor):
            return value
        if not isinstance(value, str):
            raise ValueError(f"floor must be a string, got {type(value).__name__}")
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        key = _LEGACY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unknown floor {value!r}") from None

    @property
    def label(self) -> str:
        return FLOOR_LABELS[self]


FLOOR_LABELS: dict[Floor, str] = {
    Floor.NEW_ARRIVALS: "New Arrivals",
    Floor.CAR_INVENTORY: "Car Inventory",
    Floor.GARAGE_INVENTORY: "Garage Inventory",
    Floor.SHOWROOM_1: "Showroom Floor 1",
    Floor.SHOWROOM_2: "Showroom Floor 2",
    Floor.SCHEDULE: "Schedule",
}

# Existing cars can go anywhere except back to new arrivals.
MOVABLE_FLOORS: tuple[Floor, ...] = tuple(floor for floor in Floor if floor is not Floor.NEW_ARRIVALS)

ORDERED_CAR_DESTINATIONS: tuple[Floor, ...] = (
    Floor.CAR_INVENTORY,
    Floor.SHOWROOM_1,
    Floor.SHOWROOM_2,
    Floor.GARAGE_INVENTORY,
    Floor.SCHEDULE,
)


def destinations_for(current_floor: Floor | str | None) -> tuple[Floor, ...]:
    """Return the floors a car on *current_floor* may be moved to.

    With an unknown current floor every movable floor is offered.
    """
    if current_floor is None:
        return MOVABLE_FLOORS
    current = Floor.parse(current_floor)
    return tuple(floor for floor in MOVABLE_FLOORS if floor is not current)


def is_allowed_destination(destination: Floor | str, current_floor: Floor | str | None = None) -> bool:
    try:
        target = Floor.parse(destination)
    except ValueError:
        return False
    return target in destinations_for(current_floor)
