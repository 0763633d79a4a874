"""Filtering and sorting of in-memory car lists.

Pure, synchronous helpers used by floor screens and scripts. Nothing here
touches the network.

Filtering is conjunctive across fields, and a blank value means "no
constraint" for that field. ``model``, ``status``, ``category``,
``customs`` and ``location`` compare by exact value; ``vin``, ``color``,
``notes`` and ``client_name`` are case-insensitive substring matches.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pymonza.floors import Floor
from pymonza.models.car import Car

_EXACT_FIELDS: tuple[str, ...] = ("model", "status", "category", "customs")
_SUBSTRING_FIELDS: tuple[str, ...] = ("vin", "color", "notes", "client_name")

# Sort key aliases accepted in addition to Car field names.
_SORT_KEY_ALIASES: dict[str, str] = {
    "location": "current_floor",
    "floor": "current_floor",
}


class CarFilter(BaseModel):
    """Independently toggled field predicates."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str | None = None
    status: str | None = None
    category: str | None = None
    customs: str | None = None
    location: Floor | None = None
    vin: str | None = None
    color: str | None = None
    notes: str | None = None
    client_name: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("location", mode="before")
    @classmethod
    def _parse_location(cls, value: Any) -> Floor | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return Floor.parse(value)

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())

    def matches(self, car: Car) -> bool:
        for name in _EXACT_FIELDS:
            expected = getattr(self, name)
            if expected is not None and getattr(car, name) != expected:
                return False
        if self.location is not None and car.current_floor is not self.location:
            return False
        for name in _SUBSTRING_FIELDS:
            needle = getattr(self, name)
            if needle is None:
                continue
            haystack = getattr(car, name)
            if haystack is None or needle.casefold() not in haystack.casefold():
                return False
        return True


def filter_cars(
    cars: Iterable[Car],
    criteria: CarFilter | None = None,
    **predicates: Any,
) -> list[Car]:
    """Return the cars matching every active predicate, in input order.

    Predicates may be given as a :class:`CarFilter`, as keyword arguments, or
    both (keywords win).

    Examples
    --------
    >>> filter_cars(cars, model="Model X", color="")  # doctest: +SKIP
    """
    if criteria is None:
        criteria = CarFilter(**predicates)
    elif predicates:
        criteria = CarFilter(**{**criteria.model_dump(), **predicates})
    if criteria.is_empty:
        return list(cars)
    return [car for car in cars if criteria.matches(car)]


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> SortDirection:
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


@dataclasses.dataclass(frozen=True)
class SortState:
    """Current sort column and direction of a list screen."""

    key: str | None = None
    direction: SortDirection = SortDirection.ASC

    def toggle(self, key: str) -> SortState:
        """Clicking the active column flips direction; a new column starts ascending."""
        if key == self.key:
            return SortState(key, self.direction.flipped())
        return SortState(key, SortDirection.ASC)

    def apply(self, cars: Iterable[Car]) -> list[Car]:
        if self.key is None:
            return list(cars)
        return sort_cars(cars, self.key, self.direction)


def _resolve_sort_key(key: str) -> str:
    field_name = _SORT_KEY_ALIASES.get(key, key)
    if field_name == "raw" or field_name not in Car.model_fields:
        raise ValueError(f"unknown sort key {key!r}")
    return field_name


def _sort_value(value: Any) -> Any:
    if isinstance(value, str):
        return value.casefold()
    if isinstance(value, datetime) and value.tzinfo is None:
        # Rows may mix naive and aware timestamps; naive ones are stored as UTC.
        return value.replace(tzinfo=UTC)
    return value


def sort_cars(
    cars: Iterable[Car],
    key: str,
    direction: SortDirection | str = SortDirection.ASC,
) -> list[Car]:
    """Return *cars* sorted by *key*.

    The sort is stable in both directions: equal values keep their input
    order. Cars without a value for *key* always come last.

    Raises
    ------
    ValueError
        If *key* is not a car field.
    """
    field_name = _resolve_sort_key(key)
    descending = SortDirection(direction) is SortDirection.DESC

    present: list[tuple[Any, Car]] = []
    missing: list[Car] = []
    for car in cars:
        value = getattr(car, field_name)
        if value is None or value == "":
            missing.append(car)
        else:
            present.append((_sort_value(value), car))

    present.sort(key=lambda item: item[0], reverse=descending)
    return [car for _, car in present] + missing
