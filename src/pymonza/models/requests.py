"""Pydantic request models for client entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
Destination checks live in the ``build`` constructors rather than in field
validators so that a rejected floor surfaces as
:class:`~pymonza.exceptions.MonzaInvalidDestinationError` instead of a
generic ``ValidationError``. Either way nothing is sent to the backend.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pymonza.exceptions import MonzaInvalidDestinationError
from pymonza.floors import ORDERED_CAR_DESTINATIONS, Floor, destinations_for


def _parse_destination(value: Any, allowed: tuple[Floor, ...]) -> Floor:
    try:
        return Floor.parse(value)
    except ValueError as exc:
        raise MonzaInvalidDestinationError(
            f"Unknown destination floor {value!r}",
            destination=str(value),
            allowed=tuple(floor.value for floor in allowed),
        ) from exc


def _require_allowed(subject: str, destination: Floor, allowed: tuple[Floor, ...]) -> None:
    if destination not in allowed:
        raise MonzaInvalidDestinationError(
            f"Cannot move {subject} to {destination.label}",
            destination=destination.value,
            allowed=tuple(floor.value for floor in allowed),
        )


class _IdRequest(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    @staticmethod
    def _require_id(value: Any, name: str) -> str:
        text = str(value).strip() if value is not None else ""
        if not text:
            raise ValueError(f"{name} must be non-empty")
        return text


class MoveCarRequest(_IdRequest):
    """Move an existing car to another floor."""

    car_id: str
    destination: Floor
    current_floor: Floor | None = None
    notes: str | None = None

    @field_validator("car_id", mode="before")
    @classmethod
    def _car_id_non_empty(cls, value: Any) -> str:
        return cls._require_id(value, "car_id")

    @field_validator("current_floor", mode="before")
    @classmethod
    def _parse_current_floor(cls, value: Any) -> Floor | None:
        if value is None:
            return None
        return Floor.parse(value)

    @field_validator("notes")
    @classmethod
    def _blank_notes_to_none(cls, value: str | None) -> str | None:
        return value or None

    @classmethod
    def build(
        cls,
        car_id: Any,
        destination: Floor | str,
        *,
        current_floor: Floor | str | None = None,
        notes: str | None = None,
    ) -> MoveCarRequest:
        """Validate a move and return the normalized request.

        Raises
        ------
        MonzaInvalidDestinationError
            If *destination* is unknown or not reachable from *current_floor*.
        pydantic.ValidationError
            If *car_id* is blank or *current_floor* is not a known floor.
        """
        request = cls(
            car_id=car_id,
            destination=_parse_destination(destination, destinations_for(None)),
            current_floor=current_floor,
            notes=notes,
        )
        _require_allowed(f"car {request.car_id}", request.destination, destinations_for(request.current_floor))
        return request


class ReceiveOrderedCarRequest(_IdRequest):
    """Receive an ordered car onto one of the fixed arrival floors."""

    ordered_car_id: str
    destination: Floor

    @field_validator("ordered_car_id", mode="before")
    @classmethod
    def _ordered_car_id_non_empty(cls, value: Any) -> str:
        return cls._require_id(value, "ordered_car_id")

    @classmethod
    def build(cls, ordered_car_id: Any, destination: Floor | str) -> ReceiveOrderedCarRequest:
        """Validate a receive and return the normalized request."""
        request = cls(
            ordered_car_id=ordered_car_id,
            destination=_parse_destination(destination, ORDERED_CAR_DESTINATIONS),
        )
        _require_allowed(f"ordered car {request.ordered_car_id}", request.destination, ORDERED_CAR_DESTINATIONS)
        return request
