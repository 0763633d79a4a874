"""Car record model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pymonza.floors import Floor
from pymonza.models._base import MonzaBaseModel, coerce_bool, coerce_int, coerce_str


class Car(MonzaBaseModel):
    """A car on one of the dealership floors.

    Fields map the ``car_inventory`` rows. ``current_floor`` is required: a
    row without a recognised floor fails validation, so every ``Car`` in
    memory is on exactly one floor.
    """

    id: str
    """Primary key of the car row."""
    vin: str = Field(default="", validation_alias=AliasChoices("vin", "vin_number", "vinNumber"))
    """Vehicle Identification Number."""
    model: str = ""
    """Model name (e.g. ``"Voyah Free"``)."""
    brand: str | None = None
    year: int | None = None
    color: str | None = None
    category: str | None = None
    """Powertrain/category code (``"EV"``, ``"REV"``, ...)."""
    status: str | None = None
    """Sales status (``"in_stock"``, ``"reserved"``, ``"sold"``, ...)."""
    current_floor: Floor = Field(validation_alias=AliasChoices("current_floor", "currentFloor", "location"))
    """Floor the car currently occupies."""
    client_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("client_name", "clientName", "customer_name"),
    )
    """Name of the client the car is associated with, if any."""
    customs: str | None = Field(
        default=None,
        validation_alias=AliasChoices("customs", "custom_duty", "customs_status"),
    )
    """Customs clearance flag (``"paid"``, ``"not paid"``)."""
    notes: str | None = None
    pdi_completed: bool | None = None
    """Whether pre-delivery inspection has been completed."""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_str(value) or value

    @field_validator("vin", mode="before")
    @classmethod
    def _normalize_vin(cls, value: Any) -> str:
        return (coerce_str(value) or "").upper()

    @field_validator("current_floor", mode="before")
    @classmethod
    def _parse_floor(cls, value: Any) -> Floor:
        return Floor.parse(value)

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: Any) -> int | None:
        return coerce_int(value)

    @field_validator("pdi_completed", mode="before")
    @classmethod
    def _coerce_pdi(cls, value: Any) -> bool | None:
        return coerce_bool(value)

    @property
    def label(self) -> str:
        """Short human label used in notifications (``"Voyah Free (VIN123)"``)."""
        name = " ".join(part for part in (self.brand, self.model) if part)
        return f"{name} ({self.vin})" if self.vin else name
