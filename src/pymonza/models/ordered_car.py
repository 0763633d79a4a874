"""Ordered (pending arrival) car model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pymonza.models._base import MonzaBaseModel, coerce_int, coerce_str


class OrderedCar(MonzaBaseModel):
    """A car that has been ordered but has not arrived yet.

    Receiving it creates a new :class:`~pymonza.models.car.Car` on one of the
    ordered-car destinations; the order row itself is left to the backend.
    """

    id: str
    vin: str = Field(default="", validation_alias=AliasChoices("vin", "vin_number", "vinNumber"))
    model: str = ""
    brand: str | None = None
    year: int | None = None
    color: str | None = None
    category: str | None = Field(default=None, validation_alias=AliasChoices("category", "vehicle_type"))
    status: str | None = None
    order_date: datetime | None = None
    expected_delivery: datetime | None = None
    customer_name: str | None = None
    notes: str | None = Field(default=None, validation_alias=AliasChoices("notes", "order_notes"))

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_str(value) or value

    @field_validator("vin", mode="before")
    @classmethod
    def _normalize_vin(cls, value: Any) -> str:
        return (coerce_str(value) or "").upper()

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: Any) -> int | None:
        return coerce_int(value)
