"""Ordered car reads."""

from __future__ import annotations

from pymonza._api._common import eq, table_path, validate_records
from pymonza._transport import Transport
from pymonza.config import MonzaConfig
from pymonza.models.ordered_car import OrderedCar


async def fetch_ordered_cars(
    config: MonzaConfig,
    transport: Transport,
    *,
    status: str | None = None,
) -> list[OrderedCar]:
    """Return pending orders, newest order first, optionally by status."""
    path = table_path(config.ordered_cars_table)
    params = {"select": "*", "order": "order_date.desc.nullslast"}
    if status:
        params["status"] = eq(status)
    rows = await transport.get_json(path, params)
    return validate_records(OrderedCar, rows, endpoint=path)
