"""Car inventory reads.

Endpoints:
  - GET /rest/v1/<cars_table>?current_floor=eq.<FLOOR> (per floor list)
  - GET /rest/v1/<cars_table>?id=eq.<ID> (single record)
  - GET /rest/v1/<cars_table>?select=current_floor (floor counts)
"""

from __future__ import annotations

import logging
from collections import Counter

from pymonza._api._common import eq, column_values, table_path, validate_record, validate_records
from pymonza._transport import Transport
from pymonza.config import MonzaConfig
from pymonza.floors import Floor
from pymonza.models.car import Car

_logger = logging.getLogger(__name__)


async def fetch_cars_by_floor(config: MonzaConfig, transport: Transport, floor: Floor | str) -> list[Car]:
    """Return every car currently on *floor*, most recently updated first."""
    target = Floor.parse(floor)
    path = table_path(config.cars_table)
    rows = await transport.get_json(
        path,
        {
            "select": "*",
            "current_floor": eq(target.value),
            "order": "updated_at.desc.nullslast",
        },
    )
    cars = validate_records(Car, rows, endpoint=path)
    _logger.debug("Fetched %d car(s) on %s", len(cars), target.value)
    return cars


async def fetch_car(config: MonzaConfig, transport: Transport, car_id: str) -> Car:
    """Return a single car by id.

    Raises
    ------
    MonzaRecordNotFoundError
        If no row has this id.
    """
    path = table_path(config.cars_table)
    row = await transport.get_json(path, {"select": "*", "id": eq(car_id)}, single=True)
    return validate_record(Car, row, endpoint=path)


async def fetch_floor_counts(config: MonzaConfig, transport: Transport) -> dict[Floor, int]:
    """Count cars per floor.

    Every floor is present in the result; rows whose floor is not recognised
    are skipped.
    """
    path = table_path(config.cars_table)
    rows = await transport.get_json(path, {"select": "current_floor"})
    counts: Counter[Floor] = Counter({floor: 0 for floor in Floor})
    unknown = 0
    for value in column_values(rows or [], "current_floor"):
        try:
            counts[Floor.parse(value)] += 1
        except ValueError:
            unknown += 1
    if unknown:
        _logger.warning("Ignored %d car row(s) with an unknown floor", unknown)
    return {floor: counts[floor] for floor in Floor}
