from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pymonza._api import cars as cars_api
from pymonza._api import ordered_cars as ordered_api
from pymonza.config import MonzaConfig
from pymonza.exceptions import MonzaApiError, MonzaRecordNotFoundError
from pymonza.floors import Floor


class _FakeTransport:
    def __init__(self, response: Any = None, exc: Exception | None = None) -> None:
        self.response = response
        self.exc = exc
        self.requests: list[tuple[str, dict[str, str], bool]] = []

    async def get_json(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        *,
        single: bool = False,
    ) -> Any:
        self.requests.append((path, dict(params or {}), single))
        if self.exc is not None:
            raise self.exc
        return self.response

    async def post_json(self, path: str, body: Mapping[str, Any]) -> Any:
        raise AssertionError("reads never post")


def _config(**overrides: Any) -> MonzaConfig:
    return MonzaConfig(base_url="https://example.supabase.co", api_key="anon", **overrides)


@pytest.mark.asyncio
async def test_fetch_cars_by_floor_queries_floor_ordered_by_update() -> None:
    transport = _FakeTransport(
        [
            {"id": "1", "vin": "A", "current_floor": "SHOWROOM_1"},
            {"id": "2", "vin": "B", "current_floor": "SHOWROOM_1"},
        ]
    )

    cars = await cars_api.fetch_cars_by_floor(_config(), transport, "floor_1")

    assert [car.id for car in cars] == ["1", "2"]
    assert all(car.current_floor is Floor.SHOWROOM_1 for car in cars)
    assert transport.requests == [
        (
            "/car_inventory",
            {"select": "*", "current_floor": "eq.SHOWROOM_1", "order": "updated_at.desc.nullslast"},
            False,
        )
    ]


@pytest.mark.asyncio
async def test_fetch_cars_uses_configured_table() -> None:
    transport = _FakeTransport([])

    assert await cars_api.fetch_cars_by_floor(_config(cars_table="cars_view"), transport, Floor.SCHEDULE) == []
    assert transport.requests[0][0] == "/cars_view"


@pytest.mark.asyncio
async def test_fetch_cars_rejects_invalid_rows() -> None:
    transport = _FakeTransport([{"id": "1", "current_floor": "ROOFTOP"}])

    with pytest.raises(MonzaApiError) as excinfo:
        await cars_api.fetch_cars_by_floor(_config(), transport, Floor.SHOWROOM_1)

    assert excinfo.value.code == "invalid_record"


@pytest.mark.asyncio
async def test_fetch_car_requests_single_object() -> None:
    transport = _FakeTransport({"id": "7", "vin": "VIN7", "current_floor": "SCHEDULE"})

    car = await cars_api.fetch_car(_config(), transport, "7")

    assert car.vin == "VIN7"
    assert transport.requests == [("/car_inventory", {"select": "*", "id": "eq.7"}, True)]


@pytest.mark.asyncio
async def test_fetch_car_not_found_propagates() -> None:
    transport = _FakeTransport(exc=MonzaRecordNotFoundError("no row", code="PGRST116"))

    with pytest.raises(MonzaRecordNotFoundError):
        await cars_api.fetch_car(_config(), transport, "missing")


@pytest.mark.asyncio
async def test_fetch_floor_counts_includes_every_floor(caplog: pytest.LogCaptureFixture) -> None:
    transport = _FakeTransport(
        [
            {"current_floor": "SHOWROOM_1"},
            {"current_floor": "showroom_1"},
            {"current_floor": "GARAGE"},
            {"current_floor": "ROOFTOP"},
            {"current_floor": None},
        ]
    )

    with caplog.at_level("WARNING"):
        counts = await cars_api.fetch_floor_counts(_config(), transport)

    assert set(counts) == set(Floor)
    assert counts[Floor.SHOWROOM_1] == 2
    assert counts[Floor.GARAGE_INVENTORY] == 1
    assert counts[Floor.NEW_ARRIVALS] == 0
    assert "unknown floor" in caplog.text
    assert transport.requests[0][1] == {"select": "current_floor"}


@pytest.mark.asyncio
async def test_fetch_ordered_cars_filters_by_status() -> None:
    transport = _FakeTransport([{"id": 3, "vin": "ord1", "status": "pending"}])

    orders = await ordered_api.fetch_ordered_cars(_config(), transport, status="pending")

    assert [order.vin for order in orders] == ["ORD1"]
    assert transport.requests == [
        (
            "/ordered_cars",
            {"select": "*", "order": "order_date.desc.nullslast", "status": "eq.pending"},
            False,
        )
    ]
