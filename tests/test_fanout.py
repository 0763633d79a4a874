from __future__ import annotations

from typing import Any

import pytest

from pymonza.floors import Floor
from pymonza.models.change import CarChange, ChangeKind
from pymonza.realtime.bus import LocalEventBus
from pymonza.realtime.fanout import RealtimeFanout, build_car_change
from pymonza.realtime.feed import ChangeCallback


class _FakeFeed:
    def __init__(self) -> None:
        self.on_change: ChangeCallback | None = None
        self.starts = 0
        self.stops = 0

    @property
    def is_running(self) -> bool:
        return self.on_change is not None

    async def start(self, on_change: ChangeCallback) -> None:
        self.starts += 1
        self.on_change = on_change

    async def stop(self) -> None:
        self.stops += 1
        self.on_change = None

    def push(self, data: dict[str, Any]) -> None:
        assert self.on_change is not None
        self.on_change(data)


def test_build_car_change_from_realtime_update() -> None:
    change = build_car_change(
        {
            "type": "UPDATE",
            "table": "car_inventory",
            "schema": "public",
            "commit_timestamp": "2024-05-01T10:00:00Z",
            "record": {"id": "c1", "current_floor": "GARAGE_INVENTORY"},
            "old_record": {"id": "c1", "current_floor": "SHOWROOM_1"},
        }
    )

    assert change.kind is ChangeKind.UPDATE
    assert change.affected_floor is Floor.GARAGE_INVENTORY
    assert change.previous_floor is Floor.SHOWROOM_1
    assert change.car_id == "c1"
    assert change.table == "car_inventory"
    assert change.commit_timestamp is not None


def test_build_car_change_update_on_same_floor_has_no_previous_floor() -> None:
    change = build_car_change(
        {
            "type": "UPDATE",
            "record": {"id": "c1", "current_floor": "SHOWROOM_2"},
            "old_record": {"id": "c1", "current_floor": "SHOWROOM_2"},
        }
    )
    assert change.previous_floor is None
    assert change.floors == frozenset({Floor.SHOWROOM_2})


def test_build_car_change_accepts_generic_event_shape() -> None:
    change = build_car_change({"eventType": "insert", "new": {"id": 9, "current_floor": "NEW_ARRIVALS"}})

    assert change.kind is ChangeKind.INSERT
    assert change.affected_floor is Floor.NEW_ARRIVALS
    assert change.car_id == "9"


def test_delete_without_full_old_record_affects_every_floor() -> None:
    change = build_car_change({"type": "DELETE", "record": {}, "old_record": {"id": "c1"}})

    assert change.kind is ChangeKind.DELETE
    assert change.affected_floor is None
    assert all(change.affects(floor) for floor in Floor)


def test_delete_with_old_floor_targets_that_floor() -> None:
    change = build_car_change({"type": "DELETE", "old_record": {"id": "c1", "current_floor": "SCHEDULE"}})

    assert change.affected_floor is Floor.SCHEDULE
    assert not change.affects(Floor.SHOWROOM_1)


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"type": "TRUNCATE"},
        {"type": "UPDATE", "record": ["not", "a", "dict"]},
    ],
)
def test_build_car_change_rejects_malformed_notifications(data: dict[str, Any]) -> None:
    with pytest.raises(ValueError):
        build_car_change(data)


@pytest.mark.asyncio
async def test_fanout_publishes_one_event_per_notification() -> None:
    feed = _FakeFeed()
    bus = LocalEventBus()
    seen: list[CarChange] = []
    bus.subscribe(seen.append)
    fanout = RealtimeFanout(feed=feed, bus=bus)

    await fanout.start()
    feed.push({"type": "UPDATE", "record": {"id": "c1", "current_floor": "GARAGE_INVENTORY"}})
    feed.push({"type": "bogus"})
    feed.push({"type": "INSERT", "record": {"id": "c2", "current_floor": "SHOWROOM_1"}})

    assert [event.car_id for event in seen] == ["c1", "c2"]


@pytest.mark.asyncio
async def test_garage_event_is_ignored_by_showroom_listener() -> None:
    feed = _FakeFeed()
    bus = LocalEventBus()
    showroom_refreshes: list[CarChange] = []
    bus.subscribe(lambda event: showroom_refreshes.append(event) if event.affects(Floor.SHOWROOM_1) else None)
    fanout = RealtimeFanout(feed=feed, bus=bus)

    await fanout.start()
    feed.push(
        {
            "type": "UPDATE",
            "record": {"id": "c3", "current_floor": "GARAGE_INVENTORY"},
            "old_record": {"id": "c3", "current_floor": "GARAGE_INVENTORY"},
        }
    )

    assert showroom_refreshes == []


@pytest.mark.asyncio
async def test_start_and_stop_are_idempotent() -> None:
    feed = _FakeFeed()
    fanout = RealtimeFanout(feed=feed, bus=LocalEventBus())

    await fanout.start()
    await fanout.start()
    assert fanout.is_running
    assert feed.starts == 1

    await fanout.stop()
    await fanout.stop()
    assert not fanout.is_running
    assert feed.stops == 1
