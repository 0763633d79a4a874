"""Single shared change-feed subscription republished on the local bus.

The client owns one :class:`RealtimeFanout`. It opens one subscription to the
car table, turns every notification into a :class:`CarChange` and publishes
it on the event bus, where each floor view decides for itself whether the
change concerns it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from pymonza.floors import Floor
from pymonza.models.change import CarChange, ChangeKind
from pymonza.realtime.bus import EventBus
from pymonza.realtime.feed import ChangeFeed

_logger = logging.getLogger(__name__)


def _floor_of(row: Any) -> Floor | None:
    if not isinstance(row, dict):
        return None
    value = row.get("current_floor")
    if value is None or value == "":
        return None
    try:
        return Floor.parse(value)
    except ValueError:
        _logger.debug("Change row has unknown floor %r", value)
        return None


def build_car_change(data: dict[str, Any]) -> CarChange:
    """Translate one change-feed notification into a :class:`CarChange`.

    Accepts the Realtime ``postgres_changes`` shape (``type``, ``record``,
    ``old_record``, ``table``, ``commit_timestamp``) as well as the generic
    ``{"eventType", "new", "old"}`` shape.

    Raises
    ------
    ValueError
        If the notification has no recognisable change kind.
    """
    kind_value = data.get("type", data.get("eventType"))
    if kind_value is None:
        raise ValueError("change notification without type")
    kind = ChangeKind.parse(kind_value)

    record = data.get("record", data.get("new")) or {}
    old_record = data.get("old_record", data.get("old")) or {}
    if not isinstance(record, dict) or not isinstance(old_record, dict):
        raise ValueError("change notification records must be objects")

    new_floor = _floor_of(record)
    old_floor = _floor_of(old_record)
    if kind is ChangeKind.DELETE:
        affected, previous = old_floor, None
    else:
        affected = new_floor
        previous = old_floor if old_floor is not None and old_floor is not new_floor else None

    commit_timestamp = data.get("commit_timestamp")
    return CarChange(
        kind=kind,
        affected_floor=affected,
        previous_floor=previous,
        record=record,
        old_record=old_record,
        table=str(data.get("table") or ""),
        commit_timestamp=commit_timestamp if isinstance(commit_timestamp, (str, datetime)) else None,
    )


class RealtimeFanout:
    """Owns the shared change-feed subscription for one client."""

    def __init__(self, *, feed: ChangeFeed, bus: EventBus) -> None:
        self._feed = feed
        self._bus = bus
        self._started = False

    @property
    def is_running(self) -> bool:
        return self._started and self._feed.is_running

    async def start(self) -> None:
        """Open the subscription. Calling it again while started is a no-op."""
        if self._started:
            return
        await self._feed.start(self._on_change)
        self._started = True
        _logger.debug("Realtime fan-out started")

    async def stop(self) -> None:
        """Close the subscription. Safe to call when not started."""
        if not self._started:
            return
        self._started = False
        await self._feed.stop()
        _logger.debug("Realtime fan-out stopped")

    def _on_change(self, data: dict[str, Any]) -> None:
        try:
            event = build_car_change(data)
        except (ValueError, ValidationError) as exc:
            _logger.warning("Dropping malformed change notification: %s", exc)
            return
        _logger.debug(
            "Car change %s id=%s floor=%s previous=%s",
            event.kind.value,
            event.car_id,
            event.affected_floor,
            event.previous_floor,
        )
        self._bus.publish(event)
