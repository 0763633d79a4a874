"""Realtime change propagation: websocket feed, fan-out and local bus."""

from pymonza.realtime.bus import EventBus, LocalEventBus
from pymonza.realtime.fanout import RealtimeFanout, build_car_change
from pymonza.realtime.feed import ChangeFeed, RealtimeChangeFeed

__all__ = [
    "ChangeFeed",
    "EventBus",
    "LocalEventBus",
    "RealtimeChangeFeed",
    "RealtimeFanout",
    "build_car_change",
]
