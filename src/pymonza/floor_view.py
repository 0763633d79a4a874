"""Per-floor car list that stays current with backend changes.

A :class:`FloorCarsView` holds the cars of one floor. It fetches on start,
when its floor changes, on an explicit :meth:`FloorCarsView.refetch`, and
whenever a :class:`~pymonza.models.change.CarChange` on the event bus
affects its floor or a car it currently shows. There is no polling.

Every fetch is tagged with a generation number. Only the response of the
latest fetch is applied, so a slow response for a floor the view has
already left is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

from pymonza.floors import Floor
from pymonza.models.car import Car
from pymonza.models.change import CarChange
from pymonza.realtime.bus import EventBus, Unsubscribe

_logger = logging.getLogger(__name__)

FloorFetcher = Callable[[Floor], Awaitable[list[Car]]]
UpdateCallback = Callable[["FloorCarsView"], None]
CloseCallback = Callable[["FloorCarsView"], None]


class FetchState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class FloorCarsView:
    """Cached list of the cars on one floor.

    Parameters
    ----------
    floor : Floor or str
        Floor to watch.
    fetch : callable
        ``async fetch(floor) -> list[Car]`` (usually
        :meth:`MonzaClient.get_cars_by_floor`).
    bus : EventBus or None
        Bus carrying :class:`CarChange` events. Without one the view only
        refreshes on demand.
    on_update : callable or None
        Called with the view after every state change.
    on_close : callable or None
        Called once with the view when it is closed.
    """

    def __init__(
        self,
        floor: Floor | str,
        fetch: FloorFetcher,
        *,
        bus: EventBus | None = None,
        on_update: UpdateCallback | None = None,
        on_close: CloseCallback | None = None,
    ) -> None:
        self._floor = Floor.parse(floor)
        self._fetch = fetch
        self._bus = bus
        self._on_update = on_update
        self._on_close = on_close
        self._cars: list[Car] = []
        self._state = FetchState.IDLE
        self._error: str | None = None
        self._generation = 0
        self._unsubscribe: Unsubscribe | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def floor(self) -> Floor:
        return self._floor

    @property
    def cars(self) -> list[Car]:
        return list(self._cars)

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state is FetchState.LOADING

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> FloorCarsView:
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def start(self) -> None:
        """Subscribe to change events and load the floor."""
        if self._closed:
            return
        if self._bus is not None and self._unsubscribe is None:
            self._unsubscribe = self._bus.subscribe(self._on_change)
        await self.refetch()

    async def set_floor(self, floor: Floor | str) -> None:
        """Switch to another floor. Does nothing when *floor* is unchanged."""
        target = Floor.parse(floor)
        if target is self._floor:
            return
        self._floor = target
        # Never show the previous floor's cars under the new floor.
        self._cars = []
        await self.refetch()

    async def refetch(self) -> None:
        """Reload the current floor. Failures end in ``FetchState.ERROR``."""
        if self._closed:
            return
        self._generation += 1
        generation = self._generation
        floor = self._floor
        self._set_state(FetchState.LOADING, error=None)

        try:
            cars = await self._fetch(floor)
        except Exception as exc:
            if not self._is_current(generation):
                return
            _logger.warning("Fetching cars on %s failed: %s", floor.value, exc)
            self._cars = []
            self._set_state(FetchState.ERROR, error=str(exc) or type(exc).__name__)
            return

        if not self._is_current(generation):
            _logger.debug("Discarding stale response for %s (generation %d)", floor.value, generation)
            return
        self._cars = list(cars)
        self._set_state(FetchState.READY, error=None)

    async def close(self) -> None:
        """Stop listening and drop any in-flight or scheduled refresh."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        if self._on_close is not None:
            self._on_close(self)

    def _holds(self, car_id: str | None) -> bool:
        # Realtime may send only the primary key as old_record, so a car
        # leaving this floor is recognised by id.
        return car_id is not None and any(car.id == car_id for car in self._cars)

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _set_state(self, state: FetchState, *, error: str | None) -> None:
        self._state = state
        self._error = error
        if self._on_update is None:
            return
        try:
            self._on_update(self)
        except Exception:
            _logger.exception("on_update callback failed for %s view", self._floor.value)

    def _on_change(self, event: CarChange) -> None:
        if self._closed:
            return
        if not event.affects(self._floor) and not self._holds(event.car_id):
            return
        _logger.debug("Refreshing %s after %s of car %s", self._floor.value, event.kind.value, event.car_id)
        task = asyncio.get_running_loop().create_task(self.refetch())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
