"""High-level async client for the Monza dealership inventory backend."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pymonza._api import cars as _cars_api
from pymonza._api import moves as _moves_api
from pymonza._api import ordered_cars as _ordered_api
from pymonza._transport import RestTransport, Transport
from pymonza.config import MonzaConfig
from pymonza.exceptions import MonzaError, MonzaRealtimeError
from pymonza.floor_view import FloorCarsView, UpdateCallback
from pymonza.floors import Floor
from pymonza.models.car import Car
from pymonza.models.ordered_car import OrderedCar
from pymonza.realtime.bus import ChangeListener, LocalEventBus, Unsubscribe
from pymonza.realtime.fanout import RealtimeFanout
from pymonza.realtime.feed import ChangeFeed, RealtimeChangeFeed

_logger = logging.getLogger(__name__)


class MonzaClient:
    """Async client for the car inventory.

    Entering the client opens the HTTP session and the single shared
    realtime subscription; every floor view created through
    :meth:`watch_floor` listens on the same local event bus.

    Usage::

        async with MonzaClient(config) as client:
            cars = await client.get_cars_by_floor(Floor.SHOWROOM_1)
            await client.move_car(cars[0].id, Floor.GARAGE_INVENTORY,
                                  current_floor=cars[0].current_floor)
    """

    def __init__(
        self,
        config: MonzaConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        feed: ChangeFeed | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._injected_transport = transport
        self._injected_feed = feed
        self._transport: Transport | None = None
        self._bus: LocalEventBus | None = None
        self._fanout: RealtimeFanout | None = None
        self._views: set[FloorCarsView] = set()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MonzaClient:
        needs_realtime_session = self._config.realtime_enabled and self._injected_feed is None
        if self._http_session is None and (self._injected_transport is None or needs_realtime_session):
            self._http_session = aiohttp.ClientSession()

        if self._injected_transport is not None:
            self._transport = self._injected_transport
        else:
            assert self._http_session is not None
            self._transport = RestTransport(self._config, self._http_session)

        self._bus = LocalEventBus()
        if self._config.realtime_enabled:
            feed = self._injected_feed
            if feed is None:
                assert self._http_session is not None
                feed = RealtimeChangeFeed(self._config, self._http_session)
            self._fanout = RealtimeFanout(feed=feed, bus=self._bus)
            try:
                await self._fanout.start()
            except (MonzaRealtimeError, aiohttp.ClientError) as exc:
                _logger.warning("Realtime updates unavailable: %s", exc)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        for view in list(self._views):
            await view.close()
        self._views.clear()
        if self._fanout is not None:
            await self._fanout.stop()
            self._fanout = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None
        self._bus = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise MonzaError("Client not initialized; use 'async with MonzaClient(...)'")
        return self._transport

    def _require_bus(self) -> LocalEventBus:
        if self._bus is None:
            raise MonzaError("Client not initialized; use 'async with MonzaClient(...)'")
        return self._bus

    @property
    def config(self) -> MonzaConfig:
        return self._config

    @property
    def bus(self) -> LocalEventBus:
        """Event bus carrying :class:`~pymonza.models.change.CarChange` events."""
        return self._require_bus()

    @property
    def realtime_running(self) -> bool:
        return self._fanout is not None and self._fanout.is_running

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_cars_by_floor(self, floor: Floor | str) -> list[Car]:
        return await _cars_api.fetch_cars_by_floor(self._config, self._require_transport(), floor)

    async def get_car(self, car_id: str) -> Car:
        return await _cars_api.fetch_car(self._config, self._require_transport(), car_id)

    async def get_floor_counts(self) -> dict[Floor, int]:
        return await _cars_api.fetch_floor_counts(self._config, self._require_transport())

    async def get_ordered_cars(self, *, status: str | None = None) -> list[OrderedCar]:
        return await _ordered_api.fetch_ordered_cars(self._config, self._require_transport(), status=status)

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    async def move_car(
        self,
        car_id: str,
        destination: Floor | str,
        *,
        current_floor: Floor | str | None = None,
        notes: str | None = None,
    ) -> Car:
        """Move a car to *destination* and return the backend's updated record.

        Open floor views refresh when the change notification arrives; this
        call does not wait for it.
        """
        return await _moves_api.move_car(
            self._config,
            self._require_transport(),
            car_id,
            destination,
            current_floor=current_floor,
            notes=notes,
        )

    async def receive_ordered_car(self, ordered_car_id: str, destination: Floor | str) -> Car:
        return await _moves_api.receive_ordered_car(
            self._config,
            self._require_transport(),
            ordered_car_id,
            destination,
        )

    # ------------------------------------------------------------------
    # Live views
    # ------------------------------------------------------------------

    async def watch_floor(
        self,
        floor: Floor | str,
        *,
        on_update: UpdateCallback | None = None,
    ) -> FloorCarsView:
        """Open a started :class:`FloorCarsView` for *floor*.

        The view is closed with the client, or earlier via ``view.close()``.
        """
        view = FloorCarsView(
            floor,
            self.get_cars_by_floor,
            bus=self._require_bus(),
            on_update=on_update,
            on_close=self._views.discard,
        )
        self._views.add(view)
        await view.start()
        return view

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        """Receive every car change seen by the shared realtime subscription."""
        return self._require_bus().subscribe(listener)
