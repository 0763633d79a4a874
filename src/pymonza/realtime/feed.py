"""Websocket change feed for the hosted Realtime service.

Speaks the Phoenix channel protocol used by Supabase Realtime:

1. connect to ``/realtime/v1/websocket?apikey=...&vsn=1.0.0``
2. ``phx_join`` topic ``realtime:<schema>:<table>`` with a
   ``postgres_changes`` config for all events
3. send a ``heartbeat`` on topic ``phoenix`` every few seconds
4. forward the ``data`` of each ``postgres_changes`` message

The connection runs in a background task. When it drops the feed reconnects
with exponential backoff unless reconnection is disabled.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Callable
from typing import Any, Protocol
from urllib.parse import urlencode

import aiohttp

from pymonza._constants import (
    PHX_CLOSE,
    PHX_ERROR,
    PHX_HEARTBEAT,
    PHX_JOIN,
    PHX_REPLY,
    PHX_TOPIC,
    POSTGRES_CHANGES,
    REALTIME_PATH,
    REALTIME_VSN,
)
from pymonza.config import MonzaConfig
from pymonza.exceptions import MonzaRealtimeError

_logger = logging.getLogger(__name__)

ChangeCallback = Callable[[dict[str, Any]], None]


class ChangeFeed(Protocol):
    @property
    def is_running(self) -> bool:
        ...

    async def start(self, on_change: ChangeCallback) -> None:
        ...

    async def stop(self) -> None:
        ...


def build_websocket_url(config: MonzaConfig) -> str:
    if config.realtime_url:
        base = config.realtime_url
    else:
        root = config.rest_base_url
        if root.startswith("https://"):
            root = "wss://" + root[len("https://") :]
        elif root.startswith("http://"):
            root = "ws://" + root[len("http://") :]
        base = f"{root}{REALTIME_PATH}"
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urlencode({'apikey': config.api_key, 'vsn': REALTIME_VSN})}"


def backoff_delay(attempt: int, initial: float, maximum: float) -> float:
    """Delay before reconnect number *attempt* (0-based)."""
    return min(maximum, initial * (2**attempt))


class RealtimeChangeFeed:
    """Change-feed subscription to one table over a websocket."""

    def __init__(
        self,
        config: MonzaConfig,
        http_session: aiohttp.ClientSession,
        *,
        table: str | None = None,
    ) -> None:
        self._config = config
        self._http = http_session
        self._table = table or config.cars_table
        self._topic = f"realtime:{config.schema}:{self._table}"
        self._on_change: ChangeCallback | None = None
        self._task: asyncio.Task[None] | None = None
        self._joined = asyncio.Event()
        self._ref = 0
        self._join_ref: str | None = None
        self._attempt = 0

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_joined(self) -> bool:
        return self._joined.is_set()

    async def start(self, on_change: ChangeCallback) -> None:
        if self.is_running:
            return
        self._on_change = on_change
        self._attempt = 0
        self._task = asyncio.create_task(self._run(), name=f"pymonza-realtime-{self._table}")

    async def stop(self) -> None:
        task, self._task = self._task, None
        self._joined.clear()
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def wait_joined(self, timeout: float | None = None) -> bool:
        """Wait until the channel join is acknowledged. Returns ``False`` on timeout."""
        try:
            await asyncio.wait_for(self._joined.wait(), timeout)
        except TimeoutError:
            return False
        return True

    def _next_ref(self) -> str:
        self._ref += 1
        return str(self._ref)

    def build_join_message(self) -> dict[str, Any]:
        ref = self._next_ref()
        self._join_ref = ref
        return {
            "topic": self._topic,
            "event": PHX_JOIN,
            "payload": {
                "config": {
                    "broadcast": {"self": False},
                    "presence": {"key": ""},
                    "postgres_changes": [
                        {"event": "*", "schema": self._config.schema, "table": self._table},
                    ],
                },
                "access_token": self._config.bearer_token,
            },
            "ref": ref,
            "join_ref": ref,
        }

    def build_heartbeat_message(self) -> dict[str, Any]:
        return {"topic": PHX_TOPIC, "event": PHX_HEARTBEAT, "payload": {}, "ref": self._next_ref()}

    def handle_message(self, message: dict[str, Any]) -> None:
        """Process one decoded websocket frame.

        Raises
        ------
        MonzaRealtimeError
            If the join is rejected or the server closes/errors the channel.
        """
        topic = message.get("topic")
        event = message.get("event")
        payload = message.get("payload") or {}

        if topic != self._topic:
            # Heartbeat replies arrive on the "phoenix" topic.
            return

        if event == PHX_REPLY and message.get("ref") == self._join_ref:
            status = payload.get("status")
            if status == "ok":
                self._joined.set()
                self._attempt = 0
                _logger.info("Joined realtime channel %s", self._topic)
                return
            raise MonzaRealtimeError(f"Join of {self._topic} rejected: {payload.get('response')!r}")

        if event in (PHX_ERROR, PHX_CLOSE):
            self._joined.clear()
            raise MonzaRealtimeError(f"Realtime channel {self._topic} closed by server ({event})")

        if event == POSTGRES_CHANGES:
            data = payload.get("data")
            if not isinstance(data, dict):
                _logger.debug("Ignoring postgres_changes frame without data: %s", message)
                return
            if self._on_change is not None:
                self._on_change(data)

    async def _heartbeat(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        while True:
            await asyncio.sleep(self._config.realtime_heartbeat)
            await ws.send_json(self.build_heartbeat_message())

    async def _connect_once(self) -> None:
        url = build_websocket_url(self._config)
        _logger.debug("Connecting realtime websocket for %s", self._topic)
        async with self._http.ws_connect(url) as ws:
            await ws.send_json(self.build_join_message())
            heartbeat = asyncio.create_task(self._heartbeat(ws))
            try:
                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        try:
                            decoded = json.loads(msg.data)
                        except json.JSONDecodeError:
                            _logger.debug("Ignoring non-JSON realtime frame: %r", msg.data[:200])
                            continue
                        if isinstance(decoded, dict):
                            self.handle_message(decoded)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        raise MonzaRealtimeError(f"Realtime websocket error: {ws.exception()}")
            finally:
                heartbeat.cancel()
                # A heartbeat that already failed on a dead socket re-raises here.
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await heartbeat
                self._joined.clear()
        raise MonzaRealtimeError(f"Realtime websocket for {self._topic} closed")

    async def _run(self) -> None:
        while True:
            try:
                await self._connect_once()
            except (MonzaRealtimeError, aiohttp.ClientError, OSError) as exc:
                _logger.warning("Realtime subscription %s dropped: %s", self._topic, exc)
            if not self._config.realtime_reconnect:
                _logger.info("Realtime reconnect disabled; feed for %s stopped", self._topic)
                return
            delay = backoff_delay(
                self._attempt,
                self._config.realtime_backoff_initial,
                self._config.realtime_backoff_max,
            )
            self._attempt += 1
            _logger.debug("Reconnecting %s in %.1fs (attempt %d)", self._topic, delay, self._attempt)
            await asyncio.sleep(delay)
