from __future__ import annotations

import json
from typing import Any

import aiohttp
import pytest

from pymonza._transport import RestTransport
from pymonza.config import MonzaConfig
from pymonza.exceptions import MonzaApiError, MonzaRecordNotFoundError, MonzaTransportError


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None


class _FakeSession:
    def __init__(
        self,
        status: int = 200,
        body: Any = None,
        *,
        raw: str | None = None,
        exc: Exception | None = None,
    ) -> None:
        self.status = status
        self.text = raw if raw is not None else ("" if body is None else json.dumps(body))
        self.exc = exc
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return _FakeResponse(self.status, self.text)


def _transport(session: _FakeSession, **overrides: Any) -> RestTransport:
    config = MonzaConfig(base_url="https://abc.supabase.co/", api_key="anon", **overrides)
    return RestTransport(config, session)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_get_json_sends_auth_headers_and_params() -> None:
    session = _FakeSession(body=[{"id": "1"}])
    transport = _transport(session, access_token="jwt")

    result = await transport.get_json("/car_inventory", {"select": "*"})

    assert result == [{"id": "1"}]
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://abc.supabase.co/rest/v1/car_inventory"
    assert call["params"] == {"select": "*"}
    assert call["json"] is None
    assert call["headers"]["apikey"] == "anon"
    assert call["headers"]["authorization"] == "Bearer jwt"
    assert call["headers"]["accept"] == "application/json"
    assert "accept-profile" not in call["headers"]


@pytest.mark.asyncio
async def test_single_object_and_custom_schema_headers() -> None:
    session = _FakeSession(body={"id": "1"})
    transport = _transport(session, schema="dealer")

    await transport.get_json("/car_inventory", {"id": "eq.1"}, single=True)

    headers = session.calls[0]["headers"]
    assert headers["accept"] == "application/vnd.pgrst.object+json"
    assert headers["accept-profile"] == "dealer"


@pytest.mark.asyncio
async def test_post_json_sends_body() -> None:
    session = _FakeSession(body=[{"id": "1", "current_floor": "SCHEDULE"}])
    transport = _transport(session)

    result = await transport.post_json("/rpc/move_car", {"p_car_id": "1", "p_to": "SCHEDULE"})

    assert result == [{"id": "1", "current_floor": "SCHEDULE"}]
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"].endswith("/rest/v1/rpc/move_car")
    assert call["json"] == {"p_car_id": "1", "p_to": "SCHEDULE"}
    assert call["headers"]["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_empty_body_returns_none() -> None:
    transport = _transport(_FakeSession(status=204))
    assert await transport.post_json("/rpc/move_car", {}) is None


@pytest.mark.asyncio
async def test_structured_error_maps_to_api_error() -> None:
    session = _FakeSession(
        status=400,
        body={"code": "P0001", "message": "car is reserved", "details": "reserved by sales", "hint": None},
    )

    with pytest.raises(MonzaApiError) as excinfo:
        await _transport(session).post_json("/rpc/move_car", {"p_car_id": "1", "p_to": "SCHEDULE"})

    error = excinfo.value
    assert not isinstance(error, MonzaRecordNotFoundError)
    assert error.code == "P0001"
    assert error.status_code == 400
    assert error.details == "reserved by sales"
    assert error.endpoint == "/rpc/move_car"


@pytest.mark.asyncio
async def test_no_rows_for_single_object_is_not_found() -> None:
    session = _FakeSession(
        status=406,
        body={"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"},
    )

    with pytest.raises(MonzaRecordNotFoundError):
        await _transport(session).get_json("/car_inventory", {"id": "eq.x"}, single=True)


@pytest.mark.asyncio
async def test_unstructured_error_is_transport_error() -> None:
    session = _FakeSession(status=502, raw="<html>Bad gateway</html>")

    with pytest.raises(MonzaTransportError) as excinfo:
        await _transport(session).get_json("/car_inventory")

    assert excinfo.value.status_code == 502


@pytest.mark.asyncio
async def test_invalid_json_is_transport_error() -> None:
    with pytest.raises(MonzaTransportError, match="Invalid JSON"):
        await _transport(_FakeSession(raw="{not json")).get_json("/car_inventory")


@pytest.mark.asyncio
async def test_network_failure_is_transport_error() -> None:
    session = _FakeSession(exc=aiohttp.ClientConnectionError("connection refused"))

    with pytest.raises(MonzaTransportError, match="connection refused"):
        await _transport(session).get_json("/car_inventory")


@pytest.mark.asyncio
async def test_timeout_is_transport_error() -> None:
    session = _FakeSession(exc=TimeoutError())

    with pytest.raises(MonzaTransportError, match="timed out"):
        await _transport(session).get_json("/car_inventory")
