"""HTTP transport for the hosted REST API (PostgREST dialect)."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pymonza._constants import NOT_FOUND_CODES, REST_PATH, USER_AGENT
from pymonza._redact import redact_for_log
from pymonza.config import MonzaConfig
from pymonza.exceptions import MonzaApiError, MonzaRecordNotFoundError, MonzaTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`RestTransport`) concrete.
    """

    async def get_json(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        *,
        single: bool = False,
    ) -> Any:
        ...

    async def post_json(self, path: str, body: Mapping[str, Any]) -> Any:
        ...


def _raise_for_error_body(endpoint: str, status: int, text: str) -> None:
    """Map an HTTP error response to the exception hierarchy.

    PostgREST answers errors with ``{"code", "message", "details", "hint"}``;
    anything else is treated as a transport failure.
    """
    try:
        body = json.loads(text) if text else None
    except json.JSONDecodeError:
        body = None

    if not isinstance(body, dict) or "message" not in body:
        raise MonzaTransportError(
            f"HTTP {status} from {endpoint}: {text[:200]}",
            status_code=status,
            endpoint=endpoint,
        )

    code = str(body.get("code") or "")
    message = str(body.get("message") or "")
    error_cls = MonzaRecordNotFoundError if code in NOT_FOUND_CODES else MonzaApiError
    raise error_cls(
        f"{endpoint} failed: code={code} message={message}",
        code=code,
        endpoint=endpoint,
        status_code=status,
        details=body.get("details"),
        hint=body.get("hint"),
    )


class RestTransport:
    """aiohttp transport that adds auth headers and decodes JSON responses."""

    def __init__(self, config: MonzaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self, *, single: bool = False, with_body: bool = False) -> dict[str, str]:
        headers: dict[str, str] = {
            "apikey": self._config.api_key,
            "authorization": f"Bearer {self._config.bearer_token}",
            "accept": "application/vnd.pgrst.object+json" if single else "application/json",
            "user-agent": USER_AGENT,
        }
        if self._config.schema != "public":
            headers["accept-profile"] = self._config.schema
            if with_body:
                headers["content-profile"] = self._config.schema
        if with_body:
            headers["content-type"] = "application/json"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
        single: bool = False,
    ) -> Any:
        url = f"{self._config.rest_base_url}{REST_PATH}{path}"
        headers = self._headers(single=single, with_body=body is not None)

        _logger.debug(
            "%s %s params=%s headers=%s body=%s",
            method,
            url,
            dict(params or {}),
            redact_for_log(headers),
            redact_for_log(body),
        )

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params else None,
                json=dict(body) if body is not None else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise MonzaTransportError(f"Request to {path} failed: {exc}", endpoint=path) from exc
        except TimeoutError as exc:
            raise MonzaTransportError(f"Request to {path} timed out", endpoint=path) from exc

        if status >= 400:
            _raise_for_error_body(path, status, text)

        if not text.strip():
            return None

        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MonzaTransportError(
                f"Invalid JSON from {path}: {text[:200]}",
                status_code=status,
                endpoint=path,
            ) from exc

        _logger.debug("Response %s status=%d body=%s", path, status, redact_for_log(decoded))
        return decoded

    async def get_json(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        *,
        single: bool = False,
    ) -> Any:
        """GET *path* (relative to the REST root) and return decoded JSON.

        With ``single=True`` the backend is asked for exactly one object and
        answers ``PGRST116`` when no row matches.
        """
        return await self._request("GET", path, params=params, single=single)

    async def post_json(self, path: str, body: Mapping[str, Any]) -> Any:
        """POST a JSON body to *path* and return decoded JSON."""
        return await self._request("POST", path, body=body)


