"""Client configuration for pymonza."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pymonza._constants import CARS_TABLE, DEFAULT_SCHEMA, ORDERED_CARS_TABLE
from pymonza.exceptions import MonzaConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class MonzaConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Project URL of the hosted backend (e.g. ``"https://abc.supabase.co"``).
        REST and Realtime endpoints are derived from it.
    api_key : str
        Public (anon) API key sent as the ``apikey`` header.
    access_token : str or None
        Bearer token of the signed-in user. Falls back to *api_key*.
    schema : str
        Database schema holding the inventory tables.
    cars_table : str
        Table (or view) with one row per car.
    ordered_cars_table : str
        Table with pending arrivals.
    request_timeout : float
        Total timeout in seconds for a single REST request.
    realtime_enabled : bool
        Open the shared change-feed subscription when the client starts.
    realtime_url : str or None
        Explicit websocket URL. Derived from *base_url* when ``None``.
    realtime_heartbeat : float
        Seconds between channel heartbeats.
    realtime_reconnect : bool
        Reconnect with exponential backoff after the subscription drops.
    realtime_backoff_initial : float
        First reconnect delay in seconds.
    realtime_backoff_max : float
        Upper bound for the reconnect delay in seconds.
    """

    base_url: str
    api_key: str
    access_token: str | None = None
    schema: str = DEFAULT_SCHEMA
    cars_table: str = CARS_TABLE
    ordered_cars_table: str = ORDERED_CARS_TABLE
    request_timeout: float = 30.0
    realtime_enabled: bool = True
    realtime_url: str | None = None
    realtime_heartbeat: float = 25.0
    realtime_reconnect: bool = True
    realtime_backoff_initial: float = 1.0
    realtime_backoff_max: float = 30.0

    @property
    def rest_base_url(self) -> str:
        return self.base_url.rstrip("/")

    @property
    def bearer_token(self) -> str:
        return self.access_token or self.api_key

    @classmethod
    def from_env(cls, **overrides: Any) -> MonzaConfig:
        """Create configuration from environment variables.

        Reads ``MONZA_BASE_URL``, ``MONZA_API_KEY`` and optional ``MONZA_*``
        variables. Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        MonzaConfig
            Populated configuration.

        Raises
        ------
        MonzaConfigError
            If the base URL or API key is missing, or a numeric variable
            does not parse.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "MONZA_BASE_URL": "base_url",
            "MONZA_API_KEY": "api_key",
            "MONZA_ACCESS_TOKEN": "access_token",
            "MONZA_SCHEMA": "schema",
            "MONZA_CARS_TABLE": "cars_table",
            "MONZA_ORDERED_CARS_TABLE": "ordered_cars_table",
            "MONZA_REALTIME_URL": "realtime_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        _ENV_FLOAT_MAP = {
            "MONZA_REQUEST_TIMEOUT": "request_timeout",
            "MONZA_REALTIME_HEARTBEAT": "realtime_heartbeat",
            "MONZA_REALTIME_BACKOFF_INITIAL": "realtime_backoff_initial",
            "MONZA_REALTIME_BACKOFF_MAX": "realtime_backoff_max",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise MonzaConfigError(f"{env_key} must be a number, got {val!r}") from exc

        if "realtime_enabled" not in overrides:
            config_kwargs["realtime_enabled"] = _env_bool(env.get("MONZA_REALTIME_ENABLED"), True)
        if "realtime_reconnect" not in overrides:
            config_kwargs["realtime_reconnect"] = _env_bool(env.get("MONZA_REALTIME_RECONNECT"), True)

        config_kwargs.update(overrides)

        for required in ("base_url", "api_key"):
            if not config_kwargs.get(required):
                raise MonzaConfigError(f"Missing required setting {required!r} (MONZA_{required.upper()})")

        return cls(**config_kwargs)
