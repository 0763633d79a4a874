"""Custom exception hierarchy for pymonza."""

from __future__ import annotations


class MonzaError(Exception):
    """Base exception for all pymonza errors."""


class MonzaConfigError(MonzaError):
    """Invalid or missing configuration."""


class MonzaTransportError(MonzaError):
    """HTTP-level failure (network, timeout, unstructured error body, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class MonzaApiError(MonzaError):
    """Backend returned a structured error or a record that does not validate."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
        status_code: int | None = None,
        details: str | None = None,
        hint: str | None = None,
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        self.status_code = status_code
        self.details = details
        self.hint = hint
        super().__init__(message)


class MonzaRecordNotFoundError(MonzaApiError):
    """A single-record lookup matched no row (PostgREST ``PGRST116``)."""


class MonzaInvalidDestinationError(MonzaError, ValueError):
    """Requested destination floor is not allowed for this move.

    Raised before any request is sent, so the car is guaranteed to still be
    on its last known floor.
    """

    def __init__(self, message: str, *, destination: str = "", allowed: tuple[str, ...] = ()) -> None:
        self.destination = destination
        self.allowed = allowed
        super().__init__(message)


class MonzaRealtimeError(MonzaError):
    """Realtime channel failure (join rejected, channel closed, socket error)."""
