"""Shared helpers for pymonza endpoint modules.

This module centralizes the most repeated patterns:
- building table and RPC paths
- PostgREST filter operators
- validating rows into record models with a uniform error

It is internal to pymonza and may change at any time.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from pydantic import ValidationError

from pymonza.exceptions import MonzaApiError
from pymonza.models._base import MonzaBaseModel

_ModelT = TypeVar("_ModelT", bound=MonzaBaseModel)


def table_path(table: str) -> str:
    return f"/{table}"


def rpc_path(function: str) -> str:
    return f"/rpc/{function}"


def eq(value: Any) -> str:
    """PostgREST equality filter value."""
    return f"eq.{value}"


def validate_record(model: type[_ModelT], row: Any, *, endpoint: str) -> _ModelT:
    """Validate one row, mapping failures to ``MonzaApiError("invalid_record")``."""
    if not isinstance(row, dict):
        raise MonzaApiError(
            f"{endpoint} returned {type(row).__name__}, expected an object",
            code="invalid_record",
            endpoint=endpoint,
        )
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        raise MonzaApiError(
            f"{endpoint} returned an invalid {model.__name__}: {exc.error_count()} error(s)",
            code="invalid_record",
            endpoint=endpoint,
            details=str(exc),
        ) from exc


def validate_records(model: type[_ModelT], rows: Any, *, endpoint: str) -> list[_ModelT]:
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise MonzaApiError(
            f"{endpoint} returned {type(rows).__name__}, expected a list",
            code="invalid_record",
            endpoint=endpoint,
        )
    return [validate_record(model, row, endpoint=endpoint) for row in rows]


def parse_single_record(model: type[_ModelT], payload: Any, *, endpoint: str) -> _ModelT:
    """Parse an RPC/single-object response into one record.

    RPCs returning ``SETOF`` answer with a list; a one-element list is
    unwrapped. An empty body or list means the backend did not hand back the
    record, which is reported as ``code="empty_response"``.
    """
    if isinstance(payload, list):
        if len(payload) > 1:
            raise MonzaApiError(
                f"{endpoint} returned {len(payload)} records, expected one",
                code="invalid_record",
                endpoint=endpoint,
            )
        payload = payload[0] if payload else None
    if payload is None or payload == {}:
        raise MonzaApiError(
            f"{endpoint} returned no record",
            code="empty_response",
            endpoint=endpoint,
        )
    return validate_record(model, payload, endpoint=endpoint)


def column_values(rows: Iterable[Any], column: str) -> list[Any]:
    return [row.get(column) for row in rows if isinstance(row, dict)]
