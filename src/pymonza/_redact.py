"""Helpers for safe debug logging.

Requests carry the project API key and the user's bearer token, and car
records carry client contact details. :func:`redact_for_log` masks those
before they reach DEBUG logs.

Keys are compared after lowercasing and dropping ``-``/``_``, so
``apikey``, ``x-api-key`` and ``API_KEY`` are treated alike. Any key ending in
one of :data:`_SENSITIVE_SUFFIXES` is masked as well (``refresh_token``,
``client_phone``, ``customer_email``, ...).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

REDACTED = "<redacted>"

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "apikey",
        "xapikey",
        "authorization",
        "cookie",
        "setcookie",
        "clientlicenseplate",
    }
)
_SENSITIVE_SUFFIXES: tuple[str, ...] = ("token", "password", "phone", "email", "secret")

_MAX_DEPTH = 20


def _normalize_key(key: Any) -> str:
    return str(key).lower().replace("-", "").replace("_", "")


def is_sensitive_key(key: Any) -> bool:
    normalized = _normalize_key(key)
    return normalized in _SENSITIVE_KEYS or normalized.endswith(_SENSITIVE_SUFFIXES)


def _truncate(text: str, max_string: int) -> str:
    if len(text) <= max_string:
        return text
    return f"{text[:max_string]}…<truncated {len(text) - max_string} chars>"


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of *value* that is safe to log.

    Mappings and lists are copied recursively, sensitive keys are replaced
    with ``"<redacted>"`` and long strings are truncated. Objects that are
    not JSON-like are logged by ``repr``.
    """

    def _walk(node: Any, depth: int) -> Any:
        if depth > _MAX_DEPTH:
            return "<max-depth>"
        if node is None or isinstance(node, (bool, int, float)):
            return node
        if isinstance(node, str):
            return _truncate(node, max_string)
        if isinstance(node, (bytes, bytearray)):
            return f"<bytes:{len(node)}b>"
        if isinstance(node, Mapping):
            return {
                str(key): REDACTED if is_sensitive_key(key) else _walk(item, depth + 1)
                for key, item in node.items()
            }
        if isinstance(node, (list, tuple, set, frozenset)):
            return [_walk(item, depth + 1) for item in node]
        return _truncate(repr(node), max_string)

    return _walk(value, 0)
