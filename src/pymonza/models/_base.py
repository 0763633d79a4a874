"""Base model for backend records.

Every record model inherits from :class:`MonzaBaseModel` which provides:

* A ``model_validator(mode="before")`` that drops blank values (``None``,
  ``""``, whitespace-only strings) so the field default is used.
* A ``raw`` dict that captures the original row as returned by the backend.
* Lenient coercion helpers shared by the concrete models.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


def coerce_str(value: Any) -> str | None:
    """Stringify ids and codes that the backend may send as numbers."""
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    text = str(value).strip()
    return text or None


def coerce_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def coerce_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "yes", "y", "t"}:
        return True
    if normalized in {"0", "false", "no", "n", "f"}:
        return False
    return None


class MonzaBaseModel(BaseModel):
    """Base for backend record models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original row as returned by the backend."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_blank_values(cls, values: Any) -> Any:
        """Drop blank values and stash the raw row."""
        if not isinstance(values, dict):
            return values
        cleaned = MonzaBaseModel._clean_dict(values)
        # Keep an explicitly passed raw= (e.g. model_copy or tests).
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
