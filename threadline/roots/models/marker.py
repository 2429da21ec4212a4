"""Pagination cursor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class Marker(BaseModel):
    """Resumption token appended to a truncated page.

    ``timestamp`` is the index position of the last bump read before the
    page filled up. Pass the marker back as ``lt`` (reverse reads) or
    ``gt`` (forward reads) to continue.
    """

    is_marker: Literal[True] = True
    timestamp: float | None = None

    model_config = ConfigDict(frozen=True)


def marker_timestamp(value: Any) -> float | None:
    """Extract a timestamp bound from a raw number or a Marker.

    Args:
        value: Number, Marker, a serialised Marker mapping, or None

    Returns:
        Timestamp bound, or None if the value carries no bound

    Raises:
        ValueError: If the value is neither a number nor a Marker
    """
    if value is None:
        return None
    if isinstance(value, Marker):
        return value.timestamp
    if isinstance(value, Mapping) and value.get("is_marker") is True:
        # Marker that came back through a serialisation boundary
        return Marker.model_validate(value).timestamp
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Bound must be a timestamp or a Marker, got {type(value).__name__}")
    return float(value)
