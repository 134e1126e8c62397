"""Helpers shared by the dict <-> dataclass conversions."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any


def extra_fields(data: Mapping[str, Any], known: Iterable[str]) -> dict[str, Any]:
    """Return the entries of `data` whose keys are not in `known`.

    Unknown keys are carried through load/save untouched so newer
    template fields survive older tooling.
    """
    known_set = set(known)
    return {k: v for k, v in data.items() if k not in known_set}


def str_tuple(value: Any) -> tuple[str, ...]:
    """Coerce a list-like value to a tuple of strings, else empty."""
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return ()


def str_or_none(value: Any) -> str | None:
    """Return `value` as a string, preserving None."""
    return None if value is None else str(value)


def isoformat(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision."""
    return (
        moment.astimezone(UTC)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when unparseable."""
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
