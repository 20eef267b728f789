"""Time helpers shared by models and services.

Timestamps are stored as naive UTC ISO-8601 strings with microsecond
precision, so every stored value is exactly 26 characters long and string
comparison orders them chronologically.
"""
from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_iso(value: datetime) -> str:
    return to_naive_utc(value).isoformat(timespec="microseconds")


def from_iso(value: str) -> datetime:
    return datetime.fromisoformat(value)


def now_iso() -> str:
    return to_iso(utcnow())
