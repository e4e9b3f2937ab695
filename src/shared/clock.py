"""Wall clock used by the order and coupon rules.

Handlers call ``now()``; tests pin time with ``set_clock()``.
"""

from datetime import UTC, datetime


def _system_now() -> datetime:
    return datetime.now(UTC)


_current_clock = _system_now


def now() -> datetime:
    return _current_clock()


def set_clock(clock) -> None:
    global _current_clock
    _current_clock = clock


def reset_clock() -> None:
    global _current_clock
    _current_clock = _system_now


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (as some SQL backends return them) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
