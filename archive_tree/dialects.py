"""
Archive Tree — storage-adapter boundary.

Everything that depends on the backing engine lives here: turning the
configured UTC offset into SQL, extracting calendar parts from the date
column in that offset, and coercing whatever the driver hands back for a
GROUP BY key into a plain ``int``.

Backends
--------
``postgresql``  ``EXTRACT(part FROM timezone(INTERVAL, col))``
``sqlite``      ``CAST(STRFTIME(fmt, datetime(col, '+N minutes')) AS INTEGER)``
``mysql``       ``EXTRACT(part FROM CONVERT_TZ(col, '+00:00', '+HH:MM'))``
anything else  plain ``EXTRACT(part FROM col)`` — the offset is ignored.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import ColumnElement, extract, func, literal_column

MAX_OFFSET = timedelta(hours=14)
DATE_PARTS = ("year", "month")

_OFFSET_RE = re.compile(r"^(?P<sign>[+-])?(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$")


def parse_utc_offset(value: str) -> timedelta:
    """Parse ``"+05:30"``, ``"-3"``, ``"+0100"``, ``"Z"`` or ``"UTC"`` into a timedelta.

    Positive offsets are east of Greenwich (ISO 8601), never POSIX-style.
    """
    raw = (value or "").strip()
    if raw.upper() in ("Z", "UTC"):
        return timedelta(0)

    m = _OFFSET_RE.match(raw)
    if not m:
        raise ValueError(f"Invalid UTC offset {value!r} (expected e.g. '+05:30' or '-3')")

    hours = int(m.group("hours"))
    minutes = int(m.group("minutes") or 0)
    if minutes >= 60:
        raise ValueError(f"Invalid UTC offset {value!r}: minutes must be < 60")

    offset = timedelta(hours=hours, minutes=minutes)
    return check_utc_offset(-offset if m.group("sign") == "-" else offset)


def check_utc_offset(offset: timedelta) -> timedelta:
    """Reject offsets beyond ±14:00 or not a whole number of minutes."""
    if abs(offset) > MAX_OFFSET:
        raise ValueError(f"Invalid UTC offset {offset}: outside ±14:00")
    if offset % timedelta(minutes=1):
        raise ValueError(f"Invalid UTC offset {offset}: must be whole minutes")
    return offset


def format_utc_offset(offset: timedelta) -> str:
    """Render a timedelta as ``"+HH:MM"`` / ``"-HH:MM"``."""
    total = int(offset.total_seconds()) // 60
    sign = "-" if total < 0 else "+"
    hours, minutes = divmod(abs(total), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def _sql_string(value: str):
    # Inlined rather than bound: the same expression appears in SELECT and
    # GROUP BY, and PostgreSQL only matches them when the SQL text is equal.
    return literal_column(f"'{value}'")


def localize(column: Any, backend: str, offset: timedelta) -> Any:
    """Shift ``column`` into the configured offset for ``backend``."""
    if backend == "postgresql":
        # Always applied: timestamptz columns report calendar values in the
        # session TimeZone otherwise. Naive timestamps are stored as UTC and
        # must become timestamptz first, or the shift runs backwards.
        if not getattr(column.type, "timezone", False):
            column = func.timezone(_sql_string("UTC"), column)
        return func.timezone(literal_column(f"INTERVAL '{format_utc_offset(offset)}'"), column)

    if not offset:
        return column

    if backend == "sqlite":
        minutes = int(offset.total_seconds()) // 60
        return func.datetime(column, _sql_string(f"{minutes:+d} minutes"))
    if backend in ("mysql", "mariadb"):
        return func.convert_tz(column, _sql_string("+00:00"), _sql_string(format_utc_offset(offset)))
    return column


def date_part(column: Any, part: str, backend: str, offset: timedelta) -> ColumnElement:
    """``EXTRACT(part FROM column)`` with the configured offset applied."""
    if part not in DATE_PARTS:
        raise ValueError(f"Unsupported date part {part!r}")
    return extract(part, localize(column, backend, offset))


def decode_group_key(value: Any) -> int:
    """Coerce a GROUP BY key (int, Decimal, float or numeric string) to int."""
    if isinstance(value, int):
        return value
    try:
        return int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Non-numeric date part returned by backend: {value!r}") from e


def decode_counts(rows) -> list[tuple[int, int]]:
    """Turn ``(key, count)`` rows into integer pairs sorted by key."""
    return sorted((decode_group_key(key), int(count)) for key, count in rows)
