"""
Archive Tree — year / month navigation over a date column.

``DateArchive`` wraps one archivable model (or a pre-filtered ``select()``
of it) and answers three questions about its date field:

* how many rows per year            → ``await archive.years()``
* how many rows per month of a year → ``await archive.months(2010)``
* which rows fall in a year/month   → ``archive.node(2010, 1)``

``await archive.tree()`` stitches them together into
``{year: {month: <Select>}}``.  Leaves are never executed here — callers
decide when (and with which extra filters) to run them.

Usage::

    async with async_session() as session:
        archive = DateArchive(session, Post)
        await archive.years()                      # {2009: 8, 2010: 30}
        await archive.months(2010, "short")        # {"Jan": 3, "Feb": 1}
        rows = (await session.execute(archive.node(2010, 1))).scalars().all()

*Considerations*: ``tree()`` issues one GROUP BY per year plus the year
query itself.  Pass ``batched=True`` to build the same tree from a single
``GROUP BY year, month``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from archive_tree.dialects import (
    check_utc_offset,
    date_part,
    decode_counts,
    decode_group_key,
    parse_utc_offset,
)

if TYPE_CHECKING:
    from archive_tree.config import Settings

logger = logging.getLogger("archive_tree.archive")

# 1-indexed like a calendar; slot 0 is never looked up.
MONTH_NAMES = (
    "", "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
MONTH_ABBRS = ("",) + tuple(name[:3] for name in MONTH_NAMES[1:])


class MonthNames(str, Enum):
    """How month keys are rendered."""

    INT = "int"
    LONG = "long"
    SHORT = "short"

    @classmethod
    def coerce(cls, value: "MonthNames | str | None") -> "MonthNames":
        if value is None:
            return cls.INT
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"month_names must be one of {[m.value for m in cls]} or None, got {value!r}"
            ) from None

    def label(self, month: int) -> int | str:
        if self is MonthNames.LONG:
            return MONTH_NAMES[month]
        if self is MonthNames.SHORT:
            return MONTH_ABBRS[month]
        return month


@dataclass(frozen=True)
class ArchiveConfig:
    """Backend kind + offset the calendar parts are computed in."""

    backend: str = "sqlite"
    utc_offset: timedelta = field(default_factory=timedelta)

    def __post_init__(self) -> None:
        check_utc_offset(self.utc_offset)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ArchiveConfig":
        if settings is None:
            from archive_tree import config

            settings = config.settings
        return cls(
            backend=settings.archive_effective_backend,
            utc_offset=parse_utc_offset(settings.archive_utc_offset),
        )

    def current_year(self) -> int:
        return datetime.now(timezone(self.utc_offset)).year


class DateArchive:
    """Date-based archive queries for one model.

    Parameters
    ----------
    session : AsyncSession
        Owned by the caller; used only to execute the aggregations.
    model : mapped class
        Must expose the date attribute, normally declared once on the class
        as ``__archive_field__ = "published_at"``.
    date_field : str, optional
        Overrides ``model.__archive_field__``.
    query : Select, optional
        Pre-filtered ``select(model)`` to archive instead of the whole table.
    config : ArchiveConfig, optional
        Defaults to ``ArchiveConfig.from_settings()``.
    """

    def __init__(
        self,
        session: AsyncSession,
        model: Any,
        *,
        date_field: str | None = None,
        query: Select | None = None,
        config: ArchiveConfig | None = None,
    ) -> None:
        self.session = session
        self.model = model
        self.date_field = date_field or getattr(model, "__archive_field__", None)
        if not self.date_field:
            raise ValueError(
                f"{getattr(model, '__name__', model)!r} has no date field — "
                "set __archive_field__ or pass date_field="
            )
        self.column = getattr(model, self.date_field, None)
        if self.column is None:
            raise ValueError(f"{model.__name__} has no attribute {self.date_field!r}")
        self.query = query if query is not None else select(model)
        self.config = config or ArchiveConfig.from_settings()

    def __repr__(self) -> str:
        return f"<DateArchive {self.model.__name__}.{self.date_field} ({self.config.backend})>"

    # ── expressions ──────────────────────────────────────

    def _part(self, part: str):
        return date_part(self.column, part, self.config.backend, self.config.utc_offset)

    def _grouped(self, *keys) -> Select:
        """Reuse the base query's FROM/WHERE, selecting ``keys`` + COUNT(*)."""
        return (
            self.query.with_only_columns(*keys, func.count(), maintain_column_froms=True)
            .order_by(None)
            .group_by(*keys)
        )

    # ── node ─────────────────────────────────────────────

    def node(self, year: int | None = None, month: int | None = None) -> Select:
        """Rows whose date falls in ``year`` (and ``month`` when given).

        Returns an unexecuted, chainable ``Select``:
        ``archive.node(2010, 1).where(Post.id > 100)``.
        """
        if year is None:
            year = self.config.current_year()

        stmt = self.query.where(self.column.is_not(None)).where(self._part("year") == year)
        if month is not None:
            stmt = stmt.where(self._part("month") == month)
        return stmt

    # ── aggregations ─────────────────────────────────────

    async def years(self) -> dict[int, int]:
        """``{year: count}`` for every year holding at least one row, ascending."""
        year = self._part("year")
        stmt = self._grouped(year).where(self.column.is_not(None))

        logger.debug("Counting %s by year", self.model.__name__)
        result = await self.session.execute(stmt)
        return dict(decode_counts(result.all()))

    async def months(
        self,
        year: int | None = None,
        month_names: MonthNames | str | None = MonthNames.INT,
    ) -> dict[int | str, int]:
        """``{month: count}`` for one year, ordered by calendar month.

        Keys are ints (1–12) or month names per ``month_names``.
        """
        fmt = MonthNames.coerce(month_names)
        if year is None:
            year = self.config.current_year()

        month = self._part("month")
        stmt = self._grouped(month).where(self._part("year") == year)

        logger.debug("Counting %s by month for %s", self.model.__name__, year)
        result = await self.session.execute(stmt)
        return {fmt.label(m): count for m, count in decode_counts(result.all())}

    async def year_month_counts(self) -> dict[int, dict[int, int]]:
        """``{year: {month: count}}`` from a single GROUP BY, both levels ascending."""
        year, month = self._part("year"), self._part("month")
        stmt = self._grouped(year, month).where(self.column.is_not(None))

        logger.debug("Counting %s by year and month", self.model.__name__)
        result = await self.session.execute(stmt)

        pairs = sorted(
            (decode_group_key(y), decode_group_key(m), int(c)) for y, m, c in result.all()
        )
        counts: dict[int, dict[int, int]] = {}
        for y, m, c in pairs:
            counts.setdefault(y, {})[m] = c
        return counts

    # ── tree ─────────────────────────────────────────────

    async def tree(
        self,
        years: Iterable[int] | None = None,
        months: Iterable[int] | None = None,
        years_and_months: Mapping[int, Iterable[int]] | None = None,
        month_names: MonthNames | str | None = MonthNames.INT,
        *,
        batched: bool = False,
    ) -> dict[int, dict[int | str, Select]]:
        """Nested ``{year: {month: node}}`` archive.

        Options, most specific first:
          * ``years_and_months`` — ``{2010: [1, 2]}``; its keys are the years
          * ``years`` — years to sweep, in the given order
          * ``months`` — months kept for every swept year

        Without any option every year/month holding rows is returned.
        Years whose months are all filtered out stay in the tree as ``{}``.
        """
        fmt = MonthNames.coerce(month_names)

        grouped: dict[int, dict[int, int]] | None = None
        if batched:
            grouped = await self.year_month_counts()

        if years_and_months is not None:
            candidates = list(years_and_months.keys())
        elif years is not None:
            candidates = list(years)
        elif grouped is not None:
            candidates = list(grouped.keys())
        else:
            candidates = list((await self.years()).keys())

        wanted = None if months is None else set(months)

        tree: dict[int, dict[int | str, Select]] = {}
        for year in candidates:
            tree[year] = {}
            if grouped is not None:
                found = list(grouped.get(year, {}).keys())
            else:
                found = list((await self.months(year)).keys())

            if years_and_months is not None:
                keep = set(years_and_months.get(year) or ())
                found = [m for m in found if m in keep]
            elif wanted is not None:
                found = [m for m in found if m in wanted]

            for month in found:
                tree[year][fmt.label(month)] = self.node(year, month)

        logger.info(
            "Built %s archive tree — %d years, %d nodes",
            self.model.__name__, len(tree), sum(len(v) for v in tree.values()),
        )
        return tree
