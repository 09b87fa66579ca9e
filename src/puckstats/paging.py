"""
Paging and sorting primitives shared by every listing query.

All listings (matches, players, player scoring events) go through
``paginate()`` so that totals, page counts and next/previous flags are
derived the same way everywhere.

Usage:
    from puckstats.paging import Paging, SortOrder, paginate

    paging = Paging.new(page=2, page_size=25)
    page = paginate(query, paging, order_by=Match.match_date, tiebreak=Match.id)
    print(page.total_pages, page.has_next)
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

from puckstats.config import settings

T = TypeVar("T")
U = TypeVar("U")

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class Paging:
    """
    A requested page. Out-of-range values are clamped, never rejected:
    ``page`` to >= 1 and ``page_size`` to [1, 100].
    """

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        object.__setattr__(self, "page", max(self.page, 1))
        object.__setattr__(
            self, "page_size", min(max(self.page_size, MIN_PAGE_SIZE), MAX_PAGE_SIZE)
        )

    @classmethod
    def new(cls, page: Optional[int] = 1, page_size: Optional[int] = None) -> "Paging":
        """Build a Paging from raw (possibly missing) request values."""
        return cls(
            page=1 if page is None else page,
            page_size=settings.default_page_size if page_size is None else page_size,
        )

    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def limit(self) -> int:
        return self.page_size


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the derived navigation fields."""

    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int = field(init=False)
    has_next: bool = field(init=False)
    has_previous: bool = field(init=False)

    def __post_init__(self) -> None:
        total_pages = math.ceil(self.total / self.page_size) if self.page_size else 0
        # frozen dataclass: derived fields are set once here
        object.__setattr__(self, "total_pages", total_pages)
        object.__setattr__(self, "has_next", self.page < total_pages)
        object.__setattr__(self, "has_previous", self.page > 1)

    @classmethod
    def build(cls, items: list[T], total: int, paging: Paging) -> "Page[T]":
        return cls(items=items, total=total, page=paging.page, page_size=paging.page_size)

    def map(self, fn: Callable[[T], U]) -> "Page[U]":
        """Return the same page with every item converted by ``fn``."""
        return Page(
            items=[fn(item) for item in self.items],
            total=self.total,
            page=self.page,
            page_size=self.page_size,
        )


class SortOrder(enum.Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "SortOrder":
        """Anything other than 'desc' (case-insensitive) sorts ascending."""
        if raw is not None and raw.strip().lower() == "desc":
            return cls.DESC
        return cls.ASC

    def toggle(self) -> "SortOrder":
        return SortOrder.ASC if self is SortOrder.DESC else SortOrder.DESC

    def apply(self, column: Any) -> ColumnElement:
        """Wrap a column in ASC/DESC with NULLs always last."""
        ordered = column.desc() if self is SortOrder.DESC else column.asc()
        return ordered.nulls_last()


def paginate(
    query: Query,
    paging: Paging,
    *,
    order_by: Any,
    sort_order: SortOrder = SortOrder.ASC,
    tiebreak: Any,
) -> Page:
    """
    Count, order and slice a filtered query.

    Args:
        query: Query with all filters already applied
        paging: Requested page (already clamped)
        order_by: Column or expression for the primary sort
        sort_order: Direction for the primary sort
        tiebreak: Always-unique column appended after the primary sort so
                  page contents are deterministic across repeated calls

    Returns:
        Page whose items are whatever the query yields
    """
    # Filtered total, independent of ordering and paging
    total = query.order_by(None).count()
    rows = (
        query.order_by(sort_order.apply(order_by), sort_order.apply(tiebreak))
        .offset(paging.offset())
        .limit(paging.limit())
        .all()
    )
    return Page.build(list(rows), total, paging)


def date_range(
    column: Any,
    date_from: Optional[Union[date, datetime]] = None,
    date_to: Optional[Union[date, datetime]] = None,
) -> list[ColumnElement]:
    """
    Filter clauses for an inclusive date range on a datetime column.

    Either bound may be missing. A plain ``date`` upper bound covers the
    whole of that day; a ``datetime`` upper bound is used as-is. Rows
    with a NULL date never match a bounded range.
    """
    clauses = []
    if date_from is not None:
        if not isinstance(date_from, datetime):
            date_from = datetime.combine(date_from, time.min)
        clauses.append(column >= date_from)
    if date_to is not None:
        if isinstance(date_to, datetime):
            clauses.append(column <= date_to)
        else:
            clauses.append(column < datetime.combine(date_to + timedelta(days=1), time.min))
    return clauses
