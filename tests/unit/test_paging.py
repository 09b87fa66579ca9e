"""Unit tests for paging and sort-order primitives."""

import math
from datetime import date, datetime

import pytest
from sqlalchemy import column

from puckstats.config import settings
from puckstats.paging import Page, Paging, SortOrder, date_range


class TestPaging:
    """Clamping and offset arithmetic."""

    def test_clamps_page_and_oversized_page_size(self):
        paging = Paging.new(page=0, page_size=500)
        assert paging.page == 1
        assert paging.page_size == 100

    def test_clamps_zero_page_size_to_one(self):
        paging = Paging.new(page=3, page_size=0)
        assert paging.page == 3
        assert paging.page_size == 1

    def test_negative_values_are_clamped(self):
        paging = Paging(page=-4, page_size=-10)
        assert paging.page == 1
        assert paging.page_size == 1

    def test_missing_values_use_defaults(self):
        paging = Paging.new(page=None, page_size=None)
        assert paging.page == 1
        assert paging.page_size == settings.default_page_size

    def test_offset_and_limit(self):
        paging = Paging.new(page=3, page_size=25)
        assert paging.offset() == 50
        assert paging.limit() == 25

    def test_first_page_has_zero_offset(self):
        assert Paging.new(page=1, page_size=10).offset() == 0


class TestPage:
    """Derived navigation fields."""

    @pytest.mark.parametrize(
        "total,page_size,expected_pages",
        [(0, 20, 0), (1, 20, 1), (20, 20, 1), (21, 20, 2), (100, 7, 15)],
    )
    def test_total_pages_is_ceiling(self, total, page_size, expected_pages):
        page = Page.build([], total, Paging.new(page=1, page_size=page_size))
        assert page.total_pages == expected_pages
        assert page.total_pages == math.ceil(total / page_size)

    def test_middle_page_has_next_and_previous(self):
        page = Page.build(["x"], 45, Paging.new(page=2, page_size=20))
        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_previous is True

    def test_last_page_has_no_next(self):
        page = Page.build(["x"], 45, Paging.new(page=3, page_size=20))
        assert page.has_next is False
        assert page.has_previous is True

    def test_empty_result(self):
        page = Page.build([], 0, Paging.new())
        assert page.total_pages == 0
        assert page.has_next is False
        assert page.has_previous is False

    def test_page_past_the_end_is_empty_but_consistent(self):
        page = Page.build([], 5, Paging.new(page=9, page_size=5))
        assert page.items == []
        assert page.total_pages == 1
        assert page.has_next is False
        assert page.has_previous is True

    def test_map_keeps_navigation(self):
        page = Page.build([1, 2, 3], 13, Paging.new(page=2, page_size=3))
        mapped = page.map(str)
        assert mapped.items == ["1", "2", "3"]
        assert (mapped.total, mapped.page, mapped.page_size) == (13, 2, 3)
        assert mapped.total_pages == page.total_pages == 5
        assert mapped.has_next and mapped.has_previous


class TestSortOrder:

    @pytest.mark.parametrize("raw", ["desc", "DESC", " Desc "])
    def test_parse_desc(self, raw):
        assert SortOrder.parse(raw) is SortOrder.DESC

    @pytest.mark.parametrize("raw", ["asc", "", None, "descending", "up"])
    def test_anything_else_is_asc(self, raw):
        assert SortOrder.parse(raw) is SortOrder.ASC

    def test_toggle(self):
        assert SortOrder.ASC.toggle() is SortOrder.DESC
        assert SortOrder.DESC.toggle() is SortOrder.ASC

    def test_apply_puts_nulls_last(self):
        rendered = str(SortOrder.DESC.apply(column("match_date")))
        assert "DESC" in rendered
        assert "NULLS LAST" in rendered


class TestDateRange:

    def test_no_bounds_no_clauses(self):
        assert date_range(column("match_date")) == []

    def test_plain_date_upper_bound_covers_the_whole_day(self):
        (clause,) = date_range(column("match_date"), date_to=date(2024, 5, 10))
        assert clause.right.value == datetime(2024, 5, 11)
        assert clause.operator.__name__ == "lt"

    def test_datetime_upper_bound_is_inclusive(self):
        bound = datetime(2024, 5, 10, 18, 30)
        (clause,) = date_range(column("match_date"), date_to=bound)
        assert clause.right.value == bound
        assert clause.operator.__name__ == "le"

    def test_plain_date_lower_bound_starts_at_midnight(self):
        (clause,) = date_range(column("match_date"), date_from=date(2024, 5, 1))
        assert clause.right.value == datetime(2024, 5, 1)
        assert clause.operator.__name__ == "ge"
