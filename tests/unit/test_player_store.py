"""Unit tests for PlayerStore."""

import pytest

from puckstats.paging import Paging, SortOrder
from puckstats.players import PlayerFilters, PlayerSortField, PlayerStore


@pytest.fixture
def store(db_session):
    return PlayerStore(db_session)


@pytest.fixture
def roster(seed):
    finland = seed.country("Finland", "FI")
    canada = seed.country("Canada", "CA")
    return {
        "aho": seed.player("Sebastian Aho", finland, "F"),
        "mcdavid": seed.player("Connor McDavid", canada, "F"),
        "makar": seed.player("Cale Makar", canada, "D"),
        "nobody": seed.player("Aaron Unknown"),
        "finland": finland,
        "canada": canada,
    }


def test_get(store, roster):
    record = store.get(roster["aho"].id)
    assert record.name == "Sebastian Aho"
    assert record.country_name == "Finland"
    assert record.position == "F"


def test_get_missing(store):
    assert store.get(999) is None


def test_default_sort_is_name(store, roster):
    page = store.list()
    assert [p.name for p in page.items] == [
        "Aaron Unknown", "Cale Makar", "Connor McDavid", "Sebastian Aho",
    ]


def test_name_filter_is_case_insensitive_substring(store, roster):
    page = store.list(PlayerFilters(name="  mc "))
    assert [p.id for p in page.items] == [roster["mcdavid"].id]


def test_country_filter(store, roster):
    page = store.list(PlayerFilters(country_id=roster["canada"].id))
    assert {p.id for p in page.items} == {roster["mcdavid"].id, roster["makar"].id}


def test_sort_by_country_puts_missing_country_last(store, roster):
    page = store.list(sort_field="country", sort_order=SortOrder.DESC)
    assert page.items[-1].id == roster["nobody"].id
    assert page.items[0].country_name == "Finland"


def test_unknown_sort_field_falls_back_to_name():
    assert PlayerSortField.parse("height") is PlayerSortField.NAME
    assert PlayerSortField.parse(None) is PlayerSortField.NAME


def test_paging(store, roster):
    page = store.list(sort_field=PlayerSortField.ID, paging=Paging.new(page=2, page_size=3))
    assert page.total == 4
    assert page.total_pages == 2
    assert [p.id for p in page.items] == [roster["nobody"].id]
    assert page.has_previous and not page.has_next


def test_name_filter_treats_wildcards_literally(store, roster, seed):
    underscored = seed.player("Jean_Pierre Dumont")

    assert [p.id for p in store.list(PlayerFilters(name="_")).items] == [underscored.id]
    assert store.list(PlayerFilters(name="%")).items == []
