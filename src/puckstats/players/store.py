"""
Player listing and lookup.

Read-only: player rows are maintained elsewhere. Listings share the
same paging contract as matches and scoring events.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.orm import Query, Session

from puckstats.db.models import Country, Player
from puckstats.paging import Page, Paging, SortOrder, paginate


@dataclass(frozen=True)
class PlayerRecord:
    id: int
    name: str
    country_id: Optional[int]
    country_name: Optional[str]
    position: Optional[str]


@dataclass
class PlayerFilters:
    name: Optional[str] = None  # case-insensitive substring
    country_id: Optional[int] = None


class PlayerSortField(enum.Enum):
    """Columns a player listing can be sorted by."""
    ID = "id"
    NAME = "name"
    COUNTRY = "country"

    @classmethod
    def parse(cls, raw: Union["PlayerSortField", str, None]) -> "PlayerSortField":
        """Unknown or missing input sorts by name."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.NAME

    @property
    def column(self):
        return _PLAYER_SORT_COLUMNS[self]


_PLAYER_SORT_COLUMNS = {
    PlayerSortField.ID: Player.id,
    PlayerSortField.NAME: Player.name,
    PlayerSortField.COUNTRY: Country.name,
}


def _to_record(row) -> PlayerRecord:
    player, country_name = row
    return PlayerRecord(
        id=player.id,
        name=player.name,
        country_id=player.country_id,
        country_name=country_name,
        position=player.position,
    )


class PlayerStore:
    """Lookup and paged listing of players."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, player_id: int) -> Optional[PlayerRecord]:
        row = self._base_query().filter(Player.id == player_id).first()
        return _to_record(row) if row is not None else None

    def list(
        self,
        filters: Optional[PlayerFilters] = None,
        sort_field: Union[PlayerSortField, str, None] = PlayerSortField.NAME,
        sort_order: SortOrder = SortOrder.ASC,
        paging: Optional[Paging] = None,
    ) -> Page[PlayerRecord]:
        """
        List players alphabetically unless told otherwise.

        Players without a country sort last when sorting by country.
        """
        filters = filters or PlayerFilters()
        query = self._base_query()

        name = (filters.name or "").strip()
        if name:
            query = query.filter(Player.name.icontains(name, autoescape=True))
        if filters.country_id is not None:
            query = query.filter(Player.country_id == filters.country_id)

        page = paginate(
            query,
            paging or Paging.new(),
            order_by=PlayerSortField.parse(sort_field).column,
            sort_order=sort_order,
            tiebreak=Player.id,
        )
        return page.map(_to_record)

    def _base_query(self) -> Query:
        return self.db.query(Player, Country.name).outerjoin(Country, Player.country_id == Country.id)
