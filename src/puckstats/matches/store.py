"""
Match store: create, update, delete, fetch and list matches.

The store owns the two unidentified-score columns. Everything that
reads a match goes through ``MatchRecord``, a read-only projection that
carries the joined season, event and team names next to the raw ids.

A match's real score is not available here on purpose; use
``MatchDetailAggregator`` for that.

Usage:
    with get_session() as session:
        store = MatchStore(session)
        match_id = store.create(MatchDraft(season_id=1, home_team_id=3, away_team_id=7))
        page = store.list(MatchFilters(team_id=3), paging=Paging.new(page=1))
"""

import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, aliased

from puckstats.db.models import Event, Match, ScoreEvent, Season, Team
from puckstats.errors import ReferentialError, ValidationError, from_integrity_error
from puckstats.match_statuses import DEFAULT_MATCH_STATUS, normalize_status
from puckstats.paging import Page, Paging, SortOrder, date_range, paginate

logger = logging.getLogger(__name__)

HomeTeam = aliased(Team, name="home_team")
AwayTeam = aliased(Team, name="away_team")


# =============================================================================
# Value Types
# =============================================================================

@dataclass
class MatchDraft:
    """Caller-supplied values for creating or fully replacing a match."""
    season_id: int
    home_team_id: int
    away_team_id: int
    home_score_unidentified: int = 0
    away_score_unidentified: int = 0
    match_date: Optional[datetime] = None
    status: Optional[str] = None  # None -> 'scheduled'
    venue: Optional[str] = None


@dataclass
class MatchFilters:
    """
    Listing filters. Every field is optional and they combine with AND.

    ``team_id`` matches the team on either side of the match.
    ``date_from``/``date_to`` are inclusive; a plain date for ``date_to``
    covers that whole day.
    """
    season_id: Optional[int] = None
    team_id: Optional[int] = None
    status: Optional[str] = None
    date_from: Optional[Union[date, datetime]] = None
    date_to: Optional[Union[date, datetime]] = None


@dataclass(frozen=True)
class MatchRecord:
    """A match row with its display names joined in."""
    id: int
    season_id: int
    season_name: str
    event_id: int
    event_name: str
    home_team_id: int
    home_team_name: str
    away_team_id: int
    away_team_name: str
    home_score_unidentified: int
    away_score_unidentified: int
    match_date: Optional[datetime]
    status: str
    venue: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class MatchSortField(enum.Enum):
    """Columns a match listing can be sorted by."""
    DATE = "date"
    STATUS = "status"
    EVENT = "event"

    @classmethod
    def parse(cls, raw: Union["MatchSortField", str, None]) -> "MatchSortField":
        """Unknown or missing input sorts by match date."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.DATE

    @property
    def column(self):
        return _MATCH_SORT_COLUMNS[self]


_MATCH_SORT_COLUMNS = {
    MatchSortField.DATE: Match.match_date,
    MatchSortField.STATUS: Match.status,
    MatchSortField.EVENT: Event.name,
}


# =============================================================================
# Helpers
# =============================================================================

def _to_record(row) -> MatchRecord:
    match, season, event, home_name, away_name = row
    return MatchRecord(
        id=match.id,
        season_id=match.season_id,
        season_name=season.name,
        event_id=event.id,
        event_name=event.name,
        home_team_id=match.home_team_id,
        home_team_name=home_name,
        away_team_id=match.away_team_id,
        away_team_name=away_name,
        home_score_unidentified=match.home_score_unidentified,
        away_score_unidentified=match.away_score_unidentified,
        match_date=match.match_date,
        status=match.status,
        venue=match.venue,
        created_at=match.created_at,
        updated_at=match.updated_at,
    )


# =============================================================================
# Store
# =============================================================================

class MatchStore:
    """
    CRUD and listing for matches.

    The store never commits. Each write runs in a savepoint on the
    caller's session and is flushed before returning, so generated ids
    are available and a failed write leaves the session usable.
    """

    def __init__(self, db: Session):
        """
        Args:
            db: SQLAlchemy session; the caller owns the commit
        """
        self.db = db

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, draft: MatchDraft) -> int:
        """
        Insert a new match and return its id.

        Raises:
            ValidationError: negative unidentified score or home == away
            ReferentialError: season or either team does not exist
        """
        status = self._validate(draft)
        self._check_references(draft)

        match = Match(
            season_id=draft.season_id,
            home_team_id=draft.home_team_id,
            away_team_id=draft.away_team_id,
            home_score_unidentified=draft.home_score_unidentified,
            away_score_unidentified=draft.away_score_unidentified,
            match_date=draft.match_date,
            status=status,
            venue=draft.venue,
        )
        try:
            with self.db.begin_nested():
                self.db.add(match)
                self.db.flush()
        except IntegrityError as e:
            raise from_integrity_error(e) from e

        logger.info(
            "Created match %d (season %d, team %d vs team %d)",
            match.id, match.season_id, match.home_team_id, match.away_team_id,
        )
        return match.id

    def update(self, match_id: int, draft: MatchDraft) -> bool:
        """
        Replace every editable field of a match.

        Returns:
            False when the match does not exist, True otherwise

        Raises:
            ValidationError: a team being replaced still has score events
                in this match
        """
        status = self._validate(draft)
        match = self.db.get(Match, match_id)
        if match is None:
            return False
        self._check_references(draft)
        self._check_team_change(match, draft)

        try:
            with self.db.begin_nested():
                match.season_id = draft.season_id
                match.home_team_id = draft.home_team_id
                match.away_team_id = draft.away_team_id
                match.home_score_unidentified = draft.home_score_unidentified
                match.away_score_unidentified = draft.away_score_unidentified
                match.match_date = draft.match_date
                match.status = status
                match.venue = draft.venue
                match.updated_at = datetime.utcnow()
                self.db.flush()
        except IntegrityError as e:
            raise from_integrity_error(e) from e

        logger.info("Updated match %d", match_id)
        return True

    def delete(self, match_id: int) -> bool:
        """
        Delete a match together with all of its score events.

        Both go in the same savepoint: either the match and every event
        are gone, or nothing changed.
        """
        match = self.db.get(Match, match_id)
        if match is None:
            return False

        with self.db.begin_nested():
            event_count = len(match.score_events)
            self.db.delete(match)
            self.db.flush()

        logger.info("Deleted match %d and %d score events", match_id, event_count)
        return True

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, match_id: int) -> Optional[MatchRecord]:
        row = self._base_query().filter(Match.id == match_id).first()
        return _to_record(row) if row is not None else None

    def list(
        self,
        filters: Optional[MatchFilters] = None,
        sort_field: Union[MatchSortField, str, None] = MatchSortField.DATE,
        sort_order: SortOrder = SortOrder.DESC,
        paging: Optional[Paging] = None,
    ) -> Page[MatchRecord]:
        """
        List matches, newest first unless told otherwise.

        Matches with no date sort after dated ones in either direction.
        Match id is the tiebreak, so repeated calls page identically.
        """
        query = self._apply_filters(self._base_query(), filters or MatchFilters())
        page = paginate(
            query,
            paging or Paging.new(),
            order_by=MatchSortField.parse(sort_field).column,
            sort_order=sort_order,
            tiebreak=Match.id,
        )
        return page.map(_to_record)

    # =========================================================================
    # Internals
    # =========================================================================

    def _base_query(self) -> Query:
        return (
            self.db.query(Match, Season, Event, HomeTeam.name, AwayTeam.name)
            .join(Season, Match.season_id == Season.id)
            .join(Event, Season.event_id == Event.id)
            .join(HomeTeam, Match.home_team_id == HomeTeam.id)
            .join(AwayTeam, Match.away_team_id == AwayTeam.id)
        )

    def _apply_filters(self, query: Query, filters: MatchFilters) -> Query:
        if filters.season_id is not None:
            query = query.filter(Match.season_id == filters.season_id)

        if filters.team_id is not None:
            query = query.filter(
                or_(Match.home_team_id == filters.team_id, Match.away_team_id == filters.team_id)
            )

        status = normalize_status(filters.status)
        if status is not None:
            query = query.filter(Match.status == status)

        query = query.filter(*date_range(Match.match_date, filters.date_from, filters.date_to))

        return query

    def _validate(self, draft: MatchDraft) -> str:
        """Check local rules and return the status to store."""
        if draft.home_score_unidentified < 0 or draft.away_score_unidentified < 0:
            raise ValidationError("unidentified scores must be non-negative")
        if draft.home_team_id == draft.away_team_id:
            raise ValidationError("home and away teams must be different")
        return normalize_status(draft.status) or DEFAULT_MATCH_STATUS

    def _check_references(self, draft: MatchDraft) -> None:
        if self.db.get(Season, draft.season_id) is None:
            raise ReferentialError("season", draft.season_id)
        if self.db.get(Team, draft.home_team_id) is None:
            raise ReferentialError("home_team", draft.home_team_id)
        if self.db.get(Team, draft.away_team_id) is None:
            raise ReferentialError("away_team", draft.away_team_id)

    def _check_team_change(self, match: Match, draft: MatchDraft) -> None:
        """A team that drops out of the match must not keep any score events."""
        kept = {draft.home_team_id, draft.away_team_id}
        for team_id in (match.home_team_id, match.away_team_id):
            if team_id in kept:
                continue
            credited = (
                self.db.query(ScoreEvent.id)
                .filter(ScoreEvent.match_id == match.id, ScoreEvent.team_id == team_id)
                .first()
            )
            if credited is not None:
                raise ValidationError(
                    f"team {team_id} has score events in match {match.id} and cannot be replaced"
                )
