"""
Player statistics derived from the score event stream.

Nothing here is stored. Goals, assists and points are recomputed from
score_events every time, so they always agree with the event log:

- goals:   events where the player is the scorer
- assists: events where the player is assist1 or assist2
- points:  goals + assists

Two views are offered:

1. season_stats(): one summary row per (season, event) the player
   actually scored or assisted in. Seasons without events are omitted.
2. scoring_events(): a paged list with one row per (event, role). A
   player who scores one goal and assists another in the same match
   gets two rows.

The per-role rows come from a UNION ALL of three selects (scorer,
primary assist, secondary assist), which keeps each role's row
independent and lets the role itself be filtered and sorted on.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from sqlalchemy import case, func, literal, or_, select, union_all
from sqlalchemy.orm import Query, Session, aliased
from sqlalchemy.sql.selectable import Subquery

from puckstats.db.models import (
    Event,
    Match,
    PlayerContract,
    ScoreEvent,
    Season,
    Team,
    TeamParticipation,
)
from puckstats.paging import Page, Paging, SortOrder, date_range, paginate

logger = logging.getLogger(__name__)

HomeTeam = aliased(Team, name="home_team")
AwayTeam = aliased(Team, name="away_team")

ROLE_GOAL = "goal"
ROLE_ASSIST_PRIMARY = "assist_primary"
ROLE_ASSIST_SECONDARY = "assist_secondary"
ASSIST_ROLES = (ROLE_ASSIST_PRIMARY, ROLE_ASSIST_SECONDARY)


# =============================================================================
# Read Models
# =============================================================================

@dataclass(frozen=True)
class PlayerSeasonStats:
    """A player's totals in one season of one event."""
    season_id: int
    season_year: int
    season_name: str
    event_id: int
    event_name: str
    goals: int
    assists: int

    @property
    def points(self) -> int:
        return self.goals + self.assists


@dataclass(frozen=True)
class PlayerEventTotals:
    """A player's totals across every season of one event."""
    event_id: int
    event_name: str
    seasons: int
    goals: int
    assists: int

    @property
    def points(self) -> int:
        return self.goals + self.assists


@dataclass(frozen=True)
class PlayerScoringEventView:
    """One scoring contribution: a score event seen from one player's role."""
    score_event_id: int
    role: str  # 'goal', 'assist_primary', 'assist_secondary'
    match_id: int
    match_date: Optional[datetime]
    season_id: int
    season_name: str
    event_id: int
    event_name: str
    team_id: int
    team_name: str
    home_team_name: str
    away_team_name: str
    period: int
    time_minutes: Optional[int]
    time_seconds: Optional[int]
    goal_type: Optional[str]

    @property
    def is_goal(self) -> bool:
        return self.role == ROLE_GOAL


# =============================================================================
# Filters and Sorting
# =============================================================================

class RoleCategory(enum.Enum):
    """Role filter for scoring_events(). 'assists' covers both assist roles."""
    ALL = "all"
    GOALS = "goals"
    ASSISTS = "assists"

    @classmethod
    def parse(cls, raw: Union["RoleCategory", str, None]) -> "RoleCategory":
        if isinstance(raw, cls):
            return raw
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.ALL


@dataclass
class PlayerScoringFilters:
    role: Union[RoleCategory, str, None] = None
    season_id: Optional[int] = None
    team_id: Optional[int] = None  # team credited with the goal
    date_from: Optional[Union[date, datetime]] = None
    date_to: Optional[Union[date, datetime]] = None


class ScoringEventSortField(enum.Enum):
    """Columns a player's scoring event listing can be sorted by."""
    DATE = "date"
    EVENT = "event"
    TYPE = "type"
    PERIOD = "period"

    @classmethod
    def parse(cls, raw: Union["ScoringEventSortField", str, None]) -> "ScoringEventSortField":
        """Unknown or missing input sorts by match date."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.DATE

    def column_in(self, roles: Subquery):
        """Backing expression; the role lives on the per-call union subquery."""
        if self is ScoringEventSortField.TYPE:
            return roles.c.role
        return _SCORING_SORT_COLUMNS[self]


_SCORING_SORT_COLUMNS = {
    ScoringEventSortField.DATE: Match.match_date,
    ScoringEventSortField.EVENT: Event.name,
    ScoringEventSortField.PERIOD: ScoreEvent.period,
}


# =============================================================================
# Aggregator
# =============================================================================

class PlayerStatsAggregator:
    """
    Folds a player's score events into statistics.

    Usage:
        stats = PlayerStatsAggregator(session)
        for row in stats.season_stats(player_id):
            print(row.event_name, row.season_name, row.goals, row.assists, row.points)
    """

    def __init__(self, db: Session):
        self.db = db

    def season_stats(self, player_id: int) -> list[PlayerSeasonStats]:
        """
        Goals/assists/points per (season, event), newest season first.

        Only seasons where the player has at least one goal or assist
        appear.
        """
        is_goal = case((ScoreEvent.scorer_id == player_id, 1), else_=0)
        is_assist = case(
            (or_(ScoreEvent.assist1_id == player_id, ScoreEvent.assist2_id == player_id), 1),
            else_=0,
        )

        rows = (
            self.db.query(
                Season.id,
                Season.year,
                Season.display_name,
                Event.id,
                Event.name,
                func.sum(is_goal).label("goals"),
                func.sum(is_assist).label("assists"),
            )
            .select_from(ScoreEvent)
            .join(Match, ScoreEvent.match_id == Match.id)
            .join(Season, Match.season_id == Season.id)
            .join(Event, Season.event_id == Event.id)
            .filter(
                or_(
                    ScoreEvent.scorer_id == player_id,
                    ScoreEvent.assist1_id == player_id,
                    ScoreEvent.assist2_id == player_id,
                )
            )
            .group_by(Season.id, Season.year, Season.display_name, Event.id, Event.name)
            .order_by(Season.year.desc(), Event.name.asc(), Season.id.asc())
            .all()
        )

        return [
            PlayerSeasonStats(
                season_id=season_id,
                season_year=year,
                season_name=display_name or str(year),
                event_id=event_id,
                event_name=event_name,
                goals=int(goals or 0),
                assists=int(assists or 0),
            )
            for season_id, year, display_name, event_id, event_name, goals, assists in rows
        ]

    def event_totals(self, player_id: int) -> list[PlayerEventTotals]:
        """Career totals per event, highest points first."""
        totals: dict[int, PlayerEventTotals] = {}
        for row in self.season_stats(player_id):
            current = totals.get(row.event_id)
            if current is None:
                totals[row.event_id] = PlayerEventTotals(
                    event_id=row.event_id,
                    event_name=row.event_name,
                    seasons=1,
                    goals=row.goals,
                    assists=row.assists,
                )
            else:
                totals[row.event_id] = PlayerEventTotals(
                    event_id=current.event_id,
                    event_name=current.event_name,
                    seasons=current.seasons + 1,
                    goals=current.goals + row.goals,
                    assists=current.assists + row.assists,
                )

        return sorted(totals.values(), key=lambda t: (-t.points, t.event_name, t.event_id))

    def scoring_events(
        self,
        player_id: int,
        filters: Optional[PlayerScoringFilters] = None,
        sort_field: Union[ScoringEventSortField, str, None] = ScoringEventSortField.DATE,
        sort_order: SortOrder = SortOrder.DESC,
        paging: Optional[Paging] = None,
    ) -> Page[PlayerScoringEventView]:
        """
        Page through every goal and assist credited to a player.

        The score event id is the tiebreak. A player never holds two
        roles on one event, so it is unique per row.
        """
        filters = filters or PlayerScoringFilters()
        roles = self._role_rows(player_id)

        query = (
            self.db.query(
                roles.c.score_event_id,
                roles.c.role,
                Match.id,
                Match.match_date,
                Season.id,
                Season.year,
                Season.display_name,
                Event.id,
                Event.name,
                Team.id,
                Team.name,
                HomeTeam.name,
                AwayTeam.name,
                ScoreEvent.period,
                ScoreEvent.time_minutes,
                ScoreEvent.time_seconds,
                ScoreEvent.goal_type,
            )
            .select_from(roles)
            .join(ScoreEvent, ScoreEvent.id == roles.c.score_event_id)
            .join(Match, ScoreEvent.match_id == Match.id)
            .join(Season, Match.season_id == Season.id)
            .join(Event, Season.event_id == Event.id)
            .join(Team, ScoreEvent.team_id == Team.id)
            .join(HomeTeam, Match.home_team_id == HomeTeam.id)
            .join(AwayTeam, Match.away_team_id == AwayTeam.id)
        )
        query = self._apply_filters(query, roles, filters)

        page = paginate(
            query,
            paging or Paging.new(),
            order_by=ScoringEventSortField.parse(sort_field).column_in(roles),
            sort_order=sort_order,
            tiebreak=roles.c.score_event_id,
        )
        logger.debug("Player %d has %d scoring rows matching %s", player_id, page.total, filters)
        return page.map(_to_view)

    # =========================================================================
    # Filter Choices
    # =========================================================================

    def player_seasons(self, player_id: int) -> list[tuple[int, str]]:
        """(season_id, 'Event Season') pairs the player has a contract in."""
        rows = (
            self.db.query(Season.id, Season.year, Season.display_name, Event.name)
            .join(Event, Season.event_id == Event.id)
            .join(TeamParticipation, TeamParticipation.season_id == Season.id)
            .join(PlayerContract, PlayerContract.team_participation_id == TeamParticipation.id)
            .filter(PlayerContract.player_id == player_id)
            .distinct()
            .order_by(Season.year.desc(), Event.name.asc(), Season.id.asc())
            .all()
        )
        return [
            (season_id, f"{event_name} {display_name or year}")
            for season_id, year, display_name, event_name in rows
        ]

    def player_teams(self, player_id: int) -> list[tuple[int, str]]:
        """(team_id, team name) pairs the player has a contract with."""
        rows = (
            self.db.query(Team.id, Team.name)
            .join(TeamParticipation, TeamParticipation.team_id == Team.id)
            .join(PlayerContract, PlayerContract.team_participation_id == TeamParticipation.id)
            .filter(PlayerContract.player_id == player_id)
            .distinct()
            .order_by(Team.name.asc(), Team.id.asc())
            .all()
        )
        return [(team_id, name) for team_id, name in rows]

    # =========================================================================
    # Internals
    # =========================================================================

    def _role_rows(self, player_id: int) -> Subquery:
        """(score_event_id, role) for every role the player holds."""
        goals = select(
            ScoreEvent.id.label("score_event_id"),
            literal(ROLE_GOAL).label("role"),
        ).where(ScoreEvent.scorer_id == player_id)
        primary = select(
            ScoreEvent.id.label("score_event_id"),
            literal(ROLE_ASSIST_PRIMARY).label("role"),
        ).where(ScoreEvent.assist1_id == player_id)
        secondary = select(
            ScoreEvent.id.label("score_event_id"),
            literal(ROLE_ASSIST_SECONDARY).label("role"),
        ).where(ScoreEvent.assist2_id == player_id)

        return union_all(goals, primary, secondary).subquery("player_roles")

    def _apply_filters(self, query: Query, roles: Subquery, filters: PlayerScoringFilters) -> Query:
        role = RoleCategory.parse(filters.role)
        if role is RoleCategory.GOALS:
            query = query.filter(roles.c.role == ROLE_GOAL)
        elif role is RoleCategory.ASSISTS:
            query = query.filter(roles.c.role.in_(ASSIST_ROLES))

        if filters.season_id is not None:
            query = query.filter(Match.season_id == filters.season_id)
        if filters.team_id is not None:
            query = query.filter(ScoreEvent.team_id == filters.team_id)

        return query.filter(*date_range(Match.match_date, filters.date_from, filters.date_to))


def _to_view(row) -> PlayerScoringEventView:
    (
        score_event_id, role, match_id, match_date,
        season_id, season_year, season_display_name, event_id, event_name,
        team_id, team_name, home_team_name, away_team_name,
        period, time_minutes, time_seconds, goal_type,
    ) = row
    return PlayerScoringEventView(
        score_event_id=score_event_id,
        role=role,
        match_id=match_id,
        match_date=match_date,
        season_id=season_id,
        season_name=season_display_name or str(season_year),
        event_id=event_id,
        event_name=event_name,
        team_id=team_id,
        team_name=team_name,
        home_team_name=home_team_name,
        away_team_name=away_team_name,
        period=period,
        time_minutes=time_minutes,
        time_seconds=time_seconds,
        goal_type=goal_type,
    )
