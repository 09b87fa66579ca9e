"""
Score event store: individually recorded goals.

Every write checks its references before touching the table, so a bad
id comes back as a ReferentialError naming the field that was wrong
('match', 'team', 'scorer', 'assist1' or 'assist2') rather than a
generic database error.

Rules enforced on every write:
- period is a positive integer
- time_minutes in 0..60 and time_seconds in 0..59 when given
- the team is one of the match's two teams
- scorer, assist1 and assist2 are different players
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, aliased

from puckstats.db.models import Match, Player, ScoreEvent, Team
from puckstats.errors import ReferentialError, ValidationError, from_integrity_error

logger = logging.getLogger(__name__)

Scorer = aliased(Player, name="scorer")
Assist1 = aliased(Player, name="assist1")
Assist2 = aliased(Player, name="assist2")

# Period, then clock time (untimed events last), then insertion order
EVENT_ORDER = (
    ScoreEvent.period.asc(),
    ScoreEvent.time_minutes.asc().nulls_last(),
    ScoreEvent.time_seconds.asc().nulls_last(),
    ScoreEvent.id.asc(),
)


@dataclass
class ScoreEventDraft:
    """Caller-supplied values for creating or fully replacing a score event."""
    match_id: int
    team_id: int
    period: int
    scorer_id: Optional[int] = None
    assist1_id: Optional[int] = None
    assist2_id: Optional[int] = None
    time_minutes: Optional[int] = None
    time_seconds: Optional[int] = None
    goal_type: Optional[str] = None


@dataclass(frozen=True)
class ScoreEventRecord:
    """A score event with team and player names joined in."""
    id: int
    match_id: int
    team_id: int
    team_name: str
    scorer_id: Optional[int]
    scorer_name: Optional[str]
    assist1_id: Optional[int]
    assist1_name: Optional[str]
    assist2_id: Optional[int]
    assist2_name: Optional[str]
    period: int
    time_minutes: Optional[int]
    time_seconds: Optional[int]
    goal_type: Optional[str]

    @property
    def clock(self) -> Optional[str]:
        """'MM:SS' within the period, or None when untimed."""
        if self.time_minutes is None:
            return None
        return f"{self.time_minutes:02d}:{self.time_seconds or 0:02d}"


def _to_record(row) -> ScoreEventRecord:
    event, team_name, scorer_name, assist1_name, assist2_name = row
    return ScoreEventRecord(
        id=event.id,
        match_id=event.match_id,
        team_id=event.team_id,
        team_name=team_name,
        scorer_id=event.scorer_id,
        scorer_name=scorer_name,
        assist1_id=event.assist1_id,
        assist1_name=assist1_name,
        assist2_id=event.assist2_id,
        assist2_name=assist2_name,
        period=event.period,
        time_minutes=event.time_minutes,
        time_seconds=event.time_seconds,
        goal_type=event.goal_type,
    )


class ScoreEventStore:
    """
    CRUD for score events.

    Like MatchStore, writes run in a savepoint and are flushed but never
    committed.
    """

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, draft: ScoreEventDraft) -> int:
        """
        Insert a score event and return its id.

        The match's unidentified score is left alone, so the match total
        goes up by one. Use identify_goal() to attach detail to a goal
        that was already counted.
        """
        self._validate(draft)
        self._check_references(draft)

        event = self._new_event(draft)
        try:
            with self.db.begin_nested():
                self.db.add(event)
                self.db.flush()
        except IntegrityError as e:
            raise from_integrity_error(e) from e

        logger.info(
            "Created score event %d (match %d, team %d, period %d)",
            event.id, event.match_id, event.team_id, event.period,
        )
        return event.id

    def identify_goal(self, draft: ScoreEventDraft) -> int:
        """
        Turn one of a team's unidentified goals into a recorded event.

        The team's unidentified score drops by one and the event is
        inserted in the same savepoint, so the match total is unchanged.
        The decrement is a single conditional UPDATE, so two callers
        racing for the last unidentified goal cannot both succeed.

        Raises:
            ValidationError: the team has no unidentified goals left
        """
        self._validate(draft)
        match = self._check_references(draft)

        if draft.team_id == match.home_team_id:
            column = Match.home_score_unidentified
        else:
            column = Match.away_score_unidentified

        event = self._new_event(draft)
        try:
            with self.db.begin_nested():
                result = self.db.execute(
                    update(Match)
                    .where(Match.id == match.id, column > 0)
                    .values({column: column - 1, Match.updated_at: datetime.utcnow()})
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise ValidationError(
                        f"team {draft.team_id} has no unidentified goals left in match {match.id}"
                    )
                self.db.add(event)
                self.db.flush()
        except IntegrityError as e:
            raise from_integrity_error(e) from e
        finally:
            self.db.expire(match, [column.key, "updated_at"])

        logger.info(
            "Identified goal for team %d in match %d as score event %d",
            draft.team_id, match.id, event.id,
        )
        return event.id

    def update(self, event_id: int, draft: ScoreEventDraft) -> bool:
        """Replace every field of a score event. False when it does not exist."""
        self._validate(draft)
        event = self.db.get(ScoreEvent, event_id)
        if event is None:
            return False
        self._check_references(draft)

        try:
            with self.db.begin_nested():
                event.match_id = draft.match_id
                event.team_id = draft.team_id
                event.scorer_id = draft.scorer_id
                event.assist1_id = draft.assist1_id
                event.assist2_id = draft.assist2_id
                event.period = draft.period
                event.time_minutes = draft.time_minutes
                event.time_seconds = draft.time_seconds
                event.goal_type = _clean_goal_type(draft.goal_type)
                event.updated_at = datetime.utcnow()
                self.db.flush()
        except IntegrityError as e:
            raise from_integrity_error(e) from e

        logger.info("Updated score event %d", event_id)
        return True

    def delete(self, event_id: int) -> bool:
        event = self.db.get(ScoreEvent, event_id)
        if event is None:
            return False

        with self.db.begin_nested():
            self.db.delete(event)
            self.db.flush()

        logger.info("Deleted score event %d", event_id)
        return True

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, event_id: int) -> Optional[ScoreEventRecord]:
        row = self._base_query().filter(ScoreEvent.id == event_id).first()
        return _to_record(row) if row is not None else None

    def list_for_match(self, match_id: int) -> list[ScoreEventRecord]:
        """
        All events of a match in game order: period, then clock time with
        untimed events last, then insertion order.
        """
        rows = (
            self._base_query()
            .filter(ScoreEvent.match_id == match_id)
            .order_by(*EVENT_ORDER)
            .all()
        )
        return [_to_record(row) for row in rows]

    # =========================================================================
    # Internals
    # =========================================================================

    def _base_query(self) -> Query:
        return (
            self.db.query(ScoreEvent, Team.name, Scorer.name, Assist1.name, Assist2.name)
            .join(Team, ScoreEvent.team_id == Team.id)
            .outerjoin(Scorer, ScoreEvent.scorer_id == Scorer.id)
            .outerjoin(Assist1, ScoreEvent.assist1_id == Assist1.id)
            .outerjoin(Assist2, ScoreEvent.assist2_id == Assist2.id)
        )

    def _new_event(self, draft: ScoreEventDraft) -> ScoreEvent:
        return ScoreEvent(
            match_id=draft.match_id,
            team_id=draft.team_id,
            scorer_id=draft.scorer_id,
            assist1_id=draft.assist1_id,
            assist2_id=draft.assist2_id,
            period=draft.period,
            time_minutes=draft.time_minutes,
            time_seconds=draft.time_seconds,
            goal_type=_clean_goal_type(draft.goal_type),
        )

    def _validate(self, draft: ScoreEventDraft) -> None:
        if isinstance(draft.period, bool) or not isinstance(draft.period, int) or draft.period < 1:
            raise ValidationError(f"period must be a positive integer, got {draft.period!r}")
        if draft.time_minutes is not None and not 0 <= draft.time_minutes <= 60:
            raise ValidationError(f"time_minutes must be between 0 and 60, got {draft.time_minutes}")
        if draft.time_seconds is not None and not 0 <= draft.time_seconds <= 59:
            raise ValidationError(f"time_seconds must be between 0 and 59, got {draft.time_seconds}")

        players = [p for p in (draft.scorer_id, draft.assist1_id, draft.assist2_id) if p is not None]
        if len(players) != len(set(players)):
            raise ValidationError("scorer and assists must be different players")

    def _check_references(self, draft: ScoreEventDraft) -> Match:
        """Check every referenced row exists and return the match."""
        match = self.db.get(Match, draft.match_id)
        if match is None:
            raise ReferentialError("match", draft.match_id)

        if self.db.get(Team, draft.team_id) is None:
            raise ReferentialError("team", draft.team_id)
        if draft.team_id not in (match.home_team_id, match.away_team_id):
            raise ValidationError(
                f"team {draft.team_id} does not play in match {draft.match_id}"
            )

        for role, player_id in (
            ("scorer", draft.scorer_id),
            ("assist1", draft.assist1_id),
            ("assist2", draft.assist2_id),
        ):
            if player_id is not None and self.db.get(Player, player_id) is None:
                raise ReferentialError(role, player_id)

        return match


def _clean_goal_type(goal_type: Optional[str]) -> Optional[str]:
    if goal_type is None:
        return None
    return goal_type.strip() or None
