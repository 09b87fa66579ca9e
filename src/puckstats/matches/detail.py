"""
Match detail: a match, its score events and its real score.

A match stores only the goals that have no event row. The real score
for each side is

    total = unidentified + number of score events for that team

and this module is the only place that adds the two up. Anything that
needs to show or compare a match's score should ask
MatchDetailAggregator rather than counting events itself.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from puckstats.matches.score_events import ScoreEventRecord, ScoreEventStore
from puckstats.matches.store import MatchRecord, MatchStore


@dataclass(frozen=True)
class TeamScore:
    """A (home, away) pair of goal counts."""
    home: int
    away: int

    def __add__(self, other: "TeamScore") -> "TeamScore":
        return TeamScore(home=self.home + other.home, away=self.away + other.away)


@dataclass(frozen=True)
class MatchDetail:
    """
    Read model for a single match page.

    Attributes:
        match: The match row with display names
        events: Score events in game order
        home_events: The subset of events credited to the home team
        away_events: The subset of events credited to the away team
        unidentified: Stored goals with no event row
        identified: Goals that have an event row
        total: unidentified + identified
    """
    match: MatchRecord
    events: list[ScoreEventRecord]
    home_events: list[ScoreEventRecord]
    away_events: list[ScoreEventRecord]
    unidentified: TeamScore
    identified: TeamScore
    total: TeamScore

    @property
    def winner_team_id(self) -> Optional[int]:
        """Team with the higher total, or None for a tie."""
        if self.total.home > self.total.away:
            return self.match.home_team_id
        if self.total.away > self.total.home:
            return self.match.away_team_id
        return None


class MatchDetailAggregator:
    """Builds MatchDetail read models from the match and score event stores."""

    def __init__(self, db: Session):
        self.matches = MatchStore(db)
        self.score_events = ScoreEventStore(db)

    def get_detail(self, match_id: int) -> Optional[MatchDetail]:
        """
        Load a match with its events and computed score.

        Returns:
            MatchDetail, or None if the match does not exist
        """
        match = self.matches.get(match_id)
        if match is None:
            return None

        events = self.score_events.list_for_match(match_id)

        # Events are always credited to one of the two teams (enforced on write)
        home_events = [e for e in events if e.team_id == match.home_team_id]
        away_events = [e for e in events if e.team_id == match.away_team_id]

        unidentified = TeamScore(
            home=match.home_score_unidentified,
            away=match.away_score_unidentified,
        )
        identified = TeamScore(home=len(home_events), away=len(away_events))

        return MatchDetail(
            match=match,
            events=events,
            home_events=home_events,
            away_events=away_events,
            unidentified=unidentified,
            identified=identified,
            total=unidentified + identified,
        )
