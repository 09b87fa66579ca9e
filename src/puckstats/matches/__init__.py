"""
Matches and their score events.

Usage:
    from puckstats.matches import MatchStore, MatchDetailAggregator

    detail = MatchDetailAggregator(session).get_detail(match_id)
    print(detail.total.home, detail.total.away)
"""

from puckstats.matches.detail import MatchDetail, MatchDetailAggregator, TeamScore
from puckstats.matches.score_events import ScoreEventDraft, ScoreEventRecord, ScoreEventStore
from puckstats.matches.store import (
    MatchDraft,
    MatchFilters,
    MatchRecord,
    MatchSortField,
    MatchStore,
)

__all__ = [
    "MatchDetail",
    "MatchDetailAggregator",
    "TeamScore",
    "ScoreEventDraft",
    "ScoreEventRecord",
    "ScoreEventStore",
    "MatchDraft",
    "MatchFilters",
    "MatchRecord",
    "MatchSortField",
    "MatchStore",
]
