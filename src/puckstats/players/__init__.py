"""
Player listings and statistics.

Usage:
    from puckstats.players import PlayerStatsAggregator

    stats = PlayerStatsAggregator(session)
    for row in stats.season_stats(player_id):
        print(row.season_name, row.points)
"""

from puckstats.players.stats import (
    PlayerEventTotals,
    PlayerScoringEventView,
    PlayerScoringFilters,
    PlayerSeasonStats,
    PlayerStatsAggregator,
    RoleCategory,
    ScoringEventSortField,
)
from puckstats.players.store import PlayerFilters, PlayerRecord, PlayerSortField, PlayerStore

__all__ = [
    "PlayerEventTotals",
    "PlayerScoringEventView",
    "PlayerScoringFilters",
    "PlayerSeasonStats",
    "PlayerStatsAggregator",
    "RoleCategory",
    "ScoringEventSortField",
    "PlayerFilters",
    "PlayerRecord",
    "PlayerSortField",
    "PlayerStore",
]
