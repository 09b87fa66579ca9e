#!/usr/bin/env python3
"""
Print a player's scoring statistics.

Shows one line per season the player scored or assisted in, followed
by career totals per event. With --events, also lists the individual
goals and assists (newest first).

Usage:
    python scripts/player_stats.py 42
    python scripts/player_stats.py 42 --events --role goals --page 2
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from puckstats.config import settings
from puckstats.db.session import get_session
from puckstats.paging import Paging, SortOrder
from puckstats.players import PlayerScoringFilters, PlayerStatsAggregator, PlayerStore

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def print_stats(player_id: int, show_events: bool, role: str, sort: str, order: str, page: int) -> int:
    with get_session() as session:
        player = PlayerStore(session).get(player_id)
        if player is None:
            logger.error("No player with id %d", player_id)
            return 1

        stats = PlayerStatsAggregator(session)
        print(f"{player.name} ({player.country_name or 'unknown country'})")
        print()
        print(f"{'Event':<30} {'Season':<12} {'G':>4} {'A':>4} {'P':>4}")
        print("-" * 58)
        for row in stats.season_stats(player_id):
            print(f"{row.event_name:<30} {row.season_name:<12} {row.goals:>4} {row.assists:>4} {row.points:>4}")

        print()
        print("Career by event:")
        for total in stats.event_totals(player_id):
            print(
                f"  {total.event_name:<28} {total.seasons:>2} seasons "
                f"{total.goals:>4} G {total.assists:>4} A {total.points:>4} P"
            )

        if show_events:
            result = stats.scoring_events(
                player_id,
                PlayerScoringFilters(role=role),
                sort_field=sort,
                sort_order=SortOrder.parse(order),
                paging=Paging.new(page=page),
            )
            print()
            print(f"Scoring events (page {result.page}/{result.total_pages}, {result.total} total):")
            for view in result.items:
                when = view.match_date.strftime("%Y-%m-%d") if view.match_date else "----------"
                print(
                    f"  {when}  {view.home_team_name} vs {view.away_team_name}  "
                    f"P{view.period}  {view.role}"
                )

    return 0


def main():
    parser = argparse.ArgumentParser(description="Show a player's goals, assists and points")
    parser.add_argument("player_id", type=int, help="Player ID")
    parser.add_argument("--events", action="store_true", help="Also list individual goals and assists")
    parser.add_argument("--role", default="all", help="goals, assists or all (default: all)")
    parser.add_argument("--sort", default="date", help="date, event, type or period (default: date)")
    parser.add_argument("--order", default="desc", help="asc or desc (default: desc)")
    parser.add_argument("--page", type=int, default=1, help="Page of scoring events to show")
    args = parser.parse_args()

    sys.exit(print_stats(args.player_id, args.events, args.role, args.sort, args.order, args.page))


if __name__ == "__main__":
    main()
