"""
Existence checks consumed by the write paths.

Stores that create association rows need to know whether a team,
season or player id is real before inserting. They receive plain
``Exists`` callables rather than reaching into other tables directly,
so tests can hand them a lambda over a set of ids.

Usage:
    checks = ExistenceChecks(session)
    service = TeamParticipationService(
        session,
        team_exists=checks.team_exists,
        season_exists=checks.season_exists,
    )
"""

from typing import Callable

from sqlalchemy.orm import Session

from puckstats.db.models import Player, Season, Team

Exists = Callable[[int], bool]


class ExistenceChecks:
    """SQL-backed implementations of the ``Exists`` capability."""

    def __init__(self, db: Session):
        self.db = db

    def _exists(self, model, entity_id: int) -> bool:
        return self.db.query(model.id).filter(model.id == entity_id).first() is not None

    def team_exists(self, team_id: int) -> bool:
        return self._exists(Team, team_id)

    def season_exists(self, season_id: int) -> bool:
        return self._exists(Season, season_id)

    def player_exists(self, player_id: int) -> bool:
        return self._exists(Player, player_id)
