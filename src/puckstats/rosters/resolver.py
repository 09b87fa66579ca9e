"""
Find-or-create for association rows.

Team participations (team in a season) and player contracts (player on
a team participation's roster) are unique pairings. Callers usually do
not care whether the row already existed; they just need its id.

find_or_create() works in three steps:

1. Look the pair up. If it exists, return its id.
2. Otherwise insert it inside a SAVEPOINT and flush.
3. If the insert hits the pair's unique constraint, another caller
   inserted the same pair between steps 1 and 2. Roll back the
   savepoint and return the winner's id.

Step 3 is why each association table carries a UNIQUE constraint on its
pair: without it two concurrent callers would both insert.

create() is the strict variant: a duplicate pair raises ConflictError.
"""

import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from puckstats.db.models import Player, PlayerContract, Team, TeamParticipation
from puckstats.errors import ReferentialError, from_integrity_error
from puckstats.lookups import ExistenceChecks, Exists

logger = logging.getLogger(__name__)

M = TypeVar("M", TeamParticipation, PlayerContract)


class AssociationResolver(Generic[M]):
    """
    Idempotent creation for a model whose rows are unique on a column pair.

    Usage:
        resolver = AssociationResolver(session, TeamParticipation, ("team_id", "season_id"))
        participation_id = resolver.find_or_create(team_id=3, season_id=12)
    """

    def __init__(self, db: Session, model: type[M], key: tuple[str, str]):
        """
        Args:
            db: SQLAlchemy session; the caller owns the commit
            model: Association model class
            key: Names of the two columns that make up the unique pair
        """
        self.db = db
        self.model = model
        self.key = key

    def find(self, **pair: int) -> Optional[int]:
        """Return the id of the row for this pair, or None."""
        self._check_pair(pair)
        row = (
            self.db.query(self.model.id)
            .filter(*[getattr(self.model, column) == value for column, value in pair.items()])
            .first()
        )
        return row[0] if row is not None else None

    def find_or_create(self, **pair: int) -> int:
        """
        Return the id for this pair, inserting the row if needed.

        Safe to call any number of times, including concurrently: every
        call for the same pair returns the same id.
        """
        existing = self.find(**pair)
        if existing is not None:
            return existing

        row = self.model(**pair)
        try:
            with self.db.begin_nested():
                self.db.add(row)
                self.db.flush()
        except IntegrityError as e:
            # Lost the race, the pair now exists
            existing = self.find(**pair)
            if existing is None:
                raise from_integrity_error(e) from e
            logger.warning(
                "%s %s was inserted concurrently, using existing id %d",
                self.model.__name__, pair, existing,
            )
            return existing

        logger.info("Created %s %d for %s", self.model.__name__, row.id, pair)
        return row.id

    def create(self, **pair: int) -> int:
        """
        Insert a row for this pair.

        Raises:
            ConflictError: the pair already exists
        """
        self._check_pair(pair)
        row = self.model(**pair)
        try:
            with self.db.begin_nested():
                self.db.add(row)
                self.db.flush()
        except IntegrityError as e:
            raise from_integrity_error(e) from e

        logger.info("Created %s %d for %s", self.model.__name__, row.id, pair)
        return row.id

    def delete(self, row_id: int) -> bool:
        row = self.db.get(self.model, row_id)
        if row is None:
            return False

        with self.db.begin_nested():
            self.db.delete(row)
            self.db.flush()

        logger.info("Deleted %s %d", self.model.__name__, row_id)
        return True

    def _check_pair(self, pair: dict) -> None:
        if set(pair) != set(self.key):
            raise TypeError(
                f"{self.model.__name__} is keyed on {self.key}, got {tuple(pair)}"
            )


# =============================================================================
# Team Participation
# =============================================================================

@dataclass(frozen=True)
class ParticipationRecord:
    id: int
    team_id: int
    team_name: str
    season_id: int


class TeamParticipationService:
    """
    Teams taking part in seasons.

    Existence checks are injected so the service can be exercised with
    fakes; by default they query the session.
    """

    def __init__(
        self,
        db: Session,
        team_exists: Optional[Exists] = None,
        season_exists: Optional[Exists] = None,
    ):
        checks = ExistenceChecks(db)
        self.db = db
        self.team_exists = team_exists or checks.team_exists
        self.season_exists = season_exists or checks.season_exists
        self.resolver = AssociationResolver(db, TeamParticipation, ("team_id", "season_id"))

    def find_or_create(self, team_id: int, season_id: int) -> int:
        self._check_references(team_id, season_id)
        return self.resolver.find_or_create(team_id=team_id, season_id=season_id)

    def create(self, team_id: int, season_id: int) -> int:
        self._check_references(team_id, season_id)
        return self.resolver.create(team_id=team_id, season_id=season_id)

    def delete(self, participation_id: int) -> bool:
        """Remove a participation and its roster."""
        return self.resolver.delete(participation_id)

    def teams_for_season(self, season_id: int) -> list[ParticipationRecord]:
        rows = (
            self.db.query(TeamParticipation.id, Team.id, Team.name)
            .join(Team, TeamParticipation.team_id == Team.id)
            .filter(TeamParticipation.season_id == season_id)
            .order_by(Team.name.asc(), TeamParticipation.id.asc())
            .all()
        )
        return [
            ParticipationRecord(id=pid, team_id=team_id, team_name=name, season_id=season_id)
            for pid, team_id, name in rows
        ]

    def _check_references(self, team_id: int, season_id: int) -> None:
        if not self.team_exists(team_id):
            raise ReferentialError("team", team_id)
        if not self.season_exists(season_id):
            raise ReferentialError("season", season_id)


# =============================================================================
# Player Contract
# =============================================================================

@dataclass(frozen=True)
class ContractRecord:
    id: int
    player_id: int
    player_name: str
    position: Optional[str]


class PlayerContractService:
    """Players on the roster of a team participation."""

    def __init__(self, db: Session, player_exists: Optional[Exists] = None):
        self.db = db
        self.player_exists = player_exists or ExistenceChecks(db).player_exists
        self.resolver = AssociationResolver(
            db, PlayerContract, ("team_participation_id", "player_id")
        )

    def find_or_create(self, team_participation_id: int, player_id: int) -> int:
        self._check_references(team_participation_id, player_id)
        return self.resolver.find_or_create(
            team_participation_id=team_participation_id, player_id=player_id
        )

    def create(self, team_participation_id: int, player_id: int) -> int:
        self._check_references(team_participation_id, player_id)
        return self.resolver.create(
            team_participation_id=team_participation_id, player_id=player_id
        )

    def delete(self, contract_id: int) -> bool:
        return self.resolver.delete(contract_id)

    def roster(self, team_participation_id: int) -> list[ContractRecord]:
        """Players under contract for a participation, by name."""
        rows = (
            self.db.query(PlayerContract.id, Player.id, Player.name, Player.position)
            .join(Player, PlayerContract.player_id == Player.id)
            .filter(PlayerContract.team_participation_id == team_participation_id)
            .order_by(Player.name.asc(), PlayerContract.id.asc())
            .all()
        )
        return [
            ContractRecord(id=cid, player_id=player_id, player_name=name, position=position)
            for cid, player_id, name, position in rows
        ]

    def _check_references(self, team_participation_id: int, player_id: int) -> None:
        if self.db.get(TeamParticipation, team_participation_id) is None:
            raise ReferentialError("team_participation", team_participation_id)
        if not self.player_exists(player_id):
            raise ReferentialError("player", player_id)
