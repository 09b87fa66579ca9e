"""
Team participations and player contracts.

Usage:
    from puckstats.rosters import TeamParticipationService

    participation_id = TeamParticipationService(session).find_or_create(team_id, season_id)
"""

from puckstats.rosters.resolver import (
    AssociationResolver,
    ContractRecord,
    ParticipationRecord,
    PlayerContractService,
    TeamParticipationService,
)

__all__ = [
    "AssociationResolver",
    "ContractRecord",
    "ParticipationRecord",
    "PlayerContractService",
    "TeamParticipationService",
]
