"""
Database module for Puckstats.

Provides SQLAlchemy ORM models and session management.

Usage:
    from puckstats.db import get_session, Match, ScoreEvent

    with get_session() as session:
        matches = session.query(Match).all()
"""

from puckstats.db.models import (
    Base,
    Country,
    Event,
    Season,
    Team,
    Player,
    TeamParticipation,
    PlayerContract,
    Match,
    ScoreEvent,
)
from puckstats.db.session import configure_sqlite, get_session, get_engine, SessionLocal

__all__ = [
    # Base
    "Base",
    # Models
    "Country",
    "Event",
    "Season",
    "Team",
    "Player",
    "TeamParticipation",
    "PlayerContract",
    "Match",
    "ScoreEvent",
    # Session
    "configure_sqlite",
    "get_session",
    "get_engine",
    "SessionLocal",
]
