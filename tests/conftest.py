"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixtures for all tests.
"""

from dataclasses import dataclass
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from puckstats.db.models import Base, Country, Event, Player, Season, Team
from puckstats.db.session import configure_sqlite


@pytest.fixture
def test_engine():
    """
    Create a clean in-memory database for each test.

    Foreign keys and SAVEPOINTs are switched on the same way the
    application engine does it for SQLite.
    """
    engine = configure_sqlite(create_engine("sqlite:///:memory:", echo=False))
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(test_engine):
    """A session on the in-memory database, rolled back after the test."""
    Session = sessionmaker(bind=test_engine, autoflush=False)
    session = Session()
    yield session
    session.rollback()
    session.close()


class Seed:
    """Small factory for the reference rows most tests need."""

    def __init__(self, session: Session):
        self.session = session

    def _add(self, row):
        self.session.add(row)
        self.session.flush()
        return row

    def country(self, name: str = "Finland", iso2_code: Optional[str] = "FI") -> Country:
        return self._add(Country(name=name, iso2_code=iso2_code))

    def event(self, name: str = "World Championship") -> Event:
        return self._add(Event(name=name))

    def season(self, event: Event, year: int = 2024, display_name: Optional[str] = None) -> Season:
        return self._add(Season(event_id=event.id, year=year, display_name=display_name))

    def team(self, name: str, country: Optional[Country] = None) -> Team:
        return self._add(Team(name=name, country_id=country.id if country else None))

    def player(self, name: str, country: Optional[Country] = None, position: Optional[str] = None) -> Player:
        return self._add(
            Player(name=name, country_id=country.id if country else None, position=position)
        )


@pytest.fixture
def seed(db_session):
    return Seed(db_session)


@dataclass
class League:
    event: Event
    season: Season
    home: Team
    away: Team
    third: Team
    skater: Player
    winger: Player
    defender: Player


@pytest.fixture
def league(seed):
    """One event and season, three teams and three players."""
    finland = seed.country("Finland", "FI")
    sweden = seed.country("Sweden", "SE")
    event = seed.event("World Championship")
    season = seed.season(event, 2024)
    return League(
        event=event,
        season=season,
        home=seed.team("Finland", finland),
        away=seed.team("Sweden", sweden),
        third=seed.team("Canada"),
        skater=seed.player("Mikko Rantanen", finland, "F"),
        winger=seed.player("Sebastian Aho", finland, "F"),
        defender=seed.player("Miro Heiskanen", finland, "D"),
    )
