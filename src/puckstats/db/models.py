"""
SQLAlchemy ORM models for Puckstats.

This module defines all database tables and their relationships.
The schema is built around matches and their individually recorded
scoring events; every statistic is derived from those events on demand.

Key design decisions:
- A match stores only the *unidentified* part of each team's score
  (goals with no individual record, e.g. legacy results). The per-event
  count is never stored, so the total cannot drift.
- Score events cascade-delete with their match at the database level.
- Association rows (team participation, player contract) carry a unique
  constraint on their pair so find-or-create can rely on the database
  to settle races.
- Display names (team, season, event) are joined in at query time; the
  core tables only hold foreign keys.

Tables:
- countries: Country reference data
- events: Competitions (e.g. "Olympics", "World Championship")
- seasons: Yearly instances of an event
- teams: Teams (national or club)
- players: Player records
- team_participations: Team taking part in a season
- player_contracts: Player on a team participation's roster
- matches: Matches between two teams in a season
- score_events: Individually recorded goals with scorer and assists
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from puckstats.match_statuses import DEFAULT_MATCH_STATUS


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# =============================================================================
# Reference Models
# =============================================================================

class Country(Base):
    """Country reference data used for team and player display."""
    __tablename__ = "countries"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    iso2_code: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)

    def __repr__(self) -> str:
        return f"<Country(id={self.id}, name='{self.name}')>"


class Event(Base):
    """
    A recurring competition (e.g. "Olympics", "World Championship").

    Each yearly instance is stored in seasons. The event name is what
    match and scoring listings sort on when asked to sort by event.
    """
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country_id: Mapped[Optional[int]] = mapped_column(ForeignKey("countries.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    seasons: Mapped[list["Season"]] = relationship(back_populates="event")

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name='{self.name}')>"


class Season(Base):
    """A specific year's instance of an event."""
    __tablename__ = "seasons"

    id: Mapped[int] = mapped_column(primary_key=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Optional display override, falls back to the year
    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    event: Mapped["Event"] = relationship(back_populates="seasons")

    __table_args__ = (
        Index("idx_seasons_event", "event_id"),
    )

    @property
    def name(self) -> str:
        return self.display_name or str(self.year)

    def __repr__(self) -> str:
        return f"<Season(id={self.id}, year={self.year})>"


class Team(Base):
    """A team (national or club)."""
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    short_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    country_id: Mapped[Optional[int]] = mapped_column(ForeignKey("countries.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    country: Mapped[Optional["Country"]] = relationship()

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"


class Player(Base):
    """A player record. Scoring statistics are derived, never stored here."""
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country_id: Mapped[Optional[int]] = mapped_column(ForeignKey("countries.id"), nullable=True)

    # 'G', 'D', 'F' etc. (free-form)
    position: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    country: Mapped[Optional["Country"]] = relationship()

    __table_args__ = (
        Index("idx_players_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name='{self.name}')>"


# =============================================================================
# Association Models
# =============================================================================

class TeamParticipation(Base):
    """
    A team taking part in a season.

    At most one row per (team, season); the unique constraint is what
    makes concurrent find-or-create calls converge on a single row.
    """
    __tablename__ = "team_participations"

    id: Mapped[int] = mapped_column(primary_key=True)
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    season_id: Mapped[int] = mapped_column(
        ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    team: Mapped["Team"] = relationship()
    season: Mapped["Season"] = relationship()
    contracts: Mapped[list["PlayerContract"]] = relationship(
        back_populates="team_participation",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("team_id", "season_id", name="uq_team_participation_team_season"),
        Index("idx_team_participations_season", "season_id"),
    )

    def __repr__(self) -> str:
        return f"<TeamParticipation(team_id={self.team_id}, season_id={self.season_id})>"


class PlayerContract(Base):
    """A player on the roster of a team participation."""
    __tablename__ = "player_contracts"

    id: Mapped[int] = mapped_column(primary_key=True)
    team_participation_id: Mapped[int] = mapped_column(
        ForeignKey("team_participations.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    team_participation: Mapped["TeamParticipation"] = relationship(back_populates="contracts")
    player: Mapped["Player"] = relationship()

    __table_args__ = (
        UniqueConstraint(
            "team_participation_id", "player_id", name="uq_player_contract_participation_player"
        ),
        Index("idx_player_contracts_player", "player_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerContract(team_participation_id={self.team_participation_id}, "
            f"player_id={self.player_id})>"
        )


# =============================================================================
# Match Models
# =============================================================================

class Match(Base):
    """
    A match between two teams in a season.

    Score storage:
    - home_score_unidentified / away_score_unidentified hold goals that
      have no individual score_events row (historical results entered
      before event-level detail existed).
    - The real score is unidentified + count(score_events for the team),
      computed by MatchDetailAggregator. It is never stored.

    Status is free-form; see match_statuses for the known values.
    """
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(primary_key=True)

    season_id: Mapped[int] = mapped_column(
        ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False
    )
    home_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    away_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)

    home_score_unidentified: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    away_score_unidentified: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    match_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_MATCH_STATUS, server_default=DEFAULT_MATCH_STATUS
    )
    venue: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    season: Mapped["Season"] = relationship()
    home_team: Mapped["Team"] = relationship(foreign_keys=[home_team_id])
    away_team: Mapped["Team"] = relationship(foreign_keys=[away_team_id])
    score_events: Mapped[list["ScoreEvent"]] = relationship(
        back_populates="match",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_matches_season", "season_id"),
        Index("idx_matches_home_team", "home_team_id"),
        Index("idx_matches_away_team", "away_team_id"),
        Index("idx_matches_match_date", "match_date"),
        Index("idx_matches_status", "status"),
        CheckConstraint("home_team_id != away_team_id", name="ck_matches_distinct_teams"),
        CheckConstraint(
            "home_score_unidentified >= 0 AND away_score_unidentified >= 0",
            name="ck_matches_unidentified_non_negative",
        ),
    )

    def __repr__(self) -> str:
        return f"<Match(id={self.id}, status='{self.status}')>"


class ScoreEvent(Base):
    """
    An individually recorded goal.

    scorer_id may be NULL: the goal is tracked but the scorer is unknown.
    That is different from an unidentified goal, which has no row at all.

    Period convention: 1-3 regulation, 4 = overtime, 5 = shootout.
    """
    __tablename__ = "score_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
    )
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)

    scorer_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    assist1_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    assist2_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)

    period: Mapped[int] = mapped_column(Integer, nullable=False)
    time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    time_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # 'even_strength', 'power_play', 'short_handed', 'empty_net', ... (free-form)
    goal_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    match: Mapped["Match"] = relationship(back_populates="score_events")
    team: Mapped["Team"] = relationship()
    scorer: Mapped[Optional["Player"]] = relationship(foreign_keys=[scorer_id])
    assist1: Mapped[Optional["Player"]] = relationship(foreign_keys=[assist1_id])
    assist2: Mapped[Optional["Player"]] = relationship(foreign_keys=[assist2_id])

    __table_args__ = (
        Index("idx_score_events_match", "match_id", "team_id"),
        Index("idx_score_events_scorer", "scorer_id"),
        Index("idx_score_events_assist1", "assist1_id"),
        Index("idx_score_events_assist2", "assist2_id"),
        CheckConstraint("period >= 1", name="ck_score_events_period_positive"),
        CheckConstraint(
            "time_minutes IS NULL OR (time_minutes >= 0 AND time_minutes <= 60)",
            name="ck_score_events_time_minutes",
        ),
        CheckConstraint(
            "time_seconds IS NULL OR (time_seconds >= 0 AND time_seconds <= 59)",
            name="ck_score_events_time_seconds",
        ),
    )

    def __repr__(self) -> str:
        return f"<ScoreEvent(id={self.id}, match_id={self.match_id}, period={self.period})>"
