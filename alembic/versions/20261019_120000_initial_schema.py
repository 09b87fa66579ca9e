"""Initial schema: reference tables, rosters, matches and score events

Revision ID: 3c9e1f4a7b20
Revises:
Create Date: 2026-10-19 12:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# Revision identifiers, used by Alembic
revision: str = '3c9e1f4a7b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        'countries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('iso2_code', sa.String(length=2), nullable=True),
    )

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('country_id', sa.Integer(), sa.ForeignKey('countries.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'seasons',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('idx_seasons_event', 'seasons', ['event_id'])

    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('short_name', sa.String(length=50), nullable=True),
        sa.Column('country_id', sa.Integer(), sa.ForeignKey('countries.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('country_id', sa.Integer(), sa.ForeignKey('countries.id'), nullable=True),
        sa.Column('position', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('idx_players_name', 'players', ['name'])

    op.create_table(
        'team_participations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('season_id', sa.Integer(), sa.ForeignKey('seasons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('team_id', 'season_id', name='uq_team_participation_team_season'),
    )
    op.create_index('idx_team_participations_season', 'team_participations', ['season_id'])

    op.create_table(
        'player_contracts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'team_participation_id', sa.Integer(),
            sa.ForeignKey('team_participations.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint(
            'team_participation_id', 'player_id', name='uq_player_contract_participation_player'
        ),
    )
    op.create_index('idx_player_contracts_player', 'player_contracts', ['player_id'])

    op.create_table(
        'matches',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('season_id', sa.Integer(), sa.ForeignKey('seasons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('home_team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('away_team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('home_score_unidentified', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('away_score_unidentified', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('match_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='scheduled'),
        sa.Column('venue', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('home_team_id != away_team_id', name='ck_matches_distinct_teams'),
        sa.CheckConstraint(
            'home_score_unidentified >= 0 AND away_score_unidentified >= 0',
            name='ck_matches_unidentified_non_negative',
        ),
    )
    op.create_index('idx_matches_season', 'matches', ['season_id'])
    op.create_index('idx_matches_home_team', 'matches', ['home_team_id'])
    op.create_index('idx_matches_away_team', 'matches', ['away_team_id'])
    op.create_index('idx_matches_match_date', 'matches', ['match_date'])
    op.create_index('idx_matches_status', 'matches', ['status'])

    op.create_table(
        'score_events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('match_id', sa.Integer(), sa.ForeignKey('matches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('scorer_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=True),
        sa.Column('assist1_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=True),
        sa.Column('assist2_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=True),
        sa.Column('period', sa.Integer(), nullable=False),
        sa.Column('time_minutes', sa.Integer(), nullable=True),
        sa.Column('time_seconds', sa.Integer(), nullable=True),
        sa.Column('goal_type', sa.String(length=30), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('period >= 1', name='ck_score_events_period_positive'),
        sa.CheckConstraint(
            'time_minutes IS NULL OR (time_minutes >= 0 AND time_minutes <= 60)',
            name='ck_score_events_time_minutes',
        ),
        sa.CheckConstraint(
            'time_seconds IS NULL OR (time_seconds >= 0 AND time_seconds <= 59)',
            name='ck_score_events_time_seconds',
        ),
    )
    op.create_index('idx_score_events_match', 'score_events', ['match_id', 'team_id'])
    op.create_index('idx_score_events_scorer', 'score_events', ['scorer_id'])
    op.create_index('idx_score_events_assist1', 'score_events', ['assist1_id'])
    op.create_index('idx_score_events_assist2', 'score_events', ['assist2_id'])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('score_events')
    op.drop_table('matches')
    op.drop_table('player_contracts')
    op.drop_table('team_participations')
    op.drop_table('players')
    op.drop_table('teams')
    op.drop_table('seasons')
    op.drop_table('events')
    op.drop_table('countries')
