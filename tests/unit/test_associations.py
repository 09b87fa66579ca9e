"""
Unit tests for the find-or-create association services.
"""

import pytest

from puckstats.db.models import PlayerContract, TeamParticipation
from puckstats.errors import ConflictError, ReferentialError
from puckstats.rosters import AssociationResolver, PlayerContractService, TeamParticipationService


@pytest.fixture
def participations(db_session):
    return TeamParticipationService(db_session)


@pytest.fixture
def contracts(db_session):
    return PlayerContractService(db_session)


class TestTeamParticipation:

    def test_find_or_create_is_idempotent(self, participations, league, db_session):
        first = participations.find_or_create(league.home.id, league.season.id)
        second = participations.find_or_create(league.home.id, league.season.id)

        assert first == second
        assert db_session.query(TeamParticipation).count() == 1

    def test_different_pairs_get_different_rows(self, participations, league, db_session):
        a = participations.find_or_create(league.home.id, league.season.id)
        b = participations.find_or_create(league.away.id, league.season.id)
        assert a != b
        assert db_session.query(TeamParticipation).count() == 2

    def test_hard_create_rejects_duplicate(self, participations, league, db_session):
        participations.create(league.home.id, league.season.id)
        with pytest.raises(ConflictError):
            participations.create(league.home.id, league.season.id)
        # Session is still usable after the failed insert
        assert db_session.query(TeamParticipation).count() == 1

    def test_unknown_team_or_season(self, participations, league):
        with pytest.raises(ReferentialError) as exc_info:
            participations.find_or_create(999, league.season.id)
        assert exc_info.value.entity == "team"

        with pytest.raises(ReferentialError) as exc_info:
            participations.find_or_create(league.home.id, 999)
        assert exc_info.value.entity == "season"

    def test_existence_checks_are_injectable(self, db_session, league):
        service = TeamParticipationService(
            db_session,
            team_exists=lambda team_id: False,
            season_exists=lambda season_id: True,
        )
        with pytest.raises(ReferentialError):
            service.find_or_create(league.home.id, league.season.id)

    def test_lost_race_returns_existing_row(self, participations, league, db_session, monkeypatch):
        """
        Simulate a concurrent insert: the lookup misses, but the row is
        already there by the time we insert.
        """
        winner = participations.find_or_create(league.home.id, league.season.id)

        resolver = participations.resolver
        real_find = resolver.find
        calls = []

        def stale_find(**pair):
            calls.append(pair)
            if len(calls) == 1:
                return None
            return real_find(**pair)

        monkeypatch.setattr(resolver, "find", stale_find)

        loser = participations.find_or_create(league.home.id, league.season.id)

        assert loser == winner
        assert len(calls) == 2
        assert db_session.query(TeamParticipation).count() == 1

    def test_teams_for_season_and_delete(self, participations, league):
        home = participations.find_or_create(league.home.id, league.season.id)
        participations.find_or_create(league.third.id, league.season.id)

        assert [r.team_name for r in participations.teams_for_season(league.season.id)] == [
            "Canada", "Finland",
        ]

        assert participations.delete(home) is True
        assert participations.delete(home) is False
        assert [r.team_name for r in participations.teams_for_season(league.season.id)] == ["Canada"]


class TestPlayerContract:

    @pytest.fixture
    def participation_id(self, participations, league):
        return participations.find_or_create(league.home.id, league.season.id)

    def test_find_or_create_is_idempotent(self, contracts, participation_id, league, db_session):
        first = contracts.find_or_create(participation_id, league.skater.id)
        second = contracts.find_or_create(participation_id, league.skater.id)
        assert first == second
        assert db_session.query(PlayerContract).count() == 1

    def test_hard_create_rejects_duplicate(self, contracts, participation_id, league):
        contracts.create(participation_id, league.skater.id)
        with pytest.raises(ConflictError):
            contracts.create(participation_id, league.skater.id)

    def test_unknown_references(self, contracts, participation_id, league):
        with pytest.raises(ReferentialError) as exc_info:
            contracts.find_or_create(999, league.skater.id)
        assert exc_info.value.entity == "team_participation"

        with pytest.raises(ReferentialError) as exc_info:
            contracts.find_or_create(participation_id, 999)
        assert exc_info.value.entity == "player"

    def test_roster(self, contracts, participation_id, league):
        contracts.find_or_create(participation_id, league.skater.id)
        contracts.find_or_create(participation_id, league.defender.id)

        roster = contracts.roster(participation_id)
        assert [(c.player_name, c.position) for c in roster] == [
            ("Miro Heiskanen", "D"),
            ("Mikko Rantanen", "F"),
        ]

    def test_deleting_participation_removes_contracts(self, contracts, participations, participation_id, league, db_session):
        contracts.find_or_create(participation_id, league.skater.id)
        participations.delete(participation_id)
        assert db_session.query(PlayerContract).count() == 0


def test_resolver_rejects_wrong_key(db_session):
    resolver = AssociationResolver(db_session, TeamParticipation, ("team_id", "season_id"))
    with pytest.raises(TypeError):
        resolver.find(team_id=1)
