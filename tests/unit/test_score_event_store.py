"""
Unit tests for ScoreEventStore.
"""

import pytest
from sqlalchemy import update

from puckstats.db.models import Match, ScoreEvent
from puckstats.errors import ReferentialError, ValidationError
from puckstats.matches import MatchDraft, MatchStore, ScoreEventDraft, ScoreEventStore


@pytest.fixture
def store(db_session):
    return ScoreEventStore(db_session)


@pytest.fixture
def match_id(db_session, league):
    return MatchStore(db_session).create(
        MatchDraft(
            season_id=league.season.id,
            home_team_id=league.home.id,
            away_team_id=league.away.id,
            home_score_unidentified=2,
        )
    )


class TestCreate:

    def test_create_with_scorer_and_assists(self, store, league, match_id):
        event_id = store.create(
            ScoreEventDraft(
                match_id=match_id,
                team_id=league.home.id,
                period=2,
                scorer_id=league.skater.id,
                assist1_id=league.winger.id,
                assist2_id=league.defender.id,
                time_minutes=7,
                time_seconds=5,
                goal_type=" power_play ",
            )
        )

        record = store.get(event_id)
        assert record.team_name == "Finland"
        assert record.scorer_name == "Mikko Rantanen"
        assert record.assist1_name == "Sebastian Aho"
        assert record.assist2_name == "Miro Heiskanen"
        assert record.goal_type == "power_play"
        assert record.clock == "07:05"

    def test_unknown_scorer_is_allowed(self, store, league, match_id):
        event_id = store.create(ScoreEventDraft(match_id=match_id, team_id=league.away.id, period=3))
        record = store.get(event_id)
        assert record.scorer_id is None
        assert record.scorer_name is None
        assert record.clock is None

    def test_create_does_not_touch_unidentified_score(self, store, league, match_id, db_session):
        store.create(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=1))
        assert db_session.get(Match, match_id).home_score_unidentified == 2

    @pytest.mark.parametrize("period", [0, -1, True, "1"])
    def test_non_positive_period_rejected(self, store, league, match_id, db_session, period):
        with pytest.raises(ValidationError):
            store.create(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=period))
        assert db_session.query(ScoreEvent).count() == 0

    def test_overtime_and_shootout_periods_accepted(self, store, league, match_id):
        store.create(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=4))
        store.create(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=5))
        assert [e.period for e in store.list_for_match(match_id)] == [4, 5]

    @pytest.mark.parametrize("minutes,seconds", [(61, 0), (-1, 0), (10, 60), (10, -1)])
    def test_clock_out_of_range_rejected(self, store, league, match_id, minutes, seconds):
        with pytest.raises(ValidationError):
            store.create(
                ScoreEventDraft(
                    match_id=match_id, team_id=league.home.id, period=1,
                    time_minutes=minutes, time_seconds=seconds,
                )
            )

    def test_team_must_play_in_match(self, store, league, match_id):
        with pytest.raises(ValidationError):
            store.create(ScoreEventDraft(match_id=match_id, team_id=league.third.id, period=1))

    def test_same_player_twice_rejected(self, store, league, match_id):
        with pytest.raises(ValidationError):
            store.create(
                ScoreEventDraft(
                    match_id=match_id, team_id=league.home.id, period=1,
                    scorer_id=league.skater.id, assist2_id=league.skater.id,
                )
            )

    @pytest.mark.parametrize(
        "field,entity",
        [
            ("match_id", "match"),
            ("team_id", "team"),
            ("scorer_id", "scorer"),
            ("assist1_id", "assist1"),
            ("assist2_id", "assist2"),
        ],
    )
    def test_missing_reference_names_the_field(self, store, league, match_id, field, entity):
        values = dict(match_id=match_id, team_id=league.home.id, period=1)
        values[field] = 9999

        with pytest.raises(ReferentialError) as exc_info:
            store.create(ScoreEventDraft(**values))

        assert exc_info.value.entity == entity
        assert exc_info.value.entity_id == 9999


class TestUpdateDelete:

    def test_update_replaces_fields(self, store, league, match_id):
        event_id = store.create(
            ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=1, scorer_id=league.skater.id)
        )

        assert store.update(
            event_id,
            ScoreEventDraft(
                match_id=match_id, team_id=league.home.id, period=3,
                scorer_id=league.winger.id, assist1_id=league.skater.id,
            ),
        ) is True

        record = store.get(event_id)
        assert record.period == 3
        assert record.scorer_id == league.winger.id
        assert record.assist1_id == league.skater.id

    def test_update_missing_event_returns_false(self, store, league, match_id):
        assert store.update(9999, ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=1)) is False

    def test_update_with_bad_player_raises(self, store, league, match_id):
        event_id = store.create(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=1))
        with pytest.raises(ReferentialError) as exc_info:
            store.update(
                event_id,
                ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=1, assist1_id=9999),
            )
        assert exc_info.value.entity == "assist1"

    def test_delete(self, store, league, match_id):
        event_id = store.create(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=1))
        assert store.delete(event_id) is True
        assert store.get(event_id) is None
        assert store.delete(event_id) is False


class TestListForMatch:

    def test_game_order_with_untimed_events_last_in_period(self, store, league, match_id):
        def add(period, minutes=None, seconds=None):
            return store.create(
                ScoreEventDraft(
                    match_id=match_id, team_id=league.home.id, period=period,
                    time_minutes=minutes, time_seconds=seconds,
                )
            )

        untimed_p1 = add(1)
        late_p2 = add(2, 15, 0)
        early_p1 = add(1, 3, 40)
        same_minute_later = add(1, 3, 50)
        early_p2 = add(2, 1, 0)
        untimed_p1_second = add(1)

        ordered = [e.id for e in store.list_for_match(match_id)]
        assert ordered == [
            early_p1, same_minute_later, untimed_p1, untimed_p1_second, early_p2, late_p2,
        ]

    def test_other_matches_excluded(self, store, league, match_id, db_session):
        other = MatchStore(db_session).create(
            MatchDraft(season_id=league.season.id, home_team_id=league.home.id, away_team_id=league.third.id)
        )
        store.create(ScoreEventDraft(match_id=other, team_id=league.third.id, period=1))
        assert store.list_for_match(match_id) == []


class TestIdentifyGoal:

    def test_moves_goal_from_unidentified_to_event(self, store, league, match_id, db_session):
        event_id = store.identify_goal(
            ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=1, scorer_id=league.skater.id)
        )

        assert store.get(event_id).scorer_id == league.skater.id
        assert db_session.get(Match, match_id).home_score_unidentified == 1

    def test_no_unidentified_goals_left(self, store, league, match_id, db_session):
        with pytest.raises(ValidationError):
            store.identify_goal(ScoreEventDraft(match_id=match_id, team_id=league.away.id, period=1))
        assert db_session.query(ScoreEvent).count() == 0

    def test_last_goal_cannot_be_identified_twice(self, store, league, match_id, db_session):
        match = db_session.get(Match, match_id)
        store.identify_goal(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=1))
        store.identify_goal(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=2))

        with pytest.raises(ValidationError):
            store.identify_goal(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=3))

        assert match.home_score_unidentified == 0
        assert db_session.query(ScoreEvent).count() == 2

    def test_decrement_reads_the_stored_value(self, store, league, match_id, db_session):
        """
        Another session already used the last unidentified goals, but this
        session's copy of the match still shows two left.
        """
        match = db_session.get(Match, match_id)
        assert match.home_score_unidentified == 2
        db_session.execute(
            update(Match)
            .where(Match.id == match_id)
            .values(home_score_unidentified=0)
            .execution_options(synchronize_session=False)
        )

        with pytest.raises(ValidationError):
            store.identify_goal(ScoreEventDraft(match_id=match_id, team_id=league.home.id, period=1))

        assert db_session.query(ScoreEvent).count() == 0
        assert match.home_score_unidentified == 0
