"""Tests for the FPL response -> record mappers."""
from datetime import datetime, timezone

import pytest

from conftest import (
    element_payload,
    event_payload,
    fixture_payload,
    live_element_payload,
    phase_payload,
    standings_page,
    team_payload,
)
from fpl_sync.core.result import Ok
from fpl_sync.services.sync.mappers import (
    map_all,
    map_classic_league,
    map_event,
    map_event_live,
    map_fixture,
    map_phase,
    map_player,
    map_player_stat,
    map_player_value,
    map_team,
    parse_number,
    parse_timestamp,
)
from fpl_sync.services.sync.schemas import (
    ClassicLeagueResponse,
    ElementResponse,
    EventResponse,
    FixtureResponse,
    LiveElementResponse,
    PhaseResponse,
    TeamResponse,
)


class TestFieldParsers:

    @pytest.mark.parametrize("raw, expected", [("2.5", 2.5), ("0", 0.0), ("", None), ("  ", None), (None, None)])
    def test_parse_number(self, raw, expected):
        assert parse_number(raw, "form") == Ok(expected)

    @pytest.mark.parametrize("raw", ["abc", "nan", "inf", "-Infinity"])
    def test_parse_number_rejects(self, raw):
        result = parse_number(raw, "form")
        assert result.is_err()
        assert result.error.startswith("form:")

    def test_parse_timestamp_utc(self):
        result = parse_timestamp("2025-08-15T17:30:00Z", "deadline_time")
        assert result == Ok(datetime(2025, 8, 15, 17, 30, tzinfo=timezone.utc))

    def test_parse_timestamp_rejects_garbage(self):
        assert parse_timestamp("next friday", "deadline_time").is_err()
        assert parse_timestamp(None, "deadline_time") == Ok(None)


class TestEntityMappers:

    def test_map_event(self):
        event = map_event(EventResponse.model_validate(event_payload(5, current=5))).value

        assert event.id == 5
        assert event.is_current and not event.finished
        assert event.deadline_time.tzinfo is not None
        assert event.chip_plays == [{"chip_name": "bboost", "num_played": 1005}]
        assert event.top_element_info == {"id": 2, "points": 15}
        assert event.cup_league_create is False

    def test_map_team(self):
        team = map_team(TeamResponse.model_validate(team_payload(3))).value
        assert (team.id, team.short_name, team.pulse_id) == (3, "T03", 203)

    def test_map_player_start_price(self):
        player = map_player(ElementResponse.model_validate(element_payload(7, team_id=4))).value

        assert player.team_id == 4
        assert player.price == 57
        assert player.start_price == 56

    def test_map_player_negative_price(self):
        payload = {**element_payload(7), "now_cost": -1}
        assert map_player(ElementResponse.model_validate(payload)).is_err()

    def test_map_player_stat_parses_decimals(self):
        stat = map_player_stat(ElementResponse.model_validate(element_payload(7)), event_id=5).value

        assert (stat.element_id, stat.event_id) == (7, 5)
        assert stat.form == 2.5
        assert stat.expected_goals == 0.45
        assert stat.expected_goals_conceded is None
        assert stat.cache_field == "7_5"

    def test_map_player_stat_rejects_bad_decimal(self):
        payload = element_payload(7, form="hot")
        result = map_player_stat(ElementResponse.model_validate(payload), event_id=5)
        assert "form" in result.error

    def test_map_fixture(self):
        fixture = map_fixture(FixtureResponse.model_validate(fixture_payload(1, 1, 1, 2, 2, 1))).value

        assert (fixture.team_h, fixture.team_a) == (1, 2)
        assert (fixture.team_h_score, fixture.team_a_score) == (2, 1)
        assert fixture.finished

    def test_map_fixture_without_event(self):
        fixture = map_fixture(FixtureResponse.model_validate(fixture_payload(4, None, 4, 1))).value
        assert fixture.event_id is None
        assert fixture.kickoff_time is None

    def test_map_fixture_same_team_twice(self):
        assert map_fixture(FixtureResponse.model_validate(fixture_payload(9, 1, 3, 3))).is_err()

    def test_map_event_live(self):
        live = map_event_live(LiveElementResponse.model_validate(live_element_payload(4, points=11)), 5).value

        assert (live.event_id, live.element_id, live.total_points) == (5, 4, 11)
        assert live.ict_index == 8.5
        assert live.cache_field == "4"

    def test_map_classic_league(self):
        response = ClassicLeagueResponse.model_validate(standings_page(314, 1, 3, False))

        league = map_classic_league(response).value

        assert league.id == 314
        assert league.created == datetime(2025, 7, 20, 10, 0, tzinfo=timezone.utc)
        assert [s.entry for s in league.standings] == [10001, 10002, 10003]

    def test_map_classic_league_duplicate_entries(self):
        payload = standings_page(314, 1, 2, False)
        payload["standings"]["results"][1]["entry"] = payload["standings"]["results"][0]["entry"]

        assert map_classic_league(ClassicLeagueResponse.model_validate(payload)).is_err()

    def test_map_phase(self):
        phase = map_phase(PhaseResponse.model_validate(phase_payload(2, "August", 1, 3, 98))).value

        assert (phase.id, phase.name, phase.start_event, phase.stop_event) == (2, "August", 1, 3)
        assert phase.highest_score == 98

    def test_map_phase_inverted_range(self):
        result = map_phase(PhaseResponse.model_validate(phase_payload(4, "October", 9, 7)))
        assert "start_event" in result.error


class TestPlayerValueMapper:
    """Price against the last value recorded before the change date."""

    @pytest.fixture
    def element(self):
        return ElementResponse.model_validate(element_payload(7, team_id=4))

    def test_first_sighting_starts_at_current_price(self, element):
        value = map_player_value(element, 5, "20250815", previous=None).value

        assert (value.element_id, value.element_type, value.team_id, value.event_id) == (7, 4, 4, 5)
        assert (value.value, value.last_value) == (57, 57)
        assert value.change_type == "start"
        assert value.change_date == "20250815"
        assert value.cache_field == "7"

    @pytest.mark.parametrize("previous, change_type", [(55, "rise"), (60, "fall")])
    def test_moved_price(self, element, previous, change_type):
        value = map_player_value(element, 5, "20250816", previous=previous).value

        assert value.change_type == change_type
        assert (value.value, value.last_value) == (57, previous)

    def test_unchanged_price_is_skipped(self, element):
        assert map_player_value(element, 5, "20250816", previous=57) == Ok(None)

    def test_negative_price(self):
        element = ElementResponse.model_validate({**element_payload(7), "now_cost": -3})
        assert "now_cost" in map_player_value(element, 5, "20250816", previous=None).error


class TestMapAll:

    def test_all_or_nothing(self):
        elements = [ElementResponse.model_validate(element_payload(i)) for i in range(1, 22)]
        elements[12] = ElementResponse.model_validate(element_payload(13, form="n/a"))

        result = map_all(elements, lambda e: map_player_stat(e, 5))

        assert result.is_err()
        assert result.error.startswith("13:")

    def test_maps_in_order(self):
        elements = [ElementResponse.model_validate(element_payload(i)) for i in (3, 1, 2)]
        assert [p.id for p in map_all(elements, map_player).value] == [3, 1, 2]
