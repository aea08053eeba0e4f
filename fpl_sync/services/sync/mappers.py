"""
Pure mappers from validated FPL responses to internal records.

Every mapper returns ``Ok(record)`` or ``Err(reason)``; a mapper never raises
and never touches I/O. Numeric strings are parsed strictly: empty means
``None``, anything non-numeric or non-finite is a mapping failure.
"""
import math
from datetime import datetime
from typing import Callable, Iterable, Optional, TypeVar

from pydantic import ValidationError

from fpl_sync.core.result import Err, Ok, Result
from fpl_sync.domain.records import (
    ClassicLeague,
    Event,
    EventLive,
    Fixture,
    LeagueStanding,
    Phase,
    Player,
    PlayerStat,
    PlayerValue,
    Team,
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

S = TypeVar("S")
T = TypeVar("T")

CHANGE_START = "start"
CHANGE_RISE = "rise"
CHANGE_FALL = "fall"


# ============================================================================
# Field parsers
# ============================================================================

def parse_number(value: Optional[str], field: str) -> Result[Optional[float], str]:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return Ok(None)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return Err(f"{field}: not numeric ({value!r})")
    if not math.isfinite(number):
        return Err(f"{field}: not finite ({value!r})")
    return Ok(number)


def parse_timestamp(value: Optional[str], field: str) -> Result[Optional[datetime], str]:
    if not value:
        return Ok(None)
    try:
        return Ok(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return Err(f"{field}: not an ISO timestamp ({value!r})")


def _parse_numbers(source: object, fields: Iterable[str]) -> Result[dict[str, Optional[float]], str]:
    parsed: dict[str, Optional[float]] = {}
    for field in fields:
        result = parse_number(getattr(source, field), field)
        if result.is_err():
            return result
        parsed[field] = result.value
    return Ok(parsed)


def _build(record_type: type[T], data: dict) -> Result[T, str]:
    try:
        return Ok(record_type.model_validate(data))
    except ValidationError as e:
        return Err(f"{record_type.__name__}: {e.error_count()} invalid fields")


# ============================================================================
# Entity mappers
# ============================================================================

def map_event(source: EventResponse) -> Result[Event, str]:
    deadline = parse_timestamp(source.deadline_time, "deadline_time")
    if deadline.is_err():
        return deadline

    return _build(Event, {
        "id": source.id,
        "name": source.name,
        "deadline_time": deadline.value,
        "deadline_time_epoch": source.deadline_time_epoch,
        "deadline_time_game_offset": source.deadline_time_game_offset,
        "average_entry_score": source.average_entry_score,
        "highest_score": source.highest_score,
        "highest_scoring_entry": source.highest_scoring_entry,
        "finished": source.finished,
        "data_checked": source.data_checked,
        "is_previous": source.is_previous,
        "is_current": source.is_current,
        "is_next": source.is_next,
        "cup_league_create": source.cup_leagues_created,
        "h2h_ko_matches_created": source.h2h_ko_matches_created,
        "chip_plays": [chip.model_dump() for chip in source.chip_plays],
        "most_selected": source.most_selected,
        "most_transferred_in": source.most_transferred_in,
        "most_captained": source.most_captained,
        "most_vice_captained": source.most_vice_captained,
        "top_element": source.top_element,
        "top_element_info": source.top_element_info.model_dump() if source.top_element_info else None,
        "transfers_made": source.transfers_made,
    })


def map_team(source: TeamResponse) -> Result[Team, str]:
    return _build(Team, source.model_dump())


def map_player(source: ElementResponse) -> Result[Player, str]:
    if source.now_cost < 0:
        return Err(f"now_cost: negative ({source.now_cost})")

    return _build(Player, {
        "id": source.id,
        "code": source.code,
        "element_type": source.element_type,
        "team_id": source.team,
        "price": source.now_cost,
        "start_price": source.now_cost - source.cost_change_start,
        "first_name": source.first_name,
        "second_name": source.second_name,
        "web_name": source.web_name,
    })


_PLAYER_STAT_DECIMALS = (
    "form",
    "points_per_game",
    "selected_by_percent",
    "influence",
    "creativity",
    "threat",
    "ict_index",
    "expected_goals",
    "expected_assists",
    "expected_goal_involvements",
    "expected_goals_conceded",
)

_COUNTING_STATS = (
    "minutes",
    "goals_scored",
    "assists",
    "clean_sheets",
    "goals_conceded",
    "own_goals",
    "penalties_saved",
    "penalties_missed",
    "yellow_cards",
    "red_cards",
    "saves",
    "bonus",
    "bps",
    "total_points",
)


def map_player_stat(source: ElementResponse, event_id: int) -> Result[PlayerStat, str]:
    decimals = _parse_numbers(source, _PLAYER_STAT_DECIMALS)
    if decimals.is_err():
        return decimals

    return _build(PlayerStat, {
        "element_id": source.id,
        "event_id": event_id,
        "element_type": source.element_type,
        "team_id": source.team,
        "status": source.status,
        "price": source.now_cost,
        **{name: getattr(source, name) for name in _COUNTING_STATS},
        **decimals.value,
    })


def map_fixture(source: FixtureResponse) -> Result[Fixture, str]:
    kickoff = parse_timestamp(source.kickoff_time, "kickoff_time")
    if kickoff.is_err():
        return kickoff
    if source.team_h == source.team_a:
        return Err(f"team_h and team_a are both {source.team_h}")

    return _build(Fixture, {
        "id": source.id,
        "code": source.code,
        "event_id": source.event,
        "kickoff_time": kickoff.value,
        "team_h": source.team_h,
        "team_a": source.team_a,
        "team_h_score": source.team_h_score,
        "team_a_score": source.team_a_score,
        "team_h_difficulty": source.team_h_difficulty,
        "team_a_difficulty": source.team_a_difficulty,
        "started": bool(source.started),
        "finished": source.finished,
        "finished_provisional": source.finished_provisional,
        "provisional_start_time": source.provisional_start_time,
        "minutes": source.minutes,
    })


def map_phase(source: PhaseResponse) -> Result[Phase, str]:
    if source.start_event > source.stop_event:
        return Err(f"start_event {source.start_event} after stop_event {source.stop_event}")
    return _build(Phase, source.model_dump())


def map_player_value(
    source: ElementResponse, event_id: int, change_date: str, previous: Optional[int]
) -> Result[Optional[PlayerValue], str]:
    """
    A player's price against the last one recorded before ``change_date``.

    ``Ok(None)`` when the price has not moved; a player without history
    starts at today's price.
    """
    if source.now_cost < 0:
        return Err(f"now_cost: negative ({source.now_cost})")
    if previous is None:
        change_type, last_value = CHANGE_START, source.now_cost
    elif source.now_cost > previous:
        change_type, last_value = CHANGE_RISE, previous
    elif source.now_cost < previous:
        change_type, last_value = CHANGE_FALL, previous
    else:
        return Ok(None)

    return _build(PlayerValue, {
        "element_id": source.id,
        "element_type": source.element_type,
        "event_id": event_id,
        "team_id": source.team,
        "value": source.now_cost,
        "last_value": last_value,
        "change_date": change_date,
        "change_type": change_type,
    })


def map_event_live(source: LiveElementResponse, event_id: int) -> Result[EventLive, str]:
    stats = source.stats
    decimals = _parse_numbers(stats, ("influence", "creativity", "threat", "ict_index"))
    if decimals.is_err():
        return decimals

    return _build(EventLive, {
        "event_id": event_id,
        "element_id": source.id,
        **{name: getattr(stats, name) for name in _COUNTING_STATS},
        "in_dreamteam": stats.in_dreamteam,
        **decimals.value,
    })


def map_classic_league(source: ClassicLeagueResponse) -> Result[ClassicLeague, str]:
    created = parse_timestamp(source.league.created, "created")
    if created.is_err():
        return created

    standings = [
        LeagueStanding(
            entry=row.entry,
            entry_name=row.entry_name,
            player_name=row.player_name,
            rank=row.rank,
            last_rank=row.last_rank,
            rank_sort=row.rank_sort,
            total=row.total,
            event_total=row.event_total,
        )
        for row in source.standings.results
    ]
    entries = [s.entry for s in standings]
    if len(entries) != len(set(entries)):
        return Err("standings contain duplicate entries")

    return _build(ClassicLeague, {
        **source.league.model_dump(exclude={"created"}),
        "created": created.value,
        "standings": standings,
    })


def map_all(
    items: Iterable[S],
    mapper: Callable[[S], Result[T, str]],
    describe: Callable[[S], str] = lambda item: str(getattr(item, "id", "?")),
) -> Result[list[T], str]:
    """Map every item; the first failure aborts the whole batch."""
    mapped: list[T] = []
    for item in items:
        result = mapper(item)
        if result.is_err():
            return Err(f"{describe(item)}: {result.error}")
        mapped.append(result.value)
    return Ok(mapped)
