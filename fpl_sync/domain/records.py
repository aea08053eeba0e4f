"""
Internal records.

These are what the cache stores, the repositories return and the API serves.
Field names match the column names in ``fpl_sync.models.models``.

Every record knows its ``cache_field`` (the hash field inside its bucket) and
its ``identity_fields`` (checked before a cached entry is trusted).
"""
from datetime import datetime
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, Field


class Record(BaseModel):
    identity_fields: ClassVar[tuple[str, ...]] = ("id",)

    @property
    def cache_field(self) -> str:
        return "_".join(str(getattr(self, name)) for name in self.identity_fields)


class Event(Record):
    id: int
    name: str
    deadline_time: Optional[datetime] = None
    deadline_time_epoch: Optional[int] = None
    deadline_time_game_offset: Optional[int] = None
    average_entry_score: Optional[int] = None
    highest_score: Optional[int] = None
    highest_scoring_entry: Optional[int] = None
    finished: bool = False
    data_checked: bool = False
    is_previous: bool = False
    is_current: bool = False
    is_next: bool = False
    cup_league_create: bool = False
    h2h_ko_matches_created: bool = False
    chip_plays: list[dict[str, Any]] = Field(default_factory=list)
    most_selected: Optional[int] = None
    most_transferred_in: Optional[int] = None
    most_captained: Optional[int] = None
    most_vice_captained: Optional[int] = None
    top_element: Optional[int] = None
    top_element_info: Optional[dict[str, Any]] = None
    transfers_made: Optional[int] = None


class Team(Record):
    id: int
    code: int
    name: str
    short_name: str
    strength: int
    strength_overall_home: int
    strength_overall_away: int
    strength_attack_home: int
    strength_attack_away: int
    strength_defence_home: int
    strength_defence_away: int
    played: int = 0
    win: int = 0
    draw: int = 0
    loss: int = 0
    points: int = 0
    position: int
    form: Optional[str] = None
    team_division: Optional[int] = None
    unavailable: bool = False
    pulse_id: int


class Player(Record):
    id: int
    code: int
    element_type: int
    team_id: int
    price: int
    start_price: int
    first_name: str
    second_name: str
    web_name: str


class PlayerStat(Record):
    identity_fields: ClassVar[tuple[str, ...]] = ("element_id", "event_id")

    element_id: int
    event_id: int
    element_type: int
    team_id: int
    status: Optional[str] = None
    price: int
    form: Optional[float] = None
    points_per_game: Optional[float] = None
    selected_by_percent: Optional[float] = None
    total_points: int = 0
    minutes: int = 0
    goals_scored: int = 0
    assists: int = 0
    clean_sheets: int = 0
    goals_conceded: int = 0
    own_goals: int = 0
    penalties_saved: int = 0
    penalties_missed: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    saves: int = 0
    bonus: int = 0
    bps: int = 0
    influence: Optional[float] = None
    creativity: Optional[float] = None
    threat: Optional[float] = None
    ict_index: Optional[float] = None
    expected_goals: Optional[float] = None
    expected_assists: Optional[float] = None
    expected_goal_involvements: Optional[float] = None
    expected_goals_conceded: Optional[float] = None


class Fixture(Record):
    id: int
    code: int
    event_id: Optional[int] = None
    kickoff_time: Optional[datetime] = None
    team_h: int
    team_a: int
    team_h_score: Optional[int] = None
    team_a_score: Optional[int] = None
    team_h_difficulty: int
    team_a_difficulty: int
    started: bool = False
    finished: bool = False
    finished_provisional: bool = False
    provisional_start_time: bool = False
    minutes: int = 0


class TeamFixture(Record):
    """A fixture seen from one team's side, enriched with team names."""

    id: int  # fixture id
    team_id: int
    team_name: str
    team_short_name: str
    opponent_team_id: int
    opponent_team_name: str
    opponent_team_short_name: str
    event_id: Optional[int] = None
    kickoff_time: Optional[datetime] = None
    was_home: bool
    difficulty: int
    opponent_difficulty: int
    team_score: Optional[int] = None
    opponent_team_score: Optional[int] = None
    score: str  # "h:a" as listed, "-:-" before kick-off
    result: Optional[str] = None  # W, D or L from this team's side once scored
    started: bool = False
    finished: bool = False
    minutes: int = 0


class Phase(Record):
    """A named run of gameweeks (the season, or one month of it)."""

    id: int
    name: str
    start_event: int
    stop_event: int
    highest_score: Optional[int] = None


class PlayerValue(Record):
    """A price change seen for one player on ``change_date`` (YYYYMMDD)."""

    identity_fields: ClassVar[tuple[str, ...]] = ("element_id",)

    element_id: int
    element_type: int
    event_id: int
    team_id: int
    value: int
    last_value: int
    change_date: str
    change_type: str  # start, rise or fall


class EventLive(Record):
    identity_fields: ClassVar[tuple[str, ...]] = ("element_id",)

    event_id: int
    element_id: int
    minutes: int = 0
    goals_scored: int = 0
    assists: int = 0
    clean_sheets: int = 0
    goals_conceded: int = 0
    own_goals: int = 0
    penalties_saved: int = 0
    penalties_missed: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    saves: int = 0
    bonus: int = 0
    bps: int = 0
    influence: Optional[float] = None
    creativity: Optional[float] = None
    threat: Optional[float] = None
    ict_index: Optional[float] = None
    total_points: int = 0
    in_dreamteam: bool = False


class LeagueStanding(BaseModel):
    entry: int
    entry_name: str
    player_name: str
    rank: int
    last_rank: Optional[int] = None
    rank_sort: int
    total: int = 0
    event_total: int = 0


class ClassicLeague(Record):
    """League info plus the standings of every page, in rank order."""

    id: int
    name: str
    created: Optional[datetime] = None
    closed: bool = False
    league_type: Optional[str] = None
    scoring: Optional[str] = None
    admin_entry: Optional[int] = None
    start_event: Optional[int] = None
    has_cup: bool = False
    standings: list[LeagueStanding] = Field(default_factory=list)
