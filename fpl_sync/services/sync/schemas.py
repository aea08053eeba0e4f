"""
Pydantic models of the FPL API responses.

Only the fields the mappers consume are declared; everything else in the
payload is ignored. Numeric values the API sends as strings (form, ICT,
expected goals, ...) stay strings here and are parsed by the mappers.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FplModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ============================================================================
# /bootstrap-static/
# ============================================================================

class ChipPlay(FplModel):
    chip_name: str
    num_played: int


class TopElementInfo(FplModel):
    id: int
    points: int


class EventResponse(FplModel):
    id: int
    name: str
    deadline_time: Optional[str] = None
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
    cup_leagues_created: bool = False
    h2h_ko_matches_created: bool = False
    chip_plays: list[ChipPlay] = Field(default_factory=list)
    most_selected: Optional[int] = None
    most_transferred_in: Optional[int] = None
    most_captained: Optional[int] = None
    most_vice_captained: Optional[int] = None
    top_element: Optional[int] = None
    top_element_info: Optional[TopElementInfo] = None
    transfers_made: Optional[int] = None


class TeamResponse(FplModel):
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


class ElementResponse(FplModel):
    id: int
    code: int
    element_type: int
    team: int
    status: Optional[str] = None
    now_cost: int
    cost_change_start: int = 0
    first_name: str
    second_name: str
    web_name: str
    form: Optional[str] = None
    points_per_game: Optional[str] = None
    selected_by_percent: Optional[str] = None
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
    influence: Optional[str] = None
    creativity: Optional[str] = None
    threat: Optional[str] = None
    ict_index: Optional[str] = None
    expected_goals: Optional[str] = None
    expected_assists: Optional[str] = None
    expected_goal_involvements: Optional[str] = None
    expected_goals_conceded: Optional[str] = None


class PhaseResponse(FplModel):
    id: int
    name: str
    start_event: int
    stop_event: int
    highest_score: Optional[int] = None


class BootstrapStaticResponse(FplModel):
    events: list[EventResponse]
    teams: list[TeamResponse]
    elements: list[ElementResponse]
    phases: list[PhaseResponse] = Field(default_factory=list)


# ============================================================================
# /fixtures/
# ============================================================================

class FixtureResponse(FplModel):
    id: int
    code: int
    event: Optional[int] = None
    kickoff_time: Optional[str] = None
    team_h: int
    team_a: int
    team_h_score: Optional[int] = None
    team_a_score: Optional[int] = None
    team_h_difficulty: int
    team_a_difficulty: int
    started: Optional[bool] = False
    finished: bool = False
    finished_provisional: bool = False
    provisional_start_time: bool = False
    minutes: int = 0


# ============================================================================
# /event/{id}/live/
# ============================================================================

class LiveStatsResponse(FplModel):
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
    influence: Optional[str] = None
    creativity: Optional[str] = None
    threat: Optional[str] = None
    ict_index: Optional[str] = None
    total_points: int = 0
    in_dreamteam: bool = False


class LiveElementResponse(FplModel):
    id: int
    stats: LiveStatsResponse
    explain: list[Any] = Field(default_factory=list)


class EventLiveResponse(FplModel):
    elements: list[LiveElementResponse]


# ============================================================================
# /leagues-classic/{id}/standings/
# ============================================================================

class LeagueInfoResponse(FplModel):
    id: int
    name: str
    created: Optional[str] = None
    closed: bool = False
    league_type: Optional[str] = None
    scoring: Optional[str] = None
    admin_entry: Optional[int] = None
    start_event: Optional[int] = None
    has_cup: bool = False


class StandingResponse(FplModel):
    id: int
    entry: int
    entry_name: str
    player_name: str
    rank: int
    last_rank: Optional[int] = None
    rank_sort: int
    total: int = 0
    event_total: int = 0


class StandingsPage(FplModel):
    has_next: bool
    page: int
    results: list[StandingResponse]


class ClassicLeagueResponse(FplModel):
    league: LeagueInfoResponse
    standings: StandingsPage
