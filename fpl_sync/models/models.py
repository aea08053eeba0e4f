"""
Database models for the FPL sync service.

Column names match the record field names in ``fpl_sync.domain.records`` so
repositories can map rows and records generically. Tables hold the current
season only; the season lives in the cache key, not in the rows.
"""
from sqlalchemy import (
    Column, String, Float, Integer, DateTime, ForeignKey, Boolean, Text, JSON, Index, UniqueConstraint
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Event(Base):
    """FPL gameweek."""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(32), nullable=False)
    deadline_time = Column(DateTime(timezone=True), nullable=True)
    deadline_time_epoch = Column(Integer, nullable=True)
    deadline_time_game_offset = Column(Integer, nullable=True)
    average_entry_score = Column(Integer, nullable=True)
    highest_score = Column(Integer, nullable=True)
    highest_scoring_entry = Column(Integer, nullable=True)
    finished = Column(Boolean, nullable=False, default=False)
    data_checked = Column(Boolean, nullable=False, default=False)
    is_previous = Column(Boolean, nullable=False, default=False)
    is_current = Column(Boolean, nullable=False, default=False, index=True)
    is_next = Column(Boolean, nullable=False, default=False)
    cup_league_create = Column(Boolean, nullable=False, default=False)
    h2h_ko_matches_created = Column(Boolean, nullable=False, default=False)
    chip_plays = Column(JSON, nullable=False, default=list)
    most_selected = Column(Integer, nullable=True)
    most_transferred_in = Column(Integer, nullable=True)
    most_captained = Column(Integer, nullable=True)
    most_vice_captained = Column(Integer, nullable=True)
    top_element = Column(Integer, nullable=True)
    top_element_info = Column(JSON, nullable=True)
    transfers_made = Column(Integer, nullable=True)


class Team(Base):
    """Premier League team with FPL strength ratings."""
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=False)
    code = Column(Integer, nullable=False)
    name = Column(String(64), nullable=False)
    short_name = Column(String(3), nullable=False)
    strength = Column(Integer, nullable=False)
    strength_overall_home = Column(Integer, nullable=False)
    strength_overall_away = Column(Integer, nullable=False)
    strength_attack_home = Column(Integer, nullable=False)
    strength_attack_away = Column(Integer, nullable=False)
    strength_defence_home = Column(Integer, nullable=False)
    strength_defence_away = Column(Integer, nullable=False)
    played = Column(Integer, nullable=False, default=0)
    win = Column(Integer, nullable=False, default=0)
    draw = Column(Integer, nullable=False, default=0)
    loss = Column(Integer, nullable=False, default=0)
    points = Column(Integer, nullable=False, default=0)
    position = Column(Integer, nullable=False)
    form = Column(String(16), nullable=True)
    team_division = Column(Integer, nullable=True)
    unavailable = Column(Boolean, nullable=False, default=False)
    pulse_id = Column(Integer, nullable=False)


class Player(Base):
    """FPL element (player). Prices are in tenths of a million."""
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=False)
    code = Column(Integer, nullable=False)
    element_type = Column(Integer, nullable=False)  # 1=GKP 2=DEF 3=MID 4=FWD
    team_id = Column(Integer, nullable=False, index=True)
    price = Column(Integer, nullable=False)
    start_price = Column(Integer, nullable=False)
    first_name = Column(String(64), nullable=False)
    second_name = Column(String(64), nullable=False)
    web_name = Column(String(64), nullable=False)


class PlayerStat(Base):
    """Season-to-date stats snapshot for one player at one gameweek."""
    __tablename__ = "player_stats"

    element_id = Column(Integer, primary_key=True, autoincrement=False)
    event_id = Column(Integer, primary_key=True, autoincrement=False)
    element_type = Column(Integer, nullable=False)
    team_id = Column(Integer, nullable=False)
    status = Column(String(1), nullable=True)
    price = Column(Integer, nullable=False)
    form = Column(Float, nullable=True)
    points_per_game = Column(Float, nullable=True)
    selected_by_percent = Column(Float, nullable=True)
    total_points = Column(Integer, nullable=False, default=0)
    minutes = Column(Integer, nullable=False, default=0)
    goals_scored = Column(Integer, nullable=False, default=0)
    assists = Column(Integer, nullable=False, default=0)
    clean_sheets = Column(Integer, nullable=False, default=0)
    goals_conceded = Column(Integer, nullable=False, default=0)
    own_goals = Column(Integer, nullable=False, default=0)
    penalties_saved = Column(Integer, nullable=False, default=0)
    penalties_missed = Column(Integer, nullable=False, default=0)
    yellow_cards = Column(Integer, nullable=False, default=0)
    red_cards = Column(Integer, nullable=False, default=0)
    saves = Column(Integer, nullable=False, default=0)
    bonus = Column(Integer, nullable=False, default=0)
    bps = Column(Integer, nullable=False, default=0)
    influence = Column(Float, nullable=True)
    creativity = Column(Float, nullable=True)
    threat = Column(Float, nullable=True)
    ict_index = Column(Float, nullable=True)
    expected_goals = Column(Float, nullable=True)
    expected_assists = Column(Float, nullable=True)
    expected_goal_involvements = Column(Float, nullable=True)
    expected_goals_conceded = Column(Float, nullable=True)

    __table_args__ = (
        Index("ix_player_stats_event", "event_id"),
    )


class Fixture(Base):
    __tablename__ = "fixtures"

    id = Column(Integer, primary_key=True, autoincrement=False)
    code = Column(Integer, nullable=False)
    event_id = Column(Integer, nullable=True, index=True)  # NULL while unscheduled
    kickoff_time = Column(DateTime(timezone=True), nullable=True)
    team_h = Column(Integer, nullable=False, index=True)
    team_a = Column(Integer, nullable=False, index=True)
    team_h_score = Column(Integer, nullable=True)
    team_a_score = Column(Integer, nullable=True)
    team_h_difficulty = Column(Integer, nullable=False)
    team_a_difficulty = Column(Integer, nullable=False)
    started = Column(Boolean, nullable=False, default=False)
    finished = Column(Boolean, nullable=False, default=False)
    finished_provisional = Column(Boolean, nullable=False, default=False)
    provisional_start_time = Column(Boolean, nullable=False, default=False)
    minutes = Column(Integer, nullable=False, default=0)


class Phase(Base):
    __tablename__ = "phases"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(32), nullable=False)
    start_event = Column(Integer, nullable=False)
    stop_event = Column(Integer, nullable=False)
    highest_score = Column(Integer, nullable=True)


class PlayerValue(Base):
    """One row per player per day their price was first seen or changed."""
    __tablename__ = "player_values"

    element_id = Column(Integer, primary_key=True, autoincrement=False)
    change_date = Column(String(8), primary_key=True)  # YYYYMMDD
    element_type = Column(Integer, nullable=False)
    event_id = Column(Integer, nullable=False)
    team_id = Column(Integer, nullable=False, index=True)
    value = Column(Integer, nullable=False)
    last_value = Column(Integer, nullable=False)
    change_type = Column(String(8), nullable=False)

    __table_args__ = (
        Index("ix_player_values_change_date", "change_date"),
    )


class EventLive(Base):
    """Live per-player points for a gameweek."""
    __tablename__ = "event_lives"

    event_id = Column(Integer, primary_key=True, autoincrement=False)
    element_id = Column(Integer, primary_key=True, autoincrement=False)
    minutes = Column(Integer, nullable=False, default=0)
    goals_scored = Column(Integer, nullable=False, default=0)
    assists = Column(Integer, nullable=False, default=0)
    clean_sheets = Column(Integer, nullable=False, default=0)
    goals_conceded = Column(Integer, nullable=False, default=0)
    own_goals = Column(Integer, nullable=False, default=0)
    penalties_saved = Column(Integer, nullable=False, default=0)
    penalties_missed = Column(Integer, nullable=False, default=0)
    yellow_cards = Column(Integer, nullable=False, default=0)
    red_cards = Column(Integer, nullable=False, default=0)
    saves = Column(Integer, nullable=False, default=0)
    bonus = Column(Integer, nullable=False, default=0)
    bps = Column(Integer, nullable=False, default=0)
    influence = Column(Float, nullable=True)
    creativity = Column(Float, nullable=True)
    threat = Column(Float, nullable=True)
    ict_index = Column(Float, nullable=True)
    total_points = Column(Integer, nullable=False, default=0)
    in_dreamteam = Column(Boolean, nullable=False, default=False)


class ClassicLeague(Base):
    __tablename__ = "classic_leagues"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(128), nullable=False)
    created = Column(DateTime(timezone=True), nullable=True)
    closed = Column(Boolean, nullable=False, default=False)
    league_type = Column(String(1), nullable=True)
    scoring = Column(String(1), nullable=True)
    admin_entry = Column(Integer, nullable=True)
    start_event = Column(Integer, nullable=True)
    has_cup = Column(Boolean, nullable=False, default=False)


class LeagueStanding(Base):
    """One entry's row in a classic league table."""
    __tablename__ = "league_standings"

    league_id = Column(Integer, ForeignKey("classic_leagues.id", ondelete="CASCADE"), primary_key=True)
    entry = Column(Integer, primary_key=True, autoincrement=False)
    entry_name = Column(String(128), nullable=False)
    player_name = Column(String(128), nullable=False)
    rank = Column(Integer, nullable=False)
    last_rank = Column(Integer, nullable=True)
    rank_sort = Column(Integer, nullable=False)
    total = Column(Integer, nullable=False, default=0)
    event_total = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_league_standings_rank", "league_id", "rank_sort"),
    )


class SyncMetadata(Base):
    """Tracks sync job status per entity kind.

    Used by the orchestrator to report overall sync health.
    """
    __tablename__ = "sync_metadata"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity = Column(String(32), nullable=False)  # event, team, player, fixture, ...
    last_sync_started_at = Column(DateTime(timezone=True), nullable=True)
    last_sync_completed_at = Column(DateTime(timezone=True), nullable=True, index=True)
    last_sync_status = Column(String(16), nullable=True)  # success, failed, in_progress
    records_processed = Column(Integer, nullable=False, default=0)
    error_code = Column(String(32), nullable=True)
    error_message = Column(Text, nullable=True)
    sync_duration_ms = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("entity", name="uq_sync_metadata_entity"),
    )
