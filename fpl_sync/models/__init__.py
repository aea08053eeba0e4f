from fpl_sync.models.models import (
    Base,
    Event,
    Team,
    Player,
    PlayerStat,
    Fixture,
    Phase,
    PlayerValue,
    EventLive,
    ClassicLeague,
    LeagueStanding,
    SyncMetadata,
)

__all__ = [
    "Base",
    "Event",
    "Team",
    "Player",
    "PlayerStat",
    "Fixture",
    "Phase",
    "PlayerValue",
    "EventLive",
    "ClassicLeague",
    "LeagueStanding",
    "SyncMetadata",
]
