"""
Cache key registry.

Every bucket lives under ``{prefix}::{season}[::{subscope}]``; the prefix is
drawn from ``CachePrefix`` and never built ad hoc.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

KEY_SEPARATOR = "::"


class CachePrefix(str, Enum):
    EVENT = "event"
    TEAM = "team"
    PLAYER = "player"
    PLAYER_STAT = "player-stat"
    FIXTURE = "fixture"
    TEAM_FIXTURE = "team-fixture"
    LIVE = "live"
    LEAGUE = "league"
    PHASE = "phase"
    PLAYER_VALUE = "player-value"


@dataclass(frozen=True)
class Scope:
    """Keying dimension of a bucket or sync cycle: a season, optionally narrowed."""

    season: str
    subscope: Optional[Union[int, str]] = None

    def narrow(self, subscope: Union[int, str]) -> "Scope":
        return Scope(self.season, subscope)

    @property
    def label(self) -> str:
        if self.subscope is None:
            return self.season
        return f"{self.season}{KEY_SEPARATOR}{self.subscope}"


def cache_key(prefix: CachePrefix, scope: Scope) -> str:
    return f"{prefix.value}{KEY_SEPARATOR}{scope.label}"

