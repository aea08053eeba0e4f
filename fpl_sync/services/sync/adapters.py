"""
Source adapters for the FPL API.

``FplApiAdapter`` turns raw FPL payloads into validated response models and
owns the two pieces of fetch logic that are more than one request:

- bootstrap-static is memoised per adapter instance so one sync cycle that
  refreshes events, teams and players hits the endpoint once (``reset()``
  clears it between cycles);
- classic-league standings are paginated: page N+1 is requested only after
  page N validated and reported ``has_next``.

The ``SourceAdapter`` subclasses give the sync workflow one uniform
``fetch(scope)`` / ``map(raw, scope)`` pair per entity kind.
"""
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from fpl_sync.cache.keys import Scope
from fpl_sync.clients.fpl_client import FplClient
from fpl_sync.core.errors import DataLayerError, DataLayerErrorCode, QueryError
from fpl_sync.core.result import Err, Ok, Result
from fpl_sync.domain.records import (
    ClassicLeague,
    Event,
    EventLive,
    Fixture,
    Phase,
    Player,
    PlayerStat,
    PlayerValue,
    Team,
)
from fpl_sync.repositories.player_value_repository import PlayerValueRepository
from fpl_sync.services.sync import mappers
from fpl_sync.services.sync.schemas import (
    BootstrapStaticResponse,
    ClassicLeagueResponse,
    ElementResponse,
    EventLiveResponse,
    EventResponse,
    FixtureResponse,
    LiveElementResponse,
    PhaseResponse,
    StandingsPage,
    TeamResponse,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")
T = TypeVar("T")

MAX_STANDINGS_PAGES = 1000
CHANGE_DATE_PATTERN = re.compile(r"\d{8}")

_fixtures_adapter = TypeAdapter(list[FixtureResponse])


def _validation_error(what: str, error: ValidationError, **details: Any) -> DataLayerError:
    return DataLayerError(
        DataLayerErrorCode.VALIDATION_ERROR,
        f"Invalid {what} payload: {error.error_count()} validation errors",
        details={"payload": what, **details},
        cause=error,
    )


class FplApiAdapter:
    """
    Validated access to the FPL API.

    Usage:
        adapter = FplApiAdapter(client)
        bootstrap = await adapter.fetch_bootstrap()
        league = await adapter.fetch_classic_league(314)
        adapter.reset()
    """

    def __init__(self, client: FplClient):
        self.client = client
        self._bootstrap: Optional[BootstrapStaticResponse] = None

    def reset(self) -> None:
        """Forget the memoised bootstrap payload."""
        self._bootstrap = None

    async def fetch_bootstrap(self) -> Result[BootstrapStaticResponse, DataLayerError]:
        if self._bootstrap is not None:
            return Ok(self._bootstrap)

        raw = await self.client.get_bootstrap_static()
        if raw.is_err():
            return raw

        try:
            self._bootstrap = BootstrapStaticResponse.model_validate(raw.value)
        except ValidationError as e:
            return Err(_validation_error("bootstrap-static", e))

        logger.info(
            f"Fetched bootstrap-static: {len(self._bootstrap.events)} events, "
            f"{len(self._bootstrap.teams)} teams, {len(self._bootstrap.elements)} elements"
        )
        return Ok(self._bootstrap)

    async def fetch_fixtures(self) -> Result[list[FixtureResponse], DataLayerError]:
        raw = await self.client.get_fixtures()
        if raw.is_err():
            return raw
        try:
            return Ok(_fixtures_adapter.validate_python(raw.value))
        except ValidationError as e:
            return Err(_validation_error("fixtures", e))

    async def fetch_event_live(self, event_id: int) -> Result[EventLiveResponse, DataLayerError]:
        raw = await self.client.get_event_live(event_id)
        if raw.is_err():
            return raw
        try:
            return Ok(EventLiveResponse.model_validate(raw.value))
        except ValidationError as e:
            return Err(_validation_error("event-live", e, event_id=event_id))

    async def fetch_classic_league(self, league_id: int) -> Result[ClassicLeagueResponse, DataLayerError]:
        """
        Fetch every standings page of a classic league.

        A failure on any page discards the pages already fetched. The
        assembled response holds all results in page order with
        ``has_next`` cleared.
        """
        page = 1
        league = None
        results = []

        while True:
            raw = await self.client.get_classic_league_standings(league_id, page)
            if raw.is_err():
                raw.error.details.update({"league_id": league_id, "page": page})
                return raw

            try:
                parsed = ClassicLeagueResponse.model_validate(raw.value)
            except ValidationError as e:
                return Err(_validation_error("classic-league", e, league_id=league_id, page=page))

            if parsed.standings.page != page:
                return Err(DataLayerError(
                    DataLayerErrorCode.VALIDATION_ERROR,
                    f"Requested standings page {page} of league {league_id}, got page {parsed.standings.page}",
                    details={"league_id": league_id, "page": page},
                ))

            if league is None:
                league = parsed.league
            results.extend(parsed.standings.results)

            if not parsed.standings.has_next:
                break

            page += 1
            if page > MAX_STANDINGS_PAGES:
                return Err(DataLayerError(
                    DataLayerErrorCode.VALIDATION_ERROR,
                    f"League {league_id} has more than {MAX_STANDINGS_PAGES} standings pages",
                    details={"league_id": league_id},
                ))

        logger.info(f"Fetched {len(results)} standings for league {league_id} across {page} pages")
        return Ok(ClassicLeagueResponse(
            league=league,
            standings=StandingsPage(has_next=False, page=1, results=results),
        ))


# ============================================================================
# Per-entity source adapters
# ============================================================================

class SourceAdapter(ABC, Generic[R, T]):
    """
    One entity kind's view of the FPL API.

    ``fetch`` returns the validated raw payload for a scope; ``map`` turns it
    into records and fails on the first record that does not map.
    """

    entity: str

    def __init__(self, api: FplApiAdapter):
        self.api = api

    @abstractmethod
    async def fetch(self, scope: Scope) -> Result[R, DataLayerError]:
        ...

    @abstractmethod
    def map(self, raw: R, scope: Scope) -> Result[list[T], str]:
        ...

    def _require_numeric_subscope(self, scope: Scope) -> Result[int, DataLayerError]:
        try:
            return Ok(int(scope.subscope))
        except (TypeError, ValueError):
            return Err(DataLayerError(
                DataLayerErrorCode.VALIDATION_ERROR,
                f"{self.entity} sync needs a numeric subscope, got {scope.subscope!r}",
                details={"scope": scope.label},
            ))


class EventSource(SourceAdapter[list[EventResponse], Event]):
    entity = "event"

    async def fetch(self, scope: Scope) -> Result[list[EventResponse], DataLayerError]:
        return (await self.api.fetch_bootstrap()).map(lambda b: b.events)

    def map(self, raw: list[EventResponse], scope: Scope) -> Result[list[Event], str]:
        return mappers.map_all(raw, mappers.map_event)


class TeamSource(SourceAdapter[list[TeamResponse], Team]):
    entity = "team"

    async def fetch(self, scope: Scope) -> Result[list[TeamResponse], DataLayerError]:
        return (await self.api.fetch_bootstrap()).map(lambda b: b.teams)

    def map(self, raw: list[TeamResponse], scope: Scope) -> Result[list[Team], str]:
        return mappers.map_all(raw, mappers.map_team)


class PlayerSource(SourceAdapter[list[ElementResponse], Player]):
    entity = "player"

    async def fetch(self, scope: Scope) -> Result[list[ElementResponse], DataLayerError]:
        return (await self.api.fetch_bootstrap()).map(lambda b: b.elements)

    def map(self, raw: list[ElementResponse], scope: Scope) -> Result[list[Player], str]:
        return mappers.map_all(raw, mappers.map_player)


class PlayerStatSource(SourceAdapter[list[ElementResponse], PlayerStat]):
    """Season-to-date element stats, snapshotted under the scope's event id."""

    entity = "player-stat"

    async def fetch(self, scope: Scope) -> Result[list[ElementResponse], DataLayerError]:
        event_id = self._require_numeric_subscope(scope)
        if event_id.is_err():
            return event_id
        return (await self.api.fetch_bootstrap()).map(lambda b: b.elements)

    def map(self, raw: list[ElementResponse], scope: Scope) -> Result[list[PlayerStat], str]:
        event_id = int(scope.subscope)
        return mappers.map_all(raw, lambda element: mappers.map_player_stat(element, event_id))


class FixtureSource(SourceAdapter[list[FixtureResponse], Fixture]):
    entity = "fixture"

    async def fetch(self, scope: Scope) -> Result[list[FixtureResponse], DataLayerError]:
        return await self.api.fetch_fixtures()

    def map(self, raw: list[FixtureResponse], scope: Scope) -> Result[list[Fixture], str]:
        return mappers.map_all(raw, mappers.map_fixture)


class EventLiveSource(SourceAdapter[list[LiveElementResponse], EventLive]):
    entity = "live"

    async def fetch(self, scope: Scope) -> Result[list[LiveElementResponse], DataLayerError]:
        event_id = self._require_numeric_subscope(scope)
        if event_id.is_err():
            return event_id
        return (await self.api.fetch_event_live(event_id.value)).map(lambda live: live.elements)

    def map(self, raw: list[LiveElementResponse], scope: Scope) -> Result[list[EventLive], str]:
        event_id = int(scope.subscope)
        return mappers.map_all(raw, lambda element: mappers.map_event_live(element, event_id))


class LeagueSource(SourceAdapter[ClassicLeagueResponse, ClassicLeague]):
    """One classic league per scope; the subscope is the league id."""

    entity = "league"

    async def fetch(self, scope: Scope) -> Result[ClassicLeagueResponse, DataLayerError]:
        league_id = self._require_numeric_subscope(scope)
        if league_id.is_err():
            return league_id
        return await self.api.fetch_classic_league(league_id.value)

    def map(self, raw: ClassicLeagueResponse, scope: Scope) -> Result[list[ClassicLeague], str]:
        return mappers.map_classic_league(raw).map(lambda league: [league])


class PhaseSource(SourceAdapter[list[PhaseResponse], Phase]):
    entity = "phase"

    async def fetch(self, scope: Scope) -> Result[list[PhaseResponse], DataLayerError]:
        return (await self.api.fetch_bootstrap()).map(lambda b: b.phases)

    def map(self, raw: list[PhaseResponse], scope: Scope) -> Result[list[Phase], str]:
        return mappers.map_all(raw, mappers.map_phase)


@dataclass
class PriceSnapshot:
    """Today's element prices, the current gameweek and the last recorded prices."""

    elements: list[ElementResponse]
    event_id: int
    previous: dict[int, int]


class PlayerValueSource(SourceAdapter[PriceSnapshot, PlayerValue]):
    """
    Price changes for the scope's change date (``YYYYMMDD``).

    Prices are compared with the latest value stored before that date, so
    re-running a day rewrites the same rows.
    """

    entity = "player-value"

    def __init__(self, api: FplApiAdapter, values: PlayerValueRepository):
        super().__init__(api)
        self.values = values

    async def fetch(self, scope: Scope) -> Result[PriceSnapshot, Union[DataLayerError, QueryError]]:
        change_date = str(scope.subscope)
        if not CHANGE_DATE_PATTERN.fullmatch(change_date):
            return Err(DataLayerError(
                DataLayerErrorCode.VALIDATION_ERROR,
                f"player-value sync needs a YYYYMMDD subscope, got {scope.subscope!r}",
                details={"scope": scope.label},
            ))

        bootstrap = await self.api.fetch_bootstrap()
        if bootstrap.is_err():
            return bootstrap
        current = next((e.id for e in bootstrap.value.events if e.is_current), None)
        if current is None:
            return Err(DataLayerError(
                DataLayerErrorCode.VALIDATION_ERROR,
                "No current event; player values cannot be attributed",
                details={"scope": scope.label},
            ))

        previous = self.values.latest_values_before(change_date)
        if previous.is_err():
            return previous
        return Ok(PriceSnapshot(bootstrap.value.elements, current, previous.value))

    def map(self, raw: PriceSnapshot, scope: Scope) -> Result[list[PlayerValue], str]:
        change_date = str(scope.subscope)
        mapped = mappers.map_all(
            raw.elements,
            lambda element: mappers.map_player_value(
                element, raw.event_id, change_date, raw.previous.get(element.id)
            ),
        )
        return mapped.map(lambda values: [v for v in values if v is not None])
