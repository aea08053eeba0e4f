"""Phase service: the season's overall and monthly gameweek ranges."""
from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import ServiceError
from fpl_sync.core.result import Result
from fpl_sync.domain.operations import DomainOperations
from fpl_sync.domain.records import Phase
from fpl_sync.services.base import (
    BaseService,
    require,
    service_error_from_domain,
    service_error_from_sync,
    validate_positive_id,
)
from fpl_sync.services.sync.orchestrator import SyncOrchestrator


class PhaseService(BaseService):

    def __init__(self, phases: DomainOperations[Phase], orchestrator: SyncOrchestrator, season: str):
        super().__init__(season)
        self.phases = phases
        self.orchestrator = orchestrator

    async def get_phase(self, phase_id: int) -> Result[Phase, ServiceError]:
        valid = validate_positive_id(phase_id, "phase_id")
        if valid.is_err():
            return valid
        result = await self.phases.get_by_id(Scope(self.season), phase_id)
        return require(result.map_error(service_error_from_domain), "Phase", phase_id=phase_id)

    async def get_phases(self) -> Result[list[Phase], ServiceError]:
        return (await self.phases.get_all(Scope(self.season))).map_error(service_error_from_domain)

    async def sync_phases(self) -> Result[list[Phase], ServiceError]:
        return (await self.orchestrator.sync_phases()).map_error(service_error_from_sync)
