"""Phase repository; phases are season-wide."""
from fpl_sync.domain.records import Phase
from fpl_sync.models.models import Phase as PhaseRow
from fpl_sync.repositories.base import BaseRepository


class PhaseRepository(BaseRepository[PhaseRow, Phase]):
    model_type = PhaseRow
    record_type = Phase
