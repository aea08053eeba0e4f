"""Team repository; scoped by season only."""
from fpl_sync.domain.records import Team
from fpl_sync.models.models import Team as TeamRow
from fpl_sync.repositories.base import BaseRepository


class TeamRepository(BaseRepository[TeamRow, Team]):
    model_type = TeamRow
    record_type = Team
