"""
Fixture repository.

Fixtures are stored season-wide; per-event and per-team listings are filtered
from the season bucket by the fixture service and the team fixture view.
"""
from fpl_sync.domain.records import Fixture
from fpl_sync.models.models import Fixture as FixtureRow
from fpl_sync.repositories.base import BaseRepository


class FixtureRepository(BaseRepository[FixtureRow, Fixture]):
    model_type = FixtureRow
    record_type = Fixture
