"""Shared test fixtures - small in-memory stage catalogs and zero-delay controllers."""

import pytest
from httpx import ASGITransport, AsyncClient

from dataentry.core.game_controller import GameController
from dataentry.schemas.stage import FieldDefinition, StageDefinition
from dataentry.services.session_service import SessionService, get_session_service


def make_contact_stage(sequence_number: int = 1, **overrides) -> StageDefinition:
    """firstName (required) + email (required, email rule), 10 points / 5 penalty."""
    data = dict(
        sequence_number=sequence_number,
        name=f"Contact {sequence_number}",
        fields=[
            FieldDefinition(id="firstName", label="First Name", required=True),
            FieldDefinition(id="email", label="Email Address", kind="email", required=True, validation_rule="email"),
        ],
        expected_values={"firstName": "Michael", "email": "mjohnson@company.com"},
        points_per_correct_field=10,
        penalty_per_incorrect_field=5,
        reference_material="Michael can be reached at mjohnson@company.com.",
    )
    data.update(overrides)
    return StageDefinition(**data)


CORRECT = {"firstName": "Michael", "email": "mjohnson@company.com"}


class InMemoryStageStore:
    """Stage store over a fixed list of stages; counts how often it was loaded."""

    def __init__(self, stages: list[StageDefinition]):
        self._stages = stages
        self.load_count = 0

    def load_stages(self) -> list[StageDefinition]:
        self.load_count += 1
        return [s.model_copy(deep=True) for s in self._stages]


@pytest.fixture
def contact_stage():
    return make_contact_stage()


@pytest.fixture
def timed_stage():
    return make_contact_stage(time_limit_seconds=30)


@pytest.fixture
def store():
    """Three untimed contact stages."""
    return InMemoryStageStore([make_contact_stage(n) for n in (1, 2, 3)])


@pytest.fixture
def game(store):
    """Game controller that emits stage results immediately."""
    return GameController(store, submit_delay=0, timeout_delay=0)


@pytest.fixture
def sessions(store):
    return SessionService(store, submit_delay=0, timeout_delay=0)


@pytest.fixture
async def client(sessions):
    """Async HTTP test client with an isolated session registry."""
    from dataentry.main import app

    app.dependency_overrides[get_session_service] = lambda: sessions
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
