"""Tests for the in-memory session registry and the timed-stage tick endpoint."""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from dataentry.services.session_service import SessionService, get_session_service

from tests.conftest import CORRECT, InMemoryStageStore, make_contact_stage


def test_create_and_get(sessions):
    session_id, game = sessions.create()
    assert sessions.get(session_id) is game
    assert game.status == "intro"
    assert len(sessions) == 1


def test_get_unknown(sessions):
    assert sessions.get("missing") is None


async def test_delete_cancels_pending_result(store):
    sessions = SessionService(store, submit_delay=0.05)
    session_id, game = sessions.create()
    game.start()
    stage = game.active_stage
    for field_id, value in CORRECT.items():
        stage.update_field(field_id, value)
    stage.submit()

    assert sessions.delete(session_id) is True
    await asyncio.sleep(0.1)
    assert game.history == ()
    assert sessions.delete(session_id) is False


def test_oldest_session_evicted_at_limit(store):
    sessions = SessionService(store, limit=2, submit_delay=0)
    first, _ = sessions.create()
    second, _ = sessions.create()
    third, _ = sessions.create()

    assert sessions.get(first) is None
    assert sessions.get(second) is not None
    assert sessions.get(third) is not None
    assert len(sessions) == 2


@pytest.fixture
async def timed_client():
    from dataentry.main import app

    store = InMemoryStageStore([make_contact_stage(1, time_limit_seconds=3), make_contact_stage(2)])
    sessions = SessionService(store, submit_delay=0, timeout_delay=0)
    app.dependency_overrides[get_session_service] = lambda: sessions
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def test_tick_until_timeout(timed_client):
    session_id = (await timed_client.post("/api/game/")).json()["session_id"]
    await timed_client.post(f"/api/game/{session_id}/start")
    await timed_client.put(f"/api/game/{session_id}/fields/firstName", json={"value": "Michael"})

    resp = await timed_client.post(f"/api/game/{session_id}/tick")
    assert resp.json() == {"time_remaining": 2, "result": None}
    await timed_client.post(f"/api/game/{session_id}/tick")

    resp = await timed_client.post(f"/api/game/{session_id}/tick")
    data = resp.json()
    assert data["time_remaining"] == 0
    assert data["result"]["score"] == 0
    assert data["result"]["accuracy"] == 50
    assert data["result"]["timed_out"] is True

    state = (await timed_client.get(f"/api/game/{session_id}")).json()
    assert state["state"]["current_stage_index"] == 2
    assert state["state"]["cumulative_score"] == 0
    assert state["state"]["cumulative_accuracy"] == 50
