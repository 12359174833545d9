import asyncio
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from terminal_ai.api.main import app
from terminal_ai.api.routes import ai as ai_routes
from terminal_ai.api.services import motd, orchestrator
from terminal_ai.api.services.cache import TTLCache
from terminal_ai.api.services.case_search_client import ZakonOnlineClient
from terminal_ai.api.services.formatter import render_empty_command, render_tcc_info
from terminal_ai.api.services.motd import MotdGenerator
from terminal_ai.api.services.orchestrator import CommandOrchestrator
from terminal_ai.api.services.prompts import COURT_CASE_CLASSIFIER_PROMPT
from terminal_ai.api.services.request_sink import InMemoryRequestSink


async def fake_complete(request):
    if request.system_prompt == COURT_CASE_CLASSIFIER_PROMPT:
        return "NO"
    return "MOTD: fake answer"


@pytest.fixture()
def client(monkeypatch):
    # === Configuration ===
    sink = InMemoryRequestSink()
    pipeline = CommandOrchestrator(
        complete=fake_complete,
        search_client=ZakonOnlineClient(token=""),
        cache=TTLCache(),
        sink=sink,
    )
    monkeypatch.setattr(orchestrator, "_default_orchestrator", pipeline)
    monkeypatch.setattr(
        motd,
        "_default_generator",
        MotdGenerator(complete=fake_complete, cache=TTLCache(), sink=sink),
    )
    return TestClient(app)


def test_process_command(client):
    res = client.post("/process-command", json={"command": "purple elephant sandwich"})

    assert res.status_code == 200
    assert res.json() == {"response": "MOTD: fake answer"}


def test_process_command_rejects_empty_text(client):
    res = client.post("/process-command", json={"command": ""})

    assert res.status_code == 422


def test_detect_legal(client):
    res = client.post("/detect-legal", json={"query": "закон про спадщину"})

    body = res.json()
    assert res.status_code == 200
    assert body["matched"] is True
    assert body["language"] == "uk"


def test_tcc_info(client):
    res = client.post("/tcc", json={"query": "тцк мобілізація"})

    assert res.json() == {"response": render_tcc_info()}


def test_court_cases_without_search_service(client):
    res = client.post("/court-cases", json={"query": "номера справ"})

    assert res.status_code == 200
    assert res.json()["response"] == "MOTD: fake answer"


def test_legal_search(client):
    res = client.post("/legal-search", json={"query": "eviction", "language": "en"})

    assert res.status_code == 200
    assert res.json()["response"] == "MOTD: fake answer"


def test_history_and_stats_reflect_completed_requests(client):
    # === Act ===
    client.post("/process-command", json={"command": "purple elephant sandwich"})
    history = client.get("/history").json()
    stats = client.get("/stats").json()

    # === Assert ===
    assert [item["kind"] for item in history["items"]] == ["unknown_command"]
    assert stats["requests"]["by_kind"] == {"unknown_command": 1}
    assert "hit_rate" in stats["cache"]


def test_motd_single_language(client):
    res = client.post("/motd", json={"language": "en"})

    body = res.json()
    assert res.status_code == 200
    assert body["messages"] == {"en": "fake answer"}
    assert body["motd"] == "[EN] fake answer"


def test_motd_unknown_language(client):
    res = client.post("/motd", json={"language": "xx"})

    assert res.status_code == 422


def test_health_masks_search_credentials(client):
    res = client.get("/health")

    body = res.json()
    assert body["ok"] is True
    assert body["connections"]["court_searcher"]["configured"] is False
    assert body["connections"]["court_searcher"]["token"] == "not set"


# --- Client disconnects ---


class DisconnectedRequest:
    url = SimpleNamespace(path="/process-command")

    async def is_disconnected(self):
        return True


def test_pipeline_is_cancelled_when_client_disconnects(monkeypatch):
    # === Configuration ===
    monkeypatch.setattr(ai_routes, "_DISCONNECT_POLL_SECS", 0.01)
    cancelled = []

    async def slow_pipeline():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise
        return "never"

    # === Act ===
    async def run():
        with pytest.raises(HTTPException) as exc_info:
            await ai_routes._run_until_disconnect(DisconnectedRequest(), slow_pipeline())
        await asyncio.sleep(0.01)
        return exc_info.value

    error = asyncio.run(run())

    # === Assert ===
    assert error.status_code == 499
    assert cancelled == [True]


def test_blank_command_gets_usage_line(client):
    res = client.post("/process-command", json={"command": "   "})

    assert res.status_code == 200
    assert res.json() == {"response": render_empty_command()}
