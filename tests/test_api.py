"""HTTP surface tests with overridden database and results-feed dependencies."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import PROP_BLOCK, ROUND_ROBIN_BLOCK, STRAIGHT_BLOCK
from betledger.api import main as api_main
from betledger.api.server import app, get_results_provider, get_session_factory


@pytest.fixture()
def client(session_factory, provider):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_results_provider] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


def _import(client: TestClient, text: str) -> list[int]:
    response = client.post("/imports", json={"text": text})
    assert response.status_code == 200
    return response.json()["wager_ids"]


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_import_reports_counts_and_duplicates(client) -> None:
    first = client.post("/imports", json={"text": STRAIGHT_BLOCK + "\n" + PROP_BLOCK}).json()
    again = client.post("/imports", json={"text": STRAIGHT_BLOCK}).json()

    assert first["parsed"] == 2
    assert len(first["wager_ids"]) == 2
    assert again["duplicates"] == 1
    assert again["wager_ids"] == []


def test_import_rejects_empty_text(client) -> None:
    assert client.post("/imports", json={"text": ""}).status_code == 422


def test_get_wager_with_legs(client) -> None:
    (wager_id,) = _import(client, STRAIGHT_BLOCK)

    body = client.get(f"/wagers/{wager_id}").json()

    assert body["ticket_id"] == "612345678"
    assert body["american_odds"] == -216
    assert body["legs"][0]["participant"] == "OHIO STATE"
    assert client.get("/wagers/999").status_code == 404


def test_settle_endpoint(client, provider) -> None:
    provider.add_game("NCAAF", "OHIO STATE", "MICHIGAN", 31, 17)
    (wager_id,) = _import(client, STRAIGHT_BLOCK)

    body = client.post(f"/wagers/{wager_id}/settle").json()

    assert body["decision"] == "won"
    assert body["status"] == "won"
    assert body["settled_at"] is not None
    assert client.post("/wagers/999/settle").status_code == 404


def test_round_robin_breakdown(client) -> None:
    (wager_id,) = _import(client, ROUND_ROBIN_BLOCK)

    body = client.get(f"/wagers/{wager_id}/round-robin").json()

    assert body["parlay_size"] == 2
    assert body["stake_per_parlay"] == pytest.approx(10.0)
    assert [parlay["legs"] for parlay in body["parlays"]] == [[0, 1], [0, 2], [1, 2]]
    assert [parlay["status"] for parlay in body["parlays"]] == ["lost", "lost", "won"]
    assert body["parlays"][0]["american_odds"] == 264
    assert body["won_parlays"] == 1


def test_round_robin_of_straight_bet_is_rejected(client) -> None:
    (wager_id,) = _import(client, STRAIGHT_BLOCK)

    assert client.get(f"/wagers/{wager_id}/round-robin").status_code == 422


def test_results_provider_is_shared_and_closed_on_shutdown(monkeypatch) -> None:
    monkeypatch.setenv("RESULTS_API_KEY", "test-key")
    get_results_provider.cache_clear()

    first = get_results_provider()
    assert get_results_provider() is first
    assert get_results_provider().rate_limiter is first.rate_limiter

    with TestClient(app):
        pass

    assert first._client.is_closed
    assert get_results_provider.cache_info().currsize == 0


def test_launcher_creates_tables_and_serves(monkeypatch) -> None:
    calls: dict = {}
    monkeypatch.setattr(api_main, "init_db", lambda: calls.setdefault("init_db", True))
    monkeypatch.setattr(api_main.uvicorn, "run", lambda target, **kwargs: calls.update(target=target, **kwargs))

    api_main.main(["--host", "127.0.0.1", "--port", "9001"])

    assert calls["init_db"] is True
    assert calls["target"] == "betledger.api.server:app"
    assert (calls["host"], calls["port"], calls["reload"]) == ("127.0.0.1", 9001, False)


def test_launcher_can_skip_table_creation(monkeypatch) -> None:
    calls: dict = {}
    monkeypatch.setattr(api_main, "init_db", lambda: calls.setdefault("init_db", True))
    monkeypatch.setattr(api_main.uvicorn, "run", lambda target, **kwargs: calls.update(target=target))

    api_main.main(["--skip-init-db"])

    assert "init_db" not in calls
    assert calls["target"] == "betledger.api.server:app"
