"""HTTP results provider tests against a mocked transport."""

from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import httpx
import pytest

from betledger.data.rate_limit import RateLimiter
from betledger.data import results_client
from betledger.data.results_client import HttpResultsProvider
from betledger.errors import ResultsProviderError, SettlementAbort

EVENT = {
    "id": "evt-1",
    "sport": "NBA",
    "start_time": "2025-12-01T19:00:00",
    "status": "final",
    "home_team": "BOS CELTICS",
    "away_team": "NY KNICKS",
    "home_score": 112,
    "away_score": 104,
}


def _settings(max_attempts: int = 1) -> SimpleNamespace:
    return SimpleNamespace(
        results_base_url="https://scores.test/v1",
        results_timeout_seconds=5.0,
        results_rate_limit_per_minute=0,
        results_max_attempts=max_attempts,
    )


def _provider(handler, limiter: RateLimiter | None = None) -> HttpResultsProvider:
    return HttpResultsProvider(
        api_key="secret",
        rate_limiter=limiter or RateLimiter(0),
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        settings=_settings(),
    )


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/v1/events":
        day = request.url.params["date"]
        return httpx.Response(200, json={"data": [EVENT] if day == "2025-12-01" else []})
    if path == "/v1/events/evt-1":
        return httpx.Response(200, json={"data": EVENT})
    if path == "/v1/events/evt-1/stats":
        return httpx.Response(200, json={"data": [{"participant": "Jalen Brunson", "stat_name": "Points", "value": 31}]})
    return httpx.Response(404)


def test_find_event_searches_neighbouring_days() -> None:
    provider = _provider(_handler)
    handle = provider.find_event("NBA", "ny knicks", datetime(2025, 12, 2, 19, 0))
    assert handle is not None
    assert handle.event_id == "evt-1"
    assert handle.side_of("NY KNICKS") == "away"


def test_find_event_not_found() -> None:
    provider = _provider(_handler)
    assert provider.find_event("NBA", "LA LAKERS", datetime(2025, 12, 1)) is None


def test_scores_and_stats() -> None:
    provider = _provider(_handler)
    handle = provider.find_event("NBA", "BOS CELTICS", datetime(2025, 12, 1))
    assert provider.is_complete(handle) is True
    assert provider.stat_value(handle, "BOS CELTICS", "points") == 112
    assert provider.stat_value(handle, "Jalen Brunson", "points") == 31
    assert provider.stat_value(handle, "jalen brunson", "Points") == 31
    assert provider.stat_value(handle, "Jalen Brunson", "Assists") is None


def test_every_request_takes_a_rate_limit_slot() -> None:
    class CountingLimiter(RateLimiter):
        def __init__(self) -> None:
            super().__init__(0)
            self.calls = 0

        def wait_for_slot(self) -> float:
            self.calls += 1
            return 0.0

    limiter = CountingLimiter()
    provider = _provider(_handler, limiter)
    provider.find_event("NBA", "BOS CELTICS", datetime(2025, 12, 2))
    assert limiter.calls == 2


def test_http_errors_become_provider_errors() -> None:
    provider = _provider(lambda request: httpx.Response(503))
    with pytest.raises(ResultsProviderError):
        provider.find_event("NBA", "BOS CELTICS", datetime(2025, 12, 1))


def test_transport_errors_become_provider_errors() -> None:
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    provider = _provider(boom)
    with pytest.raises(ResultsProviderError):
        provider.find_event("NBA", "BOS CELTICS", datetime(2025, 12, 1))


def _feed(*events: dict) -> HttpResultsProvider:
    by_id = {event["id"]: event for event in events}

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/v1/events":
            day = request.url.params["date"]
            return httpx.Response(200, json={"data": [e for e in events if e["start_time"].startswith(day)]})
        event_id = path.rsplit("/", 1)[-1]
        if event_id in by_id:
            return httpx.Response(200, json={"data": by_id[event_id]})
        return httpx.Response(404)

    return _provider(handler)


def _game(event_id: str, home: str, away: str, day: str = "2025-11-29") -> dict:
    return {**EVENT, "id": event_id, "sport": "NCAAF", "start_time": f"{day}T12:00:00", "home_team": home, "away_team": away}


def test_longer_name_does_not_match_shorter_team() -> None:
    provider = _feed(_game("1", "Ohio", "Kent State"), _game("2", "Ohio State", "Michigan"))

    handle = provider.find_event("NCAAF", "OHIO STATE", datetime(2025, 11, 29))

    assert handle.event_id == "2"
    assert handle.side_of("OHIO STATE") == "home"


def test_exact_name_beats_partial_match() -> None:
    provider = _feed(_game("1", "Texas Tech", "Baylor"), _game("2", "Texas", "Oklahoma"))

    assert provider.find_event("NCAAF", "Texas", datetime(2025, 11, 29)).event_id == "2"
    assert provider.find_event("NCAAF", "Tech", datetime(2025, 11, 29)).event_id == "1"


def test_ambiguous_partial_match_aborts() -> None:
    provider = _feed(_game("1", "LA Lakers", "Utah Jazz"), _game("2", "LA Clippers", "Denver Nuggets"))

    with pytest.raises(SettlementAbort):
        provider.find_event("NCAAF", "LA", datetime(2025, 11, 29))


def test_name_matching_needs_whole_words() -> None:
    handle = _feed(_game("1", "Indiana Pacers", "Boston Celtics")).find_event(
        "NCAAF", "boston celtics", datetime(2025, 11, 29)
    )

    assert handle.side_of("Celtics") == "away"
    assert handle.side_of("Celt") is None
    assert handle.side_of("Indiana Pacers Fan Club") is None


def test_event_cache_is_bounded(monkeypatch) -> None:
    monkeypatch.setattr(results_client, "EVENT_CACHE_SIZE", 2)
    provider = _feed(
        _game("1", "Ohio State", "Michigan", "2025-11-28"),
        _game("2", "Texas", "Oklahoma", "2025-11-29"),
        _game("3", "Alabama", "Auburn", "2025-11-30"),
    )

    provider.find_event("NCAAF", "Texas", datetime(2025, 11, 28))
    provider.find_event("NCAAF", "Alabama", datetime(2025, 11, 30))

    assert list(provider._events) == ["2", "3"]
