"""Game results provider: the protocol settlement depends on and its HTTP client."""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import ValidationError
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from betledger.config import Settings, get_results_api_key, get_settings
from betledger.data.rate_limit import RateLimiter
from betledger.data.schemas import NO_MATCH, EventHandle, EventListSchema, EventSchema, StatListSchema
from betledger.errors import ResultsProviderError, SettlementAbort

logger = logging.getLogger(__name__)

SCORE_STAT = "points"
SEARCH_RADIUS_DAYS = 1
EVENT_CACHE_SIZE = 512


class GameResultsProvider(Protocol):
    """What the settlement tracker needs from a results feed."""

    def find_event(self, sport: str, participant: str, approx_date: datetime) -> EventHandle | None:
        ...

    def is_complete(self, handle: EventHandle) -> bool:
        ...

    def stat_value(self, handle: EventHandle, participant: str, stat_name: str) -> float | None:
        ...


def _retry_log(retry_state: RetryCallState) -> None:
    attempt = retry_state.attempt_number
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning("Results provider retry attempt %d due to %s", attempt, exception)


class HttpResultsProvider:
    """httpx client for the scores feed, throttled by a shared ``RateLimiter``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        rate_limiter: RateLimiter | None = None,
        client: httpx.Client | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.api_key = api_key or get_results_api_key()
        self.base_url = (base_url or self.settings.results_base_url).rstrip("/")
        self.timeout = self.settings.results_timeout_seconds
        self.rate_limiter = rate_limiter or RateLimiter(self.settings.results_rate_limit_per_minute)
        self._client = client or httpx.Client(headers={"Authorization": self.api_key})
        self._request_with_retry = retry(
            stop=stop_after_attempt(self.settings.results_max_attempts),
            wait=wait_fixed(1),
            retry=retry_if_exception_type(httpx.TransportError),
            after=_retry_log,
            reraise=True,
        )(self._send)
        self._events: OrderedDict[str, EventSchema] = OrderedDict()

    def __enter__(self) -> "HttpResultsProvider":  # pragma: no cover - context sugar
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _remember(self, event: EventSchema) -> None:
        self._events[event.id] = event
        self._events.move_to_end(event.id)
        while len(self._events) > EVENT_CACHE_SIZE:
            self._events.popitem(last=False)

    def _send(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.rate_limiter.wait_for_slot()
        response = self._client.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            return self._request_with_retry(path, params)
        except (httpx.HTTPError, ValueError) as exc:
            raise ResultsProviderError(f"GET {path} failed: {exc}") from exc

    def events_on(self, sport: str, day: datetime) -> list[EventSchema]:
        payload = self._request("/events", {"sport": sport, "date": day.date().isoformat()})
        try:
            events = EventListSchema.model_validate(payload).data
        except ValidationError as exc:
            raise ResultsProviderError(f"Malformed events payload: {exc}") from exc
        for event in events:
            self._remember(event)
        return events

    def find_event(self, sport: str, participant: str, approx_date: datetime) -> EventHandle | None:
        """Event on the closest day that names ``participant`` unambiguously.

        Exact name matches win over whole-word partial ones. Two candidate
        events of equal strength on the same day raise ``SettlementAbort``.
        """

        offsets = [0] + [sign * day for day in range(1, SEARCH_RADIUS_DAYS + 1) for sign in (-1, 1)]
        for offset in offsets:
            handles = [
                EventHandle(
                    event_id=event.id,
                    sport=event.sport,
                    home_team=event.home_team,
                    away_team=event.away_team,
                    start_time=event.start_time,
                )
                for event in self.events_on(sport, approx_date + timedelta(days=offset))
            ]
            best = max((handle.match_strength(participant) for handle in handles), default=NO_MATCH)
            if best == NO_MATCH:
                continue
            candidates = [handle for handle in handles if handle.match_strength(participant) == best]
            if len(candidates) > 1 or candidates[0].side_of(participant) is None:
                names = ", ".join(f"{h.home_team} vs {h.away_team}" for h in candidates)
                raise SettlementAbort(f"{participant} matches more than one side: {names}")
            return candidates[0]
        logger.debug("No %s event for %s near %s", sport, participant, approx_date.date())
        return None

    def _event(self, handle: EventHandle) -> EventSchema:
        payload = self._request(f"/events/{handle.event_id}")
        try:
            event = EventSchema.model_validate(payload.get("data", payload))
        except ValidationError as exc:
            raise ResultsProviderError(f"Malformed event payload: {exc}") from exc
        self._remember(event)
        return event

    def is_complete(self, handle: EventHandle) -> bool:
        return self._event(handle).is_final

    def stat_value(self, handle: EventHandle, participant: str, stat_name: str) -> float | None:
        side = handle.side_of(participant)
        if stat_name.lower() == SCORE_STAT and side is not None:
            event = self._events.get(handle.event_id) or self._event(handle)
            return event.home_score if side == "home" else event.away_score

        payload = self._request(f"/events/{handle.event_id}/stats")
        try:
            lines = StatListSchema.model_validate(payload).data
        except ValidationError as exc:
            raise ResultsProviderError(f"Malformed stats payload: {exc}") from exc
        wanted_player = participant.strip().lower()
        wanted_stat = stat_name.strip().lower()
        for line in lines:
            if line.participant.strip().lower() == wanted_player and line.stat_name.strip().lower() == wanted_stat:
                return line.value
        return None
