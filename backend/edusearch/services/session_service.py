import asyncio
import logging
import secrets
import time
from typing import Any

from pydantic import TypeAdapter, ValidationError

from edusearch.config import settings
from edusearch.models.session import (
    ContentTypeSelected,
    Phase,
    QueryTextChanged,
    SearchFailed,
    SearchStarted,
    SearchSucceeded,
    SessionEvent,
    SessionReset,
    SessionState,
    reduce,
)
from edusearch.schemas.search import ContentType, RawResult, SearchQuery, SessionView
from edusearch.services.result_service import normalize, to_card
from edusearch.services.search_client import RemoteSearchClient, SearchTransportError

logger = logging.getLogger(__name__)

_raw_results = TypeAdapter(list[RawResult])


def extract_matches(payload: Any) -> list:
    """
    Pull the hit list out of a webhook body.

    Accepts {"matches": [...]} or [{"matches": [...]}, ...]; any other shape
    yields an empty list.
    """
    if isinstance(payload, dict):
        matches = payload.get("matches")
        return matches if isinstance(matches, list) else []
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        matches = payload[0].get("matches")
        return matches if isinstance(matches, list) else []
    return []


def status_message(state: SessionState) -> str:
    if state.is_searching:
        return "Cargando resultados..."
    if state.has_searched:
        return f"Resultados de búsqueda ({len(state.results)} encontrados):"
    return "Esperando resultados..."


class SearchSession:
    """Owns one SessionState and the single outbound request it may have in flight."""

    def __init__(
        self,
        client: RemoteSearchClient,
        default_content_type: ContentType = "resource",
        timeout: float | None = None,
    ):
        self._client = client
        self._default_content_type = default_content_type
        self._timeout = timeout if timeout is not None else client.timeout
        self._last_request_id = 0
        self.state = SessionState(content_type=default_content_type)
        self.last_seen = time.time()

    def dispatch(self, event: SessionEvent) -> SessionState:
        self.state = reduce(self.state, event)
        self.last_seen = time.time()
        return self.state

    def set_query_text(self, text: str) -> SessionState:
        return self.dispatch(QueryTextChanged(text))

    def select_content_type(self, content_type: ContentType) -> SessionState:
        return self.dispatch(ContentTypeSelected(content_type))

    def reset(self) -> SessionState:
        return self.dispatch(SessionReset(self._default_content_type))

    async def handle_key(self, key: str) -> SessionState:
        if key != "Enter":
            return self.state
        return await self.submit(
            SearchQuery(text=self.state.query_text, content_type=self.state.content_type)
        )

    async def submit(self, query: SearchQuery) -> SessionState:
        self._last_request_id += 1
        request_id = self._last_request_id

        before = self.state
        self.dispatch(SearchStarted(query, request_id))
        if self.state is before:
            logger.debug("Ignoring submit of %r (blank query or search in flight)", query.text)
            return self.state

        try:
            payload = await asyncio.wait_for(self._client.search(query), timeout=self._timeout)
            results = tuple(normalize(raw) for raw in _raw_results.validate_python(extract_matches(payload)))
        except SearchTransportError as exc:
            logger.warning("Search request %d failed: %s", request_id, exc)
            self.dispatch(SearchFailed(request_id))
        except asyncio.TimeoutError:
            logger.warning("Search request %d timed out after %.1fs", request_id, self._timeout)
            self.dispatch(SearchFailed(request_id))
        except ValidationError as exc:
            logger.warning(
                "Search request %d returned %d malformed hit(s): %s",
                request_id,
                exc.error_count(),
                exc,
            )
            self.dispatch(SearchFailed(request_id))
        else:
            if self.state.request_id != request_id:
                logger.debug("Discarding stale response for request %d", request_id)
            self.dispatch(SearchSucceeded(request_id, results))
        finally:
            # Cancellation or an unexpected error must not leave the session searching
            if self.state.phase is Phase.SEARCHING and self.state.request_id == request_id:
                self.dispatch(SearchFailed(request_id))
        return self.state

    def view(self, session_id: str) -> SessionView:
        state = self.state
        return SessionView(
            session_id=session_id,
            phase=state.phase.value,
            query_text=state.query_text,
            content_type=state.content_type,
            is_searching=state.is_searching,
            has_searched=state.has_searched,
            status_message=status_message(state),
            result_count=len(state.results),
            results=[to_card(r) for r in state.results],
        )


class SessionRegistry:
    def __init__(self):
        self._sessions: dict[str, SearchSession] = {}
        self._client: RemoteSearchClient | None = None

    @property
    def client(self) -> RemoteSearchClient:
        if self._client is None:
            self._client = RemoteSearchClient(
                settings.search_endpoint_url,
                timeout=settings.request_timeout_seconds,
                send_content_type=settings.send_content_type,
            )
        return self._client

    @client.setter
    def client(self, client: RemoteSearchClient | None):
        self._client = client

    def _cleanup_expired(self):
        cutoff = time.time() - settings.session_idle_seconds
        expired = [
            sid for sid, s in self._sessions.items()
            if s.last_seen < cutoff and not s.state.is_searching
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Purged %d idle search session(s)", len(expired))

    def create(self) -> tuple[str, SearchSession]:
        self._cleanup_expired()
        session_id = secrets.token_hex(16)
        session = SearchSession(
            self.client,
            default_content_type=settings.default_content_type,
            timeout=settings.request_timeout_seconds,
        )
        self._sessions[session_id] = session
        return session_id, session

    def get(self, session_id: str) -> SearchSession | None:
        self._cleanup_expired()
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_seen = time.time()
        return session

    def discard(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def clear(self):
        self._sessions.clear()

    async def aclose(self):
        self.clear()
        if self._client is not None:
            await self._client.close()


session_registry = SessionRegistry()
