"""
Search session state and the reducer that moves it between phases.

    idle --start--> searching --succeeded/failed--> results --reset--> idle
                        ^                              |
                        +------------start-------------+

Completion events carry the request id they answer; the reducer drops any
whose id is not the active one, so a late response can never overwrite a
session that was reset or resubmitted in the meantime.
"""
from dataclasses import dataclass, replace
from enum import Enum

from edusearch.schemas.search import ContentType, DisplayResult, SearchQuery


class Phase(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    RESULTS = "results"


@dataclass(frozen=True)
class SessionState:
    phase: Phase = Phase.IDLE
    query_text: str = ""
    content_type: ContentType = "resource"
    results: tuple[DisplayResult, ...] = ()
    request_id: int | None = None

    @property
    def is_searching(self) -> bool:
        return self.phase is Phase.SEARCHING

    @property
    def has_searched(self) -> bool:
        return self.phase is not Phase.IDLE


@dataclass(frozen=True)
class QueryTextChanged:
    text: str


@dataclass(frozen=True)
class ContentTypeSelected:
    content_type: ContentType


@dataclass(frozen=True)
class SearchStarted:
    query: SearchQuery
    request_id: int


@dataclass(frozen=True)
class SearchSucceeded:
    request_id: int
    results: tuple[DisplayResult, ...]


@dataclass(frozen=True)
class SearchFailed:
    request_id: int


@dataclass(frozen=True)
class SessionReset:
    default_content_type: ContentType = "resource"


SessionEvent = (
    QueryTextChanged
    | ContentTypeSelected
    | SearchStarted
    | SearchSucceeded
    | SearchFailed
    | SessionReset
)


def _is_active(state: SessionState, request_id: int) -> bool:
    return state.phase is Phase.SEARCHING and state.request_id == request_id


def reduce(state: SessionState, event: SessionEvent) -> SessionState:
    """Return the state after `event`. Ignored events return `state` itself."""
    if isinstance(event, SessionReset):
        return SessionState(content_type=event.default_content_type)

    if isinstance(event, QueryTextChanged):
        if state.is_searching:
            return state
        return replace(state, query_text=event.text)

    if isinstance(event, ContentTypeSelected):
        if state.phase is not Phase.IDLE:
            return state
        return replace(state, content_type=event.content_type)

    if isinstance(event, SearchStarted):
        if state.is_searching or not event.query.text.strip():
            return state
        return SessionState(
            phase=Phase.SEARCHING,
            query_text=event.query.text,
            content_type=event.query.content_type,
            results=(),
            request_id=event.request_id,
        )

    if isinstance(event, SearchSucceeded):
        if not _is_active(state, event.request_id):
            return state
        return replace(state, phase=Phase.RESULTS, results=tuple(event.results), request_id=None)

    if isinstance(event, SearchFailed):
        if not _is_active(state, event.request_id):
            return state
        return replace(state, phase=Phase.RESULTS, results=(), request_id=None)

    raise TypeError(f"Unknown session event: {event!r}")
