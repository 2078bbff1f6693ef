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

__all__ = [
    "ContentTypeSelected",
    "Phase",
    "QueryTextChanged",
    "SearchFailed",
    "SearchStarted",
    "SearchSucceeded",
    "SessionEvent",
    "SessionReset",
    "SessionState",
    "reduce",
]
