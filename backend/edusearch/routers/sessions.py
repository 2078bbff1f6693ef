from fastapi import APIRouter, Depends, HTTPException, Response

from edusearch.dependencies import require_session
from edusearch.schemas.search import (
    ContentTypeUpdate,
    KeyPress,
    QueryTextUpdate,
    SearchQuery,
    SessionView,
    SubmitRequest,
)
from edusearch.services.session_service import SearchSession, session_registry

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionView, status_code=201)
async def create_session():
    session_id, session = session_registry.create()
    return session.view(session_id)


@router.get("/{session_id}", response_model=SessionView)
async def get_session(session_id: str, session: SearchSession = Depends(require_session)):
    return session.view(session_id)


@router.put("/{session_id}/query", response_model=SessionView)
async def update_query_text(
    session_id: str,
    req: QueryTextUpdate,
    session: SearchSession = Depends(require_session),
):
    session.set_query_text(req.text)
    return session.view(session_id)


@router.put("/{session_id}/content-type", response_model=SessionView)
async def select_content_type(
    session_id: str,
    req: ContentTypeUpdate,
    session: SearchSession = Depends(require_session),
):
    session.select_content_type(req.content_type)
    return session.view(session_id)


@router.post("/{session_id}/submit", response_model=SessionView)
async def submit_search(
    session_id: str,
    req: SubmitRequest,
    session: SearchSession = Depends(require_session),
):
    # Blank text and submits during a search are no-ops, not client errors
    query = SearchQuery(
        text=req.text if req.text is not None else session.state.query_text,
        content_type=req.content_type or session.state.content_type,
    )
    await session.submit(query)
    return session.view(session_id)


@router.post("/{session_id}/keys", response_model=SessionView)
async def press_key(
    session_id: str,
    req: KeyPress,
    session: SearchSession = Depends(require_session),
):
    await session.handle_key(req.key)
    return session.view(session_id)


@router.post("/{session_id}/reset", response_model=SessionView)
async def reset_session(session_id: str, session: SearchSession = Depends(require_session)):
    session.reset()
    return session.view(session_id)


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str):
    if not session_registry.discard(session_id):
        raise HTTPException(status_code=404, detail="Search session not found or expired")
    return Response(status_code=204)
