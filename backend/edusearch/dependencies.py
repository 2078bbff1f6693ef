from fastapi import HTTPException

from edusearch.services.session_service import SearchSession, session_registry


async def require_session(session_id: str) -> SearchSession:
    session = session_registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Search session not found or expired")
    return session
