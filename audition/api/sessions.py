"""
Session endpoints (create, lookup, update, lock)
"""
import logging

from fastapi import APIRouter, Depends

from audition.api.deps import ensure_same_session, get_store, require_admin
from audition.core.store import Store
from audition.models import Identity, Session
from audition.services import sessions as session_service
from audition.services.auth import resolve_session, revoke_session_tokens


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def public_view(session: Session) -> dict:
    """Session without its admin PIN"""
    return session.model_dump(exclude={"admin_pin"})


@router.get("")
def list_sessions(store: Store = Depends(get_store)):
    return [public_view(s) for s in store.list_sessions()]


@router.post("", status_code=201)
def create_session(payload: dict, store: Store = Depends(get_store)):
    """
    Create a session

    Request:
        {"name": "...", "date": "2026-05-01", "adminPin": "123456", "sessionCode": "SPRING-26"}
    """
    session = session_service.create_session(
        store,
        payload.get("name"),
        payload.get("date"),
        payload.get("adminPin"),
        payload.get("sessionCode"),
    )
    return public_view(session)


@router.get("/{session_ref}")
def get_session(session_ref: str, store: Store = Depends(get_store)):
    """Look a session up by id or code"""
    return public_view(resolve_session(store, session_ref))


@router.patch("/{session_id}")
def update_session(session_id: str, payload: dict,
                   identity: Identity = Depends(require_admin),
                   store: Store = Depends(get_store)):
    ensure_same_session(identity, session_id)
    return public_view(session_service.update_session(store, session_id, payload))


@router.delete("/{session_id}")
def delete_session(session_id: str,
                   identity: Identity = Depends(require_admin),
                   store: Store = Depends(get_store)):
    ensure_same_session(identity, session_id)
    session_service.delete_session(store, session_id)
    revoked = revoke_session_tokens(session_id)
    logger.info(f"🔑 Revoked {revoked} tokens of deleted session {session_id}")
    return {"success": True}


@router.post("/{session_id}/lock")
def lock_session(session_id: str,
                 identity: Identity = Depends(require_admin),
                 store: Store = Depends(get_store)):
    ensure_same_session(identity, session_id)
    return public_view(session_service.lock_session(store, session_id))


@router.delete("/{session_id}/lock")
def unlock_session(session_id: str,
                   identity: Identity = Depends(require_admin),
                   store: Store = Depends(get_store)):
    ensure_same_session(identity, session_id)
    return public_view(session_service.unlock_session(store, session_id))


@router.get("/{session_id}/actions")
def list_admin_actions(session_id: str,
                       identity: Identity = Depends(require_admin),
                       store: Store = Depends(get_store)):
    """Audit log of privileged mutations, oldest first"""
    ensure_same_session(identity, session_id)
    return store.list_admin_actions(session_id)
