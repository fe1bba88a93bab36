"""Login and bearer-token registry"""
import logging
import time
import uuid
from typing import Dict, Optional

from audition import state
from audition.core.store import Store
from audition.errors import AuthorizationError, NotFoundError, ValidationError
from audition.models import Identity, Session


logger = logging.getLogger(__name__)


def issue_token(identity: Identity) -> str:
    token = uuid.uuid4().hex
    expires_at = time.time() + state.SETTINGS.token_ttl_hours * 3600
    state.TOKEN_REGISTRY[token] = {"identity": identity, "expires_at": expires_at}
    return token


def resolve_token(token: Optional[str]) -> Optional[Identity]:
    """Identity behind a bearer token, or None if unknown/expired"""
    if not token:
        return None
    entry = state.TOKEN_REGISTRY.get(token)
    if not entry:
        return None
    if entry["expires_at"] < time.time():
        state.TOKEN_REGISTRY.pop(token, None)
        return None
    return entry["identity"]


def revoke_session_tokens(session_id: str) -> int:
    stale = [t for t, e in state.TOKEN_REGISTRY.items() if e["identity"].session_id == session_id]
    for token in stale:
        del state.TOKEN_REGISTRY[token]
    return len(stale)


def resolve_session(store: Store, session_ref: str) -> Session:
    """Find a session by id, falling back to its (case-insensitive) code"""
    session = store.get_session(session_ref) or store.get_session_by_code(session_ref)
    if session is None:
        raise NotFoundError("Session not found")
    return session


def login(store: Store, session_ref: str, pin: str, role: str) -> Dict:
    """
    Exchange a PIN for a bearer token

    Admins log in with the session's admin PIN; if an active admin-judge
    exists its id is attached so the admin can also submit scores.
    """
    if not session_ref or not pin or not role:
        raise ValidationError("Missing required fields")
    if role not in ("admin", "judge"):
        raise ValidationError("Invalid role")

    session = resolve_session(store, session_ref)

    if role == "admin":
        if session.admin_pin != pin:
            logger.warning(f"🔒 Failed admin login for session {session.session_code}")
            raise AuthorizationError("Invalid PIN")
        admin_judge = store.find_admin_judge(session.id)
        identity = Identity(
            session_id=session.id,
            role="admin",
            judge_id=admin_judge.id if admin_judge else None,
            judge_name=admin_judge.name if admin_judge else None,
        )
        return {
            "success": True,
            "token": issue_token(identity),
            "sessionId": session.id,
            "sessionName": session.name,
            "judgeId": identity.judge_id,
        }

    judge = store.find_judge_by_pin(session.id, pin)
    if judge is None:
        logger.warning(f"🔒 Failed judge login for session {session.session_code}")
        raise AuthorizationError("Invalid PIN")

    identity = Identity(session_id=session.id, role="judge", judge_id=judge.id, judge_name=judge.name)
    return {
        "success": True,
        "token": issue_token(identity),
        "sessionId": session.id,
        "sessionName": session.name,
        "judgeId": judge.id,
        "judgeName": judge.name,
    }
