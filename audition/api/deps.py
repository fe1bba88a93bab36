"""
Shared router dependencies: store access and identity checks
"""
from typing import Optional

from fastapi import Depends, Header

from audition import state
from audition.core.store import Store
from audition.errors import AuthorizationError
from audition.models import Identity
from audition.services.auth import resolve_token


def get_store() -> Store:
    return state.get_store()


def get_identity(authorization: Optional[str] = Header(default=None)) -> Optional[Identity]:
    """Identity from 'Authorization: Bearer <token>', None when absent/invalid"""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return resolve_token(authorization[len("Bearer "):].strip())


def require_identity(identity: Optional[Identity] = Depends(get_identity)) -> Identity:
    if identity is None:
        raise AuthorizationError()
    return identity


def require_admin(identity: Optional[Identity] = Depends(get_identity)) -> Identity:
    if identity is None or identity.role != "admin":
        raise AuthorizationError()
    return identity


def ensure_same_session(identity: Identity, session_id: str) -> None:
    """Tokens are scoped to one session"""
    if identity.session_id != session_id:
        raise AuthorizationError()
