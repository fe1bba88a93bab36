"""PIN login endpoint"""
from fastapi import APIRouter, Depends

from audition.api.deps import get_store
from audition.core.store import Store
from audition.services.auth import login


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login_endpoint(payload: dict, store: Store = Depends(get_store)):
    """
    Exchange a PIN for a bearer token

    Request:
        {"sessionId": "<id or code>", "pin": "1234", "role": "judge|admin"}
    """
    return login(
        store,
        str(payload.get("sessionId") or payload.get("sessionCode") or ""),
        str(payload.get("pin") or ""),
        payload.get("role") or "",
    )
