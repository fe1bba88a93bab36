"""
Roster endpoints: dancers, materials, judges
"""
from fastapi import APIRouter, Depends, Query, Response

from audition.api.deps import ensure_same_session, get_store, require_admin
from audition.core.store import Store
from audition.errors import NotFoundError, ValidationError
from audition.models import Identity
from audition.normalizer import normalize_dancer
from audition.services import sessions as session_service
from audition.services.auth import issue_token
from audition.services.dancer_import import import_dancers_csv


router = APIRouter(tags=["roster"])


# ==================== DANCERS ====================

@router.get("/dancers")
def list_dancers(session_id: str = Query(..., alias="sessionId"),
                 store: Store = Depends(get_store)):
    return store.list_dancers(session_id)


@router.post("/dancers", status_code=201)
def add_dancers(payload: dict,
                identity: Identity = Depends(require_admin),
                store: Store = Depends(get_store)):
    """
    Add one dancer, or a list of dancers

    Request (single):
        {"sessionId": "...", "dancer_number": 101, "name": "Ava", "grade": 10}
    Request (bulk):
        {"sessionId": "...", "dancers": [{"dancer_number": 101, "name": "Ava"}, ...]}

    Bulk response:
        {"imported": [...], "failed": null | {"index", "dancer_number", "error"}}
    """
    session_id = payload.get("sessionId") or payload.get("session_id")
    if not session_id:
        raise ValidationError("sessionId is required")
    ensure_same_session(identity, session_id)

    if isinstance(payload.get("dancers"), list):
        return session_service.add_dancers(
            store, session_id, [normalize_dancer(d) for d in payload["dancers"] if isinstance(d, dict)]
        )

    dancer = normalize_dancer(payload)
    return session_service.add_dancer(
        store, session_id, dancer["dancer_number"], dancer["name"], dancer["grade"]
    )


@router.post("/dancers/import", status_code=201)
def import_dancers(payload: dict,
                   identity: Identity = Depends(require_admin),
                   store: Store = Depends(get_store)):
    """
    Import dancers from CSV text

    Request:
        {"sessionId": "...", "csv": "dancer_number,name,grade\\n101,Ava,10\\n..."}
    """
    session_id = payload.get("sessionId")
    if not session_id or not payload.get("csv"):
        raise ValidationError("sessionId and csv are required")
    ensure_same_session(identity, session_id)
    return import_dancers_csv(store, session_id, payload["csv"])


@router.delete("/dancers/{dancer_id}")
def delete_dancer(dancer_id: str, force: bool = False,
                  identity: Identity = Depends(require_admin),
                  store: Store = Depends(get_store)):
    dancer = store.get_dancer(dancer_id)
    if dancer is None:
        raise NotFoundError("Dancer not found")
    ensure_same_session(identity, dancer.session_id)
    session_service.delete_dancer(store, dancer_id, force=force)
    return {"success": True}


# ==================== MATERIALS ====================

@router.get("/materials")
def list_materials(session_id: str = Query(..., alias="sessionId"),
                   store: Store = Depends(get_store)):
    return store.list_materials(session_id)


@router.post("/materials", status_code=201)
def add_material(payload: dict,
                 identity: Identity = Depends(require_admin),
                 store: Store = Depends(get_store)):
    """Request: {"sessionId": "...", "materialName": "Jazz Combo"}"""
    session_id = payload.get("sessionId")
    if not session_id:
        raise ValidationError("sessionId and materialName required")
    ensure_same_session(identity, session_id)
    return session_service.add_material(store, session_id, payload.get("materialName") or payload.get("name"))


# ==================== JUDGES ====================

@router.get("/judges")
def list_judges(session_id: str = Query(..., alias="sessionId"),
                identity: Identity = Depends(require_admin),
                store: Store = Depends(get_store)):
    """Judges with their PINs (admin only)"""
    ensure_same_session(identity, session_id)
    return store.list_judges(session_id)


@router.post("/judges")
def add_judge(payload: dict, response: Response,
              identity: Identity = Depends(require_admin),
              store: Store = Depends(get_store)):
    """
    Add a judge (or the admin-judge)

    Request:
        {"sessionId": "...", "name": "Judge A", "isAdminJudge": false}

    For the admin-judge a fresh admin token carrying its judge id is returned
    so the admin can submit scores.
    """
    session_id = payload.get("sessionId")
    if not session_id:
        raise ValidationError("name and sessionId required")
    ensure_same_session(identity, session_id)

    is_admin_judge = bool(payload.get("isAdminJudge"))
    result = session_service.add_judge(store, session_id, payload.get("name"), is_admin_judge)
    judge = result["judge"]
    response.status_code = 201 if result["created"] else 200
    body = judge.model_dump()
    if is_admin_judge:
        body["token"] = issue_token(identity.model_copy(
            update={"judge_id": judge.id, "judge_name": judge.name}
        ))
    return body


@router.delete("/judges/{judge_id}")
def deactivate_judge(judge_id: str,
                     identity: Identity = Depends(require_admin),
                     store: Store = Depends(get_store)):
    judge = store.get_judge(judge_id)
    if judge is None:
        raise NotFoundError("Judge not found")
    ensure_same_session(identity, judge.session_id)
    return session_service.deactivate_judge(store, judge_id)
