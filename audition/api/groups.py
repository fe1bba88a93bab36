"""
Dancer group endpoints: templates, push, retract, archive, progress, completion checks
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from audition.api.deps import ensure_same_session, get_store, require_admin, require_identity
from audition.core import lifecycle
from audition.core.store import Store
from audition.errors import ValidationError
from audition.models import Identity


router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("")
def list_groups(session_id: str = Query(..., alias="sessionId"),
                material_id: Optional[str] = Query(default=None, alias="materialId"),
                status: Optional[str] = None,
                include_archived: bool = Query(default=False, alias="includeArchived"),
                store: Store = Depends(get_store)):
    """Templates and instances of a session, archived ones hidden by default"""
    return lifecycle.list_groups(store, session_id, material_id, status, include_archived)


@router.get("/active")
def active_groups(identity: Identity = Depends(require_identity),
                  store: Store = Depends(get_store)):
    """Instances currently open for scoring in the caller's session"""
    return lifecycle.active_instances(store, identity.session_id)


@router.post("", status_code=201)
def create_template(payload: dict,
                    identity: Identity = Depends(require_admin),
                    store: Store = Depends(get_store)):
    """
    Create a template group

    Request:
        {"sessionId": "...", "groupNumber": 1, "dancerIds": ["...", "..."]}
    """
    session_id = payload.get("sessionId")
    dancer_ids = payload.get("dancerIds")
    group_number = payload.get("groupNumber")
    if not session_id or not isinstance(dancer_ids, list) or group_number is None:
        raise ValidationError("Missing required fields")
    ensure_same_session(identity, session_id)
    try:
        group_number = int(group_number)
    except (TypeError, ValueError) as e:
        raise ValidationError("groupNumber must be an integer") from e
    return lifecycle.create_template(store, session_id, group_number, dancer_ids)


@router.delete("/{group_id}")
def archive_group(group_id: str,
                  identity: Identity = Depends(require_admin),
                  store: Store = Depends(get_store)):
    """Archive a template and all of its instances"""
    ensure_same_session(identity, lifecycle.get_group(store, group_id).session_id)
    archived = lifecycle.archive_group(store, group_id)
    return {"success": True, "archived": archived}


@router.post("/{group_id}/push")
def push_group(group_id: str, payload: Optional[dict] = None,
               identity: Identity = Depends(require_admin),
               store: Store = Depends(get_store)):
    """
    Push a template in front of the judges

    Request:
        {"materialId": "..."}
    """
    ensure_same_session(identity, lifecycle.get_group(store, group_id).session_id)
    material_id = (payload or {}).get("materialId")
    return lifecycle.push_group(store, group_id, material_id)


@router.post("/{group_id}/retract")
def retract_group(group_id: str, payload: Optional[dict] = None,
                  identity: Identity = Depends(require_admin),
                  store: Store = Depends(get_store)):
    """
    Retract a pushed instance

    Request:
        {"deleteScores": false}
    """
    ensure_same_session(identity, lifecycle.get_group(store, group_id).session_id)
    delete_scores = (payload or {}).get("deleteScores") is True
    return lifecycle.retract_group(store, group_id, delete_scores=delete_scores)


@router.get("/{group_id}/progress")
def group_progress(group_id: str,
                   identity: Identity = Depends(require_identity),
                   store: Store = Depends(get_store)):
    """Submission progress of an instance (read only)"""
    ensure_same_session(identity, lifecycle.get_group(store, group_id).session_id)
    return lifecycle.group_progress(store, group_id)


@router.post("/{group_id}/check-completion")
def check_completion(group_id: str,
                     identity: Identity = Depends(require_admin),
                     store: Store = Depends(get_store)):
    """
    Re-run completion detection for an instance

    Settles a group left active by a judge deactivated after the last
    submission. Does nothing while the session is locked.

    Response:
        {"completed": bool, "progress": {...}}
    """
    ensure_same_session(identity, lifecycle.get_group(store, group_id).session_id)
    completed = lifecycle.detect_completion(store, group_id)
    return {"completed": completed, "progress": lifecycle.group_progress(store, group_id)}
