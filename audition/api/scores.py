"""
Score submission and editing endpoints
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from audition.api.deps import get_identity, get_store, require_identity
from audition.core import submission
from audition.core.store import Store
from audition.models import Identity
from audition.normalizer import normalize_submission


router = APIRouter(prefix="/scores", tags=["scores"])
logger = logging.getLogger(__name__)


@router.post("/submit")
def submit_scores(payload: dict, request: Request,
                  identity: Optional[Identity] = Depends(get_identity),
                  store: Store = Depends(get_store)):
    """
    Submit one judge's scores for the pushed group

    Request:
        {
            "groupId": "<instance id>",
            "judgeId": "<judge id>",
            "scores": [
                {"dancerId": "...", "technique": 4.5, "musicality": 4,
                 "expression": 3.5, "timing": 4, "presentation": 5},
                ...
            ]
        }

    Response:
        {"success": true, "score_count": 6, "group_completed": false}
    """
    client_ip = request.client.host if request.client else "unknown"
    logger.info(f"📥 Score submission from {client_ip} | judge={identity.judge_id if identity else None}")

    group_id, judge_id, entries = normalize_submission(payload)
    return submission.submit_scores(store, identity, group_id, judge_id, entries)


@router.get("")
def list_scores(group_id: Optional[str] = Query(default=None, alias="groupId"),
                judge_id: Optional[str] = Query(default=None, alias="judgeId"),
                dancer_id: Optional[str] = Query(default=None, alias="dancerId"),
                store: Store = Depends(get_store)):
    return submission.list_scores(store, group_id, judge_id, dancer_id)


@router.get("/submissions")
def my_submissions(identity: Identity = Depends(require_identity),
                   store: Store = Depends(get_store)):
    """Group ids the calling judge has already submitted"""
    if not identity.judge_id:
        return {"group_ids": []}
    return {"group_ids": submission.judge_submission_status(store, identity.judge_id)}


@router.patch("/{score_id}")
def edit_score(score_id: str, payload: dict,
               identity: Optional[Identity] = Depends(get_identity),
               store: Store = Depends(get_store)):
    """
    Edit a submitted score (owning judge or admin, session unlocked)

    Request:
        {"technique": 4.5}
    """
    return submission.edit_score(store, identity, score_id, payload)
