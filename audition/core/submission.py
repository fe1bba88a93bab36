"""
Submission Coordinator

submit():
  1. identity must be a judge, or an admin acting as a judge, submitting as itself
  2. group must be a pushed instance
  3. session must be unlocked
  4. batch non-empty, every entry names a dancer of the group (once)
  5. every present category value legal (unset categories are allowed)
  6. no prior submission for (group, judge)
  7. scores + submission marker persisted in one transaction; the store's
     UNIQUE(group_id, judge_id) rejects a concurrent duplicate
  8. completion detection
"""
import logging
from typing import Any, Dict, List, Optional

from audition.core import lifecycle
from audition.core.store import Store
from audition.core.validation import is_valid_score, validate_score_set
from audition.errors import (
    AuthorizationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    session_locked,
)
from audition.models import SCORE_CATEGORIES, Identity, Score, ScoreEntry


logger = logging.getLogger(__name__)


def acting_judge_id(identity: Optional[Identity]) -> str:
    """
    Judge id a caller may submit as

    Accepts role judge, or role admin carrying a judge id (admin-as-judge).
    """
    if identity is None:
        raise AuthorizationError()
    if identity.role == "judge" and identity.judge_id:
        return identity.judge_id
    if identity.role == "admin" and identity.judge_id:
        return identity.judge_id
    raise AuthorizationError()


def _check_locked(store: Store, session_id: str) -> None:
    session = store.get_session(session_id)
    if session is None:
        raise NotFoundError("Session not found")
    if session.is_locked:
        raise session_locked()


def _build_entries(raw_scores: List[Dict[str, Any]], roster: List[str]) -> List[ScoreEntry]:
    if not isinstance(raw_scores, list) or not raw_scores:
        raise ValidationError("Scores array required")

    seen = set()
    for raw in raw_scores:
        if not isinstance(raw, dict) or not raw.get("dancer_id"):
            raise ValidationError("Each score must have a dancerId")
        dancer_id = raw["dancer_id"]
        if dancer_id not in roster:
            raise ValidationError(f"Dancer {dancer_id} is not part of this group")
        if dancer_id in seen:
            raise ValidationError(f"Dancer {dancer_id} appears more than once")
        seen.add(dancer_id)

    for raw in raw_scores:
        error = validate_score_set(raw)
        if error:
            raise ValidationError(error)

    return [
        ScoreEntry(dancer_id=raw["dancer_id"], **{c: raw.get(c) for c in SCORE_CATEGORIES})
        for raw in raw_scores
    ]


def submit_scores(store: Store, identity: Optional[Identity], group_id: str,
                  judge_id: Optional[str], raw_scores: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Submit one judge's scores for a pushed group

    Args:
        identity: Caller identity
        group_id: Instance id
        judge_id: Judge the batch is for (must be the caller's own judge id)
        raw_scores: [{"dancer_id": ..., "technique": 4.5, ...}, ...]

    Returns:
        {"success": True, "score_count": n, "group_completed": bool}
    """
    caller_judge_id = acting_judge_id(identity)
    if judge_id and judge_id != caller_judge_id:
        raise ForbiddenError("Judge ID mismatch")

    group = lifecycle.get_instance(store, group_id)
    if group.session_id != identity.session_id:
        raise AuthorizationError()

    _check_locked(store, group.session_id)
    entries = _build_entries(raw_scores, group.dancer_ids)

    if store.get_submission(group.id, caller_judge_id) is not None:
        logger.warning(f"⚠️ Duplicate submission rejected | group={group.id} judge={caller_judge_id}")
        raise ConflictError("already_submitted", "Scores already submitted for this group")

    # A racing duplicate that passed the check above is rejected here by the store
    store.record_submission(group.id, caller_judge_id, entries)
    logger.info(f"✅ Judge {caller_judge_id} submitted {len(entries)} scores for group {group.id}")

    completed = lifecycle.detect_completion(store, group.id)
    return {"success": True, "score_count": len(entries), "group_completed": completed}


def edit_score(store: Store, identity: Optional[Identity], score_id: str,
               updates: Dict[str, Any]) -> Score:
    """
    Edit an already-submitted score row

    Judges may only edit their own rows; admins may edit any (and the edit
    is written to the audit log). Only category fields may change, and each
    provided value must be legal (a category cannot be cleared).
    """
    if identity is None:
        raise AuthorizationError()

    score = store.get_score(score_id)
    if score is None:
        raise NotFoundError("Score not found")

    group = lifecycle.get_group(store, score.group_id)
    if group.session_id != identity.session_id:
        raise AuthorizationError()
    _check_locked(store, group.session_id)

    if identity.role == "judge" and score.judge_id != identity.judge_id:
        raise ForbiddenError("Cannot edit another judge's score")

    unknown = set(updates) - set(SCORE_CATEGORIES)
    if unknown:
        raise ValidationError(f"Only score categories can be edited, got: {', '.join(sorted(unknown))}")
    if not updates:
        raise ValidationError("No score categories to update")

    for category, value in updates.items():
        if not is_valid_score(value):
            raise ValidationError(f"Invalid score for {category}: must be 1-5 in 0.5 increments")

    updated = store.update_score(score.id, **updates)
    if identity.role == "admin":
        store.log_admin_action(group.session_id, "edit_score", {"score_id": score.id, "updates": updates})
    logger.info(f"✏️ Score {score.id} edited by {identity.role} ({', '.join(sorted(updates))})")
    return updated


def list_scores(store: Store, group_id: Optional[str] = None, judge_id: Optional[str] = None,
                dancer_id: Optional[str] = None) -> List[Score]:
    return store.list_scores(group_id=group_id, judge_id=judge_id, dancer_id=dancer_id)


def judge_submission_status(store: Store, judge_id: str) -> List[str]:
    """Group ids the judge has already submitted"""
    return [s.group_id for s in store.list_submissions(judge_id=judge_id)]
