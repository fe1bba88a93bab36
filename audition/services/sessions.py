"""
Session and roster management (sessions, dancers, materials, judges)
"""
import logging
import random
import re
from typing import Any, Dict, List, Optional

from audition.core.store import Store
from audition.errors import AuditionError, ConflictError, NotFoundError, ValidationError, session_locked
from audition.models import SESSION_STATUSES, Dancer, Judge, Material, Session


logger = logging.getLogger(__name__)

SESSION_CODE_RE = re.compile(r"^[a-zA-Z0-9-]{3,20}$")
ADMIN_PIN_RE = re.compile(r"^\d{6}$")
JUDGE_PIN_ATTEMPTS = 10


# ==================== SESSIONS ====================

def require_session(store: Store, session_id: str) -> Session:
    session = store.get_session(session_id)
    if session is None:
        raise NotFoundError("Session not found")
    return session


def create_session(store: Store, name: str, date: str, admin_pin: str, session_code: str) -> Session:
    """
    Create a scoring session

    Args:
        name: Display name
        date: Event date (free-form, usually YYYY-MM-DD)
        admin_pin: Exactly 6 digits
        session_code: 3-20 letters, digits or hyphens; stored upper-cased
    """
    if not name or not date or not admin_pin or not session_code:
        raise ValidationError("Missing required fields")
    if not ADMIN_PIN_RE.match(str(admin_pin)):
        raise ValidationError("Admin PIN must be exactly 6 digits")
    if not SESSION_CODE_RE.match(session_code):
        raise ValidationError("Session code must be 3-20 characters (letters, numbers, hyphens)")

    session = store.insert_session(session_code.upper(), name, date, str(admin_pin))
    logger.info(f"🎬 Session {session.session_code} created ({session.id})")
    return session


def update_session(store: Store, session_id: str, updates: Dict[str, Any]) -> Session:
    """Update name/date/status; locking goes through lock_session"""
    require_session(store, session_id)
    allowed = {"name", "date", "status"}
    unknown = set(updates) - allowed
    if unknown:
        raise ValidationError(f"Fields cannot be updated here: {', '.join(sorted(unknown))}")
    if "status" in updates and updates["status"] not in SESSION_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(SESSION_STATUSES)}")
    if not updates:
        return require_session(store, session_id)
    return store.update_session(session_id, **updates)


def delete_session(store: Store, session_id: str) -> None:
    if not store.delete_session(session_id):
        raise NotFoundError("Session not found")
    logger.info(f"🗑️ Session {session_id} deleted")


def lock_session(store: Store, session_id: str) -> Session:
    """Freeze all score and group mutations"""
    require_session(store, session_id)
    session = store.update_session(session_id, is_locked=True, status="completed")
    store.log_admin_action(session_id, "lock_session", {"locked_at": session.updated_at})
    logger.info(f"🔒 Session {session.session_code} locked")
    return session


def unlock_session(store: Store, session_id: str) -> Session:
    require_session(store, session_id)
    session = store.update_session(session_id, is_locked=False, status="active")
    store.log_admin_action(session_id, "unlock_session", {"unlocked_at": session.updated_at})
    logger.info(f"🔓 Session {session.session_code} unlocked")
    return session


# ==================== DANCERS ====================

def add_dancer(store: Store, session_id: str, dancer_number: Any, name: str,
               grade: Optional[Any] = None) -> Dancer:
    require_session(store, session_id)
    if dancer_number in (None, "") or not name:
        raise ValidationError("session_id, dancer_number, and name are required")
    try:
        number = int(dancer_number)
        grade_value = int(grade) if grade not in (None, "") else None
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Dancer number and grade must be integers: {e}") from e
    if number < 1:
        raise ValidationError("Dancer number must be positive")
    return store.insert_dancer(session_id, number, name.strip(), grade_value)


def add_dancers(store: Store, session_id: str, dancers: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Bulk insert, stopping at the first failure

    Dancers inserted before the failure are kept and reported; nothing after
    it is attempted.

    Returns:
        {"imported": [Dancer, ...], "failed": None | {"index", "dancer_number", "error"}}
    """
    require_session(store, session_id)
    imported: List[Dancer] = []
    for index, item in enumerate(dancers):
        try:
            imported.append(add_dancer(
                store, session_id, item.get("dancer_number"), item.get("name"), item.get("grade")
            ))
        except AuditionError as e:
            logger.warning(f"⚠️ Bulk dancer import stopped at item {index}: {e}")
            return {
                "imported": imported,
                "failed": {"index": index, "dancer_number": item.get("dancer_number"), "error": str(e)},
            }
    logger.info(f"👯 Imported {len(imported)} dancers into session {session_id}")
    return {"imported": imported, "failed": None}


def delete_dancer(store: Store, dancer_id: str, force: bool = False) -> None:
    """
    Delete a dancer and prune it from every group roster

    A dancer with scores needs force=True (its scores go too). Refused while
    the session is locked.
    """
    dancer = store.get_dancer(dancer_id)
    if dancer is None:
        raise NotFoundError("Dancer not found")
    if require_session(store, dancer.session_id).is_locked:
        raise session_locked()
    if store.dancer_has_scores(dancer_id) and not force:
        raise ConflictError(
            "has_scores",
            "This dancer has scores. Use force=true to delete dancer and all their scores.",
            hasScores=True,
        )
    store.delete_dancer(dancer_id)
    logger.info(f"🗑️ Dancer #{dancer.dancer_number} deleted (force={force})")


# ==================== MATERIALS ====================

def add_material(store: Store, session_id: str, name: str) -> Material:
    require_session(store, session_id)
    if not name or not name.strip():
        raise ValidationError("sessionId and materialName required")
    return store.insert_material(session_id, name.strip())


# ==================== JUDGES ====================

def _generate_pin() -> str:
    return str(random.randint(1000, 9999))


def add_judge(store: Store, session_id: str, name: str, is_admin_judge: bool = False) -> Dict[str, Any]:
    """
    Add a judge with a fresh 4-digit PIN unique in the session

    Only one active admin-judge may exist: asking for another returns the
    existing one.

    Returns:
        {"judge": Judge, "created": bool}
    """
    require_session(store, session_id)
    if not name:
        raise ValidationError("name and sessionId required")

    if is_admin_judge:
        existing = store.find_admin_judge(session_id)
        if existing:
            return {"judge": existing, "created": False}

    pin = _generate_pin()
    for _ in range(JUDGE_PIN_ATTEMPTS):
        if not store.pin_in_use(session_id, pin):
            break
        pin = _generate_pin()
    else:
        raise ConflictError("pin_exhausted", "Could not generate a unique judge PIN, try again")

    judge = store.insert_judge(session_id, name.strip(), pin, is_admin_judge=is_admin_judge)
    logger.info(f"🧑‍⚖️ Judge '{judge.name}' added to session {session_id} (admin_judge={is_admin_judge})")
    return {"judge": judge, "created": True}


def deactivate_judge(store: Store, judge_id: str) -> Judge:
    """Judges are never deleted, only deactivated (lowers the completion bar)"""
    if not store.set_judge_active(judge_id, False):
        raise NotFoundError("Judge not found")
    judge = store.get_judge(judge_id)
    logger.info(f"🚫 Judge '{judge.name}' deactivated")
    return judge
