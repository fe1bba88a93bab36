"""
Builders shared by the test modules
"""
from typing import Dict, Optional

from audition.models import SCORE_CATEGORIES, Identity, Judge, Session


def full_scores(dancer_id: str, value: float = 4.0, **overrides) -> Dict:
    """Submit entry with every category set to value (overrides per category)"""
    entry = {"dancer_id": dancer_id, **{c: value for c in SCORE_CATEGORIES}}
    entry.update(overrides)
    return entry


def judge_identity(judge: Judge) -> Identity:
    return Identity(session_id=judge.session_id, role="judge", judge_id=judge.id, judge_name=judge.name)


def admin_identity(session: Session, judge_id: Optional[str] = None) -> Identity:
    return Identity(session_id=session.id, role="admin", judge_id=judge_id)
