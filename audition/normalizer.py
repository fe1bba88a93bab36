"""
Normalizer for client request bodies

Clients send camelCase keys (dancerId, groupId, ...); the core works with
snake_case. Values are passed through untouched: validating them is the
Score Validator's job.
"""
from typing import Any, Dict, List, Tuple

from audition.errors import ValidationError
from audition.models import SCORE_CATEGORIES


def _pick(body: Dict, *keys: str) -> Any:
    """First present value among alternative key spellings"""
    for key in keys:
        if key in body and body[key] is not None:
            return body[key]
    return None


def normalize_score_entry(raw: Any) -> Any:
    """
    Normalize one entry of a submit batch

    Body format:
        {"dancerId": "...", "technique": 4.5, "musicality": 4, ...}

    Non-dict entries are returned as-is so the coordinator can reject them.
    """
    if not isinstance(raw, dict):
        return raw
    entry = {"dancer_id": _pick(raw, "dancerId", "dancer_id")}
    for category in SCORE_CATEGORIES:
        entry[category] = raw.get(category)
    return entry


def normalize_submission(body: Dict) -> Tuple[str, str, List[Any]]:
    """
    Normalize a submit request

    Body format:
        {
            "groupId": "<instance id>",
            "judgeId": "<judge id>",
            "scores": [{"dancerId": "...", "technique": 4.5, ...}, ...]
        }

    Returns:
        (group_id, judge_id, entries)

    Raises:
        ValidationError: If groupId is missing
    """
    group_id = _pick(body, "groupId", "group_id")
    if not group_id:
        raise ValidationError("groupId is required")
    judge_id = _pick(body, "judgeId", "judge_id")

    scores = body.get("scores")
    if not isinstance(scores, list):
        return group_id, judge_id, scores
    return group_id, judge_id, [normalize_score_entry(s) for s in scores]


def normalize_dancer(raw: Dict) -> Dict[str, Any]:
    """Accept both dancer_number/dancerNumber spellings"""
    return {
        "dancer_number": _pick(raw, "dancer_number", "dancerNumber"),
        "name": raw.get("name"),
        "grade": raw.get("grade"),
    }
