"""
Client-local score drafts

A judge scores a pushed group locally before submitting. Drafts are keyed by
an explicit (group_id, judge_id) key, are never shared between clients, and
are discarded when the submit succeeds or the group is retracted.
"""
from typing import Dict, Iterable, List, NamedTuple, Optional

from audition.core.validation import count_scored_categories, is_score_complete, is_valid_score
from audition.errors import ValidationError
from audition.models import SCORE_CATEGORIES


class DraftKey(NamedTuple):
    group_id: str
    judge_id: str


class ScoreDraft:
    """In-progress category values for every dancer of one group"""

    def __init__(self, key: DraftKey):
        self.key = key
        self.values: Dict[str, Dict[str, float]] = {}

    def set_score(self, dancer_id: str, category: str, value: float) -> None:
        """Set one category value, with the same rule the server applies"""
        if category not in SCORE_CATEGORIES:
            raise ValidationError(f"Unknown score category: {category}")
        if not is_valid_score(value):
            raise ValidationError(f"Invalid score for {category}: must be 1-5 in 0.5 increments")
        self.values.setdefault(dancer_id, {})[category] = value

    def clear_score(self, dancer_id: str, category: str) -> None:
        self.values.get(dancer_id, {}).pop(category, None)

    def scores_for(self, dancer_id: str) -> Dict[str, float]:
        return dict(self.values.get(dancer_id, {}))

    def scored_categories(self, dancer_id: str) -> int:
        return count_scored_categories(self.values.get(dancer_id, {}))

    def is_complete_for(self, dancer_ids: Iterable[str]) -> bool:
        """True when every listed dancer has all five categories"""
        return all(is_score_complete(self.values.get(d, {})) for d in dancer_ids)

    def to_submission(self, dancer_ids: Iterable[str]) -> List[Dict[str, Optional[float]]]:
        """Build the submit payload, one entry per dancer (unset categories as None)"""
        return [
            {"dancer_id": d, **{c: self.values.get(d, {}).get(c) for c in SCORE_CATEGORIES}}
            for d in dancer_ids
        ]


class DraftStore:
    """Drafts owned by one client"""

    def __init__(self):
        self._drafts: Dict[DraftKey, ScoreDraft] = {}

    def open(self, key: DraftKey) -> ScoreDraft:
        """Return the existing draft for key, or start an empty one"""
        if key not in self._drafts:
            self._drafts[key] = ScoreDraft(key)
        return self._drafts[key]

    def get(self, key: DraftKey) -> Optional[ScoreDraft]:
        return self._drafts.get(key)

    def discard(self, key: DraftKey) -> bool:
        return self._drafts.pop(key, None) is not None

    def discard_group(self, group_id: str) -> int:
        """Drop every draft for a group (e.g. after a retraction)"""
        keys = [k for k in self._drafts if k.group_id == group_id]
        for key in keys:
            del self._drafts[key]
        return len(keys)

    def keys_for_judge(self, judge_id: str) -> List[DraftKey]:
        return [k for k in self._drafts if k.judge_id == judge_id]

    def discard_judge(self, judge_id: str) -> int:
        keys = [k for k in self._drafts if k.judge_id == judge_id]
        for key in keys:
            del self._drafts[key]
        return len(keys)

    def __len__(self) -> int:
        return len(self._drafts)

    def __contains__(self, key: DraftKey) -> bool:
        return key in self._drafts
