"""
Score Validator

Pure functions shared by every write path (submit and edit) so that a score
set accepted in one place can never be rejected elsewhere for the same reason.

Rules:
  - A category value is legal iff 1 <= v <= 5 in 0.5 steps
  - An unset category (missing key or None) means "not scored", never zero
"""
from numbers import Real
from typing import Any, Optional

from audition.models import SCORE_CATEGORIES


def _category_value(score_set: Any, category: str) -> Any:
    """Read a category from a dict-like or attribute-style score set"""
    if isinstance(score_set, dict):
        return score_set.get(category)
    return getattr(score_set, category, None)


def is_valid_score(value: Any) -> bool:
    """
    Check a single category value

    Args:
        value: Candidate score

    Returns:
        True iff value is a number in [1, 5] and a multiple of 0.5

    Example:
        >>> is_valid_score(1.5)
        True
        >>> is_valid_score(1.2)
        False
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return 1 <= value <= 5 and float(value * 2).is_integer()


def count_scored_categories(score_set: Any) -> int:
    """Number of categories present (0-5)"""
    return sum(1 for cat in SCORE_CATEGORIES if _category_value(score_set, cat) is not None)


def is_score_complete(score_set: Any) -> bool:
    """True iff all five categories are present"""
    return count_scored_categories(score_set) == len(SCORE_CATEGORIES)


def validate_score_set(score_set: Any) -> Optional[str]:
    """
    Validate every present category of a score set

    Unset categories are allowed (partial scoring); present ones must be legal.

    Returns:
        Error message for the first illegal category, or None
    """
    for category in SCORE_CATEGORIES:
        value = _category_value(score_set, category)
        if value is not None and not is_valid_score(value):
            return f"Invalid score for {category}: must be 1-5 in 0.5 increments"
    return None
