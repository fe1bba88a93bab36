"""
Utility functions
"""
import uuid
from datetime import datetime, timezone
from typing import Optional


MISSING_PLACEHOLDER = "N/A"


def new_id() -> str:
    """Generate a row id"""
    return uuid.uuid4().hex


def utc_now() -> str:
    """Current UTC time as ISO-8601 string"""
    return datetime.now(timezone.utc).isoformat()


def format_score(value: Optional[float], placeholder: str = MISSING_PLACEHOLDER) -> str:
    """
    Render an aggregated number for display/export

    None means "no data" and must never be rendered as 0.

    Example:
        >>> format_score(19.0)
        '19.00'
        >>> format_score(None)
        'N/A'
    """
    if value is None:
        return placeholder
    return f"{value:.2f}"
