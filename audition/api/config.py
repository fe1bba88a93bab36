"""
Configuration endpoint
"""
from fastapi import APIRouter

from audition import state
from audition.core.aggregation import OLYMPIC_MIN_JUDGES
from audition.models import CATEGORY_LABELS, SCORE_CATEGORIES


router = APIRouter(tags=["config"])


@router.get("/config")
async def get_config():
    """Scoring rules and non-secret runtime settings"""
    return {
        "scoring": {
            "categories": [{"key": c, "label": CATEGORY_LABELS[c]} for c in SCORE_CATEGORIES],
            "min_score": 1,
            "max_score": 5,
            "step": 0.5,
            "olympic_min_judges": OLYMPIC_MIN_JUDGES,
        },
        "token_ttl_hours": state.SETTINGS.token_ttl_hours,
        "log_level": state.SETTINGS.log_level,
    }
