"""
Data models for the audition scoring server
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional, Union


SCORE_CATEGORIES = ("technique", "musicality", "expression", "timing", "presentation")

CATEGORY_LABELS = {
    "technique": "Technique",
    "musicality": "Musicality",
    "expression": "Expression",
    "timing": "Timing",
    "presentation": "Presentation",
}

SESSION_STATUSES = ("setup", "active", "paused", "completed")
GROUP_STATUSES = ("queued", "active", "completed", "retracted")


# ==================== SETTINGS ====================

class Settings(BaseModel):
    """Runtime settings, loaded from YAML by audition.config"""
    database_path: str = "data/audition.sqlite"
    log_level: str = "INFO"
    cors_allow_origins: List[str] = ["*"]
    token_ttl_hours: int = 24


# ==================== STORED ROWS ====================

class Session(BaseModel):
    """One scoring event"""
    id: str
    session_code: str
    name: str
    date: str
    admin_pin: str
    status: str = "setup"  # setup | active | paused | completed
    is_locked: bool = False
    created_at: str
    updated_at: str


class Dancer(BaseModel):
    id: str
    session_id: str
    dancer_number: int
    name: str
    grade: Optional[int] = None
    created_at: str


class Material(BaseModel):
    id: str
    session_id: str
    name: str
    created_at: str


class Judge(BaseModel):
    id: str
    session_id: str
    name: str
    judge_pin: str
    is_active: bool = True
    is_admin_judge: bool = False
    created_at: str


class TemplateGroup(BaseModel):
    """Reusable dancer roster, not bound to any material"""
    kind: Literal["template"] = "template"
    id: str
    session_id: str
    group_number: int
    dancer_ids: List[str]
    is_archived: bool = False
    created_at: str
    updated_at: str


class InstanceGroup(BaseModel):
    """One push of a template against a material, with its own lifecycle"""
    kind: Literal["instance"] = "instance"
    id: str
    session_id: str
    group_number: int
    material_id: str
    dancer_ids: List[str]
    status: str = "queued"  # queued | active | completed | retracted
    is_archived: bool = False
    pushed_at: Optional[str] = None
    completed_at: Optional[str] = None
    created_at: str
    updated_at: str


DancerGroup = Union[TemplateGroup, InstanceGroup]


class Score(BaseModel):
    """One judge's category values for one dancer in one instance"""
    id: str
    group_id: str
    judge_id: str
    dancer_id: str
    technique: Optional[float] = None
    musicality: Optional[float] = None
    expression: Optional[float] = None
    timing: Optional[float] = None
    presentation: Optional[float] = None
    created_at: str
    updated_at: str


class ScoreSubmission(BaseModel):
    id: str
    group_id: str
    judge_id: str
    score_count: int
    submitted_at: str


class AdminAction(BaseModel):
    id: str
    session_id: str
    action_type: str
    details: Dict[str, Any] = {}
    created_at: str


# ==================== REQUEST-SIDE MODELS ====================

class ScoreEntry(BaseModel):
    """One dancer's values inside a submit batch (categories may be unset)"""
    dancer_id: str
    technique: Optional[float] = None
    musicality: Optional[float] = None
    expression: Optional[float] = None
    timing: Optional[float] = None
    presentation: Optional[float] = None


class Identity(BaseModel):
    """Result of the identity/role check on a request"""
    session_id: str
    role: Literal["admin", "judge"]
    judge_id: Optional[str] = None
    judge_name: Optional[str] = None


# ==================== RESULTS ====================

class DancerResult(BaseModel):
    """Results for one dancer within one material"""
    dancer_id: str
    dancer_number: int
    dancer_name: str
    category_averages: Dict[str, Optional[float]]
    total_score: Optional[float] = None
    olympic_average: Optional[float] = None
    judge_count: int = 0
    is_olympic_average: bool = False


class MaterialResult(BaseModel):
    material_id: str
    material_name: str
    result: DancerResult


class AggregatedDancerResult(BaseModel):
    """Cross-material rollup for one dancer"""
    dancer_id: str
    dancer_number: int
    dancer_name: str
    category_totals: Dict[str, Optional[float]]
    total_score: Optional[float] = None
    olympic_average: Optional[float] = None
    judge_count: int = 0
    is_olympic_average: bool = False
    material_results: List[MaterialResult] = Field(default_factory=list)
