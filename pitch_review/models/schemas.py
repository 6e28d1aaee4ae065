"""
Pydantic schemas for the Pitch Review Pipeline
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class ReviewStatus(str, Enum):
    """Publication status of a pitch"""
    PENDING = "pending"
    APPROVED = "approved"
    NEEDS_REVISION = "needs_revision"
    REJECTED = "rejected"


class ReviewMode(str, Enum):
    """Which evaluator the caller asked for"""
    FAST_GATE = "fast_gate"
    DEEP_ANALYSIS = "deep_analysis"


class Recommendation(str, Enum):
    """Coarse recommendation from the shallow LLM review"""
    APPROVE = "approve"
    REVIEW = "review"
    REJECT = "reject"


class DeepRecommendation(str, Enum):
    """Coarse recommendation from the deep analysis"""
    APPROVE = "approve"
    NEEDS_REVISION = "needs_revision"
    REJECT = "reject"


class ProbeOutcome(str, Enum):
    """What happened when the product URL was probed"""
    REACHABLE = "reachable"
    BAD_STATUS = "bad_status"
    UNREACHABLE = "unreachable"
    MALFORMED = "malformed"
    MISSING = "missing"


# =============================================================================
# ENTITIES
# =============================================================================

class ReviewNotes(BaseModel):
    """Structured review record stored on the pitch"""
    summary: Optional[str] = None
    clarity_score: Optional[float] = None
    completeness_score: Optional[float] = None
    market_fit_score: Optional[float] = None
    demo_effectiveness_score: Optional[float] = None
    demo_feedback: List[str] = Field(default_factory=list)
    pitch_description_improvements: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)
    message: Optional[str] = None
    ai_analyzed: bool = False
    analyzed_at: Optional[datetime] = None


class Pitch(BaseModel):
    """A startup pitch submission"""
    id: str
    startup_name: str = ""
    one_liner: str = ""
    category: Optional[str] = "Other"
    what_problem_do_you_solve: Optional[str] = None
    product_url: Optional[str] = None
    is_product_live: bool = False
    product_stage: Optional[str] = None
    founder_id: Optional[str] = None

    # Owned by the review pipeline
    quality_score: int = 0
    flags: List[str] = Field(default_factory=list)
    review_status: ReviewStatus = ReviewStatus.PENDING
    is_published: bool = False
    rejection_reason: Optional[str] = None
    review_notes: Optional[ReviewNotes] = None
    reviewed_at: Optional[datetime] = None

    class Config:
        extra = "allow"


class Demo(BaseModel):
    """Screen-capture demo attached to a pitch"""
    id: str
    pitch_id: str
    video_url: Optional[str] = None
    title: Optional[str] = None
    duration_seconds: Optional[float] = None


class User(BaseModel):
    """An authenticated caller"""
    id: str
    email: str
    full_name: Optional[str] = None


class PitchReviewUpdate(BaseModel):
    """Every derived field a review run writes, applied in one call"""
    quality_score: int = Field(ge=0, le=100)
    flags: List[str] = Field(default_factory=list)
    review_status: ReviewStatus
    is_published: bool
    rejection_reason: Optional[str] = None
    review_notes: Optional[ReviewNotes] = None
    reviewed_at: datetime = Field(default_factory=utcnow)


# =============================================================================
# STAGE RESULT SCHEMAS
# =============================================================================

class UrlProbeResult(BaseModel):
    """Result of probing the product URL"""
    outcome: ProbeOutcome
    host: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def responded(self) -> bool:
        return self.outcome in (ProbeOutcome.REACHABLE, ProbeOutcome.BAD_STATUS)


class IntakeResult(BaseModel):
    """Result from Stage 1: Intake Gate"""
    score_delta: int = 0
    flags: List[str] = Field(default_factory=list)
    auto_approve_eligible: bool = True
    probe: Optional[UrlProbeResult] = None
    completed_fields: int = 0
    processing_time_ms: float = 0


class ShallowReview(BaseModel):
    """Typed answer expected from the shallow LLM review"""
    has_red_flags: bool = False
    concerns: List[str] = Field(default_factory=list)
    recommendation: Recommendation = Recommendation.REVIEW


class LLMReviewResult(BaseModel):
    """Result from Stage 2: shallow LLM review"""
    succeeded: bool
    review: Optional[ShallowReview] = None
    score_delta: int = 0
    flags: List[str] = Field(default_factory=list)
    clears_auto_approve: bool = False
    processing_time_ms: float = 0


class Decision(BaseModel):
    """Status chosen by the decision engine"""
    status: ReviewStatus
    is_published: bool
    rejection_reason: Optional[str] = None


class DeepAnalysis(BaseModel):
    """Typed answer expected from the deep analysis"""
    overall_score: float = Field(allow_inf_nan=False)
    clarity_score: float = Field(default=0, allow_inf_nan=False)
    completeness_score: float = Field(default=0, allow_inf_nan=False)
    market_fit_score: float = Field(default=0, allow_inf_nan=False)
    demo_effectiveness_score: float = Field(default=0, allow_inf_nan=False)
    demo_feedback: List[str] = Field(default_factory=list)
    pitch_description_improvements: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    suggested_category: Optional[str] = None
    red_flags: List[str] = Field(default_factory=list)
    recommendation: Optional[DeepRecommendation] = None
    message_to_founder: Optional[str] = None

    @field_validator(
        "demo_feedback",
        "pitch_description_improvements",
        "strengths",
        "improvements",
        "red_flags",
        mode="before",
    )
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("recommendation", mode="before")
    @classmethod
    def _unknown_recommendation(cls, value):
        # Free-text recommendations are advisory only
        if value not in {r.value for r in DeepRecommendation}:
            return None
        return value


# =============================================================================
# UNIFIED EVALUATION OUTPUT
# =============================================================================

class EvaluationResult(BaseModel):
    """What one evaluator run produced, before it is written to the pitch"""
    mode: ReviewMode
    score: int = Field(ge=0, le=100)
    flags: List[str] = Field(default_factory=list)
    status: ReviewStatus
    is_published: bool
    rejection_reason: Optional[str] = None
    review_notes: Optional[ReviewNotes] = None
    auto_approve_eligible: bool = True
    analysis: Optional[DeepAnalysis] = None
    processing_time_ms: float = 0

    def to_update(self) -> PitchReviewUpdate:
        return PitchReviewUpdate(
            quality_score=self.score,
            flags=list(self.flags),
            review_status=self.status,
            is_published=self.is_published,
            rejection_reason=self.rejection_reason,
            review_notes=self.review_notes,
        )


class InAppNotification(BaseModel):
    """Notification shown to a founder inside the app"""
    user_id: str
    type: str
    pitch_id: str
    message: str
    action_url: str


# =============================================================================
# API SCHEMAS
# =============================================================================

class PitchIdRequest(BaseModel):
    """Body of both review operations"""
    pitch_id: Optional[str] = Field(None, alias="pitchId")

    class Config:
        populate_by_name = True


class NotifyRequest(BaseModel):
    """Body of the status notification operation"""
    pitch_id: Optional[str] = Field(None, alias="pitchId")
    status: Optional[str] = None
    feedback: Optional[str] = None

    class Config:
        populate_by_name = True


class GateResponse(BaseModel):
    success: bool = True
    review_status: ReviewStatus
    quality_score: int
    flags: List[str]
    is_published: bool
    rejection_reason: Optional[str] = None


class AnalysisBody(BaseModel):
    overall_score: float
    clarity_score: float
    completeness_score: float
    market_fit_score: float
    demo_effectiveness_score: float
    demo_feedback: List[str]
    pitch_description_improvements: List[str]
    strengths: List[str]
    improvements: List[str]
    suggested_category: Optional[str] = None
    red_flags: List[str]
    message: str
    review_status: ReviewStatus
    is_published: bool


class AnalysisResponse(BaseModel):
    success: bool = True
    analysis: AnalysisBody
