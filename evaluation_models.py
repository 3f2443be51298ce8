# evaluation_models.py
"""
Pydantic models for the interview evaluation pipeline.
These carry data between the store, the scoring components and the HTTP surfaces.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class InterviewStatus(str, Enum):
    INVITED = "invited"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SCREENED_OUT = "screened_out"
    REJECTED = "rejected"
    PROGRESSED = "progressed"


class EvaluationStatus(str, Enum):
    NONE = "none"
    QUEUED = "queued"
    CLAIMED = "claimed"
    COMPLETED = "completed"
    FAILED = "failed"


_CALL_ENDED: FrozenSet[InterviewStatus] = frozenset(
    {
        InterviewStatus.COMPLETED,
        InterviewStatus.SCREENED_OUT,
        InterviewStatus.REJECTED,
        InterviewStatus.PROGRESSED,
    }
)

ALLOWED_STATUS_COMBINATIONS: Dict[EvaluationStatus, FrozenSet[InterviewStatus]] = {
    EvaluationStatus.NONE: frozenset(InterviewStatus),
    EvaluationStatus.QUEUED: _CALL_ENDED,
    EvaluationStatus.CLAIMED: _CALL_ENDED,
    EvaluationStatus.COMPLETED: _CALL_ENDED,
    EvaluationStatus.FAILED: _CALL_ENDED,
}
"""Lifecycle statuses each evaluation status may coexist with.

An evaluation only exists once the call ended and a transcript was stored,
so every evaluation status other than ``none`` requires a post-call
lifecycle status.
"""

IN_FLIGHT_STATUSES: FrozenSet[EvaluationStatus] = frozenset(
    {EvaluationStatus.QUEUED, EvaluationStatus.CLAIMED}
)


def is_valid_status_combination(status: InterviewStatus, evaluation_status: EvaluationStatus) -> bool:
    return InterviewStatus(status) in ALLOWED_STATUS_COMBINATIONS[EvaluationStatus(evaluation_status)]


class QuestionType(str, Enum):
    SCREENING = "screening"
    INTERVIEW = "interview"


class Recommendation(str, Enum):
    STRONG_YES = "strong yes"
    YES = "yes"
    BORDERLINE = "borderline"
    NO = "no"
    STRONG_NO = "strong no"


class Confidence(str, Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


WEIGHT_LABELS: Dict[int, str] = {1: "nice_to_have", 2: "important", 3: "critical"}
RUBRIC_LEVELS = (1, 2, 3, 4)


class Competency(BaseModel):
    """Competency scored by interview-type questions."""

    id: str
    name: str
    description: str = ""
    weight: int = Field(2, description="1 nice-to-have | 2 important | 3 critical")
    rubric: Dict[int, str] = Field(default_factory=dict, description="Behavioral anchor per level 1-4")

    @field_validator("weight")
    @classmethod
    def validate_weight(cls, v: int) -> int:
        if v not in WEIGHT_LABELS:
            raise ValueError(f"weight must be one of {sorted(WEIGHT_LABELS)}, got {v}")
        return v

    @field_validator("rubric")
    @classmethod
    def validate_rubric(cls, v: Dict[int, str]) -> Dict[int, str]:
        unknown = set(v) - set(RUBRIC_LEVELS)
        if unknown:
            raise ValueError(f"rubric levels must be within {RUBRIC_LEVELS}, got {sorted(unknown)}")
        return dict(sorted(v.items()))

    @property
    def weight_label(self) -> str:
        return WEIGHT_LABELS[self.weight]


class Question(BaseModel):
    id: str
    text: str
    type: QuestionType
    order_index: int = 0
    competency: Optional[Competency] = None

    @model_validator(mode="after")
    def validate_competency(self) -> "Question":
        if self.type == QuestionType.INTERVIEW and self.competency is None:
            raise ValueError(f"interview question {self.id} must reference a competency")
        return self


class QAPair(BaseModel):
    """One question with the answer extracted from the transcript."""

    question_id: str
    question: str
    answer: str = ""
    type: QuestionType
    competency: Optional[Competency] = None

    @property
    def word_count(self) -> int:
        return len(self.answer.split())

    @property
    def estimated_seconds(self) -> float:
        # Roughly two spoken words per second.
        return self.word_count / 2


class QuestionScore(BaseModel):
    """Rubric score for one interview-type answer."""

    score: int = Field(..., ge=1, le=4)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    evidence_quotes: List[str] = Field(default_factory=list)
    why_not_higher_score: str = ""


class QuestionEvaluationRecord(QuestionScore):
    """Persisted rubric score, tied to one evaluation attempt."""

    question_id: str
    competency_id: Optional[str] = None
    attempt: int
    degraded: bool = False


class ScreeningAnswer(BaseModel):
    question_id: str
    raw_answer: str
    summary: Optional[str] = None
    duration_seconds: int = 0


class CompetencyScore(BaseModel):
    competency_name: str
    raw_score: int
    weight: int
    weight_label: str
    weighted_contribution: int
    max_contribution: int
    justification: str = ""
    evidence_quotes: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)


class QuestionDisplaySummary(BaseModel):
    question: str
    evaluation: str
    answer_duration_seconds: int
    score: Optional[int] = None


class StructuredEvaluation(BaseModel):
    """Aggregate evaluation embedded on the interview row."""

    recommendation: Recommendation
    confidence: Confidence
    recommendation_rationale: str
    why_this_candidate: Optional[List[str]] = None
    flags_risks: Optional[List[str]] = None
    key_concerns: Optional[List[str]] = None
    notable_strengths: Optional[List[str]] = None
    considerations_for: Optional[List[str]] = None
    considerations_against: Optional[List[str]] = None
    review_focus: Optional[str] = None
    borderline_triggers: Optional[List[str]] = None
    competency_scores: List[CompetencyScore] = Field(default_factory=list)
    question_evaluations: List[QuestionDisplaySummary] = Field(default_factory=list)


class EvaluationContext(BaseModel):
    """Everything a claimed evaluation attempt needs, loaded in one read."""

    interview_id: str
    slug: str
    attempt: int
    role_title: str
    jd_text: str = ""
    transcript_text: str
    questions: List[Question] = Field(default_factory=list)


class InterviewSnapshot(BaseModel):
    id: str
    slug: str
    role_id: str
    candidate_id: Optional[str] = None
    status: InterviewStatus
    evaluation_status: EvaluationStatus
    evaluation_attempt: int = 0
    external_call_id: Optional[str] = None
    transcript_text: str = ""
    transcript_messages: List[Dict[str, Any]] = Field(default_factory=list)
    recording_url: Optional[str] = None
    score: Optional[int] = None
    recommendation: Optional[str] = None
    structured_evaluation: Optional[Dict[str, Any]] = None
    evaluation_error: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript_text.strip()) or bool(self.transcript_messages)


class ErrorLogEntry(BaseModel):
    """Append-only failure record; resolution is the only mutation."""

    id: Optional[int] = None
    endpoint: str
    error_type: str
    error_message: str
    error_stack: Optional[str] = None
    interview_id: Optional[str] = None
    interview_slug: Optional[str] = None
    candidate_id: Optional[str] = None
    request_body: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolution_notes: Optional[str] = None


class EvaluationResult(BaseModel):
    success: bool
    interview_id: str
    recommendation: Optional[Recommendation] = None
    score: Optional[int] = None
    error: Optional[str] = None


class SweepResult(BaseModel):
    success: bool
    interview_id: Optional[str] = None
    recommendation: Optional[Recommendation] = None
    score: Optional[int] = None
    error: Optional[str] = None
    message: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "interviewId": self.interview_id,
            "recommendation": self.recommendation.value if self.recommendation else None,
            "score": self.score,
            "error": self.error,
            "message": self.message,
        }
        return {key: value for key, value in payload.items() if value is not None}
