"""Thresholds and wording for the five-tier recommendation.

Kept declarative so the aggregator, its tests and operators read one set of numbers.
"""

from __future__ import annotations

RUBRIC_MAX_SCORE = 4
"""Highest rubric level; max contribution of a competency is this times its weight."""

DEFAULT_RUBRIC_SCORE = 2
"""Score substituted when a rubric answer is missing, invalid or the call failed."""

DEFAULT_COMPETENCY_WEIGHT = 2
"""Weight used when a question's competency carries no weight."""

VARIANCE_TRIGGER_THRESHOLD = 1.5
"""Population variance of raw scores above which performance counts as inconsistent."""

CRITICAL_WEIGHT = 3
"""Competency weight treated as critical."""

CRITICAL_MIN_SCORE = 2
"""Critical competencies scored below this fire a borderline trigger."""

BORDERLINE_TRIGGER_MIN = 40
"""Lower bound (inclusive) of the band where triggers force a borderline result."""

BORDERLINE_TRIGGER_MAX = 75
"""Upper bound (exclusive) of the band where triggers force a borderline result."""

STRONG_YES_MIN = 80
"""Minimum overall score for a strong yes."""

YES_MIN = 65
"""Minimum overall score for a yes."""

YES_HIGH_CONFIDENCE_MAX_VARIANCE = 1.0
"""A yes keeps high confidence only while variance stays at or below this."""

BORDERLINE_MIN = 50
"""Minimum overall score for a borderline result without triggers."""

NO_MIN = 35
"""Minimum overall score for a no; anything lower is a strong no."""

PROCEED_EVIDENCE_LIMIT = 5
"""Strengths and flags shown for yes / strong yes."""

BORDERLINE_EVIDENCE_LIMIT = 4
"""Items shown for and against a borderline candidate."""

REJECT_EVIDENCE_LIMIT = 5
"""Concerns and balancing strengths shown for no / strong no."""

RATIONALE_EVIDENCE_LIMIT = 3
"""Strengths and concerns seeded into the rationale prompt."""

SCREENING_SUMMARY_MIN_SECONDS = 8
"""Screening answers estimated longer than this get a generated summary."""

VARIANCE_TRIGGER_MESSAGE = "High variance across competencies - performance was inconsistent"

CRITICAL_TRIGGER_TEMPLATE = 'Critical competency "{name}" scored below threshold'

REVIEW_FOCUS_TEMPLATE = (
    "Listen to responses about {competency} - this is where signals were mixed. "
    "Consider whether the candidate's delivery suggests more depth than the transcript captured."
)

FALLBACK_RATIONALE_TEMPLATE = 'Based on the evaluation, we recommend "{recommendation}" for this candidate.'

TECHNICAL_ERROR_CONCERN = "Evaluation could not be completed due to a technical error"
TECHNICAL_ERROR_WHY_NOT_HIGHER = "Technical error during evaluation"
