# aggregator.py
"""
Weighted aggregation of rubric scores and five-tier classification.

Only interview-type answers contribute. Screening answers never reach this
module; an evaluation with no interview answers cannot be classified.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from evaluation_errors import EvaluationError
from evaluation_models import (
    CompetencyScore,
    Confidence,
    QAPair,
    QuestionDisplaySummary,
    QuestionScore,
    Recommendation,
    WEIGHT_LABELS,
)

from . import decision_policy as policy

ScoredAnswer = Tuple[QAPair, QuestionScore]

_SCORE_SENTENCES = {
    1: "Response did not demonstrate the required competency",
    2: "Response partially demonstrated the competency",
    3: "Response adequately demonstrated the competency",
    4: "Response strongly demonstrated the competency",
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def population_variance(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


@dataclass
class AggregateResult:
    overall_score: int
    variance: float
    triggers: List[str]
    recommendation: Recommendation
    confidence: Confidence
    competency_scores: List[CompetencyScore]
    strengths: List[str] = field(default_factory=list)
    concerns: List[str] = field(default_factory=list)
    evidence: Dict[str, Optional[object]] = field(default_factory=dict)

    @property
    def competency_names(self) -> List[str]:
        return [c.competency_name for c in self.competency_scores]


def _justification(score: int, strengths: List[str], concerns: List[str]) -> str:
    top_strength = strengths[0] if strengths else ""
    top_concern = concerns[0] if concerns else ""
    if score >= 3 and top_strength:
        return top_strength
    if score <= 2 and top_concern:
        return top_concern
    return top_strength or top_concern


def build_competency_score(pair: QAPair, result: QuestionScore) -> CompetencyScore:
    competency = pair.competency
    weight = competency.weight if competency else policy.DEFAULT_COMPETENCY_WEIGHT
    return CompetencyScore(
        competency_name=competency.name if competency else "Unknown",
        raw_score=result.score,
        weight=weight,
        weight_label=WEIGHT_LABELS[weight],
        weighted_contribution=result.score * weight,
        max_contribution=policy.RUBRIC_MAX_SCORE * weight,
        justification=_justification(result.score, result.strengths, result.concerns),
        evidence_quotes=list(result.evidence_quotes),
        strengths=list(result.strengths),
        concerns=list(result.concerns),
    )


def find_triggers(competency_scores: List[CompetencyScore], variance: float) -> List[str]:
    triggers: List[str] = []
    if variance > policy.VARIANCE_TRIGGER_THRESHOLD:
        triggers.append(policy.VARIANCE_TRIGGER_MESSAGE)

    named = set()
    for item in competency_scores:
        if item.weight == policy.CRITICAL_WEIGHT and item.raw_score < policy.CRITICAL_MIN_SCORE:
            if item.competency_name in named:
                continue
            named.add(item.competency_name)
            triggers.append(policy.CRITICAL_TRIGGER_TEMPLATE.format(name=item.competency_name))
    return triggers


def classify_recommendation(
    overall_score: int, triggers: Sequence[str], variance: float
) -> Tuple[Recommendation, Confidence]:
    """Map the overall score and triggers to a tier, first matching rule wins."""
    if triggers and policy.BORDERLINE_TRIGGER_MIN <= overall_score < policy.BORDERLINE_TRIGGER_MAX:
        return Recommendation.BORDERLINE, Confidence.LOW
    if overall_score >= policy.STRONG_YES_MIN:
        return Recommendation.STRONG_YES, Confidence.HIGH
    if overall_score >= policy.YES_MIN:
        if variance > policy.YES_HIGH_CONFIDENCE_MAX_VARIANCE:
            return Recommendation.YES, Confidence.MODERATE
        return Recommendation.YES, Confidence.HIGH
    if overall_score >= policy.BORDERLINE_MIN:
        return Recommendation.BORDERLINE, Confidence.MODERATE
    if overall_score >= policy.NO_MIN:
        return Recommendation.NO, Confidence.HIGH
    return Recommendation.STRONG_NO, Confidence.HIGH


def shape_evidence(
    recommendation: Recommendation,
    strengths: List[str],
    concerns: List[str],
    competency_scores: List[CompetencyScore],
) -> Dict[str, Optional[object]]:
    """Tier-specific evidence lists for the structured evaluation."""
    if recommendation in (Recommendation.STRONG_YES, Recommendation.YES):
        return {
            "why_this_candidate": strengths[: policy.PROCEED_EVIDENCE_LIMIT],
            "flags_risks": concerns[: policy.PROCEED_EVIDENCE_LIMIT],
        }

    if recommendation == Recommendation.BORDERLINE:
        lowest = min(competency_scores, key=lambda c: c.raw_score, default=None)
        return {
            "considerations_for": strengths[: policy.BORDERLINE_EVIDENCE_LIMIT],
            "considerations_against": concerns[: policy.BORDERLINE_EVIDENCE_LIMIT],
            "review_focus": policy.REVIEW_FOCUS_TEMPLATE.format(
                competency=lowest.competency_name if lowest else "key competencies"
            ),
        }

    return {
        "key_concerns": concerns[: policy.REJECT_EVIDENCE_LIMIT],
        "notable_strengths": strengths[: policy.REJECT_EVIDENCE_LIMIT],
    }


def aggregate(scored: Sequence[ScoredAnswer]) -> AggregateResult:
    """
    Combine interview-answer scores into an overall 0-100 score and a tier.

    Raises:
        EvaluationError: if there are no interview answers to aggregate
    """
    if not scored:
        raise EvaluationError(
            "No interview questions were evaluated; a recommendation cannot be computed from screening answers alone"
        )

    competency_scores = [build_competency_score(pair, result) for pair, result in scored]
    weighted = sum(c.weighted_contribution for c in competency_scores)
    maximum = sum(c.max_contribution for c in competency_scores)
    overall = round_half_up(100 * weighted / maximum)

    variance = population_variance([c.raw_score for c in competency_scores])
    triggers = find_triggers(competency_scores, variance)
    recommendation, confidence = classify_recommendation(overall, triggers, variance)

    strengths = [s for _, result in scored for s in result.strengths]
    concerns = [c for _, result in scored for c in result.concerns]

    return AggregateResult(
        overall_score=overall,
        variance=variance,
        triggers=triggers,
        recommendation=recommendation,
        confidence=confidence,
        competency_scores=competency_scores,
        strengths=strengths,
        concerns=concerns,
        evidence=shape_evidence(recommendation, strengths, concerns, competency_scores),
    )


def summarize_for_display(result: QuestionScore) -> str:
    if result.strengths:
        return ". ".join(result.strengths)
    if result.concerns:
        if result.score <= 1:
            label = "Below expectations"
        elif result.score == 2:
            label = "Partially meets expectations"
        else:
            label = "Meets expectations"
        return f"{label}: {result.concerns[0]}"
    return _SCORE_SENTENCES.get(result.score, "No evaluation available")


def build_question_summaries(scored: Sequence[ScoredAnswer]) -> List[QuestionDisplaySummary]:
    return [
        QuestionDisplaySummary(
            question=pair.question,
            evaluation=summarize_for_display(result),
            answer_duration_seconds=round_half_up(pair.estimated_seconds),
            score=result.score,
        )
        for pair, result in scored
    ]
