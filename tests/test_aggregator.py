import itertools

import pytest

from evaluation.aggregator import (
    aggregate,
    build_question_summaries,
    classify_recommendation,
    population_variance,
    round_half_up,
    summarize_for_display,
)
from evaluation_errors import EvaluationError
from evaluation_models import Competency, Confidence, QAPair, QuestionScore, QuestionType, Recommendation

VARIANCE_TRIGGER = "High variance across competencies - performance was inconsistent"


def _pair(name: str, weight: int = 2, answer: str = "some answer") -> QAPair:
    return QAPair(
        question_id=f"q-{name}",
        question=f"Question about {name}?",
        answer=answer,
        type=QuestionType.INTERVIEW,
        competency=Competency(id=f"c-{name}", name=name, weight=weight),
    )


def _scored(*items):
    """items: (name, weight, score[, strengths, concerns])"""
    scored = []
    for item in items:
        name, weight, score = item[:3]
        strengths = item[3] if len(item) > 3 else []
        concerns = item[4] if len(item) > 4 else []
        scored.append((_pair(name, weight), QuestionScore(score=score, strengths=strengths, concerns=concerns)))
    return scored


@pytest.mark.parametrize(
    "overall, expected",
    [
        (80, Recommendation.STRONG_YES),
        (79, Recommendation.YES),
        (65, Recommendation.YES),
        (64, Recommendation.BORDERLINE),
        (50, Recommendation.BORDERLINE),
        (49, Recommendation.NO),
        (35, Recommendation.NO),
        (34, Recommendation.STRONG_NO),
        (0, Recommendation.STRONG_NO),
        (100, Recommendation.STRONG_YES),
    ],
)
def test_tier_boundaries_without_triggers(overall, expected):
    recommendation, _ = classify_recommendation(overall, [], 0.0)
    assert recommendation == expected


def test_yes_confidence_depends_on_variance():
    assert classify_recommendation(70, [], 1.0) == (Recommendation.YES, Confidence.HIGH)
    assert classify_recommendation(70, [], 1.2) == (Recommendation.YES, Confidence.MODERATE)


def test_triggers_force_borderline_only_inside_band():
    triggers = ["anything"]
    assert classify_recommendation(40, triggers, 2.0) == (Recommendation.BORDERLINE, Confidence.LOW)
    assert classify_recommendation(74, triggers, 2.0) == (Recommendation.BORDERLINE, Confidence.LOW)
    assert classify_recommendation(75, triggers, 2.0)[0] == Recommendation.YES
    assert classify_recommendation(39, triggers, 2.0)[0] == Recommendation.NO


def test_overall_score_is_weighted():
    # (4*3 + 2*2 + 1*1) / (4*6) = 17/24 = 70.83 -> 71
    result = aggregate(_scored(("Design", 3, 4), ("Communication", 2, 2), ("Ownership", 1, 1)))
    assert result.overall_score == 71


def test_overall_score_rounds_half_up():
    # (3*1 + 2*1) / (4*2) = 62.5 -> 63
    result = aggregate(_scored(("A", 1, 3), ("B", 1, 2)))
    assert result.overall_score == 63
    assert round_half_up(62.5) == 63
    assert round_half_up(2.5) == 3


def test_score_bounds_over_all_combinations():
    for scores in itertools.product([1, 2, 3, 4], repeat=3):
        for weights in itertools.product([1, 2, 3], repeat=3):
            items = [(f"c{i}", w, s) for i, (s, w) in enumerate(zip(scores, weights))]
            overall = aggregate(_scored(*items)).overall_score
            assert 0 <= overall <= 100


def test_variance_trigger_sets_borderline():
    result = aggregate(_scored(("A", 2, 1), ("B", 2, 4), ("C", 2, 1), ("D", 2, 4)))
    assert result.overall_score == 63
    assert population_variance([1, 4, 1, 4]) == pytest.approx(2.25)
    assert result.recommendation == Recommendation.BORDERLINE
    assert result.confidence == Confidence.LOW
    assert VARIANCE_TRIGGER in result.triggers


def test_critical_competency_failure_is_named():
    result = aggregate(_scored(("Security", 3, 1), ("Communication", 2, 4), ("Ownership", 1, 4)))
    assert 'Critical competency "Security" scored below threshold' in result.triggers


def test_critical_trigger_names_every_failing_competency():
    result = aggregate(_scored(("Security", 3, 1), ("Reliability", 3, 1), ("Communication", 2, 4)))
    assert 'Critical competency "Security" scored below threshold' in result.triggers
    assert 'Critical competency "Reliability" scored below threshold' in result.triggers


def test_non_critical_low_score_is_not_a_trigger():
    result = aggregate(_scored(("Ownership", 2, 1), ("Communication", 2, 2)))
    assert result.triggers == []


def test_zero_interview_evaluations_fail_fast():
    with pytest.raises(EvaluationError):
        aggregate([])


def test_yes_evidence_shaping():
    strengths = [f"s{i}" for i in range(4)]
    concerns = [f"c{i}" for i in range(4)]
    result = aggregate(_scored(("A", 2, 4, strengths, concerns), ("B", 2, 4, strengths, concerns)))
    assert result.recommendation == Recommendation.STRONG_YES
    assert result.evidence["why_this_candidate"] == ["s0", "s1", "s2", "s3", "s0"]
    assert len(result.evidence["flags_risks"]) == 5
    assert "key_concerns" not in result.evidence


def test_borderline_evidence_names_lowest_competency():
    result = aggregate(
        _scored(("Communication", 2, 3, ["clear"], ["rambling"]), ("Design", 2, 2, ["ok"], ["shallow"]))
    )
    assert result.overall_score == 63
    assert result.recommendation == Recommendation.BORDERLINE
    assert result.evidence["considerations_for"] == ["clear", "ok"]
    assert result.evidence["considerations_against"] == ["rambling", "shallow"]
    assert result.evidence["review_focus"].startswith("Listen to responses about Design - ")


def test_reject_evidence_shaping():
    result = aggregate(_scored(("A", 2, 1, ["polite"], ["no example"])))
    assert result.recommendation == Recommendation.STRONG_NO
    assert result.evidence == {"key_concerns": ["no example"], "notable_strengths": ["polite"]}


def test_competency_justification_prefers_strength_or_concern_by_score():
    result = aggregate(
        _scored(
            ("High", 2, 3, ["great detail"], ["minor gap"]),
            ("Low", 2, 2, ["tried"], ["no metrics"]),
            ("OnlyConcern", 2, 4, [], ["slow start"]),
        )
    )
    justifications = {c.competency_name: c.justification for c in result.competency_scores}
    assert justifications == {"High": "great detail", "Low": "no metrics", "OnlyConcern": "slow start"}

    critical = aggregate(_scored(("Design", 3, 2))).competency_scores[0]
    assert critical.weight_label == "critical"
    assert critical.weighted_contribution == 6
    assert critical.max_contribution == 12


def test_display_summaries():
    assert summarize_for_display(QuestionScore(score=3, strengths=["a", "b"])) == "a. b"
    assert summarize_for_display(QuestionScore(score=2, concerns=["vague"])) == "Partially meets expectations: vague"
    assert summarize_for_display(QuestionScore(score=1, concerns=["none"])) == "Below expectations: none"
    assert summarize_for_display(QuestionScore(score=4)) == "Response strongly demonstrated the competency"

    summaries = build_question_summaries([(_pair("A", answer="one two three"), QuestionScore(score=3))])
    assert summaries[0].answer_duration_seconds == 2
    assert summaries[0].score == 3
