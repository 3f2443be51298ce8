from conftest import FakeTextClient

from evaluation.aggregator import aggregate
from evaluation.outcomes import Degraded, Ok
from evaluation.rationale import RationaleGenerator
from evaluation_errors import TextGenerationError
from evaluation_models import Competency, QAPair, QuestionScore, QuestionType, Recommendation


def _aggregate(scores):
    scored = []
    for index, score in enumerate(scores):
        pair = QAPair(
            question_id=f"q{index}",
            question="Q?",
            answer="A",
            type=QuestionType.INTERVIEW,
            competency=Competency(id=f"c{index}", name=f"Skill {index}", weight=2),
        )
        scored.append((pair, QuestionScore(score=score, strengths=[f"strength {index}"], concerns=[f"concern {index}"])))
    return aggregate(scored)


def test_rationale_uses_generated_text():
    client = FakeTextClient(rationale="Strong, consistent answers.")
    outcome = RationaleGenerator(client).generate(_aggregate([4, 4]), "Backend Engineer")

    assert isinstance(outcome, Ok)
    assert outcome.value == "Strong, consistent answers."
    prompt = client.text_calls[0]["user"]
    assert 'we recommend "strong yes"' in prompt
    assert "Competencies Evaluated: Skill 0, Skill 1" in prompt


def test_borderline_uses_review_prompt():
    client = FakeTextClient()
    result = _aggregate([1, 4, 1, 4])
    assert result.recommendation == Recommendation.BORDERLINE

    RationaleGenerator(client).generate(result, "Backend Engineer")
    prompt = client.text_calls[0]["user"]
    assert "BORDERLINE and requires human review" in prompt
    assert "High variance across competencies" in prompt
    assert "Key Strengths: strength 0; strength 1; strength 2" in prompt


def test_failure_falls_back_to_template():
    client = FakeTextClient(rationale=TextGenerationError("down"))
    outcome = RationaleGenerator(client).generate(_aggregate([1, 1]), "Backend Engineer")

    assert isinstance(outcome, Degraded)
    assert outcome.value == 'Based on the evaluation, we recommend "strong no" for this candidate.'


def test_empty_text_falls_back_to_template():
    outcome = RationaleGenerator(FakeTextClient(rationale="")).generate(_aggregate([3, 3]), "Backend Engineer")
    assert isinstance(outcome, Degraded)
    assert outcome.value == 'Based on the evaluation, we recommend "yes" for this candidate.'


def test_review_flags_reach_non_borderline_prompt():
    scored = []
    for index, (weight, score) in enumerate([(3, 1), (2, 4), (2, 4), (2, 4), (2, 4), (2, 4)]):
        pair = QAPair(
            question_id=f"q{index}",
            question="Q?",
            answer="A",
            type=QuestionType.INTERVIEW,
            competency=Competency(id=f"c{index}", name=f"Skill {index}", weight=weight),
        )
        scored.append((pair, QuestionScore(score=score)))
    result = aggregate(scored)
    assert result.recommendation == Recommendation.STRONG_YES

    client = FakeTextClient()
    RationaleGenerator(client).generate(result, "Backend Engineer")

    assert 'Review Flags: Critical competency "Skill 0" scored below threshold' in client.text_calls[0]["user"]


def test_prompt_without_triggers_has_no_review_flags():
    client = FakeTextClient()
    RationaleGenerator(client).generate(_aggregate([4, 4]), "Backend Engineer")
    assert "Review Flags" not in client.text_calls[0]["user"]
