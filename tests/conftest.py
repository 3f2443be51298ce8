"""Shared fixtures for the evaluation service tests."""

import copy
from typing import Any, Dict, List, Optional

import pytest

from error_logger import ErrorLogger
from evaluation.prompts import SEGMENTATION_SYSTEM_PROMPT, SUMMARY_SYSTEM_PROMPT
from evaluation_models import QuestionType
from interview_store import InterviewStore

RUBRIC = {
    1: "Vague, no concrete example",
    2: "Some example, little ownership",
    3: "Clear example with measurable outcome",
    4: "Multiple examples, leads others",
}

TRANSCRIPT = (
    "AI: What is your notice period?\n"
    "User: Two weeks.\n"
    "AI: Tell me about a hard conversation with a stakeholder.\n"
    "User: I pushed back on a launch date and we agreed on a phased rollout.\n"
    "AI: How would you design a rate limiter?\n"
    "User: A token bucket per client stored in Redis with a sliding window fallback.\n"
    "AI: Tell me about something you owned end to end.\n"
    "User: I owned the billing migration and wrote the runbook."
)


def segmentation_reply(answers: Dict[int, str]) -> Dict[str, Any]:
    return {"qa_pairs": [{"question_index": i, "answer": a} for i, a in answers.items()]}


def rubric_reply(score: Any, strengths: Optional[List[str]] = None, concerns: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "score": score,
        "strengths": strengths if strengths is not None else [],
        "concerns": concerns if concerns is not None else [],
        "evidence_quotes": ["quote"],
        "why_not_higher_score": "Needs more depth",
    }


DEFAULT_SEGMENTATION = segmentation_reply(
    {
        0: "Two weeks.",
        1: "I pushed back on a launch date and we agreed on a phased rollout.",
        2: "A token bucket per client stored in Redis with a sliding window fallback.",
        3: "I owned the billing migration and wrote the runbook.",
    }
)


class FakeTextClient:
    """Scripted stand-in for TextGenerationClient.

    Rubric replies are keyed by competency name ("*" is the fallback). A reply
    that is an exception instance is raised instead of returned.
    """

    def __init__(
        self,
        *,
        segmentation: Any = None,
        rubric: Optional[Dict[str, Any]] = None,
        summary: Any = "Candidate can start in two weeks.",
        rationale: Any = "The candidate showed clear, concrete evidence across competencies.",
    ) -> None:
        self.segmentation = DEFAULT_SEGMENTATION if segmentation is None else segmentation
        self.rubric = rubric if rubric is not None else {"*": rubric_reply(3, ["Concrete example"], ["Limited scope"])}
        self.summary = summary
        self.rationale = rationale
        self.json_calls: List[Dict[str, str]] = []
        self.text_calls: List[Dict[str, str]] = []

    @staticmethod
    def _resolve(reply: Any) -> Any:
        if isinstance(reply, Exception):
            raise reply
        return copy.deepcopy(reply)

    def generate_json(self, *, model: str, system: str, user: str, temperature: float = 0.1) -> Dict[str, Any]:
        self.json_calls.append({"model": model, "system": system, "user": user})
        if system == SEGMENTATION_SYSTEM_PROMPT:
            return self._resolve(self.segmentation)

        competency = user.split("\n", 1)[0].replace("Competency: ", "", 1)
        return self._resolve(self.rubric.get(competency, self.rubric.get("*")))

    def generate_text(self, *, model: str, system: str, user: str, temperature: float = 0.3) -> str:
        self.text_calls.append({"model": model, "system": system, "user": user})
        if system == SUMMARY_SYSTEM_PROMPT:
            return self._resolve(self.summary)
        return self._resolve(self.rationale)

    @property
    def rubric_call_count(self) -> int:
        return sum(1 for call in self.json_calls if call["system"] != SEGMENTATION_SYSTEM_PROMPT)


class RecordingAlerter:
    def __init__(self) -> None:
        self.sent = []

    def enabled(self) -> bool:
        return True

    def send_error_alert(self, entry) -> bool:
        self.sent.append(entry)
        return True


@pytest.fixture
def store() -> InterviewStore:
    return InterviewStore(db_url="sqlite:///:memory:")


@pytest.fixture
def alerter() -> RecordingAlerter:
    return RecordingAlerter()


@pytest.fixture
def error_logger(store, alerter) -> ErrorLogger:
    return ErrorLogger(store, alerter, async_alerts=False)


@pytest.fixture
def text_client() -> FakeTextClient:
    return FakeTextClient()


@pytest.fixture
def seeded(store) -> Dict[str, str]:
    """A role with one screening and three interview questions, plus an invited interview."""
    role_id = store.create_role(title="Backend Engineer", jd_text="Build and operate payment APIs.")
    communication = store.create_competency(role_id=role_id, name="Communication", weight=2, rubric=RUBRIC)
    design = store.create_competency(role_id=role_id, name="System Design", weight=3, rubric=RUBRIC)
    ownership = store.create_competency(role_id=role_id, name="Ownership", weight=1, rubric=RUBRIC)

    store.create_question(
        role_id=role_id, text="What is your notice period?", question_type=QuestionType.SCREENING, order_index=0
    )
    store.create_question(
        role_id=role_id,
        text="Tell me about a hard conversation with a stakeholder.",
        question_type=QuestionType.INTERVIEW,
        order_index=1,
        competency_id=communication,
    )
    store.create_question(
        role_id=role_id,
        text="How would you design a rate limiter?",
        question_type=QuestionType.INTERVIEW,
        order_index=2,
        competency_id=design,
    )
    store.create_question(
        role_id=role_id,
        text="Tell me about something you owned end to end.",
        question_type=QuestionType.INTERVIEW,
        order_index=3,
        competency_id=ownership,
    )

    interview_id = store.create_interview(role_id=role_id, slug="abc123", candidate_id="cand-1")
    return {"role_id": role_id, "interview_id": interview_id, "slug": "abc123"}


@pytest.fixture
def queued(store, seeded) -> Dict[str, str]:
    store.enqueue_transcript(slug=seeded["slug"], external_call_id="call-1", transcript_text=TRANSCRIPT)
    return seeded
