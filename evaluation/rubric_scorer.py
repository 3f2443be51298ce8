# rubric_scorer.py
"""Per-question rubric scoring and screening-answer summaries."""

import logging
import math
from typing import Any, List, Optional, Union

from evaluation_config import RUBRIC_MODEL, SUMMARY_MODEL
from evaluation_errors import TextGenerationError
from evaluation_models import QAPair, QuestionScore, ScreeningAnswer
from text_generation import TextGenerationClient

from .aggregator import round_half_up
from .decision_policy import (
    DEFAULT_RUBRIC_SCORE,
    RUBRIC_MAX_SCORE,
    SCREENING_SUMMARY_MIN_SECONDS,
    TECHNICAL_ERROR_CONCERN,
    TECHNICAL_ERROR_WHY_NOT_HIGHER,
)
from .outcomes import Degraded, Ok
from .prompts import (
    RUBRIC_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    build_rubric_prompt,
    build_summary_prompt,
)

logger = logging.getLogger(__name__)


def default_question_score() -> QuestionScore:
    return QuestionScore(
        score=DEFAULT_RUBRIC_SCORE,
        strengths=[],
        concerns=[TECHNICAL_ERROR_CONCERN],
        evidence_quotes=[],
        why_not_higher_score=TECHNICAL_ERROR_WHY_NOT_HIGHER,
    )


def sanitize_score(raw: Any) -> Optional[int]:
    """Return a rubric level in [1, 4], or None when ``raw`` cannot be trusted."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, str):
        try:
            raw = float(raw.strip())
        except ValueError:
            return None
    if not isinstance(raw, (int, float)) or not math.isfinite(raw):
        return None

    if not 1 <= raw <= RUBRIC_MAX_SCORE:
        return None
    return int(raw) if float(raw).is_integer() else round_half_up(raw)


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class RubricScorer:
    def __init__(self, text_client: TextGenerationClient, *, model: str = RUBRIC_MODEL) -> None:
        self.text_client = text_client
        self.model = model

    def score(self, pair: QAPair, role_context: str) -> Union[Ok[QuestionScore], Degraded[QuestionScore]]:
        competency = pair.competency
        if competency is None:
            return Degraded(default_question_score(), "Question has no competency", error_type="invalid_question")

        try:
            data = self.text_client.generate_json(
                model=self.model,
                system=RUBRIC_SYSTEM_PROMPT,
                user=build_rubric_prompt(
                    competency_name=competency.name,
                    competency_description=competency.description,
                    rubric=competency.rubric,
                    job_context=role_context,
                    question=pair.question,
                    answer=pair.answer,
                ),
                temperature=0.3,
            )
        except TextGenerationError as exc:
            logger.warning(
                "rubric_scoring_failed",
                extra={"question_id": pair.question_id, "competency": competency.name, "error": exc.message},
            )
            return Degraded(default_question_score(), exc.message, error_type=exc.error_type)

        result = QuestionScore(
            score=DEFAULT_RUBRIC_SCORE,
            strengths=_string_list(data.get("strengths")),
            concerns=_string_list(data.get("concerns")),
            evidence_quotes=_string_list(data.get("evidence_quotes")),
            why_not_higher_score=data.get("why_not_higher_score") if isinstance(data.get("why_not_higher_score"), str) else "",
        )

        score = sanitize_score(data.get("score"))
        if score is None:
            logger.warning(
                "rubric_score_invalid",
                extra={"question_id": pair.question_id, "value": repr(data.get("score"))},
            )
            return Degraded(result, f"Invalid score {data.get('score')!r}, defaulting to {DEFAULT_RUBRIC_SCORE}", error_type="invalid_score")

        result.score = score
        return Ok(result)


class ScreeningSummarizer:
    def __init__(self, text_client: TextGenerationClient, *, model: str = SUMMARY_MODEL) -> None:
        self.text_client = text_client
        self.model = model

    def summarize(self, pair: QAPair) -> Union[Ok[ScreeningAnswer], Degraded[ScreeningAnswer]]:
        answer = ScreeningAnswer(
            question_id=pair.question_id,
            raw_answer=pair.answer,
            duration_seconds=round_half_up(pair.estimated_seconds),
        )
        if pair.estimated_seconds <= SCREENING_SUMMARY_MIN_SECONDS:
            return Ok(answer)

        try:
            summary = self.text_client.generate_text(
                model=self.model,
                system=SUMMARY_SYSTEM_PROMPT,
                user=build_summary_prompt(pair.question, pair.answer),
            )
        except TextGenerationError as exc:
            logger.warning("screening_summary_failed", extra={"question_id": pair.question_id, "error": exc.message})
            return Degraded(answer, exc.message, error_type=exc.error_type)

        answer.summary = summary or None
        return Ok(answer)
