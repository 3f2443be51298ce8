# pipeline.py
"""
End-to-end scoring of one claimed interview.

Segment, summarize screening answers, score interview answers one at a time,
aggregate, explain, persist. Degraded steps are recorded and kept; a fatal
step marks the attempt failed.
"""

import logging
from typing import List, Optional

from error_logger import ErrorLogger
from evaluation_config import truncate_error
from evaluation_errors import EvaluationError
from evaluation_models import (
    EvaluationContext,
    EvaluationResult,
    QAPair,
    QuestionType,
    StructuredEvaluation,
)
from interview_store import InterviewStore
from text_generation import TextGenerationClient

from .aggregator import ScoredAnswer, aggregate, build_question_summaries
from .outcomes import Degraded, Fatal
from .rationale import RationaleGenerator
from .rubric_scorer import RubricScorer, ScreeningSummarizer
from .segmenter import TranscriptSegmenter

logger = logging.getLogger(__name__)

# Degradations caused by the text-generation service; these also go to the error log.
_SERVICE_FAILURE_TYPES = {"text_generation_error", "json_parse_error"}


def build_role_context(context: EvaluationContext) -> str:
    if context.jd_text:
        return f"Role: {context.role_title}\n\n{context.jd_text}"
    return f"Role: {context.role_title}"


class EvaluationPipeline:
    def __init__(
        self,
        store: InterviewStore,
        error_logger: ErrorLogger,
        text_client: Optional[TextGenerationClient] = None,
        *,
        segmenter: Optional[TranscriptSegmenter] = None,
        scorer: Optional[RubricScorer] = None,
        summarizer: Optional[ScreeningSummarizer] = None,
        rationale: Optional[RationaleGenerator] = None,
    ) -> None:
        text_client = text_client or TextGenerationClient()
        self.store = store
        self.error_logger = error_logger
        self.segmenter = segmenter or TranscriptSegmenter(text_client)
        self.scorer = scorer or RubricScorer(text_client)
        self.summarizer = summarizer or ScreeningSummarizer(text_client)
        self.rationale = rationale or RationaleGenerator(text_client)

    def run(self, interview_id: str, *, source: str = "evaluation_pipeline") -> EvaluationResult:
        """Score an interview this worker has already claimed."""
        attempt: Optional[int] = None
        slug: Optional[str] = None
        try:
            context = self.store.load_evaluation_context(interview_id)
            attempt, slug = context.attempt, context.slug
            logger.info(
                "evaluation_started",
                extra={"interview_id": interview_id, "attempt": attempt, "question_count": len(context.questions)},
            )

            segmentation = self.segmenter.segment(context.questions, context.transcript_text)
            if isinstance(segmentation, Fatal):
                raise EvaluationError(segmentation.reason, interview_id=interview_id) from segmentation.error

            scored = self._score_answers(context, segmentation.value, source)
            result = aggregate(scored)

            rationale = self.rationale.generate(result, context.role_title)
            if isinstance(rationale, Degraded):
                logger.warning(
                    "rationale_fallback_used",
                    extra={"interview_id": interview_id, "reason": rationale.reason},
                )

            structured = StructuredEvaluation(
                recommendation=result.recommendation,
                confidence=result.confidence,
                recommendation_rationale=rationale.value,
                borderline_triggers=result.triggers or None,
                competency_scores=result.competency_scores,
                question_evaluations=build_question_summaries(scored),
                **result.evidence,
            )
            self.store.complete_evaluation(
                interview_id=interview_id,
                attempt=attempt,
                score=result.overall_score,
                structured=structured,
            )
        except EvaluationError as exc:
            return self._fail(interview_id, exc, attempt=attempt, slug=slug, source=source)
        except Exception as exc:  # pragma: no cover - unexpected failure path
            logger.exception("evaluation_unexpected_error", extra={"interview_id": interview_id})
            return self._fail(interview_id, exc, attempt=attempt, slug=slug, source=source)

        logger.info(
            "evaluation_completed",
            extra={
                "interview_id": interview_id,
                "attempt": attempt,
                "score": result.overall_score,
                "recommendation": result.recommendation.value,
                "triggers": result.triggers,
            },
        )
        return EvaluationResult(
            success=True,
            interview_id=interview_id,
            recommendation=result.recommendation,
            score=result.overall_score,
        )

    def _score_answers(self, context: EvaluationContext, pairs: List[QAPair], source: str) -> List[ScoredAnswer]:
        role_context = build_role_context(context)
        scored: List[ScoredAnswer] = []

        for pair in pairs:
            if pair.type == QuestionType.SCREENING:
                summary = self.summarizer.summarize(pair)
                self.store.record_screening_summary(
                    interview_id=context.interview_id, attempt=context.attempt, answer=summary.value
                )
                if isinstance(summary, Degraded):
                    logger.warning(
                        "screening_summary_degraded",
                        extra={"interview_id": context.interview_id, "question_id": pair.question_id},
                    )
                continue

            outcome = self.scorer.score(pair, role_context)
            self.store.record_question_evaluation(
                interview_id=context.interview_id,
                attempt=context.attempt,
                pair=pair,
                result=outcome.value,
                degraded=outcome.degraded,
            )
            if isinstance(outcome, Degraded):
                logger.warning(
                    "question_evaluation_degraded",
                    extra={
                        "interview_id": context.interview_id,
                        "question_id": pair.question_id,
                        "reason": outcome.reason,
                    },
                )
                if outcome.error_type in _SERVICE_FAILURE_TYPES:
                    self.error_logger.log_error(
                        f"{source}:rubric_scorer",
                        outcome.reason,
                        error_type=outcome.error_type,
                        interview_id=context.interview_id,
                        interview_slug=context.slug,
                    )
            scored.append((pair, outcome.value))

        return scored

    def _fail(
        self,
        interview_id: str,
        error: Exception,
        *,
        attempt: Optional[int],
        slug: Optional[str],
        source: str,
    ) -> EvaluationResult:
        message = getattr(error, "message", None) or str(error) or type(error).__name__
        self.error_logger.log_error(source, error, interview_id=interview_id, interview_slug=slug)

        try:
            self.store.mark_failed(interview_id, message, attempt=attempt)
        except EvaluationError as exc:
            logger.error(
                "evaluation_mark_failed_error",
                extra={"interview_id": interview_id, "error": exc.message},
                exc_info=True,
            )

        logger.error("evaluation_failed", extra={"interview_id": interview_id, "error": message})
        return EvaluationResult(success=False, interview_id=interview_id, error=truncate_error(message))
