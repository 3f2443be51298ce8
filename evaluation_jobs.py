from __future__ import annotations

import logging
import time
from typing import Optional

from error_logger import ErrorLogger
from evaluation.pipeline import EvaluationPipeline
from evaluation_config import EVALUATION_SWEEP_TIME_BUDGET_SECONDS, truncate_error
from evaluation_errors import EvaluationInFlightError, InterviewNotFoundError, MissingTranscriptError
from evaluation_models import EvaluationResult, EvaluationStatus, SweepResult
from interview_store import InterviewStore

logger = logging.getLogger(__name__)

SWEEP_ENDPOINT = "/cron/process-evaluations"
RETRY_ENDPOINT = "/admin/retry-evaluation"

# Statuses a manual retry may claim from.
RETRYABLE_STATUSES = (
    EvaluationStatus.FAILED,
    EvaluationStatus.COMPLETED,
    EvaluationStatus.NONE,
)


def run_evaluation_sweep(
    store: InterviewStore,
    pipeline: EvaluationPipeline,
    *,
    time_budget_seconds: Optional[int] = None,
) -> SweepResult:
    """Claim and score the single oldest queued interview."""
    budget = time_budget_seconds or EVALUATION_SWEEP_TIME_BUDGET_SECONDS
    started = time.monotonic()

    interview_id = store.claim_next_queued()
    if interview_id is None:
        logger.info("evaluation_sweep_idle")
        return SweepResult(success=True, message="No pending evaluations")

    result = pipeline.run(interview_id, source=SWEEP_ENDPOINT)

    elapsed = time.monotonic() - started
    if elapsed > budget:
        logger.warning(
            "evaluation_sweep_over_budget",
            extra={"interview_id": interview_id, "elapsed_seconds": round(elapsed, 2), "budget_seconds": budget},
        )
    logger.info(
        "evaluation_sweep_complete",
        extra={"interview_id": interview_id, "success": result.success, "elapsed_seconds": round(elapsed, 2)},
    )

    return SweepResult(
        success=result.success,
        interview_id=result.interview_id,
        recommendation=result.recommendation,
        score=result.score,
        error=result.error,
    )


def retry_evaluation(
    interview_id: str,
    store: InterviewStore,
    pipeline: EvaluationPipeline,
    error_logger: ErrorLogger,
) -> EvaluationResult:
    """
    Re-run scoring end to end as a new attempt.

    Raises:
        InterviewNotFoundError: unknown interview id
        MissingTranscriptError: nothing to score
        EvaluationInFlightError: another worker holds the claim
    """
    interview = store.get_interview(interview_id)
    if interview is None:
        error = InterviewNotFoundError("Interview not found", interview_id=interview_id)
        error_logger.log_error(RETRY_ENDPOINT, error, interview_id=interview_id)
        raise error

    if not interview.has_transcript:
        error = MissingTranscriptError("No transcript available for this interview", interview_id=interview_id)
        error_logger.log_error(
            RETRY_ENDPOINT, error, interview_id=interview_id, interview_slug=interview.slug
        )
        raise error

    if not store.try_claim(interview_id, expected=RETRYABLE_STATUSES):
        raise EvaluationInFlightError("Evaluation already in progress", interview_id=interview_id)

    logger.info("evaluation_retry_started", extra={"interview_id": interview_id, "slug": interview.slug})
    result = pipeline.run(interview_id, source=RETRY_ENDPOINT)
    if result.error:
        result.error = truncate_error(result.error)
    return result
