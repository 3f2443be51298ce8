"""Sweep trigger and operator endpoints for failed evaluations."""

from __future__ import annotations

import hmac
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

import evaluation_config
from dependencies import get_error_logger, get_pipeline, get_store
from error_logger import ErrorLogger
from evaluation.pipeline import EvaluationPipeline
from evaluation_errors import (
    EvaluationError,
    EvaluationInFlightError,
    InterviewNotFoundError,
    MissingTranscriptError,
)
from evaluation_jobs import RETRY_ENDPOINT, SWEEP_ENDPOINT, retry_evaluation, run_evaluation_sweep
from evaluation_models import ErrorLogEntry, InterviewSnapshot
from interview_store import InterviewStore

logger = logging.getLogger(__name__)
router = APIRouter()

FAILED_INTERVIEWS_ENDPOINT = "/admin/failed-interviews"
RESOLVE_ERROR_ENDPOINT = "/admin/resolve-error"


class RetryRequest(BaseModel):
    interviewId: str = Field(..., min_length=1)


class ResolveErrorRequest(BaseModel):
    errorId: int
    notes: Optional[str] = None


def _require_bearer(request: Request, secret: Optional[str], name: str) -> None:
    if not secret:
        logger.error("bearer_secret_missing", extra={"secret": name})
        raise HTTPException(status_code=500, detail=f"{name} not configured")

    supplied = request.headers.get("Authorization") or ""
    if not hmac.compare_digest(supplied.encode("utf-8"), f"Bearer {secret}".encode("utf-8")):
        raise HTTPException(status_code=401, detail="Unauthorized")


def require_cron_secret(request: Request) -> None:
    _require_bearer(request, evaluation_config.CRON_SECRET, "CRON_SECRET")


def require_admin_token(request: Request) -> None:
    _require_bearer(request, evaluation_config.ADMIN_API_TOKEN, "ADMIN_API_TOKEN")


def _interview_payload(interview: InterviewSnapshot) -> Dict[str, Any]:
    return {
        "id": interview.id,
        "slug": interview.slug,
        "status": interview.status.value,
        "evaluationStatus": interview.evaluation_status.value,
        "evaluationError": interview.evaluation_error,
        "evaluationAttempt": interview.evaluation_attempt,
        "completedAt": interview.completed_at.isoformat() if interview.completed_at else None,
        "createdAt": interview.created_at.isoformat() if interview.created_at else None,
    }


def _error_payload(entry: ErrorLogEntry) -> Dict[str, Any]:
    return entry.model_dump(mode="json")


@router.api_route(SWEEP_ENDPOINT, methods=["GET", "POST"], dependencies=[Depends(require_cron_secret)])
def process_evaluations(
    store: InterviewStore = Depends(get_store),
    pipeline: EvaluationPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Claim and score one queued interview."""
    try:
        result = run_evaluation_sweep(store, pipeline)
    except EvaluationError as exc:
        logger.error("evaluation_sweep_failed", extra={"error": exc.message}, exc_info=True)
        raise HTTPException(status_code=500, detail=exc.message) from exc
    return JSONResponse(result.to_response())


@router.post(RETRY_ENDPOINT, dependencies=[Depends(require_admin_token)])
def retry_failed_evaluation(
    body: RetryRequest,
    store: InterviewStore = Depends(get_store),
    pipeline: EvaluationPipeline = Depends(get_pipeline),
    error_logger: ErrorLogger = Depends(get_error_logger),
) -> JSONResponse:
    interview_id = body.interviewId
    try:
        result = retry_evaluation(interview_id, store, pipeline, error_logger)
    except InterviewNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except MissingTranscriptError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    except EvaluationInFlightError as exc:
        raise HTTPException(status_code=409, detail=exc.message) from exc

    if not result.success:
        return JSONResponse(
            {"error": "Evaluation retry failed", "details": result.error},
            status_code=500,
        )

    interview = store.get_interview(interview_id)
    return JSONResponse(
        {
            "success": True,
            "message": "Evaluation retry completed successfully",
            "interviewSlug": interview.slug if interview else None,
            "result": {
                "recommendation": result.recommendation.value if result.recommendation else None,
                "score": result.score,
            },
        }
    )


@router.get(FAILED_INTERVIEWS_ENDPOINT, dependencies=[Depends(require_admin_token)])
def list_failed_interviews(
    store: InterviewStore = Depends(get_store),
    error_logger: ErrorLogger = Depends(get_error_logger),
) -> JSONResponse:
    try:
        failed = store.list_failed_interviews()
        unresolved = store.list_unresolved_errors(limit=20)
    except EvaluationError as exc:
        error_logger.log_error(FAILED_INTERVIEWS_ENDPOINT, exc, error_type="admin_query_error")
        raise HTTPException(status_code=500, detail=exc.message) from exc

    failed_payload: List[Dict[str, Any]] = [_interview_payload(i) for i in failed]
    return JSONResponse(
        {
            "failedInterviews": failed_payload,
            "unresolvedErrors": [_error_payload(e) for e in unresolved],
            "summary": {
                "totalFailed": len(failed_payload),
                "totalUnresolvedErrors": len(unresolved),
            },
        }
    )


@router.post(RESOLVE_ERROR_ENDPOINT, dependencies=[Depends(require_admin_token)])
def resolve_error(
    body: ResolveErrorRequest,
    store: InterviewStore = Depends(get_store),
) -> JSONResponse:
    entry = store.resolve_error(body.errorId, body.notes)
    if entry is None:
        raise HTTPException(status_code=404, detail="Error log not found")

    logger.info("error_log_resolved", extra={"error_id": body.errorId})
    return JSONResponse({"success": True, "error": _error_payload(entry)})
