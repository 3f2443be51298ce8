"""FastAPI router for voice-provider completion callbacks."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

import evaluation_config
from callback_payload import parse_completion_callback
from dependencies import get_error_logger, get_ingestor
from error_logger import ErrorLogger
from evaluation_errors import CallbackValidationError, InterviewNotFoundError, PersistenceError
from webhook_ingestor import WEBHOOK_ENDPOINT, WebhookIngestor
from webhook_security import verify_callback_signature

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(WEBHOOK_ENDPOINT)
async def voice_completion_callback(
    request: Request,
    ingestor: WebhookIngestor = Depends(get_ingestor),
    error_logger: ErrorLogger = Depends(get_error_logger),
) -> JSONResponse:
    """Completion callback endpoint; queues the interview and returns immediately."""
    body = await request.body()

    try:
        verify_callback_signature(
            request.headers,
            body,
            evaluation_config.VOICE_WEBHOOK_SECRET,
            evaluation_config.VOICE_WEBHOOK_SIGNATURE_HEADER,
        )
    except CallbackValidationError as exc:
        await asyncio.to_thread(error_logger.log_error, WEBHOOK_ENDPOINT, exc, error_type="invalid_signature")
        raise HTTPException(status_code=401, detail=exc.message) from exc

    try:
        payload: Dict[str, Any] = json.loads(body or b"{}")
    except json.JSONDecodeError as exc:
        logger.error("voice_webhook_invalid_json", extra={"error": str(exc)})
        await asyncio.to_thread(error_logger.log_error, WEBHOOK_ENDPOINT, exc, error_type="invalid_json")
        raise HTTPException(status_code=400, detail="Invalid JSON payload") from exc

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    callback = parse_completion_callback(payload)
    if not callback.is_end_of_call:
        logger.debug("voice_webhook_event_ignored", extra={"event_type": callback.event_type})
        return JSONResponse({"received": True})

    try:
        result = await asyncio.to_thread(ingestor.ingest, callback)
    except CallbackValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    except InterviewNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except PersistenceError as exc:
        await asyncio.to_thread(
            error_logger.log_error, WEBHOOK_ENDPOINT, exc, interview_slug=callback.slug, request_body=payload
        )
        raise HTTPException(status_code=500, detail="Failed to store transcript") from exc

    return JSONResponse(result.to_response())
