# webhook_ingestor.py
"""Turns a completion callback into a queued evaluation. Never scores."""

import logging
from dataclasses import dataclass
from typing import Optional

from callback_payload import CompletionCallback
from error_logger import ErrorLogger
from evaluation_errors import CallbackValidationError, InterviewNotFoundError
from interview_store import EnqueueStatus, InterviewStore
from voice_provider import VoiceCallClient, render_transcript_messages

logger = logging.getLogger(__name__)

WEBHOOK_ENDPOINT = "/webhooks/voice"


@dataclass
class IngestResult:
    status: EnqueueStatus
    interview_id: Optional[str] = None

    def to_response(self) -> dict:
        return {"success": True, "status": self.status.value, "interviewId": self.interview_id}


class WebhookIngestor:
    def __init__(
        self,
        store: InterviewStore,
        error_logger: ErrorLogger,
        call_client: Optional[VoiceCallClient] = None,
    ) -> None:
        self.store = store
        self.error_logger = error_logger
        self.call_client = call_client

    def ingest(self, callback: CompletionCallback) -> IngestResult:
        """
        Validate the callback and queue the interview for scoring.

        Raises:
            CallbackValidationError: slug or transcript missing
            InterviewNotFoundError: slug does not match an interview
        """
        if not callback.slug:
            error = CallbackValidationError("No interview slug found in call metadata", reason="missing_slug")
            self.error_logger.log_error(WEBHOOK_ENDPOINT, error, error_type="missing_slug", request_body=callback.raw)
            raise error

        if callback.call_id and (not callback.has_transcript or not callback.recording_url):
            self._fill_from_provider(callback)

        if not callback.has_transcript:
            error = CallbackValidationError("No transcript in completion callback", reason="missing_transcript")
            self.error_logger.log_error(
                WEBHOOK_ENDPOINT,
                error,
                error_type="missing_transcript",
                interview_slug=callback.slug,
                request_body=callback.raw,
            )
            raise error

        transcript_text = callback.transcript_text
        if not transcript_text.strip():
            transcript_text = render_transcript_messages(callback.messages)

        outcome = self.store.enqueue_transcript(
            slug=callback.slug,
            external_call_id=callback.call_id,
            transcript_text=transcript_text,
            messages=callback.messages,
            recording_url=callback.recording_url,
        )

        if outcome.status == EnqueueStatus.NOT_FOUND:
            error = InterviewNotFoundError(f"Interview not found for slug {callback.slug}")
            self.error_logger.log_error(
                WEBHOOK_ENDPOINT,
                error,
                interview_slug=callback.slug,
                request_body=callback.raw,
            )
            raise error

        logger.info(
            "voice_callback_ingested",
            extra={
                "interview_id": outcome.interview_id,
                "slug": callback.slug,
                "call_id": callback.call_id,
                "status": outcome.status.value,
            },
        )
        return IngestResult(status=outcome.status, interview_id=outcome.interview_id)

    def _fill_from_provider(self, callback: CompletionCallback) -> None:
        if not self.call_client:
            return

        detail = self.call_client.fetch_call(callback.call_id)
        if detail is None:
            logger.warning("voice_call_fallback_unavailable", extra={"call_id": callback.call_id})
            return

        if not callback.has_transcript:
            callback.transcript_text = detail.transcript_text
            callback.messages = detail.messages
        if not callback.recording_url:
            callback.recording_url = detail.recording_url
