# error_logger.py
"""
Durable failure log for every rejection and failure path.

Entries are written to the console first, then to the error_logs table, then
optionally to Slack. None of these sinks may break the calling flow.
"""

import logging
import threading
import traceback
from typing import Any, Dict, Optional, Tuple

from evaluation_errors import EvaluationError
from evaluation_models import ErrorLogEntry
from slack_service import SlackAlerter

logger = logging.getLogger(__name__)


def extract_error_details(error: Any) -> Tuple[str, Optional[str], str]:
    """Return (message, stack, error_type) for an exception or a plain message."""
    if isinstance(error, EvaluationError):
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return error.message, stack or None, error.error_type
    if isinstance(error, BaseException):
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return str(error) or type(error).__name__, stack or None, type(error).__name__
    return str(error), None, "unknown_error"


class ErrorLogger:
    def __init__(self, store, alerter: Optional[SlackAlerter] = None, *, async_alerts: bool = True) -> None:
        self.store = store
        self.alerter = alerter
        self.async_alerts = async_alerts

    def log_error(
        self,
        endpoint: str,
        error: Any,
        *,
        error_type: Optional[str] = None,
        interview_id: Optional[str] = None,
        interview_slug: Optional[str] = None,
        candidate_id: Optional[str] = None,
        request_body: Optional[Dict[str, Any]] = None,
    ) -> Optional[ErrorLogEntry]:
        """Record a failure. Never raises."""
        try:
            message, stack, detected_type = extract_error_details(error)
            entry = ErrorLogEntry(
                endpoint=endpoint,
                error_type=error_type or detected_type,
                error_message=message,
                error_stack=stack,
                interview_id=interview_id or getattr(error, "interview_id", None),
                interview_slug=interview_slug,
                candidate_id=candidate_id,
                request_body=request_body if isinstance(request_body, dict) else None,
            )
        except Exception as exc:  # pragma: no cover - formatting guard
            logger.error("error_log_build_failed", extra={"endpoint": endpoint, "error": str(exc)})
            return None

        logger.error(
            "evaluation_error_recorded",
            extra={
                "endpoint": entry.endpoint,
                "error_type": entry.error_type,
                "interview_id": entry.interview_id,
                "interview_slug": entry.interview_slug,
                "error": entry.error_message,
            },
        )

        try:
            entry.id = self.store.insert_error_log(entry)
        except Exception as exc:
            logger.error(
                "error_log_persist_failed",
                extra={"endpoint": endpoint, "error": str(exc)},
                exc_info=True,
            )

        self._send_alert(entry)
        return entry

    def _send_alert(self, entry: ErrorLogEntry) -> None:
        if not self.alerter or not self.alerter.enabled():
            return

        if self.async_alerts:
            thread = threading.Thread(target=self._deliver_alert, args=(entry,), daemon=True)
            thread.start()
        else:
            self._deliver_alert(entry)

    def _deliver_alert(self, entry: ErrorLogEntry) -> None:
        try:
            self.alerter.send_error_alert(entry)
        except Exception as exc:
            logger.error("error_alert_failed", extra={"error_type": entry.error_type, "error": str(exc)})
