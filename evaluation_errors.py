"""Exception taxonomy shared by the ingestion, scoring and retry paths."""

from __future__ import annotations

from typing import Optional


class EvaluationError(Exception):
    """Base class for every failure the evaluation service reports."""

    error_type = "evaluation_error"

    def __init__(self, message: str, *, interview_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.interview_id = interview_id


class CallbackValidationError(EvaluationError):
    """Completion callback rejected before any state change (no retry)."""

    error_type = "validation_error"

    def __init__(self, message: str, *, reason: str, interview_id: Optional[str] = None) -> None:
        super().__init__(message, interview_id=interview_id)
        self.reason = reason


class InterviewNotFoundError(EvaluationError):
    error_type = "interview_not_found"


class MissingTranscriptError(EvaluationError):
    error_type = "no_transcript"


class EvaluationInFlightError(EvaluationError):
    """Another worker currently holds the claim on this interview."""

    error_type = "evaluation_in_flight"


class TextGenerationError(EvaluationError):
    """The text-generation service call itself failed (network, rate limit, auth)."""

    error_type = "text_generation_error"


class MalformedResponseError(TextGenerationError):
    """The text-generation service answered, but not with the agreed JSON shape."""

    error_type = "json_parse_error"

    def __init__(self, message: str, *, raw_content: str = "", interview_id: Optional[str] = None) -> None:
        super().__init__(message, interview_id=interview_id)
        self.raw_content = raw_content


class PersistenceError(EvaluationError):
    """A write to the interview store failed or lost its claim."""

    error_type = "persistence_error"
