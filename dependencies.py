"""Shared component instances, wired into routes with FastAPI ``Depends``."""

from __future__ import annotations

from typing import Optional

from error_logger import ErrorLogger
from evaluation.pipeline import EvaluationPipeline
from interview_store import InterviewStore, get_interview_store
from slack_service import build_default_alerter
from text_generation import TextGenerationClient
from voice_provider import VoiceCallClient
from webhook_ingestor import WebhookIngestor

_error_logger: Optional[ErrorLogger] = None
_pipeline: Optional[EvaluationPipeline] = None
_ingestor: Optional[WebhookIngestor] = None


def get_store() -> InterviewStore:
    return get_interview_store()


def get_error_logger() -> ErrorLogger:
    global _error_logger
    if _error_logger is None:
        _error_logger = ErrorLogger(get_store(), build_default_alerter())
    return _error_logger


def get_pipeline() -> EvaluationPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = EvaluationPipeline(get_store(), get_error_logger(), TextGenerationClient())
    return _pipeline


def get_ingestor() -> WebhookIngestor:
    global _ingestor
    if _ingestor is None:
        _ingestor = WebhookIngestor(get_store(), get_error_logger(), VoiceCallClient())
    return _ingestor
