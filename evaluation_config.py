# evaluation_config.py
"""
Configuration for the interview evaluation service.
"""

import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./interview_evaluations.db")

# Completion callback authenticity
VOICE_WEBHOOK_SECRET = os.getenv("VOICE_WEBHOOK_SECRET")
VOICE_WEBHOOK_SIGNATURE_HEADER = os.getenv("VOICE_WEBHOOK_SIGNATURE_HEADER", "X-Vapi-Signature")

# Bearer secrets for the sweep trigger and operator endpoints
CRON_SECRET = os.getenv("CRON_SECRET")
ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN")

# Text-generation models
SEGMENTATION_MODEL = os.getenv("SEGMENTATION_MODEL", "gpt-4o")
RUBRIC_MODEL = os.getenv("RUBRIC_MODEL", "gpt-4o")
SUMMARY_MODEL = os.getenv("SUMMARY_MODEL", "gpt-4o-mini")
RATIONALE_MODEL = os.getenv("RATIONALE_MODEL", "gpt-4o-mini")

# Voice provider call-detail API
VOICE_PROVIDER_API_KEY = os.getenv("VOICE_PROVIDER_API_KEY")
VOICE_PROVIDER_BASE_URL = os.getenv("VOICE_PROVIDER_BASE_URL", "https://api.vapi.ai")

# Error alerts
SLACK_ALERTS_BOT_TOKEN = os.getenv("SLACK_ALERTS_BOT_TOKEN")
SLACK_ALERTS_CHANNEL_ID = os.getenv("SLACK_ALERTS_CHANNEL_ID")
SLACK_ALERTS_ADMIN_URL = os.getenv("SLACK_ALERTS_ADMIN_URL")

# Periodic sweep
ENABLE_EVALUATION_SWEEP = os.getenv("ENABLE_EVALUATION_SWEEP", "false").lower() == "true"
EVALUATION_SWEEP_INTERVAL_SECONDS = int(os.getenv("EVALUATION_SWEEP_INTERVAL_SECONDS", "60"))
EVALUATION_SWEEP_TIME_BUDGET_SECONDS = int(os.getenv("EVALUATION_SWEEP_TIME_BUDGET_SECONDS", "300"))

# Error text kept on the interview row and returned to operators
MAX_ERROR_MESSAGE_LENGTH = 500

# Validation
if EVALUATION_SWEEP_INTERVAL_SECONDS <= 0:
    raise ValueError(
        f"EVALUATION_SWEEP_INTERVAL_SECONDS must be positive, got {EVALUATION_SWEEP_INTERVAL_SECONDS}"
    )
if EVALUATION_SWEEP_TIME_BUDGET_SECONDS <= 0:
    raise ValueError(
        f"EVALUATION_SWEEP_TIME_BUDGET_SECONDS must be positive, got {EVALUATION_SWEEP_TIME_BUDGET_SECONDS}"
    )


def truncate_error(message: str, limit: int = MAX_ERROR_MESSAGE_LENGTH) -> str:
    """Cap error text stored on interviews and shown in the retry queue."""
    if message is None:
        return ""
    if len(message) <= limit:
        return message
    return message[:limit] + "..."


def is_webhook_signature_required() -> bool:
    """Check if completion callbacks must carry a valid signature."""
    return bool(VOICE_WEBHOOK_SECRET)
