"""Signature validation for voice-provider completion callbacks."""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Mapping, Optional

from evaluation_errors import CallbackValidationError

logger = logging.getLogger(__name__)


def compute_signature(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_callback_signature(
    headers: Mapping[str, str],
    body: bytes,
    secret: Optional[str],
    header_name: str,
) -> bool:
    """
    Validate the HMAC-SHA256 signature of a callback body.

    Returns False (and logs a warning) when no secret is configured, True when
    the signature matches. Raises CallbackValidationError otherwise.
    """
    if not secret:
        logger.warning("voice_webhook_secret_missing")
        return False

    signature = headers.get(header_name) or headers.get(header_name.lower())
    if not signature:
        raise CallbackValidationError("Missing webhook signature header", reason="invalid_signature")

    signature = signature.strip()
    if signature.startswith("sha256="):
        signature = signature[len("sha256="):]

    expected = compute_signature(secret, body)
    if not hmac.compare_digest(expected.encode("utf-8"), signature.lower().encode("utf-8")):
        raise CallbackValidationError("Webhook signature mismatch", reason="invalid_signature")
    return True
