import hashlib
import hmac

import pytest

from evaluation_errors import CallbackValidationError
from webhook_security import verify_callback_signature

HEADER = "X-Vapi-Signature"


def _sign(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def test_accepts_valid_signature():
    body = b'{"message": {"type": "end-of-call-report"}}'
    assert verify_callback_signature({HEADER: _sign("s3cret", body)}, body, "s3cret", HEADER) is True


def test_accepts_prefixed_signature():
    body = b"{}"
    assert verify_callback_signature({HEADER: "sha256=" + _sign("s3cret", body)}, body, "s3cret", HEADER) is True


def test_rejects_mismatched_signature():
    body = b"{}"
    with pytest.raises(CallbackValidationError) as exc_info:
        verify_callback_signature({HEADER: "0" * 64}, body, "s3cret", HEADER)
    assert exc_info.value.reason == "invalid_signature"


def test_rejects_signature_over_different_body():
    signature = _sign("s3cret", b'{"a": 1}')
    with pytest.raises(CallbackValidationError):
        verify_callback_signature({HEADER: signature}, b'{"a": 2}', "s3cret", HEADER)


def test_rejects_missing_header():
    with pytest.raises(CallbackValidationError):
        verify_callback_signature({}, b"{}", "s3cret", HEADER)


def test_missing_secret_accepts_with_warning(caplog):
    with caplog.at_level("WARNING"):
        assert verify_callback_signature({}, b"{}", None, HEADER) is False
    assert "voice_webhook_secret_missing" in caplog.text


def test_rejects_non_ascii_signature():
    with pytest.raises(CallbackValidationError) as exc_info:
        verify_callback_signature({HEADER: "é" * 64}, b"{}", "s3cret", HEADER)
    assert exc_info.value.reason == "invalid_signature"
