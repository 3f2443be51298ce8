# voice_provider.py
"""Client for the voice-call provider's call-detail API."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from evaluation_config import VOICE_PROVIDER_API_KEY, VOICE_PROVIDER_BASE_URL

logger = logging.getLogger(__name__)


def render_transcript_messages(messages: List[Dict[str, Any]]) -> str:
    """Render conversation turns as ``[time] role: content`` blocks."""
    lines: List[str] = []
    for message in messages or []:
        if not isinstance(message, dict):
            continue
        content = message.get("message") or message.get("content") or ""
        if not content:
            continue
        role = message.get("role") or "unknown"
        timestamp = message.get("time") or message.get("secondsFromStart")
        prefix = f"[{timestamp}] " if timestamp is not None else ""
        lines.append(f"{prefix}{role}: {content}")
    return "\n\n".join(lines)


@dataclass
class CallDetail:
    transcript_text: str = ""
    messages: List[Dict[str, Any]] = field(default_factory=list)
    recording_url: Optional[str] = None


class VoiceCallClient:
    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = 15,
    ) -> None:
        self.api_key = api_key if api_key is not None else VOICE_PROVIDER_API_KEY
        self.base_url = (base_url or VOICE_PROVIDER_BASE_URL).rstrip("/")
        self.timeout = timeout

        if not self.api_key:
            logger.warning("voice_provider_api_key_missing")

    def fetch_call(self, call_id: str) -> Optional[CallDetail]:
        """
        Fetch transcript, turns and recording URL for a finished call.
        Returns None when the call cannot be fetched; callers treat this as best-effort.
        """
        if not self.api_key or not call_id:
            return None

        url = f"{self.base_url}/call/{call_id}"
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            response = requests.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("voice_call_fetch_failed", extra={"call_id": call_id, "error": str(exc)})
            return None

        if response.status_code != 200:
            logger.error(
                "voice_call_fetch_bad_status",
                extra={"call_id": call_id, "status": response.status_code},
            )
            return None

        try:
            data = response.json()
        except ValueError:
            logger.error("voice_call_non_json_response", extra={"call_id": call_id})
            return None

        if not isinstance(data, dict):
            logger.error("voice_call_unexpected_payload", extra={"call_id": call_id})
            return None

        artifact = data.get("artifact") or {}
        messages = artifact.get("messages") or data.get("messages") or []
        if not isinstance(messages, list):
            messages = []

        transcript = render_transcript_messages(messages) if messages else ""
        if not transcript:
            transcript = data.get("transcript") or artifact.get("transcript") or ""

        recording_url = data.get("recordingUrl") or artifact.get("recordingUrl")

        logger.info(
            "voice_call_fetched",
            extra={"call_id": call_id, "message_count": len(messages), "has_recording": bool(recording_url)},
        )
        return CallDetail(transcript_text=transcript, messages=messages, recording_url=recording_url)
