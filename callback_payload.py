# callback_payload.py
"""
Parsing of voice-provider completion callbacks.

The provider nests our interview slug at different depths depending on how the
call was started, so the slug is found by an ordered search over known shapes.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

END_OF_CALL_EVENT = "end-of-call-report"
SLUG_METADATA_KEY = "interviewSlug"


class MetadataLocation(str, Enum):
    CALL_ASSISTANT = "call.assistant.metadata"
    CALL = "call.metadata"
    ASSISTANT = "assistant.metadata"
    MESSAGE = "metadata"


METADATA_SEARCH_ORDER: Tuple[Tuple[MetadataLocation, Tuple[str, ...]], ...] = (
    (MetadataLocation.CALL_ASSISTANT, ("call", "assistant", "metadata")),
    (MetadataLocation.CALL, ("call", "metadata")),
    (MetadataLocation.ASSISTANT, ("assistant", "metadata")),
    (MetadataLocation.MESSAGE, ("metadata",)),
)


class CompletionCallback(BaseModel):
    event_type: Optional[str] = None
    call_id: Optional[str] = None
    slug: Optional[str] = None
    slug_location: Optional[MetadataLocation] = None
    transcript_text: str = ""
    messages: List[Dict[str, Any]] = Field(default_factory=list)
    recording_url: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_end_of_call(self) -> bool:
        return self.event_type == END_OF_CALL_EVENT

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript_text.strip()) or bool(self.messages)


def _dig(data: Dict[str, Any], path: Tuple[str, ...]) -> Any:
    current: Any = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def find_slug(message: Dict[str, Any]) -> Tuple[Optional[str], Optional[MetadataLocation]]:
    for location, path in METADATA_SEARCH_ORDER:
        metadata = _dig(message, path)
        if isinstance(metadata, dict):
            slug = metadata.get(SLUG_METADATA_KEY)
            if isinstance(slug, str) and slug.strip():
                return slug.strip(), location
    return None, None


def _first_str(*values: Any) -> Optional[str]:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value
    return None


def _first_list(*values: Any) -> List[Dict[str, Any]]:
    for value in values:
        if isinstance(value, list) and value:
            return [item for item in value if isinstance(item, dict)]
    return []


def parse_completion_callback(payload: Dict[str, Any]) -> CompletionCallback:
    """Accept the provider envelope ``{"message": {...}}`` or a bare message."""
    message = payload.get("message") if isinstance(payload.get("message"), dict) else payload
    call = message.get("call") if isinstance(message.get("call"), dict) else {}
    artifact = message.get("artifact") if isinstance(message.get("artifact"), dict) else {}

    slug, location = find_slug(message)
    if slug:
        logger.debug("callback_slug_found", extra={"location": location.value})

    call_id = _first_str(call.get("id"), message.get("callId"))

    return CompletionCallback(
        event_type=message.get("type"),
        call_id=call_id,
        slug=slug,
        slug_location=location,
        transcript_text=_first_str(call.get("transcript"), message.get("transcript"), artifact.get("transcript")) or "",
        messages=_first_list(call.get("messages"), message.get("messages"), artifact.get("messages")),
        recording_url=_first_str(
            message.get("recordingUrl"), artifact.get("recordingUrl"), call.get("recordingUrl")
        ),
        raw=payload,
    )
