"""
Slack Block Kit builders for evaluation pipeline alerts.
"""

from typing import Any, Dict, List, Optional

from evaluation_models import ErrorLogEntry

MESSAGE_PREVIEW_LIMIT = 500
STACK_PREVIEW_LIMIT = 1000


def _truncate(text: Optional[str], limit: int) -> str:
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


def build_error_alert_blocks(entry: ErrorLogEntry, *, admin_url: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Build the Slack Block Kit payload for one evaluation failure.

    Args:
        entry: the error log entry that was just recorded
        admin_url: optional link to the failed-interview queue

    Returns:
        List of Slack blocks
    """
    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "🚨 Interview evaluation error", "emoji": True},
        }
    ]

    fields = [
        {"type": "mrkdwn", "text": f"*Endpoint:*\n`{entry.endpoint}`"},
        {"type": "mrkdwn", "text": f"*Error type:*\n`{entry.error_type}`"},
    ]
    if entry.interview_id:
        fields.append({"type": "mrkdwn", "text": f"*Interview:*\n`{entry.interview_id}`"})
    if entry.interview_slug:
        fields.append({"type": "mrkdwn", "text": f"*Slug:*\n`{entry.interview_slug}`"})
    blocks.append({"type": "section", "fields": fields})

    blocks.append(
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"*Message:*\n{_truncate(entry.error_message, MESSAGE_PREVIEW_LIMIT)}",
            },
        }
    )

    if entry.error_stack:
        blocks.append(
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"```{_truncate(entry.error_stack, STACK_PREVIEW_LIMIT)}```",
                },
            }
        )

    if admin_url:
        blocks.append({"type": "divider"})
        blocks.append(
            {
                "type": "context",
                "elements": [{"type": "mrkdwn", "text": f"<{admin_url}|Open failed-interview queue>"}],
            }
        )

    return blocks


def build_error_alert_text(entry: ErrorLogEntry) -> str:
    """Fallback text for notification previews."""
    target = entry.interview_slug or entry.interview_id or "n/a"
    return f"Evaluation error at {entry.endpoint} ({entry.error_type}) for interview {target}"
