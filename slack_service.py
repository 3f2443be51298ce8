import json
import logging
from typing import Any, Dict, List, Optional

import requests

from evaluation_config import SLACK_ALERTS_ADMIN_URL, SLACK_ALERTS_BOT_TOKEN, SLACK_ALERTS_CHANNEL_ID
from evaluation_models import ErrorLogEntry
from slack_blocks import build_error_alert_blocks, build_error_alert_text

slack_logger = logging.getLogger("slack")


class SlackClient:
    def __init__(
        self,
        *,
        name: str,
        bot_token: Optional[str],
        default_channel: Optional[str],
    ) -> None:
        self.name = name
        self.bot_token = bot_token
        self.default_channel = default_channel

        if not self.bot_token:
            slack_logger.warning(
                "slack_bot_token_missing",
                extra={"bot": self.name},
            )

    # -------------------------------
    # Internal HTTP helper
    # -------------------------------
    def _send(self, endpoint: str, payload: dict) -> bool:
        if not self.bot_token:
            slack_logger.error("slack_token_unavailable", extra={"bot": self.name})
            return False

        url = f"https://slack.com/api/{endpoint}"
        headers = {
            "Authorization": f"Bearer {self.bot_token}",
            "Content-Type": "application/json; charset=utf-8",
        }

        slack_logger.debug(
            "slack_request",
            extra={"bot": self.name, "endpoint": endpoint, "channel": payload.get("channel")},
        )

        try:
            response = requests.post(url, headers=headers, data=json.dumps(payload), timeout=10)
        except requests.RequestException as exc:
            slack_logger.error(
                "slack_http_error",
                extra={"bot": self.name, "endpoint": endpoint, "error": str(exc)},
            )
            return False

        try:
            data = response.json()
        except ValueError:
            slack_logger.error(
                "slack_non_json_response",
                extra={"bot": self.name, "endpoint": endpoint, "status": response.status_code},
            )
            return False

        if not data.get("ok"):
            slack_logger.error(
                "slack_api_error",
                extra={
                    "bot": self.name,
                    "endpoint": endpoint,
                    "error": data,
                },
            )
            return False

        return True

    def post_message(
        self,
        text: str,
        channel: Optional[str] = None,
        blocks: Optional[List[Dict[str, Any]]] = None,
    ) -> bool:
        target_channel = channel or self.default_channel
        if not target_channel:
            slack_logger.warning(
                "slack_channel_missing",
                extra={"bot": self.name},
            )
            return False

        payload = {
            "channel": target_channel,
            "text": text,  # Fallback text for notifications
        }
        if blocks:
            payload["blocks"] = blocks

        return self._send("chat.postMessage", payload)

    def has_token(self) -> bool:
        return bool(self.bot_token)


class SlackAlerter:
    """Posts evaluation failures to the operations channel."""

    def __init__(self, client: Optional[SlackClient] = None, *, admin_url: Optional[str] = None) -> None:
        self.client = client
        self.admin_url = admin_url

    def enabled(self) -> bool:
        return bool(self.client and self.client.has_token() and self.client.default_channel)

    def send_error_alert(self, entry: ErrorLogEntry) -> bool:
        if not self.enabled():
            slack_logger.debug("slack_alert_skipped", extra={"error_type": entry.error_type})
            return False

        blocks = build_error_alert_blocks(entry, admin_url=self.admin_url)
        return self.client.post_message(build_error_alert_text(entry), blocks=blocks)


def build_default_alerter() -> SlackAlerter:
    if not SLACK_ALERTS_BOT_TOKEN or not SLACK_ALERTS_CHANNEL_ID:
        return SlackAlerter(None)
    client = SlackClient(
        name="alerts",
        bot_token=SLACK_ALERTS_BOT_TOKEN,
        default_channel=SLACK_ALERTS_CHANNEL_ID,
    )
    return SlackAlerter(client, admin_url=SLACK_ALERTS_ADMIN_URL)
