from unittest.mock import MagicMock

import requests

import slack_service
from evaluation_models import ErrorLogEntry
from slack_service import SlackAlerter, SlackClient


def _client():
    return SlackClient(name="alerts", bot_token="xoxb-test", default_channel="C123")


def _entry():
    return ErrorLogEntry(endpoint="/webhooks/voice", error_type="missing_slug", error_message="No slug")


def test_post_message_sends_channel_and_blocks(monkeypatch):
    post = MagicMock()
    post.return_value.json.return_value = {"ok": True}
    monkeypatch.setattr(slack_service.requests, "post", post)

    assert _client().post_message("hello", blocks=[{"type": "divider"}]) is True

    url = post.call_args.args[0]
    assert url == "https://slack.com/api/chat.postMessage"
    assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer xoxb-test"
    assert '"channel": "C123"' in post.call_args.kwargs["data"]


def test_api_and_http_errors_return_false(monkeypatch):
    post = MagicMock()
    post.return_value.json.return_value = {"ok": False, "error": "channel_not_found"}
    monkeypatch.setattr(slack_service.requests, "post", post)
    assert _client().post_message("hello") is False

    monkeypatch.setattr(slack_service.requests, "post", MagicMock(side_effect=requests.Timeout("slow")))
    assert _client().post_message("hello") is False


def test_alerter_disabled_without_client():
    alerter = SlackAlerter(None)
    assert alerter.enabled() is False
    assert alerter.send_error_alert(_entry()) is False


def test_alerter_posts_error_blocks():
    client = MagicMock(spec=SlackClient)
    client.has_token.return_value = True
    client.default_channel = "C123"
    client.post_message.return_value = True

    assert SlackAlerter(client).send_error_alert(_entry()) is True

    text = client.post_message.call_args.args[0]
    assert "missing_slug" in text
    assert client.post_message.call_args.kwargs["blocks"][0]["type"] == "header"
