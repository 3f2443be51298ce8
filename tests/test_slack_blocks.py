from evaluation_models import ErrorLogEntry
from slack_blocks import build_error_alert_blocks, build_error_alert_text


def _entry(**overrides):
    values = dict(
        endpoint="/cron/process-evaluations",
        error_type="text_generation_error",
        error_message="Rate limited",
        interview_id="i-1",
        interview_slug="abc123",
    )
    values.update(overrides)
    return ErrorLogEntry(**values)


def test_error_alert_header_and_fields():
    blocks = build_error_alert_blocks(_entry())

    assert blocks[0]["type"] == "header"
    assert "evaluation error" in blocks[0]["text"]["text"]
    field_text = " ".join(f["text"] for f in blocks[1]["fields"])
    assert "/cron/process-evaluations" in field_text
    assert "text_generation_error" in field_text
    assert "abc123" in field_text
    assert "Rate limited" in blocks[2]["text"]["text"]


def test_error_alert_optional_sections():
    minimal = build_error_alert_blocks(_entry(interview_id=None, interview_slug=None))
    assert len(minimal[1]["fields"]) == 2
    assert all(block["type"] != "divider" for block in minimal)

    full = build_error_alert_blocks(_entry(error_stack="Traceback..."), admin_url="https://ops.test/failed")
    assert any("Traceback" in block.get("text", {}).get("text", "") for block in full)
    assert full[-1]["type"] == "context"
    assert "https://ops.test/failed" in full[-1]["elements"][0]["text"]


def test_long_messages_are_truncated():
    blocks = build_error_alert_blocks(_entry(error_message="x" * 2000))
    assert len(blocks[2]["text"]["text"]) < 600


def test_error_alert_text():
    assert build_error_alert_text(_entry()) == (
        "Evaluation error at /cron/process-evaluations (text_generation_error) for interview abc123"
    )
    assert build_error_alert_text(_entry(interview_id=None, interview_slug=None)).endswith("interview n/a")
