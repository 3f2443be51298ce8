from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from openai import APIConnectionError

from evaluation_errors import MalformedResponseError, TextGenerationError
from text_generation import TextGenerationClient


def _reply(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(content=None, side_effect=None):
    openai_client = MagicMock()
    create = openai_client.chat.completions.create
    if side_effect is not None:
        create.side_effect = side_effect
    else:
        create.return_value = _reply(content)
    return TextGenerationClient(openai_client), create


def test_generate_json_requests_json_mode():
    client, create = _client('{"score": 3}')

    assert client.generate_json(model="gpt-4o-mini", system="sys", user="usr") == {"score": 3}

    kwargs = create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["temperature"] == 0.1
    assert kwargs["messages"][0] == {"role": "system", "content": "sys"}


@pytest.mark.parametrize("content", ["", "not json", "[1, 2]"])
def test_generate_json_rejects_malformed_replies(content):
    client, _ = _client(content)
    with pytest.raises(MalformedResponseError):
        client.generate_json(model="m", system="s", user="u")


def test_service_failure_becomes_text_generation_error():
    error = APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    client, _ = _client(side_effect=error)

    with pytest.raises(TextGenerationError) as excinfo:
        client.generate_text(model="m", system="s", user="u")
    assert not isinstance(excinfo.value, MalformedResponseError)


def test_generate_text_strips_output_without_json_mode():
    client, create = _client("  A short summary.  ")
    assert client.generate_text(model="m", system="s", user="u") == "A short summary."
    assert "response_format" not in create.call_args.kwargs
    assert create.call_args.kwargs["temperature"] == 0.3
