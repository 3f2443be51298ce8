# text_generation.py
"""Thin wrapper over the OpenAI chat API with strict JSON handling."""

import json
import logging
import os
from typing import Any, Dict, Optional

from openai import OpenAI, OpenAIError

from evaluation_errors import MalformedResponseError, TextGenerationError

logger = logging.getLogger(__name__)


class TextGenerationClient:
    def __init__(self, client: Optional[OpenAI] = None, *, api_key: Optional[str] = None) -> None:
        self._client = client
        self._api_key = api_key

    @property
    def client(self) -> OpenAI:
        # OpenAI() refuses to construct without a key, so build on first use.
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key or os.getenv("OPENAI_API_KEY"))
        return self._client

    def _complete(self, *, model: str, system: str, user: str, temperature: float, json_mode: bool) -> str:
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            logger.error("text_generation_call_failed", extra={"model": model, "error": str(exc)})
            raise TextGenerationError(f"Text generation failed: {exc}") from exc

        if not response.choices:
            raise TextGenerationError("Text generation returned no choices")
        return (response.choices[0].message.content or "").strip()

    def generate_json(self, *, model: str, system: str, user: str, temperature: float = 0.1) -> Dict[str, Any]:
        """
        Request a JSON object and parse it.

        Raises:
            TextGenerationError: the call failed
            MalformedResponseError: the reply is not a JSON object
        """
        raw = self._complete(model=model, system=system, user=user, temperature=temperature, json_mode=True)
        if not raw:
            raise MalformedResponseError("No response from text generation service", raw_content=raw)

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("text_generation_invalid_json", extra={"model": model, "raw": raw[:200]})
            raise MalformedResponseError(f"Invalid JSON from text generation: {exc}", raw_content=raw) from exc

        if not isinstance(data, dict):
            raise MalformedResponseError("Expected a JSON object from text generation", raw_content=raw)
        return data

    def generate_text(self, *, model: str, system: str, user: str, temperature: float = 0.3) -> str:
        return self._complete(model=model, system=system, user=user, temperature=temperature, json_mode=False)
