"""Anthropic client used for extraction and enrichment calls."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Protocol

import anthropic

from specmint.errors import ConfigurationError

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"
DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_TIMEOUT = 30.0


class ReasoningClient(Protocol):
    """Anything that can turn a prompt into a text completion."""

    model: str

    def complete(
        self, prompt: str, max_tokens: int = 2000, system: str | None = None
    ) -> str: ...


class AnthropicClient:
    """Thin wrapper over the Anthropic messages API."""

    def __init__(self, client: anthropic.Anthropic, model: str = DEFAULT_MODEL) -> None:
        self._client = client
        self.model = model

    def complete(
        self, prompt: str, max_tokens: int = 2000, system: str | None = None
    ) -> str:
        """Send a single user message and return the text of the reply."""
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": 0.1,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        response = self._client.messages.create(**kwargs)
        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        if not text:
            raise ValueError(f"Empty response from {self.model}")
        logger.debug(
            "%s: %d input / %d output tokens",
            self.model,
            response.usage.input_tokens,
            response.usage.output_tokens,
        )
        return text


def get_anthropic_client(
    model: str = DEFAULT_MODEL, timeout: float = DEFAULT_TIMEOUT
) -> AnthropicClient | None:
    """Get an Anthropic client if an API key is available.

    Returns None if ANTHROPIC_API_KEY is not set.
    """
    api_key = os.environ.get(API_KEY_ENV_VAR)
    if not api_key:
        return None
    return AnthropicClient(
        anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=2),
        model=model,
    )


def require_client(
    model: str = DEFAULT_MODEL, timeout: float = DEFAULT_TIMEOUT
) -> AnthropicClient:
    """Like get_anthropic_client, but raise ConfigurationError without a key."""
    client = get_anthropic_client(model=model, timeout=timeout)
    if client is None:
        raise ConfigurationError(
            API_KEY_ENV_VAR,
            f"{API_KEY_ENV_VAR} is not set; it is required for enrichment",
        )
    return client


def parse_llm_json_response(raw_text: str) -> dict[str, Any]:
    """Parse a JSON object from an LLM reply, handling markdown code fences.

    Raises ValueError if the text is not a JSON object.
    """
    content = raw_text.strip()

    # Strip leading markdown fence (```json or ```)
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]

    # Strip trailing fence
    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]

    data = json.loads(content.strip())
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object in the model response")
    return data
