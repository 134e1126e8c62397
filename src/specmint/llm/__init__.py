"""Reasoning-service (LLM) client access."""

from specmint.llm.client import (
    API_KEY_ENV_VAR,
    DEFAULT_MODEL,
    AnthropicClient,
    ReasoningClient,
    get_anthropic_client,
    parse_llm_json_response,
    require_client,
)

__all__ = [
    "API_KEY_ENV_VAR",
    "DEFAULT_MODEL",
    "AnthropicClient",
    "ReasoningClient",
    "get_anthropic_client",
    "parse_llm_json_response",
    "require_client",
]
