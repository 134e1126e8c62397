"""Shared fixtures for specmint tests."""

import json
from pathlib import Path
from typing import Any

import json5
import pytest

from specmint.pipeline.fetcher import FetchError


def make_template_doc(**overrides: Any) -> dict[str, Any]:
    """A minimal structurally valid template document."""
    doc: dict[str, Any] = {
        "schema_version": "0.0.1",
        "name": "@acme/shadcn-specialist",
        "displayName": "shadcn",
        "version": "1.0.0",
        "persona": {
            "purpose": "Expert shadcn-ui specialist",
            "values": ["Best practices"],
            "attributes": ["Follows official documentation"],
            "tech_stack": ["React", "Tailwind CSS"],
        },
        "capabilities": {
            "tags": ["components"],
            "descriptions": {"components": "Adds components with the CLI"},
            "considerations": ["Check components.json"],
        },
        "documentation": [
            {
                "type": "official",
                "url": "https://ui.shadcn.com/docs",
                "description": "shadcn-ui documentation",
            },
        ],
        "preferred_models": [
            {"model": "anthropic/claude-sonnet-4.5", "benchmarks": {"overall": 0.9}},
        ],
        "prompts": {
            "default": {"spawnerPrompt": "I'm a shadcn specialist."},
            "prompt_strategy": {
                "fallback": "default",
                "model_detection": "auto",
                "allow_override": True,
                "interpolation": {"style": "mustache", "escape_html": False},
            },
        },
    }
    doc.update(overrides)
    return doc


def write_template(path: Path, doc: dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json5.dumps(doc, indent=2, quote_keys=True))
    return path


ENRICHMENT_REPLY = json.dumps(
    {
        "summary": "How to add components.",
        "key_concepts": ["components.json"],
        "relevant_for_tasks": ["component_add"],
        "relevant_tech_stack": ["React"],
        "relevant_tags": ["components"],
        "code_patterns": ["npx shadcn@latest add button"],
    }
)


class FakeClient:
    """Reasoning client double; fails for prompts containing a marker."""

    model = "fake-model"

    def __init__(self, reply: str = ENRICHMENT_REPLY, fail_marker: str | None = None) -> None:
        self.reply = reply
        self.fail_marker = fail_marker
        self.prompts: list[str] = []

    def complete(self, prompt: str, max_tokens: int = 2000, system: str | None = None) -> str:
        self.prompts.append(prompt)
        if self.fail_marker and self.fail_marker in prompt:
            raise RuntimeError("service unavailable")
        return self.reply


class FakeFetcher:
    """Document fetcher double backed by a dict."""

    def __init__(self, pages: dict[str, str] | None = None) -> None:
        self.pages = pages or {}
        self.fetched: list[str] = []

    def fetch(self, location: str) -> str:
        self.fetched.append(location)
        if location not in self.pages:
            raise FetchError(location, "not found")
        return self.pages[location]


@pytest.fixture
def template_doc() -> dict[str, Any]:
    return make_template_doc()


@pytest.fixture
def template_file(tmp_path: Path, template_doc: dict[str, Any]) -> Path:
    return write_template(tmp_path / "shadcn-template.json5", template_doc)
