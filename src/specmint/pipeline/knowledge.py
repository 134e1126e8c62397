"""Knowledge extracted from documentation sources.

These objects only live for the duration of a pipeline run; they are
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from specmint.serialization import str_tuple

IMPORTANCE_LEVELS: tuple[str, ...] = ("critical", "high", "medium", "low")


def _level(value: Any) -> str:
    text = str(value).lower() if value is not None else "medium"
    return text if text in IMPORTANCE_LEVELS else "medium"


@dataclass(frozen=True)
class Concept:
    """A named idea the documentation explains."""

    name: str
    description: str = ""
    importance: str = "medium"
    related: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Concept:
        return cls(
            name=str(data.get("name", "")).strip(),
            description=str(data.get("description", "")),
            importance=_level(data.get("importance")),
            related=str_tuple(data.get("relatedConcepts") or data.get("related")),
        )


@dataclass(frozen=True)
class Gotcha:
    """A common mistake and how to avoid it."""

    title: str
    description: str = ""
    impact: str = "medium"
    solution: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Gotcha:
        return cls(
            title=str(data.get("title", "")).strip(),
            description=str(data.get("description", "")),
            impact=_level(data.get("impact")),
            solution=str(data.get("solution", "")),
        )


@dataclass(frozen=True)
class BestPractice:
    title: str
    description: str = ""
    category: str = "usage"
    reasoning: str = ""
    examples: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BestPractice:
        return cls(
            title=str(data.get("title", "")).strip(),
            description=str(data.get("description", "")),
            category=str(data.get("category", "usage")),
            reasoning=str(data.get("reasoning", "")),
            examples=str_tuple(data.get("examples")),
        )


@dataclass(frozen=True)
class Configuration:
    """A configuration file the framework expects."""

    file: str
    purpose: str = ""
    required_fields: dict[str, str] = field(default_factory=dict)
    examples: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Configuration:
        fields_raw = data.get("requiredFields") or data.get("required_fields")
        return cls(
            file=str(data.get("file", "")).strip(),
            purpose=str(data.get("purpose", "")),
            required_fields=(
                {str(k): str(v) for k, v in fields_raw.items()}
                if isinstance(fields_raw, dict)
                else {}
            ),
            examples=str_tuple(data.get("examples")),
        )


@dataclass(frozen=True)
class Source:
    """A source that was read successfully."""

    location: str
    type: str = "documentation"
    relevance: float = 1.0
    accessed_at: str = ""


@dataclass(frozen=True)
class SourceFailure:
    """A source that could not be fetched or analyzed."""

    location: str
    error: str


@dataclass(frozen=True)
class SourceKnowledge:
    """What a single source contributed."""

    concepts: tuple[Concept, ...] = ()
    gotchas: tuple[Gotcha, ...] = ()
    best_practices: tuple[BestPractice, ...] = ()
    configurations: tuple[Configuration, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SourceKnowledge:
        """Build from the JSON shape returned by the analysis prompt."""

        def _items(key: str) -> list[dict[str, Any]]:
            value = data.get(key)
            if not isinstance(value, list):
                return []
            return [v for v in value if isinstance(v, dict)]

        return cls(
            concepts=tuple(
                c for c in map(Concept.from_dict, _items("concepts")) if c.name
            ),
            gotchas=tuple(
                g for g in map(Gotcha.from_dict, _items("gotchas")) if g.title
            ),
            best_practices=tuple(
                p
                for p in map(
                    BestPractice.from_dict,
                    _items("bestPractices") or _items("best_practices"),
                )
                if p.title
            ),
            configurations=tuple(
                c
                for c in map(Configuration.from_dict, _items("configurations"))
                if c.file
            ),
        )


@dataclass(frozen=True)
class ExtractedKnowledge:
    """Merged knowledge across all sources.

    Collections are always present; when every source fails they are
    simply empty and `confidence` is 0.
    """

    domain: str
    framework: str
    concepts: tuple[Concept, ...] = ()
    gotchas: tuple[Gotcha, ...] = ()
    best_practices: tuple[BestPractice, ...] = ()
    configurations: tuple[Configuration, ...] = ()
    sources: tuple[Source, ...] = ()
    failures: tuple[SourceFailure, ...] = ()
    extracted_at: str = ""
    confidence: float = 0.0
