"""Configuration schema for specmint."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Literal, cast

OutputFormat = Literal["json5", "yaml"]
ExtractionDepth = Literal["basic", "standard", "comprehensive"]

OUTPUT_FORMATS: tuple[str, ...] = ("json5", "yaml")
EXTRACTION_DEPTHS: tuple[str, ...] = ("basic", "standard", "comprehensive")


def _int_or_none(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _float_or_none(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class SpecmintConfig:
    """Specmint configuration schema.

    Fields correspond to options of `specmint create` and `specmint enrich`.
    None values indicate "not set" and will use defaults or be inherited.
    """

    # Enrichment settings
    enrichment_model: str | None = None
    concurrency: int | None = None
    timeout: float | None = None  # seconds per reasoning-service call

    # Extraction settings
    extraction_fanout: int | None = None
    extraction_depth: ExtractionDepth | None = None

    # Output settings
    output_format: OutputFormat | None = None
    include_docs: bool | None = None

    # Changelog author recorded on version bumps
    author: str | None = None

    def merge(self, other: SpecmintConfig) -> SpecmintConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new SpecmintConfig instance.
        """
        merged = {
            f.name: (
                getattr(other, f.name)
                if getattr(other, f.name) is not None
                else getattr(self, f.name)
            )
            for f in fields(self)
        }
        return SpecmintConfig(**merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpecmintConfig:
        """Create a SpecmintConfig from a dictionary.

        Unknown keys are ignored. Values of the wrong type are dropped.
        """
        model = data.get("enrichment_model")
        depth_raw = data.get("extraction_depth")
        depth: ExtractionDepth | None = None
        if depth_raw in EXTRACTION_DEPTHS:
            depth = cast(ExtractionDepth, depth_raw)
        format_raw = data.get("output_format")
        output_format: OutputFormat | None = None
        if format_raw in OUTPUT_FORMATS:
            output_format = cast(OutputFormat, format_raw)
        include_docs_raw = data.get("include_docs")
        author = data.get("author")

        return cls(
            enrichment_model=str(model) if model is not None else None,
            concurrency=_int_or_none(data.get("concurrency")),
            timeout=_float_or_none(data.get("timeout")),
            extraction_fanout=_int_or_none(data.get("extraction_fanout")),
            extraction_depth=depth,
            output_format=output_format,
            include_docs=(
                bool(include_docs_raw) if include_docs_raw is not None else None
            ),
            author=str(author) if author is not None else None,
        )


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = SpecmintConfig(
    enrichment_model="claude-haiku-4-5-20251001",
    concurrency=3,
    timeout=30.0,
    extraction_fanout=4,
    extraction_depth="standard",
    output_format="json5",
    include_docs=True,
)
