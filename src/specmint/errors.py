"""Exception types raised across the specialist pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from specmint.pipeline.validator import ValidationResult


class SpecmintError(Exception):
    """Base class for all specmint failures that halt an operation."""


class TemplateLoadError(SpecmintError):
    """Raised when a template file cannot be read or parsed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot load template {self.path}: {reason}")


class InvalidVersionError(SpecmintError):
    """Raised when a version string is not valid semver."""

    def __init__(self, version: object, field: str = "version") -> None:
        self.version = version
        self.field = field
        super().__init__(
            f"Invalid version in '{field}': {version!r} "
            "(expected MAJOR.MINOR.PATCH, e.g. 1.0.0)"
        )


class ConfigurationError(SpecmintError):
    """Raised when a required external credential or setting is missing."""

    def __init__(self, setting: str, message: str) -> None:
        self.setting = setting
        super().__init__(message)


class TemplateValidationFailed(SpecmintError):
    """Raised when a template has structural validation errors."""

    def __init__(self, result: ValidationResult, name: str | None = None) -> None:
        self.result = result
        self.name = name
        lines = [f"  {issue.path}: {issue.message}" for issue in result.errors]
        label = f"Template '{name}'" if name else "Template"
        super().__init__(
            f"{label} failed validation with {len(result.errors)} error(s):\n"
            + "\n".join(lines)
        )


class AutoEnrichmentUnavailable(SpecmintError):
    """Raised when auto-enrichment is requested during template resolution."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(
            f"No enriched template found for {self.path} and auto-enrichment "
            "is not implemented yet; run 'specmint enrich' first"
        )


class BenchmarkLoadError(SpecmintError):
    """Raised when a benchmark results file cannot be read or parsed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot load benchmark runs from {self.path}: {reason}")
