"""Resolution of base templates to their enriched derivatives.

An enriched derivative of `<dir>/<name>-template.json5` at version V lives
next to it as `<dir>/<name>-template.enriched-<V>.json5`. The file name is
the only link between the two, so resolution needs no index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from specmint.errors import AutoEnrichmentUnavailable, TemplateLoadError
from specmint.templates.base import SpecialistTemplate
from specmint.templates.io import load_template

logger = logging.getLogger(__name__)

ENRICHED_MARKER = ".enriched-"
TEMPLATE_SUFFIXES = (".json5", ".jsonc")
TEMPLATE_SUFFIX = "-template"
RECENT_BREAKING_LIMIT = 3


@dataclass(frozen=True)
class ResolvedTemplate:
    """Outcome of resolving a template path."""

    path: Path
    is_enriched: bool
    warnings: tuple[str, ...] = ()


def is_enriched_template_path(path: Path) -> bool:
    """Check whether `path` follows the enriched-derivative naming."""
    return ENRICHED_MARKER in path.name and path.suffix in TEMPLATE_SUFFIXES


def enriched_template_path(path: Path, version: str) -> Path:
    """Expected location of the enriched derivative of `path` at `version`."""
    stem = path.name
    for suffix in TEMPLATE_SUFFIXES:
        if stem.endswith(suffix):
            stem = stem[: -len(suffix)]
            break
    if stem.endswith(TEMPLATE_SUFFIX):
        stem = stem[: -len(TEMPLATE_SUFFIX)]
    return path.parent / f"{stem}{TEMPLATE_SUFFIX}{ENRICHED_MARKER}{version}.json5"


def template_warnings(template: SpecialistTemplate) -> list[str]:
    """Advisory warnings about a template's version state."""
    warnings: list[str] = []
    label = f"Template {template.name} v{template.version}"
    metadata = template.version_metadata

    if metadata is None:
        warnings.append(f"{label} has no version metadata")
        return warnings

    if metadata.deprecated:
        message = f"{label} is DEPRECATED"
        if metadata.deprecated_reason:
            message += f": {metadata.deprecated_reason}"
        if metadata.replacement:
            message += f"\n   Use {metadata.replacement} instead"
        warnings.append(message)

    recent = metadata.breaking_changes[:RECENT_BREAKING_LIMIT]
    if recent:
        lines = [f"   - v{bc.version}: {bc.description}" for bc in recent]
        warnings.append(f"Breaking changes in {label}:\n" + "\n".join(lines))

    return warnings


def resolve_template_path(
    base_path: Path,
    auto_enrich: bool = False,
    validate_version: bool = True,
) -> ResolvedTemplate:
    """Resolve `base_path` to the template that should be used.

    Prefers the enriched derivative for the base template's version when
    one exists on disk. Warnings describe the template at the returned
    path.

    Raises TemplateLoadError if the template cannot be read and
    AutoEnrichmentUnavailable if `auto_enrich` is set and no derivative
    exists.
    """
    path = base_path.resolve()

    if is_enriched_template_path(path):
        warnings: list[str] = []
        if validate_version:
            warnings = template_warnings(load_template(path))
        _log_warnings(warnings)
        return ResolvedTemplate(path=path, is_enriched=True, warnings=tuple(warnings))

    template = load_template(path)
    derivative = enriched_template_path(path, template.version)

    if derivative.exists():
        logger.debug("Using enriched template %s", derivative)
        warnings = []
        if validate_version:
            warnings = template_warnings(load_template(derivative))
        _log_warnings(warnings)
        return ResolvedTemplate(path=derivative, is_enriched=True, warnings=tuple(warnings))

    if auto_enrich:
        raise AutoEnrichmentUnavailable(path)

    warnings = template_warnings(template) if validate_version else []
    _log_warnings(warnings)
    return ResolvedTemplate(path=path, is_enriched=False, warnings=tuple(warnings))


def needs_enrichment(path: Path) -> bool:
    """Check whether a base template has no enriched derivative yet.

    Returns False for enriched paths and for templates that cannot be
    loaded.
    """
    resolved = path.resolve()
    if is_enriched_template_path(resolved):
        return False
    try:
        template = load_template(resolved)
    except TemplateLoadError:
        return False
    return not enriched_template_path(resolved, template.version).exists()


def _log_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        logger.warning("%s", warning)
