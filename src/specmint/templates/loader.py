"""Template discovery."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from specmint.errors import TemplateLoadError
from specmint.templates.base import SpecialistTemplate
from specmint.templates.io import load_template
from specmint.templates.resolver import (
    TEMPLATE_SUFFIXES,
    enriched_template_path,
    is_enriched_template_path,
)

logger = logging.getLogger(__name__)

# Constants
TEMPLATE_DIRNAME = "templates"
TEMPLATE_GLOBS: tuple[str, ...] = tuple(f"*-template{s}" for s in TEMPLATE_SUFFIXES)


@dataclass(frozen=True)
class DiscoveredTemplate:
    """A base template found on disk and whether it has been enriched."""

    template: SpecialistTemplate
    path: Path
    enriched_path: Path | None = None

    @property
    def is_enriched(self) -> bool:
        return self.enriched_path is not None


def get_global_templates_path() -> Path:
    """Get path to global user templates: ~/.specmint/templates/."""
    return Path.home() / ".specmint" / TEMPLATE_DIRNAME


def get_local_templates_path() -> Path:
    """Get path to project-specific templates: ./.specmint/templates/."""
    return Path.cwd() / ".specmint" / TEMPLATE_DIRNAME


def discover_template_files(base_path: Path) -> list[Path]:
    """Find base template files (not enriched derivatives) under `base_path`.

    Searches recursively so `specialists/<name>/<name>-template.json5`
    layouts are picked up.
    """
    if not base_path.exists():
        return []

    found: set[Path] = set()
    for pattern in TEMPLATE_GLOBS:
        for candidate in base_path.rglob(pattern):
            if candidate.is_file() and not is_enriched_template_path(candidate):
                found.add(candidate)
    return sorted(found)


def load_discovered_template(path: Path) -> DiscoveredTemplate | None:
    """Load a template file for listing.

    Returns None if the file is unreadable or malformed.
    """
    try:
        template = load_template(path)
    except TemplateLoadError as e:
        logger.warning("Skipping %s: %s", path, e.reason)
        return None

    derivative = enriched_template_path(path, template.version)
    return DiscoveredTemplate(
        template=template,
        path=path,
        enriched_path=derivative if derivative.exists() else None,
    )


def get_all_templates(extra_dirs: list[Path] | None = None) -> dict[str, DiscoveredTemplate]:
    """Discover and load templates from filesystem locations.

    Resolution order (later wins for same name):
    1. Explicit directories passed in `extra_dirs`
    2. Global (~/.specmint/templates/)
    3. Project (./.specmint/templates/)

    Returns dict mapping template name -> DiscoveredTemplate.
    """
    templates: dict[str, DiscoveredTemplate] = {}

    search_dirs = [*(extra_dirs or []), get_global_templates_path(), get_local_templates_path()]
    for directory in search_dirs:
        for path in discover_template_files(directory):
            discovered = load_discovered_template(path)
            if discovered:
                templates[discovered.template.name] = discovered

    return templates
