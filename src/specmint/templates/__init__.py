"""Specialist template model, storage and resolution."""

from specmint.templates.base import (
    DOCUMENTATION_TYPES,
    Capabilities,
    DocumentationEnrichment,
    DocumentationEntry,
    Persona,
    PreferredModel,
    Prompts,
    PromptStrategy,
    SpecialistTemplate,
)
from specmint.templates.io import load_document, load_template, save_template
from specmint.templates.loader import (
    DiscoveredTemplate,
    get_all_templates,
    get_global_templates_path,
    get_local_templates_path,
)
from specmint.templates.resolver import (
    ResolvedTemplate,
    enriched_template_path,
    is_enriched_template_path,
    needs_enrichment,
    resolve_template_path,
)

__all__ = [
    "DOCUMENTATION_TYPES",
    "Capabilities",
    "DiscoveredTemplate",
    "DocumentationEnrichment",
    "DocumentationEntry",
    "Persona",
    "PreferredModel",
    "PromptStrategy",
    "Prompts",
    "ResolvedTemplate",
    "SpecialistTemplate",
    "enriched_template_path",
    "get_all_templates",
    "get_global_templates_path",
    "get_local_templates_path",
    "is_enriched_template_path",
    "load_document",
    "load_template",
    "needs_enrichment",
    "resolve_template_path",
    "save_template",
]
