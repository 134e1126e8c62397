"""Specialist creation pipeline."""

from specmint.pipeline.engine import Engine, SpecialistConfig, SpecialistPackage
from specmint.pipeline.enricher import (
    Enricher,
    EnrichmentFailure,
    EnrichmentOptions,
    EnrichmentResult,
    enrich,
)
from specmint.pipeline.extractor import ExtractionConfig, Extractor, extract
from specmint.pipeline.generator import GeneratedPackage, Generator, GeneratorConfig, generate
from specmint.pipeline.structurer import TemplateIdentity, structure
from specmint.pipeline.tiers import TierPrompt, TierSet, build_tier_set
from specmint.pipeline.validator import ValidationIssue, ValidationResult, validate

__all__ = [
    "Engine",
    "Enricher",
    "EnrichmentFailure",
    "EnrichmentOptions",
    "EnrichmentResult",
    "ExtractionConfig",
    "Extractor",
    "GeneratedPackage",
    "Generator",
    "GeneratorConfig",
    "SpecialistConfig",
    "SpecialistPackage",
    "TemplateIdentity",
    "TierPrompt",
    "TierSet",
    "ValidationIssue",
    "ValidationResult",
    "build_tier_set",
    "enrich",
    "extract",
    "generate",
    "structure",
]
