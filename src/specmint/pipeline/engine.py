"""Specialist creation workflow.

Extract -> Structure -> Enrich (optional) -> Validate -> Generate, in
strict sequence. Validation errors stop the workflow before anything is
written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from specmint.errors import ConfigurationError, TemplateValidationFailed
from specmint.pipeline.enricher import Enricher, EnrichmentOptions, EnrichmentResult
from specmint.pipeline.extractor import ExtractionConfig, Extractor
from specmint.pipeline.generator import GeneratedPackage, Generator, GeneratorConfig
from specmint.pipeline.knowledge import ExtractedKnowledge
from specmint.pipeline.structurer import DEFAULT_VERSION, TemplateIdentity, slugify, structure
from specmint.pipeline.validator import ValidationIssue, validate
from specmint.snapshots.benchmarks import BenchmarkRun
from specmint.versioning import create_initial_version_metadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpecialistConfig:
    """Everything needed to create one specialist package."""

    domain: str
    output_dir: Path
    framework: str | None = None
    sources: tuple[str, ...] = ()
    depth: str = "standard"
    fanout: int = 4
    name: str | None = None
    version: str = DEFAULT_VERSION
    format: str = "json5"
    include_docs: bool = True
    enrich: bool = False
    generate_tiers: bool = False
    base_task: str | None = None
    scenario: str | None = None
    include_benchmarks: bool = False
    benchmark_runs: tuple[BenchmarkRun, ...] = ()

    @property
    def template_name(self) -> str:
        return self.name or f"{slugify(self.domain)}-specialist"

    @property
    def enrichment_options(self) -> EnrichmentOptions | None:
        if not (self.enrich or self.generate_tiers):
            return None
        return EnrichmentOptions(
            enrich_documentation=self.enrich,
            generate_tiers=self.generate_tiers,
            base_task=self.base_task,
            scenario=self.scenario,
        )


@dataclass(frozen=True)
class SpecialistPackage:
    package: GeneratedPackage
    knowledge: ExtractedKnowledge
    enrichment: EnrichmentResult | None = None
    warnings: tuple[ValidationIssue, ...] = ()
    enrichment_error: str | None = None  # set when enrichment was skipped

    @property
    def path(self) -> Path:
        return self.package.path


class Engine:
    """Runs the creation workflow with the collaborators it is given."""

    def __init__(
        self,
        extractor: Extractor,
        enricher: Enricher,
        generator: Generator,
    ) -> None:
        self.extractor = extractor
        self.enricher = enricher
        self.generator = generator

    def create_specialist(self, config: SpecialistConfig) -> SpecialistPackage:
        """Create a specialist package from `config`.

        Raises TemplateValidationFailed, without writing anything, when the
        template that would be generated has structural errors.
        """
        knowledge = self.extractor.extract(
            ExtractionConfig(
                domain=config.domain,
                framework=config.framework,
                sources=config.sources,
                depth=config.depth,
                fanout=config.fanout,
            )
        )

        template = structure(
            knowledge, TemplateIdentity(name=config.template_name, version=config.version)
        )
        template = template.with_version(
            template.version, create_initial_version_metadata(template.version)
        )

        enrichment = None
        enrichment_error = None
        options = config.enrichment_options
        if options is not None:
            try:
                enrichment = self.enricher.enrich(template, options)
                template = enrichment.template
            except ConfigurationError as e:
                logger.warning("Skipping documentation enrichment: %s", e)
                enrichment_error = str(e)
                if options.generate_tiers:
                    enrichment = self.enricher.enrich(
                        template, replace(options, enrich_documentation=False)
                    )
                    template = enrichment.template

        result = validate(template)
        if result.has_errors:
            raise TemplateValidationFailed(result, name=template.name)
        for warning in result.warnings:
            logger.warning("%s", warning)

        package = self.generator.generate(
            template,
            enrichment.tiers if enrichment else None,
            GeneratorConfig(
                output_dir=config.output_dir,
                format=config.format,
                include_docs=config.include_docs,
                include_benchmarks=config.include_benchmarks,
                benchmark_runs=config.benchmark_runs,
            ),
        )
        logger.info("Created specialist %s v%s at %s", template.name, template.version, package.path)
        return SpecialistPackage(
            package=package,
            knowledge=knowledge,
            enrichment=enrichment,
            warnings=result.warnings,
            enrichment_error=enrichment_error,
        )
