"""Documentation enrichment and tier prompt generation.

Each documentation entry without enrichment gets one reasoning-service
call; calls run on a bounded thread pool and every outcome is collected.
A failed call is recorded and leaves its entry untouched.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from specmint.errors import ConfigurationError
from specmint.llm.client import (
    API_KEY_ENV_VAR,
    ReasoningClient,
    parse_llm_json_response,
    require_client,
)
from specmint.pipeline.fetcher import DocumentFetcher, is_url
from specmint.pipeline.tiers import TIER_DESCRIPTIONS, TierSet, build_tier_set
from specmint.serialization import isoformat, str_tuple, utc_now
from specmint.templates.base import (
    RESERVED_PROMPT_KEYS,
    DocumentationEnrichment,
    DocumentationEntry,
    SpecialistTemplate,
)

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 3
MAX_DOC_CHARS = 10000

ENRICHMENT_PROMPT = """Analyze this documentation and extract metadata in JSON format.

Documentation ({locator}):
{text}

Specialist: {purpose}
Known task types: {task_types}

Extract:
{{
  "summary": "1-2 sentence summary",
  "key_concepts": ["concept 1", "concept 2"],
  "relevant_for_tasks": ["task types this documentation helps with"],
  "relevant_tech_stack": ["React", "TypeScript"],
  "relevant_tags": ["tag1", "tag2"],
  "code_patterns": ["command or code pattern"]
}}

Return ONLY valid JSON."""

TIER_PROMPT = """You write benchmark task prompts for a coding agent.

Specialist: {purpose}
Scenario: {scenario}
Tier {level}: {description}

Rewrite the draft below so it matches the tier. Keep the original task
intact and keep every fact from the draft. Return only the prompt text.

Draft:
{draft}"""

REFINED_LEVELS: tuple[str, ...] = ("L1", "L2", "L3", "Lx")


@dataclass(frozen=True)
class EnrichmentOptions:
    """What the enricher should do."""

    enrich_documentation: bool = True
    generate_tiers: bool = False
    base_task: str | None = None
    scenario: str | None = None
    force: bool = False  # re-enrich entries that already carry enrichment


@dataclass(frozen=True)
class EnrichmentFailure:
    """A reasoning-service call that failed.

    `index` is the documentation entry position, or None for tier
    refinement failures, where `locator` names the tier level.
    """

    index: int | None
    locator: str
    error: str


@dataclass(frozen=True)
class EnrichmentResult:
    template: SpecialistTemplate
    tiers: TierSet | None = None
    errors: tuple[EnrichmentFailure, ...] = ()
    enriched: int = 0
    skipped: int = 0
    enriched_at: str = ""


def check_scenario(base_task: str | None, scenario: str | None) -> None:
    """Raise ValueError unless tiers can be generated for `scenario`.

    Tiers are stored under `prompts.<scenario>`, so the scenario cannot
    be one of the reserved prompts keys.
    """
    if not (base_task and scenario):
        raise ValueError("Tier generation needs both a base task and a scenario")
    if scenario in RESERVED_PROMPT_KEYS:
        raise ValueError(
            f"Scenario '{scenario}' is a reserved prompts key; "
            f"choose a name other than {', '.join(RESERVED_PROMPT_KEYS)}"
        )


def _to_enrichment(data: dict[str, Any], model: str) -> DocumentationEnrichment:
    return DocumentationEnrichment(
        summary=str(data.get("summary") or ""),
        key_concepts=str_tuple(data.get("key_concepts")),
        relevant_for_tasks=str_tuple(data.get("relevant_for_tasks")),
        relevant_tech_stack=str_tuple(data.get("relevant_tech_stack")),
        relevant_tags=str_tuple(data.get("relevant_tags")),
        code_patterns=str_tuple(data.get("code_patterns")),
        last_enriched=isoformat(utc_now()),
        enrichment_model=model,
    )


def task_types(template: SpecialistTemplate) -> tuple[str, ...]:
    """Task types a template defines prompts for."""
    return template.prompts.task_types


class Enricher:
    """Enriches templates through a reasoning-service client."""

    def __init__(
        self,
        client: ReasoningClient | None,
        fetcher: DocumentFetcher | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        refine_tiers: bool = True,
    ) -> None:
        self.client = client
        self.fetcher = fetcher or DocumentFetcher()
        self.concurrency = max(1, concurrency)
        self.refine_tiers = refine_tiers

    def enrich(
        self, template: SpecialistTemplate, options: EnrichmentOptions
    ) -> EnrichmentResult:
        """Enrich `template` according to `options`.

        Raises ConfigurationError before any network call if documentation
        enrichment is requested without a client, and ValueError if tiers
        are requested without a base task and scenario, or with a scenario
        that collides with a reserved prompts key.
        """
        client = self.client
        base_task, scenario = options.base_task, options.scenario
        if options.enrich_documentation and client is None:
            raise ConfigurationError(
                API_KEY_ENV_VAR,
                f"Documentation enrichment requires {API_KEY_ENV_VAR} to be set",
            )
        if options.generate_tiers:
            check_scenario(base_task, scenario)

        enriched_at = isoformat(utc_now())
        errors: list[EnrichmentFailure] = []
        enriched = skipped = 0
        result_template = template

        if client is not None and options.enrich_documentation and template.documentation:
            documentation, doc_errors, enriched, skipped = self._enrich_documentation(
                client, template, options.force
            )
            errors.extend(doc_errors)
            result_template = template.with_documentation(documentation)

        tiers = None
        if options.generate_tiers and base_task and scenario:
            tiers, tier_errors = self._generate_tiers(result_template, base_task, scenario)
            errors.extend(tier_errors)

        logger.info(
            "Enrichment complete: %d enriched, %d skipped, %d failed",
            enriched,
            skipped,
            len(errors),
        )
        return EnrichmentResult(
            template=result_template,
            tiers=tiers,
            errors=tuple(errors),
            enriched=enriched,
            skipped=skipped,
            enriched_at=enriched_at,
        )

    def _enrich_documentation(
        self, client: ReasoningClient, template: SpecialistTemplate, force: bool
    ) -> tuple[tuple[DocumentationEntry, ...], list[EnrichmentFailure], int, int]:
        docs = list(template.documentation or ())
        pending = [i for i, doc in enumerate(docs) if force or not doc.is_enriched]
        skipped = len(docs) - len(pending)
        base_dir = template.source.parent if template.source else None
        logger.info(
            "Enriching %d of %d documentation entries (concurrency %d)",
            len(pending),
            len(docs),
            self.concurrency,
        )

        futures: dict[int, Future[DocumentationEntry]] = {}
        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            for i in pending:
                futures[i] = pool.submit(
                    self._enrich_entry, client, docs[i], template, base_dir
                )

        errors: list[EnrichmentFailure] = []
        enriched = 0
        for i, future in futures.items():
            try:
                docs[i] = future.result()
                enriched += 1
            except Exception as e:
                locator = docs[i].locator or f"documentation[{i}]"
                logger.warning("Failed to enrich %s: %s", locator, e, exc_info=True)
                errors.append(
                    EnrichmentFailure(index=i, locator=locator, error=str(e) or type(e).__name__)
                )
        return tuple(docs), errors, enriched, skipped

    def _enrich_entry(
        self,
        client: ReasoningClient,
        entry: DocumentationEntry,
        template: SpecialistTemplate,
        base_dir: Path | None,
    ) -> DocumentationEntry:
        locator = entry.locator
        if not locator:
            raise ValueError("Documentation entry has neither url nor path")
        if not is_url(locator) and base_dir is not None and not Path(locator).is_absolute():
            locator = str(base_dir / locator)

        text = self.fetcher.fetch(locator)
        body = text[:MAX_DOC_CHARS] + (" ... (truncated)" if len(text) > MAX_DOC_CHARS else "")
        prompt = ENRICHMENT_PROMPT.format(
            locator=entry.locator,
            text=body,
            purpose=template.persona.purpose or template.name,
            task_types=", ".join(task_types(template)) or "none",
        )
        data = parse_llm_json_response(client.complete(prompt, max_tokens=2000))
        logger.debug("Enriched %s", entry.locator)
        return entry.with_enrichment(_to_enrichment(data, client.model))

    def _generate_tiers(
        self, template: SpecialistTemplate, base_task: str, scenario: str
    ) -> tuple[TierSet, list[EnrichmentFailure]]:
        tiers = build_tier_set(template, base_task, scenario)
        client = self.client
        if client is None or not self.refine_tiers:
            return tiers, []

        futures: dict[str, Future[str]] = {}
        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            for level in REFINED_LEVELS:
                prompt = TIER_PROMPT.format(
                    purpose=template.persona.purpose or template.name,
                    scenario=scenario,
                    level=level,
                    description=TIER_DESCRIPTIONS[level],
                    draft=tiers.tiers[level].content,
                )
                futures[level] = pool.submit(client.complete, prompt, 1500)

        errors: list[EnrichmentFailure] = []
        for level, future in futures.items():
            try:
                content = future.result().strip()
            except Exception as e:
                logger.warning("Keeping draft %s prompt: %s", level, e, exc_info=True)
                errors.append(EnrichmentFailure(index=None, locator=level, error=str(e)))
                continue
            if content:
                tiers = tiers.with_tier(
                    tiers.tiers[level].with_content(content, refined_by=client.model)
                )
        return tiers, errors


def enrich(
    template: SpecialistTemplate,
    options: EnrichmentOptions,
    client: ReasoningClient | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> EnrichmentResult:
    """Enrich a template, building a client from the environment if needed."""
    if client is None and options.enrich_documentation:
        client = require_client()
    return Enricher(client, concurrency=concurrency).enrich(template, options)
