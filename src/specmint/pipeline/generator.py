"""Serialize a finished template into an on-disk specialist package.

Package layout::

    <output_dir>/
        <short-name>-template.json5      (or .yaml)
        README.md                        (include_docs)
        prompts/<scenario>/L0-minimal.md (include_docs, when tiers exist)
        snapshots/<short-name>/<version>/snapshot-NNN.json5
                                         (include_benchmarks)

Every file is written atomically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from specmint.pipeline.tiers import TIER_DESCRIPTIONS, TIER_FILE_NAMES, TierSet
from specmint.snapshots.benchmarks import BenchmarkRun
from specmint.snapshots.mint import MintResult, mint_snapshot
from specmint.templates.base import SpecialistTemplate
from specmint.templates.io import save_template, write_text_atomic

logger = logging.getLogger(__name__)

FORMAT_EXTENSIONS = {"json5": ".json5", "yaml": ".yaml"}


@dataclass(frozen=True)
class GeneratorConfig:
    output_dir: Path
    format: str = "json5"  # "json5" | "yaml"
    include_docs: bool = True
    include_benchmarks: bool = False
    benchmark_runs: tuple[BenchmarkRun, ...] = ()


@dataclass(frozen=True)
class GeneratedPackage:
    path: Path  # the template file
    template: SpecialistTemplate
    files: tuple[Path, ...] = ()
    docs: tuple[Path, ...] = ()
    snapshot: MintResult | None = None


def template_filename(template: SpecialistTemplate, fmt: str = "json5") -> str:
    return f"{template.short_name}-template{FORMAT_EXTENSIONS.get(fmt, '.json5')}"


def embed_tiers(template: SpecialistTemplate, tiers: TierSet) -> SpecialistTemplate:
    """Add the tier prompts as a task-keyed entry named after the scenario."""
    return template.with_prompts(
        template.prompts.with_task(tiers.scenario, tiers.to_prompt_entry())
    )


def render_readme(template: SpecialistTemplate, tiers: TierSet | None) -> str:
    lines = [
        f"# {template.display_name or template.short_name}",
        "",
        f"`{template.name}` v{template.version}",
        "",
    ]
    if template.persona.purpose:
        lines += [template.persona.purpose, ""]
    if template.persona.tech_stack:
        lines += ["## Tech stack", ""]
        lines += [f"- {tech}" for tech in template.persona.tech_stack]
        lines.append("")
    if template.capabilities.tags:
        lines += ["## Capabilities", ""]
        for tag in template.capabilities.tags:
            description = template.capabilities.descriptions.get(tag)
            lines.append(f"- **{tag}**: {description}" if description else f"- **{tag}**")
        lines.append("")
    if template.documentation:
        lines += ["## Documentation", ""]
        for doc in template.documentation:
            marker = " (enriched)" if doc.is_enriched else ""
            lines.append(f"- {doc.locator or doc.description}{marker}")
        lines.append("")
    if tiers is not None:
        lines += [f"## Tier prompts: {tiers.scenario}", ""]
        for level in tiers.tiers:
            name = TIER_FILE_NAMES.get(level, level)
            lines.append(
                f"- [{level}](prompts/{tiers.scenario}/{name}.md): "
                f"{TIER_DESCRIPTIONS.get(level, '')}"
            )
        lines.append("")
    return "\n".join(lines)


class Generator:
    """Writes specialist packages to disk."""

    def generate(
        self,
        template: SpecialistTemplate,
        tiers: TierSet | None,
        output: GeneratorConfig,
    ) -> GeneratedPackage:
        output_dir = output.output_dir
        if tiers is not None:
            template = embed_tiers(template, tiers)

        template_path = output_dir / template_filename(template, output.format)
        save_template(template, template_path, output.format)
        files: list[Path] = [template_path]
        docs: list[Path] = []
        logger.info("Wrote %s", template_path)

        if output.include_docs:
            if tiers is not None:
                prompt_dir = output_dir / "prompts" / tiers.scenario
                for level, tier in tiers.tiers.items():
                    path = prompt_dir / f"{TIER_FILE_NAMES.get(level, level)}.md"
                    write_text_atomic(path, tier.content.rstrip("\n") + "\n")
                    docs.append(path)
            readme = output_dir / "README.md"
            write_text_atomic(readme, render_readme(template, tiers))
            docs.append(readme)
            files.extend(docs)

        snapshot = None
        if output.include_benchmarks:
            snapshot = mint_snapshot(
                template_path,
                output_dir / "snapshots",
                runs=list(output.benchmark_runs),
            )
            files += [snapshot.output_path, snapshot.metadata.metadata_path]

        logger.debug("Generated %d file(s) in %s", len(files), output_dir)
        return GeneratedPackage(
            path=template_path,
            template=template.with_source(template_path),
            files=tuple(files),
            docs=tuple(docs),
            snapshot=snapshot,
        )


def generate(
    template: SpecialistTemplate, tiers: TierSet | None, output: GeneratorConfig
) -> GeneratedPackage:
    return Generator().generate(template, tiers, output)
