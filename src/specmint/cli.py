"""Command-line interface for specmint."""

import logging
from pathlib import Path
from typing import NoReturn

import click
from rich.markup import escape

from specmint import __version__
from specmint.config.init import write_default_config
from specmint.config.loader import (
    get_home_config_path,
    get_local_config_path,
    home_config_exists,
    load_config,
    local_config_exists,
)
from specmint.config.preflight import run_all_checks
from specmint.config.schema import EXTRACTION_DEPTHS, OUTPUT_FORMATS, SpecmintConfig
from specmint.console import console
from specmint.errors import SpecmintError, TemplateValidationFailed
from specmint.llm.client import (
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT,
    get_anthropic_client,
    require_client,
)
from specmint.pipeline.engine import Engine, SpecialistConfig
from specmint.pipeline.enricher import Enricher, EnrichmentOptions
from specmint.pipeline.extractor import Extractor, LLMKnowledgeAnalyzer
from specmint.pipeline.fetcher import DocumentFetcher
from specmint.pipeline.generator import Generator
from specmint.pipeline.validator import ValidationIssue, ValidationResult, validate
from specmint.snapshots import load_benchmark_runs, mint_snapshot
from specmint.templates.base import RESERVED_PROMPT_KEYS
from specmint.templates.io import load_document, load_template, save_template
from specmint.templates.loader import get_all_templates
from specmint.templates.resolver import enriched_template_path, resolve_template_path
from specmint.versioning import (
    CHANGE_CATEGORIES,
    ChangeEntry,
    apply_version_bump,
    infer_category,
)

logger = logging.getLogger(__name__)

DEFAULT_CHANGELOG_LIMIT = 10


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"specmint [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error: {message}[/red]")
    raise SystemExit(1)


def _print_issues(result: ValidationResult, show_info: bool = False) -> None:
    """Print validation issues grouped by severity."""

    def _issue(issue: ValidationIssue, style: str, mark: str) -> None:
        location = issue.path or "<root>"
        console.print(f"  [{style}]{mark}[/{style}] [cyan]{location}[/cyan]: {issue.message}")
        if issue.suggestion:
            console.print(f"      [dim]{issue.suggestion}[/dim]")

    if result.errors:
        console.print(f"[bold red]Errors ({len(result.errors)}):[/bold red]")
        for issue in result.errors:
            _issue(issue, "red", "✗")
    if result.warnings:
        console.print(f"[bold yellow]Warnings ({len(result.warnings)}):[/bold yellow]")
        for issue in result.warnings:
            _issue(issue, "yellow", "!")
    if show_info and result.info:
        console.print(f"[bold]Info ({len(result.info)}):[/bold]")
        for issue in result.info:
            _issue(issue, "dim", "-")


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Specmint - create, enrich, version and snapshot specialist templates."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    if ctx.invoked_subcommand is None:
        console.print("[bold]specmint[/bold] - specialist template pipeline")
        console.print("\nRun [cyan]specmint --help[/cyan] for available commands.")


@main.command()
@click.option("--domain", "-d", required=True, help="Knowledge domain, e.g. 'shadcn-ui'.")
@click.option("--framework", "-f", help="Framework the domain is used with (default: domain).")
@click.option(
    "--source",
    "-s",
    "sources",
    multiple=True,
    help="Documentation URL or file to extract from (repeatable).",
)
@click.option(
    "--depth",
    type=click.Choice(list(EXTRACTION_DEPTHS)),
    default="standard",
    help="Extraction depth (default: standard).",
)
@click.option("--name", "-n", help="Template name (default: <domain>-specialist).")
@click.option("--version", "version_", default="1.0.0", help="Initial version (default: 1.0.0).")
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Output directory (default: current directory).",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(list(OUTPUT_FORMATS)),
    default="json5",
    help="Template file format (default: json5).",
)
@click.option(
    "--enrich/--no-enrich",
    default=False,
    help="Enrich documentation entries via the reasoning service (default: no).",
)
@click.option("--tiers", is_flag=True, help="Generate L0-Lx tier prompts.")
@click.option("--base-task", help="Base task for tier prompts.")
@click.option("--scenario", help="Scenario identifier for tier prompts.")
@click.option(
    "--include-docs/--no-docs",
    default=True,
    help="Write README and tier prompt files (default: yes).",
)
@click.option(
    "--runs",
    "runs_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Benchmark runs file; mints a snapshot alongside the template.",
)
@click.pass_context
def create(
    ctx: click.Context,
    domain: str,
    framework: str | None,
    sources: tuple[str, ...],
    depth: str,
    name: str | None,
    version_: str,
    output: Path,
    fmt: str,
    enrich: bool,
    tiers: bool,
    base_task: str | None,
    scenario: str | None,
    include_docs: bool,
    runs_file: Path | None,
) -> None:
    """Create a specialist template package from documentation sources."""
    config = load_config()

    def _from_cli(param_name: str) -> bool:
        """Check if a parameter was explicitly set on the command line."""
        source = ctx.get_parameter_source(param_name)
        return source == click.core.ParameterSource.COMMANDLINE

    if not _from_cli("depth") and config.extraction_depth:
        depth = config.extraction_depth
    if not _from_cli("fmt") and config.output_format:
        fmt = config.output_format
    if not _from_cli("include_docs") and config.include_docs is not None:
        include_docs = config.include_docs

    if tiers and not (base_task and scenario):
        _fail("--tiers requires --base-task and --scenario")
    if tiers and scenario in RESERVED_PROMPT_KEYS:
        _fail(
            f"--scenario '{scenario}' is a reserved prompts key; "
            f"choose a name other than {', '.join(RESERVED_PROMPT_KEYS)}"
        )

    client = None
    if enrich or tiers:
        client = get_anthropic_client(
            model=config.enrichment_model or DEFAULT_MODEL,
            timeout=config.timeout or DEFAULT_TIMEOUT,
        )
        if client is None and enrich:
            console.print(
                "[yellow]ANTHROPIC_API_KEY is not set; "
                "documentation will not be enriched.[/yellow]"
            )

    try:
        runs = tuple(load_benchmark_runs(runs_file)) if runs_file else ()
    except SpecmintError as e:
        _fail(str(e))

    fetcher = DocumentFetcher(timeout=config.timeout or DEFAULT_TIMEOUT)
    engine = Engine(
        extractor=Extractor(
            fetcher=fetcher,
            analyzer=LLMKnowledgeAnalyzer(client) if client is not None else None,
        ),
        enricher=Enricher(client, fetcher=fetcher, concurrency=config.concurrency or 1),
        generator=Generator(),
    )
    specialist_config = SpecialistConfig(
        domain=domain,
        framework=framework,
        sources=sources,
        depth=depth,
        fanout=config.extraction_fanout or 1,
        name=name,
        version=version_,
        output_dir=output,
        format=fmt,
        include_docs=include_docs,
        enrich=enrich,
        generate_tiers=tiers,
        base_task=base_task,
        scenario=scenario,
        include_benchmarks=runs_file is not None,
        benchmark_runs=runs,
    )

    console.print(f"[bold]Creating specialist for [cyan]{domain}[/cyan]...[/bold]")
    try:
        package = engine.create_specialist(specialist_config)
    except TemplateValidationFailed as e:
        console.print("[red]Generated template failed validation.[/red]")
        _print_issues(e.result)
        raise SystemExit(1) from None
    except SpecmintError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    knowledge = package.knowledge
    console.print(
        f"  Sources: {len(knowledge.sources)} ok, {len(knowledge.failures)} failed"
    )
    for failure in knowledge.failures:
        console.print(f"    [yellow]![/yellow] {failure.location}: {failure.error}")
    if package.enrichment is not None:
        console.print(
            f"  Enriched: {package.enrichment.enriched}, "
            f"skipped: {package.enrichment.skipped}, "
            f"errors: {len(package.enrichment.errors)}"
        )
    if package.enrichment_error:
        console.print(f"  [yellow]Enrichment skipped: {package.enrichment_error}[/yellow]")
    if package.warnings:
        console.print(f"  [yellow]{len(package.warnings)} validation warning(s)[/yellow]")

    console.print(f"\n[green]✓ Created {package.path}[/green]")
    for path in package.package.files[1:]:
        console.print(f"  [dim]{path}[/dim]")


@main.command("validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--info", "show_info", is_flag=True, help="Also show informational notes.")
def validate_command(path: Path, show_info: bool) -> None:
    """Validate a template file against the template schema."""
    try:
        document = load_document(path)
    except SpecmintError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    result = validate(document)
    _print_issues(result, show_info=show_info)

    if result.has_errors:
        console.print(f"\n[red]✗ {path} is invalid[/red]")
        raise SystemExit(1)
    console.print(f"\n[green]✓ {path} is valid[/green]")


@main.command("enrich")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Re-enrich entries that are already enriched.")
@click.option("--model", "-m", help="Model to use (overrides config).")
@click.option("--concurrency", "-c", type=int, help="Maximum concurrent enrichment calls.")
@click.option("--timeout", type=float, help="Per-request timeout in seconds.")
@click.option("--author", help="Author recorded in the changelog.")
def enrich_command(
    path: Path,
    force: bool,
    model: str | None,
    concurrency: int | None,
    timeout: float | None,
    author: str | None,
) -> None:
    """Enrich a template's documentation and write its enriched derivative.

    The derivative is written next to PATH as
    <name>-template.enriched-<version>.json5. An existing derivative for
    the same base version is enriched further rather than replaced.
    """
    config = load_config().merge(
        SpecmintConfig(
            enrichment_model=model, concurrency=concurrency, timeout=timeout, author=author
        )
    )

    try:
        base = load_template(path)
        target = enriched_template_path(path.resolve(), base.version)
        working = load_template(target) if target.exists() else base
        client = require_client(
            model=config.enrichment_model or DEFAULT_MODEL,
            timeout=config.timeout or DEFAULT_TIMEOUT,
        )
    except SpecmintError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    if working is not base:
        console.print(f"[dim]Continuing from {target.name}[/dim]")
    console.print(
        f"[bold]Enriching [cyan]{base.name}[/cyan] v{base.version} "
        f"with {client.model}...[/bold]"
    )

    enricher = Enricher(
        client,
        fetcher=DocumentFetcher(timeout=config.timeout or DEFAULT_TIMEOUT),
        concurrency=config.concurrency or 1,
    )
    result = enricher.enrich(working, EnrichmentOptions(force=force))

    for failure in result.errors:
        console.print(f"  [red]✗[/red] {failure.locator}: {failure.error}")
    console.print(
        f"  Enriched: {result.enriched}, skipped: {result.skipped}, "
        f"errors: {len(result.errors)}"
    )

    if result.enriched == 0:
        console.print("[yellow]No documentation entries were enriched.[/yellow]")
        if result.errors:
            raise SystemExit(1)
        return

    try:
        enriched = apply_version_bump(
            result.template,
            "patch",
            [
                ChangeEntry(
                    category="enrichment",
                    description=f"Enriched {result.enriched} documentation resource(s)",
                )
            ],
            author=config.author,
        )
        save_template(enriched, target, "json5")
    except (SpecmintError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    console.print(f"[green]✓ Wrote {target} (v{enriched.version})[/green]")

    if result.errors:
        raise SystemExit(1)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--auto-enrich",
    is_flag=True,
    help="Fail unless an enriched derivative exists.",
)
@click.option(
    "--no-version-check",
    "skip_version_check",
    is_flag=True,
    help="Skip deprecation and breaking-change warnings.",
)
def resolve(path: Path, auto_enrich: bool, skip_version_check: bool) -> None:
    """Show which template file PATH resolves to."""
    try:
        resolved = resolve_template_path(
            path, auto_enrich=auto_enrich, validate_version=not skip_version_check
        )
    except SpecmintError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    label = "[green]enriched[/green]" if resolved.is_enriched else "[yellow]base[/yellow]"
    console.print(f"{resolved.path} ({label})")
    for warning in resolved.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")


@main.command("bump-version")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--major", "bump_type", flag_value="major", help="Bump major version (X.0.0).")
@click.option("--minor", "bump_type", flag_value="minor", help="Bump minor version (0.X.0).")
@click.option(
    "--patch",
    "bump_type",
    flag_value="patch",
    default=True,
    help="Bump patch version (0.0.X, default).",
)
@click.option("--message", "-m", default="Version bump", help="Description of changes.")
@click.option(
    "--category",
    type=click.Choice(list(CHANGE_CATEGORIES)),
    help="Change category (default: inferred from the message).",
)
@click.option("--breaking", is_flag=True, help="Mark as a breaking change.")
@click.option("--migration-notes", help="Migration notes for breaking changes.")
@click.option("--author", help="Author of the change.")
def bump_version_command(
    path: Path,
    bump_type: str,
    message: str,
    category: str | None,
    breaking: bool,
    migration_notes: str | None,
    author: str | None,
) -> None:
    """Bump a template's version and record the change in its changelog."""
    author = author or load_config().author

    try:
        template = load_template(path)
        change = ChangeEntry(
            category=category or infer_category(message),
            description=message,
            breaking=breaking,
            migration_notes=migration_notes,
        )
        updated = apply_version_bump(template, bump_type, [change], author=author)
        save_template(updated, path)
    except (SpecmintError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    console.print(
        f"[green]✓[/green] {template.name}: {template.version} → "
        f"[bold]{updated.version}[/bold] ({bump_type})"
    )
    console.print(f"  [dim]{escape(f'[{change.category}]')} {message}[/dim]")
    if breaking:
        console.print("  [yellow]⚠ Breaking change[/yellow]")
        if migration_notes:
            console.print(f"  [dim]Migration: {migration_notes}[/dim]")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--limit",
    "-n",
    default=DEFAULT_CHANGELOG_LIMIT,
    type=int,
    help=f"Number of entries to show (default: {DEFAULT_CHANGELOG_LIMIT}).",
)
@click.option("--breaking-only", is_flag=True, help="Show only breaking changes.")
def changelog(path: Path, limit: int, breaking_only: bool) -> None:
    """Show a template's version history."""
    try:
        template = load_template(path)
    except SpecmintError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    console.print(f"[bold]Template: {template.name}[/bold]")
    console.print(f"[dim]Current version: {template.version}[/dim]\n")

    metadata = template.version_metadata
    if metadata is None or not metadata.changelog:
        console.print("[yellow]No version history available.[/yellow]")
        console.print("[dim]Run 'specmint bump-version' to start one.[/dim]")
        return

    if metadata.deprecated:
        console.print(
            f"[yellow]⚠ DEPRECATED: {metadata.deprecated_reason or 'No reason provided'}"
            "[/yellow]"
        )
        if metadata.replacement:
            console.print(f"  [dim]Replacement: {metadata.replacement}[/dim]")
        console.print()

    entries = [e for e in metadata.changelog if e.is_breaking or not breaking_only]
    shown = entries[:limit]

    for entry in shown:
        if entry.is_breaking:
            console.print(f"[red]v{entry.version} (BREAKING)[/red]")
        else:
            console.print(f"[green]v{entry.version}[/green]")
        console.print(f"  [dim]Date: {entry.date} | Type: {entry.type}[/dim]")
        if entry.author:
            console.print(f"  [dim]Author: {entry.author}[/dim]")
        for change in entry.changes:
            prefix = "[red]⚠[/red]" if change.breaking else "•"
            console.print(f"    {prefix} {escape(f'[{change.category}]')} {change.description}")
            if change.migration_notes:
                console.print(f"      [dim]Migration: {change.migration_notes}[/dim]")
        console.print()

    if len(entries) > len(shown):
        console.print(f"[dim]... and {len(entries) - len(shown)} more entries[/dim]")

    if metadata.breaking_changes and not breaking_only:
        console.print("[bold yellow]Breaking changes:[/bold yellow]")
        for bc in metadata.breaking_changes:
            console.print(f"  [yellow]v{bc.version}[/yellow] - {bc.description}")
            if bc.migration_guide:
                console.print(f"    [dim]Migration: {bc.migration_guide}[/dim]")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Base directory for snapshots.",
)
@click.option(
    "--runs",
    "runs_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON/JSON5 or YAML file with benchmark runs.",
)
@click.option("--batch-id", help="Only include runs from this batch.")
def mint(path: Path, output: Path, runs_file: Path | None, batch_id: str | None) -> None:
    """Mint an immutable snapshot of a template with benchmark results."""
    try:
        runs = load_benchmark_runs(runs_file, batch_id=batch_id) if runs_file else None
        result = mint_snapshot(path, output, runs=runs, batch_id=batch_id)
    except TemplateValidationFailed as e:
        console.print("[red]Template failed validation.[/red]")
        _print_issues(e.result)
        raise SystemExit(1) from None
    except SpecmintError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    source = "enriched" if result.is_enriched else "base"
    console.print(
        f"[green]✓ Minted snapshot {result.snapshot_id}[/green] "
        f"(v{result.template_version}, {source} template)"
    )
    console.print(f"  [dim]{result.output_path}[/dim]")
    console.print(f"  [dim]{result.metadata.metadata_path}[/dim]")


@main.command("list")
@click.argument(
    "directory",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
def list_command(directory: Path | None) -> None:
    """List available templates."""
    templates = get_all_templates([directory] if directory else None)

    if not templates:
        console.print("[yellow]No templates found.[/yellow]")
        console.print(
            "[dim]Put *-template.json5 files in ./.specmint/templates/ "
            "or ~/.specmint/templates/[/dim]"
        )
        return

    console.print("[bold]Available Templates:[/bold]\n")
    for name, discovered in sorted(templates.items()):
        status = (
            "[green]enriched[/green]" if discovered.is_enriched else "[dim]not enriched[/dim]"
        )
        console.print(
            f"  [cyan]{name}[/cyan] v{discovered.template.version} ({status})"
        )
        console.print(f"    [dim]{discovered.path}[/dim]")


@main.command()
def preflight() -> None:
    """Validate environment is ready (API key, config files)."""
    if not run_all_checks():
        raise SystemExit(1)


@main.command()
@click.option(
    "--local",
    "-l",
    "local_config",
    is_flag=True,
    help="Create local config (./.specmint/config.yaml) instead of global.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.option(
    "--show",
    is_flag=True,
    help="Show current effective configuration and exit.",
)
def init(local_config: bool, force: bool, show: bool) -> None:
    """Initialize specmint configuration with built-in defaults."""
    if show:
        show_current_config()
        return

    try:
        path = write_default_config(local=local_config, overwrite=force)
    except OSError as e:
        _fail(str(e))

    if path is None:
        existing = get_local_config_path() if local_config else get_home_config_path()
        console.print(f"[yellow]Config already exists: {existing}[/yellow]")
        console.print("[dim]Use --force to overwrite it.[/dim]")
        return
    console.print(f"[green]✓ Wrote {path}[/green]")


def show_current_config() -> None:
    """Display the current effective configuration."""
    config = load_config()
    console.print("\n[bold]Current Effective Configuration:[/bold]")
    console.print(f"  [dim]Global: {get_home_config_path()}[/dim]")
    console.print(f"  [dim]Local: {get_local_config_path()}[/dim]")
    console.print()

    for key, value in config.to_dict().items():
        console.print(f"  {key}: {value}")

    console.print()
    if home_config_exists():
        console.print("  [green]Global config: exists[/green]")
    else:
        console.print("  [dim]Global config: not found[/dim]")
    if local_config_exists():
        console.print("  [green]Local config: exists[/green]")
    else:
        console.print("  [dim]Local config: not found[/dim]")


if __name__ == "__main__":
    main()
