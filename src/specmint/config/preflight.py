"""Preflight checks to validate environment."""

import os

from specmint.config.loader import (
    get_home_config_path,
    get_local_config_path,
    load_config,
    load_yaml_config,
)
from specmint.console import console
from specmint.llm.client import API_KEY_ENV_VAR


def check_api_key() -> bool:
    """Check that the reasoning-service credential is present."""
    if os.environ.get(API_KEY_ENV_VAR):
        console.print(f"[green]✓[/green] {API_KEY_ENV_VAR} is set")
        return True
    console.print(f"[red]✗[/red] {API_KEY_ENV_VAR} is not set")
    console.print("[dim]Enrichment is unavailable; other commands still work.[/dim]")
    return False


def check_config_files() -> bool:
    """Check that existing config files parse as YAML mappings."""
    ok = True
    for label, path in (
        ("Global", get_home_config_path()),
        ("Local", get_local_config_path()),
    ):
        if not path.exists():
            console.print(f"  [dim]-[/dim] {label} config not found ({path})")
            continue
        if load_yaml_config(path) is None:
            console.print(f"[red]✗[/red] {label} config is empty or invalid: {path}")
            ok = False
        else:
            console.print(f"[green]✓[/green] {label} config: {path}")
    return ok


def check_enrichment_settings() -> bool:
    """Check the effective enrichment settings are usable."""
    config = load_config()
    if not config.enrichment_model:
        console.print("[red]✗[/red] No enrichment model configured")
        return False
    if not config.concurrency or config.concurrency < 1:
        console.print("[red]✗[/red] Enrichment concurrency must be at least 1")
        return False
    console.print(
        f"[green]✓[/green] Enrichment model: [cyan]{config.enrichment_model}[/cyan] "
        f"(concurrency {config.concurrency}, timeout {config.timeout}s)"
    )
    return True


CHECKS = [
    check_api_key,
    check_config_files,
    check_enrichment_settings,
]


def run_all_checks() -> bool:
    """Run all preflight checks."""
    console.print("[bold]Running preflight checks...[/bold]\n")

    results = [check() for check in CHECKS]
    all_passed = all(results)

    if all_passed:
        console.print("\n[bold green]All preflight checks passed![/bold green]")
    else:
        console.print("\n[bold red]Some preflight checks failed.[/bold red]")

    return all_passed
