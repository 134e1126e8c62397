"""Minting immutable snapshots of a template with its benchmark results.

Snapshots live at `<output>/<short-name>/<version>/snapshot-NNN.json5`,
with NNN counting up from 001 per template version, and a
`snapshot-NNN.meta.json` sidecar for programmatic consumers.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from specmint.errors import TemplateValidationFailed
from specmint.serialization import isoformat, utc_now
from specmint.snapshots.benchmarks import BenchmarkRun, create_benchmarks_section
from specmint.snapshots.metadata import SnapshotMetadata, generate_metadata, write_metadata
from specmint.templates.io import load_document, write_document
from specmint.templates.resolver import resolve_template_path

logger = logging.getLogger(__name__)

MINTED_BY = "specmint CLI"

_SNAPSHOT_RE = re.compile(r"^snapshot-(\d+)\.json5$")


@dataclass(frozen=True)
class MintResult:
    snapshot_id: str
    output_path: Path
    template_version: str
    is_enriched: bool
    metadata: SnapshotMetadata


def next_snapshot_id(snapshot_dir: Path) -> str:
    """Next free three-digit snapshot id in `snapshot_dir`."""
    if not snapshot_dir.is_dir():
        return "001"
    ids = [
        int(m.group(1))
        for f in snapshot_dir.iterdir()
        if (m := _SNAPSHOT_RE.match(f.name))
    ]
    return f"{max(ids, default=0) + 1:03d}"


def mint_snapshot(
    template_path: Path,
    output_dir: Path,
    runs: list[BenchmarkRun] | None = None,
    batch_id: str | None = None,
) -> MintResult:
    """Mint a snapshot of the template at `template_path`.

    The enriched derivative is used when one exists. Raises
    TemplateValidationFailed if the template has structural errors.
    """
    from specmint.pipeline.validator import validate

    resolved = resolve_template_path(template_path)
    document = load_document(resolved.path)
    if not resolved.is_enriched:
        logger.warning(
            "Minting from a non-enriched template; consider running 'specmint enrich'"
        )

    result = validate(document)
    if result.has_errors:
        raise TemplateValidationFailed(result, name=str(document.get("name", "")) or None)

    name = str(document["name"])
    version = str(document["version"])
    snapshot = dict(document)
    snapshot["benchmarks"] = create_benchmarks_section(runs)
    snapshot["snapshot_metadata"] = {
        "created_at": isoformat(utc_now()),
        "minted_by": MINTED_BY,
        "template_version": version,
    }

    snapshot_dir = output_dir.resolve() / name.split("/")[-1] / version
    snapshot_id = next_snapshot_id(snapshot_dir)
    output_path = snapshot_dir / f"snapshot-{snapshot_id}.json5"
    write_document(output_path, snapshot, "json5")
    logger.info("Minted snapshot %s of %s v%s", snapshot_id, name, version)

    metadata = generate_metadata(
        snapshot,
        snapshot_id=snapshot_id,
        snapshot_path=output_path,
        template_path=resolved.path,
        is_enriched=resolved.is_enriched,
        batch_id=batch_id,
    )
    write_metadata(metadata)

    return MintResult(
        snapshot_id=snapshot_id,
        output_path=output_path,
        template_version=version,
        is_enriched=resolved.is_enriched,
        metadata=metadata,
    )
