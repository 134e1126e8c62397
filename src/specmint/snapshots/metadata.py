"""Sidecar metadata describing a minted snapshot."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from specmint.templates.io import write_text_atomic

META_SUFFIX = ".meta.json"


@dataclass(frozen=True)
class SnapshotMetadata:
    snapshot_id: str
    snapshot_path: Path
    template_name: str
    template_version: str
    template_path: Path
    is_enriched: bool
    timestamp: str
    minted_by: str
    benchmarks: dict[str, Any] = field(default_factory=dict)

    @property
    def metadata_path(self) -> Path:
        return metadata_path_for(self.snapshot_path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "snapshot_id": self.snapshot_id,
            "snapshot_path": str(self.snapshot_path),
            "template": {
                "name": self.template_name,
                "version": self.template_version,
                "path": str(self.template_path),
                "is_enriched": self.is_enriched,
            },
            "benchmarks": self.benchmarks,
            "output": {
                "directory": str(self.snapshot_path.parent),
                "snapshot_file": str(self.snapshot_path),
                "metadata_file": str(self.metadata_path),
            },
            "timestamp": self.timestamp,
            "minted_by": self.minted_by,
        }


def metadata_path_for(snapshot_path: Path) -> Path:
    """`snapshot-001.json5` -> `snapshot-001.meta.json`."""
    return snapshot_path.with_name(snapshot_path.stem + META_SUFFIX)


def benchmark_info(snapshot: dict[str, Any], batch_id: str | None = None) -> dict[str, Any]:
    """Summarize the benchmarks section of a snapshot document."""
    benchmarks = snapshot.get("benchmarks") or {}
    runs = benchmarks.get("runs") or []
    if not runs:
        info: dict[str, Any] = {"included": False}
        if batch_id:
            info["batch_id"] = batch_id
        return info

    info = {"included": True}
    if batch_id:
        info["batch_id"] = batch_id
    info["run_count"] = len(runs)
    info["models"] = [m for m in dict.fromkeys(r.get("model") for r in runs) if m]

    comparison = benchmarks.get("comparison") or {}
    keys = ("baseline_avg_score", "specialist_avg_score", "improvement", "improvement_pct")
    if all(k in comparison for k in keys):
        info["comparison"] = {
            "baseline_avg": comparison["baseline_avg_score"],
            "specialist_avg": comparison["specialist_avg_score"],
            "improvement": comparison["improvement"],
            "improvement_pct": comparison["improvement_pct"],
        }
    return info


def generate_metadata(
    snapshot: dict[str, Any],
    snapshot_id: str,
    snapshot_path: Path,
    template_path: Path,
    is_enriched: bool,
    batch_id: str | None = None,
) -> SnapshotMetadata:
    minted = snapshot.get("snapshot_metadata") or {}
    return SnapshotMetadata(
        snapshot_id=snapshot_id,
        snapshot_path=snapshot_path,
        template_name=str(snapshot.get("name", "")),
        template_version=str(snapshot.get("version", "")),
        template_path=template_path,
        is_enriched=is_enriched,
        timestamp=str(minted.get("created_at", "")),
        minted_by=str(minted.get("minted_by", "")),
        benchmarks=benchmark_info(snapshot, batch_id),
    )


def write_metadata(metadata: SnapshotMetadata) -> Path:
    """Write the sidecar next to its snapshot and return its path."""
    path = metadata.metadata_path
    write_text_atomic(path, json.dumps(metadata.to_dict(), indent=2) + "\n")
    return path
