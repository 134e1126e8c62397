"""Benchmark snapshots of specialist templates."""

from specmint.snapshots.benchmarks import (
    BenchmarkRun,
    calculate_comparison,
    create_benchmarks_section,
    load_benchmark_runs,
)
from specmint.snapshots.metadata import SnapshotMetadata, generate_metadata
from specmint.snapshots.mint import MintResult, mint_snapshot, next_snapshot_id

__all__ = [
    "BenchmarkRun",
    "MintResult",
    "SnapshotMetadata",
    "calculate_comparison",
    "create_benchmarks_section",
    "generate_metadata",
    "load_benchmark_runs",
    "mint_snapshot",
    "next_snapshot_id",
]
