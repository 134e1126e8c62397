"""Benchmark runs and the `benchmarks` section of a snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import json5
import yaml

from specmint.errors import BenchmarkLoadError
from specmint.serialization import extra_fields, str_or_none
from specmint.templates.io import YAML_SUFFIXES

logger = logging.getLogger(__name__)

SCORING = {
    "methodology": "weighted_average",
    "update_frequency": "per_experiment",
    "comparison_targets": ["control", "generic"],
}

PLACEHOLDER_SUITE = {
    "name": "placeholder",
    "path": "benchmarks/placeholder",
    "type": "functional",
    "description": "Placeholder test suite - no benchmark results available yet",
}


@dataclass(frozen=True)
class BenchmarkRun:
    """One benchmark run, with or without the specialist enabled."""

    run_id: str
    model: str
    suite: str
    scenario: str
    overall_score: float
    run_date: str = ""
    tier: str = ""
    agent: str = ""
    specialist_enabled: bool | None = None
    batch_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)  # evaluations, telemetry, ...

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "run_id": self.run_id,
            "run_date": self.run_date,
        }
        if self.batch_id is not None:
            result["batch_id"] = self.batch_id
        result["model"] = self.model
        if self.specialist_enabled is not None:
            result["specialist_enabled"] = self.specialist_enabled
        result.update(
            {
                "suite": self.suite,
                "scenario": self.scenario,
                "tier": self.tier,
                "agent": self.agent,
                "overall_score": self.overall_score,
            }
        )
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BenchmarkRun:
        enabled = data.get("specialist_enabled")
        return cls(
            run_id=str(data.get("run_id", "")),
            model=str(data.get("model", "")),
            suite=str(data.get("suite", "")),
            scenario=str(data.get("scenario", "")),
            overall_score=float(data.get("overall_score") or 0.0),
            run_date=str(data.get("run_date", "")),
            tier=str(data.get("tier", "")),
            agent=str(data.get("agent", "")),
            specialist_enabled=enabled if isinstance(enabled, bool) else None,
            batch_id=str_or_none(data.get("batch_id")),
            extra=extra_fields(
                data,
                (
                    "run_id",
                    "run_date",
                    "batch_id",
                    "model",
                    "specialist_enabled",
                    "suite",
                    "scenario",
                    "tier",
                    "agent",
                    "overall_score",
                ),
            ),
        )


def load_benchmark_runs(path: Path, batch_id: str | None = None) -> list[BenchmarkRun]:
    """Load benchmark runs from a JSON/JSON5 or YAML file.

    The file holds either a list of runs or an object with a `runs` list.
    With `batch_id`, only runs from that batch are returned.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise BenchmarkLoadError(path, e.strerror or str(e)) from e

    try:
        data: Any = yaml.safe_load(text) if path.suffix in YAML_SUFFIXES else json5.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise BenchmarkLoadError(path, f"malformed document: {e}") from e

    raw_runs = data.get("runs") if isinstance(data, dict) else data
    if not isinstance(raw_runs, list):
        raise BenchmarkLoadError(path, "expected a list of runs or an object with `runs`")

    runs = [BenchmarkRun.from_dict(r) for r in raw_runs if isinstance(r, dict)]
    if batch_id is not None:
        runs = [r for r in runs if r.batch_id == batch_id]
    logger.debug("Loaded %d benchmark run(s) from %s", len(runs), path)
    return runs


def _average(runs: list[BenchmarkRun]) -> float | None:
    if not runs:
        return None
    return sum(r.overall_score for r in runs) / len(runs)


def calculate_comparison(runs: list[BenchmarkRun]) -> dict[str, Any] | None:
    """Compare baseline runs against specialist-enabled runs.

    Returns None when no run says whether the specialist was enabled.
    """
    baseline = [r for r in runs if r.specialist_enabled is False]
    specialist = [r for r in runs if r.specialist_enabled is True]
    if not baseline and not specialist:
        return None

    comparison: dict[str, Any] = {}
    baseline_avg = _average(baseline)
    specialist_avg = _average(specialist)
    if baseline_avg is not None:
        comparison["baseline_avg_score"] = baseline_avg
    if specialist_avg is not None:
        comparison["specialist_avg_score"] = specialist_avg
    if baseline_avg is not None and specialist_avg is not None:
        comparison["improvement"] = specialist_avg - baseline_avg
        if baseline_avg > 0:
            comparison["improvement_pct"] = comparison["improvement"] / baseline_avg * 100

    # Last run per model wins on each side.
    by_model: dict[str, dict[str, BenchmarkRun]] = {}
    for run in baseline:
        by_model.setdefault(run.model, {})["baseline"] = run
    for run in specialist:
        by_model.setdefault(run.model, {})["specialist"] = run

    models = []
    for model, pair in by_model.items():
        base_run = pair.get("baseline")
        base_score = base_run.overall_score if base_run else 0.0
        entry: dict[str, Any] = {"model": model, "baseline_score": base_score}
        spec_run = pair.get("specialist")
        if spec_run is not None:
            entry["specialist_score"] = spec_run.overall_score
            entry["improvement"] = spec_run.overall_score - base_score
            if base_run is not None and base_score > 0:
                entry["improvement_pct"] = entry["improvement"] / base_score * 100
        models.append(entry)
    comparison["models_compared"] = models
    return comparison


def create_benchmarks_section(runs: list[BenchmarkRun] | None) -> dict[str, Any]:
    """Build the `benchmarks` section for a snapshot."""
    section: dict[str, Any] = {"test_suites": [], "scoring": dict(SCORING)}

    if not runs:
        logger.warning("No benchmark results found, using a placeholder test suite")
        section["test_suites"].append(dict(PLACEHOLDER_SUITE))
        return section

    seen: set[str] = set()
    for run in runs:
        key = f"{run.suite}/{run.scenario}"
        if key in seen:
            continue
        seen.add(key)
        section["test_suites"].append(
            {
                "name": run.scenario,
                "path": key,
                "type": "functional",
                "description": f"Benchmark from {run.suite} suite",
            }
        )

    section["runs"] = [r.to_dict() for r in runs]
    comparison = calculate_comparison(runs)
    if comparison is not None:
        section["comparison"] = comparison
        if "improvement" in comparison:
            logger.info(
                "Specialist improvement: %+.3f over baseline %.3f",
                comparison["improvement"],
                comparison["baseline_avg_score"],
            )
    return section
