"""Tiered task prompts, from a bare task (L0) to adversarial conditions (Lx)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from specmint.templates.base import SpecialistTemplate

TIER_LEVELS: tuple[str, ...] = ("L0", "L1", "L2", "L3", "Lx")

TIER_FILE_NAMES: dict[str, str] = {
    "L0": "L0-minimal",
    "L1": "L1-basic",
    "L2": "L2-directed",
    "L3": "L3-migration",
    "Lx": "Lx-adversarial",
}

TIER_DESCRIPTIONS: dict[str, str] = {
    "L0": "the bare task with no extra guidance",
    "L1": "the task plus essential requirements",
    "L2": "the task with explicit steps and comprehensive constraints",
    "L3": "the task framed as a migration of an existing project, with steps and constraints",
    "Lx": "the task under adversarial conditions: conflicting configuration, breaking dependencies and outdated docs",
}

MAX_STEPS = 5


@dataclass(frozen=True)
class TierPrompt:
    level: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def with_content(self, content: str, refined_by: str | None = None) -> TierPrompt:
        metadata = dict(self.metadata)
        if refined_by:
            metadata["refined_by"] = refined_by
        return TierPrompt(level=self.level, content=content, metadata=metadata)


@dataclass(frozen=True)
class TierSet:
    """Tier prompts for one scenario, keyed by level."""

    base_task: str
    scenario: str
    tiers: dict[str, TierPrompt] = field(default_factory=dict)

    def with_tier(self, tier: TierPrompt) -> TierSet:
        return TierSet(
            base_task=self.base_task,
            scenario=self.scenario,
            tiers={**self.tiers, tier.level: tier},
        )

    def to_prompt_entry(self) -> dict[str, Any]:
        """Task-keyed prompt entry for the template's `prompts` section."""
        return {
            "default": {"systemPrompt": self.base_task},
            "tiers": {level: tier.content for level, tier in self.tiers.items()},
        }


def _steps(template: SpecialistTemplate) -> str:
    caps = template.capabilities
    lines = [
        f"{i}. {caps.descriptions.get(tag) or tag}"
        for i, tag in enumerate(caps.tags[:MAX_STEPS], start=1)
    ]
    return "\n".join(lines) or "1. Follow the official documentation step by step"


def _constraints(template: SpecialistTemplate) -> str:
    considerations = template.capabilities.considerations or ()
    return "\n".join(f"- {c}" for c in considerations) or "- Follow official documentation"


def _l0(task: str, template: SpecialistTemplate) -> TierPrompt:
    return TierPrompt(
        "L0",
        task,
        {"include_context": False, "include_steps": False, "include_constraints": False},
    )


def _l1(task: str, template: SpecialistTemplate) -> TierPrompt:
    content = (
        f"{task}\n\n"
        "Requirements:\n"
        "- Follow official documentation\n"
        "- Ensure the project builds successfully\n"
        "- Use recommended tools and configurations"
    )
    return TierPrompt(
        "L1",
        content,
        {"include_context": "basic", "include_steps": False, "include_constraints": "essential"},
    )


def _l2(task: str, template: SpecialistTemplate) -> TierPrompt:
    content = (
        f"{task}\n\n"
        f"Steps:\n{_steps(template)}\n\n"
        f"Constraints:\n{_constraints(template)}\n\n"
        "Verify all configurations are correct and test the build."
    )
    return TierPrompt(
        "L2",
        content,
        {
            "include_context": "detailed",
            "include_steps": True,
            "include_constraints": "comprehensive",
        },
    )


def _l3(task: str, template: SpecialistTemplate) -> TierPrompt:
    # Same guidance as L2; refinement rewrites it as a migration.
    l2 = _l2(task, template)
    return TierPrompt("L3", l2.content, {**l2.metadata, "include_context": "migration"})


def _lx(task: str, template: SpecialistTemplate) -> TierPrompt:
    content = (
        f"{task}\n\n"
        "ADVERSARIAL CONDITIONS:\n"
        "- Multiple conflicting configurations may be present\n"
        "- Some dependencies may have breaking changes\n"
        "- Build errors are expected - debug and fix them\n"
        "- Documentation may be outdated - verify everything\n\n"
        "You must handle all edge cases and ensure a working solution."
    )
    return TierPrompt(
        "Lx",
        content,
        {
            "include_context": "adversarial",
            "include_steps": "detailed",
            "include_constraints": "strict",
            "include_pitfalls": True,
        },
    )


_BUILDERS = {"L0": _l0, "L1": _l1, "L2": _l2, "L3": _l3, "Lx": _lx}


def build_tier_set(template: SpecialistTemplate, base_task: str, scenario: str) -> TierSet:
    """Deterministic tier prompts derived from the template's capabilities."""
    return TierSet(
        base_task=base_task,
        scenario=scenario,
        tiers={level: _BUILDERS[level](base_task, template) for level in TIER_LEVELS},
    )
