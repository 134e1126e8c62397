"""Build a draft specialist template from extracted knowledge.

`structure` is a pure function: it does no I/O and always returns a
template that passes structural validation, filling every required
section with defaults when the knowledge is sparse.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from specmint.pipeline.fetcher import is_url
from specmint.pipeline.knowledge import ExtractedKnowledge
from specmint.templates.base import (
    Capabilities,
    DocumentationEntry,
    Persona,
    PreferredModel,
    Prompts,
    PromptStrategy,
    SpecialistTemplate,
)

SCHEMA_VERSION = "0.0.1"
DEFAULT_VERSION = "1.0.0"
DEFAULT_VALUES: tuple[str, ...] = ("Performance first", "Best practices", "Clean code")
DEFAULT_CONSIDERATIONS: tuple[str, ...] = ("Follow official documentation",)
AVAILABLE_TOOLS: tuple[str, ...] = (
    "file_system",
    "terminal",
    "code_analysis",
    "git",
    "web_fetch",
)
PREFERRED_MODELS: tuple[str, ...] = (
    "anthropic/claude-sonnet-4.5",
    "anthropic/claude-sonnet-3.5",
    "openai/gpt-4o",
)
PRIMARY_MODEL = PREFERRED_MODELS[0]
MAX_TAGS = 10
MAX_VALUES = 8

# Task prompts keep {{placeholders}} for runtime interpolation.
TASK_PROMPTS: dict[str, tuple[str, str]] = {
    "project_setup": (
        "Set up a new {framework} project with {domain}, using {{{{packageManager}}}} "
        "and configuring {{{{features}}}}",
        "I'll set up a {framework} project with {domain} following the official "
        "documentation exactly:\n\n"
        "1. Create the {framework} project\n"
        "2. Configure {domain} dependencies\n"
        "3. Set up required configuration files\n"
        "4. Initialize {domain} with proper settings\n"
        "5. Configure {{{{features}}}} as requested\n"
        "6. Verify the build succeeds\n\n"
        "I'll use {{{{packageManager}}}} and make sure every configuration matches "
        "the official documentation.",
    ),
    "component_add": (
        "Add {{{{componentName}}}} component to the project using the {domain} CLI",
        "I'll add the {{{{componentName}}}} component using the official CLI:\n\n"
        "1. Run the appropriate {domain} command\n"
        "2. Verify the component installed correctly\n"
        "3. Check dependencies were added\n"
        "4. Confirm component imports work\n"
        "5. Verify the build still succeeds",
    ),
    "troubleshoot": (
        "Debug {{{{issueType}}}} issue in {domain} project: {{{{description}}}}",
        "I'll debug this {{{{issueType}}}} issue: {{{{description}}}}\n\n"
        "Common causes:\n"
        "- Configuration errors: check all config files\n"
        "- Dependency issues: verify package versions\n"
        "- Build errors: check build configuration\n\n"
        "I'll check configuration systematically and fix issues based on the "
        "official documentation.",
    ),
    "theme_setup": (
        "Configure theming with {{{{themeType}}}} using {{{{baseColor}}}} color palette",
        "I'll configure {{{{themeType}}}} theming with {{{{baseColor}}}} base color:\n\n"
        "1. Ensure theme configuration is correct\n"
        "2. Configure color tokens\n"
        "3. Set up theme switching if needed\n"
        "4. Verify all semantic tokens are defined\n"
        "5. Test theme functionality",
    ),
}


@dataclass(frozen=True)
class TemplateIdentity:
    """Name and starting version for a new template."""

    name: str
    version: str = DEFAULT_VERSION


def slugify(text: str) -> str:
    """Lower-case a name and join words with hyphens."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return slug.strip("-")


def display_name(name: str) -> str:
    """Human-facing name: scope and `-specialist` suffix removed."""
    short = name.split("/")[-1]
    if short.endswith("-specialist"):
        short = short[: -len("-specialist")]
    return short or name


def _persona(knowledge: ExtractedKnowledge) -> Persona:
    tech_stack = [
        c.name for c in knowledge.concepts if c.importance in ("critical", "high")
    ][:MAX_TAGS]
    values = list(dict.fromkeys(p.category for p in knowledge.best_practices))[:MAX_VALUES]
    return Persona(
        purpose=(
            f"Expert {knowledge.domain} specialist for {knowledge.framework} projects"
        ),
        values=tuple(values) or DEFAULT_VALUES,
        attributes=(
            f"Deep understanding of {knowledge.domain} architecture",
            f"Expert in {knowledge.framework} configuration",
            "Follows official documentation exactly",
        ),
        tech_stack=tuple(tech_stack) or (knowledge.framework,),
    )


def _capabilities(knowledge: ExtractedKnowledge) -> Capabilities:
    tags: list[str] = []
    descriptions: dict[str, str] = {}
    for concept in knowledge.concepts:
        tag = slugify(concept.name)
        if not tag or tag in descriptions:
            continue
        tags.append(tag)
        descriptions[tag] = concept.description or concept.name
        if len(tags) == MAX_TAGS:
            break
    considerations = [
        g.description or g.title
        for g in knowledge.gotchas
        if g.impact in ("critical", "high")
    ][:MAX_TAGS]
    return Capabilities(
        tags=tuple(tags),
        descriptions=descriptions,
        considerations=tuple(considerations) or DEFAULT_CONSIDERATIONS,
    )


def _documentation(knowledge: ExtractedKnowledge) -> tuple[DocumentationEntry, ...]:
    entries = []
    for source in knowledge.sources:
        if source.type != "documentation":
            continue
        locator = {"url": source.location} if is_url(source.location) else {"path": source.location}
        entries.append(
            DocumentationEntry(
                type="official",
                description=f"{knowledge.domain} documentation",
                **locator,
            )
        )
    return tuple(entries)


def _prompts(knowledge: ExtractedKnowledge) -> Prompts:
    domain, framework = knowledge.domain, knowledge.framework
    critical = "\n".join(
        f"{i}. {g.title}: {g.solution or g.description}"
        for i, g in enumerate(
            (g for g in knowledge.gotchas if g.impact == "critical"), start=1
        )
    ) or "Follow best practices"

    spawner = (
        f"I'm a {domain} specialist. I follow the official documentation exactly, "
        f"understand {domain} architecture, and ensure proper configuration of "
        f"{framework} projects."
    )
    model_spawner = (
        f"I'm a {domain} specialist with deep understanding of {domain} and "
        f"{framework}.\n\n"
        "Key principles I follow:\n"
        f"1. ALWAYS follow official {framework} documentation exactly\n"
        "2. Verify all configurations before proceeding\n"
        "3. Test build and functionality after setup\n\n"
        f"Critical considerations:\n{critical}\n\n"
        "I excel at project setup, configuration, and troubleshooting common issues."
    )

    tasks = {
        task: {
            "default": {
                "systemPrompt": default.format(domain=domain, framework=framework)
            },
            "model_specific": {
                PRIMARY_MODEL: {
                    "systemPrompt": specific.format(domain=domain, framework=framework)
                }
            },
        }
        for task, (default, specific) in TASK_PROMPTS.items()
    }

    return Prompts(
        default={"spawnerPrompt": spawner},
        model_specific={PRIMARY_MODEL: {"spawnerPrompt": model_spawner}},
        prompt_strategy=PromptStrategy(),
        tasks=tasks,
    )


def structure(
    knowledge: ExtractedKnowledge, identity: TemplateIdentity
) -> SpecialistTemplate:
    """Turn extracted knowledge into a draft SpecialistTemplate."""
    return SpecialistTemplate(
        schema_version=SCHEMA_VERSION,
        name=identity.name,
        display_name=display_name(identity.name),
        version=identity.version or DEFAULT_VERSION,
        license="MIT",
        availability="public",
        persona=_persona(knowledge),
        capabilities=_capabilities(knowledge),
        dependencies={
            "subscription": {"required": False, "purpose": "No subscription required"},
            "available_tools": list(AVAILABLE_TOOLS),
            "mcps": [],
        },
        documentation=_documentation(knowledge),
        preferred_models=tuple(PreferredModel(model=m) for m in PREFERRED_MODELS),
        prompts=_prompts(knowledge),
        spawnable_sub_agent_specialists=(),
    )
