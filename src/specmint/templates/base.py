"""Specialist template definition."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from specmint.serialization import extra_fields, str_or_none, str_tuple
from specmint.versioning.models import VersionMetadata

DOCUMENTATION_TYPES: tuple[str, ...] = (
    "official",
    "reference",
    "recipes",
    "examples",
    "control",
)

# Keys under `prompts` that are not task prompt entries
RESERVED_PROMPT_KEYS: tuple[str, ...] = ("default", "model_specific", "prompt_strategy")


def _str_dict(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items()}


def is_task_prompt(value: Any) -> bool:
    """Check whether a `prompts` entry looks like a task-keyed prompt."""
    return isinstance(value, dict) and ("default" in value or "model_specific" in value)


@dataclass(frozen=True)
class Persona:
    """Who the specialist is."""

    purpose: str = ""
    values: tuple[str, ...] = ()
    attributes: tuple[str, ...] = ()
    tech_stack: tuple[str, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "purpose": self.purpose,
            "values": list(self.values),
            "attributes": list(self.attributes),
            "tech_stack": list(self.tech_stack),
        }
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Persona:
        return cls(
            purpose=str(data.get("purpose", "")),
            values=str_tuple(data.get("values")),
            attributes=str_tuple(data.get("attributes")),
            tech_stack=str_tuple(data.get("tech_stack")),
            extra=extra_fields(data, ("purpose", "values", "attributes", "tech_stack")),
        )


@dataclass(frozen=True)
class Capabilities:
    """What the specialist is good at."""

    tags: tuple[str, ...] = ()
    descriptions: dict[str, str] = field(default_factory=dict)
    considerations: tuple[str, ...] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "tags": list(self.tags),
            "descriptions": dict(self.descriptions),
        }
        if self.considerations is not None:
            result["considerations"] = list(self.considerations)
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Capabilities:
        considerations_raw = data.get("considerations")
        return cls(
            tags=str_tuple(data.get("tags")),
            descriptions=_str_dict(data.get("descriptions")),
            considerations=(
                str_tuple(considerations_raw)
                if considerations_raw is not None
                else None
            ),
            extra=extra_fields(data, ("tags", "descriptions", "considerations")),
        )


@dataclass(frozen=True)
class PromptStrategy:
    """How prompts are selected and interpolated at runtime."""

    fallback: str = "default"  # "default" | "error"
    model_detection: str = "auto"  # "auto" | "manual"
    allow_override: bool = True
    interpolation: dict[str, Any] = field(
        default_factory=lambda: {"style": "mustache", "escape_html": False}
    )
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "fallback": self.fallback,
            "model_detection": self.model_detection,
            "allow_override": self.allow_override,
            "interpolation": dict(self.interpolation),
        }
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PromptStrategy:
        interpolation = data.get("interpolation")
        return cls(
            fallback=str(data.get("fallback", "default")),
            model_detection=str(data.get("model_detection", "auto")),
            allow_override=data.get("allow_override", True) is not False,
            interpolation=(
                dict(interpolation)
                if isinstance(interpolation, dict)
                else {"style": "mustache", "escape_html": False}
            ),
            extra=extra_fields(
                data, ("fallback", "model_detection", "allow_override", "interpolation")
            ),
        )


@dataclass(frozen=True)
class Prompts:
    """Prompt configuration: defaults, model overrides and task prompts.

    Task prompts are any other key whose value carries `default` or
    `model_specific`, e.g. `project_setup` or a generated tier scenario.
    """

    default: dict[str, str] = field(default_factory=dict)
    model_specific: dict[str, dict[str, str]] | None = None
    prompt_strategy: PromptStrategy = PromptStrategy()
    tasks: dict[str, dict[str, Any]] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def task_types(self) -> tuple[str, ...]:
        """Names of the task-keyed prompt entries."""
        return tuple(self.tasks)

    def with_task(self, name: str, entry: dict[str, Any]) -> Prompts:
        """Return a copy with the task prompt `name` set to `entry`.

        Raises ValueError if `name` is one of RESERVED_PROMPT_KEYS.
        """
        if name in RESERVED_PROMPT_KEYS:
            raise ValueError(f"'{name}' is a reserved prompts key and cannot name a task")
        return replace(self, tasks={**self.tasks, name: entry})

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"default": dict(self.default)}
        if self.model_specific is not None:
            result["model_specific"] = {
                model: dict(prompts) for model, prompts in self.model_specific.items()
            }
        for name, entry in self.tasks.items():
            result[name] = entry
        result["prompt_strategy"] = self.prompt_strategy.to_dict()
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Prompts:
        model_specific_raw = data.get("model_specific")
        model_specific = None
        if isinstance(model_specific_raw, dict):
            model_specific = {
                str(model): _str_dict(prompts)
                for model, prompts in model_specific_raw.items()
            }
        strategy_raw = data.get("prompt_strategy")
        tasks: dict[str, dict[str, Any]] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in RESERVED_PROMPT_KEYS:
                continue
            if is_task_prompt(value):
                tasks[key] = value
            else:
                extra[key] = value
        return cls(
            default=_str_dict(data.get("default")),
            model_specific=model_specific,
            prompt_strategy=(
                PromptStrategy.from_dict(strategy_raw)
                if isinstance(strategy_raw, dict)
                else PromptStrategy()
            ),
            tasks=tasks,
            extra=extra,
        )


@dataclass(frozen=True)
class DocumentationEnrichment:
    """LLM-derived metadata attached to a documentation entry."""

    summary: str = ""
    key_concepts: tuple[str, ...] = ()
    relevant_for_tasks: tuple[str, ...] = ()
    relevant_tech_stack: tuple[str, ...] = ()
    relevant_tags: tuple[str, ...] = ()
    code_patterns: tuple[str, ...] = ()
    last_enriched: str = ""
    enrichment_model: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "summary": self.summary,
            "key_concepts": list(self.key_concepts),
            "relevant_for_tasks": list(self.relevant_for_tasks),
            "relevant_tech_stack": list(self.relevant_tech_stack),
            "relevant_tags": list(self.relevant_tags),
            "code_patterns": list(self.code_patterns),
            "last_enriched": self.last_enriched,
            "enrichment_model": self.enrichment_model,
        }
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentationEnrichment:
        known = (
            "summary",
            "key_concepts",
            "relevant_for_tasks",
            "relevant_tech_stack",
            "relevant_tags",
            "code_patterns",
            "last_enriched",
            "enrichment_model",
        )
        return cls(
            summary=str(data.get("summary") or ""),
            key_concepts=str_tuple(data.get("key_concepts")),
            relevant_for_tasks=str_tuple(data.get("relevant_for_tasks")),
            relevant_tech_stack=str_tuple(data.get("relevant_tech_stack")),
            relevant_tags=str_tuple(data.get("relevant_tags")),
            code_patterns=str_tuple(data.get("code_patterns")),
            last_enriched=str(data.get("last_enriched") or ""),
            enrichment_model=str(data.get("enrichment_model") or ""),
            extra=extra_fields(data, known),
        )


@dataclass(frozen=True)
class DocumentationEntry:
    """A documentation resource the specialist relies on."""

    type: str  # one of DOCUMENTATION_TYPES
    description: str = ""
    url: str | None = None
    path: str | None = None
    enrichment: DocumentationEnrichment | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def locator(self) -> str | None:
        """The URL or path this entry points at."""
        return self.url or self.path

    @property
    def is_enriched(self) -> bool:
        return self.enrichment is not None

    def with_enrichment(self, enrichment: DocumentationEnrichment) -> DocumentationEntry:
        """Return a copy with `enrichment` attached."""
        return replace(self, enrichment=enrichment)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        if self.url is not None:
            result["url"] = self.url
        if self.path is not None:
            result["path"] = self.path
        result["description"] = self.description
        if self.enrichment is not None:
            result["enrichment"] = self.enrichment.to_dict()
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentationEntry:
        enrichment_raw = data.get("enrichment")
        return cls(
            type=str(data.get("type", "official")),
            description=str(data.get("description", "")),
            url=str_or_none(data.get("url")),
            path=str_or_none(data.get("path")),
            enrichment=(
                DocumentationEnrichment.from_dict(enrichment_raw)
                if isinstance(enrichment_raw, dict)
                else None
            ),
            extra=extra_fields(
                data, ("type", "description", "url", "path", "enrichment")
            ),
        )


@dataclass(frozen=True)
class PreferredModel:
    """A model the specialist is tuned for."""

    model: str
    specialist_enabled: bool | None = None
    weight: int | float | None = None
    benchmarks: dict[str, float] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"model": self.model}
        if self.specialist_enabled is not None:
            result["specialist_enabled"] = self.specialist_enabled
        if self.weight is not None:
            result["weight"] = self.weight
        if self.benchmarks is not None:
            result["benchmarks"] = dict(self.benchmarks)
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreferredModel:
        benchmarks_raw = data.get("benchmarks")
        weight_raw = data.get("weight")
        enabled_raw = data.get("specialist_enabled")
        return cls(
            model=str(data.get("model", "")),
            specialist_enabled=bool(enabled_raw) if enabled_raw is not None else None,
            weight=(
                weight_raw
                if isinstance(weight_raw, (int, float)) and not isinstance(weight_raw, bool)
                else None
            ),
            benchmarks=(
                {str(k): v for k, v in benchmarks_raw.items()}
                if isinstance(benchmarks_raw, dict)
                else None
            ),
            extra=extra_fields(
                data, ("model", "specialist_enabled", "weight", "benchmarks")
            ),
        )


@dataclass(frozen=True)
class SpecialistTemplate:
    """A versioned specialist configuration.

    Only the fields the pipeline reasons about are typed. Everything else
    in the source document lives in `extra` and is written back verbatim.
    """

    name: str
    version: str
    persona: Persona = Persona()
    capabilities: Capabilities = Capabilities()
    prompts: Prompts = Prompts()
    schema_version: str | None = None
    display_name: str | None = None
    license: str | None = None
    availability: str | None = None
    maintainers: tuple[dict[str, Any], ...] | None = None
    dependencies: dict[str, Any] | None = None
    documentation: tuple[DocumentationEntry, ...] | None = None
    preferred_models: tuple[PreferredModel, ...] | None = None
    spawnable_sub_agent_specialists: tuple[dict[str, Any], ...] | None = None
    version_metadata: VersionMetadata | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    source: Path | None = None  # Path where template was loaded from

    @property
    def short_name(self) -> str:
        """Template name without its scope, e.g. `@org/foo` -> `foo`."""
        return self.name.split("/")[-1]

    def with_documentation(
        self, documentation: tuple[DocumentationEntry, ...]
    ) -> SpecialistTemplate:
        """Return a copy with the documentation list replaced."""
        return replace(self, documentation=documentation)

    def with_prompts(self, prompts: Prompts) -> SpecialistTemplate:
        """Return a copy with the prompts replaced."""
        return replace(self, prompts=prompts)

    def with_version(
        self, version: str, metadata: VersionMetadata | None
    ) -> SpecialistTemplate:
        """Return a copy at `version` carrying `metadata`."""
        return replace(self, version=version, version_metadata=metadata)

    def with_source(self, source: Path | None) -> SpecialistTemplate:
        return replace(self, source=source)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk document shape."""
        result: dict[str, Any] = {}
        if self.schema_version is not None:
            result["schema_version"] = self.schema_version
        result["name"] = self.name
        if self.display_name is not None:
            result["displayName"] = self.display_name
        result["version"] = self.version
        if self.version_metadata is not None:
            result["version_metadata"] = self.version_metadata.to_dict()
        if self.license is not None:
            result["license"] = self.license
        if self.availability is not None:
            result["availability"] = self.availability
        if self.maintainers is not None:
            result["maintainers"] = [dict(m) for m in self.maintainers]
        result["persona"] = self.persona.to_dict()
        result["capabilities"] = self.capabilities.to_dict()
        if self.dependencies is not None:
            result["dependencies"] = self.dependencies
        if self.documentation is not None:
            result["documentation"] = [d.to_dict() for d in self.documentation]
        if self.preferred_models is not None:
            result["preferred_models"] = [m.to_dict() for m in self.preferred_models]
        result["prompts"] = self.prompts.to_dict()
        if self.spawnable_sub_agent_specialists is not None:
            result["spawnable_sub_agent_specialists"] = [
                dict(s) for s in self.spawnable_sub_agent_specialists
            ]
        result.update(self.extra)
        # source is runtime-only, not serialized
        return result

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], source: Path | None = None
    ) -> SpecialistTemplate:
        """Create a SpecialistTemplate from a parsed template document.

        Conversion is lenient: run the validator first when the document
        comes from an untrusted source.
        """

        def _dict(key: str) -> dict[str, Any]:
            value = data.get(key)
            return value if isinstance(value, dict) else {}

        def _dict_tuple(key: str) -> tuple[dict[str, Any], ...] | None:
            value = data.get(key)
            if not isinstance(value, list):
                return None
            return tuple(v for v in value if isinstance(v, dict))

        documentation_raw = data.get("documentation")
        documentation = None
        if isinstance(documentation_raw, list):
            documentation = tuple(
                DocumentationEntry.from_dict(d)
                for d in documentation_raw
                if isinstance(d, dict)
            )

        models_raw = data.get("preferred_models")
        preferred_models = None
        if isinstance(models_raw, list):
            preferred_models = tuple(
                PreferredModel.from_dict(m) for m in models_raw if isinstance(m, dict)
            )

        metadata_raw = data.get("version_metadata")
        dependencies_raw = data.get("dependencies")

        known = (
            "schema_version",
            "name",
            "displayName",
            "version",
            "version_metadata",
            "license",
            "availability",
            "maintainers",
            "persona",
            "capabilities",
            "dependencies",
            "documentation",
            "preferred_models",
            "prompts",
            "spawnable_sub_agent_specialists",
        )

        return cls(
            name=str(data.get("name", "")),
            version=str(data.get("version", "")),
            persona=Persona.from_dict(_dict("persona")),
            capabilities=Capabilities.from_dict(_dict("capabilities")),
            prompts=Prompts.from_dict(_dict("prompts")),
            schema_version=str_or_none(data.get("schema_version")),
            display_name=str_or_none(data.get("displayName")),
            license=str_or_none(data.get("license")),
            availability=str_or_none(data.get("availability")),
            maintainers=_dict_tuple("maintainers"),
            dependencies=dependencies_raw if isinstance(dependencies_raw, dict) else None,
            documentation=documentation,
            preferred_models=preferred_models,
            spawnable_sub_agent_specialists=_dict_tuple(
                "spawnable_sub_agent_specialists"
            ),
            version_metadata=(
                VersionMetadata.from_dict(metadata_raw)
                if isinstance(metadata_raw, dict)
                else None
            ),
            extra=extra_fields(data, known),
            source=source,
        )
