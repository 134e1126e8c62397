"""Structural and completeness validation of template documents.

The validator works on the raw document so it can report exactly what is
on disk. Errors are structural (missing required fields, wrong types,
values outside a closed set); warnings are soft completeness and
consistency issues. Unknown fields are allowed everywhere and the input
is never modified.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

import semver

from specmint.templates.base import DOCUMENTATION_TYPES, SpecialistTemplate
from specmint.versioning.models import BUMP_TYPES, CHANGE_CATEGORIES

logger = logging.getLogger(__name__)

Severity = Literal["error", "warning", "info"]
IssueCategory = Literal["structure", "completeness", "consistency", "quality"]

AVAILABILITY_VALUES: tuple[str, ...] = ("public", "private", "paid")
FALLBACK_VALUES: tuple[str, ...] = ("default", "error")
MODEL_DETECTION_VALUES: tuple[str, ...] = ("auto", "manual")
INTERPOLATION_STYLES: tuple[str, ...] = ("mustache", "handlebars")
ENRICHMENT_LIST_FIELDS: tuple[str, ...] = (
    "key_concepts",
    "relevant_for_tasks",
    "relevant_tech_stack",
    "relevant_tags",
    "code_patterns",
)


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found in a template document."""

    severity: Severity
    category: IssueCategory
    message: str
    path: str
    suggestion: str | None = None

    def __str__(self) -> str:
        return f"{self.path or '<root>'}: {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    """Validation outcome, split by severity."""

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    info: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass
class _Collector:
    issues: list[ValidationIssue] = field(default_factory=list)

    def error(self, path: str, message: str, suggestion: str | None = None) -> None:
        self.issues.append(ValidationIssue("error", "structure", message, path, suggestion))

    def warning(
        self,
        path: str,
        message: str,
        category: IssueCategory = "completeness",
        suggestion: str | None = None,
    ) -> None:
        self.issues.append(ValidationIssue("warning", category, message, path, suggestion))

    def info(self, path: str, message: str, suggestion: str | None = None) -> None:
        self.issues.append(ValidationIssue("info", "quality", message, path, suggestion))

    def result(self) -> ValidationResult:
        return ValidationResult(
            errors=tuple(i for i in self.issues if i.severity == "error"),
            warnings=tuple(i for i in self.issues if i.severity == "warning"),
            info=tuple(i for i in self.issues if i.severity == "info"),
        )

    # Typed accessors. Each returns the value when it has the right type,
    # else records an error and returns None.

    def require_str(self, obj: Mapping[str, Any], key: str, path: str) -> str | None:
        if obj.get(key) is None:
            self.error(path, "Required field is missing", f"Add a string value for '{key}'")
            return None
        return self.optional_str(obj, key, path)

    def optional_str(self, obj: Mapping[str, Any], key: str, path: str) -> str | None:
        value = obj.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            self.error(path, f"Expected a string, got {_type_name(value)}")
            return None
        return value

    def require_str_list(
        self, obj: Mapping[str, Any], key: str, path: str
    ) -> list[str] | None:
        if obj.get(key) is None:
            self.error(path, "Required field is missing", f"Add a list of strings for '{key}'")
            return None
        return self.optional_str_list(obj, key, path)

    def optional_str_list(
        self, obj: Mapping[str, Any], key: str, path: str
    ) -> list[str] | None:
        value = obj.get(key)
        if value is None:
            return None
        if not isinstance(value, list):
            self.error(path, f"Expected a list, got {_type_name(value)}")
            return None
        ok = True
        for i, item in enumerate(value):
            if not isinstance(item, str):
                self.error(f"{path}[{i}]", f"Expected a string, got {_type_name(item)}")
                ok = False
        return value if ok else None

    def require_mapping(
        self, obj: Mapping[str, Any], key: str, path: str
    ) -> Mapping[str, Any] | None:
        if obj.get(key) is None:
            self.error(path, "Required field is missing", f"Add an object for '{key}'")
            return None
        return self.optional_mapping(obj, key, path)

    def optional_mapping(
        self, obj: Mapping[str, Any], key: str, path: str
    ) -> Mapping[str, Any] | None:
        value = obj.get(key)
        if value is None:
            return None
        if not isinstance(value, Mapping):
            self.error(path, f"Expected an object, got {_type_name(value)}")
            return None
        return value

    def optional_list(
        self, obj: Mapping[str, Any], key: str, path: str
    ) -> list[Any] | None:
        value = obj.get(key)
        if value is None:
            return None
        if not isinstance(value, list):
            self.error(path, f"Expected a list, got {_type_name(value)}")
            return None
        return value

    def optional_bool(self, obj: Mapping[str, Any], key: str, path: str) -> None:
        value = obj.get(key)
        if value is not None and not isinstance(value, bool):
            self.error(path, f"Expected a boolean, got {_type_name(value)}")

    def enum(
        self, obj: Mapping[str, Any], key: str, path: str, allowed: tuple[str, ...],
        required: bool = False,
    ) -> None:
        value = (
            self.require_str(obj, key, path) if required else self.optional_str(obj, key, path)
        )
        if value is not None and value not in allowed:
            self.error(
                path,
                f"Invalid value {value!r}",
                f"Use one of: {', '.join(allowed)}",
            )


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "list"
    if value is None:
        return "null"
    return type(value).__name__


def _is_semver(value: str) -> bool:
    return semver.Version.is_valid(value)


def validate(document: Mapping[str, Any] | SpecialistTemplate) -> ValidationResult:
    """Validate a template document (or a SpecialistTemplate)."""
    if isinstance(document, SpecialistTemplate):
        document = document.to_dict()

    c = _Collector()
    if not isinstance(document, Mapping):
        c.error("", f"Template must be an object, got {_type_name(document)}")
        return c.result()

    name = c.require_str(document, "name", "name")
    if name is not None and not name.strip():
        c.error("name", "Name must not be empty")

    version = c.require_str(document, "version", "version")
    if version is not None and not _is_semver(version):
        c.error("version", f"Version {version!r} is not valid semver", "Use MAJOR.MINOR.PATCH, e.g. 1.0.0")

    c.optional_str(document, "schema_version", "schema_version")
    c.optional_str(document, "displayName", "displayName")
    c.optional_str(document, "license", "license")
    c.enum(document, "availability", "availability", AVAILABILITY_VALUES)
    c.optional_mapping(document, "dependencies", "dependencies")

    _check_persona(c, document)
    _check_capabilities(c, document)
    _check_prompts(c, document)
    _check_documentation(c, document)
    _check_preferred_models(c, document)
    _check_sub_specialists(c, document)
    _check_version_metadata(c, document, version)

    result = c.result()
    logger.debug(
        "Validated %s: %d error(s), %d warning(s)",
        name or "<unnamed>",
        len(result.errors),
        len(result.warnings),
    )
    return result


def _check_persona(c: _Collector, document: Mapping[str, Any]) -> None:
    persona = c.require_mapping(document, "persona", "persona")
    if persona is None:
        return
    c.require_str(persona, "purpose", "persona.purpose")
    c.require_str_list(persona, "values", "persona.values")
    c.require_str_list(persona, "attributes", "persona.attributes")
    tech_stack = c.require_str_list(persona, "tech_stack", "persona.tech_stack")
    if tech_stack is not None and not tech_stack:
        c.warning(
            "persona.tech_stack",
            "Tech stack is empty",
            suggestion="List the frameworks and tools this specialist targets",
        )


def _check_capabilities(c: _Collector, document: Mapping[str, Any]) -> None:
    capabilities = c.require_mapping(document, "capabilities", "capabilities")
    if capabilities is None:
        return
    tags = c.require_str_list(capabilities, "tags", "capabilities.tags")
    descriptions = c.require_mapping(
        capabilities, "descriptions", "capabilities.descriptions"
    )
    if descriptions is not None:
        for key, value in descriptions.items():
            if not isinstance(value, str):
                c.error(
                    f"capabilities.descriptions.{key}",
                    f"Expected a string, got {_type_name(value)}",
                )
        if not descriptions:
            c.warning(
                "capabilities.descriptions",
                "Capability descriptions are empty",
                suggestion="Describe each capability tag",
            )
    if tags is not None:
        if not tags:
            c.warning("capabilities.tags", "No capability tags defined")
        elif descriptions:
            for tag in tags:
                if tag not in descriptions:
                    c.warning(
                        f"capabilities.descriptions.{tag}",
                        f"Capability tag {tag!r} has no description",
                        category="consistency",
                    )
    considerations = c.optional_str_list(
        capabilities, "considerations", "capabilities.considerations"
    )
    if considerations is None and "considerations" not in capabilities:
        c.info(
            "capabilities.considerations",
            "No considerations listed",
            "Add gotchas or constraints the specialist should keep in mind",
        )


def _check_prompts(c: _Collector, document: Mapping[str, Any]) -> None:
    prompts = c.require_mapping(document, "prompts", "prompts")
    if prompts is None:
        return
    c.require_mapping(prompts, "default", "prompts.default")
    model_specific = c.optional_mapping(prompts, "model_specific", "prompts.model_specific")
    if model_specific is not None:
        for model, overrides in model_specific.items():
            if not isinstance(overrides, Mapping):
                c.error(
                    f"prompts.model_specific.{model}",
                    f"Expected an object, got {_type_name(overrides)}",
                )
    strategy = c.require_mapping(prompts, "prompt_strategy", "prompts.prompt_strategy")
    if strategy is None:
        return
    c.enum(strategy, "fallback", "prompts.prompt_strategy.fallback", FALLBACK_VALUES)
    c.enum(
        strategy,
        "model_detection",
        "prompts.prompt_strategy.model_detection",
        MODEL_DETECTION_VALUES,
    )
    c.optional_bool(strategy, "allow_override", "prompts.prompt_strategy.allow_override")
    interpolation = c.optional_mapping(
        strategy, "interpolation", "prompts.prompt_strategy.interpolation"
    )
    if interpolation is not None:
        c.enum(
            interpolation,
            "style",
            "prompts.prompt_strategy.interpolation.style",
            INTERPOLATION_STYLES,
        )
        c.optional_bool(
            interpolation,
            "escape_html",
            "prompts.prompt_strategy.interpolation.escape_html",
        )


def _check_documentation(c: _Collector, document: Mapping[str, Any]) -> None:
    docs = c.optional_list(document, "documentation", "documentation")
    if not docs:
        if "documentation" not in document or docs == []:
            c.warning(
                "documentation",
                "No documentation resources listed",
                suggestion="Add official documentation URLs or paths",
            )
        return
    for i, entry in enumerate(docs):
        path = f"documentation[{i}]"
        if not isinstance(entry, Mapping):
            c.error(path, f"Expected an object, got {_type_name(entry)}")
            continue
        c.enum(entry, "type", f"{path}.type", DOCUMENTATION_TYPES, required=True)
        c.require_str(entry, "description", f"{path}.description")
        url = c.optional_str(entry, "url", f"{path}.url")
        doc_path = c.optional_str(entry, "path", f"{path}.path")
        if not url and not doc_path and not entry.get("url") and not entry.get("path"):
            c.warning(
                path,
                "Documentation entry has neither url nor path",
                suggestion="Add a url or a local path",
            )
        enrichment = c.optional_mapping(entry, "enrichment", f"{path}.enrichment")
        if enrichment is not None:
            c.optional_str(enrichment, "summary", f"{path}.enrichment.summary")
            for key in ENRICHMENT_LIST_FIELDS:
                c.optional_str_list(enrichment, key, f"{path}.enrichment.{key}")
            c.optional_str(enrichment, "last_enriched", f"{path}.enrichment.last_enriched")
            c.optional_str(
                enrichment, "enrichment_model", f"{path}.enrichment.enrichment_model"
            )


def _check_preferred_models(c: _Collector, document: Mapping[str, Any]) -> None:
    models = c.optional_list(document, "preferred_models", "preferred_models")
    if not models:
        return
    for i, entry in enumerate(models):
        path = f"preferred_models[{i}]"
        if not isinstance(entry, Mapping):
            c.error(path, f"Expected an object, got {_type_name(entry)}")
            continue
        model = c.require_str(entry, "model", f"{path}.model")
        c.optional_bool(entry, "specialist_enabled", f"{path}.specialist_enabled")
        weight = entry.get("weight")
        if weight is not None and (
            isinstance(weight, bool) or not isinstance(weight, (int, float))
        ):
            c.error(f"{path}.weight", f"Expected a number, got {_type_name(weight)}")
        benchmarks = c.optional_mapping(entry, "benchmarks", f"{path}.benchmarks")
        if not benchmarks:
            c.warning(
                f"{path}.benchmarks",
                f"Preferred model {model or i!r} has no recorded benchmarks",
                category="quality",
            )


def _check_sub_specialists(c: _Collector, document: Mapping[str, Any]) -> None:
    subs = c.optional_list(
        document, "spawnable_sub_agent_specialists", "spawnable_sub_agent_specialists"
    )
    if not subs:
        return
    for i, entry in enumerate(subs):
        path = f"spawnable_sub_agent_specialists[{i}]"
        if not isinstance(entry, Mapping):
            c.error(path, f"Expected an object, got {_type_name(entry)}")
            continue
        c.require_str(entry, "name", f"{path}.name")
        c.require_str(entry, "version", f"{path}.version")
        c.enum(entry, "availability", f"{path}.availability", AVAILABILITY_VALUES)


def _check_version_metadata(
    c: _Collector, document: Mapping[str, Any], version: str | None
) -> None:
    metadata = c.optional_mapping(document, "version_metadata", "version_metadata")
    if metadata is None:
        return
    c.optional_bool(metadata, "deprecated", "version_metadata.deprecated")
    c.optional_str(metadata, "deprecated_reason", "version_metadata.deprecated_reason")
    c.optional_str(metadata, "replacement", "version_metadata.replacement")
    c.optional_list(metadata, "breaking_changes", "version_metadata.breaking_changes")

    changelog = c.optional_list(metadata, "changelog", "version_metadata.changelog")
    if "changelog" not in metadata:
        c.error(
            "version_metadata.changelog",
            "Required field is missing",
            "Add a changelog list (newest entry first)",
        )
        return
    if not changelog:
        return

    for i, entry in enumerate(changelog):
        path = f"version_metadata.changelog[{i}]"
        if not isinstance(entry, Mapping):
            c.error(path, f"Expected an object, got {_type_name(entry)}")
            continue
        entry_version = c.require_str(entry, "version", f"{path}.version")
        if entry_version is not None and not _is_semver(entry_version):
            c.error(f"{path}.version", f"Version {entry_version!r} is not valid semver")
        c.require_str(entry, "date", f"{path}.date")
        c.enum(entry, "type", f"{path}.type", BUMP_TYPES, required=True)
        c.optional_str(entry, "author", f"{path}.author")
        changes = c.optional_list(entry, "changes", f"{path}.changes")
        for j, change in enumerate(changes or []):
            cpath = f"{path}.changes[{j}]"
            if not isinstance(change, Mapping):
                c.error(cpath, f"Expected an object, got {_type_name(change)}")
                continue
            c.enum(change, "category", f"{cpath}.category", CHANGE_CATEGORIES, required=True)
            c.require_str(change, "description", f"{cpath}.description")
            c.optional_bool(change, "breaking", f"{cpath}.breaking")
            c.optional_str(change, "migration_notes", f"{cpath}.migration_notes")

    head = changelog[0]
    if (
        version is not None
        and isinstance(head, Mapping)
        and isinstance(head.get("version"), str)
        and head["version"] != version
    ):
        c.warning(
            "version_metadata.changelog[0].version",
            f"Latest changelog entry is {head['version']} but template version is {version}",
            category="consistency",
            suggestion="Bump versions with 'specmint bump-version' to keep them in sync",
        )
