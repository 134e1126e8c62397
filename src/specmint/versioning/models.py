"""Version metadata and changelog models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal

from specmint.serialization import extra_fields, str_or_none, str_tuple

BumpType = Literal["major", "minor", "patch"]
ChangeCategory = Literal[
    "enrichment",
    "prompt",
    "documentation",
    "persona",
    "capabilities",
    "fix",
    "other",
]

BUMP_TYPES: tuple[str, ...] = ("major", "minor", "patch")
CHANGE_CATEGORIES: tuple[str, ...] = (
    "enrichment",
    "prompt",
    "documentation",
    "persona",
    "capabilities",
    "fix",
    "other",
)


@dataclass(frozen=True)
class ChangeEntry:
    """A single described change inside a changelog entry."""

    category: str
    description: str
    breaking: bool = False
    migration_notes: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "category": self.category,
            "description": self.description,
            "breaking": self.breaking,
        }
        if self.migration_notes is not None:
            result["migration_notes"] = self.migration_notes
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChangeEntry:
        return cls(
            category=str(data.get("category", "other")),
            description=str(data.get("description", "")),
            breaking=data.get("breaking") is True,
            migration_notes=str_or_none(data.get("migration_notes")),
            extra=extra_fields(
                data, ("category", "description", "breaking", "migration_notes")
            ),
        )


@dataclass(frozen=True)
class VersionChange:
    """One changelog entry: the changes that produced `version`."""

    version: str
    date: str  # ISO-8601 UTC
    type: str  # "major" | "minor" | "patch"
    changes: tuple[ChangeEntry, ...] = ()
    author: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_breaking(self) -> bool:
        """True if any change in this entry is marked breaking."""
        return any(c.breaking for c in self.changes)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "version": self.version,
            "date": self.date,
            "type": self.type,
            "changes": [c.to_dict() for c in self.changes],
        }
        if self.author is not None:
            result["author"] = self.author
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VersionChange:
        changes_raw = data.get("changes", [])
        changes = tuple(
            ChangeEntry.from_dict(c)
            for c in (changes_raw if isinstance(changes_raw, list) else [])
            if isinstance(c, dict)
        )
        return cls(
            version=str(data.get("version", "")),
            date=str(data.get("date", "")),
            type=str(data.get("type", "patch")),
            changes=changes,
            author=str_or_none(data.get("author")),
            extra=extra_fields(
                data, ("version", "date", "type", "changes", "author")
            ),
        )


@dataclass(frozen=True)
class BreakingChange:
    """A breaking change summary, as listed under `breaking_changes`."""

    version: str
    date: str
    description: str
    affected_areas: tuple[str, ...] = ()
    migration_guide: str = ""
    deprecated_features: tuple[str, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "version": self.version,
            "date": self.date,
            "description": self.description,
            "affected_areas": list(self.affected_areas),
            "migration_guide": self.migration_guide,
        }
        if self.deprecated_features:
            result["deprecated_features"] = list(self.deprecated_features)
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BreakingChange:
        return cls(
            version=str(data.get("version", "")),
            date=str(data.get("date", "")),
            description=str(data.get("description", "")),
            affected_areas=str_tuple(data.get("affected_areas")),
            migration_guide=str(data.get("migration_guide") or ""),
            deprecated_features=str_tuple(data.get("deprecated_features")),
            extra=extra_fields(
                data,
                (
                    "version",
                    "date",
                    "description",
                    "affected_areas",
                    "migration_guide",
                    "deprecated_features",
                ),
            ),
        )

    @classmethod
    def from_change(cls, entry: VersionChange, change: ChangeEntry) -> BreakingChange:
        """Build the summary for a breaking change recorded in the changelog."""
        return cls(
            version=entry.version,
            date=entry.date,
            description=change.description,
            affected_areas=(change.category,),
            migration_guide=change.migration_notes or "",
        )


@dataclass(frozen=True)
class VersionMetadata:
    """Append-only version ledger attached to a template.

    `changelog` is newest first. `breaking_changes` is computed from the
    changelog; entries recorded by older files that have no changelog
    counterpart are kept in `recorded_breaking_changes` and merged in.
    """

    changelog: tuple[VersionChange, ...] = ()
    deprecated: bool = False
    deprecated_reason: str | None = None
    replacement: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    last_enriched_at: str | None = None
    recorded_breaking_changes: tuple[BreakingChange, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def breaking_changes(self) -> tuple[BreakingChange, ...]:
        """Breaking changes, newest first."""
        derived = [
            BreakingChange.from_change(entry, change)
            for entry in self.changelog
            for change in entry.changes
            if change.breaking
        ]
        seen = {(bc.version, bc.description) for bc in derived}
        legacy = [
            bc
            for bc in self.recorded_breaking_changes
            if (bc.version, bc.description) not in seen
        ]
        return tuple(derived + legacy)

    @property
    def current(self) -> VersionChange | None:
        """Most recent changelog entry, if any."""
        return self.changelog[0] if self.changelog else None

    def with_entry(self, entry: VersionChange, updated_at: str) -> VersionMetadata:
        """Return a copy with `entry` prepended to the changelog."""
        return replace(
            self,
            changelog=(entry, *self.changelog),
            updated_at=updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "changelog": [c.to_dict() for c in self.changelog],
            "breaking_changes": [bc.to_dict() for bc in self.breaking_changes],
            "deprecated": self.deprecated,
        }
        if self.deprecated_reason is not None:
            result["deprecated_reason"] = self.deprecated_reason
        if self.replacement is not None:
            result["replacement"] = self.replacement
        if self.created_at is not None:
            result["created_at"] = self.created_at
        if self.updated_at is not None:
            result["updated_at"] = self.updated_at
        if self.last_enriched_at is not None:
            result["last_enriched_at"] = self.last_enriched_at
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VersionMetadata:
        changelog_raw = data.get("changelog", [])
        changelog = tuple(
            VersionChange.from_dict(c)
            for c in (changelog_raw if isinstance(changelog_raw, list) else [])
            if isinstance(c, dict)
        )
        breaking_raw = data.get("breaking_changes", [])
        recorded = tuple(
            BreakingChange.from_dict(bc)
            for bc in (breaking_raw if isinstance(breaking_raw, list) else [])
            if isinstance(bc, dict)
        )
        return cls(
            changelog=changelog,
            deprecated=data.get("deprecated") is True,
            deprecated_reason=str_or_none(data.get("deprecated_reason")),
            replacement=str_or_none(data.get("replacement")),
            created_at=str_or_none(data.get("created_at")),
            updated_at=str_or_none(data.get("updated_at")),
            last_enriched_at=str_or_none(data.get("last_enriched_at")),
            recorded_breaking_changes=recorded,
            extra=extra_fields(
                data,
                (
                    "changelog",
                    "breaking_changes",
                    "deprecated",
                    "deprecated_reason",
                    "replacement",
                    "created_at",
                    "updated_at",
                    "last_enriched_at",
                ),
            ),
        )
