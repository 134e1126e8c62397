"""Semantic version bumps and changelog maintenance."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING

import semver

from specmint.errors import InvalidVersionError
from specmint.serialization import isoformat, parse_timestamp, utc_now
from specmint.versioning.models import (
    BUMP_TYPES,
    ChangeEntry,
    VersionChange,
    VersionMetadata,
)

if TYPE_CHECKING:
    from specmint.templates.base import SpecialistTemplate

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "specmint"

# Ordered: first matching keyword wins
CATEGORY_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("enrich", "enrichment"),
    ("prompt", "prompt"),
    ("doc", "documentation"),
    ("persona", "persona"),
    ("capabilit", "capabilities"),
    ("fix", "fix"),
)

_CONSTRAINT_RE = re.compile(r"^(>=|<=|==|!=|>|<)?\s*(.+)$")


@dataclass(frozen=True)
class VersionUpdate:
    """Description of one version transition."""

    old_version: str
    new_version: str
    type: str  # "major" | "minor" | "patch"
    changes: tuple[ChangeEntry, ...]
    author: str | None = None


def parse_version(version: str, field: str = "version") -> semver.Version:
    """Parse a semver string, raising InvalidVersionError on failure."""
    try:
        return semver.Version.parse(version)
    except (TypeError, ValueError) as e:
        raise InvalidVersionError(version, field) from e


def bump_version(current: str, bump_type: str) -> str:
    """Return `current` incremented by `bump_type` (major, minor or patch)."""
    if bump_type not in BUMP_TYPES:
        raise ValueError(f"Unknown bump type: {bump_type!r}")
    parsed = parse_version(current)
    if bump_type == "major":
        bumped = parsed.bump_major()
    elif bump_type == "minor":
        bumped = parsed.bump_minor()
    else:
        bumped = parsed.bump_patch()
    logger.debug("Bumped version %s -> %s (%s)", current, bumped, bump_type)
    return str(bumped)


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as `a` is lower, equal or higher than `b`."""
    return parse_version(a).compare(parse_version(b))


def is_compatible_version(current: str, required: str) -> bool:
    """Check `current` against `required`.

    `required` is an exact version (`1.2.0`) or one or more comparisons
    separated by commas or spaces (`>=1.2.0, <2.0.0`).
    """
    parsed = parse_version(current)
    normalized = re.sub(r"(>=|<=|==|!=|>|<)\s+", r"\1", required.strip())
    constraints = [c for c in re.split(r"[,\s]+", normalized) if c]
    if not constraints:
        raise InvalidVersionError(required, "required")
    for constraint in constraints:
        match = _CONSTRAINT_RE.match(constraint.strip())
        if match is None:
            raise InvalidVersionError(required, "required")
        op = match.group(1) or "=="
        cmp = parsed.compare(parse_version(match.group(2).strip(), "required"))
        ok = {
            "==": cmp == 0,
            "!=": cmp != 0,
            ">=": cmp >= 0,
            "<=": cmp <= 0,
            ">": cmp > 0,
            "<": cmp < 0,
        }[op]
        if not ok:
            return False
    return True


def infer_category(message: str) -> str:
    """Guess a change category from a free-form message.

    This is a fallback for when no explicit category was given. Keywords
    are matched as case-insensitive substrings in a fixed order, so
    "fix prompt typo" is categorized as `prompt`.
    """
    lowered = message.lower()
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in lowered:
            return category
    return "other"


def _entry_timestamp(previous: VersionMetadata | None, now: datetime | None) -> str:
    """Timestamp for a new changelog entry, never older than the current head."""
    moment = now or utc_now()
    if previous is not None and previous.current is not None:
        head = parse_timestamp(previous.current.date)
        if head is not None and head > moment:
            return previous.current.date
    return isoformat(moment)


def update_version_metadata(
    current: VersionMetadata | None,
    update: VersionUpdate,
    now: datetime | None = None,
) -> VersionMetadata:
    """Record a version transition and return the new metadata.

    The new changelog entry is prepended; existing entries are kept in
    order and never edited. `last_enriched_at` only moves when one of
    the changes has the `enrichment` category.
    """
    stamp = _entry_timestamp(current, now)
    entry = VersionChange(
        version=update.new_version,
        date=stamp,
        type=update.type,
        changes=tuple(update.changes),
        author=update.author or DEFAULT_AUTHOR,
    )
    enriched = any(c.category == "enrichment" for c in update.changes)

    if current is None:
        logger.debug("Creating version metadata at %s", update.new_version)
        return VersionMetadata(
            changelog=(entry,),
            deprecated=False,
            created_at=stamp,
            updated_at=stamp,
            last_enriched_at=stamp if enriched else None,
        )

    if entry.is_breaking:
        logger.warning("Breaking changes recorded in %s", update.new_version)

    updated = current.with_entry(entry, updated_at=stamp)
    if enriched:
        updated = replace(updated, last_enriched_at=stamp)
    logger.debug(
        "Updated version metadata %s -> %s (%d changelog entries)",
        update.old_version,
        update.new_version,
        len(updated.changelog),
    )
    return updated


def create_initial_version_metadata(
    version: str,
    description: str = "Initial version",
    now: datetime | None = None,
) -> VersionMetadata:
    """Create metadata with a single entry describing `version`."""
    stamp = isoformat(now or utc_now())
    entry = VersionChange(
        version=version,
        date=stamp,
        type="patch",
        changes=(ChangeEntry(category="other", description=description),),
        author=DEFAULT_AUTHOR,
    )
    return VersionMetadata(
        changelog=(entry,),
        deprecated=False,
        created_at=stamp,
        updated_at=stamp,
    )


def get_breaking_changes(metadata: VersionMetadata) -> list[VersionChange]:
    """Changelog entries that contain at least one breaking change."""
    return [entry for entry in metadata.changelog if entry.is_breaking]


def has_breaking_changes(metadata: VersionMetadata, version: str) -> bool:
    """Check whether the changelog entry for `version` is breaking."""
    for entry in metadata.changelog:
        if entry.version == version:
            return entry.is_breaking
    return False


def apply_version_bump(
    template: SpecialistTemplate,
    bump_type: str,
    changes: Sequence[ChangeEntry],
    author: str | None = None,
    now: datetime | None = None,
) -> SpecialistTemplate:
    """Return `template` at its next version with the changelog updated."""
    new_version = bump_version(template.version, bump_type)
    metadata = update_version_metadata(
        template.version_metadata,
        VersionUpdate(
            old_version=template.version,
            new_version=new_version,
            type=bump_type,
            changes=tuple(changes),
            author=author,
        ),
        now=now,
    )
    return template.with_version(new_version, metadata)
