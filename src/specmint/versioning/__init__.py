"""Template version metadata and semantic version management."""

from specmint.versioning.manager import (
    DEFAULT_AUTHOR,
    VersionUpdate,
    apply_version_bump,
    bump_version,
    compare_versions,
    create_initial_version_metadata,
    get_breaking_changes,
    has_breaking_changes,
    infer_category,
    is_compatible_version,
    update_version_metadata,
)
from specmint.versioning.models import (
    BUMP_TYPES,
    CHANGE_CATEGORIES,
    BreakingChange,
    ChangeEntry,
    VersionChange,
    VersionMetadata,
)

__all__ = [
    "BUMP_TYPES",
    "CHANGE_CATEGORIES",
    "DEFAULT_AUTHOR",
    "BreakingChange",
    "ChangeEntry",
    "VersionChange",
    "VersionMetadata",
    "VersionUpdate",
    "apply_version_bump",
    "bump_version",
    "compare_versions",
    "create_initial_version_metadata",
    "get_breaking_changes",
    "has_breaking_changes",
    "infer_category",
    "is_compatible_version",
    "update_version_metadata",
]
