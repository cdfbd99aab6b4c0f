"""
Centralized constants for modgraph.

This module defines immutable values used across modgraph, including
identifier parsing rules, report categories and reasons, configuration
defaults, and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Identifier:version input
# ---------------------------------------------------------------------------

#: Separator between ``identifier:version`` pairs in a raw request string.
PAIR_SEPARATOR: Final[str] = ","

#: Separator between an identifier and its version inside one pair.
IDENTIFIER_SEPARATOR: Final[str] = ":"

# ---------------------------------------------------------------------------
# Catalog snapshot
# ---------------------------------------------------------------------------

#: Top-level keys recognised in a JSON catalog snapshot.
CATALOG_SECTIONS: Final[Sequence[str]] = (
    "packages",
    "versions",
    "platform_versions",
    "dependencies",
    "resolved",
)

#: Value used when a package version does not state extra compatibility.
DEFAULT_EXTRA_COMPAT_FLAG: Final[str] = "unknown"

#: Maximum allowed file size (in bytes) when reading catalog snapshots.
MAX_FILE_SIZE: Final[int] = 50 * 1024 * 1024  # 50 MB

# ---------------------------------------------------------------------------
# Tree builder options
# ---------------------------------------------------------------------------

#: Representative candidate is the resolved version with the highest id.
SELECT_HIGHEST_ID: Final[str] = "highest_id"

#: Representative candidate is the semver-highest resolved row.
SELECT_HIGHEST_VERSION: Final[str] = "highest_version"

CANDIDATE_SELECTIONS: Final[Sequence[str]] = (SELECT_HIGHEST_ID, SELECT_HIGHEST_VERSION)

#: One constraint map shared by the whole traversal.
SCOPE_GLOBAL: Final[str] = "global"

#: Each child branch gets its own copy of the constraint map.
SCOPE_BRANCH: Final[str] = "branch"

CONSTRAINT_SCOPES: Final[Sequence[str]] = (SCOPE_GLOBAL, SCOPE_BRANCH)

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

DEFAULT_CANDIDATE_SELECTION: Final[str] = SELECT_HIGHEST_ID
DEFAULT_CONSTRAINT_SCOPE: Final[str] = SCOPE_GLOBAL

# ---------------------------------------------------------------------------
# Update-check vocabulary
# ---------------------------------------------------------------------------

BLOCK_DEPENDENCY_CONSTRAINT_VIOLATION: Final[str] = "dependency_constraint_violation"
BLOCK_MISSING_DEPENDENCY: Final[str] = "missing_dependency"
BLOCK_CHAIN_DEPENDENCY_CONFLICT: Final[str] = "chain_dependency_conflict"

UPDATE_REASON_STABLE: Final[str] = "newer_version_available"
UPDATE_REASON_PRERELEASE: Final[str] = "newer_prerelease_available"

INCOMPATIBLE_REASON_NO_VERSION: Final[str] = "no_version_for_spt"

#: Error code attached to caller-facing input validation failures.
VALIDATION_FAILED: Final[str] = "VALIDATION_FAILED"

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
