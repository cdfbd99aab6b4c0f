"""
Utility helpers for modgraph.

This package provides reusable utilities used across modgraph, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Safe catalog file reading
- Semantic version parsing and constraint matching

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from modgraph.utils.filesystem import safe_read_file

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from modgraph.utils.logger import (
    get_logger,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from modgraph.utils.console import (
    colorize_update_type,
    print_error,
    print_success,
    print_table,
    print_tree,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from modgraph.utils.version_utils import (
    compare_versions,
    get_update_type,
    highest_satisfying,
    parse_constraint,
    parse_version,
    satisfies,
    satisfies_all,
    sort_versions,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_tree",
    "print_success",
    "print_warning",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    # Filesystem
    "safe_read_file",
    # Version utilities
    "parse_version",
    "parse_constraint",
    "satisfies",
    "satisfies_all",
    "compare_versions",
    "sort_versions",
    "highest_satisfying",
    "get_update_type",
]
