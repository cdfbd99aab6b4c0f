"""
modgraph: dependency resolution for mod catalogs

modgraph expands the transitive dependencies of installed mod versions
into a deduplicated, conflict-annotated tree, and works out which
installed mods can be upgraded for a target platform version without
breaking the constraints of anything else that is installed.

Features include:
    • npm-style semantic version constraints (^, ~, ranges, wildcards)
    • Path-scoped cycle handling and diamond-safe tree expansion
    • Conflict flagging when no single version satisfies every constraint
    • Update checks validated against incoming, outgoing and transitive constraints
    • JSON catalog snapshots and a rich terminal CLI
"""

from __future__ import annotations

from modgraph.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "modgraph Contributors"
__license__ = "Apache-2.0"
__description__ = "Dependency tree and update-compatibility engine for mod catalogs."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
]
