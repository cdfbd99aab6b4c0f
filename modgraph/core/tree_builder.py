"""Dependency tree expansion.

Starting from one or more package versions, :class:`TreeBuilder` follows
each version's dependency declarations through the precomputed resolved
candidates and produces nested :class:`~modgraph.models.tree.TreeNode`
lists. For every target package a single representative candidate is
chosen and expanded in turn.

Building happens in two passes:

1. **Expansion** walks declarations depth first (declarations in
   ascending id, nodes in target-package discovery order), records every
   declaration's constraint into a :class:`ConstraintAccumulator` and
   collects pending nodes.
2. **Finalization** turns pending nodes into tree nodes bottom up and
   deduplicates each level against the accumulator that level recorded
   into.

Deduplicating only after expansion means a global accumulator is complete
when it is consulted, so the result does not depend on which root or
branch was expanded first.

A version already on the current path is not expanded again. The visited
set is scoped to the path, so a package reachable along two different
paths (a diamond) is expanded on both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from modgraph.constants import (
    CANDIDATE_SELECTIONS,
    DEFAULT_CANDIDATE_SELECTION,
    DEFAULT_CONSTRAINT_SCOPE,
    SCOPE_GLOBAL,
    SELECT_HIGHEST_ID,
)
from modgraph.core.catalog import CatalogView
from modgraph.core.constraints import ConstraintAccumulator
from modgraph.core.deduplicator import deduplicate
from modgraph.models.package import Package, PackageVersion
from modgraph.models.tree import TreeNode
from modgraph.utils.logger import get_logger

logger = get_logger("tree_builder")

# Public API
__all__ = ["TreeBuilder"]


# ---------------------------------------------------------------------------
# Pending structure produced by expansion
# ---------------------------------------------------------------------------


@dataclass
class _PendingNode:
    package: Package
    version: PackageVersion
    children: _PendingLevel


@dataclass
class _PendingLevel:
    constraints: ConstraintAccumulator
    nodes: List[_PendingNode] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class TreeBuilder:
    """Builds deduplicated, conflict-annotated dependency trees.

    Args:
        view: Visibility-filtered catalog view for this request.
        candidate_selection: ``"highest_id"`` picks the resolved candidate
            with the highest version id per package; ``"highest_version"``
            picks the semver-highest one.
        constraint_scope: ``"global"`` or ``"branch"``; see
            :mod:`modgraph.core.constraints`.

    Raises:
        ValueError: If an option has an unknown value.
    """

    def __init__(
        self,
        view: CatalogView,
        *,
        candidate_selection: str = DEFAULT_CANDIDATE_SELECTION,
        constraint_scope: str = DEFAULT_CONSTRAINT_SCOPE,
    ) -> None:
        if candidate_selection not in CANDIDATE_SELECTIONS:
            raise ValueError(
                f"Unknown candidate selection {candidate_selection!r}; expected "
                f"one of {', '.join(CANDIDATE_SELECTIONS)}"
            )
        # Validates the scope as a side effect
        ConstraintAccumulator(constraint_scope)

        self.view = view
        self.candidate_selection = candidate_selection
        self.constraint_scope = constraint_scope

    # ==================================================================
    # Public API
    # ==================================================================

    def new_accumulator(self) -> ConstraintAccumulator:
        return ConstraintAccumulator(self.constraint_scope)

    def build_tree(
        self,
        root_version_id: int,
        visited: FrozenSet[int] = frozenset(),
        accumulator: Optional[ConstraintAccumulator] = None,
    ) -> List[TreeNode]:
        """Return the deduplicated dependencies of one version.

        Args:
            root_version_id: Version whose dependencies are expanded.
            visited: Version ids already on the path to this root.
            accumulator: Accumulator to record into; a fresh one is used
                when omitted.

        Returns:
            The root's dependency nodes. Empty if the root is in
            *visited*.
        """
        accumulator = accumulator if accumulator is not None else self.new_accumulator()
        pending = self._expand(root_version_id, visited, accumulator)
        return self._finalize(pending, accumulator)

    def build_forest(self, root_version_ids: Iterable[int]) -> List[TreeNode]:
        """Return the merged, deduplicated dependencies of several roots.

        Every root records into one request-level accumulator and their
        dependency lists are deduplicated together, so two roots needing
        incompatible versions of a shared package yield flagged variants.
        """
        accumulator = self.new_accumulator()
        pending: List[_PendingNode] = []
        for root_id in root_version_ids:
            pending.extend(self._expand(root_id, frozenset(), accumulator))

        nodes = self._finalize(pending, accumulator)
        logger.debug("Built forest with %d top-level nodes", len(nodes))
        return nodes

    def collect_constraints(self, version_id: int) -> ConstraintAccumulator:
        """Return every constraint recorded while expanding *version_id*.

        Always uses global scope so the result covers the whole closure.
        """
        accumulator = ConstraintAccumulator(SCOPE_GLOBAL)
        self._expand(version_id, frozenset(), accumulator)
        return accumulator

    # ==================================================================
    # Expansion
    # ==================================================================

    def _expand(
        self,
        version_id: int,
        visited: FrozenSet[int],
        accumulator: ConstraintAccumulator,
    ) -> List[_PendingNode]:
        if version_id in visited:
            logger.debug("Cycle back to version %s, not expanding", version_id)
            return []

        path = visited | {version_id}
        representatives = self._representatives(version_id, accumulator)

        pending: List[_PendingNode] = []
        for package, version in representatives:
            branch = accumulator.for_branch()
            children = _PendingLevel(
                constraints=branch,
                nodes=self._expand(version.id, path, branch),
            )
            pending.append(_PendingNode(package, version, children))
        return pending

    def _representatives(
        self,
        version_id: int,
        accumulator: ConstraintAccumulator,
    ) -> List[Tuple[Package, PackageVersion]]:
        """Record the version's constraints and pick one candidate per package."""
        chosen: Dict[int, PackageVersion] = {}

        for declaration in self.view.declarations(version_id):
            accumulator.record(declaration.target_package_id, declaration.constraint)

            for candidate in self.view.candidates(declaration.id):
                resolved = self.view.visible_version(candidate.version_id)
                if resolved is None:
                    continue
                current = chosen.get(resolved.package_id)
                if current is None or self._outranks(resolved, current):
                    chosen[resolved.package_id] = resolved

        result: List[Tuple[Package, PackageVersion]] = []
        for package_id, version in chosen.items():
            package = self.view.visible_package(package_id)
            if package is not None:
                result.append((package, version))
        return result

    def _outranks(self, version: PackageVersion, best: PackageVersion) -> bool:
        if self.candidate_selection == SELECT_HIGHEST_ID:
            return version.id > best.id
        return (version.sort_key, version.id) > (best.sort_key, best.id)

    # ==================================================================
    # Finalization
    # ==================================================================

    def _finalize(
        self,
        pending: List[_PendingNode],
        accumulator: ConstraintAccumulator,
    ) -> List[TreeNode]:
        nodes = [
            TreeNode(
                package=item.package,
                version=item.version,
                dependencies=tuple(
                    self._finalize(item.children.nodes, item.children.constraints)
                ),
            )
            for item in pending
        ]
        return deduplicate(nodes, accumulator.as_dict())
