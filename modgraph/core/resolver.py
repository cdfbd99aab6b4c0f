"""Dependency tree resolution for a set of installed packages.

:class:`DependencyResolver` is the entry point behind ``modgraph tree``:
it parses the raw ``identifier:version`` request, resolves it against the
visible catalog and returns the merged, deduplicated dependency tree of
everything requested.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from modgraph.constants import DEFAULT_CANDIDATE_SELECTION, DEFAULT_CONSTRAINT_SCOPE
from modgraph.core.catalog import CatalogRepository, CatalogView
from modgraph.core.identifiers import IdentifierResolver, require_identifier_pairs
from modgraph.core.tree_builder import TreeBuilder
from modgraph.models.tree import TreeNode
from modgraph.utils.logger import get_logger

logger = get_logger("resolver")


class DependencyResolver:
    """Builds dependency trees for raw identifier requests.

    Args:
        repository: Catalog to resolve against.
        candidate_selection: Representative candidate rule for the builder.
        constraint_scope: Constraint accumulator scope for the builder.
        now: Evaluation instant for visibility; defaults to the time of
            each request.
    """

    def __init__(
        self,
        repository: CatalogRepository,
        *,
        candidate_selection: str = DEFAULT_CANDIDATE_SELECTION,
        constraint_scope: str = DEFAULT_CONSTRAINT_SCOPE,
        now: Optional[datetime] = None,
    ) -> None:
        self.repository = repository
        self.candidate_selection = candidate_selection
        self.constraint_scope = constraint_scope
        self.now = now

    def resolve(self, mods: Optional[str]) -> List[TreeNode]:
        """Return the dependency tree for a raw ``identifier:version`` string.

        Args:
            mods: Comma-separated ``identifier:version`` pairs.

        Returns:
            Top-level dependency nodes; empty when nothing resolves.

        Raises:
            ValidationError: If *mods* is blank or has no well-formed pair.
        """
        pairs = require_identifier_pairs(mods)
        view = CatalogView(self.repository, self.now)

        version_ids = IdentifierResolver(view).resolve_ids(pairs)
        if not version_ids:
            logger.info("No requested package version is visible in the catalog")
            return []

        builder = TreeBuilder(
            view,
            candidate_selection=self.candidate_selection,
            constraint_scope=self.constraint_scope,
        )
        tree = builder.build_forest(version_ids)
        logger.info(
            "Resolved %d package version(s) into %d top-level dependencies",
            len(version_ids),
            len(tree),
        )
        return tree
