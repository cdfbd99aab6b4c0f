"""
Core functionality exports for modgraph.

This module provides convenient access to the core subsystems of modgraph.
Importing from here keeps user-facing imports clean and stable:

    from modgraph.core import DependencyResolver, UpdateChecker, load_catalog
"""

from __future__ import annotations

from modgraph.core.catalog import (
    CatalogRepository,
    CatalogView,
    InMemoryCatalog,
    catalog_from_dict,
    load_catalog,
)
from modgraph.core.constraints import ConstraintAccumulator
from modgraph.core.deduplicator import deduplicate
from modgraph.core.identifiers import IdentifierResolver, parse_identifier_pairs
from modgraph.core.tree_builder import TreeBuilder
from modgraph.core.update_finder import find_candidate, find_satisfying_version
from modgraph.core.validator import ConstraintValidator
from modgraph.core.resolver import DependencyResolver
from modgraph.core.update_checker import UpdateChecker

__all__ = [
    "CatalogRepository",
    "CatalogView",
    "InMemoryCatalog",
    "catalog_from_dict",
    "load_catalog",
    "ConstraintAccumulator",
    "deduplicate",
    "IdentifierResolver",
    "parse_identifier_pairs",
    "TreeBuilder",
    "find_candidate",
    "find_satisfying_version",
    "ConstraintValidator",
    "DependencyResolver",
    "UpdateChecker",
]
