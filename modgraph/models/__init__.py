"""
Unified data model exports for modgraph.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``modgraph.models`` instead of individual submodules.

Example:
    >>> from modgraph.models import Package, PackageVersion, TreeNode
"""

from __future__ import annotations

from modgraph.models.package import (
    DependencyDeclaration,
    Package,
    PackageVersion,
    PlatformVersion,
    ResolvedCandidate,
)
from modgraph.models.tree import TreeNode
from modgraph.models.conflict import BlockingPackage, ChainConflict, MissingDependency
from modgraph.models.report import (
    BlockedUpdate,
    IncompatibleWithPlatform,
    UpdateAvailable,
    UpdateReport,
    UpToDate,
    ValidationResult,
)

__all__ = [
    "Package",
    "PackageVersion",
    "PlatformVersion",
    "DependencyDeclaration",
    "ResolvedCandidate",
    "TreeNode",
    "BlockingPackage",
    "MissingDependency",
    "ChainConflict",
    "ValidationResult",
    "UpdateAvailable",
    "BlockedUpdate",
    "UpToDate",
    "IncompatibleWithPlatform",
    "UpdateReport",
]
