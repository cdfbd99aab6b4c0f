"""
Dependency tree data model for modgraph.

A tree is a plain recursive structure: each :class:`TreeNode` pairs a
package with the version chosen for it and holds its own (already
deduplicated) dependency list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from modgraph.models.package import Package, PackageVersion


@dataclass(frozen=True)
class TreeNode:
    """
    One resolved dependency in a tree.

    Attributes:
        package: The dependency package.
        version: Version chosen to represent it.
        conflict: True when the package's accumulated constraints cannot be
            satisfied by a single version and this node is one of several
            retained variants.
        dependencies: Child nodes of ``version``.
    """

    package: Package
    version: PackageVersion
    conflict: bool = False
    dependencies: Tuple[TreeNode, ...] = ()

    @property
    def package_id(self) -> int:
        return self.package.id

    def walk(self) -> Iterator[TreeNode]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.dependencies:
            yield from child.walk()

    def depth(self) -> int:
        """Return the number of levels in the subtree rooted here."""
        if not self.dependencies:
            return 1
        return 1 + max(child.depth() for child in self.dependencies)

    def to_display_string(self) -> str:
        """Return a one-line label such as ``Foo (foo-guid) 1.2.0``."""
        label = f"{self.package.name} ({self.package.guid}) {self.version.version}"
        return f"{label} [conflict]" if self.conflict else label

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation, recursively."""
        return {
            "id": self.package.id,
            "guid": self.package.guid,
            "name": self.package.name,
            "slug": self.package.slug,
            "latest_compatible_version": {
                "id": self.version.id,
                "version": self.version.version,
                "download_link": self.version.download_link,
                "size_bytes": self.version.size_bytes,
                "extra_compat_flag": self.version.extra_compat_flag,
            },
            "conflict": self.conflict,
            "dependencies": [child.to_json() for child in self.dependencies],
        }

    def __str__(self) -> str:
        return self.to_display_string()


def tree_to_json(nodes: Sequence[TreeNode]) -> List[Dict[str, Any]]:
    """Serialize a top-level node list."""
    return [node.to_json() for node in nodes]


def walk_tree(nodes: Sequence[TreeNode]) -> Iterator[TreeNode]:
    """Yield every node of a forest, depth first."""
    for node in nodes:
        yield from node.walk()
