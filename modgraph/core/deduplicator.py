"""Same-level deduplication and conflict classification.

When several nodes at one tree level target the same package, they are
collapsed into a single node if one version satisfies every constraint
recorded for that package. Otherwise every distinct variant is kept and
flagged as a conflict so the caller sees the incompatibility.

Groups keep the order in which their package was first seen; the
classifier never recurses into child lists.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Mapping, Sequence

from modgraph.models.tree import TreeNode
from modgraph.utils.logger import get_logger
from modgraph.utils.version_utils import highest_satisfying

logger = get_logger("deduplicator")


def group_by_package(nodes: Sequence[TreeNode]) -> Dict[int, List[TreeNode]]:
    """Group nodes by package id, preserving first-seen order."""
    groups: Dict[int, List[TreeNode]] = {}
    for node in nodes:
        groups.setdefault(node.package_id, []).append(node)
    return groups


def _distinct_versions(group: Sequence[TreeNode]) -> List[TreeNode]:
    seen = set()
    distinct: List[TreeNode] = []
    for node in group:
        if node.version.id not in seen:
            seen.add(node.version.id)
            distinct.append(node)
    return distinct


def _with_conflict(node: TreeNode, conflict: bool) -> TreeNode:
    if node.conflict == conflict:
        return node
    return replace(node, conflict=conflict)


def classify_group(
    group: Sequence[TreeNode],
    constraints: Sequence[str],
) -> List[TreeNode]:
    """Collapse one package's nodes, or flag them all as conflicting.

    Args:
        group: Nodes targeting the same package, in encounter order.
        constraints: Constraints recorded for that package.

    Returns:
        A single node, or every distinct version marked ``conflict=True``.
    """
    if len(group) == 1:
        return [_with_conflict(group[0], False)]

    if not constraints:
        return [_with_conflict(group[0], False)]

    chosen = highest_satisfying([node.version.version for node in group], constraints)
    if chosen is not None:
        for node in group:
            if node.version.version == chosen:
                return [_with_conflict(node, False)]

    variants = _distinct_versions(group)
    logger.debug(
        "Package %s: no version in %s satisfies %s",
        group[0].package_id,
        [node.version.version for node in variants],
        list(constraints),
    )
    return [_with_conflict(node, True) for node in variants]


def deduplicate(
    nodes: Sequence[TreeNode],
    constraints_by_package: Mapping[int, Sequence[str]],
) -> List[TreeNode]:
    """Deduplicate one tree level.

    Args:
        nodes: Nodes of a single level, possibly several per package.
        constraints_by_package: Constraints recorded per package id.

    Returns:
        One node per package, except for conflicting packages which keep
        every distinct variant.

    Example::

        >>> # versions 1.0.0, 1.5.0, 1.8.0 under {^1.0.0, ^1.5.0}
        >>> [n.version.version for n in deduplicate(nodes, {7: ["^1.0.0", "^1.5.0"]})]
        ['1.8.0']
    """
    result: List[TreeNode] = []
    for package_id, group in group_by_package(nodes).items():
        result.extend(classify_group(group, constraints_by_package.get(package_id, ())))
    return result
