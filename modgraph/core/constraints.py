"""Constraint accumulation for tree building.

While a dependency tree is expanded, every declaration's constraint is
recorded against its target package id. Deduplication later asks which
constraints apply to a package when several variants of it meet at one
level.

The accumulator is an explicit per-request value. Its scope decides how
far a recorded constraint reaches:

``global``
    One map for the whole traversal. A constraint found anywhere in the
    tree takes part in deduplication everywhere.

``branch``
    Each child branch works on its own copy, seeded with what its
    ancestors recorded. Sibling branches never see each other's
    constraints.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from modgraph.constants import CONSTRAINT_SCOPES, SCOPE_BRANCH, SCOPE_GLOBAL


class ConstraintAccumulator:
    """Constraint strings recorded per target package id.

    Args:
        scope: ``"global"`` or ``"branch"``.

    Raises:
        ValueError: If *scope* is not a known scope.
    """

    __slots__ = ("scope", "_constraints")

    def __init__(self, scope: str = SCOPE_GLOBAL) -> None:
        if scope not in CONSTRAINT_SCOPES:
            raise ValueError(
                f"Unknown constraint scope {scope!r}; expected one of "
                f"{', '.join(CONSTRAINT_SCOPES)}"
            )
        self.scope = scope
        self._constraints: Dict[int, List[str]] = {}

    def record(self, package_id: int, constraint: str) -> None:
        """Record a constraint on *package_id*."""
        self._constraints.setdefault(package_id, []).append(constraint)

    def for_branch(self) -> ConstraintAccumulator:
        """Return the accumulator a child branch should record into."""
        if self.scope == SCOPE_GLOBAL:
            return self

        child = ConstraintAccumulator(SCOPE_BRANCH)
        child._constraints = {k: list(v) for k, v in self._constraints.items()}
        return child

    def constraints_for(self, package_id: int) -> Tuple[str, ...]:
        """Return the constraints recorded for *package_id*, in record order."""
        return tuple(self._constraints.get(package_id, ()))

    def get(self, package_id: int) -> Optional[Tuple[str, ...]]:
        constraints = self._constraints.get(package_id)
        return tuple(constraints) if constraints else None

    def package_ids(self) -> List[int]:
        return list(self._constraints)

    def as_dict(self) -> Dict[int, Tuple[str, ...]]:
        """Return an immutable snapshot of the recorded constraints."""
        return {k: tuple(v) for k, v in self._constraints.items()}

    def __contains__(self, package_id: object) -> bool:
        return package_id in self._constraints

    def __len__(self) -> int:
        return len(self._constraints)

    def __repr__(self) -> str:
        return f"ConstraintAccumulator(scope={self.scope!r}, packages={len(self)})"
