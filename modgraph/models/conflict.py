"""
Update-blocking records for modgraph.

When a candidate upgrade is rejected, one of these records explains why:
an installed package whose constraint the candidate breaks, a dependency
the candidate needs but the catalog cannot supply, or an installed package
that the candidate's dependency chain would no longer accept.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class BlockingPackage:
    """An installed package whose constraint the candidate does not satisfy.

    Args:
        package_id: Id of the installed package declaring the constraint.
        guid: Its guid.
        name: Its display name.
        current_version: Installed version of the declaring package.
        constraint: Constraint it places on the package being updated.
        incompatible_with: Candidate version that fails the constraint.
    """

    package_id: int
    guid: str
    name: str
    current_version: str
    constraint: str
    incompatible_with: str

    def to_display_string(self) -> str:
        """Return a human-readable description of the block."""
        return (
            f"{self.name}=={self.current_version} requires {self.constraint}, "
            f"incompatible with {self.incompatible_with}"
        )

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "package_id": self.package_id,
            "guid": self.guid,
            "name": self.name,
            "current_version": self.current_version,
            "constraint": self.constraint,
            "incompatible_with": self.incompatible_with,
        }

    def __str__(self) -> str:
        return self.to_display_string()


@dataclass(frozen=True)
class MissingDependency:
    """A dependency of the candidate that no compatible version satisfies."""

    package_id: int
    constraint: str

    def to_display_string(self) -> str:
        return f"no compatible version of package {self.package_id} matches {self.constraint}"

    def to_json(self) -> Dict[str, Any]:
        return {"package_id": self.package_id, "constraint": self.constraint}

    def __str__(self) -> str:
        return self.to_display_string()


@dataclass(frozen=True)
class ChainConflict:
    """An installed package rejected by a constraint in the candidate's closure.

    Args:
        package_id: Id of the installed package.
        guid: Its guid.
        name: Its display name.
        current_version: Its installed version.
        required_constraint: The transitive constraint it fails.
    """

    package_id: int
    guid: str
    name: str
    current_version: str
    required_constraint: str

    def to_display_string(self) -> str:
        return (
            f"{self.name}=={self.current_version} does not satisfy "
            f"{self.required_constraint} required by the dependency chain"
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "package_id": self.package_id,
            "guid": self.guid,
            "name": self.name,
            "current_version": self.current_version,
            "required_constraint": self.required_constraint,
        }

    def __str__(self) -> str:
        return self.to_display_string()
