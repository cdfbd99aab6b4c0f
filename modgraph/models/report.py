"""
Update-check result model for modgraph.

Every installed package version ends in exactly one of four categories:
an available update, a blocked update, up to date, or incompatible with
the target platform version. :class:`UpdateReport` collects them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from modgraph.constants import (
    BLOCK_CHAIN_DEPENDENCY_CONFLICT,
    BLOCK_DEPENDENCY_CONSTRAINT_VIOLATION,
    BLOCK_MISSING_DEPENDENCY,
    INCOMPATIBLE_REASON_NO_VERSION,
    UPDATE_REASON_PRERELEASE,
    UPDATE_REASON_STABLE,
)
from modgraph.models.conflict import BlockingPackage, ChainConflict, MissingDependency
from modgraph.models.package import Package, PackageVersion
from modgraph.utils.version_utils import get_update_type


# ---------------------------------------------------------------------------
# Validation outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one candidate upgrade.

    At most one of ``blocking_packages``, ``missing_dependency`` and
    ``conflicting_package`` is populated, matching ``reason``.
    """

    valid: bool
    reason: Optional[str] = None
    blocking_packages: Tuple[BlockingPackage, ...] = ()
    missing_dependency: Optional[MissingDependency] = None
    conflicting_package: Optional[ChainConflict] = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def blocked_by(cls, blocker: BlockingPackage) -> ValidationResult:
        return cls(
            valid=False,
            reason=BLOCK_DEPENDENCY_CONSTRAINT_VIOLATION,
            blocking_packages=(blocker,),
        )

    @classmethod
    def missing(cls, dependency: MissingDependency) -> ValidationResult:
        return cls(
            valid=False,
            reason=BLOCK_MISSING_DEPENDENCY,
            missing_dependency=dependency,
        )

    @classmethod
    def chain_conflict(cls, conflict: ChainConflict) -> ValidationResult:
        return cls(
            valid=False,
            reason=BLOCK_CHAIN_DEPENDENCY_CONFLICT,
            conflicting_package=conflict,
        )

    @property
    def detail(self) -> Any:
        """The reason-specific record, or ``None`` when valid."""
        if self.blocking_packages:
            return self.blocking_packages[0]
        return self.missing_dependency or self.conflicting_package

    def detail_json(self) -> Dict[str, Any]:
        """Return the reason-specific fields of a blocked update entry."""
        if self.blocking_packages:
            return {"blocking_packages": [b.to_json() for b in self.blocking_packages]}
        if self.missing_dependency is not None:
            return {"missing_dependency": self.missing_dependency.to_json()}
        if self.conflicting_package is not None:
            return {"conflicting_package": self.conflicting_package.to_json()}
        return {}


# ---------------------------------------------------------------------------
# Per-package outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UpdateAvailable:
    """A validated upgrade for an installed version.

    Args:
        package: Package being updated.
        current: Installed version.
        recommended: Validated upgrade candidate.
        platform_versions: Visible platform versions ``recommended`` supports.
    """

    package: Package
    current: PackageVersion
    recommended: PackageVersion
    platform_versions: Tuple[str, ...] = ()

    @property
    def update_reason(self) -> str:
        if self.current.is_prerelease:
            return UPDATE_REASON_PRERELEASE
        return UPDATE_REASON_STABLE

    @property
    def update_type(self) -> str:
        return get_update_type(self.current.version, self.recommended.version)

    def to_json(self) -> Dict[str, Any]:
        return {
            "current_version": {
                "id": self.current.id,
                "package_id": self.package.id,
                "guid": self.package.guid,
                "name": self.package.name,
                "slug": self.package.slug,
                "version": self.current.version,
            },
            "recommended_version": {
                "id": self.recommended.id,
                "version": self.recommended.version,
                "download_link": self.recommended.download_link,
                "size_bytes": self.recommended.size_bytes,
                "extra_compat_flag": self.recommended.extra_compat_flag,
                "platform_versions": list(self.platform_versions),
            },
            "update_reason": self.update_reason,
            "update_type": self.update_type,
        }


@dataclass(frozen=True)
class BlockedUpdate:
    """An upgrade candidate rejected by constraint validation."""

    package: Package
    current: PackageVersion
    latest: PackageVersion
    validation: ValidationResult
    platform_versions: Tuple[str, ...] = ()

    @property
    def block_reason(self) -> Optional[str]:
        return self.validation.reason

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "current_version": {
                "id": self.current.id,
                "package_id": self.package.id,
                "guid": self.package.guid,
                "name": self.package.name,
                "version": self.current.version,
            },
            "latest_version": {
                "id": self.latest.id,
                "version": self.latest.version,
                "platform_versions": list(self.platform_versions),
            },
            "block_reason": self.block_reason,
        }
        data.update(self.validation.detail_json())
        return data


@dataclass(frozen=True)
class UpToDate:
    """An installed version with no newer candidate that runs on the target."""

    package: Package
    current: PackageVersion
    platform_versions: Tuple[str, ...] = ()

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.current.id,
            "package_id": self.package.id,
            "guid": self.package.guid,
            "name": self.package.name,
            "version": self.current.version,
            "platform_versions": list(self.platform_versions),
        }


@dataclass(frozen=True)
class IncompatibleWithPlatform:
    """An installed version with no candidate and no support for the target."""

    package: Package
    current: PackageVersion
    reason: str = INCOMPATIBLE_REASON_NO_VERSION

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.current.id,
            "package_id": self.package.id,
            "guid": self.package.guid,
            "name": self.package.name,
            "version": self.current.version,
            "reason": self.reason,
            "latest_compatible_version": None,
        }


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass
class UpdateReport:
    """Categorized update-check result for one target platform version."""

    target_platform_version: str
    updates: List[UpdateAvailable] = field(default_factory=list)
    blocked_updates: List[BlockedUpdate] = field(default_factory=list)
    up_to_date: List[UpToDate] = field(default_factory=list)
    incompatible_with_platform: List[IncompatibleWithPlatform] = field(
        default_factory=list
    )

    @property
    def has_updates(self) -> bool:
        return bool(self.updates)

    @property
    def is_empty(self) -> bool:
        return not (
            self.updates
            or self.blocked_updates
            or self.up_to_date
            or self.incompatible_with_platform
        )

    def summary(self) -> Dict[str, int]:
        """Return the number of entries per category."""
        return {
            "updates": len(self.updates),
            "blocked_updates": len(self.blocked_updates),
            "up_to_date": len(self.up_to_date),
            "incompatible_with_platform": len(self.incompatible_with_platform),
        }

    def to_json(self) -> Dict[str, Any]:
        return {
            "target_platform_version": self.target_platform_version,
            "updates": [u.to_json() for u in self.updates],
            "blocked_updates": [b.to_json() for b in self.blocked_updates],
            "up_to_date": [u.to_json() for u in self.up_to_date],
            "incompatible_with_platform": [
                i.to_json() for i in self.incompatible_with_platform
            ],
        }
