"""Constraint validation for candidate upgrades.

Before an upgrade is recommended it must survive three checks, run in
order and stopping at the first failure:

1. **Incoming**: every other installed version that depends on the
   package must accept the candidate's version.
2. **Outgoing**: every dependency the candidate declares must be
   satisfiable by some visible version on the target platform.
3. **Transitive**: no installed version may fail a constraint recorded
   anywhere in the candidate's dependency closure.
"""

from __future__ import annotations

from typing import Optional, Sequence

from modgraph.core.catalog import CatalogView
from modgraph.core.tree_builder import TreeBuilder
from modgraph.core.update_finder import find_satisfying_version
from modgraph.exceptions import CatalogError
from modgraph.models.conflict import BlockingPackage, ChainConflict, MissingDependency
from modgraph.models.package import Package, PackageVersion
from modgraph.models.report import ValidationResult
from modgraph.utils.logger import get_logger
from modgraph.utils.version_utils import satisfies

logger = get_logger("validator")


class ConstraintValidator:
    """Decides whether a candidate upgrade keeps the installed set consistent.

    Args:
        view: Visibility-filtered catalog view.
        tree_builder: Builder used to collect the candidate's transitive
            constraints. Defaults to one over *view*.
    """

    def __init__(
        self,
        view: CatalogView,
        tree_builder: Optional[TreeBuilder] = None,
    ) -> None:
        self.view = view
        self.tree_builder = tree_builder or TreeBuilder(view)

    def validate(
        self,
        current: PackageVersion,
        candidate: PackageVersion,
        platform_version: str,
        installed: Sequence[PackageVersion],
    ) -> ValidationResult:
        """Run the incoming, outgoing and transitive checks in order."""
        for check in (
            lambda: self.check_incoming(current, candidate, installed),
            lambda: self.check_outgoing(candidate, platform_version),
            lambda: self.check_transitive(candidate, installed),
        ):
            result = check()
            if not result.valid:
                logger.debug(
                    "Upgrade %s -> %s blocked: %s",
                    current.version,
                    candidate.version,
                    result.reason,
                )
                return result

        return ValidationResult.ok()

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    def check_incoming(
        self,
        current: PackageVersion,
        candidate: PackageVersion,
        installed: Sequence[PackageVersion],
    ) -> ValidationResult:
        """Fail if another installed version's constraint rejects *candidate*."""
        for other in installed:
            if other.id == current.id:
                continue

            for declaration in self.view.declarations(other.id):
                if declaration.target_package_id != current.package_id:
                    continue
                if satisfies(candidate.version, declaration.constraint):
                    continue

                owner = self._package(other)
                return ValidationResult.blocked_by(
                    BlockingPackage(
                        package_id=other.package_id,
                        guid=owner.guid,
                        name=owner.name,
                        current_version=other.version,
                        constraint=declaration.constraint,
                        incompatible_with=candidate.version,
                    )
                )

        return ValidationResult.ok()

    def check_outgoing(
        self,
        candidate: PackageVersion,
        platform_version: str,
    ) -> ValidationResult:
        """Fail if one of *candidate*'s dependencies cannot be satisfied."""
        for declaration in self.view.declarations(candidate.id):
            satisfying = find_satisfying_version(
                self.view,
                declaration.target_package_id,
                declaration.constraint,
                platform_version,
            )
            if satisfying is None:
                return ValidationResult.missing(
                    MissingDependency(
                        package_id=declaration.target_package_id,
                        constraint=declaration.constraint,
                    )
                )

        return ValidationResult.ok()

    def check_transitive(
        self,
        candidate: PackageVersion,
        installed: Sequence[PackageVersion],
    ) -> ValidationResult:
        """Fail if an installed version breaks a constraint in *candidate*'s closure."""
        constraints = self.tree_builder.collect_constraints(candidate.id)

        for version in installed:
            for constraint in constraints.constraints_for(version.package_id):
                if satisfies(version.version, constraint):
                    continue

                package = self._package(version)
                return ValidationResult.chain_conflict(
                    ChainConflict(
                        package_id=version.package_id,
                        guid=package.guid,
                        name=package.name,
                        current_version=version.version,
                        required_constraint=constraint,
                    )
                )

        return ValidationResult.ok()

    def _package(self, version: PackageVersion) -> Package:
        package = self.view.repository.get_package(version.package_id)
        if package is None:
            raise CatalogError(
                f"Package {version.package_id} missing from catalog", record=version
            )
        return package
