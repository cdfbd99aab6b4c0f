"""Update checking for a set of installed packages.

For every installed version, :class:`UpdateChecker` looks for an upgrade
that runs on the target platform version and validates it against the
rest of the installed set. Each version lands in exactly one category:

- no candidate, current runs on the target: **up to date**
- no candidate, current does not run on the target: **incompatible**
- candidate passes validation: **update available**
- candidate fails validation: **blocked**
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence, Union

from modgraph.constants import DEFAULT_CANDIDATE_SELECTION, DEFAULT_CONSTRAINT_SCOPE
from modgraph.core.catalog import CatalogRepository, CatalogView
from modgraph.core.identifiers import IdentifierResolver, require_identifier_pairs
from modgraph.core.tree_builder import TreeBuilder
from modgraph.core.update_finder import find_candidate
from modgraph.core.validator import ConstraintValidator
from modgraph.exceptions import CatalogError, ValidationError
from modgraph.models.package import Package, PackageVersion
from modgraph.models.report import (
    BlockedUpdate,
    IncompatibleWithPlatform,
    UpdateAvailable,
    UpdateReport,
    UpToDate,
)
from modgraph.utils.logger import get_logger

logger = get_logger("update_checker")

UpdateOutcome = Union[UpdateAvailable, BlockedUpdate, UpToDate, IncompatibleWithPlatform]


class UpdateChecker:
    """Categorizes installed package versions for a target platform version.

    Args:
        repository: Catalog to check against.
        candidate_selection: Representative candidate rule used when
            expanding a candidate's dependency closure.
        constraint_scope: Accumulator scope for that builder. The
            transitive check itself always collects globally.
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

    # ==================================================================
    # Public API
    # ==================================================================

    def check(
        self,
        mods: Optional[str],
        platform_version: Optional[str],
    ) -> UpdateReport:
        """Check every installed version named in *mods*.

        Args:
            mods: Comma-separated ``identifier:version`` pairs.
            platform_version: Target platform version string.

        Returns:
            The categorized report. Empty when nothing in *mods* resolves.

        Raises:
            ValidationError: If either argument is missing, *mods* has no
                well-formed pair, or the platform version is unknown or
                unpublished.
        """
        if not mods or not mods.strip() or not platform_version or not platform_version.strip():
            raise ValidationError(
                "You must provide both the mods parameter and the target "
                "platform version.",
                parameter="mods" if not mods or not mods.strip() else "platform_version",
            )

        pairs = require_identifier_pairs(mods)
        platform_version = platform_version.strip()

        view = CatalogView(self.repository, self.now)
        if view.published_platform_version(platform_version) is None:
            raise ValidationError(
                "Platform version not found or not published.",
                parameter="platform_version",
                value=platform_version,
            )

        report = UpdateReport(target_platform_version=platform_version)
        installed = IdentifierResolver(view).resolve(pairs)
        if not installed:
            logger.info("No requested package version is visible in the catalog")
            return report

        validator = ConstraintValidator(
            view,
            TreeBuilder(
                view,
                candidate_selection=self.candidate_selection,
                constraint_scope=self.constraint_scope,
            ),
        )

        for current in installed:
            outcome = self.check_version(view, validator, current, platform_version, installed)
            self._file(report, outcome)

        logger.info("Update check for %s: %s", platform_version, report.summary())
        return report

    def check_version(
        self,
        view: CatalogView,
        validator: ConstraintValidator,
        current: PackageVersion,
        platform_version: str,
        installed: Sequence[PackageVersion],
    ) -> UpdateOutcome:
        """Return the category for a single installed version."""
        package = self._package(view, current)
        candidate = find_candidate(view, current, platform_version)

        if candidate is None:
            if view.is_platform_compatible(current, platform_version):
                return UpToDate(
                    package=package,
                    current=current,
                    platform_versions=view.compatible_platform_versions(current),
                )
            return IncompatibleWithPlatform(package=package, current=current)

        result = validator.validate(current, candidate, platform_version, installed)
        if result.valid:
            return UpdateAvailable(
                package=package,
                current=current,
                recommended=candidate,
                platform_versions=view.compatible_platform_versions(candidate),
            )

        return BlockedUpdate(
            package=package,
            current=current,
            latest=candidate,
            validation=result,
            platform_versions=view.compatible_platform_versions(candidate),
        )

    # ==================================================================
    # Internal helpers
    # ==================================================================

    @staticmethod
    def _package(view: CatalogView, version: PackageVersion) -> Package:
        package = view.repository.get_package(version.package_id)
        if package is None:
            raise CatalogError(
                f"Package {version.package_id} missing from catalog", record=version
            )
        return package

    @staticmethod
    def _file(report: UpdateReport, outcome: UpdateOutcome) -> None:
        buckets: List[object]
        if isinstance(outcome, UpdateAvailable):
            buckets = report.updates
        elif isinstance(outcome, BlockedUpdate):
            buckets = report.blocked_updates
        elif isinstance(outcome, UpToDate):
            buckets = report.up_to_date
        else:
            buckets = report.incompatible_with_platform
        buckets.append(outcome)
