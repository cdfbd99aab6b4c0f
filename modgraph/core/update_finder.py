"""Upgrade candidate lookup.

:func:`find_candidate` picks the upgrade to offer for one installed
version on a target platform version. :func:`find_satisfying_version`
answers the related question the validator asks about a candidate's own
dependencies: is there any visible version of a package, on the target
platform, inside a constraint.

Both order versions the same way: highest release triple first, a stable
release before prereleases of the same triple, then prerelease labels
ascending.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from modgraph.core.catalog import CatalogView
from modgraph.models.package import PackageVersion
from modgraph.utils.logger import get_logger
from modgraph.utils.version_utils import satisfies

logger = get_logger("update_finder")


def preference_key(version: PackageVersion) -> Tuple[int, int, int, int, str]:
    """Sort key ranking preferred versions first under ascending sort.

    Highest triple first, stable before prerelease, then ascending label.
    """
    return (
        -version.major,
        -version.minor,
        -version.patch,
        0 if version.is_stable else 1,
        version.prerelease_labels,
    )


def _best(versions: Iterable[PackageVersion]) -> Optional[PackageVersion]:
    ranked: List[PackageVersion] = sorted(versions, key=preference_key)
    return ranked[0] if ranked else None


def platform_versions_of(
    view: CatalogView,
    package_id: int,
    platform_version: str,
) -> List[PackageVersion]:
    """Return the visible versions of a package that run on *platform_version*."""
    return [
        version
        for version in view.visible_versions_of(package_id)
        if view.is_platform_compatible(version, platform_version)
    ]


def find_candidate(
    view: CatalogView,
    current: PackageVersion,
    platform_version: str,
) -> Optional[PackageVersion]:
    """Find the upgrade to recommend for *current*.

    Only visible versions of the same package that support the target
    platform version are considered. A stable *current* is only offered
    stable candidates.

    Args:
        view: Visibility-filtered catalog view.
        current: Installed version.
        platform_version: Target platform version string.

    Returns:
        The preferred newer version, or ``None``.

    Example::

        >>> # installed 1.0.0-beta.1; 1.0.0 and 1.0.0-beta.2 both exist
        >>> find_candidate(view, beta1, "3.11.5").version
        '1.0.0'
    """
    candidates = [
        version
        for version in platform_versions_of(view, current.package_id, platform_version)
        if version.id != current.id
        and (current.is_prerelease or version.is_stable)
        and version.is_newer_than(current)
    ]

    best = _best(candidates)
    if best is None:
        logger.debug(
            "No upgrade for version %s (%s) on %s",
            current.id,
            current.version,
            platform_version,
        )
    return best


def find_satisfying_version(
    view: CatalogView,
    package_id: int,
    constraint: str,
    platform_version: str,
) -> Optional[PackageVersion]:
    """Return the preferred visible version of a package inside *constraint*.

    Malformed constraints match nothing.
    """
    return _best(
        version
        for version in platform_versions_of(view, package_id, platform_version)
        if satisfies(version.version, constraint)
    )
