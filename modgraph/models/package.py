"""
Catalog data model for modgraph.

This module defines the read-only records the resolution engine works on:
packages, their released versions, platform versions, dependency
declarations and the precomputed resolved candidates. The engine never
creates or mutates catalog records; every instance is frozen.

Visibility is evaluated against an explicit instant so a single request
sees one consistent clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

from modgraph.constants import DEFAULT_EXTRA_COMPAT_FLAG
from modgraph.utils.version_utils import (
    VersionKey,
    make_version_key,
    parse_version,
    prerelease_label,
)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a catalog timestamp into an aware UTC ``datetime``.

    Naive values are taken to be UTC. A trailing ``Z`` is accepted.

    Args:
        value: ISO 8601 string, ``datetime`` or ``None``.

    Returns:
        Aware ``datetime`` or ``None``.

    Raises:
        ValueError: If the string is not an ISO 8601 timestamp.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _is_published(published_at: Optional[datetime], now: datetime) -> bool:
    return published_at is not None and published_at <= now


@dataclass(frozen=True)
class Package:
    """
    A distributable unit in the catalog.

    Attributes:
        id: Numeric package id.
        guid: Globally unique string identifier.
        name: Display name.
        slug: URL slug.
        published_at: Publication instant; ``None`` means unpublished.
        disabled: Whether the package has been disabled.
    """

    id: int
    guid: str
    name: str
    slug: str = ""
    published_at: Optional[datetime] = None
    disabled: bool = False

    def is_visible(self, now: datetime) -> bool:
        """Return True if the package is published by *now* and enabled."""
        return not self.disabled and _is_published(self.published_at, now)


@dataclass(frozen=True)
class PackageVersion:
    """
    One released version of a :class:`Package`.

    The semantic version is decomposed from ``version`` on construction.
    Visibility here covers only the version's own flags; the owning
    package must be checked as well (see
    :class:`modgraph.core.catalog.CatalogView`).

    Attributes:
        id: Numeric version id.
        package_id: Owning package id.
        version: Version string as published.
        published_at: Publication instant; ``None`` means unpublished.
        disabled: Whether the version has been disabled.
        download_link: Where the version can be downloaded.
        size_bytes: Download size.
        extra_compat_flag: Free-form compatibility flag.
        platform_versions: Platform version strings this release declares
            compatibility with.
        major: Decomposed major component.
        minor: Decomposed minor component.
        patch: Decomposed patch component.
        prerelease_labels: Dotted prerelease label, ``""`` when stable.

    Raises:
        ValueError: If ``version`` is not a semantic version.
    """

    id: int
    package_id: int
    version: str
    published_at: Optional[datetime] = None
    disabled: bool = False
    download_link: str = ""
    size_bytes: int = 0
    extra_compat_flag: str = DEFAULT_EXTRA_COMPAT_FLAG
    platform_versions: Tuple[str, ...] = ()

    major: int = field(init=False, repr=False)
    minor: int = field(init=False, repr=False)
    patch: int = field(init=False, repr=False)
    prerelease_labels: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        parsed = parse_version(self.version)
        if parsed is None:
            raise ValueError(f"Invalid version {self.version!r} for version id {self.id}")

        object.__setattr__(self, "major", parsed.major)
        object.__setattr__(self, "minor", parsed.minor)
        object.__setattr__(self, "patch", parsed.patch)
        object.__setattr__(self, "prerelease_labels", prerelease_label(parsed))
        object.__setattr__(self, "platform_versions", tuple(self.platform_versions))

    # ------------------------------------------------------------------
    # Version state
    # ------------------------------------------------------------------

    @property
    def is_prerelease(self) -> bool:
        """True if the version carries a prerelease label."""
        return self.prerelease_labels != ""

    @property
    def is_stable(self) -> bool:
        """True if the version has no prerelease label."""
        return not self.is_prerelease

    @property
    def triple(self) -> Tuple[int, int, int]:
        """The ``(major, minor, patch)`` release triple."""
        return (self.major, self.minor, self.patch)

    @property
    def sort_key(self) -> VersionKey:
        """Catalog ordering key; stable ranks above prereleases."""
        return make_version_key(
            self.major, self.minor, self.patch, self.prerelease_labels
        )

    def is_newer_than(self, other: PackageVersion) -> bool:
        """
        Return True if this version is an upgrade over *other*.

        A later release triple is always newer. At an identical triple
        only a prerelease *other* can be superseded, either by the stable
        release or by a lexicographically later prerelease label.
        """
        if self.triple != other.triple:
            return self.triple > other.triple

        if other.is_stable:
            return False

        return self.is_stable or self.prerelease_labels > other.prerelease_labels

    def is_visible(self, now: datetime) -> bool:
        """Return True if the version's own flags make it visible at *now*."""
        return not self.disabled and _is_published(self.published_at, now)

    def supports_platform(self, platform_version: str) -> bool:
        """Return True if *platform_version* is in the declared set."""
        return platform_version in self.platform_versions


@dataclass(frozen=True)
class PlatformVersion:
    """
    A release of the host platform that package versions target.

    Attributes:
        id: Numeric id.
        version: Platform version string.
        published_at: Publication instant; ``None`` means unpublished.
    """

    id: int
    version: str
    published_at: Optional[datetime] = None

    def is_visible(self, now: datetime) -> bool:
        """Return True if the platform version is published by *now*."""
        return _is_published(self.published_at, now)


@dataclass(frozen=True)
class DependencyDeclaration:
    """A package version's requirement on another package."""

    id: int
    owner_version_id: int
    target_package_id: int
    constraint: str


@dataclass(frozen=True)
class ResolvedCandidate:
    """A precomputed version satisfying one dependency declaration."""

    id: int
    declaration_id: int
    version_id: int
