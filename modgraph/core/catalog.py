"""Catalog access for modgraph.

The resolution engine reads catalog data through a
:class:`CatalogRepository`; it never writes. :class:`InMemoryCatalog` is
the bundled implementation, built from a JSON snapshot by
:func:`load_catalog`. Engine components do not talk to the repository
directly but through a :class:`CatalogView`, which pins a single ``now``
for the request and only ever hands out visible records.

Snapshot layout::

    {
      "packages":          [{"id", "guid", "name", "slug", "published_at", "disabled"}],
      "versions":          [{"id", "package_id", "version", "published_at", "disabled",
                             "download_link", "size_bytes", "extra_compat_flag",
                             "platform_versions": ["3.11.5", ...]}],
      "platform_versions": [{"id", "version", "published_at"}],
      "dependencies":      [{"id", "owner_version_id", "target_package_id", "constraint"}],
      "resolved":          [{"id", "declaration_id", "version_id"}]
    }
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from modgraph.constants import CATALOG_SECTIONS, DEFAULT_EXTRA_COMPAT_FLAG
from modgraph.exceptions import CatalogError
from modgraph.models.package import (
    DependencyDeclaration,
    Package,
    PackageVersion,
    PlatformVersion,
    ResolvedCandidate,
    parse_timestamp,
)
from modgraph.utils.filesystem import PathLike, safe_read_file
from modgraph.utils.logger import get_logger
from modgraph.utils.version_utils import sort_versions

logger = get_logger("catalog")

# Public API
__all__ = [
    "CatalogRepository",
    "InMemoryCatalog",
    "CatalogView",
    "load_catalog",
    "catalog_from_dict",
]

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Repository contract
# ---------------------------------------------------------------------------


class CatalogRepository(ABC):
    """Raw, visibility-unaware lookups over catalog data."""

    @abstractmethod
    def get_package(self, package_id: int) -> Optional[Package]:
        """Return the package with *package_id*."""

    @abstractmethod
    def find_package_by_guid(self, guid: str) -> Optional[Package]:
        """Return the package with *guid*."""

    @abstractmethod
    def list_package_versions(self, package_id: int) -> List[PackageVersion]:
        """Return every version of a package, ascending by id."""

    @abstractmethod
    def get_version(self, version_id: int) -> Optional[PackageVersion]:
        """Return the package version with *version_id*."""

    def get_versions(self, version_ids: Iterable[int]) -> List[PackageVersion]:
        """Return the versions for an id batch, in request order.

        Unknown ids are skipped.
        """
        found = (self.get_version(version_id) for version_id in version_ids)
        return [version for version in found if version is not None]

    @abstractmethod
    def list_declarations(self, version_id: int) -> List[DependencyDeclaration]:
        """Return the declarations owned by a version, ascending by id."""

    @abstractmethod
    def list_candidates(self, declaration_id: int) -> List[ResolvedCandidate]:
        """Return the resolved candidates for a declaration, ascending by id."""

    @abstractmethod
    def find_platform_version(self, version: str) -> Optional[PlatformVersion]:
        """Return the platform version record for a version string."""


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


def _index_unique(records: Iterable[T], key: Callable[[T], Any], kind: str) -> Dict[Any, T]:
    index: Dict[Any, T] = {}
    for record in records:
        k = key(record)
        if k in index:
            raise CatalogError(f"Duplicate {kind} {k!r}", record=record)
        index[k] = record
    return index


class InMemoryCatalog(CatalogRepository):
    """Catalog repository over an immutable in-memory snapshot.

    Args:
        packages: Package records.
        versions: Package version records.
        platform_versions: Platform version records.
        declarations: Dependency declarations.
        candidates: Precomputed resolved candidates.

    Raises:
        CatalogError: On duplicate ids or references to unknown records.
    """

    def __init__(
        self,
        packages: Iterable[Package] = (),
        versions: Iterable[PackageVersion] = (),
        platform_versions: Iterable[PlatformVersion] = (),
        declarations: Iterable[DependencyDeclaration] = (),
        candidates: Iterable[ResolvedCandidate] = (),
    ) -> None:
        self._packages = _index_unique(packages, lambda p: p.id, "package id")
        self._packages_by_guid = _index_unique(
            self._packages.values(), lambda p: p.guid, "package guid"
        )
        self._versions = _index_unique(versions, lambda v: v.id, "version id")
        self._platforms = _index_unique(
            platform_versions, lambda p: p.version, "platform version"
        )
        self._declarations = _index_unique(
            declarations, lambda d: d.id, "declaration id"
        )
        candidate_index = _index_unique(candidates, lambda c: c.id, "candidate id")

        self._versions_by_package: Dict[int, List[PackageVersion]] = {}
        for version in sorted(self._versions.values(), key=lambda v: v.id):
            if version.package_id not in self._packages:
                raise CatalogError(
                    f"Version {version.id} references unknown package "
                    f"{version.package_id}",
                    record=version,
                )
            self._versions_by_package.setdefault(version.package_id, []).append(version)

        self._declarations_by_owner: Dict[int, List[DependencyDeclaration]] = {}
        for declaration in sorted(self._declarations.values(), key=lambda d: d.id):
            if declaration.owner_version_id not in self._versions:
                raise CatalogError(
                    f"Declaration {declaration.id} has unknown owner version "
                    f"{declaration.owner_version_id}",
                    record=declaration,
                )
            self._declarations_by_owner.setdefault(
                declaration.owner_version_id, []
            ).append(declaration)

        self._candidates_by_declaration: Dict[int, List[ResolvedCandidate]] = {}
        for candidate in sorted(candidate_index.values(), key=lambda c: c.id):
            if candidate.declaration_id not in self._declarations:
                raise CatalogError(
                    f"Resolved candidate {candidate.id} references unknown "
                    f"declaration {candidate.declaration_id}",
                    record=candidate,
                )
            self._candidates_by_declaration.setdefault(
                candidate.declaration_id, []
            ).append(candidate)

        logger.debug(
            "Catalog indexed: %d packages, %d versions, %d declarations, %d candidates",
            len(self._packages),
            len(self._versions),
            len(self._declarations),
            len(candidate_index),
        )

    def get_package(self, package_id: int) -> Optional[Package]:
        return self._packages.get(package_id)

    def find_package_by_guid(self, guid: str) -> Optional[Package]:
        return self._packages_by_guid.get(guid)

    def list_package_versions(self, package_id: int) -> List[PackageVersion]:
        return list(self._versions_by_package.get(package_id, ()))

    def get_version(self, version_id: int) -> Optional[PackageVersion]:
        return self._versions.get(version_id)

    def list_declarations(self, version_id: int) -> List[DependencyDeclaration]:
        return list(self._declarations_by_owner.get(version_id, ()))

    def list_candidates(self, declaration_id: int) -> List[ResolvedCandidate]:
        return list(self._candidates_by_declaration.get(declaration_id, ()))

    def find_platform_version(self, version: str) -> Optional[PlatformVersion]:
        return self._platforms.get(version)


# ---------------------------------------------------------------------------
# Visibility-filtered view
# ---------------------------------------------------------------------------


class CatalogView:
    """Visible-only access to a repository at a fixed instant.

    Args:
        repository: Underlying catalog repository.
        now: Evaluation instant; defaults to the current UTC time.
    """

    def __init__(
        self,
        repository: CatalogRepository,
        now: Optional[datetime] = None,
    ) -> None:
        self.repository = repository
        self.now: datetime = parse_timestamp(now) or datetime.now(timezone.utc)
        self._platform_cache: Dict[str, bool] = {}

    # -- packages and versions -------------------------------------------

    def visible_package(self, package_id: int) -> Optional[Package]:
        """Return the package if it is visible."""
        package = self.repository.get_package(package_id)
        if package is None or not package.is_visible(self.now):
            return None
        return package

    def visible_package_by_guid(self, guid: str) -> Optional[Package]:
        """Return the package with *guid* if it is visible."""
        package = self.repository.find_package_by_guid(guid)
        if package is None or not package.is_visible(self.now):
            return None
        return package

    def visible_version(self, version_id: int) -> Optional[PackageVersion]:
        """Return the version if it and its package are both visible."""
        version = self.repository.get_version(version_id)
        if version is None or not version.is_visible(self.now):
            return None
        if self.visible_package(version.package_id) is None:
            return None
        return version

    def visible_versions_of(self, package_id: int) -> List[PackageVersion]:
        """Return every visible version of a visible package, ascending by id."""
        if self.visible_package(package_id) is None:
            return []
        return [
            version
            for version in self.repository.list_package_versions(package_id)
            if version.is_visible(self.now)
        ]

    def find_visible_version(
        self,
        package_id: int,
        version: str,
    ) -> Optional[PackageVersion]:
        """Return the visible version of a package whose string equals *version*."""
        for candidate in self.visible_versions_of(package_id):
            if candidate.version == version:
                return candidate
        return None

    # -- dependency data --------------------------------------------------

    def declarations(self, version_id: int) -> List[DependencyDeclaration]:
        return self.repository.list_declarations(version_id)

    def candidates(self, declaration_id: int) -> List[ResolvedCandidate]:
        return self.repository.list_candidates(declaration_id)

    # -- platform versions -------------------------------------------------

    def published_platform_version(self, version: str) -> Optional[PlatformVersion]:
        """Return the platform version if it exists and is published."""
        platform = self.repository.find_platform_version(version)
        if platform is None or not platform.is_visible(self.now):
            return None
        return platform

    def _platform_visible(self, version: str) -> bool:
        if version not in self._platform_cache:
            self._platform_cache[version] = (
                self.published_platform_version(version) is not None
            )
        return self._platform_cache[version]

    def is_platform_compatible(
        self,
        version: PackageVersion,
        platform_version: str,
    ) -> bool:
        """Return True if *version* supports a published *platform_version*."""
        return version.supports_platform(platform_version) and self._platform_visible(
            platform_version
        )

    def compatible_platform_versions(self, version: PackageVersion) -> Tuple[str, ...]:
        """Return the published platform versions *version* supports, newest first."""
        visible = [p for p in version.platform_versions if self._platform_visible(p)]
        return tuple(sort_versions(visible, reverse=True))


# ---------------------------------------------------------------------------
# Snapshot loading
# ---------------------------------------------------------------------------


def _build_package(raw: Mapping[str, Any]) -> Package:
    return Package(
        id=int(raw["id"]),
        guid=str(raw["guid"]),
        name=str(raw.get("name", raw["guid"])),
        slug=str(raw.get("slug", "")),
        published_at=parse_timestamp(raw.get("published_at")),
        disabled=bool(raw.get("disabled", False)),
    )


def _build_version(raw: Mapping[str, Any]) -> PackageVersion:
    return PackageVersion(
        id=int(raw["id"]),
        package_id=int(raw["package_id"]),
        version=str(raw["version"]),
        published_at=parse_timestamp(raw.get("published_at")),
        disabled=bool(raw.get("disabled", False)),
        download_link=str(raw.get("download_link", "")),
        size_bytes=int(raw.get("size_bytes", 0)),
        extra_compat_flag=str(raw.get("extra_compat_flag", DEFAULT_EXTRA_COMPAT_FLAG)),
        platform_versions=tuple(str(p) for p in raw.get("platform_versions", ())),
    )


def _build_platform_version(raw: Mapping[str, Any]) -> PlatformVersion:
    return PlatformVersion(
        id=int(raw["id"]),
        version=str(raw["version"]),
        published_at=parse_timestamp(raw.get("published_at")),
    )


def _build_declaration(raw: Mapping[str, Any]) -> DependencyDeclaration:
    return DependencyDeclaration(
        id=int(raw["id"]),
        owner_version_id=int(raw["owner_version_id"]),
        target_package_id=int(raw["target_package_id"]),
        constraint=str(raw.get("constraint", "")),
    )


def _build_candidate(raw: Mapping[str, Any]) -> ResolvedCandidate:
    return ResolvedCandidate(
        id=int(raw["id"]),
        declaration_id=int(raw["declaration_id"]),
        version_id=int(raw["version_id"]),
    )


_BUILDERS: Dict[str, Callable[[Mapping[str, Any]], Any]] = {
    "packages": _build_package,
    "versions": _build_version,
    "platform_versions": _build_platform_version,
    "dependencies": _build_declaration,
    "resolved": _build_candidate,
}


def _build_section(
    data: Mapping[str, Any],
    section: str,
    source: Optional[str],
) -> List[Any]:
    raw_records = data.get(section, [])
    if not isinstance(raw_records, list):
        raise CatalogError(f"Section {section!r} must be a list", source=source)

    builder = _BUILDERS[section]
    records = []
    for raw in raw_records:
        if not isinstance(raw, Mapping):
            raise CatalogError(
                f"Entries in {section!r} must be objects", source=source, record=raw
            )
        try:
            records.append(builder(raw))
        except KeyError as exc:
            raise CatalogError(
                f"Missing field {exc.args[0]!r} in {section!r} entry",
                source=source,
                record=raw,
            ) from exc
        except (TypeError, ValueError) as exc:
            raise CatalogError(
                f"Invalid {section!r} entry: {exc}", source=source, record=raw
            ) from exc
    return records


def catalog_from_dict(
    data: Mapping[str, Any],
    *,
    source: Optional[str] = None,
) -> InMemoryCatalog:
    """Build an :class:`InMemoryCatalog` from decoded snapshot data.

    Args:
        data: Mapping with the snapshot sections.
        source: Where the data came from, for error messages.

    Raises:
        CatalogError: If the data is not a valid snapshot.
    """
    if not isinstance(data, Mapping):
        raise CatalogError("Catalog snapshot must be a JSON object", source=source)

    unknown = sorted(set(data) - set(CATALOG_SECTIONS))
    if unknown:
        raise CatalogError(
            f"Unknown catalog section(s): {', '.join(unknown)}", source=source
        )

    sections = {section: _build_section(data, section, source) for section in CATALOG_SECTIONS}

    try:
        return InMemoryCatalog(
            packages=sections["packages"],
            versions=sections["versions"],
            platform_versions=sections["platform_versions"],
            declarations=sections["dependencies"],
            candidates=sections["resolved"],
        )
    except CatalogError as exc:
        if exc.source is None and source is not None:
            exc.source = source
            exc.details["source"] = source
        raise


def load_catalog(path: PathLike) -> InMemoryCatalog:
    """Load a catalog snapshot from a JSON file.

    Args:
        path: Snapshot file path.

    Returns:
        Indexed in-memory catalog.

    Raises:
        FileOperationError: If the file cannot be read.
        CatalogError: If the content is not a valid snapshot.
    """
    source = str(path)
    text = safe_read_file(path)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Invalid JSON: {exc}", source=source) from exc

    catalog = catalog_from_dict(data, source=source)
    logger.info("Loaded catalog from %s", source)
    return catalog
