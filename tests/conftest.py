"""Shared fixtures for modgraph tests.

The :class:`CatalogBuilder` fixture assembles small in-memory catalogs.
Every record it creates is published in the past unless told otherwise,
and all views it hands out evaluate visibility at :attr:`CatalogBuilder.NOW`.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import pytest

from modgraph.core.catalog import CatalogView, InMemoryCatalog
from modgraph.models.package import (
    DependencyDeclaration,
    Package,
    PackageVersion,
    PlatformVersion,
    ResolvedCandidate,
)
from modgraph.utils.version_utils import satisfies

_UNSET = object()


class CatalogBuilder:
    """Fluent helper for building test catalogs."""

    PAST = datetime(2024, 1, 1, tzinfo=timezone.utc)
    NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)
    FUTURE = datetime(2030, 1, 1, tzinfo=timezone.utc)

    def __init__(self) -> None:
        self.packages: List[Package] = []
        self.versions: List[PackageVersion] = []
        self.platforms: List[PlatformVersion] = []
        self.declarations: List[DependencyDeclaration] = []
        self.candidates: List[ResolvedCandidate] = []
        self._ids: Dict[str, itertools.count] = {}

    def _next(self, kind: str) -> int:
        return next(self._ids.setdefault(kind, itertools.count(1)))

    def platform(self, version: str = "3.11.5", published_at=_UNSET) -> PlatformVersion:
        record = PlatformVersion(
            id=self._next("platform"),
            version=version,
            published_at=self.PAST if published_at is _UNSET else published_at,
        )
        self.platforms.append(record)
        return record

    def package(
        self,
        guid: str,
        *,
        name: Optional[str] = None,
        published_at=_UNSET,
        disabled: bool = False,
    ) -> Package:
        record = Package(
            id=self._next("package"),
            guid=guid,
            name=name or guid.title(),
            slug=guid.lower(),
            published_at=self.PAST if published_at is _UNSET else published_at,
            disabled=disabled,
        )
        self.packages.append(record)
        return record

    def version(
        self,
        package: Package,
        version: str,
        *,
        platforms: Iterable[str] = ("3.11.5",),
        published_at=_UNSET,
        disabled: bool = False,
    ) -> PackageVersion:
        record = PackageVersion(
            id=self._next("version"),
            package_id=package.id,
            version=version,
            published_at=self.PAST if published_at is _UNSET else published_at,
            disabled=disabled,
            download_link=f"https://example.invalid/{package.guid}/{version}.zip",
            size_bytes=1024,
            platform_versions=tuple(platforms),
        )
        self.versions.append(record)
        return record

    def depends(
        self,
        owner: PackageVersion,
        target: Package,
        constraint: str,
        *,
        candidates: Optional[Iterable[PackageVersion]] = None,
    ) -> DependencyDeclaration:
        """Declare a dependency and record its resolved candidates.

        Without explicit *candidates*, every enabled, published version of
        *target* added so far that satisfies *constraint* is resolved, in
        the order the versions were added.
        """
        declaration = DependencyDeclaration(
            id=self._next("declaration"),
            owner_version_id=owner.id,
            target_package_id=target.id,
            constraint=constraint,
        )
        self.declarations.append(declaration)

        if candidates is None:
            candidates = [
                v
                for v in self.versions
                if v.package_id == target.id
                and not v.disabled
                and v.published_at is not None
                and v.published_at <= self.NOW
                and satisfies(v.version, constraint)
            ]
        for resolved in candidates:
            self.candidates.append(
                ResolvedCandidate(
                    id=self._next("candidate"),
                    declaration_id=declaration.id,
                    version_id=resolved.id,
                )
            )
        return declaration

    def build(self) -> InMemoryCatalog:
        return InMemoryCatalog(
            packages=self.packages,
            versions=self.versions,
            platform_versions=self.platforms,
            declarations=self.declarations,
            candidates=self.candidates,
        )

    def view(self, now: Optional[datetime] = None) -> CatalogView:
        return CatalogView(self.build(), now or self.NOW)


@pytest.fixture
def builder() -> CatalogBuilder:
    """Return an empty catalog builder with one published platform version."""
    catalog = CatalogBuilder()
    catalog.platform("3.11.5")
    return catalog


@pytest.fixture
def snapshot_data() -> Dict[str, list]:
    """Return a small JSON-shaped catalog snapshot."""
    return {
        "packages": [
            {"id": 1, "guid": "com.example.core", "name": "Core", "slug": "core",
             "published_at": "2024-01-01T00:00:00Z"},
            {"id": 2, "guid": "com.example.lib", "name": "Lib", "slug": "lib",
             "published_at": "2024-01-01T00:00:00Z"},
        ],
        "versions": [
            {"id": 10, "package_id": 1, "version": "1.0.0",
             "published_at": "2024-01-02T00:00:00Z", "platform_versions": ["3.11.5"]},
            {"id": 20, "package_id": 2, "version": "1.0.0",
             "published_at": "2024-01-02T00:00:00Z", "platform_versions": ["3.11.5"]},
            {"id": 21, "package_id": 2, "version": "1.2.0",
             "published_at": "2024-01-03T00:00:00Z", "platform_versions": ["3.11.5"],
             "download_link": "https://example.invalid/lib-1.2.0.zip",
             "size_bytes": 2048, "extra_compat_flag": "yes"},
        ],
        "platform_versions": [
            {"id": 1, "version": "3.11.5", "published_at": "2024-01-01T00:00:00Z"},
        ],
        "dependencies": [
            {"id": 100, "owner_version_id": 10, "target_package_id": 2,
             "constraint": "^1.0.0"},
        ],
        "resolved": [
            {"id": 1000, "declaration_id": 100, "version_id": 20},
            {"id": 1001, "declaration_id": 100, "version_id": 21},
        ],
    }
