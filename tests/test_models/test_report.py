"""Unit tests for modgraph.models.report."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from modgraph.models.conflict import BlockingPackage, ChainConflict, MissingDependency
from modgraph.models.package import Package, PackageVersion
from modgraph.models.report import (
    BlockedUpdate,
    IncompatibleWithPlatform,
    UpdateAvailable,
    UpdateReport,
    UpToDate,
    ValidationResult,
)

PAST = datetime(2024, 1, 1, tzinfo=timezone.utc)
PACKAGE = Package(1, "com.example.mod", "Example", "example", PAST)


def _version(version_id: int, version: str) -> PackageVersion:
    return PackageVersion(
        id=version_id,
        package_id=1,
        version=version,
        published_at=PAST,
        download_link=f"https://example.invalid/{version}.zip",
        size_bytes=10,
        platform_versions=("3.11.5",),
    )


@pytest.mark.unit
class TestValidationResult:
    """Tests for ValidationResult constructors."""

    def test_ok(self) -> None:
        result = ValidationResult.ok()

        assert result.valid is True
        assert result.reason is None
        assert result.detail is None
        assert result.detail_json() == {}

    def test_blocked_by(self) -> None:
        blocker = BlockingPackage(2, "g", "N", "1.0.0", "^1.0.0", "2.0.0")
        result = ValidationResult.blocked_by(blocker)

        assert result.valid is False
        assert result.reason == "dependency_constraint_violation"
        assert result.detail is blocker
        assert result.detail_json() == {"blocking_packages": [blocker.to_json()]}

    def test_missing(self) -> None:
        missing = MissingDependency(3, "^9.0.0")
        result = ValidationResult.missing(missing)

        assert result.reason == "missing_dependency"
        assert result.detail_json() == {"missing_dependency": missing.to_json()}

    def test_chain_conflict(self) -> None:
        conflict = ChainConflict(4, "g", "N", "1.0.0", ">=2.0.0")
        result = ValidationResult.chain_conflict(conflict)

        assert result.reason == "chain_dependency_conflict"
        assert result.detail_json() == {"conflicting_package": conflict.to_json()}


@pytest.mark.unit
class TestCategoryRecords:
    """Tests for the per-package outcome records."""

    def test_update_available_stable(self) -> None:
        """Test a stable current version reports a plain newer version."""
        entry = UpdateAvailable(PACKAGE, _version(10, "1.0.0"), _version(11, "1.1.0"), ("3.11.5",))

        data = entry.to_json()

        assert data["current_version"] == {
            "id": 10,
            "package_id": 1,
            "guid": "com.example.mod",
            "name": "Example",
            "slug": "example",
            "version": "1.0.0",
        }
        assert data["recommended_version"] == {
            "id": 11,
            "version": "1.1.0",
            "download_link": "https://example.invalid/1.1.0.zip",
            "size_bytes": 10,
            "extra_compat_flag": "unknown",
            "platform_versions": ["3.11.5"],
        }
        assert data["update_reason"] == "newer_version_available"
        assert data["update_type"] == "minor"

    def test_update_available_prerelease(self) -> None:
        """Test a prerelease current version reports a prerelease reason."""
        entry = UpdateAvailable(PACKAGE, _version(10, "1.0.0-beta.1"), _version(11, "1.0.0"))

        assert entry.update_reason == "newer_prerelease_available"
        assert entry.update_type == "prerelease"

    def test_blocked_update(self) -> None:
        """Test the block detail is merged into the entry."""
        missing = MissingDependency(3, "^9.0.0")
        entry = BlockedUpdate(
            PACKAGE,
            _version(10, "1.0.0"),
            _version(12, "2.0.0"),
            ValidationResult.missing(missing),
            ("3.11.5",),
        )

        data = entry.to_json()

        assert data["current_version"]["version"] == "1.0.0"
        assert "slug" not in data["current_version"]
        assert data["latest_version"] == {
            "id": 12,
            "version": "2.0.0",
            "platform_versions": ["3.11.5"],
        }
        assert data["block_reason"] == "missing_dependency"
        assert data["missing_dependency"] == {"package_id": 3, "constraint": "^9.0.0"}

    def test_up_to_date(self) -> None:
        entry = UpToDate(PACKAGE, _version(10, "1.0.0"), ("3.11.5",))

        assert entry.to_json() == {
            "id": 10,
            "package_id": 1,
            "guid": "com.example.mod",
            "name": "Example",
            "version": "1.0.0",
            "platform_versions": ["3.11.5"],
        }

    def test_incompatible(self) -> None:
        data = IncompatibleWithPlatform(PACKAGE, _version(10, "2.0.0")).to_json()

        assert data["reason"] == "no_version_for_spt"
        assert data["latest_compatible_version"] is None
        assert data["version"] == "2.0.0"


@pytest.mark.unit
class TestUpdateReport:
    """Tests for UpdateReport."""

    def test_empty_report(self) -> None:
        report = UpdateReport("3.11.5")

        assert report.is_empty
        assert not report.has_updates
        assert report.to_json() == {
            "target_platform_version": "3.11.5",
            "updates": [],
            "blocked_updates": [],
            "up_to_date": [],
            "incompatible_with_platform": [],
        }

    def test_summary_counts(self) -> None:
        report = UpdateReport("3.11.5")
        report.up_to_date.append(UpToDate(PACKAGE, _version(10, "1.0.0")))
        report.updates.append(
            UpdateAvailable(PACKAGE, _version(10, "1.0.0"), _version(11, "1.0.1"))
        )

        assert report.has_updates
        assert not report.is_empty
        assert report.summary() == {
            "updates": 1,
            "blocked_updates": 0,
            "up_to_date": 1,
            "incompatible_with_platform": 0,
        }
