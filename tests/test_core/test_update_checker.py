"""Unit tests for modgraph.core.update_checker."""

from __future__ import annotations

import pytest

from modgraph.core.update_checker import UpdateChecker
from modgraph.exceptions import ValidationError

PLATFORM = "3.11.5"


def _checker(builder) -> UpdateChecker:
    return UpdateChecker(builder.build(), now=builder.NOW)


@pytest.mark.unit
class TestInputValidation:
    """Tests for request validation."""

    @pytest.mark.parametrize(
        "mods,platform_version",
        [("", PLATFORM), ("   ", PLATFORM), (None, PLATFORM), ("mod:1.0.0", ""), ("mod:1.0.0", None)],
    )
    def test_both_parameters_required(self, builder, mods, platform_version) -> None:
        """Test a missing argument is reported before anything else."""
        with pytest.raises(ValidationError, match="You must provide both"):
            _checker(builder).check(mods, platform_version)

    def test_no_usable_pair(self, builder) -> None:
        """Test a mods string with only malformed pairs is rejected."""
        with pytest.raises(ValidationError, match="Invalid mods format"):
            _checker(builder).check("garbage", PLATFORM)

    def test_unknown_platform(self, builder) -> None:
        """Test an unknown platform version is rejected."""
        with pytest.raises(ValidationError, match="not found or not published") as exc_info:
            _checker(builder).check("mod:1.0.0", "9.9.9")

        assert exc_info.value.parameter == "platform_version"

    def test_unpublished_platform(self, builder) -> None:
        """Test a scheduled platform version is rejected."""
        builder.platform("4.0.0", published_at=builder.FUTURE)

        with pytest.raises(ValidationError, match="not found or not published"):
            _checker(builder).check("mod:1.0.0", "4.0.0")


@pytest.mark.unit
class TestCategories:
    """Tests for per-version categorization."""

    def test_update_available(self, builder) -> None:
        """Test a valid newer version is recommended."""
        mod = builder.package("mod")
        builder.version(mod, "1.0.0")
        builder.version(mod, "1.1.0")

        report = _checker(builder).check("mod:1.0.0", PLATFORM)

        assert len(report.updates) == 1
        entry = report.updates[0]
        assert entry.current.version == "1.0.0"
        assert entry.recommended.version == "1.1.0"
        assert entry.update_reason == "newer_version_available"
        assert entry.platform_versions == (PLATFORM,)
        assert report.has_updates

    def test_prerelease_upgrade_reason(self, builder) -> None:
        """Test a prerelease install reports the prerelease reason."""
        mod = builder.package("mod")
        builder.version(mod, "1.0.0-beta.1")
        builder.version(mod, "1.0.0")
        builder.version(mod, "1.0.0-beta.2")

        report = _checker(builder).check("mod:1.0.0-beta.1", PLATFORM)

        assert report.updates[0].recommended.version == "1.0.0"
        assert report.updates[0].update_reason == "newer_prerelease_available"

    def test_blocked_by_dependent(self, builder) -> None:
        """Test an upgrade another installed package rejects is blocked."""
        mod = builder.package("mod", name="Mod")
        builder.version(mod, "1.0.0")
        builder.version(mod, "2.0.0")
        app = builder.package("app", name="App")
        app1 = builder.version(app, "1.0.0")
        builder.depends(app1, mod, "^1.0.0")

        report = _checker(builder).check("mod:1.0.0,app:1.0.0", PLATFORM)

        assert [e.current.version for e in report.blocked_updates] == ["1.0.0"]
        blocked = report.blocked_updates[0]
        assert blocked.latest.version == "2.0.0"
        assert blocked.validation.reason == "dependency_constraint_violation"
        assert blocked.to_json()["blocking_packages"][0]["name"] == "App"
        assert [e.package.guid for e in report.up_to_date] == ["app"]
        assert not report.has_updates

    def test_prerelease_update_allowed_by_dependent_range(self, builder) -> None:
        """Test a dependent's range admits a later prerelease of the same release."""
        lib = builder.package("lib")
        builder.version(lib, "1.1.0-beta.1")
        builder.version(lib, "1.1.0-beta.2")
        app = builder.package("app")
        app1 = builder.version(app, "1.0.0")
        builder.depends(app1, lib, "^1.0.0")

        report = _checker(builder).check("lib:1.1.0-beta.1,app:1.0.0", PLATFORM)

        assert report.blocked_updates == []
        assert [e.recommended.version for e in report.updates] == ["1.1.0-beta.2"]
        assert report.updates[0].update_reason == "newer_prerelease_available"

    def test_incompatible_with_platform(self, builder) -> None:
        """Test a current version not built for the target is incompatible."""
        builder.platform("3.10.0")
        mod = builder.package("mod")
        builder.version(mod, "2.0.0", platforms=("3.10.0",))

        report = _checker(builder).check("mod:2.0.0", PLATFORM)

        assert len(report.incompatible_with_platform) == 1
        assert report.incompatible_with_platform[0].reason == "no_version_for_spt"
        assert report.updates == []
        assert report.up_to_date == []

    def test_up_to_date(self, builder) -> None:
        """Test the newest compatible version is up to date."""
        builder.platform("3.10.0")
        mod = builder.package("mod")
        builder.version(mod, "1.0.0", platforms=("3.10.0", PLATFORM))

        report = _checker(builder).check("mod:1.0.0", PLATFORM)

        assert report.up_to_date[0].platform_versions == (PLATFORM, "3.10.0")

    def test_every_version_in_exactly_one_category(self, builder) -> None:
        """Test each resolved install lands in one bucket, in request order."""
        builder.platform("3.10.0")
        a = builder.package("a")
        builder.version(a, "1.0.0")
        builder.version(a, "1.1.0")
        b = builder.package("b")
        builder.version(b, "1.0.0")
        c = builder.package("c")
        builder.version(c, "1.0.0", platforms=("3.10.0",))

        report = _checker(builder).check("a:1.0.0,b:1.0.0,c:1.0.0", PLATFORM)

        assert report.summary() == {
            "updates": 1,
            "blocked_updates": 0,
            "up_to_date": 1,
            "incompatible_with_platform": 1,
        }

    def test_nothing_resolves(self, builder) -> None:
        """Test well-formed pairs matching nothing give an empty report."""
        report = _checker(builder).check("nothing:1.0.0", PLATFORM)

        assert report.is_empty
        assert report.target_platform_version == PLATFORM

    def test_platform_version_is_trimmed(self, builder) -> None:
        mod = builder.package("mod")
        builder.version(mod, "1.0.0")

        report = _checker(builder).check("mod:1.0.0", f"  {PLATFORM} ")

        assert report.target_platform_version == PLATFORM
