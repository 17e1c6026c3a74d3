"""Unit tests for version_compat module.

Covers npm-style range matching, pre-release handling and the
never-raise contract for malformed input.
"""

from __future__ import annotations

import pytest

from tessera_core.version_compat import is_valid_range, is_valid_version, satisfies


class TestIsValidVersion:
    """Tests for is_valid_version()."""

    @pytest.mark.requirement("VC-001")
    @pytest.mark.parametrize("version", ["1.0.0", "0.0.1", "2.1.0-rc.1", "1.2.3+build.5"])
    def test_accepts_semantic_versions(self, version: str) -> None:
        """Test well-formed semantic versions are valid."""
        assert is_valid_version(version) is True

    @pytest.mark.requirement("VC-001")
    @pytest.mark.parametrize("version", ["", "1.0", "banana", "1.0.0.0"])
    def test_rejects_malformed_versions(self, version: str) -> None:
        """Test malformed versions are invalid rather than raising."""
        assert is_valid_version(version) is False

    @pytest.mark.requirement("VC-001")
    def test_non_string_is_invalid(self) -> None:
        """Test non-string input is reported invalid."""
        assert is_valid_version(None) is False  # type: ignore[arg-type]


class TestIsValidRange:
    """Tests for is_valid_range()."""

    @pytest.mark.requirement("VC-002")
    @pytest.mark.parametrize(
        "version_range",
        ["^1.0.0", "~1.2.0", ">=1.0.0 <2.0.0", "1.x", "*", "1.0.0 - 2.0.0", "^1.0.0 || ^2.0.0"],
    )
    def test_accepts_npm_ranges(self, version_range: str) -> None:
        """Test npm range syntax is accepted."""
        assert is_valid_range(version_range) is True

    @pytest.mark.requirement("VC-002")
    @pytest.mark.parametrize("version_range", ["not a range"])
    def test_rejects_garbage(self, version_range: str) -> None:
        """Test garbage ranges are invalid rather than raising."""
        assert is_valid_range(version_range) is False


class TestSatisfies:
    """Tests for satisfies()."""

    @pytest.mark.requirement("VC-003")
    @pytest.mark.parametrize(
        ("version", "version_range", "expected"),
        [
            ("1.0.0", "^1.0.0", True),
            ("1.9.3", "^1.0.0", True),
            ("2.0.0", "^1.0.0", False),
            ("1.2.9", "~1.2.0", True),
            ("1.3.0", "~1.2.0", False),
            ("5.0.0", "*", True),
            ("1.5.0", ">=1.0.0 <2.0.0", True),
        ],
    )
    def test_range_matching(self, version: str, version_range: str, expected: bool) -> None:
        """Test standard npm range semantics."""
        assert satisfies(version, version_range) is expected

    @pytest.mark.requirement("VC-003")
    def test_prerelease_excluded_by_default(self) -> None:
        """Test pre-releases do not match a plain range unless asked to."""
        assert satisfies("2.1.0-rc.1", "^2.0.0") is False
        assert satisfies("2.1.0-rc.1", "^2.0.0", include_prerelease=True) is True

    @pytest.mark.requirement("VC-003")
    def test_invalid_version_never_satisfies(self) -> None:
        """Test an unparsable service version is simply not a match."""
        assert satisfies("", "*") is False
        assert satisfies("banana", "^1.0.0") is False

    @pytest.mark.requirement("VC-003")
    def test_invalid_range_never_satisfies(self) -> None:
        """Test an unparsable range is simply not a match."""
        assert satisfies("1.0.0", "not a range") is False
