"""Version compatibility utilities for plugin service imports.

Plugins export services at a single concrete semantic version and import
services by version *range*. Ranges follow npm semver syntax, so matching is
delegated to ``node-semver``, a port of the npm implementation, rather than
to PEP 440 specifiers which cannot express these ranges.

Range Syntax:
    - Comparators: ``>=1.2.0``, ``<2.0.0``, ``=1.0.0``, ``1.0.0``
    - Caret: ``^1.2.3`` (compatible with 1.x, at least 1.2.3)
    - Tilde: ``~1.2.3`` (compatible with 1.2.x, at least 1.2.3)
    - X-ranges: ``1.x``, ``1.2.*``, ``*``
    - Hyphen ranges: ``1.0.0 - 2.0.0``
    - Unions: ``^1.0.0 || ^2.0.0``

Pre-release versions (``1.2.0-beta.1``) only satisfy a range when a
comparator in the range carries a pre-release on the same
``major.minor.patch`` tuple, unless ``include_prerelease`` is set.

Example:
    >>> from tessera_core.version_compat import satisfies
    >>> satisfies("1.4.0", "^1.0.0")
    True
    >>> satisfies("2.0.0", "^1.0.0")
    False
"""

from __future__ import annotations

import nodesemver


def is_valid_version(version: str, *, loose: bool = False) -> bool:
    """Check whether a string is a concrete semantic version.

    Args:
        version: Candidate version string (e.g., "1.0.0").
        loose: Accept loosely formatted versions such as "=1.0.0" or "v1.0.0".

    Returns:
        True if the string parses as a version, False otherwise.

    Examples:
        >>> is_valid_version("1.0.0")
        True
        >>> is_valid_version("1.0")
        False
    """
    if not isinstance(version, str) or not version:
        return False
    try:
        return nodesemver.valid(version, loose=loose) is not None
    except (ValueError, TypeError):
        return False


def is_valid_range(version_range: str, *, loose: bool = False) -> bool:
    """Check whether a string is a parseable version range.

    Args:
        version_range: Candidate range expression (e.g., "^1.0.0").
        loose: Accept loosely formatted versions inside the range.

    Returns:
        True if the range parses, False otherwise.

    Examples:
        >>> is_valid_range("^1.0.0 || ~2.1")
        True
        >>> is_valid_range("not a range")
        False
    """
    if not isinstance(version_range, str):
        return False
    try:
        return nodesemver.valid_range(version_range, loose=loose) is not None
    except (ValueError, TypeError):
        return False


def satisfies(
    version: str,
    version_range: str,
    *,
    loose: bool = False,
    include_prerelease: bool = False,
) -> bool:
    """Decide whether a concrete version satisfies a version range.

    Never raises: an unparseable version or range simply does not match.

    Args:
        version: Concrete version declared by the provider (e.g., "1.2.0").
        version_range: Range required by the importer (e.g., "^1.0.0").
        loose: Accept loosely formatted versions.
        include_prerelease: Let pre-release versions match ranges that do
            not mention a pre-release.

    Returns:
        True if ``version`` is within ``version_range``.

    Examples:
        >>> satisfies("1.2.3", "~1.2.0")
        True
        >>> satisfies("1.3.0", "~1.2.0")
        False
        >>> satisfies("2.1.0-rc.1", "^2.0.0")
        False
        >>> satisfies("2.1.0-rc.1", "^2.0.0", include_prerelease=True)
        True
    """
    if not is_valid_version(version, loose=loose):
        return False
    if not is_valid_range(version_range, loose=loose):
        return False
    return bool(
        nodesemver.satisfies(
            version,
            version_range,
            loose=loose,
            include_prerelease=include_prerelease,
        )
    )


__all__ = [
    "is_valid_range",
    "is_valid_version",
    "satisfies",
]
