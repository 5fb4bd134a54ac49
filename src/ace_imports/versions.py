"""Semver range helpers built on node-semver.

node-semver implements npm's range grammar (caret, tilde, x-ranges, hyphen
ranges, ``||`` unions), which is what manifest files and dependency descriptors
use. This module adds npm's ``minVersion`` on top of it, since the Python port
does not ship one.
"""

import nodesemver
from nodesemver import Range, SemVer

from .errors import InvalidDependencyDescriptorError

LOOSE = False

# Comparator operators that put a lower bound on a range.
_LOWER_BOUND_OPERATORS = frozenset({"", "=", ">=", ">"})


def is_valid_range(text: str) -> bool:
    """Return True when text is a single version or a range npm would accept."""
    if not text.strip():
        return False
    # A plain version is also a range that matches exactly that version
    return nodesemver.valid_range(text, LOOSE) is not None


def satisfies(version: str, version_range: str) -> bool:
    """Check whether a concrete version falls inside a range."""
    return nodesemver.satisfies(version, version_range, LOOSE)


def _parse_range(version_range: str) -> Range:
    if not is_valid_range(version_range):
        raise InvalidDependencyDescriptorError(version_range, "not a valid semver version or range")
    return Range(version_range, LOOSE)


def _exclusive_floor(floor: SemVer) -> str:
    """Smallest version strictly greater than floor, matching npm's minVersion."""
    if floor.prerelease:
        return f"{floor.version}.0"
    return f"{floor.major}.{floor.minor}.{floor.patch + 1}"


def min_version(version_range: str) -> str | None:
    """Return the lowest version that satisfies a range, or None if there is none.

    Mirrors npm's ``semver.minVersion``: try 0.0.0 and 0.0.0-0 first, then take the
    highest lower bound of each comparator set and the lowest of those across the
    ``||`` alternatives.

    Raises:
        InvalidDependencyDescriptorError: The range is not syntactically valid.

    Examples:
        >>> min_version("^4.17.0")
        '4.17.0'
        >>> min_version(">1.2.3")
        '1.2.4'
        >>> min_version("*")
        '0.0.0'
    """
    parsed = _parse_range(version_range)

    for candidate in ("0.0.0", "0.0.0-0"):
        if satisfies(candidate, version_range):
            return candidate

    lowest: str | None = None
    for comparators in parsed.set:
        set_floor: str | None = None
        for comparator in comparators:
            floor = comparator.semver
            operator = comparator.operator or ""
            if not isinstance(floor, SemVer) or operator not in _LOWER_BOUND_OPERATORS:
                continue
            bound = _exclusive_floor(floor) if operator == ">" else floor.version
            if set_floor is None or nodesemver.gt(bound, set_floor, LOOSE):
                set_floor = bound
        if set_floor is not None and (lowest is None or nodesemver.gt(lowest, set_floor, LOOSE)):
            lowest = set_floor

    if lowest is not None and satisfies(lowest, version_range):
        return lowest
    return None


def version_gte(left: str, right: str) -> bool:
    """Compare two concrete versions."""
    return nodesemver.gte(left, right, LOOSE)
