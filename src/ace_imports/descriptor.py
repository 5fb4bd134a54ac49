"""Parsing of rule dependency descriptors like ``zod@^3.0.0`` or ``@scope/pkg@1.x``."""

from functools import cache

from .errors import InvalidDependencyDescriptorError
from .models import ANY_VERSION_RANGE, DependencySpec
from .versions import is_valid_range


@cache
def parse_dependency_descriptor(descriptor: str) -> DependencySpec:
    """Split a descriptor into a package name and a version range.

    The descriptor is split on "@". A leading empty segment means the package is
    scoped, so the name gets its "@" back. A missing or empty range means any
    version.

    Args:
        descriptor: "name", "name@range", "@scope/name" or "@scope/name@range"

    Returns:
        DependencySpec with the package name and a validated range

    Raises:
        InvalidDependencyDescriptorError: Empty name, too many "@" segments, or a
            range that is not a valid semver version or range.

    Examples:
        >>> parse_dependency_descriptor("lodash@^4.0.0")
        DependencySpec(name='lodash', version_range='^4.0.0')
        >>> parse_dependency_descriptor("@tanstack/query")
        DependencySpec(name='@tanstack/query', version_range='*')
        >>> parse_dependency_descriptor("lodash@")
        DependencySpec(name='lodash', version_range='*')
    """
    segments = descriptor.split("@")

    if segments[0] == "" and len(segments) > 1:
        name_segment, rest = segments[1], segments[2:]
        name = f"@{name_segment}"
    else:
        name_segment, rest = segments[0], segments[1:]
        name = name_segment

    if not name_segment:
        raise InvalidDependencyDescriptorError(descriptor, "missing package name")
    if len(rest) > 1:
        raise InvalidDependencyDescriptorError(descriptor, "too many '@' separators")

    version_range = rest[0] if rest and rest[0].strip() else ANY_VERSION_RANGE
    if not is_valid_range(version_range):
        raise InvalidDependencyDescriptorError(descriptor, "invalid semver version or range")

    return DependencySpec(name=name, version_range=version_range)
