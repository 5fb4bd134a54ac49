"""Exceptions raised while resolving namespace import suggestions.

Everything derives from AceImportsError so the host boundary (session and CLI)
can catch one type, log it, and fall back to an empty suggestion list.
"""

from pathlib import Path


class AceImportsError(Exception):
    """Base exception for ace-imports."""


class ConfigError(AceImportsError):
    """Raised when settings are missing required fields or have the wrong shape."""


class ManifestParseError(AceImportsError):
    """Raised when a manifest file cannot be read or is not a valid manifest."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unable to parse manifest {path}: {reason}")
        self.path = path
        self.reason = reason


class InvalidDependencyDescriptorError(AceImportsError):
    """Raised when a dependency descriptor or an installed version range is malformed."""

    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"Invalid dependency descriptor {value!r}: {reason}")
        self.value = value
        self.reason = reason


class VersionResolutionError(AceImportsError):
    """Raised when the minimum version of an installed range cannot be determined."""

    def __init__(self, package: str, version_range: str) -> None:
        super().__init__(
            f'Unable to determine minimum version for "{package}" with range "{version_range}"'
        )
        self.package = package
        self.version_range = version_range


class NoPrimaryWorkspaceError(AceImportsError):
    """Raised at activation when there is no workspace folder to work from."""


class UnsupportedConfigFileTypeError(AceImportsError):
    """Raised when a formatter config file has an extension we cannot scan."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Unable to determine file type for file name: {path.name}")
        self.path = path


class ImportNotAvailableError(AceImportsError):
    """Raised when an import is requested by name but is not applicable to the document."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Selected import "{name}" not found in available imports.')
        self.name = name


__all__ = [
    "AceImportsError",
    "ConfigError",
    "ImportNotAvailableError",
    "InvalidDependencyDescriptorError",
    "ManifestParseError",
    "NoPrimaryWorkspaceError",
    "UnsupportedConfigFileTypeError",
    "VersionResolutionError",
]
