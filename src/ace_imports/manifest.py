"""Dependency extraction from package.json manifests."""

import json
import logging
from pathlib import Path

import jsonschema

from .errors import ManifestParseError
from .iteration import merge_last_wins
from .schemas import MANIFEST_SCHEMA

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "package.json"

# Later sections overwrite earlier ones for the same package name.
DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")


def parse_manifest(path: Path, text: str) -> dict[str, str]:
    """Parse manifest text into a merged package name -> version range mapping.

    Args:
        path: Manifest location, used in error messages
        text: Raw manifest contents

    Returns:
        Mapping of dependencies, devDependencies and peerDependencies merged in
        that order (peer wins over dev wins over prod).

    Raises:
        ManifestParseError: Malformed JSON, or a document that does not match
            MANIFEST_SCHEMA.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestParseError(path, f"malformed JSON ({e})") from e

    try:
        jsonschema.validate(instance=document, schema=MANIFEST_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ManifestParseError(path, f"{e.message} (at {e.json_path})") from e

    return merge_last_wins(
        [document[section] for section in DEPENDENCY_SECTIONS if section in document]
    )


def read_manifest_dependencies(path: Path) -> dict[str, str]:
    """Read a manifest file from disk and extract its declared dependencies.

    Raises:
        ManifestParseError: The file cannot be read or is not a valid manifest.
    """
    logger.debug("Reading manifest %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(path, f"unreadable ({e})") from e

    dependencies = parse_manifest(path, text)
    logger.debug("Extracted %d dependencies from %s", len(dependencies), path)
    return dependencies
