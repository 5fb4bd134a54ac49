"""The active dependency set: what the workspace's manifests say is installed.

Every manifest found by a workspace scan gets a slot holding its own dependency
map. Scans replace the set of slots; created/changed/deleted events update a
single slot. The merged view is recomputed on read, so removing a slot removes
exactly that manifest's contribution.
"""

import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import ManifestParseError
from .globs import matches_any_glob
from .iteration import merge_last_wins
from .manifest import MANIFEST_FILE_NAME, read_manifest_dependencies
from .models import DependencyMap

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 20
NODE_MODULES = "node_modules"


@dataclass(frozen=True)
class ScanResult:
    """Manifest paths found by one scan, stamped with the scan's generation."""

    generation: int
    paths: tuple[Path, ...]


def find_workspace_files(
    roots: Sequence[Path],
    include_globs: Sequence[str],
    exclude_globs: Sequence[str],
    max_results: int = DEFAULT_MAX_RESULTS,
) -> tuple[Path, ...]:
    """Find files under the roots matching an include glob and no exclude glob.

    Directories matching an exclude glob are not descended into. Results are in
    sorted walk order and capped at max_results.
    """
    found: list[Path] = []
    for root in roots:
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            relative_dir = current.relative_to(root).as_posix()
            prefix = "" if relative_dir == "." else f"{relative_dir}/"

            dirnames[:] = sorted(
                name for name in dirnames if not matches_any_glob(f"{prefix}{name}/", exclude_globs)
            )
            for filename in sorted(filenames):
                relative = f"{prefix}{filename}"
                if matches_any_glob(relative, include_globs) and not matches_any_glob(
                    relative, exclude_globs
                ):
                    found.append(current / filename)
                    if len(found) >= max_results:
                        return tuple(found)
    return tuple(found)


def is_inside_node_modules(path: Path) -> bool:
    """Check whether a path sits somewhere below a node_modules directory."""
    return NODE_MODULES in path.parts[:-1]


class ActiveDependencies:
    """Tracks manifest files and exposes their merged dependency map."""

    def __init__(  # noqa: PLR0913
        self,
        roots: Sequence[Path],
        include_globs: Sequence[str],
        exclude_globs: Sequence[str],
        *,
        manifest_name: str = MANIFEST_FILE_NAME,
        max_results: int = DEFAULT_MAX_RESULTS,
        warn_on_node_modules: bool = True,
    ) -> None:
        self.roots = tuple(root.resolve() for root in roots)
        self.include_globs = tuple(include_globs)
        self.exclude_globs = tuple(exclude_globs)
        self.manifest_name = manifest_name
        self.max_results = max_results
        self.warn_on_node_modules = warn_on_node_modules
        self._slots: dict[Path, DependencyMap] = {}
        self._generation = 0
        self._applied_generation = 0
        self.last_matched_files: tuple[Path, ...] = ()

    @property
    def tracked_files(self) -> tuple[Path, ...]:
        """Manifest files currently contributing dependencies, in tracking order."""
        return tuple(self._slots)

    @property
    def dependencies(self) -> dict[str, str]:
        """Merged view of every tracked manifest; later-tracked files win on collisions."""
        return merge_last_wins(self._slots.values())

    def scan(self) -> ScanResult:
        """Search the workspace for manifests without touching the tracked set."""
        self._generation += 1
        generation = self._generation
        logger.debug(
            "Scan #%d for manifests: include=%s exclude=%s",
            generation,
            self.include_globs,
            self.exclude_globs,
        )
        paths = find_workspace_files(
            self.roots, self.include_globs, self.exclude_globs, self.max_results
        )
        return ScanResult(generation=generation, paths=paths)

    def apply_scan(self, result: ScanResult) -> bool:
        """Replace the tracked set with a scan's results.

        Returns:
            False when a newer scan has already been applied, in which case the
            stale result is discarded.
        """
        if result.generation < self._applied_generation:
            logger.info(
                "Discarding stale scan #%d, scan #%d already applied",
                result.generation,
                self._applied_generation,
            )
            return False
        self._applied_generation = result.generation
        self.last_matched_files = result.paths

        manifest_paths = [path for path in result.paths if path.name == self.manifest_name]
        discarded = [path for path in self._slots if path not in manifest_paths]
        if discarded:
            logger.info("Discarding dependencies of manifests no longer tracked: %s", discarded)
        for path in discarded:
            del self._slots[path]

        for path in manifest_paths:
            self._track(path)
        return True

    def rescan(self) -> None:
        """Scan the workspace and replace the tracked set in one step."""
        self.apply_scan(self.scan())

    def file_created(self, path: Path) -> None:
        """Handle a manifest file appearing in the workspace."""
        logger.info("Package file created: %s", path)
        self._refresh(path)

    def file_changed(self, path: Path) -> None:
        """Handle a manifest file being edited."""
        logger.info("Package file changed: %s", path)
        self._refresh(path)

    def file_deleted(self, path: Path) -> None:
        """Handle a manifest file being removed."""
        logger.info("Package file deleted: %s", path)
        if self._slots.pop(path.resolve(), None) is not None:
            logger.debug("Dropped dependencies of %s", path)

    def is_relevant(self, path: Path) -> bool:
        """Whether a file event for path should touch the tracked set.

        Only manifests under a root that match an include glob and no exclude
        glob count, the same filter a scan applies.
        """
        if path.name != self.manifest_name:
            return False
        relative = self._relative_to_root(path.resolve())
        if relative is None:
            return False
        return matches_any_glob(relative, self.include_globs) and not matches_any_glob(
            relative, self.exclude_globs
        )

    def _relative_to_root(self, path: Path) -> str | None:
        for root in self.roots:
            if path.is_relative_to(root):
                return path.relative_to(root).as_posix()
        return None

    def _refresh(self, path: Path) -> None:
        if not self.is_relevant(path):
            logger.debug("Ignoring event for untracked file %s", path)
            return
        self._track(path.resolve())

    def _track(self, path: Path) -> None:
        try:
            dependencies = read_manifest_dependencies(path)
        except ManifestParseError as e:
            logger.warning("Skipping manifest: %s", e)
            self._slots.pop(path, None)
            return

        self._slots.pop(path, None)
        self._slots[path] = dependencies
        if self.warn_on_node_modules and is_inside_node_modules(path):
            warn_node_modules_manifest((path,))


def warn_node_modules_manifest(paths: Iterable[Path]) -> None:
    """Log that dependencies were read from inside node_modules."""
    logger.warning(
        "A package.json inside a node_modules directory was scanned for dependencies: %s. "
        "Run 'ace-imports ignore-node-modules' to skip them, "
        "or 'ace-imports disable-node-modules-warning' to silence this warning.",
        [str(path) for path in paths],
    )
