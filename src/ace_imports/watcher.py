"""Polling file watcher that feeds manifest and formatter config events to a session.

Each poll fingerprints the watched files by (mtime_ns, size) and compares the
result with the previous poll to derive created/changed/deleted events.
"""

import logging
import time
from collections.abc import Iterable, Mapping
from pathlib import Path

from .dependencies import find_workspace_files
from .errors import AceImportsError
from .quotes import FORMATTER_CONFIG_FILE_NAMES
from .session import FileEventKind, ImportSession

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
MAX_WATCHED_MANIFESTS = 1000

type Fingerprints = dict[Path, tuple[int, int]]


def fingerprint_files(paths: Iterable[Path]) -> Fingerprints:
    """Map each existing file to its (mtime_ns, size); missing files are left out."""
    fingerprints: Fingerprints = {}
    for path in paths:
        try:
            st = path.stat()
        except FileNotFoundError:
            continue
        fingerprints[path] = (st.st_mtime_ns, st.st_size)
    return fingerprints


def diff_fingerprints(
    before: Mapping[Path, tuple[int, int]], after: Mapping[Path, tuple[int, int]]
) -> list[tuple[Path, FileEventKind]]:
    """Derive file events from two fingerprint snapshots, sorted by path."""
    events: list[tuple[Path, FileEventKind]] = []
    for path in sorted(set(before) | set(after)):
        if path not in before:
            events.append((path, FileEventKind.CREATED))
        elif path not in after:
            events.append((path, FileEventKind.DELETED))
        elif before[path] != after[path]:
            events.append((path, FileEventKind.CHANGED))
    return events


class PollingWatcher:
    """Watches manifests, formatter configs and the settings file of a session."""

    def __init__(self, session: ImportSession, interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self.session = session
        self.interval = interval
        self._fingerprints = fingerprint_files(self.watched_paths())

    def watched_paths(self) -> set[Path]:
        """Files whose changes matter to the session right now."""
        settings = self.session.settings
        paths = set(
            find_workspace_files(
                self.session.dependencies.roots,
                settings.package_matcher_globs,
                settings.package_matcher_ignore_globs,
                MAX_WATCHED_MANIFESTS,
            )
        )
        paths.update(self.session.dependencies.tracked_files)
        root = self.session.primary_root.resolve()
        paths.update(root / name for name in FORMATTER_CONFIG_FILE_NAMES)
        paths.add(self.session.store.workspace_file)
        return paths

    def poll(self) -> list[tuple[Path, FileEventKind]]:
        """Check the watched files once and dispatch any events to the session."""
        current = fingerprint_files(self.watched_paths() | set(self._fingerprints))
        events = diff_fingerprints(self._fingerprints, current)
        self._fingerprints = current

        for path, kind in events:
            try:
                self.session.handle_file_event(path, kind)
            except AceImportsError:
                logger.exception("Failed to handle %s event for %s", kind, path)
        return events

    def run(self, max_polls: int | None = None) -> None:
        """Poll until interrupted, or until max_polls polls have run."""
        polls = 0
        while max_polls is None or polls < max_polls:
            time.sleep(self.interval)
            for path, kind in self.poll():
                logger.info("Watched file %s: %s", kind, path)
            polls += 1
