"""Upward search for files such as package.json or .prettierrc.

The search starts in a directory and walks through its parents until it finds a
matching file, hits the depth limit, reaches a stop directory, or runs out of
parents. ``find_file_upwards_cached`` memoizes the walk; callers that watch the
filesystem invalidate it with ``clear_locator_cache`` when files appear or vanish.
"""

import logging
import re
from collections.abc import Callable, Sequence
from functools import lru_cache
from pathlib import Path

from .iteration import first

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 20

type SingleMatcher = str | re.Pattern[str] | Callable[[str], bool]
type FileNameMatcher = SingleMatcher | Sequence[SingleMatcher]


def _matches(matcher: SingleMatcher, file_name: str) -> bool:
    if isinstance(matcher, str):
        return file_name == matcher
    if isinstance(matcher, re.Pattern):
        return matcher.search(file_name) is not None
    return matcher(file_name)


def _as_sequence(matcher: FileNameMatcher) -> tuple[SingleMatcher, ...]:
    if isinstance(matcher, (str, re.Pattern)) or callable(matcher):
        return (matcher,)
    return tuple(matcher)


def _match_in_directory(matchers: tuple[SingleMatcher, ...], directory: Path) -> Path | None:
    try:
        file_names = sorted(entry.name for entry in directory.iterdir() if entry.is_file())
    except OSError as e:
        # Unreadable directories are skipped, the walk continues upward
        logger.debug("Cannot list %s: %s", directory, e)
        return None

    for matcher in matchers:
        found = first(file_names, lambda name, m=matcher: _matches(m, name))
        if found is not None:
            return directory / found
    return None


def find_file_upwards(
    matcher: FileNameMatcher,
    start_dir: Path,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    stop_at: Path | None = None,
) -> Path | None:
    """Find the nearest file matching matcher in start_dir or one of its parents.

    Args:
        matcher: File name, compiled regex, predicate, or a sequence of those.
            Within one directory, earlier matchers win over later ones.
        start_dir: Directory to start in (checked first)
        max_depth: Number of parent directories to climb at most
        stop_at: Directory that ends the search when reached; it is not searched

    Returns:
        Path to the first match, or None when nothing matches
    """
    matchers = _as_sequence(matcher)
    current = start_dir.resolve()
    stop = stop_at.resolve() if stop_at is not None else None

    for _ in range(max_depth + 1):
        if current == stop:
            return None

        found = _match_in_directory(matchers, current)
        if found is not None:
            logger.debug("Found %s while searching upwards from %s", found, start_dir)
            return found

        parent = current.parent
        if parent == current:
            return None
        current = parent

    return None


@lru_cache(maxsize=256)
def _find_file_upwards_memo(
    matchers: tuple[SingleMatcher, ...], start_dir: Path, max_depth: int, stop_at: Path | None
) -> Path | None:
    return find_file_upwards(matchers, start_dir, max_depth=max_depth, stop_at=stop_at)


def find_file_upwards_cached(
    matcher: FileNameMatcher,
    start_dir: Path,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    stop_at: Path | None = None,
) -> Path | None:
    """Memoized find_file_upwards, keyed on (matcher, start_dir, max_depth, stop_at)."""
    return _find_file_upwards_memo(_as_sequence(matcher), start_dir, max_depth, stop_at)


def clear_locator_cache() -> None:
    """Forget every memoized search, e.g. after a config or manifest file changed."""
    _find_file_upwards_memo.cache_clear()
