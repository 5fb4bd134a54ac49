"""Workspace glob matching for manifest discovery.

Patterns follow the editor's glob dialect, which fnmatch does not cover on its own:
``**`` spans directories, ``*`` and ``?`` stay within one path segment, and
``{a,b}`` lists alternatives. Paths are compared as POSIX paths relative to a
workspace root.
"""

import re
from collections.abc import Iterable
from functools import cache


def _translate(pattern: str) -> str:  # noqa: C901, PLR0912
    parts: list[str] = []
    index = 0
    brace_depth = 0
    while index < len(pattern):
        char = pattern[index]
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
            continue
        if pattern.startswith("**", index):
            parts.append(".*")
            index += 2
            continue
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = pattern.find("]", index + 1)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[index + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append(f"[{body}]")
                index = end
        elif char == "{":
            brace_depth += 1
            parts.append("(?:")
        elif char == "}" and brace_depth:
            brace_depth -= 1
            parts.append(")")
        elif char == "," and brace_depth:
            parts.append("|")
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


@cache
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a workspace glob into a regex that must match a whole relative path."""
    return re.compile(rf"\A{_translate(pattern)}\Z")


def matches_glob(relative_path: str, pattern: str) -> bool:
    """Check a root-relative POSIX path against one glob.

    Examples:
        >>> matches_glob("packages/app/package.json", "**/package.json")
        True
        >>> matches_glob("node_modules/zod/package.json", "**/node_modules/**")
        True
        >>> matches_glob("src/index.ts", "**/*.{js,json}")
        False
    """
    return compile_glob(pattern).match(relative_path) is not None


def matches_any_glob(relative_path: str, patterns: Iterable[str]) -> bool:
    """Check a root-relative POSIX path against several globs."""
    return any(matches_glob(relative_path, pattern) for pattern in patterns)


def merge_globs(patterns: Iterable[str]) -> str:
    """Combine several globs into one brace pattern, as the editor's search API expects."""
    patterns = list(patterns)
    if not patterns:
        return ""
    if len(patterns) == 1:
        return patterns[0]
    return "{" + ",".join(patterns) + "}"
