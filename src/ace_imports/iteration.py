"""Iteration utilities."""

from collections.abc import Callable, Iterable, Mapping


def first[T](iterable: Iterable[T], predicate: Callable[[T], bool]) -> T | None:
    """Return the first item in iterable that satisfies the predicate, or None.

    Examples:
        >>> first(["a.json", "b.yaml"], lambda name: name.endswith(".yaml"))
        'b.yaml'
        >>> first(["a.json"], lambda name: name.endswith(".toml")) is None
        True
    """
    for item in iterable:
        if predicate(item):
            return item
    return None


def merge_last_wins[K, V](mappings: Iterable[Mapping[K, V]]) -> dict[K, V]:
    """Union several mappings into one; a later mapping overwrites an earlier one per key.

    Examples:
        >>> merge_last_wins([{"react": "^17.0.0"}, {"react": "^18.0.0", "zod": "^3.0.0"}])
        {'react': '^18.0.0', 'zod': '^3.0.0'}
    """
    merged: dict[K, V] = {}
    for mapping in mappings:
        merged.update(mapping)
    return merged
