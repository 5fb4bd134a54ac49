"""Console testing utilities."""

from collections.abc import Iterator
from contextlib import contextmanager
from io import StringIO

from rich.console import Console


@contextmanager
def capture_console_output(width: int = 160) -> Iterator[tuple[Console, StringIO]]:
    """Create a plain-text Console writing into a buffer.

    The default width keeps import statements on one table row.

    Example:
        with capture_console_output() as (console, output):
            display_suggestions(console, resolved, settings)
            assert 'import * as z from "zod"' in output.getvalue()

    """
    output = StringIO()
    console = Console(file=output, force_terminal=False, width=width, highlight=False)
    yield console, output


def assert_console_contains(output: StringIO, *expected_texts: str) -> None:
    """Assert that console output contains all expected text fragments."""
    output_str = output.getvalue()
    for text in expected_texts:
        assert text in output_str, f"Expected '{text}' not found in output: {output_str!r}"


def assert_console_excludes(output: StringIO, *unexpected_texts: str) -> None:
    """Assert that none of the fragments were printed."""
    output_str = output.getvalue()
    for text in unexpected_texts:
        assert text not in output_str, f"Unexpected '{text}' found in output: {output_str!r}"
