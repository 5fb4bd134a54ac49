"""Test helper utilities."""

from .console import assert_console_contains, capture_console_output
from .factories import (
    make_document,
    make_rule,
    make_settings,
    make_store,
)
from .temp_files import temp_workspace, write_manifest

__all__ = [
    "assert_console_contains",
    "capture_console_output",
    "make_document",
    "make_rule",
    "make_settings",
    "make_store",
    "temp_workspace",
    "write_manifest",
]
