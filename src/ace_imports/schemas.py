"""JSON schemas for settings files and package.json manifests.

Both are checked with ``jsonschema.validate``; callers wrap
``jsonschema.ValidationError`` in their own error type.
"""

from collections.abc import Mapping
from typing import Any

from .models import CompletionKind, QuoteStyle

AUTO_QUOTE_STYLE = "auto"

_STRING_LIST: Mapping[str, Any] = {"type": "array", "items": {"type": "string"}}

IMPORT_RULE_SCHEMA: Mapping[str, Any] = {
    "type": "object",
    "required": ["name", "source"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "source": {"type": "string", "minLength": 1},
        "id": {"type": ["string", "null"]},
        "dependency": {"type": ["string", "null"]},
        "kind": {"enum": [*(kind.value for kind in CompletionKind), None]},
    },
    "additionalProperties": False,
}

# One settings file; every key is optional and unknown keys are rejected
SETTINGS_LAYER_SCHEMA: Mapping[str, Any] = {
    "type": "object",
    "properties": {
        "imports": {"type": "array", "items": IMPORT_RULE_SCHEMA},
        "workspace_imports": {"type": "array", "items": IMPORT_RULE_SCHEMA},
        "disabled": _STRING_LIST,
        "allow_disabled": _STRING_LIST,
        "quote_style": {"enum": [AUTO_QUOTE_STYLE, *(style.value for style in QuoteStyle)]},
        "package_matcher": _STRING_LIST,
        "package_matcher_ignore": _STRING_LIST,
        "insert_semicolon": {"type": "boolean"},
        "organize_imports_on_insert": {"type": "boolean"},
        "format_document_on_insert": {"type": "boolean"},
        "disable_suggestions": {"type": "boolean"},
        "disable_node_modules_warning": {"type": "boolean"},
        "include_default_imports": {"type": "boolean"},
    },
    "additionalProperties": False,
}

# Defaults merged with every layer
SETTINGS_SCHEMA: Mapping[str, Any] = {
    **SETTINGS_LAYER_SCHEMA,
    "required": list(SETTINGS_LAYER_SCHEMA["properties"]),
}

_DEPENDENCY_SECTION: Mapping[str, Any] = {
    "type": "object",
    "additionalProperties": {"type": "string"},
}

MANIFEST_SCHEMA: Mapping[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
        "dependencies": _DEPENDENCY_SECTION,
        "devDependencies": _DEPENDENCY_SECTION,
        "peerDependencies": _DEPENDENCY_SECTION,
    },
}
