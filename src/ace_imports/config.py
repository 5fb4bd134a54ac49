"""Settings for ace-imports, loaded from YAML files.

Settings are layered, later layers overriding earlier ones key by key:

1. Built-in defaults (DEFAULT_SETTINGS)
2. User config: ~/.config/ace-imports/config.yaml
3. Workspace config: <workspace>/.ace-imports.yaml

``imports`` and ``workspace_imports`` are concatenated so a workspace can add
rules without repeating the user's. The store hands out immutable snapshots and
notifies subscribers when a reload changes them.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from .errors import ConfigError
from .models import CompletionKind, ImportRule, QuoteStyle
from .schemas import (
    AUTO_QUOTE_STYLE,
    IMPORT_RULE_SCHEMA,
    SETTINGS_LAYER_SCHEMA,
    SETTINGS_SCHEMA,
)

logger = logging.getLogger(__name__)

WORKSPACE_CONFIG_FILE_NAME = ".ace-imports.yaml"
USER_CONFIG_PATH = Path.home() / ".config" / "ace-imports" / "config.yaml"
NODE_MODULES_IGNORE_GLOB = "**/node_modules/**"

DEFAULT_IMPORT_RULES: tuple[ImportRule, ...] = (
    ImportRule(id="zod", name="z", source="zod", dependency="zod@^3.0.0"),
    ImportRule(id="zod-v4", name="z", source="zod/v4", dependency="zod@^3.25.0"),
    ImportRule(id="zod-mini", name="z", source="zod/mini", dependency="zod@^3.25.0"),
)

DEFAULT_SETTINGS: Mapping[str, Any] = {
    "imports": [],
    "workspace_imports": [],
    "disabled": ["zod-mini"],
    "allow_disabled": [],
    "quote_style": AUTO_QUOTE_STYLE,
    "package_matcher": ["**/package.json"],
    "package_matcher_ignore": [NODE_MODULES_IGNORE_GLOB],
    "insert_semicolon": False,
    "organize_imports_on_insert": False,
    "format_document_on_insert": False,
    "disable_suggestions": False,
    "disable_node_modules_warning": False,
    "include_default_imports": True,
}


@dataclass(frozen=True)
class Settings:
    """A validated snapshot of the effective settings."""

    imports: tuple[ImportRule, ...] = ()
    disabled: tuple[str, ...] = ()
    allow_disabled: tuple[str, ...] = ()
    quote_style: str = AUTO_QUOTE_STYLE  # "auto" or a QuoteStyle value
    package_matcher_globs: tuple[str, ...] = ("**/package.json",)
    package_matcher_ignore_globs: tuple[str, ...] = (NODE_MODULES_IGNORE_GLOB,)
    insert_semicolon: bool = False
    organize_imports_on_insert: bool = False
    format_document_on_insert: bool = False
    disable_suggestions: bool = False
    disable_node_modules_warning: bool = False
    sources: tuple[Path, ...] = field(default=(), compare=False)  # Files the snapshot came from

    @property
    def disabled_ids(self) -> frozenset[str]:
        """Rule ids switched off: disabled minus explicitly allowed."""
        return frozenset(self.disabled) - frozenset(self.allow_disabled)

    @property
    def configured_quote_style(self) -> QuoteStyle | None:
        """The explicitly configured quote style, or None for "auto"."""
        if self.quote_style == AUTO_QUOTE_STYLE:
            return None
        return QuoteStyle(self.quote_style)


def _validate(instance: Any, schema: Mapping[str, Any], origin: object) -> None:
    try:
        jsonschema.validate(instance=instance, schema=schema)
    except jsonschema.ValidationError as e:
        raise ConfigError(f"Invalid settings in {origin}: {e.message} (at {e.json_path})") from e


def parse_import_rule(raw: Any, key: str = "imports") -> ImportRule:
    """Validate one rule mapping from a settings file.

    Raises:
        ConfigError: Missing name/source, wrong field types, or an unknown kind.
    """
    _validate(raw, IMPORT_RULE_SCHEMA, key)
    return ImportRule(
        name=raw["name"],
        source=raw["source"],
        id=raw.get("id"),
        dependency=raw.get("dependency"),
        kind=CompletionKind(raw.get("kind") or CompletionKind.VARIABLE),
    )


def build_settings(raw: Mapping[str, Any], sources: Sequence[Path] = ()) -> Settings:
    """Validate merged raw settings into a Settings snapshot.

    Raises:
        ConfigError: A setting is missing or has the wrong shape.
    """
    _validate(dict(raw), SETTINGS_SCHEMA, "merged settings")

    rules: list[ImportRule] = []
    if raw["include_default_imports"]:
        rules.extend(DEFAULT_IMPORT_RULES)
    for key in ("imports", "workspace_imports"):
        rules.extend(parse_import_rule(item, key) for item in raw[key])

    return Settings(
        imports=tuple(rules),
        disabled=tuple(raw["disabled"]),
        allow_disabled=tuple(raw["allow_disabled"]),
        quote_style=raw["quote_style"],
        package_matcher_globs=tuple(raw["package_matcher"]),
        package_matcher_ignore_globs=tuple(raw["package_matcher_ignore"]),
        insert_semicolon=raw["insert_semicolon"],
        organize_imports_on_insert=raw["organize_imports_on_insert"],
        format_document_on_insert=raw["format_document_on_insert"],
        disable_suggestions=raw["disable_suggestions"],
        disable_node_modules_warning=raw["disable_node_modules_warning"],
        sources=tuple(sources),
    )


def read_settings_file(path: Path) -> dict[str, Any]:
    """Load one YAML settings layer; a missing file is an empty layer.

    Raises:
        ConfigError: The file is not valid YAML or does not match SETTINGS_LAYER_SCHEMA.
    """
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    _validate(data, SETTINGS_LAYER_SCHEMA, path)
    return data


def load_settings(layer_paths: Sequence[Path]) -> Settings:
    """Merge defaults with each YAML layer in order and validate the result."""
    merged: dict[str, Any] = dict(DEFAULT_SETTINGS)
    sources: list[Path] = []
    for path in layer_paths:
        layer = read_settings_file(path)
        if layer:
            sources.append(path)
        merged.update(layer)
    return build_settings(merged, sources)


type SettingsListener = Callable[[Settings, Settings], None]


class ConfigStore:
    """Holds the current settings snapshot and tells subscribers when it changes."""

    def __init__(
        self,
        workspace_file: Path,
        user_file: Path | None = USER_CONFIG_PATH,
        *,
        initial: Settings | None = None,
    ) -> None:
        self.workspace_file = workspace_file
        self.user_file = user_file
        self._listeners: list[SettingsListener] = []
        self._snapshot = initial if initial is not None else load_settings(self.layer_paths)
        logger.debug("Loaded settings from %s", self._snapshot.sources)

    @classmethod
    def for_workspace(cls, root: Path, user_file: Path | None = USER_CONFIG_PATH) -> "ConfigStore":
        """Create a store reading <root>/.ace-imports.yaml."""
        return cls(root / WORKSPACE_CONFIG_FILE_NAME, user_file)

    @property
    def layer_paths(self) -> tuple[Path, ...]:
        """Settings files, lowest priority first."""
        if self.user_file is None:
            return (self.workspace_file,)
        return (self.user_file, self.workspace_file)

    @property
    def snapshot(self) -> Settings:
        """The current settings."""
        return self._snapshot

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register listener(old, new) for changes; returns a function that unsubscribes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace(self, settings: Settings) -> None:
        """Swap in a new snapshot and notify subscribers if it differs."""
        previous = self._snapshot
        self._snapshot = settings
        if settings != previous:
            logger.info("Settings changed")
            for listener in list(self._listeners):
                listener(previous, settings)

    def reload(self) -> Settings:
        """Re-read every layer from disk."""
        self.replace(load_settings(self.layer_paths))
        return self._snapshot

    def update(self, key: str, value: Any) -> Settings:
        """Write one setting into the workspace file and reload.

        Raises:
            ConfigError: The key is unknown or the value does not fit its schema.
        """
        _validate({key: value}, SETTINGS_LAYER_SCHEMA, self.workspace_file)
        data = read_settings_file(self.workspace_file)
        data[key] = value
        self.workspace_file.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        logger.info("Updated %s in %s", key, self.workspace_file)
        return self.reload()


def ignore_node_modules(store: ConfigStore) -> Settings:
    """Add the node_modules ignore glob to the workspace settings if it is missing."""
    current = list(store.snapshot.package_matcher_ignore_globs)
    if NODE_MODULES_IGNORE_GLOB in current:
        return store.snapshot
    return store.update("package_matcher_ignore", [*current, NODE_MODULES_IGNORE_GLOB])


def disable_node_modules_warning(store: ConfigStore) -> Settings:
    """Turn off the node_modules manifest warning for this workspace."""
    if store.snapshot.disable_node_modules_warning:
        return store.snapshot
    return store.update("disable_node_modules_warning", True)
