"""A running ace-imports session for one workspace.

The session owns the live state the resolution engine reads on every call:
settings from the config store, the active dependency set, the quote style
stated by the workspace's formatter configs, and the quote style found by the
last resolution. Host code (an editor integration or the CLI) activates a
session, forwards file events to it, and asks it for suggestions.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from .config import ConfigStore, Settings
from .dependencies import ActiveDependencies
from .errors import AceImportsError, ImportNotAvailableError, NoPrimaryWorkspaceError
from .iteration import first
from .locator import clear_locator_cache
from .models import (
    CompletionItem,
    Document,
    InsertionEdit,
    QuoteStyle,
    QuoteStyleInputs,
    ResolvedImportSet,
)
from .quotes import FORMATTER_CONFIG_FILE_NAMES, find_workspace_quote_style, resolve_quote_style
from .resolver import resolve_imports
from .suggestions import build_completion_items, build_insertion_edit

logger = logging.getLogger(__name__)


class FileEventKind(StrEnum):
    """Kinds of file system events a watcher reports."""

    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"


@dataclass(frozen=True)
class DebugState:
    """Snapshot of the session state for diagnostics."""

    settings: Settings
    matched_files: tuple[Path, ...]
    tracked_files: tuple[Path, ...]
    dependencies: dict[str, str]
    workspace_quote_style: QuoteStyle | None
    last_found_quote_style: QuoteStyle | None


def build_active_dependencies(roots: Sequence[Path], settings: Settings) -> ActiveDependencies:
    """Create the dependency tracker for the given settings and run its first scan."""
    dependencies = ActiveDependencies(
        roots,
        settings.package_matcher_globs,
        settings.package_matcher_ignore_globs,
        warn_on_node_modules=not settings.disable_node_modules_warning,
    )
    dependencies.rescan()
    return dependencies


class ImportSession:
    """Live state for suggesting namespace imports in one workspace."""

    def __init__(
        self,
        workspace_roots: Sequence[Path],
        store: ConfigStore,
        dependencies: ActiveDependencies,
    ) -> None:
        self.workspace_roots = tuple(workspace_roots)
        self.store = store
        self.dependencies = dependencies
        self.workspace_quote_style: QuoteStyle | None = None
        # Written by every successful resolution; last write wins
        self.last_found_quote_style: QuoteStyle | None = None
        self._unsubscribe = store.subscribe(self._on_settings_changed)
        self.refresh_workspace_quote_style()

    @classmethod
    def activate(cls, workspace_roots: Sequence[Path], store: ConfigStore) -> "ImportSession":
        """Start a session for the given workspace folders; the first one is primary.

        Raises:
            NoPrimaryWorkspaceError: No workspace folder was given.
        """
        if not workspace_roots:
            raise NoPrimaryWorkspaceError(
                "No primary workspace folder found. Cannot activate without a workspace folder."
            )
        logger.info("Activating for workspace folders: %s", [str(root) for root in workspace_roots])
        dependencies = build_active_dependencies(workspace_roots, store.snapshot)
        return cls(workspace_roots, store, dependencies)

    @property
    def primary_root(self) -> Path:
        """The workspace folder used for formatter config detection."""
        return self.workspace_roots[0]

    @property
    def settings(self) -> Settings:
        """The current settings snapshot."""
        return self.store.snapshot

    def close(self) -> None:
        """Stop listening to settings changes."""
        self._unsubscribe()

    def refresh_workspace_quote_style(self) -> None:
        """Re-detect the quote style stated by Prettier/ESLint configs in the workspace."""
        clear_locator_cache()
        self.workspace_quote_style = find_workspace_quote_style(self.primary_root)
        if self.workspace_quote_style is not None:
            logger.info("Quote style from workspace formatter config: %s", self.workspace_quote_style)

    def _quote_inputs(self) -> QuoteStyleInputs:
        return QuoteStyleInputs(
            configured=self.settings.configured_quote_style,
            workspace=self.workspace_quote_style,
            last_found=self.last_found_quote_style,
        )

    def _on_settings_changed(self, previous: Settings, current: Settings) -> None:
        globs_changed = (
            previous.package_matcher_globs != current.package_matcher_globs
            or previous.package_matcher_ignore_globs != current.package_matcher_ignore_globs
        )
        if globs_changed:
            logger.info("Package matcher settings changed, rescanning manifests")
            self.dependencies = build_active_dependencies(self.workspace_roots, current)
        else:
            self.dependencies.warn_on_node_modules = not current.disable_node_modules_warning

    def resolve(self, document: Document) -> ResolvedImportSet:
        """Resolve the imports applicable to a document.

        Errors are logged and produce an empty result rather than a partial one.
        """
        logger.debug("Resolving imports for %s", document.path)
        settings = self.settings
        inputs = self._quote_inputs()
        text = document.get_text()
        try:
            resolved = resolve_imports(
                settings.imports,
                settings.disabled_ids,
                self.dependencies.dependencies,
                text,
                inputs,
            )
        except AceImportsError:
            logger.exception("Failed to resolve imports for %s", document.path)
            return ResolvedImportSet(imports=(), quote_style=resolve_quote_style(text, inputs))

        self.last_found_quote_style = resolved.quote_style
        return resolved

    def completion_items(self, document: Document) -> tuple[CompletionItem, ...]:
        """Completion entries for a document; empty when suggestions are disabled."""
        if self.settings.disable_suggestions:
            logger.debug("Suggestions are disabled, no completions will be provided")
            return ()
        return build_completion_items(self.resolve(document), self.settings)

    def insert_import(self, document: Document, name: str) -> InsertionEdit | None:
        """Build the edits that insert the import bound to name.

        Returns:
            The insertion edit, or None when no imports apply to the document at all.

        Raises:
            ImportNotAvailableError: Imports apply, but none binds name.
        """
        resolved = self.resolve(document)
        if not resolved.imports:
            logger.info("No applicable imports found in %s", document.path)
            return None

        rule = first(resolved.imports, lambda candidate: candidate.name == name)
        if rule is None:
            raise ImportNotAvailableError(name)
        return build_insertion_edit(rule, resolved, self.settings)

    def handle_file_event(self, path: Path, kind: FileEventKind) -> None:
        """Route a watcher event to whatever state depends on the file."""
        if path.name in FORMATTER_CONFIG_FILE_NAMES:
            logger.info("Formatter config %s: %s", kind, path)
            self.refresh_workspace_quote_style()
            return

        if path == self.store.workspace_file:
            self.store.reload()
            return

        if not self.dependencies.is_relevant(path):
            return
        clear_locator_cache()
        match kind:
            case FileEventKind.CREATED:
                self.dependencies.file_created(path)
            case FileEventKind.CHANGED:
                self.dependencies.file_changed(path)
            case FileEventKind.DELETED:
                self.dependencies.file_deleted(path)

    def debug_state(self) -> DebugState:
        """Collect the state shown by the debug command."""
        return DebugState(
            settings=self.settings,
            matched_files=self.dependencies.last_matched_files,
            tracked_files=self.dependencies.tracked_files,
            dependencies=self.dependencies.dependencies,
            workspace_quote_style=self.workspace_quote_style,
            last_found_quote_style=self.last_found_quote_style,
        )
