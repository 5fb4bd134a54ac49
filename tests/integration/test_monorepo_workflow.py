"""Integration tests for multi-package workspaces and watched changes."""

import pytest
import yaml

from ace_imports.config import NODE_MODULES_IGNORE_GLOB, ignore_node_modules
from ace_imports.locator import clear_locator_cache
from ace_imports.session import ImportSession
from ace_imports.watcher import PollingWatcher
from tests.helpers.factories import make_document, make_rule, make_settings, make_store
from tests.helpers.temp_files import temp_workspace, write_manifest

MONOREPO = {
    "package.json": {"name": "root", "devDependencies": {"typescript": "^5.4.0"}},
    "packages/api/package.json": {"dependencies": {"lodash": "^3.10.0"}},
    "packages/web/package.json": {
        "dependencies": {"react": "^17.0.0", "lodash": "^4.17.0"},
        "peerDependencies": {"react": "^18.0.0"},
    },
    "packages/web/node_modules/lodash/package.json": {"name": "lodash", "version": "4.17.21"},
}

RULES = (
    make_rule("_", "lodash", dependency="lodash@^4.0.0"),
    make_rule("React", "react", dependency="react@^18.0.0"),
    make_rule("ts", "typescript"),
)


@pytest.fixture(autouse=True)
def fresh_locator_cache() -> None:
    """Start every test with an empty upward-search cache."""
    clear_locator_cache()


def test_monorepo_merges_manifests() -> None:
    """Test the merged view across the root and package manifests."""
    with temp_workspace(MONOREPO) as root:
        session = ImportSession.activate([root], make_store(root, make_settings(*RULES)))

        assert session.dependencies.dependencies == {
            "typescript": "^5.4.0",
            "lodash": "^4.17.0",
            "react": "^18.0.0",
        }
        names = [rule.name for rule in session.resolve(make_document()).imports]
        assert names == ["_", "React", "ts"]


def test_watched_edits_change_suggestions() -> None:
    """Test that manifest edits picked up by the watcher change the suggestions."""
    with temp_workspace(MONOREPO) as root:
        session = ImportSession.activate([root], make_store(root, make_settings(*RULES)))
        watcher = PollingWatcher(session, interval=0)
        document = make_document()

        write_manifest(root / "packages" / "web" / "package.json", dependencies={"react": "^17.0.2"})
        watcher.poll()

        # lodash now only comes from packages/api, which is too old
        assert [rule.name for rule in session.resolve(document).imports] == ["ts"]

        (root / "packages" / "api" / "package.json").unlink()
        write_manifest(root / "packages" / "web" / "package.json", dependencies={"lodash": "^4.17.21"})
        watcher.poll()

        assert [rule.name for rule in session.resolve(document).imports] == ["_", "ts"]


def test_settings_edit_picked_up_by_watcher() -> None:
    """Test that editing the workspace settings file changes the rule set."""
    with temp_workspace(MONOREPO) as root:
        store = make_store(root)
        session = ImportSession.activate([root], store)
        watcher = PollingWatcher(session, interval=0)
        assert session.resolve(make_document()).imports == ()

        store.workspace_file.write_text(
            yaml.safe_dump({"imports": [{"name": "_", "source": "lodash", "dependency": "lodash@^4.0.0"}]}),
            encoding="utf-8",
        )
        watcher.poll()

        assert [rule.source for rule in session.resolve(make_document()).imports] == ["lodash"]


def test_ignore_node_modules_after_warning() -> None:
    """Test that a workspace scanning node_modules can opt back into ignoring it."""
    with temp_workspace(MONOREPO) as root:
        store = make_store(root)
        store.update("package_matcher_ignore", [])
        session = ImportSession.activate([root], store)
        node_modules_manifest = root / "packages" / "web" / "node_modules" / "lodash" / "package.json"
        assert node_modules_manifest in session.dependencies.tracked_files

        ignore_node_modules(store)

        assert store.snapshot.package_matcher_ignore_globs == (NODE_MODULES_IGNORE_GLOB,)
        assert node_modules_manifest not in session.dependencies.tracked_files
