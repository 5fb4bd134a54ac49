"""Tests for settings loading and the config store."""

import re
from pathlib import Path

import jsonschema
import pytest
import yaml

from ace_imports.config import (
    DEFAULT_IMPORT_RULES,
    NODE_MODULES_IGNORE_GLOB,
    ConfigStore,
    Settings,
    disable_node_modules_warning,
    ignore_node_modules,
    load_settings,
    parse_import_rule,
    read_settings_file,
)
from ace_imports.errors import ConfigError
from ace_imports.models import CompletionKind, ImportRule, QuoteStyle
from tests.helpers.factories import make_settings, make_store
from tests.helpers.temp_files import temp_workspace


def write_yaml(path: Path, data: dict) -> Path:
    """Write a settings layer."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_defaults_without_files() -> None:
    """Test the built-in settings when no layer exists."""
    with temp_workspace() as root:
        settings = load_settings([root / ".ace-imports.yaml"])

        assert settings.imports == DEFAULT_IMPORT_RULES
        assert settings.disabled_ids == frozenset({"zod-mini"})
        assert settings.configured_quote_style is None
        assert settings.package_matcher_globs == ("**/package.json",)
        assert settings.package_matcher_ignore_globs == (NODE_MODULES_IGNORE_GLOB,)
        assert settings.insert_semicolon is False
        assert settings.sources == ()


def test_workspace_layer_overrides_user_layer() -> None:
    """Test that later layers win key by key."""
    with temp_workspace() as root:
        user = write_yaml(root / "user.yaml", {"quote_style": "single", "insert_semicolon": True})
        workspace = write_yaml(root / ".ace-imports.yaml", {"quote_style": "backtick"})

        settings = load_settings([user, workspace])

        assert settings.configured_quote_style == QuoteStyle.BACKTICK
        assert settings.insert_semicolon is True
        assert settings.sources == (user, workspace)


def test_imports_and_workspace_imports_are_concatenated() -> None:
    """Test rule ordering: defaults, imports, then workspace_imports."""
    with temp_workspace() as root:
        workspace = write_yaml(
            root / ".ace-imports.yaml",
            {
                "imports": [{"name": "_", "source": "lodash", "dependency": "lodash@^4.0.0"}],
                "workspace_imports": [{"name": "React", "source": "react", "kind": "Module", "id": "react"}],
            },
        )

        settings = load_settings([workspace])

        assert settings.imports[: len(DEFAULT_IMPORT_RULES)] == DEFAULT_IMPORT_RULES
        assert settings.imports[len(DEFAULT_IMPORT_RULES) :] == (
            ImportRule(name="_", source="lodash", dependency="lodash@^4.0.0"),
            ImportRule(name="React", source="react", id="react", kind=CompletionKind.MODULE),
        )


def test_default_imports_can_be_excluded() -> None:
    """Test turning off the built-in rules."""
    settings = make_settings(include_default_imports=False)

    assert settings.imports == ()


def test_allow_disabled_reenables_rule() -> None:
    """Test that allow_disabled removes ids from the disabled set."""
    settings = make_settings(disabled=["zod-mini", "legacy"], allow_disabled=["zod-mini"])

    assert settings.disabled_ids == frozenset({"legacy"})


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ({"source": "zod"}, "'name' is a required property"),
        ({"name": "z"}, "'source' is a required property"),
        ({"name": "z", "source": "zod", "alias": "x"}, "Additional properties are not allowed ('alias' was unexpected)"),
        ({"name": "z", "source": "zod", "kind": "Widget"}, "'Widget' is not one of"),
        ({"name": "z", "source": "zod", "dependency": 3}, "3 is not of type"),
        ("zod", "'zod' is not of type 'object'"),
    ],
)
def test_parse_import_rule_invalid(raw: object, message: str) -> None:
    """Test rule validation errors."""
    with pytest.raises(ConfigError, match=re.escape(message)):
        parse_import_rule(raw)


def test_parse_import_rule_null_kind_defaults_to_variable() -> None:
    """Test that an explicit null kind falls back to Variable."""
    rule = parse_import_rule({"name": "z", "source": "zod", "kind": None, "id": None})

    assert rule == ImportRule(name="z", source="zod")


def test_parse_import_rule_error_wraps_validation_error() -> None:
    """Test that the schema error is chained onto the ConfigError."""
    with pytest.raises(ConfigError) as exc_info:
        parse_import_rule({"name": "z"})

    assert isinstance(exc_info.value.__cause__, jsonschema.ValidationError)


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"quote_style": "fancy"}, "'fancy' is not one of"),
        ({"disabled": "zod-mini"}, "'zod-mini' is not of type 'array' (at $.disabled)"),
        ({"insert_semicolon": "yes"}, "'yes' is not of type 'boolean' (at $.insert_semicolon)"),
        ({"unknown_key": True}, "Additional properties are not allowed ('unknown_key' was unexpected)"),
        ({"imports": [{"name": "z"}]}, "'source' is a required property (at $.imports[0])"),
        ({"package_matcher": ["**/package.json", 7]}, "7 is not of type 'string' (at $.package_matcher[1])"),
    ],
)
def test_invalid_settings_file(data: dict, message: str) -> None:
    """Test that invalid layers are rejected with the offending location."""
    with temp_workspace() as root:
        path = write_yaml(root / ".ace-imports.yaml", data)

        with pytest.raises(ConfigError, match=re.escape(message)) as exc_info:
            load_settings([path])

        assert str(path) in str(exc_info.value)


def test_read_settings_file_rejects_non_mapping() -> None:
    """Test that a YAML list is not a settings layer."""
    with temp_workspace({".ace-imports.yaml": "- a\n- b\n"}) as root:
        with pytest.raises(ConfigError, match=re.escape("['a', 'b'] is not of type 'object'")):
            read_settings_file(root / ".ace-imports.yaml")


def test_read_settings_file_empty_is_empty_layer() -> None:
    """Test that an empty YAML file contributes nothing."""
    with temp_workspace({".ace-imports.yaml": ""}) as root:
        assert read_settings_file(root / ".ace-imports.yaml") == {}


def test_read_settings_file_rejects_bad_yaml() -> None:
    """Test that malformed YAML is reported as a config error."""
    with temp_workspace({".ace-imports.yaml": "imports: [\n"}) as root:
        with pytest.raises(ConfigError, match="Invalid YAML"):
            read_settings_file(root / ".ace-imports.yaml")


def test_store_notifies_on_change() -> None:
    """Test that subscribers see old and new snapshots after a reload."""
    with temp_workspace() as root:
        store = make_store(root)
        changes: list[tuple[Settings, Settings]] = []
        store.subscribe(lambda old, new: changes.append((old, new)))

        write_yaml(store.workspace_file, {"insert_semicolon": True})
        store.reload()

        assert len(changes) == 1
        assert changes[0][0].insert_semicolon is False
        assert changes[0][1].insert_semicolon is True


def test_store_skips_notification_without_change() -> None:
    """Test that reloading identical settings is silent."""
    with temp_workspace() as root:
        store = make_store(root)
        changes: list[tuple[Settings, Settings]] = []
        store.subscribe(lambda old, new: changes.append((old, new)))

        store.reload()

        assert changes == []


def test_store_unsubscribe() -> None:
    """Test that an unsubscribed listener is not called."""
    with temp_workspace() as root:
        store = make_store(root)
        changes: list[Settings] = []
        unsubscribe = store.subscribe(lambda old, new: changes.append(new))
        unsubscribe()

        store.update("disable_suggestions", True)

        assert changes == []
        assert store.snapshot.disable_suggestions is True


def test_store_update_writes_workspace_file() -> None:
    """Test that update persists the value and keeps existing keys."""
    with temp_workspace() as root:
        store = make_store(root)
        write_yaml(store.workspace_file, {"quote_style": "single"})
        store.reload()

        store.update("insert_semicolon", True)

        assert yaml.safe_load(store.workspace_file.read_text(encoding="utf-8")) == {
            "quote_style": "single",
            "insert_semicolon": True,
        }
        assert store.snapshot.insert_semicolon is True


def test_store_update_rejects_unknown_key() -> None:
    """Test that update refuses keys that are not settings."""
    with temp_workspace() as root:
        with pytest.raises(ConfigError, match=re.escape("('colour' was unexpected)")):
            make_store(root).update("colour", "blue")


def test_store_update_rejects_bad_value_without_writing() -> None:
    """Test that a value of the wrong type never reaches the workspace file."""
    with temp_workspace() as root:
        store = make_store(root)

        with pytest.raises(ConfigError, match=re.escape("'often' is not of type 'boolean'")):
            store.update("insert_semicolon", "often")

        assert not store.workspace_file.exists()


def test_store_layer_paths() -> None:
    """Test user and workspace layer ordering."""
    workspace_file = Path("/workspace/.ace-imports.yaml")
    user_file = Path("/home/user/.config/ace-imports/config.yaml")

    assert ConfigStore(workspace_file, user_file, initial=Settings()).layer_paths == (user_file, workspace_file)
    assert ConfigStore(workspace_file, None, initial=Settings()).layer_paths == (workspace_file,)


def test_ignore_node_modules_adds_glob_once() -> None:
    """Test that the node_modules ignore glob is appended only when missing."""
    with temp_workspace() as root:
        store = make_store(root)
        store.update("package_matcher_ignore", ["**/dist/**"])

        ignore_node_modules(store)
        ignore_node_modules(store)

        assert store.snapshot.package_matcher_ignore_globs == ("**/dist/**", NODE_MODULES_IGNORE_GLOB)


def test_disable_node_modules_warning_writes_flag() -> None:
    """Test that the warning switch is persisted to the workspace file."""
    with temp_workspace() as root:
        store = make_store(root)

        settings = disable_node_modules_warning(store)

        assert settings.disable_node_modules_warning is True
        assert yaml.safe_load(store.workspace_file.read_text(encoding="utf-8")) == {
            "disable_node_modules_warning": True,
        }
