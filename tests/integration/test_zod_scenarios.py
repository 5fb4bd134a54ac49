"""End-to-end tests resolving namespace imports in real workspaces."""

import pytest

from ace_imports.composer import compose_import_code
from ace_imports.locator import clear_locator_cache
from ace_imports.models import QuoteStyle
from ace_imports.session import ImportSession
from tests.helpers.factories import make_document, make_rule, make_settings, make_store
from tests.helpers.temp_files import temp_workspace


@pytest.fixture(autouse=True)
def fresh_locator_cache() -> None:
    """Start every test with an empty upward-search cache."""
    clear_locator_cache()


def test_documented_zod_scenario() -> None:
    """Test the single-rule zod workspace from manifest to statement."""
    rule = make_rule("z", "zod", dependency="zod@^3.0.0")
    settings = make_settings(rule, quote_style="double", insert_semicolon=True)
    with temp_workspace({"package.json": {"dependencies": {"zod": "^3.20.0"}}}) as root:
        session = ImportSession.activate([root], make_store(root, settings))

        resolved = session.resolve(make_document(""))

        assert resolved.imports == (rule,)
        assert resolved.quote_style == QuoteStyle.DOUBLE
        statement = compose_import_code(rule, resolved.quote_style, use_semicolon=settings.insert_semicolon)
        assert statement == 'import * as z from "zod";'


@pytest.mark.parametrize(
    ("installed", "expected_source"),
    [
        ("^3.0.0", "zod"),
        ("^3.24.2", "zod"),
        ("^3.25.0", "zod/v4"),
        ("^3.25.76", "zod/v4"),
    ],
)
def test_default_rules_pick_zod_entry_point(installed: str, expected_source: str) -> None:
    """Test that the installed zod version decides between zod and zod/v4."""
    with temp_workspace({"package.json": {"dependencies": {"zod": installed}}}) as root:
        session = ImportSession.activate([root], make_store(root))

        resolved = session.resolve(make_document())

        assert [rule.source for rule in resolved.imports] == [expected_source]


def test_allow_disabled_zod_mini_never_wins_tie() -> None:
    """Test that re-enabling zod-mini keeps zod/v4, which comes first with the same range."""
    settings = make_settings(include_default_imports=True, allow_disabled=["zod-mini"])
    with temp_workspace({"package.json": {"dependencies": {"zod": "^3.25.0"}}}) as root:
        session = ImportSession.activate([root], make_store(root, settings))

        assert [rule.source for rule in session.resolve(make_document()).imports] == ["zod/v4"]


def test_zod_not_installed() -> None:
    """Test that nothing is suggested without zod."""
    with temp_workspace({"package.json": {"dependencies": {"react": "^18.0.0"}}}) as root:
        session = ImportSession.activate([root], make_store(root))

        assert session.resolve(make_document()).imports == ()


def test_existing_import_suppresses_suggestion() -> None:
    """Test that a document already importing z gets no z suggestion."""
    with temp_workspace({"package.json": {"dependencies": {"zod": "^3.22.0"}}}) as root:
        session = ImportSession.activate([root], make_store(root))

        document = make_document("import * as z from 'zod';\n\nexport const id = z.string();\n")

        assert session.resolve(document).imports == ()


def test_single_quote_workspace() -> None:
    """Test that a workspace Prettier config shapes the composed statement."""
    files = {
        "package.json": {"dependencies": {"zod": "^3.22.0"}},
        ".prettierrc.yaml": "singleQuote: true\nsemi: false\n",
    }
    with temp_workspace(files) as root:
        session = ImportSession.activate([root], make_store(root))

        items = session.completion_items(make_document('const label = "user";'))

        assert items[0].additional_text_edits[0].new_text == "import * as z from 'zod'\n"
