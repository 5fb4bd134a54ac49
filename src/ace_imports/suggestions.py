"""Editor-facing values built from resolved imports: completion items and insert edits."""

from .composer import compose_import_code
from .config import Settings
from .models import (
    DOCUMENT_START,
    CompletionItem,
    ImportRule,
    InsertionEdit,
    ResolvedImportSet,
    TextEdit,
)

LABEL_DETAIL = "*"
POST_INSERT_COMMAND = "ace-imports.postInsertActions"
ORGANIZE_IMPORTS_COMMAND = "editor.action.organizeImports"
FORMAT_DOCUMENT_COMMAND = "editor.action.formatDocument"


def build_completion_item(rule: ImportRule, resolved: ResolvedImportSet, settings: Settings) -> CompletionItem:
    """Build the completion entry that inserts rule.name and adds its import at the top."""
    statement = compose_import_code(
        rule, resolved.quote_style, use_semicolon=settings.insert_semicolon
    )
    return CompletionItem(
        label=rule.name,
        detail=LABEL_DETAIL,
        description=rule.source,
        kind=rule.kind,
        insert_text=rule.name,
        filter_text=f"{rule.name}{LABEL_DETAIL}",
        documentation=f'Add namespace import from "{rule.source}"',
        additional_text_edits=(TextEdit(position=DOCUMENT_START, new_text=f"{statement}\n"),),
        command=POST_INSERT_COMMAND,
    )


def build_completion_items(resolved: ResolvedImportSet, settings: Settings) -> tuple[CompletionItem, ...]:
    """One completion item per resolved import, in resolution order."""
    return tuple(build_completion_item(rule, resolved, settings) for rule in resolved.imports)


def post_insert_actions(settings: Settings) -> tuple[str, ...]:
    """Editor commands to run after an import was inserted."""
    actions: list[str] = []
    if settings.organize_imports_on_insert:
        actions.append(ORGANIZE_IMPORTS_COMMAND)
    if settings.format_document_on_insert:
        actions.append(FORMAT_DOCUMENT_COMMAND)
    return tuple(actions)


def build_insertion_edit(rule: ImportRule, resolved: ResolvedImportSet, settings: Settings) -> InsertionEdit:
    """Edits for the insert command: the statement at document start, the name at the cursor."""
    statement = compose_import_code(
        rule, resolved.quote_style, use_semicolon=settings.insert_semicolon
    )
    return InsertionEdit(
        rule=rule,
        statement=statement,
        import_edit=TextEdit(position=DOCUMENT_START, new_text=f"{statement}\n"),
        cursor_text=rule.name,
        post_insert_commands=post_insert_actions(settings),
    )


def apply_insertion(text: str, edit: InsertionEdit, cursor: tuple[int, int] | None = None) -> str:
    """Apply an insertion edit to document text.

    Args:
        text: Document text before the edit
        edit: Edit from build_insertion_edit
        cursor: Zero-based (line, column) where the bound name is typed, measured
            in the original text; None to only add the import

    Returns:
        The document text after both insertions
    """
    if cursor is not None:
        lines = text.splitlines(keepends=True) or [""]
        line, column = cursor
        # Positions past the end land on the last line
        line = min(line, len(lines) - 1)
        target = lines[line]
        column = min(column, len(target.rstrip("\r\n")))
        lines[line] = f"{target[:column]}{edit.cursor_text}{target[column:]}"
        text = "".join(lines)
    return f"{edit.import_edit.new_text}{text}"
