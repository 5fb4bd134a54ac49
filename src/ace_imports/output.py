"""Rich formatting and display for suggestions, insertions and session state."""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .composer import compose_import_code
from .config import Settings
from .globs import merge_globs
from .models import InsertionEdit, ResolvedImportSet
from .session import DebugState


def format_suggestions_table(resolved: ResolvedImportSet, settings: Settings) -> Table:
    """Create Rich table listing applicable imports."""
    table = Table(title="Available Namespace Imports")

    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Source", style="magenta")
    table.add_column("Statement", style="green")
    table.add_column("Kind", justify="right")

    for rule in resolved.imports:
        statement = compose_import_code(
            rule, resolved.quote_style, use_semicolon=settings.insert_semicolon
        )
        table.add_row(rule.name, rule.source, statement, rule.kind.value)

    return table


def display_suggestions(console: Console, resolved: ResolvedImportSet, settings: Settings) -> None:
    """Display applicable imports with the quote style used to render them."""
    if not resolved.imports:
        console.print("[yellow]No applicable imports found in the current document.[/yellow]")
        return

    console.print(format_suggestions_table(resolved, settings))
    console.print(f"Quote style: [bold]{resolved.quote_style.value}[/bold]")


def display_insertion(console: Console, edit: InsertionEdit) -> None:
    """Report an inserted import and any editor actions that should follow."""
    console.print(f"[green]Inserted:[/green] {edit.statement}")
    if edit.post_insert_commands:
        console.print("\n[bold]Post-insert editor actions:[/bold]")
        for command in edit.post_insert_commands:
            console.print(f"  {command}")


def format_dependencies_table(dependencies: dict[str, str]) -> Table:
    """Create Rich table of the active dependency map."""
    table = Table(title="Active Dependencies")
    table.add_column("Package", style="cyan", no_wrap=True)
    table.add_column("Range", style="magenta")
    for name in sorted(dependencies):
        table.add_row(name, dependencies[name])
    return table


def display_debug_state(console: Console, state: DebugState) -> None:
    """Print the state dump used to diagnose missing suggestions."""
    settings = state.settings
    console.print("[bold]Configuration:[/bold]")
    console.print(f"  Settings files: {[str(path) for path in settings.sources] or 'defaults only'}")
    console.print(f"  Rules: {len(settings.imports)}")
    console.print(f"  Disabled ids: {sorted(settings.disabled_ids)}")
    console.print(f"  Quote style setting: {settings.quote_style}")
    console.print(f"  Package matcher: {merge_globs(settings.package_matcher_globs)}")
    console.print(f"  Package matcher ignore: {merge_globs(settings.package_matcher_ignore_globs)}")

    console.print("\n[bold]Matched package files:[/bold]")
    if not state.matched_files:
        console.print("  [yellow]none[/yellow]")
    for path in state.matched_files:
        marker = Text(" (tracked)", style="green") if path in state.tracked_files else Text(" (skipped)", style="red")
        console.print(Text(f"  {path}") + marker)

    console.print()
    console.print(format_dependencies_table(state.dependencies))

    workspace_style = state.workspace_quote_style.value if state.workspace_quote_style else "none"
    last_style = state.last_found_quote_style.value if state.last_found_quote_style else "none"
    console.print(f"Workspace formatter quote style: {workspace_style}")
    console.print(f"Last detected quote style: {last_style}")
