"""CLI entry point for ace-imports."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console

from .config import (
    NODE_MODULES_IGNORE_GLOB,
    USER_CONFIG_PATH,
    WORKSPACE_CONFIG_FILE_NAME,
    ConfigStore,
    disable_node_modules_warning,
    ignore_node_modules,
)
from .errors import AceImportsError
from .models import Document
from .output import display_debug_state, display_insertion, display_suggestions
from .session import ImportSession
from .suggestions import apply_insertion
from .watcher import DEFAULT_POLL_INTERVAL, PollingWatcher

logger = logging.getLogger(__name__)

# Commands that only write settings and never scan the workspace
SETTINGS_COMMANDS = ("ignore-node-modules", "disable-node-modules-warning")


def parse_cursor(value: str) -> tuple[int, int]:
    """Parse a 1-based LINE:COL cursor into a zero-based (line, column) pair."""
    try:
        line_text, column_text = value.split(":")
        line, column = int(line_text), int(column_text)
    except ValueError as e:
        msg = f"expected LINE:COL, got {value!r}"
        raise argparse.ArgumentTypeError(msg) from e
    if line < 1 or column < 1:
        msg = f"LINE and COL start at 1, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    return line - 1, column - 1


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Suggest and insert namespace imports for installed dependencies"
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        default=Path.cwd(),
        help="Workspace folder to scan for package.json files (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Workspace settings file (default: <workspace>/{WORKSPACE_CONFIG_FILE_NAME})",
    )
    parser.add_argument(
        "--no-user-config",
        action="store_true",
        help=f"Ignore the user settings file ({USER_CONFIG_PATH})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    suggest = subparsers.add_parser("suggest", help="List imports applicable to a file")
    suggest.add_argument("file", type=Path, help="JavaScript/TypeScript file to inspect")

    insert = subparsers.add_parser("insert", help="Insert an import into a file")
    insert.add_argument("file", type=Path, help="JavaScript/TypeScript file to edit")
    insert.add_argument("name", nargs="?", help="Bound name of the import; omit to list choices")
    insert.add_argument(
        "--at",
        type=parse_cursor,
        default=None,
        metavar="LINE:COL",
        help="Also type the bound name at this 1-based cursor position",
    )

    subparsers.add_parser("debug", help="Print settings, matched package files and dependencies")

    watch = subparsers.add_parser("watch", help="Track package.json and formatter config changes")
    watch.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help=f"Seconds between polls (default: {DEFAULT_POLL_INTERVAL})",
    )

    subparsers.add_parser(
        "ignore-node-modules",
        help=f"Add {NODE_MODULES_IGNORE_GLOB!r} to package_matcher_ignore in the workspace settings",
    )
    subparsers.add_parser(
        "disable-node-modules-warning",
        help="Stop warning about package.json files found inside node_modules",
    )

    return parser.parse_args(argv)


def build_store(args: argparse.Namespace) -> ConfigStore:
    """Load the settings layers for the requested workspace."""
    config_file = args.config or args.workspace.resolve() / WORKSPACE_CONFIG_FILE_NAME
    user_file = None if args.no_user_config else USER_CONFIG_PATH
    return ConfigStore(config_file, user_file)


def build_session(args: argparse.Namespace) -> ImportSession:
    """Load settings and activate a session for the requested workspace."""
    return ImportSession.activate([args.workspace.resolve()], build_store(args))


def run_settings_command(console: Console, store: ConfigStore, command: str) -> None:
    """Apply one of the node_modules write-backs to the workspace settings file."""
    if command == "ignore-node-modules":
        ignore_node_modules(store)
        console.print(
            f"[green]package.json files under node_modules are now ignored ({store.workspace_file})[/green]"
        )
    else:
        disable_node_modules_warning(store)
        console.print(f"[green]node_modules warning disabled ({store.workspace_file})[/green]")


def read_document(console: Console, path: Path) -> Document:
    """Load the target document, exiting with an error message if it is unusable."""
    if not path.exists():
        console.print(f"[red]Error: File {path} does not exist[/red]")
        sys.exit(1)

    if not path.is_file():
        console.print(f"[red]Error: {path} is not a file[/red]")
        sys.exit(1)

    return Document.from_path(path)


def run_insert(console: Console, session: ImportSession, args: argparse.Namespace) -> None:
    """Insert the requested import, or list the choices when no name was given."""
    document = read_document(console, args.file)
    if args.name is None:
        display_suggestions(console, session.resolve(document), session.settings)
        return

    edit = session.insert_import(document, args.name)
    if edit is None:
        console.print("[yellow]No applicable imports found in the current document.[/yellow]")
        return

    args.file.write_text(apply_insertion(document.text, edit, args.at), encoding="utf-8")
    display_insertion(console, edit)


def main(argv: list[str] | None = None) -> None:
    """Run the CLI application."""
    console = Console()
    args = parse_args(argv)

    # Configure logging
    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        logger.debug("Debug logging enabled")

    if not args.workspace.is_dir():
        console.print(f"[red]Error: {args.workspace} is not a directory[/red]")
        sys.exit(1)

    try:
        if args.command in SETTINGS_COMMANDS:
            run_settings_command(console, build_store(args), args.command)
            return

        session = build_session(args)

        match args.command:
            case "suggest":
                document = read_document(console, args.file)
                display_suggestions(console, session.resolve(document), session.settings)
            case "insert":
                run_insert(console, session, args)
            case "debug":
                display_debug_state(console, session.debug_state())
            case "watch":
                console.print(f"Watching {session.primary_root} (Ctrl+C to stop)")
                PollingWatcher(session, args.interval).run()

    except KeyboardInterrupt:
        console.print("\nStopped.")
    except AceImportsError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
