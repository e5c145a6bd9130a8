import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import registry
from .config import Settings
from .constants import APP_NAME
from .exceptions import (
    ConfigParseError,
    DuplicateNameError,
    NotFoundError,
)
from .store import ConfigStore, Registry
from .sync import SyncEngine

logger = logging.getLogger(APP_NAME)
console = Console()


def _fail(message: str) -> NoReturn:
    """Prints an error message and exits with status 1."""
    console.print(f"[bold red]{escape(message)}[/bold red]")
    sys.exit(1)


def _load(store: ConfigStore) -> Registry:
    """Loads the registry, exiting on parse or filesystem errors."""
    try:
        return store.load()
    except (ConfigParseError, OSError) as e:
        _fail(f"Error loading config: {e}")


def add_repo(
    store: ConfigStore,
    name: str,
    url: str,
    branch: str | None = None,
    path: str | None = None,
) -> None:
    """Adds a repository to the registry and confirms on the console."""
    if path:
        path = str(Path(path).expanduser())
    try:
        registry.add(store, name, url, branch=branch, path=path)
    except (DuplicateNameError, ValueError) as e:
        _fail(str(e))
    except ConfigParseError as e:
        _fail(f"Error loading config: {e}")
    except OSError as e:
        _fail(f"Error saving config: {e}")
    console.print(f"[green]✓ Added repo '{escape(name)}' to config[/green]")


def remove_repo(store: ConfigStore, name: str) -> None:
    """Removes a repository from the registry. The clone on disk is kept."""
    try:
        registry.remove(store, name)
    except NotFoundError as e:
        _fail(str(e))
    except ConfigParseError as e:
        _fail(f"Error loading config: {e}")
    except OSError as e:
        _fail(f"Error saving config: {e}")
    console.print(f"[green]✓ Removed repo '{escape(name)}' from config[/green]")


def update_repos(store: ConfigStore, name: str | None = None) -> None:
    """Clones or refreshes every registered repository, or only `name`.

    Per-repository failures are reported but never change the exit status.
    """
    reg = _load(store)
    if not reg.repos:
        console.print("[yellow]No repos configured[/yellow]")
        return

    engine = SyncEngine(store.settings)
    try:
        results = engine.update(reg, name)
    except NotFoundError as e:
        _fail(str(e))

    failed = [r for r in results if not r.ok]
    summary = f"{len(results) - len(failed)} succeeded, {len(failed)} failed"
    if failed:
        names = ", ".join(r.repo.name for r in failed)
        console.print(f"[yellow]{summary}[/yellow] [dim]({escape(names)})[/dim]")
    else:
        console.print(f"[bold green]{summary}[/bold green]")


def list_repos(store: ConfigStore) -> None:
    """Displays every registered repository with its clone status."""
    try:
        statuses = registry.list_repos(store)
    except (ConfigParseError, OSError) as e:
        _fail(f"Error loading config: {e}")

    if not statuses:
        console.print("[yellow]No repos configured[/yellow]")
        return

    table = Table(title="Configured repos", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("URL", overflow="fold")
    table.add_column("Branch", style="dim", no_wrap=True)

    for status in statuses:
        style = "green" if status.cloned else "yellow"
        table.add_row(
            escape(status.repo.name),
            f"[{style}]{status.label}[/{style}]",
            escape(status.repo.url),
            escape(status.repo.branch),
        )

    console.print(table)


def setup_logging(verbose: bool = False) -> None:
    """Configures the depo logger to write to stderr.

    Args:
        verbose (bool): If True, log at DEBUG. Otherwise only warnings and errors.
    """
    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S"
    )
    for handler in list(logger.handlers):
        if getattr(handler, "_depo_handler", False):
            logger.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    stream_handler._depo_handler = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


class DepoArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


class DepoHelpFormatter(argparse.HelpFormatter):
    """Help formatter that groups subcommands under short headings."""

    def _format_action(self, action: argparse.Action) -> str:
        if isinstance(action, argparse._SubParsersAction):
            parts = []

            groups = {
                "Registry": ["add", "remove", "list"],
                "Sync": ["update"],
            }

            subactions = list(self._iter_indented_subactions(action))

            for group_name, commands in groups.items():
                group_actions = [a for a in subactions if a.dest in commands]
                if not group_actions:
                    continue

                parts.append(f"\n  {group_name}:\n")

                self._indent()
                for subaction in group_actions:
                    parts.append(self._format_action(subaction))
                self._dedent()

            return self._join_parts(parts)

        return super()._format_action(action)


def build_parser() -> argparse.ArgumentParser:
    """Constructs the argument parser for all subcommands."""
    parser = DepoArgumentParser(
        prog=APP_NAME,
        description="Manage reference repositories globally.",
        formatter_class=DepoHelpFormatter,
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Vendor root directory (default: $DEPO_ROOT or ~/.vendor)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command")

    add_parser = subparsers.add_parser("add", help="Add a new repo to manage")
    add_parser.add_argument("name", help="Unique name for the repo")
    add_parser.add_argument("url", help="Git URL to clone from")
    add_parser.add_argument(
        "--branch", default=None, help="Git branch to track (default: main)"
    )
    add_parser.add_argument(
        "--path", default=None, help="Local path for repo (default: <root>/<name>)"
    )

    remove_parser = subparsers.add_parser(
        "remove", help="Remove a repo from management"
    )
    remove_parser.add_argument("name", help="Name of the repo to remove")

    update_parser = subparsers.add_parser(
        "update", help="Update repos (all or specific one)"
    )
    update_parser.add_argument(
        "name", nargs="?", default=None, help="Only update this repo"
    )

    subparsers.add_parser("list", help="List configured repos")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the depo CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return

    store = ConfigStore(Settings.load(root=args.root))
    logger.debug(f"Using config {store.path}")

    if args.command == "add":
        add_repo(store, args.name, args.url, branch=args.branch, path=args.path)
    elif args.command == "remove":
        remove_repo(store, args.name)
    elif args.command == "update":
        update_repos(store, args.name)
    elif args.command == "list":
        list_repos(store)


if __name__ == "__main__":
    main()
