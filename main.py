"""
Connection Sorter - Main Entry Point

Terminal front end for sorting a contacts export (for example a LinkedIn
connections CSV) into people you know and people you don't, one card at
a time, then saving the known ones to a new CSV.

Flow:
┌──────────────┐     ┌──────────────────┐     ┌────────────────┐
│ contacts.csv │ ──▶ │ ConnectionSorter │ ──▶ │ ReviewSession  │
└──────────────┘     │  (read + parse)  │     │ decide/skip/   │
                     └──────────────────┘     │ undo           │
                                              └───────┬────────┘
                                                      ▼
                                           ┌────────────────────┐
                                           │ known_contacts.csv │
                                           └────────────────────┘

Keys (configurable in config/sorter.yaml):
    1  I know them      2  I don't know them
    3  Skip             u / Left Arrow  Undo
    q  Quit without saving
"""

import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.progress_bar import ProgressBar
from rich.table import Table

from errors import ConfigError
from review import Decision, KnownContactsExporter, ExportConfig, ReviewSession
from settings import (
    ACTION_DONT_KNOW,
    ACTION_KNOW,
    ACTION_QUIT,
    ACTION_SKIP,
    ACTION_UNDO,
    SorterConfig,
    load_config,
)
from sorter import ConnectionSorter


# Configure logging
def setup_logging(level: str = "INFO", log_file: Optional[Path] = None):
    """Configure loguru logging."""
    # Remove default handler
    logger.remove()

    # Console logging
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level,
        colorize=True
    )

    # File logging
    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )


def resolve_config(config_path: Optional[Path], console: Console) -> SorterConfig:
    """Load the given config, the bundled default, or built-in defaults."""
    if config_path is None:
        default_config = Path(__file__).parent / "config" / "sorter.yaml"
        if not default_config.exists():
            console.print("[dim]No config file found, using built-in defaults[/]")
            return SorterConfig()
        config_path = default_config

    return load_config(config_path)


def render_progress(console: Console, session: ReviewSession, config: SorterConfig) -> None:
    """Print the progress header and the current contact card."""
    record = session.current_record
    fraction = session.progress_fraction or 1.0

    console.print()
    console.print(
        f"Progress: {session.position} of {session.total_records}  "
        f"[bold]{round(fraction * 100)}%[/]"
    )
    console.print(ProgressBar(total=session.total_records, completed=session.position, width=40))
    console.print(
        f"[green]Known {session.known_count}[/]  "
        f"[red]Unknown {session.unknown_count}[/]  "
        f"[yellow]Skipped {session.skipped_count}[/]"
    )

    console.print()
    console.print(f"[bold]{escape(record.display_name)}[/]")
    if record.company:
        console.print(f"[dim]{escape(record.company)}[/]")

    hints = [
        f"[{config.key_label(ACTION_KNOW)}] I know them",
        f"[{config.key_label(ACTION_DONT_KNOW)}] I don't know them",
        f"[{config.key_label(ACTION_SKIP)}] Skip",
    ]
    if session.can_undo:
        hints.append(f"[{config.key_label(ACTION_UNDO)}] Undo")
    hints.append(f"[{config.key_label(ACTION_QUIT)}] Quit")
    console.print("  ".join(hints), markup=False)


def run_review(sorter: ConnectionSorter, console: Console) -> bool:
    """
    Read keys until the session is complete.

    Returns:
        True if the session completed, False if the user quit
    """
    config = sorter.config

    while sorter.session.is_active:
        render_progress(console, sorter.session, config)

        key = click.getchar()
        if not key:
            # Input closed
            return False

        action = config.action_for_key(key)

        if action == ACTION_QUIT:
            return False
        if action is None:
            logger.debug(f"Unbound key: {key!r}")
            continue

        sorter.handle_action(action)

    return True


def print_summary(console: Console, sorter: ConnectionSorter) -> None:
    """Print the completion summary table."""
    session = sorter.session

    table = Table(title="Sorting Complete!")
    table.add_column(f"{Decision.KNOWN.display_name} Contacts", style="green", justify="right")
    table.add_column(f"{Decision.UNKNOWN.display_name} Contacts", style="red", justify="right")
    table.add_row(str(session.known_count), str(session.unknown_count))

    console.print()
    console.print(table)

    if session.skipped_count > 0:
        console.print(f"[yellow]{session.skipped_count} contacts were skipped[/]")


def export_known(console: Console, sorter: ConnectionSorter, output_path: str) -> Optional[str]:
    """
    Write known contacts; nothing is written when there are none.

    An existing file is never replaced, so a second pass after "start
    over" lands next to the first export instead of on top of it.
    """
    if sorter.session.known_count == 0:
        console.print("[dim]No known contacts to export[/]")
        return None

    exporter = KnownContactsExporter(ExportConfig(filename=sorter.config.export_filename))
    path = exporter.export(sorter.session, output_path)
    console.print(f"[green]✓ Known contacts written to: {path}[/]")
    for line in exporter.preview(sorter.session, limit=3):
        console.print(f"  {line}", style="dim", markup=False)
    return path


def print_loaded(console: Console, sorter: ConnectionSorter) -> None:
    """Report how many contacts were loaded."""
    message = f"Loaded {len(sorter.records)} contacts from {sorter.source_name}"
    dropped = sorter.last_result.dropped_rows
    if dropped:
        message += f" ({dropped} rows without a name ignored)"
    console.print(message, markup=False)


def prompt_for_file(console: Console, sorter: ConnectionSorter) -> None:
    """Ask for contacts files until one loads."""
    while True:
        next_path = click.prompt(
            "Contacts CSV",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
        )
        if sorter.load_file(next_path):
            print_loaded(console, sorter)
            return
        console.print(f"[red]{sorter.error}[/]")


# CLI Interface
@click.command()
@click.option(
    '--input', '-i',
    'input_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help='Contacts CSV file to sort'
)
@click.option(
    '--output', '-o',
    'output_path',
    type=click.Path(),
    default=None,
    help='Output CSV file path or directory (default: export_filename from config)'
)
@click.option(
    '--config', '-c',
    'config_path',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Path to sorter.yaml configuration file'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable verbose logging'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Write logs to file'
)
def main(
    input_path: Path,
    output_path: Optional[str],
    config_path: Optional[Path],
    verbose: bool,
    log_file: Optional[Path]
):
    """
    Connection Sorter - Sort contacts into people you know and people you don't.

    Examples:

        # Sort a LinkedIn export, saving known_contacts.csv here
        python main.py -i Connections.csv

        # Custom output and key bindings
        python main.py -i Connections.csv -o ./out/ -c ./config/sorter.yaml
    """
    console = Console()

    # Provisional logging until the configured level is known
    setup_logging(level="DEBUG" if verbose else "INFO", log_file=log_file)

    try:
        config = resolve_config(config_path, console)
    except ConfigError as e:
        console.print(f"[bold red]{e.message}[/]")
        raise SystemExit(1)

    if not verbose and config.log_level != "INFO":
        setup_logging(level=config.log_level, log_file=log_file)

    console.print("[bold blue]Connection Sorter[/]")

    sorter = ConnectionSorter(config)
    if not sorter.load_file(input_path):
        console.print(f"[bold red]{sorter.error}[/]")
        raise SystemExit(1)

    print_loaded(console, sorter)

    output_path = output_path or config.export_filename

    try:
        while True:
            if not run_review(sorter, console):
                console.print("\n[yellow]Sorting stopped, nothing exported[/]")
                return

            print_summary(console, sorter)
            export_known(console, sorter, output_path)

            if not click.confirm("Start over with another file?", default=False):
                return

            sorter.reset()
            prompt_for_file(console, sorter)

    except KeyboardInterrupt:
        console.print("\n[yellow]Sorting interrupted[/]")
        raise SystemExit(1)
    except OSError as e:
        console.print(f"[bold red]Error: {e}[/]")
        if verbose:
            logger.exception("Full traceback:")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
