"""Command module for treesync sync operations."""

import asyncio
from pathlib import Path
from typing import Callable, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from treesync.cli.app import app
from treesync.config import CheckModel, SyncConfig, load_config, parse_strict_bool
from treesync.exceptions import ConfigError
from treesync.sync import SyncExecutor, SyncService
from treesync.sync.execution_service import ExecutionReport, format_progress
from treesync.sync.utils import SyncAction, SyncOperation, SyncPlan
from treesync.utils.file_utils import OnErrorAction

console = Console()

Prompt = Callable[[str], str]

PLAN_SECTIONS = (
    ("New", "green", SyncAction.ADD),
    ("Deleted", "red", SyncAction.DELETE),
    ("Updated", "yellow", SyncAction.UPDATE),
)


def display_plan(plan: SyncPlan) -> None:
    """Display the plan grouped by new, deleted and updated entries."""
    if plan.is_empty():
        console.print("[green]Nothing to sync[/green]")
        return

    tree = Tree("[bold]Sync Plan[/bold]")
    counts = []
    for heading, style, action in PLAN_SECTIONS:
        operations = list(plan.operations(action))
        branch = tree.add(f"[{style}]{heading}[/{style}]")
        for operation in operations:
            branch.add(Text(operation.display_path, style=style))
        if operations:
            counts.append(f"[{style}]{len(operations)} {heading.lower()}[/{style}]")

    console.print(tree)
    console.print(f"{plan.total_count()} operations ({', '.join(counts)})")


def display_progress(index: int, total: int, operation: SyncOperation) -> None:
    console.print(format_progress(index, total, operation), markup=False, highlight=False)


def display_report(report: ExecutionReport) -> None:
    if report.failed:
        console.print(
            f"[yellow]Synced {report.completed} of {report.total}, "
            f"{len(report.failed)} incomplete[/yellow]"
        )
        for operation in report.failed:
            console.print(Text(f"  {operation.display_path}", style="yellow"))
    else:
        console.print(f"[green]Synced {report.completed} of {report.total}[/green]")


def confirm_execution(ask: Prompt) -> bool:
    """Ask until the answer is Y or N, case-insensitive. End of input declines."""
    while True:
        try:
            answer = ask("Start executing the sync plan? [Y/N]: ").strip().upper()
        except EOFError:
            return False
        if answer == "Y":
            return True
        if answer == "N":
            return False
        console.print("[yellow]Unexpected input[/yellow]")


def wait_for_exit(pause: bool, ask: Prompt) -> None:
    if not pause:
        return
    try:
        ask("Press enter to exit")
    except EOFError:
        pass


def run_sync(
    config: SyncConfig,
    ask: Prompt,
    on_error: OnErrorAction = OnErrorAction.TERMINATE,
) -> Optional[ExecutionReport]:
    """Plan, show, confirm and execute. Returns None when nothing was executed."""
    executor = SyncExecutor(on_error=lambda path, error: on_error, on_progress=display_progress)
    service = SyncService(config, executor=executor)

    plan = asyncio.run(service.plan())
    display_plan(plan)

    if config.preview or plan.is_empty():
        return None

    if not confirm_execution(ask):
        console.print("Sync cancelled")
        return None

    report = service.execute(plan)
    display_report(report)
    return report


def _bool_option(value: Optional[str], name: str) -> Optional[bool]:
    if value is None:
        return None
    try:
        return parse_strict_bool(value, name)
    except ConfigError as e:
        raise typer.BadParameter(str(e), param_hint=name)


@app.command()
def sync(
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file, UTF-8 key=value properties."
    ),
    check_model: Optional[CheckModel] = typer.Option(
        None, "--checkModel", "-cm", case_sensitive=False, help="Change detection policy."
    ),
    src_path: Optional[Path] = typer.Option(None, "--srcPath", "-s", help="Source directory."),
    dest_path: Optional[Path] = typer.Option(
        None, "--destPath", "-d", help="Destination directory."
    ),
    preview: Optional[str] = typer.Option(
        None, "--preview", "-p", metavar="BOOL", help="Only show the plan (true/false)."
    ),
    include: Optional[str] = typer.Option(
        None, "--include", "-in", help="Regex an absolute path must match."
    ),
    exclude: Optional[str] = typer.Option(
        None, "--exclude", "-ex", help="Regex that excludes an absolute path."
    ),
    recursive: Optional[str] = typer.Option(
        None, "--recursive", "-r", metavar="BOOL", help="Descend into subdirectories (true/false)."
    ),
    on_error: OnErrorAction = typer.Option(
        OnErrorAction.TERMINATE,
        "--on-error",
        case_sensitive=False,
        help="What to do when a file fails to sync.",
    ),
    no_pause: bool = typer.Option(False, "--no-pause", help="Exit without waiting for enter."),
) -> None:
    """Mirror the source directory onto the destination directory."""
    preview_value = _bool_option(preview, "--preview")
    recursive_value = _bool_option(recursive, "--recursive")

    pause = not no_pause
    try:
        config = load_config(
            config_file,
            check_model=check_model,
            src_path=src_path,
            dest_path=dest_path,
            preview=preview_value,
            include=include,
            exclude=exclude,
            recursive=recursive_value,
            pause_on_exit=False if no_pause else None,
        )
        pause = config.pause_on_exit
        run_sync(config, console.input, on_error)

    except Exception as e:
        logger.exception("Sync failed")
        typer.echo(f"Error during sync: {e}", err=True)
        wait_for_exit(pause, console.input)
        raise typer.Exit(1)

    wait_for_exit(pause, console.input)
