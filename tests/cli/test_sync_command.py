"""Test sync command functionality."""

from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

import treesync.cli.commands.sync as sync_command
from treesync.cli.app import app
from treesync.cli.commands.sync import (
    confirm_execution,
    display_plan,
    run_sync,
    wait_for_exit,
)
from treesync.models import FileEntry
from treesync.sync.utils import SyncAction, SyncOperation, SyncPlan
from treesync.utils.file_utils import OnErrorAction

runner = CliRunner()


@pytest.fixture
def console(monkeypatch):
    """Replace the command console with one that captures output."""
    output = StringIO()
    monkeypatch.setattr(sync_command, "console", Console(file=output, width=200))
    return output


def answers(*values: str):
    """Prompt stand-in that replays answers, then hits end of input."""
    remaining = list(values)
    asked = []

    def _ask(prompt: str) -> str:
        asked.append(prompt)
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    _ask.asked = asked
    return _ask


def sync_args(source_dir: Path, dest_dir: Path, *extra: str):
    return ["sync", "-s", str(source_dir), "-d", str(dest_dir), "--no-pause", *extra]


def test_display_empty_plan(console):
    display_plan(SyncPlan())

    assert "Nothing to sync" in console.getvalue()


def test_display_plan_sections(console, source_dir: Path, dest_dir: Path):
    plan = SyncPlan()
    src = FileEntry(name="new.txt", relative_dir="", absolute_dir=source_dir)
    dest = FileEntry(name="new.txt", relative_dir="", absolute_dir=dest_dir)
    gone = FileEntry(name="gone", relative_dir="", absolute_dir=dest_dir)
    plan.record(
        "",
        [
            SyncOperation(SyncAction.ADD, src, dest),
            SyncOperation(SyncAction.DELETE, None, gone, is_directory=True),
        ],
    )

    display_plan(plan)
    output = console.getvalue()

    assert "Sync Plan" in output
    assert "new.txt" in output
    assert "gone/" in output
    assert "2 operations (1 new, 1 deleted)" in output


def test_confirm_execution(console):
    assert confirm_execution(answers("y")) is True
    assert confirm_execution(answers(" N ")) is False
    assert confirm_execution(answers()) is False


def test_confirm_execution_asks_again(console):
    ask = answers("maybe", "", "Y")

    assert confirm_execution(ask) is True
    assert len(ask.asked) == 3
    assert console.getvalue().count("Unexpected input") == 2


def test_wait_for_exit():
    ask = answers("")
    wait_for_exit(True, ask)
    assert ask.asked == ["Press enter to exit"]

    ask = answers()
    wait_for_exit(False, ask)
    assert ask.asked == []


def test_run_sync_preview_changes_nothing(console, make_config, source_dir, dest_dir, make_file):
    make_file(source_dir / "a.txt")
    ask = answers("Y")

    assert run_sync(make_config(preview=True), ask) is None

    assert ask.asked == []
    assert not (dest_dir / "a.txt").exists()
    assert "a.txt" in console.getvalue()


def test_run_sync_executes_after_confirmation(
    console, make_config, source_dir, dest_dir, make_file
):
    make_file(source_dir / "a.txt", "hello")

    report = run_sync(make_config(), answers("Y"))

    assert report.completed == 1
    assert (dest_dir / "a.txt").read_text() == "hello"
    output = console.getvalue()
    assert "(1/1) Copying - " in output
    assert "Synced 1 of 1" in output


def test_run_sync_cancelled(console, make_config, source_dir, dest_dir, make_file):
    make_file(source_dir / "a.txt")

    assert run_sync(make_config(), answers("n")) is None

    assert not (dest_dir / "a.txt").exists()
    assert "Sync cancelled" in console.getvalue()


def test_run_sync_skips_failures(console, make_config, source_dir, dest_dir, make_file):
    make_file(source_dir / "a.txt")
    make_file(source_dir / "b.txt")
    config = make_config()

    # destination file appears between planning and confirmation
    def ask(prompt: str) -> str:
        make_file(dest_dir / "a.txt", "appeared later")
        return "Y"

    report = run_sync(config, ask, OnErrorAction.SKIP)

    assert report.completed == 1
    assert (dest_dir / "a.txt").read_text() == "appeared later"
    assert "1 incomplete" in console.getvalue()


def test_sync_command_preview(source_dir: Path, dest_dir: Path, make_file):
    make_file(source_dir / "a.txt")

    result = runner.invoke(app, sync_args(source_dir, dest_dir, "-p", "true"))

    assert result.exit_code == 0
    assert "a.txt" in result.output
    assert not (dest_dir / "a.txt").exists()


def test_sync_command_confirm(source_dir: Path, dest_dir: Path, make_file):
    make_file(source_dir / "sub" / "a.txt", "hello")

    result = runner.invoke(
        app, sync_args(source_dir, dest_dir, "--recursive", "true"), input="Y\n"
    )

    assert result.exit_code == 0
    assert (dest_dir / "sub" / "a.txt").read_text() == "hello"


def test_sync_command_decline(source_dir: Path, dest_dir: Path, make_file):
    make_file(source_dir / "a.txt")

    result = runner.invoke(app, sync_args(source_dir, dest_dir), input="x\nN\n")

    assert result.exit_code == 0
    assert "Unexpected input" in result.output
    assert "Sync cancelled" in result.output
    assert not (dest_dir / "a.txt").exists()


def test_sync_command_config_file(tmp_path: Path, source_dir: Path, dest_dir: Path, make_file):
    make_file(source_dir / "a.txt")
    make_file(source_dir / "b.log")
    config_file = tmp_path / "treesync.properties"
    config_file.write_text(
        f"srcPath={source_dir}\ndestPath={dest_dir}\nex=.*\\\\.log\ncheckModel=checksum\n"
    )

    result = runner.invoke(app, ["sync", "-c", str(config_file), "--no-pause"], input="Y\n")

    assert result.exit_code == 0
    assert (dest_dir / "a.txt").exists()
    assert not (dest_dir / "b.log").exists()


def test_sync_command_rejects_loose_bool(source_dir: Path, dest_dir: Path):
    result = runner.invoke(app, sync_args(source_dir, dest_dir, "--preview", "yes"))

    assert result.exit_code == 2


def test_sync_command_reports_config_error(tmp_path: Path):
    result = runner.invoke(app, ["sync", "-c", str(tmp_path / "missing.properties")], input="\n")

    assert result.exit_code == 1
    assert "Error during sync" in result.output
