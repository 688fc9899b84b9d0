from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Callable, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .cleanup import CleanupError
from .config import ConfigError, Settings, load_settings
from .controller import ModeController
from .fs import FilesystemError, LocalFilesystem
from .manifest import ManifestError
from .modes import MODES, Mode
from .plan import PlanError, build_plan

app = typer.Typer(help="Clean the demo content out of the project template.")
console = Console()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_INPUT = 2


class OutputFormat(str, Enum):
    table = "table"
    json = "json"
    md = "md"


def _envelope(command: str, exit_code: int, **body: object) -> str:
    payload = {"ok": exit_code == EXIT_OK, "command": command, "exit_code": exit_code, **body}
    return json.dumps(payload, ensure_ascii=True, sort_keys=True)


def _report(
    command: str,
    output_format: OutputFormat,
    data: dict,
    render_md: Callable[[dict], str],
    render_table: Callable[[dict], None],
) -> None:
    if output_format == OutputFormat.json:
        typer.echo(_envelope(command, EXIT_OK, data=data))
    elif output_format == OutputFormat.md:
        console.print(render_md(data))
    else:
        render_table(data)


def _fail(command: str, output_format: OutputFormat, exit_code: int, code: str, message: str) -> NoReturn:
    """Print the failure in the requested format and stop with ``exit_code``."""
    if output_format == OutputFormat.json:
        typer.echo(_envelope(command, exit_code, error={"code": code, "message": message}))
    elif output_format == OutputFormat.md:
        console.print(f"# {command} failed\n\n- **code**: `{code}`\n- **message**: {escape(message)}")
    else:
        console.print(f"[red]Error ({code}):[/red] {escape(message)}")
    raise typer.Exit(code=exit_code)


def _ask(prompt: str) -> str:
    # End of input counts as an empty answer, which cancels.
    try:
        return typer.prompt(prompt, default="", show_default=False)
    except typer.Abort:
        return ""


def _load_root(command: str, root: Path, output_format: OutputFormat = OutputFormat.table) -> tuple[Path, Settings]:
    resolved = root.resolve()
    if not resolved.is_dir():
        _fail(
            command=command,
            output_format=output_format,
            exit_code=EXIT_INVALID_INPUT,
            code="invalid_scaffold_root",
            message=f"Scaffold root does not exist: {resolved}",
        )
    try:
        settings = load_settings(resolved)
    except ConfigError as error:
        _fail(
            command=command,
            output_format=output_format,
            exit_code=EXIT_INVALID_INPUT,
            code="config_error",
            message=str(error),
        )
    return resolved, settings


def _run_cleanup(command: str, root: Path, mode: Optional[Mode]) -> None:
    resolved, settings = _load_root(command, root)
    controller = ModeController(
        root=resolved,
        fs=LocalFilesystem(),
        settings=settings,
        ask=_ask,
        say=console.print,
        mode=mode,
    )
    try:
        exit_code = controller.run()
    except (FilesystemError, CleanupError, ManifestError) as error:
        _fail(
            command=command,
            output_format=OutputFormat.table,
            exit_code=EXIT_ERROR,
            code="cleanup_failed",
            message=str(error),
        )
    raise typer.Exit(code=exit_code)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    root: Path = typer.Option(Path("."), "--root", help="Root directory of the project template."),
):
    """Choose a cleanup mode interactively when no command is given."""
    ctx.obj = root
    if ctx.invoked_subcommand is None:
        _run_cleanup("clean-template", root, mode=None)


@app.command("dashboard")
def dashboard(ctx: typer.Context):
    """Keep the layout (header, sidebar, footer) and drop the demo content."""
    _run_cleanup("dashboard", ctx.obj, mode=Mode.dashboard)


@app.command("blank")
def blank(ctx: typer.Context):
    """Drop the demo content and the whole layout structure."""
    _run_cleanup("blank", ctx.obj, mode=Mode.blank)


@app.command("plan")
def plan(
    ctx: typer.Context,
    mode: Mode = typer.Argument(..., help="Mode to preview."),
    output_format: OutputFormat = typer.Option(OutputFormat.table, "--format", help="Output format."),
):
    """Preview what a mode would delete and regenerate, without changing anything."""
    resolved, settings = _load_root("plan", ctx.obj, output_format)
    try:
        report = build_plan(LocalFilesystem(), resolved, mode, settings)
    except (PlanError, FilesystemError) as error:
        _fail(
            command="plan",
            output_format=output_format,
            exit_code=EXIT_INVALID_INPUT,
            code="plan_error",
            message=str(error),
        )

    data = {
        "root": str(resolved),
        "mode": report.mode,
        "title": MODES[mode].title,
        "prune_present": list(report.prune_present),
        "prune_missing": list(report.prune_missing),
        "rewrite_ready": list(report.rewrite_ready),
        "rewrite_blocked": list(report.rewrite_blocked),
        "doc_file": report.doc_file,
        "doc_status": report.doc_status,
    }

    def render_md(payload: dict) -> str:
        lines = [f"# Plan: `{payload['mode']}` in `{payload['root']}`", ""]
        lines.append(f"- **doc**: `{payload['doc_file']}` ({payload['doc_status']})")
        lines.append("\n## Delete")
        lines.extend(f"- `{item}`" for item in payload["prune_present"])
        if payload["prune_missing"]:
            lines.append("\n## Already gone")
            lines.extend(f"- `{item}`" for item in payload["prune_missing"])
        lines.append("\n## Regenerate")
        lines.extend(f"- `{item}`" for item in payload["rewrite_ready"])
        if payload["rewrite_blocked"]:
            lines.append("\n## Blocked")
            lines.extend(f"- `{item}`" for item in payload["rewrite_blocked"])
        return "\n".join(lines)

    def render_table(payload: dict) -> None:
        table = Table(title=f"{payload['title']}: {payload['root']}")
        table.add_column("Action")
        table.add_column("Target")
        table.add_column("Status")
        for item in payload["prune_present"]:
            table.add_row("delete", item, "present")
        for item in payload["prune_missing"]:
            table.add_row("delete", item, "already gone")
        for item in payload["rewrite_ready"]:
            table.add_row("regenerate", item, "ready")
        for item in payload["rewrite_blocked"]:
            table.add_row("regenerate", item, "[red]blocked[/red]")
        table.add_row("patch", payload["doc_file"], payload["doc_status"])
        console.print(table)

    _report("plan", output_format, data, render_md, render_table)


@app.command("version")
def version(
    output_format: OutputFormat = typer.Option(OutputFormat.table, "--format", help="Output format."),
) -> None:
    """Print version."""
    data = {"name": "templateclean", "version": __version__}

    def render_table(payload: dict) -> None:
        console.print(f"[bold]{payload['name']}[/bold] {payload['version']}")

    _report(
        "version",
        output_format,
        data,
        render_md=lambda payload: f"- **{payload['name']}**: `{payload['version']}`",
        render_table=render_table,
    )


if __name__ == "__main__":
    app()
