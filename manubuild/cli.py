"""
Manuscript Build CLI

Runs the targets of the build recipe against a manuscript directory.

Commands:
    paper   - Typeset the manuscript, resolve the bibliography, remove intermediates
    view    - Open the rendered PDF in a detached viewer
    clean   - Remove intermediate files and the rendered PDF
    run     - Run any target defined in the recipe
    targets - List targets and the commands they run
    history - Show recent build events

Examples:\n

    build paper                                  # Build manuscript.pdf in the current directory

    build --base thesis -C docs/ paper           # Build docs/thesis.pdf

    build --recipe build.yaml run draft          # Run a target from a recipe override

    build clean                                  # Remove build output
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from manubuild.contexts.building import BuildResult, run_target
from manubuild.contexts.building.logger import setup_build_logger
from manubuild.contexts.recipe import (
    MANUSCRIPT_BASENAME,
    Recipe,
    load_recipe,
    render_args,
    render_guard,
)
from manubuild.utils.event_logging import get_recent_events
from manubuild.utils.timestamp import format_timestamp, now

load_dotenv()
_logs_env = os.getenv("BUILD_LOGS_PATH")
BUILD_LOGS_PATH = Path(_logs_env) if _logs_env else None


@dataclass
class CliState:
    recipe: Recipe
    base_name: str
    work_dir: Path
    verbose: bool
    events_file: Optional[Path]


app = typer.Typer(
    help="Build, view and clean a LaTeX manuscript from a static target table",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    base_name: Annotated[
        str,
        typer.Option("--base", "-b", help="Manuscript base name (source is <base>.tex)"),
    ] = MANUSCRIPT_BASENAME,
    work_dir: Annotated[
        Path,
        typer.Option("--dir", "-C", help="Directory holding the manuscript"),
    ] = Path("."),
    recipe_path: Annotated[
        Optional[Path],
        typer.Option("--recipe", help="YAML file overriding engines or targets"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging and engine output"),
    ] = False,
    log_dir: Annotated[
        Optional[Path],
        typer.Option("--log-dir", help="Write a session log under this directory"),
    ] = BUILD_LOGS_PATH,
    events_file: Annotated[
        Optional[Path],
        typer.Option("--events-file", help="JSON Lines build event log"),
    ] = None,
):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        recipe = load_recipe(recipe_path)
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    session_dir = log_dir / f"build_{now()}" if log_dir else None
    setup_build_logger(session_dir, engines=recipe.engines, verbose=verbose)

    ctx.obj = CliState(
        recipe=recipe,
        base_name=base_name,
        work_dir=work_dir,
        verbose=verbose,
        events_file=events_file,
    )


def _run(state: CliState, target: str) -> BuildResult:
    try:
        return run_target(
            target,
            base_name=state.base_name,
            work_dir=state.work_dir,
            recipe=state.recipe,
            verbose=state.verbose,
            events_file=state.events_file,
        )
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _report(result: BuildResult) -> None:
    """Print a summary, surfacing the failing command's own output."""
    if result.success:
        typer.secho(f"✓ {result.target} succeeded", fg=typer.colors.GREEN, bold=True)
        if result.output_path:
            typer.echo(f"  Output: {result.output_path}")
            if result.page_count is not None:
                typer.echo(f"  Pages: {result.page_count}")
        return

    typer.secho(
        f"✗ {result.target} failed (exit code {result.exit_code})", fg=typer.colors.RED, bold=True
    )
    typer.echo(f"  Command: {' '.join(result.failed_command or [])}")
    if result.stdout:
        typer.echo(result.stdout)
    if result.stderr:
        typer.echo(result.stderr, err=True)
    if result.errors:
        typer.echo("\nErrors:")
        for error in result.errors[:10]:
            typer.secho(f"  - {error}", fg=typer.colors.RED)
        if len(result.errors) > 10:
            typer.echo(f"  ... and {len(result.errors) - 10} more")


@app.command("paper")
def paper_command(ctx: typer.Context):
    """
    Compile <base>.tex to <base>.pdf.

    Typesets once, runs the bibliography engine when the document declares a
    bibliography, typesets twice more, then removes intermediate files. Stops
    at the first failing command and exits with its status.
    """
    result = _run(ctx.obj, "paper")
    _report(result)
    raise typer.Exit(code=result.exit_code)


@app.command("view")
def view_command(ctx: typer.Context):
    """Open <base>.pdf in the viewer without waiting for it."""
    result = _run(ctx.obj, "view")
    _report(result)
    raise typer.Exit(code=0)


@app.command("clean")
def clean_command(ctx: typer.Context):
    """Remove intermediate files and <base>.pdf. Missing files are ignored."""
    result = _run(ctx.obj, "clean")
    removed = sum(len(step.deleted) for step in result.steps)
    typer.echo(f"Removed {removed} file(s)")
    raise typer.Exit(code=0)


@app.command("run")
def run_command(
    ctx: typer.Context,
    target: Annotated[str, typer.Argument(help="Target name from the recipe")],
):
    """
    Run any target defined in the recipe.

    Examples:\n

        $ build run paper                      # Same as 'build paper'

        $ build --recipe build.yaml run draft  # Target defined in an override
    """
    result = _run(ctx.obj, target)
    _report(result)
    raise typer.Exit(code=result.exit_code)


@app.command("targets")
def targets_command(ctx: typer.Context):
    """List targets and the commands they run for the current base name."""
    state: CliState = ctx.obj
    variables = state.recipe.variables(state.base_name)

    for name in state.recipe.names():
        target = state.recipe.get(name)
        typer.secho(f"{name}", fg=typer.colors.BLUE, bold=True, nl=False)
        typer.echo(f"  {target.description}" if target.description else "")
        for step in target.steps:
            guard = ""
            if step.is_guarded:
                guard = f"  [if {render_guard(step, variables)} has {step.guard_contains}]"
            typer.echo(f"    {step.kind.value:<6} {' '.join(render_args(step, variables))}{guard}")


@app.command("history")
def history_command(
    ctx: typer.Context,
    count: Annotated[
        int,
        typer.Option("--count", "-n", help="Number of events to show", min=1),
    ] = 10,
    target: Annotated[
        Optional[str],
        typer.Option("--target", "-t", help="Only show events for this target"),
    ] = None,
):
    """Show recent build events from the event log."""
    events = get_recent_events(count, target=target, events_file=ctx.obj.events_file)
    if not events:
        typer.echo("No build events recorded.")
        raise typer.Exit()

    for event in events:
        when = format_timestamp(event.get("timestamp", ""))
        line = f"{when}  {event.get('event_type', '?'):<16} {event.get('target', '?')} ({event.get('base_name', '?')})"
        if event.get("event_type") == "target_failed":
            typer.secho(f"{line}  exit {event.get('exit_code')}", fg=typer.colors.RED)
        else:
            typer.echo(line)


if __name__ == "__main__":
    app()
