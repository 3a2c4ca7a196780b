"""
Build-Target Runner

Executes one target of the recipe against a working directory. Steps run in
order; the first external command that exits non-zero stops the target, so
any cleanup steps after it are skipped and intermediates stay behind for
debugging.
"""

import glob
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from manubuild.contexts.building.cleaner import delete_patterns
from manubuild.contexts.building.log_parser import read_log
from manubuild.contexts.building.logger import (
    _log_debug,
    _log_info,
    log_target_result,
    log_target_start,
)
from manubuild.contexts.building.viewer import spawn_detached
from manubuild.contexts.recipe.artifacts import FINAL_SUFFIX, check_base_name
from manubuild.contexts.recipe.defaults import MANUSCRIPT_BASENAME
from manubuild.contexts.recipe.recipe import (
    Recipe,
    Step,
    StepKind,
    load_recipe,
    render_args,
    render_guard,
)
from manubuild.utils.event_logging import log_build_event
from manubuild.utils.pdf_processing import page_count

# Shell conventions for commands that could not be executed
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


@dataclass
class StepResult:
    """
    Outcome of a single step.

    Attributes:
        index: Zero-based position in the target
        kind: Step kind
        argv: Rendered command or delete patterns
        returncode: Exit status of a run step (0 for delete/spawn/skipped)
        stdout: Captured standard output of a run step
        stderr: Captured standard error of a run step
        skipped: Step guard was not satisfied
        deleted: Files removed by a delete step
        pid: Process id of a spawned viewer (None if it could not start)
    """

    index: int
    kind: StepKind
    argv: List[str]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    skipped: bool = False
    deleted: List[Path] = field(default_factory=list)
    pid: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class BuildResult:
    """
    Result of running a target.

    Attributes:
        target: Target name
        base_name: Manuscript base name substituted into the templates
        work_dir: Directory the target ran in
        success: All steps completed
        exit_code: 0 on success, else the failing command's exit status
        failed_command: Rendered argv of the failing command (None on success)
        stdout: Standard output of the failing command
        stderr: Standard error of the failing command
        steps: Per-step results, in execution order
        errors: LaTeX errors parsed from a surviving .log file
        warnings: LaTeX warnings parsed from a surviving .log file
        output_path: Rendered document, when the target succeeded and it exists
        page_count: Page count of output_path (None if unavailable)
        elapsed_s: Wall-clock time for the whole target
    """

    target: str
    base_name: str
    work_dir: Path
    success: bool = True
    exit_code: int = 0
    failed_command: Optional[List[str]] = None
    stdout: str = ""
    stderr: str = ""
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    output_path: Optional[Path] = None
    page_count: Optional[int] = None
    elapsed_s: float = 0.0


def _run_command(argv: List[str], cwd: Path) -> subprocess.CompletedProcess:
    """Run argv to completion, mapping unrunnable commands to shell exit codes."""
    try:
        return subprocess.run(
            argv,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",  # Engines may emit non-UTF-8 bytes
        )
    except FileNotFoundError:
        return subprocess.CompletedProcess(
            argv, EXIT_NOT_FOUND, stdout="", stderr=f"{argv[0]}: command not found\n"
        )
    except PermissionError:
        return subprocess.CompletedProcess(
            argv, EXIT_NOT_EXECUTABLE, stdout="", stderr=f"{argv[0]}: permission denied\n"
        )


def _guard_satisfied(step: Step, work_dir: Path, variables: dict) -> bool:
    guard_path = work_dir / render_guard(step, variables)
    if not guard_path.is_file():
        return False
    return step.guard_contains in guard_path.read_text(encoding="latin-1")


def _execute_step(step: Step, index: int, work_dir: Path, variables: dict) -> StepResult:
    if step.kind is StepKind.DELETE:
        # Delete args are glob patterns; the base name must match literally
        argv = render_args(step, {**variables, "base": glob.escape(variables["base"])})
    else:
        argv = render_args(step, variables)
    result = StepResult(index=index, kind=step.kind, argv=argv)

    if step.is_guarded and not _guard_satisfied(step, work_dir, variables):
        guard_path = render_guard(step, variables)
        _log_debug(f"  Step {index + 1}: skipped {' '.join(argv)} (no {step.guard_contains} in {guard_path})")
        result.skipped = True
        return result

    if step.kind is StepKind.RUN:
        _log_info(f"  Step {index + 1}: {' '.join(argv)}")
        completed = _run_command(argv, work_dir)
        result.returncode = completed.returncode
        result.stdout = completed.stdout or ""
        result.stderr = completed.stderr or ""
    elif step.kind is StepKind.DELETE:
        _log_debug(f"  Step {index + 1}: delete {' '.join(argv)}")
        result.deleted = delete_patterns(work_dir, argv)
    elif step.kind is StepKind.SPAWN:
        _log_info(f"  Step {index + 1}: {' '.join(argv)} (detached)")
        result.pid = spawn_detached(argv, work_dir)

    return result


def run_target(
    target_name: str,
    base_name: str = MANUSCRIPT_BASENAME,
    work_dir: Optional[Path] = None,
    recipe: Optional[Recipe] = None,
    verbose: bool = False,
    events_file: Optional[Path] = None,
) -> BuildResult:
    """
    Run a named target against work_dir.

    Args:
        target_name: Target to run (e.g., "paper", "view", "clean")
        base_name: Manuscript base name substituted for {base}
        work_dir: Directory holding the manuscript (default: current directory)
        recipe: Target table (default: load_recipe())
        verbose: Log captured engine output even on success
        events_file: Build event log (default: BUILD_EVENTS_FILE)

    Returns:
        BuildResult; engine failures are reported here, not raised

    Raises:
        UnknownTargetError: If target_name is not in the recipe
        ValueError: If work_dir does not exist or base_name is not a plain file name
    """
    recipe = recipe or load_recipe()
    target = recipe.get(target_name)
    check_base_name(base_name)

    work_dir = Path(work_dir or Path.cwd()).resolve()
    if not work_dir.is_dir():
        raise ValueError(f"Working directory not found: {work_dir}")

    variables = recipe.variables(base_name)
    build = BuildResult(target=target.name, base_name=base_name, work_dir=work_dir)

    log_target_start(target.name, base_name, work_dir, len(target.steps))
    log_build_event("target_started", target.name, base_name, events_file, work_dir=str(work_dir))

    start_time = time.time()

    for index, step in enumerate(target.steps):
        step_result = _execute_step(step, index, work_dir, variables)
        build.steps.append(step_result)

        if not step_result.ok:
            build.success = False
            build.exit_code = step_result.returncode
            build.failed_command = step_result.argv
            build.stdout = step_result.stdout
            build.stderr = step_result.stderr
            break

    build.elapsed_s = time.time() - start_time

    # A failed typesetting pass leaves its log behind
    if not build.success:
        build.errors, build.warnings = read_log(work_dir / f"{base_name}.log")

    output_path = work_dir / f"{base_name}{FINAL_SUFFIX}"
    if build.success and output_path.exists():
        build.output_path = output_path
        build.page_count = page_count(output_path)

    log_target_result(build, verbose=verbose)

    if build.success:
        log_build_event(
            "target_completed",
            target.name,
            base_name,
            events_file,
            elapsed_s=round(build.elapsed_s, 2),
            output_path=str(build.output_path) if build.output_path else None,
            page_count=build.page_count,
        )
    else:
        log_build_event(
            "target_failed",
            target.name,
            base_name,
            events_file,
            elapsed_s=round(build.elapsed_s, 2),
            exit_code=build.exit_code,
            failed_command=build.failed_command,
            errors=build.errors[:5],
        )

    return build
