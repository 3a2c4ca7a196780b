"""
Building context logger.

Provides logging interface for the building context with automatic [build] prefix.
All building modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Mapping, Optional

from loguru import logger

from manubuild.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[build]"


def setup_build_logger(
    log_dir: Optional[Path] = None,
    engines: Optional[Mapping[str, str]] = None,
    verbose: bool = False,
) -> Optional[Path]:
    """
    Setup logger for the building context.

    Args:
        log_dir: Directory for this build session (None for console only)
        engines: Engine names recorded in the provenance header
        verbose: Show DEBUG messages on the console

    Returns:
        Path to log file, or None when no log directory was given
    """
    provenance = {f"{name} engine": command for name, command in (engines or {}).items()}
    return _setup_logger(
        context_name="build",
        log_dir=log_dir,
        extra_provenance=provenance,
        console_level="DEBUG" if verbose else "INFO",
    )


# Wrapper functions with automatic [build] prefix


def _log_info(message: str) -> None:
    """Log info message with [build] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [build] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [build] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [build] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [build] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level build-specific logging helpers


def log_target_start(target: str, base_name: str, work_dir: Path, step_count: int) -> None:
    """Log start of a target with context."""
    _log_info(f"Running target '{target}' for {base_name}")
    _log_debug(f"  Working directory: {work_dir}")
    _log_debug(f"  Steps: {step_count}")


def log_target_result(result, verbose: bool = False) -> None:
    """
    Log a target's outcome with diagnostics.

    Args:
        result: BuildResult from run_target()
        verbose: Show more errors/warnings and the captured engine output
    """
    if result.success:
        _log_success(f"{result.target}: done ({result.elapsed_s:.2f}s)")
        if result.output_path:
            _log_debug(f"  Output: {result.output_path}")
    else:
        _log_error(f"{result.target}: failed with exit code {result.exit_code} ({result.elapsed_s:.2f}s)")
        if result.failed_command:
            _log_error(f"  Command: {' '.join(result.failed_command)}")
        error_limit = 10 if verbose else 5
        for i, err in enumerate(result.errors[:error_limit], 1):
            _log_error(f"  Error {i}: {err}")
        if len(result.errors) > error_limit:
            _log_error(f"  ... and {len(result.errors) - error_limit} more errors")

    if result.warnings:
        _log_warning(f"{len(result.warnings)} LaTeX warnings detected")
        warning_limit = 10 if verbose else 3
        for i, warn in enumerate(result.warnings[:warning_limit], 1):
            _log_debug(f"  Warning {i}: {warn}")
        if len(result.warnings) > warning_limit:
            _log_debug(f"  ... and {len(result.warnings) - warning_limit} more warnings")

    # Dump engine output unformatted so multi-line output keeps its layout
    if verbose or not result.success:
        if result.stdout:
            logger.opt(raw=True).debug(f"\n{'=' * 80}\nSTDOUT:\n{'=' * 80}\n{result.stdout}\n")
        if result.stderr:
            logger.opt(raw=True).debug(f"\n{'=' * 80}\nSTDERR:\n{'=' * 80}\n{result.stderr}\n")
