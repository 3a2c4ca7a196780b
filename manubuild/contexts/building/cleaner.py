"""Quiet deletion of build artifacts."""

from pathlib import Path
from typing import Iterable, List

from manubuild.contexts.building.logger import _log_debug, _log_warning


def quiet_delete(path: Path) -> bool:
    """
    Delete path if it exists.

    A file that is already gone is not an error. Other OS errors (permissions,
    path is a directory) are logged and reported as not deleted; they never
    abort the caller.

    Returns:
        True if a file was removed
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        _log_warning(f"Could not delete {path}: {e}")
        return False

    _log_debug(f"  Deleted {path.name}")
    return True


def delete_patterns(work_dir: Path, patterns: Iterable[str]) -> List[Path]:
    """
    Quietly delete every file in work_dir matching the glob patterns.

    Args:
        work_dir: Directory the patterns are relative to
        patterns: Glob patterns, e.g. ["manuscript.aux", "*.log"]

    Returns:
        Files that were actually removed
    """
    removed = []
    for pattern in patterns:
        for path in sorted(work_dir.glob(pattern)):
            if path.is_dir():
                continue
            if quiet_delete(path):
                removed.append(path)
    return removed
