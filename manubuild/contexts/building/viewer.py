"""Detached viewer launch."""

import subprocess
from pathlib import Path
from typing import List, Optional

from manubuild.contexts.building.logger import _log_debug, _log_warning


def spawn_detached(argv: List[str], cwd: Path) -> Optional[int]:
    """
    Start argv in its own session and return without waiting for it.

    The child's stdio is detached from the caller, so its exit status and
    output are never observed. A viewer that cannot be started is logged
    and otherwise ignored.

    Returns:
        PID of the spawned process, or None if it could not be started
    """
    try:
        process = subprocess.Popen(
            argv,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        _log_warning(f"Could not start viewer '{argv[0]}': {e}")
        return None

    _log_debug(f"  Spawned {' '.join(argv)} (pid {process.pid})")
    return process.pid
