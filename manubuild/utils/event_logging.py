"""
Build event logging utilities for manubuild (Tier 2 logging).

Appends one JSON object per line to the build event log so that build history
can be inspected across invocations. Disabled unless BUILD_EVENTS_FILE is set
or an explicit path is passed.

For detailed within-invocation logging (Tier 1), use manubuild.utils.logger instead.

Usage:
    from manubuild.utils.event_logging import log_build_event, get_recent_events

    log_build_event(
        event_type="target_completed",
        target="paper",
        base_name="manuscript",
        elapsed_s=3.2,
    )

    events = get_recent_events(5, target="paper")
"""

import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from manubuild.utils.timestamp import now_exact

load_dotenv()
_events_env = os.getenv("BUILD_EVENTS_FILE")
BUILD_EVENTS_FILE = Path(_events_env) if _events_env else None

EVENT_TYPES = {"target_started", "target_completed", "target_failed"}


def log_build_event(
    event_type: str,
    target: str,
    base_name: str,
    events_file: Optional[Path] = None,
    **extra_fields,
) -> None:
    """
    Append an event to the build event log.

    Args:
        event_type: One of EVENT_TYPES
        target: Target name (e.g., "paper")
        base_name: Manuscript base name the target ran against
        events_file: Event log path (default: BUILD_EVENTS_FILE; no-op when unset)
        **extra_fields: Additional event-specific fields

    Raises:
        ValueError: If event_type is not a known event type
    """
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown event type '{event_type}'. Expected one of: {sorted(EVENT_TYPES)}")

    events_file = events_file or BUILD_EVENTS_FILE
    if events_file is None:
        return

    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "target": target,
        "base_name": base_name,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event, default=str) + "\n")


def get_recent_events(
    n: int = 10,
    target: Optional[str] = None,
    event_type: Optional[str] = None,
    events_file: Optional[Path] = None,
) -> List[dict]:
    """
    Get the last n events from the build event log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        target: Filter to only events for this target (optional)
        event_type: Filter to only events of this type (optional)
        events_file: Event log path (default: BUILD_EVENTS_FILE)

    Returns:
        List of event dicts (most recent last)
    """
    events_file = events_file or BUILD_EVENTS_FILE
    if events_file is None or not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if target:
        events = [e for e in events if e.get("target") == target]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
