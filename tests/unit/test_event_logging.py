"""Unit tests for the build event log."""

import json

import pytest

from manubuild.utils.event_logging import get_recent_events, log_build_event


@pytest.mark.unit
def test_log_build_event_appends_json_lines(tmp_path):
    events_file = tmp_path / "logs" / "build_events.log"

    log_build_event("target_started", "paper", "manuscript", events_file)
    log_build_event("target_completed", "paper", "manuscript", events_file, elapsed_s=1.5)

    lines = events_file.read_text().splitlines()
    assert len(lines) == 2
    event = json.loads(lines[1])
    assert event["event_type"] == "target_completed"
    assert event["target"] == "paper"
    assert event["base_name"] == "manuscript"
    assert event["elapsed_s"] == 1.5
    assert "timestamp" in event


@pytest.mark.unit
def test_unknown_event_type(tmp_path):
    with pytest.raises(ValueError, match="Unknown event type"):
        log_build_event("target_exploded", "paper", "manuscript", tmp_path / "events.log")


@pytest.mark.unit
def test_get_recent_events_filters_and_limits(tmp_path):
    events_file = tmp_path / "events.log"
    for target in ["paper", "clean", "paper", "view", "paper"]:
        log_build_event("target_completed", target, "manuscript", events_file)
    log_build_event("target_failed", "paper", "manuscript", events_file, exit_code=1)
    with open(events_file, "a") as f:
        f.write("not json\n")

    assert len(get_recent_events(100, events_file=events_file)) == 6
    assert len(get_recent_events(2, events_file=events_file)) == 2
    assert len(get_recent_events(100, target="paper", events_file=events_file)) == 4

    failed = get_recent_events(100, event_type="target_failed", events_file=events_file)
    assert [e["exit_code"] for e in failed] == [1]


@pytest.mark.unit
def test_get_recent_events_missing_file(tmp_path):
    assert get_recent_events(events_file=tmp_path / "missing.log") == []
