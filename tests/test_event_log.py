from __future__ import annotations

import json

from telemetry import log as event_log


def test_events_rotate_when_file_is_full(tmp_path) -> None:
    event_log.configure(tmp_path, max_bytes=10)
    first = event_log.append_event({"event": "solve", "status": "solved"})
    second = event_log.append_event({"event": "solve", "status": "unsatisfiable"})

    assert first.name == "solves_00.jsonl"
    assert second.name == "solves_01.jsonl"
    assert first.parent == second.parent
    assert event_log.current_log_path() == second
    payload = json.loads(second.read_text("utf-8"))
    assert payload["status"] == "unsatisfiable"
    assert payload["ts"].endswith("+00:00")


def test_events_share_a_file_below_the_limit(tmp_path) -> None:
    event_log.configure(tmp_path)
    paths = {event_log.append_event({"n": n}) for n in range(3)}
    assert len(paths) == 1
    (path,) = paths
    assert [json.loads(line)["n"] for line in path.read_text("utf-8").splitlines()] == [0, 1, 2]
