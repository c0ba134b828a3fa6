"""
Unit tests for the structured event emitter.
"""

import json

from crosshot import emit as emit_module
from crosshot.emit import add_handler, configure, emit, remove_handler


class TestEmit:

    def test_quiet_by_default(self, capsys):
        emit("operation.started", {"x": 1})
        assert capsys.readouterr().err == ""

    def test_stderr_when_enabled(self, capsys):
        configure("crosshot-test", stderr=True)
        emit("artifact.created", {"file_path": "/tmp/a.png"})
        line = capsys.readouterr().err.strip()
        event = json.loads(line)
        assert event["event_type"] == "artifact.created"
        assert event["source"] == {"tool": "crosshot-test"}
        assert event["data"]["file_path"] == "/tmp/a.png"

    def test_handlers(self):
        seen = []
        add_handler(seen.append)
        emit("shutdown", {}, source="other")
        remove_handler(seen.append)
        emit("shutdown", {})
        assert len(seen) == 1
        assert seen[0]["source"]["tool"] == "other"

    def test_handler_errors_swallowed(self):
        def broken(event):
            raise RuntimeError("nope")

        add_handler(broken)
        event = emit("shutdown", {})
        assert event["event_type"] == "shutdown"

    def test_catalog_covers_emitted_types(self):
        types = {entry["event_type"] for entry in emit_module.EVENT_CATALOG}
        assert {"operation.started", "operation.completed", "artifact.created",
                "error.handled", "config.resolved", "shutdown"} <= types
