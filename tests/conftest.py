"""
Pytest configuration and fixtures.
"""

import os
import re
import subprocess
from pathlib import Path

import pytest

from crosshot import emit as emit_module


IMAGE_SUFFIXES = (".png", ".jpg", ".bmp", ".webp")

# A few bytes that look like a PNG header; nothing decodes them
FAKE_IMAGE = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4


def _target(argv: list[str]) -> Path:
    """Find the output path an invocation would write to."""
    for arg in argv[1:]:
        match = re.search(r"Save\('([^']+)'", arg)
        if match:
            return Path(match.group(1).replace("''", "'"))
        if arg.endswith(IMAGE_SUFFIXES):
            return Path(arg)
    raise AssertionError(f"no output path in {argv}")


class FakeRunner:
    """Stands in for subprocess.run.

    Behaviors per tool name:
        "missing"  - raises FileNotFoundError (tool not installed)
        "fail"     - exits 1
        "noop"     - exits 0 without writing anything
        "timeout"  - raises subprocess.TimeoutExpired
        "ok"       - exits 0 and writes FAKE_IMAGE to the output path
    """

    def __init__(self, outcomes=None, default="missing", content=FAKE_IMAGE):
        self.outcomes = dict(outcomes or {})
        self.default = default
        self.content = content
        self.calls: list[list[str]] = []
        self.log: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def tools(self) -> list[str]:
        return [argv[0] for argv in self.calls]

    def __call__(self, argv, **kwargs):
        tool = argv[0]
        self.calls.append(list(argv))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.log.append(("start", tool))
        try:
            behavior = self.outcomes.get(tool, self.default)
            if behavior == "missing":
                raise FileNotFoundError(2, "No such file or directory", tool)
            if behavior == "timeout":
                raise subprocess.TimeoutExpired(argv, kwargs.get("timeout"))
            if behavior == "fail":
                return subprocess.CompletedProcess(argv, 1, "", "boom")
            if behavior == "ok":
                _target(argv).write_bytes(self.content)
            return subprocess.CompletedProcess(argv, 0, "", "")
        finally:
            self.log.append(("end", tool))
            self.in_flight -= 1


@pytest.fixture
def fake_runner():
    """Factory for FakeRunner instances."""
    def _create(outcomes=None, default="missing", content=FAKE_IMAGE) -> FakeRunner:
        return FakeRunner(outcomes, default=default, content=content)
    return _create


@pytest.fixture(autouse=True)
def quiet_events():
    """Keep emitter state from leaking between tests."""
    emit_module.configure("crosshot", stderr=False)
    saved = list(emit_module._handlers)
    yield
    emit_module._handlers[:] = saved
    emit_module.configure("crosshot", stderr=False)


@pytest.fixture
def captured_events():
    events: list[dict] = []
    emit_module.add_handler(events.append)
    yield events
    emit_module.remove_handler(events.append)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point config loading at an empty temp dir and clear CROSSHOT_* vars."""
    for key in list(os.environ):
        if key.startswith("CROSSHOT_"):
            monkeypatch.delenv(key, raising=False)
    path = tmp_path / "config.yaml"
    monkeypatch.setenv("CROSSHOT_CONFIG", str(path))
    return path
