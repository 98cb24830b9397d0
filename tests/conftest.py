"""
Shared fixtures for the captionburn tests.
"""

import threading
from pathlib import Path

import pytest

from captionburn.client import parse_sse_lines
from captionburn.server.artifact_store import ArtifactStore
from captionburn.server.models import EngineCompleted
from captionburn.server.session import EventChannel, SessionRegistry


class FakeEngine:
    """Engine replaying a fixed list of events, writing the output on completion."""

    def __init__(self, events=None, gate: threading.Event = None):
        self.events = list(events if events is not None else [EngineCompleted()])
        self.gate = gate
        self.calls = []
        self.subtitle_contents = []

    def run(self, input_path, output_path, subtitle_path=None):
        self.calls.append((str(input_path), str(output_path), subtitle_path))
        if subtitle_path is not None:
            self.subtitle_contents.append(Path(subtitle_path).read_text(encoding="utf-8"))
        if self.gate is not None:
            self.gate.wait(timeout=10)

        for event in self.events:
            if isinstance(event, Exception):
                raise event
            if isinstance(event, EngineCompleted):
                Path(output_path).write_bytes(b"processed video")
            yield event


def collect_events(channel: EventChannel):
    """Close a channel and return the (event, data) pairs it had queued."""
    channel.close()
    body = "".join(channel.listen())
    return list(parse_sse_lines(body.split("\n")))


@pytest.fixture
def store(tmp_path):
    store = ArtifactStore(tmp_path / "uploads", tmp_path / "processed", "http://localhost:4000")
    store.ensure_directories()
    return store


@pytest.fixture
def sessions():
    return SessionRegistry()


@pytest.fixture
def make_upload(store):
    """Create a fake uploaded video in the upload directory."""

    def _make(name: str = "1700000000000-clip.mp4") -> Path:
        path = store.upload_dir / name
        path.write_bytes(b"source video")
        return path

    return _make
