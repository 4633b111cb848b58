"""Shared fixtures: an app with overridable settings/provider and a fake audio stream."""

from __future__ import annotations

import base64
import threading
import time

import pytest
from fastapi.testclient import TestClient

from metlens.api.analyze import get_provider
from metlens.core.settings import Settings, get_settings
from metlens.main import create_app

TEST_KEY = "test-secret-key"
JPEG_B64 = base64.b64encode(b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body\xff\xd9").decode("ascii")


class StubProvider:
    """Stands in for GeminiProvider; records calls and returns canned answers."""

    def __init__(self, objects=None, audio="AAAA", exc: Exception | None = None) -> None:
        self.objects = objects if objects is not None else []
        self.audio = audio
        self.exc = exc
        self.calls: list[tuple] = []

    async def analyze_image(self, base64_image, language):
        self.calls.append(("analyzeImage", base64_image, language))
        if self.exc:
            raise self.exc
        return self.objects

    async def generate_audio(self, text):
        self.calls.append(("generateAudio", text))
        if self.exc:
            raise self.exc
        return self.audio


class FakeStream:
    """Minimal sounddevice.OutputStream lookalike."""

    instances: list["FakeStream"] = []

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.stopped = True
        self.closed = False
        self.start_calls = 0
        self.writes: list = []
        FakeStream.instances.append(self)

    def start(self) -> None:
        self.start_calls += 1
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True

    def close(self) -> None:
        self.closed = True

    def write(self, data) -> None:
        self.writes.append(data.copy())


def make_settings(**overrides) -> Settings:
    values = {"api_key": TEST_KEY}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def build_client():
    """Return a factory: build_client(settings=..., provider=...) -> TestClient."""

    def _build(settings: Settings | None = None, provider=None) -> TestClient:
        app = create_app()
        cfg = settings or make_settings()
        app.dependency_overrides[get_settings] = lambda: cfg
        if provider is not None:
            app.dependency_overrides[get_provider] = lambda: provider
        return TestClient(app)

    return _build


@pytest.fixture
def fake_stream_factory():
    FakeStream.instances.clear()
    return FakeStream


class SlowStream(FakeStream):
    """FakeStream whose write blocks for a while and records how many writes overlap."""

    delay = 0.05
    active = 0
    max_active = 0
    _guard = threading.Lock()

    def write(self, data) -> None:
        with SlowStream._guard:
            SlowStream.active += 1
            SlowStream.max_active = max(SlowStream.max_active, SlowStream.active)
        try:
            time.sleep(self.delay)
            super().write(data)
        finally:
            with SlowStream._guard:
                SlowStream.active -= 1


@pytest.fixture
def slow_stream_factory():
    FakeStream.instances.clear()
    SlowStream.active = 0
    SlowStream.max_active = 0
    return SlowStream
