"""Pytest configuration helpers.

This conftest ensures the project root is on `sys.path` so tests can import
the `santa_video` package without an editable install, and provides shared
fixtures for building settings and fake HTTP transports.
"""
import json
import os
import sys

import httpx
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from santa_video.config import Settings  # noqa: E402

AZURE_ENDPOINT = "https://santa.openai.azure.com"
VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42fake-video"


@pytest.fixture
def make_settings(tmp_path):
    """Build isolated Settings: no .env, zero poll interval, output in tmp_path."""

    def _make(**overrides):
        values = {
            "VIDEO_PROVIDER": "azure_jobs",
            "AZURE_AI_ENDPOINT": AZURE_ENDPOINT,
            "AZURE_AI_API_KEY": "test-key",
            "AZURE_AI_DEPLOYMENT_NAME": "sora",
            "OPENAI_API_KEY": "sk-test",
            "POLL_INTERVAL_SECONDS": 0,
            "OUTPUT_DIR": str(tmp_path / "out"),
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "christmas_scene.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return path


class FakeVideoAPI:
    """Scripted stand-in for a remote video API.

    ``submit`` is the (status, body) answered to the first POST; ``polls`` are
    the JSON bodies answered to successive status GETs; any GET whose path
    contains ``content`` returns the video bytes.
    """

    def __init__(self, submit=(200, {"id": "job-123"}), polls=(), download_status=200):
        self.submit = submit
        self.polls = list(polls)
        self.download_status = download_status
        self.requests: list[httpx.Request] = []

    def _of(self, method, kind):
        return [r for r in self.requests if r.method == method and self._kind(r) == kind]

    @staticmethod
    def _kind(request):
        path = request.url.path
        if request.method == "POST":
            return "submit"
        if "content" in path or path.endswith(".mp4"):
            return "download"
        return "poll"

    @property
    def submit_requests(self):
        return self._of("POST", "submit")

    @property
    def poll_requests(self):
        return self._of("GET", "poll")

    @property
    def download_requests(self):
        return self._of("GET", "download")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        kind = self._kind(request)
        if kind == "submit":
            status, body = self.submit
            return httpx.Response(status, json=body)
        if kind == "download":
            return httpx.Response(self.download_status, content=VIDEO_BYTES)
        if not self.polls:
            return httpx.Response(200, json={"status": "running"})
        body = self.polls.pop(0)
        return httpx.Response(200, content=json.dumps(body).encode())

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_api():
    return FakeVideoAPI
