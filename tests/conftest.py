"""Shared fixtures: a scripted Gemini stand-in and a configured app."""
import json

import pytest

from geminiproxy.core.app import create_app
from geminiproxy.core.settings import Settings


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeGemini:
    """Records calls and replays scripted replies, per API key."""

    def __init__(self):
        self.reply = "Hello there"
        self.fragments = ["Hel", "lo"]
        self.fail_keys = {}
        self.mid_stream_error = None
        self.calls = []

    def factory(self, api_key):
        return FakeClient(self, api_key)

    def check(self, api_key):
        error = self.fail_keys.get(api_key)
        if error is not None:
            raise error

    @property
    def keys_used(self):
        return [call["api_key"] for call in self.calls]


class FakeChat:
    def __init__(self, backend, api_key, model, config, history):
        self.backend = backend
        self.api_key = api_key
        self.model = model
        self.config = config
        self.history = history

    def _record(self, kind, message):
        self.backend.calls.append(
            {
                "kind": kind,
                "api_key": self.api_key,
                "model": self.model,
                "config": self.config,
                "history": self.history,
                "message": message,
            }
        )

    def send_message(self, message):
        self._record("send_message", message)
        self.backend.check(self.api_key)
        return FakeResponse(self.backend.reply)

    def send_message_stream(self, message):
        self._record("send_message_stream", message)
        self.backend.check(self.api_key)
        for fragment in self.backend.fragments:
            yield FakeResponse(fragment)
        if self.backend.mid_stream_error is not None:
            raise self.backend.mid_stream_error


class FakeChats:
    def __init__(self, backend, api_key):
        self.backend = backend
        self.api_key = api_key

    def create(self, model, config=None, history=None):
        return FakeChat(self.backend, self.api_key, model, config, history)


class FakeModels:
    def __init__(self, backend, api_key):
        self.backend = backend
        self.api_key = api_key

    def generate_content(self, model, contents, config=None):
        self.backend.calls.append(
            {"kind": "generate_content", "api_key": self.api_key, "model": model, "contents": contents, "config": config}
        )
        self.backend.check(self.api_key)
        return FakeResponse(self.backend.reply)


class FakeClient:
    def __init__(self, backend, api_key):
        self.api_key = api_key
        self.chats = FakeChats(backend, api_key)
        self.models = FakeModels(backend, api_key)


def make_settings(tmp_path, **overrides):
    values = dict(
        api_keys=("key-a", "key-b", "key-c"),
        model="gemini-test",
        host="127.0.0.1",
        port=3000,
        upload_dir=str(tmp_path / "uploads"),
        static_dir=str(tmp_path / "dist"),
        log_level="WARNING",
        log_dir=None,
        app_version="test",
        max_body_mb=5,
        max_upload_files=10,
        upstream_timeout=None,
        cors_origins=("*",),
        unsupported_content_text="Unsupported content type",
        strict_config=False,
    )
    values.update(overrides)
    return Settings(**values)


def parse_sse(body):
    """Split an SSE body into decoded payloads; the [DONE] marker stays a string."""
    frames = []
    for block in body.split("\n\n"):
        if not block:
            continue
        assert block.startswith("data: ")
        data = block[len("data: "):]
        frames.append(data if data == "[DONE]" else json.loads(data))
    return frames


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def app(settings, gemini):
    app = create_app(settings, client_factory=gemini.factory)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
