from __future__ import annotations

import io
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from PIL import Image


_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

import kathakar  # noqa: E402


def png_bytes(color=(200, 40, 40)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (16, 9), color).save(buf, format="PNG")
    return buf.getvalue()


def image_response(data: bytes = None):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data or png_bytes(), mime_type="image/png"), text=None)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]), finish_reason="STOP")],
                           prompt_feedback=None)


def text_response(*texts, finish_reason="STOP"):
    parts = [SimpleNamespace(inline_data=None, text=t) for t in texts]
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts), finish_reason=finish_reason)],
                           prompt_feedback=None, text="".join(texts))


def empty_response():
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]), finish_reason="STOP")],
                           prompt_feedback=None, text="")


class FakeModels:
    """Replays scripted responses; an Exception in the script is raised instead."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if not self.script:
            raise AssertionError("unexpected generate_content call")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeClient:
    def __init__(self, script=()):
        self.models = FakeModels(script)


@pytest.fixture
def settings():
    return kathakar.Settings(api_key="test-key", print_prompts=False)


@pytest.fixture
def make_gaic(settings):
    def _make(*script):
        return kathakar.GAIC(settings, client=FakeClient(script))
    return _make


@pytest.fixture
def sleeps():
    recorded = []

    def _sleep(seconds):
        recorded.append(seconds)

    _sleep.calls = recorded
    return _sleep
