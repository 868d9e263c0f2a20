"""
Shared pytest fixtures and configuration for all tests
"""
import os
import json
import pytest
import sys
from pathlib import Path

import httpx

# Settings are validated on import, so the environment must be ready first
os.environ["LAOZHANG_API_KEY"] = "test-key"
os.environ["LAOZHANG_BASE_URL"] = "https://api.laozhang.test/v1"
os.environ["MESSAGE_LANGUAGE"] = "en"

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

TEST_BASE_URL = "https://api.laozhang.test/v1"


def completion_body(content):
    """Chat completion response with a single choice"""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]
    }


class RecordingHandler:
    """httpx.MockTransport handler returning a canned response and keeping requests"""

    def __init__(self, status_code=200, json_body=None, text=None, exc=None):
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc(request)
        if self.json_body is not None:
            return httpx.Response(self.status_code, json=self.json_body)
        return httpx.Response(self.status_code, text=self.text or "")

    @property
    def last_body(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def make_service():
    """Build a LaoZhangService talking to a mock transport"""
    from services.laozhang_service import LaoZhangService

    def _make(handler, **kwargs):
        kwargs.setdefault("video_delay", 0)
        return LaoZhangService(
            api_key="test-key",
            base_url=TEST_BASE_URL,
            transport=httpx.MockTransport(handler),
            **kwargs
        )
    return _make


@pytest.fixture
def image_reply():
    """Handler answering with one markdown image and some text"""
    return RecordingHandler(json_body=completion_body(
        "Here is your edited image:\n![edited](https://cdn.laozhang.test/out/abc.png)"
    ))


@pytest.fixture
def sample_image():
    """Provide a small base64 payload for requests"""
    return "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


@pytest.fixture
def reply():
    """Factory for RecordingHandler instances"""
    def _reply(content=None, **kwargs):
        if content is not None:
            kwargs["json_body"] = completion_body(content)
        return RecordingHandler(**kwargs)
    return _reply
