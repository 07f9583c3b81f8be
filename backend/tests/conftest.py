"""Shared fixtures and helpers for gateway tests."""

from typing import Any, Callable, List

import httpx
import orjson
import pytest

from gateway.models.request import ChatRequest
from gateway.models.response import StreamEvent


def sse_line(payload: Any) -> bytes:
    """Encode a JSON payload as one SSE data event."""
    return b"data: " + orjson.dumps(payload) + b"\n\n"


def make_request(provider: str = "openai", stream: bool = False, **overrides) -> ChatRequest:
    fields = {
        "provider": provider,
        "api_key": "test-key",
        "model": "test-model",
        "messages": [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hello"},
        ],
        "stream": stream,
        "stream_id": "stream-1",
    }
    fields.update(overrides)
    return ChatRequest(**fields)


class EventRecorder:
    """Async event sink that keeps every event it receives."""

    def __init__(self):
        self.events: List[StreamEvent] = []

    async def __call__(self, event: StreamEvent) -> None:
        self.events.append(event)

    def for_stream(self, stream_id: str) -> List[StreamEvent]:
        return [e for e in self.events if e.stream_id == stream_id]

    @property
    def deltas(self) -> List[str]:
        return [e.delta for e in self.events if not e.done]

    @property
    def terminal(self) -> List[StreamEvent]:
        return [e for e in self.events if e.done]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it handled."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request):
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def chunked(*chunks: bytes):
    """Async byte stream yielding the given chunks one by one."""

    async def stream():
        for chunk in chunks:
            yield chunk

    return stream()


@pytest.fixture
def recorder():
    return EventRecorder()
