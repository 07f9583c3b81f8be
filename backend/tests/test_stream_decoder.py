"""Tests for the incremental SSE stream decoder."""

import pytest

from gateway.providers.registry import get_provider
from gateway.utils.sse import DONE, StreamDecoder, StreamDelta

from conftest import sse_line

ALL_PROVIDERS = ["openai", "xai", "anthropic", "gemini"]


def decoder_for(provider):
    return StreamDecoder(get_provider(provider))


def openai_delta(text):
    return {"choices": [{"delta": {"content": text}, "finish_reason": None}]}


def gemini_delta(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.mark.parametrize("provider", ALL_PROVIDERS)
def test_done_sentinel_for_every_provider(provider):
    assert decoder_for(provider).feed(b"data: [DONE]\n") == [DONE]


@pytest.mark.parametrize("line", [b"data:[DONE]\n", b"data:   [DONE]  \n", b"  data: [DONE]\r\n"])
def test_done_sentinel_variants(line):
    assert decoder_for("openai").feed(line) == [DONE]


def test_openai_delta():
    assert decoder_for("openai").feed(sse_line(openai_delta("Hi"))) == [StreamDelta(delta="Hi")]


def test_anthropic_content_block_delta():
    line = b'data: {"type":"content_block_delta","delta":{"text":"Hi"}}\n'
    assert decoder_for("anthropic").feed(line) == [StreamDelta(delta="Hi")]


def test_anthropic_ignores_other_event_types():
    decoder = decoder_for("anthropic")
    assert decoder.feed(b'event: message_start\ndata: {"type":"message_start","message":{}}\n\n') == []
    assert decoder.feed(b'data: {"type":"ping"}\n') == []


def test_gemini_delta():
    assert decoder_for("gemini").feed(sse_line(gemini_delta("Yo"))) == [StreamDelta(delta="Yo")]


@pytest.mark.parametrize(
    "provider,payload",
    [
        ("openai", {"choices": [{"delta": {"content": "tail"}, "finish_reason": "stop"}]}),
        ("xai", {"choices": [{"delta": {}, "finish_reason": "end_turn"}]}),
        ("anthropic", {"type": "message_stop"}),
        ("gemini", {"candidates": [{"content": {"parts": [{"text": "tail"}]}, "finishReason": "STOP"}]}),
        ("gemini", {"candidates": [{"finishReason": "MAX_TOKENS"}]}),
    ],
)
def test_termination_markers_yield_no_delta(provider, payload):
    assert decoder_for(provider).feed(sse_line(payload)) == [DONE]


def test_openai_other_finish_reason_is_not_terminal():
    payload = {"choices": [{"delta": {"content": "x"}, "finish_reason": "length"}]}
    assert decoder_for("openai").feed(sse_line(payload)) == [StreamDelta(delta="x")]


def test_line_split_across_chunks():
    whole = sse_line(openai_delta("Hello world"))
    decoder = decoder_for("openai")
    assert decoder.feed(whole[:17]) == []
    assert decoder.feed(whole[17:]) == [StreamDelta(delta="Hello world")]


def test_multibyte_character_split_across_chunks():
    whole = sse_line(gemini_delta("naïve ☕"))
    cut = whole.index("☕".encode()) + 1  # inside the three-byte character
    decoder = decoder_for("gemini")
    assert decoder.feed(whole[:cut]) == []
    assert decoder.feed(whole[cut:]) == [StreamDelta(delta="naïve ☕")]


def test_byte_at_a_time_matches_whole_delivery():
    stream = sse_line(openai_delta("héllo ✓")) + sse_line(openai_delta(" 世界")) + b"data: [DONE]\n"
    whole = decoder_for("openai").feed(stream)

    decoder = decoder_for("openai")
    pieces = []
    for i in range(len(stream)):
        pieces.extend(decoder.feed(stream[i:i + 1]))
    assert pieces == whole == [StreamDelta(delta="héllo ✓"), StreamDelta(delta=" 世界"), DONE]


def test_unparsable_lines_are_dropped():
    decoder = decoder_for("openai")
    assert decoder.feed(b"data: {not json\n") == []
    assert decoder.feed(b": keep-alive\n") == []
    assert decoder.feed(b'data: "just a string"\n') == []
    assert decoder.feed(sse_line(openai_delta("ok"))) == [StreamDelta(delta="ok")]


def test_non_data_fields_ignored():
    decoder = decoder_for("openai")
    assert decoder.feed(b"event: completion\nid: 7\nretry: 1000\n\n") == []


def test_empty_delta_yields_nothing():
    decoder = decoder_for("openai")
    assert decoder.feed(sse_line(openai_delta(""))) == []
    assert decoder.feed(sse_line({"choices": [{"delta": {"role": "assistant"}}]})) == []


def test_data_prefix_without_space():
    line = b'data:{"choices":[{"delta":{"content":"x"}}]}\n'
    assert decoder_for("xai").feed(line) == [StreamDelta(delta="x")]


def test_input_after_termination_is_discarded():
    decoder = decoder_for("anthropic")
    chunk = (
        b'data: {"type":"content_block_delta","delta":{"text":"a"}}\n'
        b'data: {"type":"message_stop"}\n'
        b'data: {"type":"content_block_delta","delta":{"text":"late"}}\n'
    )
    assert decoder.feed(chunk) == [StreamDelta(delta="a"), DONE]
    assert decoder.finished
    assert decoder.feed(sse_line({"type": "content_block_delta", "delta": {"text": "more"}})) == []
    assert decoder.flush() == []


def test_incomplete_line_stays_buffered():
    decoder = decoder_for("openai")
    assert decoder.feed(b'data: {"choices":[{"delta":{"content":"x"}}]}') == []
    assert decoder.feed(b"\n") == [StreamDelta(delta="x")]


def test_flush_processes_unterminated_final_line():
    decoder = decoder_for("gemini")
    assert decoder.feed(b'data: {"candidates":[{"content":{"parts":[{"text":"end"}]}}]}') == []
    assert decoder.flush() == [StreamDelta(delta="end")]
    assert decoder.flush() == []


def test_flush_replaces_truncated_character():
    decoder = decoder_for("openai")
    assert decoder.feed("data: [DONE".encode() + "é".encode()[:1]) == []
    # Invalid trailing byte becomes U+FFFD; the payload is no longer the sentinel
    assert decoder.flush() == []
