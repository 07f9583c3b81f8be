"""Tests for message helper utilities."""

from gateway.models.request import ChatMessage
from gateway.utils.message_helpers import (
    dig,
    dig_str,
    format_for_gemini,
    format_for_openai,
    split_system_messages,
)


def msg(role, content):
    return ChatMessage(role=role, content=content)


def test_split_system_messages_joins_in_order():
    system, others = split_system_messages([
        msg("system", "first"),
        msg("user", "Hi"),
        msg("system", "second"),
        msg("assistant", "Hello"),
    ])
    assert system == "first\nsecond"
    assert [m.role for m in others] == ["user", "assistant"]


def test_split_system_messages_without_system():
    system, others = split_system_messages([msg("user", "Hi")])
    assert system == ""
    assert len(others) == 1


def test_format_for_openai():
    assert format_for_openai(msg("system", "rules")) == {"role": "system", "content": "rules"}


def test_format_for_gemini_maps_roles():
    assert format_for_gemini(msg("assistant", "Hi")) == {"role": "model", "parts": [{"text": "Hi"}]}
    assert format_for_gemini(msg("user", "Yo"))["role"] == "user"


def test_dig_walks_keys_and_indexes():
    data = {"choices": [{"delta": {"content": "Hi"}}]}
    assert dig(data, "choices", 0, "delta", "content") == "Hi"


def test_dig_returns_none_on_wrong_shape():
    assert dig({"choices": []}, "choices", 0) is None
    assert dig({"choices": {"0": 1}}, "choices", 0) is None
    assert dig(["x"], "key") is None
    assert dig({}, "missing") is None


def test_dig_str_rejects_non_strings():
    assert dig_str({"text": 5}, "text") is None
    assert dig_str({"text": "ok"}, "text") == "ok"
