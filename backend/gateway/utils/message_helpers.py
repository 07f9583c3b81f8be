"""Message format conversion utilities for multi-provider request shaping."""

from typing import Any, Iterable, Optional

from gateway.models.request import ChatMessage


def split_system_messages(
    messages: Iterable[ChatMessage],
) -> tuple[str, list[ChatMessage]]:
    """
    Separate system messages from the conversation.

    Args:
        messages: Ordered chat messages

    Returns:
        Tuple of (system contents joined by newlines in original order,
        remaining messages in original order)

    Examples:
        >>> split_system_messages([system("a"), user("hi"), system("b")])
        ("a\\nb", [user("hi")])
    """
    system_parts = []
    others = []
    for msg in messages:
        if msg.role == "system":
            system_parts.append(msg.content)
        else:
            others.append(msg)
    return "\n".join(system_parts), others


def format_for_openai(message: ChatMessage) -> dict[str, Any]:
    """Convert a message to an OpenAI chat message."""
    return {"role": message.role, "content": message.content}


def format_for_claude(message: ChatMessage) -> dict[str, Any]:
    """Convert a non-system message to a Claude message."""
    return {"role": message.role, "content": message.content}


def format_for_gemini(message: ChatMessage) -> dict[str, Any]:
    """
    Convert a non-system message to a Gemini content entry.

    Gemini only knows "user" and "model"; assistant turns become "model",
    everything else is sent as "user".
    """
    role = "model" if message.role == "assistant" else "user"
    return {"role": role, "parts": [{"text": message.content}]}


def dig(data: Any, *path: str | int) -> Optional[Any]:
    """
    Walk a parsed JSON value along a path of keys and list indexes.

    Returns None as soon as a step is missing or the value has the wrong shape.

    Examples:
        >>> dig({"choices": [{"delta": {"content": "Hi"}}]}, "choices", 0, "delta", "content")
        "Hi"
        >>> dig({"choices": []}, "choices", 0, "delta")
        None
    """
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
        elif not isinstance(current, dict) or step not in current:
            return None
        current = current[step]
    return current


def dig_str(data: Any, *path: str | int) -> Optional[str]:
    """Like dig(), but only returns string values."""
    value = dig(data, *path)
    return value if isinstance(value, str) else None
