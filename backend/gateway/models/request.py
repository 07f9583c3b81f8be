from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Single role-tagged chat message"""
    role: str = Field(..., pattern="^(system|user|assistant)$")
    content: str


class ChatRequest(BaseModel):
    """Normalized chat-completion request, consumed once per call.

    api_key and model are passed through to the provider untouched.
    """
    provider: str
    api_key: str
    model: str
    messages: List[ChatMessage]
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: bool = False
    stream_id: str = Field(default_factory=lambda: uuid4().hex)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "provider": "anthropic",
                    "api_key": "sk-ant-...",
                    "model": "claude-sonnet-4-5-20250929",
                    "messages": [
                        {"role": "system", "content": "Be concise."},
                        {"role": "user", "content": "What is the capital of France?"},
                    ],
                    "stream": True,
                    "stream_id": "b1f0c6",
                }
            ]
        }
    )


@dataclass
class PreparedRequest:
    """Provider-shaped request ready for dispatch"""

    url: str
    headers: Dict[str, str]
    body: Dict[str, Any] = field(default_factory=dict)
