from pydantic import BaseModel, model_validator
from typing import Optional


class StreamEvent(BaseModel):
    """Event delivered to the host for one streaming call"""

    stream_id: str
    delta: str = ""
    done: bool = False
    error: Optional[str] = None

    @model_validator(mode="after")
    def check_error_only_on_terminal(self):
        if self.error and not self.done:
            raise ValueError("only the terminal event may carry an error")
        return self


class ChatResponse(BaseModel):
    """Result of a non-streaming call"""

    text: str
