"""
Server-sent event helpers.

StreamDecoder turns a provider's raw SSE byte stream into text deltas and a
terminal signal; format_sse encodes gateway events for the host's own SSE
responses.
"""

import codecs
import logging
from dataclasses import dataclass
from typing import List, Optional

import orjson

from gateway.models.response import StreamEvent
from gateway.providers.base import BaseProvider

logger = logging.getLogger(__name__)

# Constants
SSE_DATA_PREFIX = "data: "
SSE_DATA_FIELD = "data:"
SSE_DONE_SIGNAL = "[DONE]"


@dataclass(frozen=True)
class StreamDelta:
    """Outcome of one decoded SSE line: either a text delta or the end of stream"""

    delta: str = ""
    done: bool = False


DONE = StreamDelta(done=True)


class StreamDecoder:
    """
    Incremental, chunk-boundary-safe SSE decoder for one streaming call.

    Bytes are decoded with an incremental UTF-8 decoder, so a chunk ending
    mid-character is completed by the next chunk. Complete lines are consumed
    through a cursor; incomplete trailing text waits for more data. Once the
    stream signals termination the decoder is finished and ignores any
    further input.
    """

    def __init__(self, provider: BaseProvider):
        self.provider = provider
        self.finished = False
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._cursor = 0

    def feed(self, chunk: bytes) -> List[StreamDelta]:
        """Decode one chunk of bytes, returning deltas in stream order.

        The list ends with a terminal item if this chunk completed the stream.
        """
        if self.finished:
            return []
        self._buffer += self._decoder.decode(chunk)
        return self._drain_lines()

    def flush(self) -> List[StreamDelta]:
        """Process whatever is left once the byte stream has ended."""
        if self.finished:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        results = self._drain_lines()
        if not self.finished and self._buffer:
            # Final line without a trailing line feed
            line, self._buffer = self._buffer, ""
            item = self.decode_line(line)
            if item is not None:
                results.append(item)
                self.finished = item.done
        return results

    def _drain_lines(self) -> List[StreamDelta]:
        results = []
        while True:
            end = self._buffer.find("\n", self._cursor)
            if end == -1:
                break
            line = self._buffer[self._cursor:end]
            self._cursor = end + 1

            item = self.decode_line(line)
            if item is None:
                continue
            results.append(item)
            if item.done:
                # Anything after the terminal line is discarded
                self.finished = True
                self._buffer = ""
                self._cursor = 0
                return results

        self._buffer = self._buffer[self._cursor:]
        self._cursor = 0
        return results

    def decode_line(self, line: str) -> Optional[StreamDelta]:
        """
        Classify a single SSE line.

        Returns:
            None for lines that carry nothing (blank, non-data fields,
            unparsable JSON, events without text), DONE for termination,
            otherwise a StreamDelta with non-empty text.
        """
        line = line.strip()
        if not line:
            return None

        if line.startswith(SSE_DATA_PREFIX):
            payload = line[len(SSE_DATA_PREFIX):]
        elif line.startswith(SSE_DATA_FIELD):
            payload = line[len(SSE_DATA_FIELD):].strip()
        else:
            # event:, id:, retry:, comments
            return None

        if payload.strip() == SSE_DONE_SIGNAL:
            return DONE

        try:
            data = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            logger.debug(f"JSON parse error in {self.provider.name} stream: {e}")
            return None

        if not isinstance(data, dict):
            return None
        if self.provider.is_done(data):
            return DONE

        delta = self.provider.extract_delta(data)
        if delta:
            return StreamDelta(delta=delta)
        return None


def format_sse(event: str, payload: StreamEvent) -> str:
    """Format a stream event as an SSE message"""
    return f"event: {event}\ndata: {orjson.dumps(payload.model_dump()).decode()}\n\n"
