"""
Per-call orchestration for the chat gateway.

Non-streaming: build -> dispatch -> classify or extract.
Streaming: build -> dispatch -> return "" once the status is accepted, then
pump the body through a StreamDecoder in a background task, publishing one
event per delta and exactly one terminal event.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

import httpx
import orjson

from gateway.config import settings
from gateway.errors import (
    ClientSetupError,
    GatewayError,
    HttpStatusError,
    NetworkError,
    NetworkErrorKind,
    ParseError,
    StreamTransportError,
)
from gateway.models.request import ChatRequest
from gateway.models.response import StreamEvent
from gateway.providers.base import BaseProvider
from gateway.providers.registry import get_provider
from gateway.services.error_classifier import classify
from gateway.services.response_extractor import parse_and_extract
from gateway.utils.sse import StreamDecoder, StreamDelta

logger = logging.getLogger(__name__)

EventEmitter = Callable[[StreamEvent], Awaitable[None]]


class ChatOrchestrator:
    """
    Runs chat calls against providers over a shared httpx client.

    Calls are independent; the only state kept across calls is the set of
    stream pump tasks still running.
    """

    def __init__(self, emit: EventEmitter, client: Optional[httpx.AsyncClient] = None):
        self._emit = emit
        self._client = client
        self._owns_client = client is None
        self._streams: Set[asyncio.Task] = set()

    @property
    def active_streams(self) -> int:
        return len(self._streams)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            try:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(
                        settings.request_timeout, connect=settings.connect_timeout
                    ),
                )
            except Exception as e:
                raise ClientSetupError(f"Failed to create HTTP client: {e}") from e
        return self._client

    async def ai_call(self, request: ChatRequest) -> str:
        """
        Run one chat call.

        Returns:
            The generated text for non-streaming requests; "" for streaming
            requests, whose content arrives as events.

        Raises:
            GatewayError: if the call failed before any content was produced.
                Streaming calls also publish the failure as their terminal event.
        """
        try:
            provider = get_provider(request.provider)
            if not request.stream:
                return await self._complete(provider, request)
            response = await self._open_stream(provider, request)
        except GatewayError as e:
            if request.stream:
                await self._emit_terminal(request.stream_id, error=e.message)
            raise

        task = asyncio.create_task(
            self._pump(provider, request, response), name=f"stream-{request.stream_id}"
        )
        self._streams.add(task)
        task.add_done_callback(self._streams.discard)
        return ""

    async def _dispatch(
        self, provider: BaseProvider, request: ChatRequest, stream: bool
    ) -> httpx.Response:
        prepared = provider.build_request(request)
        client = self._get_client()
        try:
            http_request = client.build_request(
                "POST",
                prepared.url,
                headers=prepared.headers,
                content=orjson.dumps(prepared.body),
            )
        except (TypeError, ValueError) as e:
            # Unserializable payload values or header values httpx cannot encode
            logger.warning(f"Failed to build request for {provider.name}: {e}")
            raise ParseError(f"Failed to build request for {provider.name}: {e}") from e

        try:
            return await client.send(http_request, stream=stream)
        except httpx.TimeoutException as e:
            logger.warning(f"Request to {provider.name} timed out: {e}")
            raise NetworkError(
                f"Request to {provider.name} timed out.", NetworkErrorKind.TIMEOUT
            ) from e
        except httpx.ConnectError as e:
            logger.warning(f"Cannot connect to {provider.name}: {e}")
            raise NetworkError(
                f"Cannot reach {provider.name}. Check your internet connection.",
                NetworkErrorKind.CONNECT,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Network error connecting to {provider.name}: {e}")
            raise NetworkError(f"Network error connecting to {provider.name}: {e}") from e

    def _status_error(
        self, provider: BaseProvider, request: ChatRequest, status: int, body: str
    ) -> HttpStatusError:
        message = classify(status, provider.name, request.model, body)
        logger.warning(f"{provider.name} returned {status}: {message}")
        return HttpStatusError(message, status, body)

    async def _complete(self, provider: BaseProvider, request: ChatRequest) -> str:
        response = await self._dispatch(provider, request, stream=False)
        if not response.is_success:
            raise self._status_error(provider, request, response.status_code, response.text)
        return parse_and_extract(provider.name, response.content)

    async def _open_stream(self, provider: BaseProvider, request: ChatRequest) -> httpx.Response:
        response = await self._dispatch(provider, request, stream=True)
        if response.is_success:
            return response

        body = ""
        try:
            await response.aread()
            body = response.text
        except httpx.HTTPError as e:
            logger.debug(f"Could not read {provider.name} error body: {e}")
        finally:
            await response.aclose()
        raise self._status_error(provider, request, response.status_code, body)

    async def _pump(
        self, provider: BaseProvider, request: ChatRequest, response: httpx.Response
    ) -> None:
        stream_id = request.stream_id
        decoder = StreamDecoder(provider)
        error = None
        logger.debug(f"Streaming {provider.name} response for {stream_id}")

        # The terminal event is sent from the outer finally only, on every exit path
        try:
            try:
                await self._consume(provider, decoder, response, stream_id)
            finally:
                await response.aclose()
        except StreamTransportError as e:
            logger.warning(e.message)
            error = e.message
        except asyncio.CancelledError:
            error = f"Stream from {provider.name} cancelled"
            raise
        except Exception as e:
            logger.exception(f"Unexpected error while streaming from {provider.name}")
            error = f"Stream error from {provider.name}: {e}"
        finally:
            await self._emit_terminal(stream_id, error=error)

    async def _consume(
        self,
        provider: BaseProvider,
        decoder: StreamDecoder,
        response: httpx.Response,
        stream_id: str,
    ) -> None:
        """Relay deltas until the stream terminates or the body ends."""
        try:
            async for chunk in response.aiter_bytes():
                if await self._relay(stream_id, decoder.feed(chunk)):
                    return
        except httpx.HTTPError as e:
            raise StreamTransportError(f"Stream error from {provider.name}: {e}") from e

        # Body ended without a termination marker
        await self._relay(stream_id, decoder.flush())

    async def _relay(self, stream_id: str, items: list[StreamDelta]) -> bool:
        """Emit deltas in order; return True once termination is reached."""
        for item in items:
            if item.done:
                return True
            await self._send(StreamEvent(stream_id=stream_id, delta=item.delta))
        return False

    async def _emit_terminal(self, stream_id: str, error: Optional[str] = None) -> None:
        await self._send(StreamEvent(stream_id=stream_id, done=True, error=error))

    async def _send(self, event: StreamEvent) -> None:
        try:
            await self._emit(event)
        except Exception as e:
            logger.warning(f"Failed to deliver event for stream {event.stream_id}: {e}")

    async def wait_for_streams(self) -> None:
        """Wait until every running stream has produced its terminal event."""
        if self._streams:
            await asyncio.gather(*list(self._streams), return_exceptions=True)

    async def cleanup(self, timeout: Optional[float] = None) -> None:
        """Wait for active streams (cancelling stragglers) and release the client."""
        if timeout is None:
            timeout = settings.cleanup_timeout

        if self._streams:
            logger.debug(f"Waiting for {len(self._streams)} active streams to complete...")
            _, pending = await asyncio.wait(list(self._streams), timeout=timeout)
            if pending:
                logger.warning(
                    f"Cleanup timeout: {len(pending)} streams still active after "
                    f"{timeout}s. Cancelling."
                )
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)

        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
