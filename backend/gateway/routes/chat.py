"""
Chat routes for the gateway.

POST /api/ai/call runs one chat call. Non-streaming calls answer with the
generated text; streaming calls answer with an SSE stream relaying the
call's events until its terminal event.
"""

import logging
from typing import AsyncIterator, NoReturn

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from gateway.errors import ClientSetupError, GatewayError, UnknownProviderError
from gateway.models.request import ChatRequest
from gateway.models.response import ChatResponse
from gateway.providers.registry import PROVIDER_CLASSES
from gateway.services.events import EventChannel, Subscription
from gateway.services.orchestrator import ChatOrchestrator
from gateway.utils.exceptions import raise_bad_gateway, raise_bad_request, raise_internal_error
from gateway.utils.sse import format_sse

logger = logging.getLogger(__name__)

router = APIRouter()


def get_orchestrator(request: Request) -> ChatOrchestrator:
    return request.app.state.orchestrator


def get_channel(request: Request) -> EventChannel:
    return request.app.state.channel


def raise_for_gateway_error(error: GatewayError) -> NoReturn:
    """Map a gateway failure to an HTTP error response."""
    if isinstance(error, UnknownProviderError):
        raise_bad_request(error.message)
    if isinstance(error, ClientSetupError):
        raise_internal_error(error.message)
    raise_bad_gateway(error.message)


async def relay_events(channel: EventChannel, subscription: Subscription) -> AsyncIterator[str]:
    """Relay one call's events as SSE, ending after its terminal event."""
    try:
        async for event in subscription:
            yield format_sse(channel.name, event)
            if event.done:
                break
    finally:
        channel.close(subscription)


@router.post("/ai/call")
async def ai_call(
    request: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
    channel: EventChannel = Depends(get_channel),
):
    """
    POST /api/ai/call - single chat completion

    Returns {"text": ...} for non-streaming requests. Streaming requests get
    an SSE stream of `ai-stream` events {stream_id, delta, done, error};
    exactly one event has done=true and it is always the last.
    """
    if not request.stream:
        try:
            text = await orchestrator.ai_call(request)
        except GatewayError as e:
            raise_for_gateway_error(e)
        return ChatResponse(text=text)

    # Subscribe before dispatch so no event of this call is missed
    subscription = channel.open(request.stream_id)
    try:
        await orchestrator.ai_call(request)
    except GatewayError as e:
        channel.close(subscription)
        logger.info(f"Stream {request.stream_id} failed before streaming: {e.message}")
        raise_for_gateway_error(e)
    except BaseException:
        channel.close(subscription)
        raise

    return StreamingResponse(
        relay_events(channel, subscription),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


@router.get("/providers")
async def list_providers():
    """List supported providers and their API base URLs"""
    return {
        "providers": [
            {"name": provider.value, "base_url": provider_class.base_url}
            for provider, provider_class in PROVIDER_CLASSES.items()
        ]
    }
