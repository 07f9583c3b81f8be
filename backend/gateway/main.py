import logging

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from gateway.config import settings
from gateway.routes import chat, health
from gateway.services.events import EventChannel
from gateway.services.orchestrator import ChatOrchestrator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle events"""
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout, connect=settings.connect_timeout),
    )
    channel = EventChannel(settings.event_channel)
    orchestrator = ChatOrchestrator(emit=channel.publish, client=client)

    app.state.channel = channel
    app.state.orchestrator = orchestrator
    logger.info(f"Gateway ready, publishing stream events on '{channel.name}'")

    yield

    # Shutdown: let running streams finish, then release the client
    await orchestrator.cleanup()
    await client.aclose()


app = FastAPI(
    title="LLM Chat Gateway",
    description="Multi-provider chat-completion gateway with SSE streaming",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware (useful for local hosts and dev)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(chat.router, prefix="/api", tags=["chat"])
