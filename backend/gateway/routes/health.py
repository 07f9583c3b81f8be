from fastapi import APIRouter

from gateway.providers.registry import get_provider_names

router = APIRouter()


@router.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "providers": get_provider_names(),
    }
