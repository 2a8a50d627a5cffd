"""
AI Health Router - Gemini configuration and API key statistics
"""
from fastapi import APIRouter, Depends

from ..services.gemini_client import GeminiClient, get_gemini_client

router = APIRouter(prefix="/api/ai", tags=["AI"])


@router.get("/health")
async def ai_health(client: GeminiClient = Depends(get_gemini_client)):
    """Report whether AI parsing is configured, with per-key usage and cache stats."""
    return {"success": True, "data": client.get_health_status()}
