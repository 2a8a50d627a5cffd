from .resumes import router as resumes_router
from .ai_health import router as ai_health_router

__all__ = ["resumes_router", "ai_health_router"]
