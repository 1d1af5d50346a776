from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from datetime import datetime, timezone
from storytests.config.settings import settings
from storytests.core.dependencies import get_ai_service
from storytests.repositories.interfaces.ai_service import IAIService

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    ok: bool


@router.get("", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check():
    """Liveness check"""
    return HealthResponse(ok=True)


@router.get("/readiness")
async def readiness_check(ai_service: IAIService = Depends(get_ai_service)):
    """Readiness check: reports whether a generation provider is usable"""
    checks = {
        "generation_provider": "ok" if ai_service.is_configured else "not_configured",
    }

    all_ok = all(check == "ok" for check in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "provider": settings.generation_provider,
        "environment": settings.environment,
        "checks": checks,
        "timestamp": datetime.now(timezone.utc),
    }
