from typing import Any, Dict

from fastapi import APIRouter

from reply_gateway.core.config import settings
from reply_gateway.directives import directive_catalog

router = APIRouter()


@router.get("/ready", tags=["health"])
async def readiness_probe() -> Dict[str, Any]:
    """Readiness probe; also reports which directives this instance can apply."""
    return {
        "status": "ok",
        "renderer": settings.renderer_backend,
        "directives": directive_catalog(),
    }


@router.get("/live", tags=["health"])
async def liveness_probe() -> Dict[str, str]:
    """Simple liveness check."""
    return {"status": "alive"}
