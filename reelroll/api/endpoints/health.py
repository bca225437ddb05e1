from fastapi import APIRouter

from reelroll.core.config import settings
from reelroll.core.version import __version__

router = APIRouter(tags=["health"])


@router.get("/health", summary="Readiness probe")
async def health_check() -> dict[str, str]:
    return {"status": "ok", "app": settings.APP_NAME, "version": __version__}
