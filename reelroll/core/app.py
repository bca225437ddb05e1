from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from reelroll.api.endpoints.health import router as health_router
from reelroll.api.main import api_router
from reelroll.core.exceptions import ReelRollError

from .config import settings
from .version import __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events (startup/shutdown).
    """
    logger.info(
        f"{settings.APP_NAME} {__version__} starting; supported sections: {sorted(settings.SUPPORTED_SECTION_IDS)}"
    )
    yield
    logger.info(f"{settings.APP_NAME} shutting down")


app = FastAPI(
    title="ReelRoll",
    description="Random pick from a Plex library, revealed by a slot-machine spin",
    version=__version__,
    lifespan=lifespan,
    docs_url=None if settings.APP_ENV != "development" else "/docs",
    redoc_url=None if settings.APP_ENV != "development" else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Plex-Ip", "X-Plex-Token"],
)


@app.exception_handler(ReelRollError)
async def reelroll_exception_handler(_request: Request, exc: ReelRollError) -> JSONResponse:
    """Render domain errors with the status and code their class declares."""
    return JSONResponse(
        status_code=exc.http_status_code,
        content={"error": {"code": exc.error_code, "message": exc.message}},
    )


app.include_router(health_router)
app.include_router(api_router)
