from fastapi import APIRouter

from .endpoints.library import router as library_router
from .endpoints.sections import router as sections_router
from .endpoints.validate import router as validate_router

api_router = APIRouter(prefix="/api")


@api_router.get("/")
async def root():
    return {"message": "ReelRoll API is running"}


api_router.include_router(validate_router)
api_router.include_router(sections_router)
api_router.include_router(library_router)
