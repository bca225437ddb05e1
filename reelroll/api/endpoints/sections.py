from fastapi import APIRouter, Depends

from reelroll.api.dependencies import get_bundle
from reelroll.services.plex.service import PlexBundle

router = APIRouter(tags=["sections"])


@router.get("/sections")
async def get_sections(bundle: PlexBundle = Depends(get_bundle)) -> dict[int, dict]:
    """Item counts for every supported library section."""
    return await bundle.library.section_counts()
