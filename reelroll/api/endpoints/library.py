from collections.abc import Sequence

from fastapi import APIRouter, Depends
from loguru import logger

from reelroll.api.dependencies import get_bundle, get_section_ids
from reelroll.core.exceptions import TransportFailure
from reelroll.core.security import redact_token
from reelroll.models.catalog import CatalogItem, SelectionPool
from reelroll.services.library import AggregationResult
from reelroll.services.plex.service import PlexBundle
from reelroll.services.result_card import build_result_card
from reelroll.services.selector import PlexLinks

router = APIRouter(tags=["library"])


def _strip_items(items: Sequence[CatalogItem], links: PlexLinks) -> list[dict]:
    return [{**item.model_dump(by_alias=True), "posterUrl": links.strip_poster_url(item)} for item in items]


async def _load_pool(bundle: PlexBundle, section_ids: list[int]) -> tuple[SelectionPool, AggregationResult]:
    result = await bundle.library.aggregate(section_ids)
    if result.is_empty and not result.any_succeeded and result.sections:
        logger.warning(
            f"[{redact_token(bundle.credentials.token)}] Every selected section failed: {result.failed_sections}"
        )
        raise TransportFailure("Could not load any of the selected sections")
    return result.pool(), result


@router.get("/items")
async def get_items(
    bundle: PlexBundle = Depends(get_bundle), section_ids: list[int] = Depends(get_section_ids)
) -> dict:
    """Every candidate in the selected sections, with strip-sized posters."""
    result = await bundle.library.aggregate(section_ids)
    return {"items": _strip_items(result.items, bundle.links()), "failedSections": result.failed_sections}


@router.get("/random")
async def get_random(
    bundle: PlexBundle = Depends(get_bundle), section_ids: list[int] = Depends(get_section_ids)
) -> dict:
    """One random item from the selected sections."""
    pool, result = await _load_pool(bundle, section_ids)
    selector = await bundle.selector()
    pick = selector.draw(pool)
    return {
        "pick": pick.model_dump(by_alias=True),
        "card": build_result_card(pick).model_dump(by_alias=True),
        "serverId": selector.links.machine_identifier,
        "failedSections": result.failed_sections,
    }


@router.get("/spin")
async def get_spin(
    bundle: PlexBundle = Depends(get_bundle), section_ids: list[int] = Depends(get_section_ids)
) -> dict:
    """
    The pool and a pick drawn from that same pool.

    ``pick.poolIndex`` indexes ``items``; the client animates the belt to it.
    """
    pool, result = await _load_pool(bundle, section_ids)
    selector = await bundle.selector()
    pick = selector.draw(pool)
    return {
        "items": _strip_items(pool.items, selector.links),
        "pick": pick.model_dump(by_alias=True),
        "card": build_result_card(pick).model_dump(by_alias=True),
        "failedSections": result.failed_sections,
    }
