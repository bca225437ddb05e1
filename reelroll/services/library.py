import asyncio
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx
from loguru import logger

from reelroll.core.config import settings
from reelroll.core.exceptions import EmptyPoolError, PayloadFormatError, TransportFailure
from reelroll.core.settings import filter_supported_sections
from reelroll.models.catalog import CatalogItem, SectionFetchResult, SelectionPool
from reelroll.services.plex.client import PlexClient
from reelroll.services.plex.normalizer import normalize


@dataclass
class AggregationResult:
    """Merged items from every requested section plus the per-section outcomes."""

    items: tuple[CatalogItem, ...] = ()
    sections: dict[int, SectionFetchResult] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def any_succeeded(self) -> bool:
        return any(result.is_success for result in self.sections.values())

    @property
    def failed_sections(self) -> dict[int, str]:
        return {
            section_id: result.error_message or "unknown error"
            for section_id, result in self.sections.items()
            if not result.is_success
        }

    def pool(self) -> SelectionPool:
        if self.is_empty:
            raise EmptyPoolError()
        return SelectionPool(items=self.items)


class LibraryAggregator:
    """
    Fetches the selected library sections concurrently and merges them into one pool.
    A failing section contributes nothing; it never takes the others down with it.
    """

    def __init__(
        self,
        client: PlexClient,
        supported_sections: Iterable[int] | None = None,
        timeout: float = settings.SECTION_FETCH_TIMEOUT_SECONDS,
    ):
        self.client = client
        self.supported_sections = set(
            settings.SUPPORTED_SECTION_IDS if supported_sections is None else supported_sections
        )
        self.timeout = timeout

    async def _load_section(self, section_id: int) -> list[CatalogItem]:
        try:
            payload = await self.client.get_section_payload(section_id)
        except httpx.HTTPError as e:
            raise TransportFailure(f"{type(e).__name__}: {e}") from e
        return normalize(payload, section_id)

    async def fetch_section(self, section_id: int) -> SectionFetchResult:
        start = time.monotonic()
        try:
            items = await asyncio.wait_for(self._load_section(section_id), timeout=self.timeout)
        except asyncio.TimeoutError:
            elapsed = int((time.monotonic() - start) * 1000)
            logger.warning(f"Section {section_id} timed out after {elapsed}ms")
            return SectionFetchResult.failed(section_id, f"Timed out after {self.timeout}s", elapsed)
        except (TransportFailure, PayloadFormatError) as e:
            elapsed = int((time.monotonic() - start) * 1000)
            logger.warning(f"Error fetching section {section_id}: {e.message}")
            return SectionFetchResult.failed(section_id, e.message, elapsed)

        elapsed = int((time.monotonic() - start) * 1000)
        if not items:
            logger.info(f"Section {section_id} returned no items")
        return SectionFetchResult.success(section_id, items, elapsed)

    async def aggregate(self, section_ids: Iterable[int]) -> AggregationResult:
        selected = filter_supported_sections(section_ids, self.supported_sections)
        if not selected:
            return AggregationResult()

        results = await asyncio.gather(*[self.fetch_section(section_id) for section_id in selected])

        merged: dict[str, CatalogItem] = {}
        duplicates = 0
        for result in results:
            for item in result.items:
                if item.id in merged:
                    duplicates += 1
                    continue
                merged[item.id] = item

        aggregation = AggregationResult(
            items=tuple(merged.values()),
            sections={result.section_id: result for result in results},
        )
        logger.info(
            f"Library: {len(aggregation.items)} items from sections {selected}"
            + (f", {duplicates} duplicates dropped" if duplicates else "")
            + (f", failed sections: {sorted(aggregation.failed_sections)}" if aggregation.failed_sections else "")
        )
        return aggregation

    async def section_counts(self, section_ids: Iterable[int] | None = None) -> dict[int, dict]:
        """Item count per section, or the error that prevented counting it."""
        selected = filter_supported_sections(
            self.supported_sections if section_ids is None else section_ids, self.supported_sections
        )
        results = await asyncio.gather(*[self.fetch_section(section_id) for section_id in selected])
        counts: dict[int, dict] = {}
        for result in results:
            if result.is_success:
                counts[result.section_id] = {"count": len(result.items)}
            else:
                counts[result.section_id] = {"count": 0, "error": result.error_message}
        return counts
