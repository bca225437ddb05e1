import random
from urllib.parse import quote, urlencode

from loguru import logger

from reelroll.core.config import settings
from reelroll.core.exceptions import EmptyPoolError
from reelroll.core.settings import PlexCredentials
from reelroll.models.catalog import CatalogItem, Pick, SelectionPool


class PlexLinks:
    """Builds the URLs a client needs to show and open a Plex item."""

    def __init__(self, credentials: PlexCredentials, machine_identifier: str | None = None):
        self.base_url = credentials.base_url
        self.token = credentials.token
        self.machine_identifier = machine_identifier

    def direct_play_url(self, item: CatalogItem) -> str:
        return f"{self.base_url}/library/metadata/{item.rating_key}"

    def fallback_url(self, item: CatalogItem) -> str:
        key = quote(f"/library/metadata/{item.rating_key}", safe="")
        server = f"server/{self.machine_identifier}" if self.machine_identifier else "server"
        return f"{self.base_url}/web/index.html#!/{server}/details?key={key}"

    def poster_url(self, item: CatalogItem, width: int, height: int) -> str | None:
        if not item.poster_source_path:
            return None
        params = {
            "width": width,
            "height": height,
            "url": item.poster_source_path,
            "X-Plex-Token": self.token,
        }
        return f"{self.base_url}/photo/:/transcode?{urlencode(params)}"

    def strip_poster_url(self, item: CatalogItem) -> str | None:
        return self.poster_url(item, settings.STRIP_POSTER_WIDTH, settings.STRIP_POSTER_HEIGHT)

    def reveal_poster_url(self, item: CatalogItem) -> str | None:
        return self.poster_url(item, settings.REVEAL_POSTER_WIDTH, settings.REVEAL_POSTER_HEIGHT)


class Selector:
    """
    Uniform random draw over a selection pool.

    Every index is equally likely on every call; nothing is weighted or
    excluded, so the same item may come up on consecutive spins.
    """

    def __init__(self, links: PlexLinks, rng: random.Random | None = None):
        self.links = links
        self.rng = rng or random.Random()

    def pick_at(self, pool: SelectionPool, index: int, poster_size: tuple[int, int] | None = None) -> Pick:
        item = pool[index]
        width, height = poster_size or (settings.REVEAL_POSTER_WIDTH, settings.REVEAL_POSTER_HEIGHT)
        return Pick(
            item=item,
            pool_index=index,
            direct_play_url=self.links.direct_play_url(item),
            fallback_url=self.links.fallback_url(item),
            poster_url=self.links.poster_url(item, width, height),
        )

    def draw(self, pool: SelectionPool | None, poster_size: tuple[int, int] | None = None) -> Pick:
        if pool is None or len(pool) == 0:
            raise EmptyPoolError()
        index = self.rng.randrange(len(pool))
        pick = self.pick_at(pool, index, poster_size)
        logger.debug(f"Drew pool index {index}/{len(pool)}: {pick.item.title!r}")
        return pick
