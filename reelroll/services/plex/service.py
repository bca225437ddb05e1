import random

import httpx

from reelroll.core.settings import PlexCredentials
from reelroll.services.library import LibraryAggregator
from reelroll.services.plex.auth import PlexAuthService
from reelroll.services.plex.client import PlexClient
from reelroll.services.selector import PlexLinks, Selector


class PlexBundle:
    """
    Everything needed to talk to one Plex server with one set of credentials.
    """

    def __init__(
        self,
        credentials: PlexCredentials,
        transport: httpx.AsyncBaseTransport | None = None,
        rng: random.Random | None = None,
    ):
        self.credentials = credentials
        self._client = PlexClient(credentials, transport=transport)
        self._rng = rng

        self.auth = PlexAuthService(self._client)
        self.library = LibraryAggregator(self._client)

    async def selector(self) -> Selector:
        """A selector whose fallback links carry the server's machine identifier."""
        machine_id = await self.auth.get_machine_identifier()
        return Selector(PlexLinks(self.credentials, machine_id), rng=self._rng)

    def links(self) -> PlexLinks:
        return PlexLinks(self.credentials)

    async def close(self):
        """Close the underlying HTTP client."""
        await self._client.close()
