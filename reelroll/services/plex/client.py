import httpx

from reelroll.core.base_client import BaseClient
from reelroll.core.config import settings
from reelroll.core.settings import PlexCredentials
from reelroll.core.version import __version__


class PlexClient(BaseClient):
    """
    Client for a single Plex Media Server.
    """

    def __init__(
        self,
        credentials: PlexCredentials,
        timeout: float = settings.SECTION_FETCH_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {
            "User-Agent": f"ReelRoll/{__version__}",
            "Accept": "application/json, application/xml;q=0.9",
            "X-Plex-Product": settings.APP_NAME,
            "X-Plex-Token": credentials.token,
        }
        super().__init__(base_url=credentials.base_url, timeout=timeout, headers=headers, transport=transport)
        self.credentials = credentials

    async def get_section_payload(self, section_id: int) -> str:
        """Raw listing of every item in a library section."""
        return await self.get_text(f"/library/sections/{section_id}/all")

    async def get_server_payload(self, timeout: float = settings.SERVER_INFO_TIMEOUT_SECONDS) -> str:
        """Raw root document of the server, which carries its machineIdentifier."""
        return await self.get_text("/", timeout=timeout)
