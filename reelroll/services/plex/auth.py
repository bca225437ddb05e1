import httpx
from cachetools import TTLCache
from loguru import logger

from reelroll.core.config import settings
from reelroll.core.exceptions import CatalogError, PayloadFormatError, ServerUnreachableError, UnauthorizedError
from reelroll.core.security import redact_token
from reelroll.services.plex.client import PlexClient
from reelroll.services.plex.normalizer import parse_server_identity

# base_url -> machineIdentifier
_identity_cache: TTLCache = TTLCache(maxsize=256, ttl=settings.SERVER_IDENTITY_TTL_SECONDS)


class PlexAuthService:
    """
    Connectivity checks and server identity lookups for a Plex server.
    """

    def __init__(self, client: PlexClient):
        self.client = client

    async def check_connection(self) -> str | None:
        """
        Verify the server is reachable and accepts the token.
        Returns the server machineIdentifier (None if the server does not report one).
        """
        token = redact_token(self.client.credentials.token)
        try:
            payload = await self.client.get_server_payload()
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            logger.warning(f"[{token}] Plex server {self.client.base_url} unreachable: {type(e).__name__}")
            raise ServerUnreachableError() from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                raise UnauthorizedError() from e
            raise CatalogError() from e
        except httpx.HTTPError as e:
            raise CatalogError() from e

        try:
            machine_id = parse_server_identity(payload)
        except PayloadFormatError as e:
            raise CatalogError(f"Unexpected response from Plex server: {e.message}") from e

        if machine_id:
            _identity_cache[self.client.base_url] = machine_id
        logger.info(f"[{token}] Validated Plex server {self.client.base_url}")
        return machine_id

    async def get_machine_identifier(self) -> str | None:
        """Cached server identity; None when the lookup fails, since it only decorates fallback links."""
        if cached := _identity_cache.get(self.client.base_url):
            return cached
        try:
            payload = await self.client.get_server_payload()
            machine_id = parse_server_identity(payload)
        except (httpx.HTTPError, PayloadFormatError) as e:
            logger.warning(f"Error fetching server info from {self.client.base_url}: {e}")
            return None
        if machine_id:
            _identity_cache[self.client.base_url] = machine_id
        return machine_id
