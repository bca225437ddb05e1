import json
from collections.abc import Iterable

import httpx
from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator

from reelroll.core.config import settings

MAX_PORT = 65535


class PlexCredentials(BaseModel):
    server_address: str = Field(description="Plex server host, host:port, or full URL")
    token: str = Field(description="Plex authentication token")

    @field_validator("server_address", "token")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        # Tokens pasted from XML attributes often keep their quotes
        if len(value) > 1 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1].strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @model_validator(mode="after")
    def _check_base_url(self) -> "PlexCredentials":
        # httpx parses the port as a plain int, so the range is checked here
        try:
            url = httpx.URL(self.base_url)
        except httpx.InvalidURL as e:
            raise ValueError(f"Invalid Plex server address: {e}") from e
        if not url.host:
            raise ValueError("Plex server address has no host")
        if url.port is not None and not 0 < url.port <= MAX_PORT:
            raise ValueError(f"Plex server port {url.port} is out of range")
        return self

    @property
    def base_url(self) -> str:
        address = self.server_address.rstrip("/")
        if "://" in address:
            return address
        host, _, port = address.rpartition(":")
        if host and port.isdigit():
            return f"{settings.PLEX_SCHEME}://{address}"
        return f"{settings.PLEX_SCHEME}://{address}:{settings.PLEX_PORT}"


def filter_supported_sections(section_ids: Iterable[int], supported: Iterable[int] | None = None) -> list[int]:
    """Keep only allow-listed section ids, deduplicated and sorted."""
    allowed = set(settings.SUPPORTED_SECTION_IDS if supported is None else supported)
    requested = set(section_ids)
    dropped = requested - allowed
    if dropped:
        logger.debug(f"Ignoring unsupported section ids: {sorted(dropped)}")
    return sorted(requested & allowed)


def parse_section_ids(raw: str | None) -> list[int] | None:
    """
    Parse a section selection from a query string ("1,2") or a cookie value ("[1, 2]").
    Returns None when nothing was supplied; non-numeric entries are ignored.
    """
    if raw is None or not raw.strip():
        return None
    raw = raw.strip()
    if raw.startswith("["):
        try:
            values = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug(f"Unreadable section selection: {raw!r}")
            return None
        if not isinstance(values, list):
            return None
    else:
        values = raw.split(",")

    section_ids = []
    for value in values:
        try:
            section_ids.append(int(str(value).strip()))
        except ValueError:
            continue
    return section_ids
