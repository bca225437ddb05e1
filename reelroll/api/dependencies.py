from collections.abc import AsyncIterator, Callable

from fastapi import Depends, Request
from pydantic import ValidationError

from reelroll.core.config import settings
from reelroll.core.exceptions import ConfigurationError
from reelroll.core.settings import PlexCredentials, filter_supported_sections, parse_section_ids
from reelroll.services.plex.service import PlexBundle

BundleFactory = Callable[[PlexCredentials], PlexBundle]


def get_bundle_factory() -> BundleFactory:
    return PlexBundle


def build_credentials(plex_ip: str | None, plex_token: str | None) -> PlexCredentials:
    if not plex_ip or not plex_token:
        raise ConfigurationError("Plex credentials required")
    try:
        return PlexCredentials(server_address=plex_ip, token=plex_token)
    except ValidationError as e:
        raise ConfigurationError("Plex credentials required") from e


def get_credentials(request: Request) -> PlexCredentials:
    """Credentials from the query string, then cookies, then X-Plex-* headers."""
    plex_ip = (
        request.query_params.get("plexIp") or request.cookies.get("plexIp") or request.headers.get("x-plex-ip")
    )
    plex_token = (
        request.query_params.get("plexToken")
        or request.cookies.get("plexToken")
        or request.headers.get("x-plex-token")
    )
    return build_credentials(plex_ip, plex_token)


def get_section_ids(request: Request) -> list[int]:
    """Selected sections from the query string or the selectedSections cookie, allow-listed."""
    requested = parse_section_ids(request.query_params.get("sections"))
    if requested is None:
        requested = parse_section_ids(request.cookies.get("selectedSections"))
    if requested is None:
        return sorted(settings.SUPPORTED_SECTION_IDS)
    selected = filter_supported_sections(requested)
    if not selected:
        raise ConfigurationError("At least one supported section must be selected")
    return selected


async def get_bundle(
    credentials: PlexCredentials = Depends(get_credentials),
    factory: BundleFactory = Depends(get_bundle_factory),
) -> AsyncIterator[PlexBundle]:
    bundle = factory(credentials)
    try:
        yield bundle
    finally:
        await bundle.close()
