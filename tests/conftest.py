"""
Shared fixtures.

Plex is never contacted: catalog traffic goes through ``httpx.MockTransport``
and the API is exercised in-process through ``httpx.ASGITransport``.
"""

import json
import random
from collections.abc import Callable

import httpx
import pytest

from reelroll.core.settings import PlexCredentials
from reelroll.models.catalog import CatalogItem, SelectionPool
from reelroll.services.plex import auth as plex_auth
from reelroll.services.selector import PlexLinks, Selector

MOVIES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<MediaContainer size="2" librarySectionID="1" librarySectionTitle="Movies">
  <Video ratingKey="101" key="/library/metadata/101" type="movie" title="Arrival" year="2016"
         summary="A linguist works with the military." contentRating="PG-13" rating="9.4"
         audienceRating="8.2" duration="6960000" thumb="/library/metadata/101/thumb/1700000000"
         art="/library/metadata/101/art/1700000000">
    <Media id="1" duration="6960000"><Part id="1" file="/movies/arrival.mkv"/></Media>
    <Genre tag="Drama"/>
    <Genre tag="Science Fiction"/>
    <Director tag="Denis Villeneuve"/>
    <Role tag="Amy Adams"/>
    <Role tag="Jeremy Renner"/>
  </Video>
  <Video ratingKey="102" key="/library/metadata/102" type="movie" title="Heat" year="1995"
         rating="8.7" duration="10200000" art="/library/metadata/102/art/1">
    <Director tag="Michael Mann"/>
  </Video>
</MediaContainer>
"""

SHOWS_JSON = json.dumps(
    {
        "MediaContainer": {
            "size": 2,
            "librarySectionID": 2,
            "Metadata": [
                {
                    "ratingKey": "201",
                    "key": "/library/metadata/201/children",
                    "type": "show",
                    "title": "The Wire",
                    "year": 2002,
                    "leafCount": 60,
                    "contentRating": "TV-MA",
                    "audienceRating": 9.6,
                    "thumb": "/library/metadata/201/thumb/1",
                    "Genre": [{"tag": "Crime"}, {"tag": "Drama"}],
                    "Role": [{"tag": "Dominic West"}, {"tag": "Idris Elba"}],
                },
                {
                    "ratingKey": "202",
                    "key": "/library/metadata/202/children",
                    "type": "show",
                    "title": "Severance",
                    "year": 2022,
                    "leafCount": 19,
                    "Genre": "Thriller",
                    "Director": {"tag": "Ben Stiller"},
                    "grandparentThumb": "/library/metadata/202/thumb/2",
                },
            ],
        }
    }
)

SERVER_XML = '<MediaContainer size="1" machineIdentifier="abc123def" version="1.40.0"><Directory key="butler"/></MediaContainer>'


def make_item(index: int, **overrides) -> CatalogItem:
    data = {
        "id": f"/library/metadata/{index}",
        "title": f"Item {index}",
        "poster_source_path": f"/library/metadata/{index}/thumb/1",
    }
    data.update(overrides)
    return CatalogItem(**data)


def make_pool(size: int) -> SelectionPool:
    return SelectionPool(items=tuple(make_item(index + 1) for index in range(size)))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_identity_cache():
    plex_auth._identity_cache.clear()
    yield
    plex_auth._identity_cache.clear()


@pytest.fixture
def credentials() -> PlexCredentials:
    return PlexCredentials(server_address="192.168.1.20", token="plex-token-secret")


@pytest.fixture
def selector(credentials: PlexCredentials) -> Selector:
    return Selector(PlexLinks(credentials, "abc123def"), rng=random.Random(7))


@pytest.fixture
def plex_transport() -> Callable[..., httpx.MockTransport]:
    """
    Build a MockTransport serving canned Plex responses.

    ``routes`` maps a path to a body string, an int status code, or an exception to raise.
    """

    def build(routes: dict, seen: list | None = None) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if seen is not None:
                seen.append(request)
            route = routes.get(request.url.path)
            if route is None:
                return httpx.Response(404, text="Not Found")
            if isinstance(route, Exception):
                raise route
            if isinstance(route, int):
                return httpx.Response(route, text="")
            return httpx.Response(200, text=route)

        return httpx.MockTransport(handler)

    return build
