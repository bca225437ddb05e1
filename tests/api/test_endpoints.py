"""HTTP API tests, run in-process against a mocked Plex server."""

import random

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import MOVIES_XML, SERVER_XML, SHOWS_JSON
from reelroll.api.dependencies import get_bundle_factory
from reelroll.core.app import app
from reelroll.core.version import __version__
from reelroll.services.plex.service import PlexBundle

pytestmark = pytest.mark.anyio

CREDS = {"plexIp": "192.168.1.20", "plexToken": "plex-token-secret"}


@pytest.fixture
def plex_routes() -> dict:
    return {
        "/": SERVER_XML,
        "/library/sections/1/all": MOVIES_XML,
        "/library/sections/2/all": SHOWS_JSON,
    }


@pytest.fixture
async def client(plex_routes, plex_transport):
    transport = plex_transport(plex_routes)
    app.dependency_overrides[get_bundle_factory] = lambda: (
        lambda credentials: PlexBundle(credentials, transport=transport, rng=random.Random(1))
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def test_health(client):
    response = await client.get("/health")
    assert response.json()["status"] == "ok"
    assert response.json()["version"] == __version__


class TestValidate:
    async def test_valid_credentials(self, client):
        response = await client.post("/api/validate", json=CREDS)
        assert response.status_code == 200
        assert response.json()["valid"] is True
        assert response.json()["serverId"] == "abc123def"

    async def test_missing_fields(self, client):
        response = await client.post("/api/validate", json={"plexIp": "10.0.0.1"})
        assert response.status_code == 400

    async def test_out_of_range_port_is_a_configuration_error(self, client):
        response = await client.post("/api/validate", json={"plexIp": "10.0.0.1:99999", "plexToken": "t"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"

    async def test_unauthorized(self, client, plex_routes):
        plex_routes["/"] = 401
        response = await client.post("/api/validate", json=CREDS)
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_unreachable(self, client, plex_routes):
        plex_routes["/"] = httpx.ConnectError("connection refused")
        response = await client.post("/api/validate", json=CREDS)
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "SERVER_UNREACHABLE"

    async def test_other_failure(self, client, plex_routes):
        plex_routes["/"] = 500
        response = await client.post("/api/validate", json=CREDS)
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "CATALOG_ERROR"


class TestLibrary:
    async def test_credentials_required(self, client):
        response = await client.get("/api/items")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"

    async def test_sections_counts(self, client):
        response = await client.get("/api/sections", params=CREDS)
        assert response.json() == {"1": {"count": 2}, "2": {"count": 2}}

    async def test_items_carry_strip_posters(self, client):
        response = await client.get("/api/items", params={**CREDS, "sections": "1"})
        items = response.json()["items"]
        assert [item["title"] for item in items] == ["Arrival", "Heat"]
        assert "width=300" in items[0]["posterUrl"]
        assert items[0]["posterSourcePath"] == "/library/metadata/101/thumb/1700000000"

    async def test_credentials_from_headers_and_sections_from_cookie(self, client):
        client.cookies.set("selectedSections", "[2]")
        response = await client.get(
            "/api/items", headers={"X-Plex-Ip": CREDS["plexIp"], "X-Plex-Token": CREDS["plexToken"]}
        )
        client.cookies.clear()
        assert [item["title"] for item in response.json()["items"]] == ["The Wire", "Severance"]

    async def test_only_unsupported_sections_is_rejected(self, client):
        response = await client.get("/api/items", params={**CREDS, "sections": "5,9"})
        assert response.status_code == 400

    async def test_bad_server_address_is_rejected_before_fetching(self, client):
        response = await client.get("/api/spin", params={"plexIp": "10.0.0.1:99999", "plexToken": "t"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"

    async def test_random_returns_pick_and_card(self, client):
        response = await client.get("/api/random", params=CREDS)
        body = response.json()
        assert response.status_code == 200
        assert 0 <= body["pick"]["poolIndex"] < 4
        assert body["card"]["title"] == body["pick"]["item"]["title"]
        assert "server/abc123def" in body["pick"]["fallbackUrl"]

    async def test_spin_pick_indexes_returned_items(self, client):
        response = await client.get("/api/spin", params=CREDS)
        body = response.json()
        index = body["pick"]["poolIndex"]
        assert body["items"][index]["id"] == body["pick"]["item"]["id"]

    async def test_partial_failure_is_reported(self, client, plex_routes):
        plex_routes["/library/sections/1/all"] = httpx.ConnectTimeout("timed out")
        response = await client.get("/api/spin", params=CREDS)
        body = response.json()
        assert response.status_code == 200
        assert len(body["items"]) == 2
        assert "1" in body["failedSections"]

    async def test_empty_library(self, client, plex_routes):
        plex_routes["/library/sections/1/all"] = '<MediaContainer size="0"/>'
        plex_routes["/library/sections/2/all"] = '<MediaContainer size="0"/>'
        response = await client.get("/api/random", params=CREDS)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "EMPTY_POOL"

    async def test_all_sections_down(self, client, plex_routes):
        plex_routes["/library/sections/1/all"] = httpx.ConnectError("refused")
        plex_routes["/library/sections/2/all"] = httpx.ConnectError("refused")
        response = await client.get("/api/random", params=CREDS)
        assert response.status_code == 502
        assert response.json()["error"]["code"] == "TRANSPORT_FAILURE"
