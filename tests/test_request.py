"""Tests for the REST helpers and item calls."""

from __future__ import annotations

import httpx
import pytest
from conftest import mock_client

from hubcommon.context import HubRequestOptions
from hubcommon.exceptions import ConfigurationError, NotFoundError, PlatformRequestError
from hubcommon.items import create_group, get_item_by_slug, lookup_site_id
from hubcommon.request import get_json, portal_request, post_json

PORTAL = "https://org.maps.arcgis.com/sharing/rest"


class TestGetJson:
    """Tests for GET requests."""

    @pytest.mark.asyncio
    async def test_params_are_cleaned(self) -> None:
        client, recorder = mock_client(lambda request: {"ok": True})
        async with client:
            result = await get_json(
                "https://example.com/x",
                {"a": None, "b": ["x", "y"], "c": True, "d": 3},
                client=client,
            )
        assert result == {"ok": True}
        params = recorder.requests[0].url.params
        assert "a" not in params
        assert params["b"] == "x,y"
        assert params["c"] == "true"
        assert params["d"] == "3"

    @pytest.mark.asyncio
    async def test_empty_body_is_empty_dict(self) -> None:
        client, _ = mock_client(lambda request: httpx.Response(200, content=b""))
        async with client:
            assert await get_json("https://example.com/x", client=client) == {}

    @pytest.mark.asyncio
    async def test_arcgis_error_payload(self) -> None:
        client, _ = mock_client(lambda request: {"error": {"code": 498, "message": "Invalid token."}})
        async with client:
            with pytest.raises(PlatformRequestError) as exc_info:
                await get_json("https://example.com/x", client=client)
        assert exc_info.value.status == 498
        assert exc_info.value.message == "498: Invalid token."
        assert exc_info.value.url == "https://example.com/x"

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        client, _ = mock_client(lambda request: httpx.Response(503))
        async with client:
            with pytest.raises(PlatformRequestError, match="HTTP 503") as exc_info:
                await get_json("https://example.com/x", client=client)
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        client, _ = mock_client(lambda request: httpx.Response(200, content=b"<html>"))
        async with client:
            with pytest.raises(PlatformRequestError, match="Invalid JSON"):
                await get_json("https://example.com/x", client=client)

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> dict:
            raise httpx.ConnectError("refused", request=request)

        client, _ = mock_client(handler)
        async with client:
            with pytest.raises(PlatformRequestError) as exc_info:
                await get_json("https://example.com/x", client=client)
        assert isinstance(exc_info.value.root_cause, httpx.ConnectError)


class TestPortalRequest:
    """Tests for sharing API calls."""

    @pytest.mark.asyncio
    async def test_adds_format_and_token(self) -> None:
        client, recorder = mock_client(lambda request: {})
        async with client:
            await portal_request("content/items/abc", HubRequestOptions(portal=PORTAL, token="TOK", http_client=client))
        request = recorder.requests[0]
        assert str(request.url).startswith(f"{PORTAL}/content/items/abc?")
        assert request.url.params["f"] == "json"
        assert request.url.params["token"] == "TOK"

    @pytest.mark.asyncio
    async def test_post_sends_form(self) -> None:
        client, recorder = mock_client(lambda request: {"success": True})
        async with client:
            await portal_request(
                "community/createGroup",
                HubRequestOptions(portal=PORTAL, http_client=client),
                {"title": "Team", "tags": ["a", "b"]},
                method="POST",
            )
        assert recorder.requests[0].method == "POST"
        form = recorder.form()
        assert form == {"f": "json", "title": "Team", "tags": "a,b"}

    @pytest.mark.asyncio
    async def test_requires_portal(self) -> None:
        with pytest.raises(ConfigurationError):
            await portal_request("search", None)

    @pytest.mark.asyncio
    async def test_post_json_params(self) -> None:
        client, recorder = mock_client(lambda request: {})
        async with client:
            await post_json("https://example.com/x", {"a": 1}, params={"q": "z"}, client=client)
        assert recorder.requests[0].url.params["q"] == "z"
        assert recorder.form() == {"a": "1"}


class TestItems:
    """Tests for item and group helpers."""

    @pytest.mark.asyncio
    async def test_get_item_by_slug(self) -> None:
        def handler(request: httpx.Request) -> dict:
            if request.url.path.endswith("/search"):
                return {"results": [{"id": "abc"}]}
            return {"id": "abc", "title": "Found"}

        client, recorder = mock_client(handler)
        async with client:
            item = await get_item_by_slug("water-data", HubRequestOptions(portal=PORTAL, http_client=client))
        assert item["title"] == "Found"
        assert recorder.requests[0].url.params["filter"] == 'typekeywords:"slug|water-data"'
        assert recorder.requests[1].url.path.endswith("/content/items/abc")

    @pytest.mark.asyncio
    async def test_get_item_by_unknown_slug(self) -> None:
        client, recorder = mock_client(lambda request: {"results": []})
        async with client:
            assert await get_item_by_slug("nope", HubRequestOptions(portal=PORTAL, http_client=client)) is None
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_lookup_site_id_online(self) -> None:
        client, recorder = mock_client(lambda request: {"siteId": "s1"})
        options = HubRequestOptions(portal=PORTAL, hub_api_url="https://hub.arcgis.com", http_client=client)
        async with client:
            assert await lookup_site_id("https://water.hub.arcgis.com/", options) == "s1"
        assert str(recorder.requests[0].url) == "https://hub.arcgis.com/api/v3/domains/water.hub.arcgis.com"

    @pytest.mark.asyncio
    async def test_lookup_site_id_enterprise(self) -> None:
        client, recorder = mock_client(lambda request: {"results": [{"id": "s2"}]})
        options = HubRequestOptions(portal="https://gis.city.gov/portal/sharing/rest", is_portal=True, http_client=client)
        async with client:
            assert await lookup_site_id("https://gis.city.gov/portal/apps/sites/#/water", options) == "s2"
        assert recorder.requests[0].url.params["q"] == 'typekeywords:"hubsubdomain|gis.city.gov"'

    @pytest.mark.asyncio
    async def test_lookup_site_id_missing(self) -> None:
        client, _ = mock_client(lambda request: {})
        options = HubRequestOptions(portal=PORTAL, hub_api_url="https://hub.arcgis.com", http_client=client)
        async with client:
            with pytest.raises(NotFoundError, match="No site found for water.hub.arcgis.com"):
                await lookup_site_id("https://water.hub.arcgis.com", options)

    @pytest.mark.asyncio
    async def test_lookup_site_id_needs_hub_api(self) -> None:
        with pytest.raises(ConfigurationError):
            await lookup_site_id("https://water.hub.arcgis.com", HubRequestOptions(portal=PORTAL))

    @pytest.mark.asyncio
    async def test_create_group_returns_group(self) -> None:
        client, recorder = mock_client(lambda request: {"success": True, "group": {"id": "g1", "title": "Team"}})
        async with client:
            group = await create_group(
                {"title": "Team", "access": "org", "isInvitationOnly": False},
                HubRequestOptions(portal=PORTAL, http_client=client),
            )
        assert group["id"] == "g1"
        form = recorder.form()
        assert form["isInvitationOnly"] == "false"
        assert "snippet" not in form
