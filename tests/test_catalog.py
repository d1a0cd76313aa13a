"""Tests for Catalog and Collection."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from conftest import make_context, mock_client

from hubcommon.exceptions import HubError
from hubcommon.search import (
    Catalog,
    Collection,
    Filter,
    HubSearchOptions,
    HubSearchResponse,
    Query,
    upgrade_catalog_schema,
)

SITE_ID = "bc3d8a7c4f8e4a0f9b9d6e3a2c1b0a99"


def _catalog_json() -> dict:
    return {
        "schemaVersion": 1,
        "title": "Water Catalog",
        "scopes": {
            "item": {"targetEntity": "item", "filters": [{"predicates": [{"access": "public"}]}]},
            "group": {"targetEntity": "group", "filters": [{"predicates": [{"owner": "casey"}]}]},
        },
        "collections": [
            {
                "key": "datasets",
                "label": "Datasets",
                "targetEntity": "item",
                "scope": {"targetEntity": "item", "filters": [{"predicates": [{"type": "Feature Service"}]}]},
                "include": ["server.layers AS layers"],
                "sortField": "modified",
                "sortDirection": "desc",
            },
            {
                "key": "teams",
                "targetEntity": "group",
                "scope": {"targetEntity": "group", "filters": []},
            },
        ],
    }


def _search_patch(total: int = 1):
    return patch("hubcommon.search.catalog.hub_search", AsyncMock(return_value=HubSearchResponse(total=total)))


class TestCatalogBasics:
    """Tests for construction and accessors."""

    def test_round_trip(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        copy = Catalog.from_json(catalog.to_json())
        assert copy.scopes == catalog.scopes
        assert copy.collections == catalog.collections
        assert copy.to_json() == catalog.to_json()

    def test_properties(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        assert catalog.schema_version == 1
        assert catalog.title == "Water Catalog"
        assert catalog.available_scopes == ["item", "group"]
        assert catalog.collection_names == ["datasets", "teams"]

    def test_title_setter(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        catalog.title = "Renamed"
        assert catalog.to_json()["title"] == "Renamed"

    def test_scope_is_a_copy(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        scope = catalog.get_scope("item")
        scope.filters.append(Filter(predicates=[{"owner": "x"}]))
        assert len(catalog.get_scope("item").filters) == 1
        assert catalog.get_scope("user") is None

    def test_set_scope(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        catalog.set_scope("user", Query(target_entity="user", filters=[Filter(predicates=[{"orgid": "BRX"}])]))
        assert "user" in catalog.available_scopes


class TestSchemaUpgrade:
    """Tests for legacy catalogs."""

    def test_groups_become_item_scope(self) -> None:
        upgraded = upgrade_catalog_schema({"groups": ["g1", "g2"]})
        assert upgraded["schemaVersion"] == 1
        assert upgraded["title"] == "Default Catalog"
        assert upgraded["scopes"]["item"]["filters"] == [{"predicates": [{"group": ["g1", "g2"]}]}]

    def test_single_group_string(self) -> None:
        upgraded = upgrade_catalog_schema({"groups": "g1"})
        assert upgraded["scopes"]["item"]["filters"] == [{"predicates": [{"group": ["g1"]}]}]

    def test_current_schema_untouched(self) -> None:
        original = _catalog_json()
        assert upgrade_catalog_schema(original) == original

    def test_legacy_from_json(self) -> None:
        catalog = Catalog.from_json({"groups": ["g1"]})
        assert catalog.available_scopes == ["item"]
        assert catalog.collection_names == []


class TestGetCollection:
    """Tests for collection lookup."""

    def test_scope_filter_goes_last(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        collection = catalog.get_collection("datasets")
        assert [f.predicates for f in collection.scope.filters] == [
            [{"type": "Feature Service"}],
            [{"access": "public"}],
        ]

    def test_group_collection_uses_group_scope(self) -> None:
        collection = Catalog.from_json(_catalog_json()).get_collection("teams")
        assert collection.target_entity == "group"
        assert [f.predicates for f in collection.scope.filters] == [[{"owner": "casey"}]]

    def test_missing_collection(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        with pytest.raises(HubError) as exc_info:
            catalog.get_collection("maps")
        assert exc_info.value.message == 'Collection "maps" is not present in the Catalog'
        assert exc_info.value.operation == "getCollection"

    def test_catalog_not_modified(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        before = catalog.to_json()
        catalog.get_collection("datasets")
        assert catalog.to_json() == before


class TestCatalogSearch:
    """Tests for searches run through a catalog."""

    @pytest.mark.asyncio
    async def test_search_items_applies_scope(self, authd_context) -> None:
        catalog = Catalog.from_json(_catalog_json(), authd_context)
        with _search_patch() as fake:
            response = await catalog.search_items("water")
        assert response.total == 1
        query, options = fake.await_args.args
        assert query.target_entity == "item"
        assert [f.predicates for f in query.filters] == [[{"term": "water"}], [{"access": "public"}]]
        assert options.request_options.token == "FAKE-TOKEN"
        assert options.request_options.hub_api_url == "https://hub.arcgis.com"

    @pytest.mark.asyncio
    async def test_missing_scope_returns_empty(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        with _search_patch() as fake:
            response = await catalog.search_users("casey")
        fake.assert_not_called()
        assert response.total == 0
        assert response.results == []
        assert response.messages == [
            {
                "code": "missingScope",
                "message": "Catalog does not have a scope for user",
                "data": {"scope": "user"},
            }
        ]

    @pytest.mark.asyncio
    async def test_search_groups(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        with _search_patch() as fake:
            await catalog.search_groups(Query(filters=[Filter(predicates=[{"term": "team"}])]))
        query, _ = fake.await_args.args
        assert query.target_entity == "group"

    @pytest.mark.asyncio
    async def test_search_scopes(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        with _search_patch(total=2) as fake:
            responses = await catalog.search_scopes("water")
        assert set(responses) == {"item", "group"}
        assert fake.await_count == 2
        assert all(r.total == 2 for r in responses.values())

    @pytest.mark.asyncio
    async def test_search_collections(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        fake = AsyncMock(return_value=HubSearchResponse(total=4))
        with patch("hubcommon.search.collection.hub_search", fake):
            responses = await catalog.search_collections("water")
        assert set(responses) == {"datasets", "teams"}
        targets = sorted(call.args[0].target_entity for call in fake.await_args_list)
        assert targets == ["group", "item"]
        for call in fake.await_args_list:
            assert call.args[0].filters[0].predicates == [{"term": "water"}]

    @pytest.mark.asyncio
    async def test_search_collections_fails_as_a_whole(self) -> None:
        catalog = Catalog.from_json(_catalog_json())
        fake = AsyncMock(side_effect=HubError("hubSearch", "boom"))
        with patch("hubcommon.search.collection.hub_search", fake):
            with pytest.raises(HubError, match="boom"):
                await catalog.search_collections("water")


class TestCollection:
    """Tests for Collection.search."""

    @pytest.mark.asyncio
    async def test_defaults_from_definition(self, authd_context) -> None:
        collection = Catalog.from_json(_catalog_json(), authd_context).get_collection("datasets")
        fake = AsyncMock(return_value=HubSearchResponse())
        with patch("hubcommon.search.collection.hub_search", fake):
            await collection.search("water")
        query, options = fake.await_args.args
        assert [f.predicates for f in query.filters] == [
            [{"term": "water"}],
            [{"type": "Feature Service"}],
            [{"access": "public"}],
        ]
        assert options.include == ["server.layers AS layers"]
        assert options.sort_field == "modified"
        assert options.sort_order == "desc"
        assert options.request_options.token == "FAKE-TOKEN"

    @pytest.mark.asyncio
    async def test_explicit_options_win(self) -> None:
        collection = Collection.from_json(_catalog_json()["collections"][0])
        fake = AsyncMock(return_value=HubSearchResponse())
        with patch("hubcommon.search.collection.hub_search", fake):
            await collection.search("water", HubSearchOptions(include=["id"], sort_field="title", sort_order="asc"))
        _, options = fake.await_args.args
        assert options.include == ["id"]
        assert options.sort_field == "title"
        assert options.sort_order == "asc"

    def test_round_trip(self) -> None:
        definition = _catalog_json()["collections"][0]
        assert Collection.from_json(definition).to_json() == definition


class TestCatalogInit:
    """Tests for loading a catalog from a site."""

    @pytest.mark.asyncio
    async def test_init_by_site_id(self) -> None:
        def handler(request: httpx.Request) -> dict:
            assert request.url.path.endswith(f"/content/items/{SITE_ID}/data")
            return {"catalog": _catalog_json()}

        client, _ = mock_client(handler)
        async with client:
            catalog = await Catalog.init(SITE_ID, make_context(http_client=client))
        assert catalog.title == "Water Catalog"

    @pytest.mark.asyncio
    async def test_init_by_url(self) -> None:
        def handler(request: httpx.Request) -> dict:
            if "/api/v3/domains/" in request.url.path:
                assert request.url.path.endswith("/api/v3/domains/water.hub.arcgis.com")
                return {"siteId": SITE_ID}
            return {"catalog": {"groups": ["g1"]}}

        client, recorder = mock_client(handler)
        async with client:
            catalog = await Catalog.init("https://water.hub.arcgis.com", make_context(http_client=client))
        assert len(recorder.requests) == 2
        assert catalog.title == "Default Catalog"
