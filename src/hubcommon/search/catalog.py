"""Catalogs: per-entity scopes plus named collections.

A catalog narrows every search it runs with the scope for the target entity
type. Collections returned by :meth:`Catalog.get_collection` carry their own
filters followed by the catalog scope's filters.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Mapping, Optional, Union

from ..context import ArcGISContext
from ..exceptions import HubError
from ..items import fetch_item_data, lookup_site_id
from ..objects import is_guid
from .collection import Collection
from .hub_search import hub_search
from .query import apply_scope, build_term_query, coerce_query
from .types import CatalogDefinition, HubSearchOptions, HubSearchResponse, Query

logger = logging.getLogger(__name__)

CATALOG_SCHEMA_VERSION = 1

_SCOPE_MESSAGES = {
    "item": "Catalog does not have a scope for items",
    "group": "Catalog does not have a scope for groups",
    "user": "Catalog does not have a scope for user",
}


def upgrade_catalog_schema(json: Mapping[str, Any]) -> dict[str, Any]:
    """Return a schema 1 copy of a catalog document.

    Legacy (schema 0) catalogs only list ``groups``; those become an item
    scope filtering on the groups.
    """
    catalog = copy.deepcopy(dict(json))
    if catalog.get("schemaVersion", 0) >= CATALOG_SCHEMA_VERSION:
        return catalog

    upgraded: dict[str, Any] = {
        "schemaVersion": CATALOG_SCHEMA_VERSION,
        "title": catalog.get("title") or "Default Catalog",
        "scopes": {"item": {"targetEntity": "item", "filters": []}},
        "collections": [],
    }
    groups = catalog.get("groups")
    if groups:
        groups = groups if isinstance(groups, list) else [groups]
        upgraded["scopes"]["item"]["filters"] = [{"predicates": [{"group": groups}]}]
    logger.debug("Upgraded catalog schema %s -> %s", catalog.get("schemaVersion", 0), CATALOG_SCHEMA_VERSION)
    return upgraded


async def fetch_catalog(identifier: str, context: ArcGISContext) -> dict[str, Any]:
    """Fetch the catalog stored on a site, by site item id or site url."""
    request_options = context.hub_request_options
    site_id = identifier if is_guid(identifier) else await lookup_site_id(identifier, request_options)
    data = await fetch_item_data(site_id, request_options)
    return data.get("catalog") or {}


class Catalog:
    """Wraps a catalog document and searches it with the context's credentials.

    Example::

        catalog = Catalog.from_json(site_data["catalog"], context)
        datasets = catalog.get_collection("dataset")
        response = await datasets.search("water")
    """

    def __init__(self, definition: CatalogDefinition, context: Optional[ArcGISContext] = None) -> None:
        self._definition = definition
        self._context = context or ArcGISContext()

    @classmethod
    async def init(cls, identifier: str, context: Optional[ArcGISContext] = None) -> "Catalog":
        """Create a catalog from a site item id or site url."""
        context = context or ArcGISContext()
        fetched = await fetch_catalog(identifier, context)
        return cls.from_json(fetched, context)

    @classmethod
    def from_json(cls, json: Mapping[str, Any], context: Optional[ArcGISContext] = None) -> "Catalog":
        return cls(CatalogDefinition.model_validate(upgrade_catalog_schema(json)), context)

    def to_json(self) -> dict[str, Any]:
        return self._definition.model_dump(by_alias=True, exclude_none=True)

    def __repr__(self) -> str:
        return f"Catalog(title={self.title!r}, collections={self.collection_names!r})"

    # ---- Properties ----------------------------------------------------------

    @property
    def schema_version(self) -> int:
        return self._definition.schema_version

    @property
    def title(self) -> Optional[str]:
        return self._definition.title

    @title.setter
    def title(self, value: str) -> None:
        self._definition.title = value

    @property
    def scopes(self) -> dict[str, Query]:
        return {k: v.model_copy(deep=True) for k, v in self._definition.scopes.items()}

    @property
    def available_scopes(self) -> list[str]:
        return list(self._definition.scopes)

    def get_scope(self, entity_type: str) -> Optional[Query]:
        scope = self._definition.scopes.get(entity_type)
        return scope.model_copy(deep=True) if scope is not None else None

    def set_scope(self, entity_type: str, query: Query) -> None:
        self._definition.scopes[entity_type] = query.model_copy(deep=True)

    @property
    def collections(self) -> list[dict[str, Any]]:
        return [c.model_dump(by_alias=True, exclude_none=True) for c in self._definition.collections]

    @property
    def collection_names(self) -> list[str]:
        return [c.key for c in self._definition.collections]

    # ---- Collections ---------------------------------------------------------

    def get_collection(self, name: str) -> Collection:
        """Collection ``name`` with the catalog scope for its entity appended.

        Raises:
            HubError: the catalog has no collection called ``name``.
        """
        definition = next((c for c in self._definition.collections if c.key == name), None)
        if definition is None:
            raise HubError("getCollection", f'Collection "{name}" is not present in the Catalog')
        scoped = definition.model_copy(deep=True)
        scoped.scope = apply_scope(scoped.scope, self._definition.scopes.get(scoped.target_entity))
        return Collection(scoped, self._context)

    # ---- Search --------------------------------------------------------------

    async def search_items(
        self,
        query: Union[Query, str, dict[str, Any]],
        options: Optional[HubSearchOptions] = None,
    ) -> HubSearchResponse:
        return await self._search_entity("item", query, options)

    async def search_groups(
        self,
        query: Union[Query, str, dict[str, Any]],
        options: Optional[HubSearchOptions] = None,
    ) -> HubSearchResponse:
        return await self._search_entity("group", query, options)

    async def search_users(
        self,
        query: Union[Query, str, dict[str, Any]],
        options: Optional[HubSearchOptions] = None,
    ) -> HubSearchResponse:
        return await self._search_entity("user", query, options)

    async def search_collections(
        self,
        term: str,
        options: Optional[HubSearchOptions] = None,
    ) -> dict[str, HubSearchResponse]:
        """Run ``term`` against every collection concurrently.

        If any single search fails the whole call fails.
        """
        names = self.collection_names
        searches = []
        for name in names:
            collection = self.get_collection(name)
            searches.append(collection.search(build_term_query(term, collection.target_entity), options))
        responses = await asyncio.gather(*searches)
        return dict(zip(names, responses))

    async def search_scopes(
        self,
        term: str,
        options: Optional[HubSearchOptions] = None,
    ) -> dict[str, HubSearchResponse]:
        """Run ``term`` against every scope concurrently."""
        names = self.available_scopes
        responses = await asyncio.gather(
            *(self._search(build_term_query(term, name), name, options) for name in names)
        )
        return dict(zip(names, responses))

    async def _search_entity(
        self,
        entity_type: str,
        query: Union[Query, str, dict[str, Any]],
        options: Optional[HubSearchOptions],
    ) -> HubSearchResponse:
        if entity_type not in self._definition.scopes:
            logger.info("Catalog %r has no %s scope", self.title, entity_type)
            return HubSearchResponse.empty(
                messages=[
                    {
                        "code": "missingScope",
                        "message": _SCOPE_MESSAGES[entity_type],
                        "data": {"scope": entity_type},
                    }
                ]
            )
        return await self._search(coerce_query(query, entity_type), entity_type, options)

    async def _search(
        self,
        query: Query,
        entity_type: str,
        options: Optional[HubSearchOptions],
    ) -> HubSearchResponse:
        scoped = apply_scope(query, self._definition.scopes.get(entity_type))
        scoped.target_entity = entity_type
        options = (options or HubSearchOptions()).model_copy(
            update={"request_options": self._context.hub_request_options}
        )
        return await hub_search(scoped, options)


__all__ = ["Catalog", "fetch_catalog", "upgrade_catalog_schema"]
