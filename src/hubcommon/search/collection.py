"""A named, pre-scoped query bundle within a catalog."""

from __future__ import annotations

from typing import Any, Optional, Union

from ..context import ArcGISContext
from .hub_search import hub_search
from .query import apply_scope, coerce_query
from .types import CollectionDefinition, HubSearchOptions, HubSearchResponse, Query


class Collection:
    """Search within one collection.

    Build instances with :meth:`from_json`, or get one from
    :meth:`Catalog.get_collection` which also applies the catalog scope.
    """

    def __init__(self, definition: CollectionDefinition, context: Optional[ArcGISContext] = None) -> None:
        self._definition = definition
        self._context = context or ArcGISContext()

    @classmethod
    def from_json(cls, json: dict[str, Any], context: Optional[ArcGISContext] = None) -> "Collection":
        return cls(CollectionDefinition.model_validate(json), context)

    def to_json(self) -> dict[str, Any]:
        return self._definition.model_dump(by_alias=True, exclude_none=True)

    def __repr__(self) -> str:
        return f"Collection(key={self.key!r}, target_entity={self.target_entity!r})"

    @property
    def key(self) -> str:
        return self._definition.key

    @property
    def label(self) -> Optional[str]:
        return self._definition.label

    @property
    def target_entity(self) -> str:
        return self._definition.target_entity

    @property
    def scope(self) -> Query:
        return self._definition.scope.model_copy(deep=True)

    @property
    def include(self) -> list[str]:
        return list(self._definition.include)

    @property
    def sort_field(self) -> Optional[str]:
        return self._definition.sort_field

    @property
    def sort_direction(self) -> Optional[str]:
        return self._definition.sort_direction

    async def search(
        self,
        query_or_term: Union[Query, str, dict[str, Any]],
        options: Optional[HubSearchOptions] = None,
    ) -> HubSearchResponse:
        """Search the collection with its scope appended to ``query_or_term``.

        The collection's ``include`` and sort apply unless ``options`` sets
        its own; requests always use the context's credentials.
        """
        query = apply_scope(coerce_query(query_or_term, self.target_entity), self._definition.scope)
        query.target_entity = self.target_entity

        options = options or HubSearchOptions()
        update: dict[str, Any] = {"request_options": self._context.hub_request_options}
        if not options.include and self._definition.include:
            update["include"] = list(self._definition.include)
        if not options.sort_field and self._definition.sort_field:
            update["sort_field"] = self._definition.sort_field
            update["sort_order"] = self._definition.sort_direction
        return await hub_search(query, options.model_copy(update=update))


__all__ = ["Collection"]
