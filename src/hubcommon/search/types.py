"""Search models.

A :class:`Query` targets one entity type and holds ordered :class:`Filter`
blocks; each block ORs (default) or ANDs its predicates. A predicate maps a
field to a scalar, a list, or match options::

    Query(
        target_entity="item",
        filters=[
            Filter(predicates=[{"type": ["Web Map", "Web Scene"]}, {"tags": {"all": ["water"]}}]),
            Filter(predicates=[{"term": "lakes"}]),
        ],
    )

Match options: ``any``, ``all``, ``not`` (value or list) and, for date
ranges, ``from``/``to``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Awaitable, Callable, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ..config import HubConfig, SearchApiType
from ..context import HubRequestOptions

_CAMEL = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}

EntityType = Literal["item", "group", "user", "event"]

Predicate = dict[str, Any]


class Filter(BaseModel):
    """A block of predicates combined with ``operation`` (OR when unset)."""

    operation: Optional[Literal["AND", "OR"]] = None
    predicates: list[Predicate] = Field(default_factory=list)

    model_config = _CAMEL


class Query(BaseModel):
    """Backend-agnostic structured query."""

    target_entity: EntityType = "item"
    filters: list[Filter] = Field(default_factory=list)

    model_config = _CAMEL

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SearchApi(BaseModel):
    """Which backend a query is sent to, and where."""

    type: SearchApiType = SearchApiType.ARCGIS
    url: Optional[str] = None

    model_config = _CAMEL


class HubSearchOptions(BaseModel):
    """Paging, sorting, includes, aggregations and backend selection."""

    num: int = 10
    start: int = 1
    sort_field: Optional[str] = None
    sort_order: Optional[Literal["asc", "desc"]] = None
    include: list[str] = Field(default_factory=list)
    agg_fields: list[str] = Field(default_factory=list)
    agg_limit: Optional[int] = None
    api: Optional[SearchApi] = None
    request_options: Optional[HubRequestOptions] = None

    model_config = _CAMEL

    @classmethod
    def from_config(cls, config: HubConfig, **kwargs: Any) -> "HubSearchOptions":
        """Options whose page size, aggregation limit and backend come from ``config``."""
        if "api" not in kwargs:
            url = None
            if config.search_api == SearchApiType.ARCGIS_HUB:
                url = f"{config.hub_url}/api/search/v1/collections/all"
            kwargs["api"] = SearchApi(type=config.search_api, url=url)
        kwargs.setdefault("num", config.default_num)
        kwargs.setdefault("agg_limit", config.agg_limit)
        return cls(**kwargs)


class HubSearchResult(BaseModel):
    """One search hit, the same shape for items, groups and users.

    Values requested through ``include`` are stored as extra fields.
    """

    id: str
    type: Optional[str] = None
    name: Optional[str] = None
    access: Optional[str] = None
    owner: Optional[str] = None
    family: Optional[str] = None
    url: Optional[str] = None
    type_keywords: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    summary: Optional[str] = None
    created_date: Optional[datetime] = None
    created_date_source: Optional[str] = None
    updated_date: Optional[datetime] = None
    updated_date_source: Optional[str] = None
    links: dict[str, Optional[str]] = Field(default_factory=dict)

    model_config = {**_CAMEL, "extra": "allow"}


class AggregationValue(BaseModel):
    value: Any
    count: int


class HubAggregation(BaseModel):
    """Bucket counts for one field."""

    mode: str = "terms"
    field: str
    values: list[AggregationValue] = Field(default_factory=list)


NextPage = Callable[[], Awaitable[Any]]


class HubSearchResponse(BaseModel):
    """A page of results.

    ``await response.next()`` re-issues the same query advanced by one page,
    or resolves to ``None`` when there is nothing more to fetch.
    """

    results: list[Any] = Field(default_factory=list)
    total: int = 0
    has_next: bool = False
    aggregations: Optional[list[HubAggregation]] = None
    messages: list[dict[str, Any]] = Field(default_factory=list)
    next_page: Optional[NextPage] = Field(default=None, exclude=True)

    model_config = _CAMEL

    async def next(self) -> Optional["HubSearchResponse"]:
        if self.next_page is None:
            return None
        return await self.next_page()

    @classmethod
    def empty(cls, messages: Optional[list[dict[str, Any]]] = None) -> "HubSearchResponse":
        return cls(messages=messages or [])


class CollectionDefinition(BaseModel):
    """Persisted form of a :class:`~hubcommon.search.collection.Collection`."""

    key: str
    label: Optional[str] = None
    target_entity: EntityType = "item"
    scope: Query = Field(default_factory=Query)
    include: list[str] = Field(default_factory=list)
    sort_field: Optional[str] = None
    sort_direction: Optional[Literal["asc", "desc"]] = None

    model_config = _CAMEL


class CatalogDefinition(BaseModel):
    """Persisted form of a :class:`~hubcommon.search.catalog.Catalog`."""

    schema_version: int = 1
    title: Optional[str] = None
    scopes: dict[str, Query] = Field(default_factory=dict)
    collections: list[CollectionDefinition] = Field(default_factory=list)

    model_config = _CAMEL


__all__ = [
    "AggregationValue",
    "CatalogDefinition",
    "CollectionDefinition",
    "EntityType",
    "Filter",
    "HubAggregation",
    "HubSearchOptions",
    "HubSearchResponse",
    "HubSearchResult",
    "NextPage",
    "Predicate",
    "Query",
    "SearchApi",
]
