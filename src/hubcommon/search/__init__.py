"""Structured search over Portal and the Hub Search API.

- Query / Filter / HubSearchOptions: backend-agnostic query models
- Catalog / Collection: scoped query bundles
- hub_search(): validates and dispatches to the Portal or OGC backend
"""

from .catalog import Catalog, fetch_catalog, upgrade_catalog_schema
from .collection import Collection
from .hub_search import SEARCH_ROUTES, hub_search
from .ogc import (
    format_filter_block,
    format_predicate,
    get_filter_query_param,
    get_next_ogc_callback,
    get_ogc_aggregation_query_params,
    get_ogc_item_query_params,
    get_query_string,
    get_sort_by_query_param,
    hub_search_items,
    search_ogc_aggregations,
    search_ogc_items,
)
from .portal import (
    portal_search_groups,
    portal_search_items,
    portal_search_users,
    serialize_query_for_portal,
)
from .query import apply_scope, get_q_predicate, get_q_query_param
from .results import group_to_search_result, item_to_search_result, user_to_search_result
from .types import (
    AggregationValue,
    CatalogDefinition,
    CollectionDefinition,
    Filter,
    HubAggregation,
    HubSearchOptions,
    HubSearchResponse,
    HubSearchResult,
    Query,
    SearchApi,
)

__all__ = [
    "AggregationValue",
    "Catalog",
    "CatalogDefinition",
    "Collection",
    "CollectionDefinition",
    "Filter",
    "HubAggregation",
    "HubSearchOptions",
    "HubSearchResponse",
    "HubSearchResult",
    "Query",
    "SEARCH_ROUTES",
    "SearchApi",
    "apply_scope",
    "fetch_catalog",
    "format_filter_block",
    "format_predicate",
    "get_filter_query_param",
    "get_next_ogc_callback",
    "get_ogc_aggregation_query_params",
    "get_ogc_item_query_params",
    "get_q_predicate",
    "get_q_query_param",
    "get_query_string",
    "get_sort_by_query_param",
    "group_to_search_result",
    "hub_search",
    "hub_search_items",
    "item_to_search_result",
    "portal_search_groups",
    "portal_search_items",
    "portal_search_users",
    "search_ogc_aggregations",
    "search_ogc_items",
    "serialize_query_for_portal",
    "upgrade_catalog_schema",
    "user_to_search_result",
]
