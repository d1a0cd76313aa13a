"""Dispatch a query to the backend selected by ``options.api``."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from ..config import SearchApiType
from ..exceptions import HubError
from .ogc import hub_search_items
from .portal import portal_search_groups, portal_search_items, portal_search_users
from .query import get_q_predicate
from .types import HubSearchOptions, HubSearchResponse, Query, SearchApi

logger = logging.getLogger(__name__)

SearchFn = Callable[[Query, HubSearchOptions], Awaitable[HubSearchResponse]]

SEARCH_ROUTES: dict[tuple[str, str], SearchFn] = {
    (SearchApiType.ARCGIS.value, "item"): portal_search_items,
    (SearchApiType.ARCGIS.value, "group"): portal_search_groups,
    (SearchApiType.ARCGIS.value, "user"): portal_search_users,
    (SearchApiType.ARCGIS_HUB.value, "item"): hub_search_items,
}


def get_search_api(options: HubSearchOptions) -> SearchApi:
    return options.api or SearchApi(type=SearchApiType.ARCGIS)


async def hub_search(query: Optional[Query], options: HubSearchOptions) -> HubSearchResponse:
    """Search for items, groups or users.

    The query is validated (see :func:`get_q_predicate`) before anything is
    sent; Portal handles every entity type, the Hub Search API only items.

    Raises:
        QueryValidationError: the query's term predicates are invalid.
        HubError: no query, or no backend for the target entity.
    """
    if query is None:
        raise HubError("hubSearch", "Query is required.")
    get_q_predicate(query.filters)

    api = get_search_api(options)
    api_type = SearchApiType(api.type).value
    fn = SEARCH_ROUTES.get((api_type, query.target_entity))
    if fn is None:
        raise HubError(
            "hubSearch",
            f'Search via "{query.target_entity}" filter against "{api_type}" api is not implemented. '
            'Please ensure "targetEntity" is defined on the query.',
        )
    logger.debug("hubSearch %s via %s", query.target_entity, api_type)
    return await fn(query, options)


__all__ = ["SEARCH_ROUTES", "get_search_api", "hub_search"]
