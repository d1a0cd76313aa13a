"""Portal (``/sharing/rest``) search backend.

Structured queries are serialized into Portal's Lucene-style ``q``::

    water AND ((type:"Web Map" OR type:"Web Scene")) AND (-tags:test)

Paging follows ``nextStart``; ``-1`` means there are no more results.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from ..context import HubRequestOptions
from ..exceptions import HubError
from ..request import portal_request
from .query import get_q_query_param
from .results import (
    group_to_search_result,
    item_to_search_result,
    portal_counts_to_aggregations,
    user_to_search_result,
)
from .types import Filter, HubSearchOptions, HubSearchResponse, HubSearchResult, NextPage, Query

logger = logging.getLogger(__name__)

ResultConverter = Callable[[Mapping[str, Any], Sequence[str], Optional[HubRequestOptions]], HubSearchResult]

ITEMS_PATH = "search"
GROUPS_PATH = "community/groups"
USERS_PATH = "community/users"


# ---- q serialization ---------------------------------------------------------


def _portal_value(value: Any) -> str:
    text = str(value).lower() if isinstance(value, bool) else str(value)
    return f'"{text}"' if " " in text else text


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _join(clauses: list[str], operator: str) -> str:
    if not clauses:
        return ""
    if len(clauses) == 1:
        return clauses[0]
    return f"({f' {operator} '.join(clauses)})"


def _serialize_field(field: str, value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return _join([f"{field}:{_portal_value(v)}" for v in value], "OR")
    if not isinstance(value, Mapping):
        return f"{field}:{_portal_value(value)}"

    clauses = []
    for key, operator in (("any", "OR"), ("all", "AND")):
        values = _as_list(value.get(key))
        if values:
            clauses.append(_join([f"{field}:{_portal_value(v)}" for v in values], operator))
    clauses.extend(f"-{field}:{_portal_value(v)}" for v in _as_list(value.get("not")))
    if value.get("from") is not None or value.get("to") is not None:
        start = value.get("from") if value.get("from") is not None else "0"
        end = value.get("to") if value.get("to") is not None else "9999999999999"
        clauses.append(f"{field}:[{start} TO {end}]")
    return " AND ".join(clauses)


def serialize_predicate_for_portal(predicate: Mapping[str, Any]) -> str:
    clauses = [_serialize_field(f, v) for f, v in predicate.items() if f != "term"]
    return _join([c for c in clauses if c], "AND")


def serialize_filter_for_portal(block: Filter) -> str:
    clauses = [c for c in (serialize_predicate_for_portal(p) for p in block.predicates) if c]
    if not clauses:
        return ""
    return _join(clauses, "AND" if block.operation == "AND" else "OR")


def serialize_query_for_portal(query: Query) -> str:
    """Portal ``q``: the term first, then every filter block AND'd; ``*`` when empty."""
    parts = []
    term = get_q_query_param(query)
    if term:
        parts.append(term)
    parts.extend(b for b in (serialize_filter_for_portal(f) for f in query.filters) if b)
    return " AND ".join(parts) or "*"


# ---- Requests ----------------------------------------------------------------


def _require_request_options(options: HubSearchOptions) -> HubRequestOptions:
    if options.request_options is None:
        raise HubError("hubSearch", "requestOptions: IHubRequestOptions is required.")
    return options.request_options


def get_portal_search_params(query: Query, options: HubSearchOptions) -> dict[str, Any]:
    params: dict[str, Any] = {
        "q": serialize_query_for_portal(query),
        "num": options.num,
        "start": options.start,
        "sortField": options.sort_field,
        "sortOrder": options.sort_order,
    }
    if options.agg_fields:
        params["countFields"] = ",".join(options.agg_fields)
        params["countSize"] = options.agg_limit or 10
    return params


def get_next_portal_callback(
    path: str,
    converter: ResultConverter,
    query: Query,
    options: HubSearchOptions,
    next_start: int,
) -> NextPage:
    async def next_page() -> Optional[HubSearchResponse]:
        if next_start is None or next_start < 0:
            return None
        return await _search_portal(path, converter, query, options.model_copy(update={"start": next_start}))

    return next_page


async def _search_portal(
    path: str,
    converter: ResultConverter,
    query: Query,
    options: HubSearchOptions,
) -> HubSearchResponse:
    request_options = _require_request_options(options)
    params = get_portal_search_params(query, options)
    logger.debug("Portal search %s q=%s start=%s", path, params["q"], params["start"])
    response = await portal_request(path, request_options, params)

    next_start = response.get("nextStart", -1)
    aggregations = portal_counts_to_aggregations(response) if options.agg_fields else None
    return HubSearchResponse(
        results=[converter(r, options.include, request_options) for r in response.get("results") or []],
        total=response.get("total", 0),
        has_next=next_start is not None and next_start > -1,
        aggregations=aggregations,
        next_page=get_next_portal_callback(path, converter, query, options, next_start),
    )


async def portal_search_items(query: Query, options: HubSearchOptions) -> HubSearchResponse:
    return await _search_portal(ITEMS_PATH, item_to_search_result, query, options)


async def portal_search_groups(query: Query, options: HubSearchOptions) -> HubSearchResponse:
    return await _search_portal(GROUPS_PATH, group_to_search_result, query, options)


async def portal_search_users(query: Query, options: HubSearchOptions) -> HubSearchResponse:
    return await _search_portal(USERS_PATH, user_to_search_result, query, options)


__all__ = [
    "get_next_portal_callback",
    "get_portal_search_params",
    "portal_search_groups",
    "portal_search_items",
    "portal_search_users",
    "serialize_filter_for_portal",
    "serialize_predicate_for_portal",
    "serialize_query_for_portal",
]
