"""Hub Search API (OGC API - Features style) backend.

Structured queries are serialized into the ``filter`` query parameter::

    (type IN (typeA, 'type B')) AND (modified BETWEEN 1 AND 3)

The free-text term travels separately as ``q``. Paging follows the
``rel=next`` link returned with each page.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from urllib.parse import parse_qs, urlparse

from ..exceptions import ConfigurationError
from ..request import get_json
from .query import get_q_query_param
from .results import item_to_search_result
from .types import AggregationValue, Filter, HubAggregation, HubSearchOptions, HubSearchResponse, NextPage, Query

logger = logging.getLogger(__name__)


# ---- Filter serialization ----------------------------------------------------


def format_value(value: Any) -> str:
    """Quote strings that contain a space; everything else verbatim."""
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    return f"'{text}'" if " " in text else text


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _format_list(field: str, values: list[Any]) -> str:
    if not values:
        return ""
    return f"{field} IN ({', '.join(format_value(v) for v in values)})"


def _format_match_options(field: str, options: Mapping[str, Any]) -> str:
    clauses: list[str] = []
    any_ = _as_list(options.get("any"))
    if len(any_) == 1:
        clauses.append(f"{field}={format_value(any_[0])}")
    elif any_:
        clauses.append(_format_list(field, any_))
    clauses.extend(f"{field}={format_value(v)}" for v in _as_list(options.get("all")))
    not_ = _as_list(options.get("not"))
    if not_:
        clauses.append(f"{field} NOT IN ({', '.join(format_value(v) for v in not_)})")
    start, end = options.get("from"), options.get("to")
    if start is not None and end is not None:
        clauses.append(f"{field} BETWEEN {format_value(start)} AND {format_value(end)}")
    elif start is not None:
        clauses.append(f"{field} >= {format_value(start)}")
    elif end is not None:
        clauses.append(f"{field} <= {format_value(end)}")
    return " AND ".join(clauses)


def format_predicate(predicate: Mapping[str, Any]) -> str:
    """One predicate; its fields are AND'd. ``term`` is left out."""
    clauses = []
    for field, value in predicate.items():
        if field == "term":
            continue
        if isinstance(value, Mapping):
            clause = _format_match_options(field, value)
        elif isinstance(value, (list, tuple)):
            clause = _format_list(field, list(value))
        else:
            clause = f"{field}={format_value(value)}"
        if clause:
            clauses.append(clause)
    return f"({' AND '.join(clauses)})" if clauses else ""


def format_filter_block(block: Filter) -> str:
    """``((type=typeA) OR (tags=tagA))``; empty when only a term remains."""
    formatted = [p for p in (format_predicate(pred) for pred in block.predicates) if p]
    if not formatted:
        return ""
    joiner = " AND " if block.operation == "AND" else " OR "
    return f"({joiner.join(formatted)})"


def get_filter_query_param(query: Query) -> Optional[str]:
    blocks = [b for b in (format_filter_block(f) for f in query.filters) if b]
    return " AND ".join(blocks) if blocks else None


def get_sort_by_query_param(options: HubSearchOptions) -> Optional[str]:
    if not options.sort_field:
        return None
    prefix = "-" if options.sort_order == "desc" else ""
    return f"{prefix}properties.{options.sort_field}"


def _token(options: HubSearchOptions) -> Optional[str]:
    return options.request_options.token if options.request_options else None


def get_ogc_item_query_params(query: Query, options: HubSearchOptions) -> dict[str, Any]:
    """Query parameters for ``/items``, in wire order, without empty values."""
    params = {
        "filter": get_filter_query_param(query),
        "token": _token(options),
        "limit": options.num,
        "startindex": options.start,
        "q": get_q_query_param(query),
        "sortBy": get_sort_by_query_param(options),
    }
    return {k: v for k, v in params.items() if v is not None}


def get_ogc_aggregation_query_params(query: Query, options: HubSearchOptions) -> dict[str, Any]:
    params = {
        "aggregations": f"terms(fields=({','.join(options.agg_fields)}))",
        "token": _token(options),
    }
    return {k: v for k, v in params.items() if v is not None}


def get_query_string(params: Mapping[str, Any]) -> str:
    """``?a=1&b=2`` (values not url-encoded); empty string if nothing is set."""
    pairs = [f"{k}={v}" for k, v in params.items() if v is not None]
    return f"?{'&'.join(pairs)}" if pairs else ""


# ---- Requests ----------------------------------------------------------------


def get_ogc_api_url(options: HubSearchOptions) -> str:
    if options.api is not None and options.api.url:
        return options.api.url.rstrip("/")
    hub_api_url = options.request_options.hub_api_url if options.request_options else None
    if hub_api_url:
        return f"{hub_api_url.rstrip('/')}/api/search/v1/collections/all"
    raise ConfigurationError("hubSearchItems", "An OGC api url is required to search the Hub Search API.")


async def _get(url: str, params: dict[str, Any], options: HubSearchOptions) -> Any:
    request_options = options.request_options
    logger.debug("OGC search %s%s", url, get_query_string({k: v for k, v in params.items() if k != "token"}))
    return await get_json(
        url,
        params,
        client=request_options.http_client if request_options else None,
        timeout=request_options.timeout if request_options else None,
    )


def _next_link(response: Mapping[str, Any]) -> Optional[str]:
    for link in response.get("links") or []:
        if link.get("rel") == "next":
            return link.get("href")
    return None


def get_next_ogc_callback(response: Mapping[str, Any], query: Query, options: HubSearchOptions) -> NextPage:
    """A coroutine function fetching the page after ``response``.

    The next start index is read from the ``rel=next`` link; without that
    link the callback resolves to None.
    """
    href = _next_link(response)

    async def next_page() -> Optional[HubSearchResponse]:
        if href is None:
            return None
        start_values = parse_qs(urlparse(href).query).get("startindex")
        start = int(start_values[0]) if start_values else options.start + options.num
        return await search_ogc_items(query, options.model_copy(update={"start": start}))

    return next_page


def format_ogc_items_response(response: Mapping[str, Any], query: Query, options: HubSearchOptions) -> HubSearchResponse:
    results = [
        item_to_search_result(feature.get("properties") or {}, options.include, options.request_options)
        for feature in response.get("features") or []
    ]
    return HubSearchResponse(
        results=results,
        total=response.get("numberMatched", 0),
        has_next=_next_link(response) is not None,
        next_page=get_next_ogc_callback(response, query, options),
    )


def format_ogc_aggregations_response(response: Mapping[str, Any]) -> HubSearchResponse:
    aggregations = [
        HubAggregation(
            mode="terms",
            field=terms.get("field"),
            values=[AggregationValue(value=a.get("label"), count=a.get("value", 0)) for a in terms.get("aggregations") or []],
        )
        for terms in (response.get("aggregations") or {}).get("terms") or []
    ]
    return HubSearchResponse(aggregations=aggregations)


async def search_ogc_items(query: Query, options: HubSearchOptions) -> HubSearchResponse:
    url = f"{get_ogc_api_url(options)}/items"
    response = await _get(url, get_ogc_item_query_params(query, options), options)
    return format_ogc_items_response(response, query, options)


async def search_ogc_aggregations(query: Query, options: HubSearchOptions) -> HubSearchResponse:
    url = f"{get_ogc_api_url(options)}/aggregations"
    response = await _get(url, get_ogc_aggregation_query_params(query, options), options)
    return format_ogc_aggregations_response(response)


async def hub_search_items(query: Query, options: HubSearchOptions) -> HubSearchResponse:
    """Items, or term aggregations when ``options.agg_fields`` is set."""
    if options.agg_fields:
        return await search_ogc_aggregations(query, options)
    return await search_ogc_items(query, options)


__all__ = [
    "format_filter_block",
    "format_ogc_aggregations_response",
    "format_ogc_items_response",
    "format_predicate",
    "format_value",
    "get_filter_query_param",
    "get_next_ogc_callback",
    "get_ogc_aggregation_query_params",
    "get_ogc_api_url",
    "get_ogc_item_query_params",
    "get_query_string",
    "get_sort_by_query_param",
    "hub_search_items",
    "search_ogc_aggregations",
    "search_ogc_items",
]
