"""Platform documents -> :class:`HubSearchResult`."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..content.compose import (
    get_hub_relative_url,
    get_item_home_url,
    get_item_thumbnail_url,
    parse_epoch_ms,
    parse_item_categories,
)
from ..content.families import get_family, normalize_item_type
from ..context import DEFAULT_PORTAL_URL, HubRequestOptions
from ..objects import get_prop
from .types import AggregationValue, HubAggregation, HubSearchResult


def parse_include(include: str) -> tuple[str, str]:
    """``"server.layers AS layers"`` -> ``("server.layers", "layers")``."""
    if " AS " in include:
        path, prop = include.split(" AS ", 1)
        return path.strip(), prop.strip()
    path = include.strip()
    return path, path.split(".")[-1]


def _apply_includes(result: HubSearchResult, document: Mapping[str, Any], include: Sequence[str]) -> None:
    for spec in dict.fromkeys(include):
        path, prop = parse_include(spec)
        setattr(result, prop, get_prop(document, path))


def _portal(request_options: Optional[HubRequestOptions]) -> str:
    if request_options is not None:
        return request_options.portal
    return f"{DEFAULT_PORTAL_URL}/sharing/rest"


def item_to_search_result(
    item: Mapping[str, Any],
    include: Sequence[str] = (),
    request_options: Optional[HubRequestOptions] = None,
) -> HubSearchResult:
    portal = _portal(request_options)
    token = request_options.token if request_options else None
    result = HubSearchResult(
        id=item["id"],
        type=item.get("type"),
        name=item.get("title"),
        access=item.get("access"),
        owner=item.get("owner"),
        family=get_family(normalize_item_type(item) or ""),
        url=item.get("url"),
        type_keywords=item.get("typeKeywords") or [],
        tags=item.get("tags") or [],
        categories=parse_item_categories(item.get("categories")) or [],
        summary=item.get("snippet") or item.get("description"),
        created_date=parse_epoch_ms(item.get("created")),
        created_date_source="item.created",
        updated_date=parse_epoch_ms(item.get("modified")),
        updated_date_source="item.modified",
        links={
            "self": get_item_home_url(item["id"], portal),
            "siteRelative": get_hub_relative_url(item.get("type"), item["id"], item.get("typeKeywords")),
            "thumbnail": get_item_thumbnail_url(item, portal, token),
        },
    )
    _apply_includes(result, item, include)
    return result


def group_to_search_result(
    group: Mapping[str, Any],
    include: Sequence[str] = (),
    request_options: Optional[HubRequestOptions] = None,
) -> HubSearchResult:
    portal = _portal(request_options)
    home = portal.split("/sharing/rest")[0]
    thumbnail = group.get("thumbnail")
    result = HubSearchResult(
        id=group["id"],
        type="Group",
        name=group.get("title"),
        access=group.get("access"),
        owner=group.get("owner"),
        family="team",
        tags=group.get("tags") or [],
        summary=group.get("snippet") or group.get("description"),
        created_date=parse_epoch_ms(group.get("created")),
        created_date_source="group.created",
        updated_date=parse_epoch_ms(group.get("modified")),
        updated_date_source="group.modified",
        links={
            "self": f"{home}/home/group.html?id={group['id']}",
            "siteRelative": f"/groups/{group['id']}",
            "thumbnail": f"{portal}/community/groups/{group['id']}/info/{thumbnail}" if thumbnail else None,
        },
        is_protected=group.get("protected", False),
        member_type=get_prop(group, "userMembership.memberType"),
    )
    _apply_includes(result, group, include)
    return result


def user_to_search_result(
    user: Mapping[str, Any],
    include: Sequence[str] = (),
    request_options: Optional[HubRequestOptions] = None,
) -> HubSearchResult:
    portal = _portal(request_options)
    home = portal.split("/sharing/rest")[0]
    username = user["username"]
    thumbnail = user.get("thumbnail")
    result = HubSearchResult(
        id=username,
        type="User",
        name=user.get("fullName"),
        access=user.get("access"),
        owner=username,
        family="people",
        tags=user.get("tags") or [],
        summary=user.get("description"),
        created_date=parse_epoch_ms(user.get("created")),
        created_date_source="user.created",
        updated_date=parse_epoch_ms(user.get("modified")),
        updated_date_source="user.modified",
        links={
            "self": f"{home}/home/user.html?user={username}",
            "siteRelative": f"/people/{username}",
            "thumbnail": f"{portal}/community/users/{username}/info/{thumbnail}" if thumbnail else None,
        },
    )
    _apply_includes(result, user, include)
    return result


def portal_counts_to_aggregations(response: Mapping[str, Any]) -> list[HubAggregation]:
    """Portal ``aggregations.counts`` -> term aggregations."""
    return [
        HubAggregation(
            field=count.get("fieldName"),
            values=[AggregationValue(value=v.get("value"), count=v.get("count", 0)) for v in count.get("fieldValues") or []],
        )
        for count in get_prop(response, "aggregations.counts") or []
    ]


__all__ = [
    "group_to_search_result",
    "item_to_search_result",
    "parse_include",
    "portal_counts_to_aggregations",
    "user_to_search_result",
]
