"""Portal item and group REST calls used across hubcommon."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import urlparse

from .exceptions import ConfigurationError, NotFoundError
from .request import get_json, portal_request

if TYPE_CHECKING:
    from .context import HubRequestOptions

logger = logging.getLogger(__name__)


async def fetch_item(item_id: str, request_options: "HubRequestOptions") -> dict[str, Any]:
    return await portal_request(f"content/items/{item_id}", request_options)


async def fetch_item_data(item_id: str, request_options: "HubRequestOptions") -> dict[str, Any]:
    """The item's ``/data`` document; ``{}`` when nothing was ever written."""
    data = await portal_request(f"content/items/{item_id}/data", request_options)
    return data if isinstance(data, dict) else {}


async def fetch_group(group_id: str, request_options: "HubRequestOptions") -> dict[str, Any]:
    return await portal_request(f"community/groups/{group_id}", request_options)


async def get_item_by_slug(slug: str, request_options: "HubRequestOptions") -> Optional[dict[str, Any]]:
    """Find the item carrying the ``slug|{slug}`` type keyword, if any."""
    response = await portal_request(
        "search",
        request_options,
        {"filter": f'typekeywords:"slug|{slug}"'},
    )
    results = response.get("results") or []
    if not results:
        logger.debug("No item found for slug %s", slug)
        return None
    return await fetch_item(results[0]["id"], request_options)


async def lookup_site_id(site_url: str, request_options: "HubRequestOptions") -> str:
    """Resolve a site url to the id of its site item.

    ArcGIS Online uses the Hub domain service; Enterprise stores the
    hostname as a ``hubsubdomain|`` type keyword on the site item.
    """
    hostname = urlparse(site_url).netloc or site_url
    if request_options.is_portal:
        response = await portal_request(
            "search",
            request_options,
            {"q": f'typekeywords:"hubsubdomain|{hostname}"', "num": 1},
        )
        results = response.get("results") or []
        if not results:
            raise NotFoundError("lookupDomain", f"No site found for {hostname}")
        return results[0]["id"]

    if not request_options.hub_api_url:
        raise ConfigurationError("lookupDomain", "A Hub API url is required to look up a site domain.")
    record = await get_json(
        f"{request_options.hub_api_url.rstrip('/')}/api/v3/domains/{hostname}",
        client=request_options.http_client,
        timeout=request_options.timeout,
    )
    site_id = record.get("siteId") if isinstance(record, dict) else None
    if not site_id:
        raise NotFoundError("lookupDomain", f"No site found for {hostname}")
    return site_id


# ---- Writes ------------------------------------------------------------------


def _item_params(item: dict[str, Any], data: Optional[dict[str, Any]]) -> dict[str, Any]:
    params = {
        "title": item.get("title"),
        "type": item.get("type"),
        "snippet": item.get("snippet"),
        "description": item.get("description"),
        "tags": item.get("tags"),
        "typeKeywords": item.get("typeKeywords"),
        "culture": item.get("culture"),
        "url": item.get("url"),
        "properties": json.dumps(item["properties"]) if item.get("properties") else None,
    }
    if data is not None:
        params["text"] = json.dumps(data)
    return params


async def create_item(
    owner: str,
    item: dict[str, Any],
    data: Optional[dict[str, Any]],
    request_options: "HubRequestOptions",
) -> str:
    """Add an item to ``owner``'s content; returns the new id."""
    response = await portal_request(
        f"content/users/{owner}/addItem", request_options, _item_params(item, data), method="POST"
    )
    return response["id"]


async def update_item(
    owner: str,
    item: dict[str, Any],
    data: Optional[dict[str, Any]],
    request_options: "HubRequestOptions",
) -> None:
    await portal_request(
        f"content/users/{owner}/items/{item['id']}/update",
        request_options,
        _item_params(item, data),
        method="POST",
    )


async def delete_item(owner: str, item_id: str, request_options: "HubRequestOptions") -> None:
    await portal_request(f"content/users/{owner}/items/{item_id}/delete", request_options, method="POST")


def _group_params(group: dict[str, Any]) -> dict[str, Any]:
    return {
        "title": group.get("title"),
        "snippet": group.get("snippet"),
        "description": group.get("description"),
        "tags": group.get("tags"),
        "access": group.get("access"),
        "isInvitationOnly": group.get("isInvitationOnly"),
        "isViewOnly": group.get("isViewOnly"),
        "membershipAccess": group.get("membershipAccess"),
    }


async def create_group(group: dict[str, Any], request_options: "HubRequestOptions") -> dict[str, Any]:
    """Create a group; returns the created group document."""
    response = await portal_request("community/createGroup", request_options, _group_params(group), method="POST")
    return response.get("group") or {}


async def update_group(group: dict[str, Any], request_options: "HubRequestOptions") -> None:
    await portal_request(
        f"community/groups/{group['id']}/update", request_options, _group_params(group), method="POST"
    )


async def delete_group(group_id: str, request_options: "HubRequestOptions") -> None:
    await portal_request(f"community/groups/{group_id}/delete", request_options, method="POST")


__all__ = [
    "create_group",
    "create_item",
    "delete_group",
    "delete_item",
    "fetch_group",
    "fetch_item",
    "fetch_item_data",
    "get_item_by_slug",
    "lookup_site_id",
    "update_group",
    "update_item",
]
