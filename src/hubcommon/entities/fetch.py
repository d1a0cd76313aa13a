"""Fetch entities from Portal and compose them."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..context import HubRequestOptions
from ..exceptions import PlatformRequestError, remap_platform_error
from ..items import fetch_group, fetch_item, fetch_item_data, get_item_by_slug
from ..objects import is_guid
from .compute import group_to_hub_group, model_to_hub_entity, model_to_project
from .types import HubGroupRecord, HubProject

logger = logging.getLogger(__name__)


async def fetch_model_from_item(item: Mapping[str, Any], request_options: HubRequestOptions) -> dict[str, Any]:
    """``{"item": item, "data": <item data>}``."""
    data = await fetch_item_data(item["id"], request_options)
    return {"item": dict(item), "data": data}


async def _fetch_item_by_identifier(identifier: str, request_options: HubRequestOptions) -> Optional[dict[str, Any]]:
    if is_guid(identifier):
        return await fetch_item(identifier, request_options)
    return await get_item_by_slug(identifier, request_options)


async def fetch_project(identifier: str, request_options: HubRequestOptions) -> Optional[HubProject]:
    """Fetch a project by item id or slug; None when no item has the slug."""
    item = await _fetch_item_by_identifier(identifier, request_options)
    if item is None:
        return None
    model = await fetch_model_from_item(item, request_options)
    return model_to_project(model, request_options)


async def fetch_hub_entity(identifier: str, request_options: HubRequestOptions) -> Optional[Any]:
    """Fetch any item-backed entity by id or slug and compose it by type."""
    item = await _fetch_item_by_identifier(identifier, request_options)
    if item is None:
        return None
    model = await fetch_model_from_item(item, request_options)
    return model_to_hub_entity(model, request_options)


async def fetch_hub_group(
    group_id: str,
    request_options: HubRequestOptions,
    current_username: Optional[str] = None,
) -> HubGroupRecord:
    """Fetch a group.

    Raises:
        NotFoundError: ``"Group not found."`` when the platform says the
            group does not exist.
        PlatformRequestError: any other platform failure, unchanged.
    """
    try:
        group = await fetch_group(group_id, request_options)
    except PlatformRequestError as err:
        remapped = remap_platform_error(err, "fetchHubGroup")
        if remapped is err:
            raise
        raise remapped from err
    return group_to_hub_group(group, request_options, current_username)


__all__ = [
    "fetch_hub_entity",
    "fetch_hub_group",
    "fetch_model_from_item",
    "fetch_project",
]
