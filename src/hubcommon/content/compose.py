"""Portal item -> Hub content.

``item_to_content()`` is pure: the item passed in is never mutated, the raw
document is deep-copied onto ``content.item``.
"""

from __future__ import annotations

import copy
import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ..objects import get_prop
from .families import get_family, is_feature_service, normalize_item_type
from .slugs import remove_context_from_slug

_LAYER_ID_RE = re.compile(r"/(\d+)$")

_PAGE_TYPES = ("Hub Page", "Site Page")


class HubContent(BaseModel):
    """Normalized representation of any Portal item."""

    id: str
    name: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    normalized_type: Optional[str] = None
    family: str = "content"
    hub_id: Optional[str] = None
    slug: Optional[str] = None
    owner: Optional[str] = None
    org_id: Optional[str] = None
    access: Optional[str] = None
    url: Optional[str] = None
    type_keywords: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    item_categories: list[str] = Field(default_factory=list)
    summary: Optional[str] = None
    description: Optional[str] = None
    publisher: dict[str, Any] = Field(default_factory=dict)
    permissions: dict[str, Any] = Field(default_factory=dict)
    license: dict[str, Any] = Field(default_factory=dict)
    boundary: Optional[dict[str, Any]] = None
    action_links: Optional[Any] = None
    hub_actions: Optional[Any] = None
    metrics: Optional[Any] = None
    created_date: Optional[datetime] = None
    created_date_source: Optional[str] = None
    published_date: Optional[datetime] = None
    published_date_source: Optional[str] = None
    updated_date: Optional[datetime] = None
    updated_date_source: Optional[str] = None
    errors: list[Any] = Field(default_factory=list)
    item: dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


def parse_epoch_ms(value: Any) -> Optional[datetime]:
    """Portal timestamps are epoch milliseconds."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)


def get_layer_id_from_url(url: Optional[str]) -> Optional[str]:
    match = _LAYER_ID_RE.search(url or "")
    return match.group(1) if match else None


def get_item_layer_id(item: Mapping[str, Any]) -> Optional[str]:
    """Layer id of a single layer service, if it can be told from the item."""
    layer_id = get_layer_id_from_url(item.get("url"))
    if layer_id:
        return layer_id
    if is_feature_service(item.get("type")) and "Singlelayer" in (item.get("typeKeywords") or []):
        return "0"
    return None


def get_item_hub_id(item: Mapping[str, Any]) -> Optional[str]:
    """Id of the item in the Hub API; only public items are indexed."""
    if item.get("access") != "public":
        return None
    layer_id = get_item_layer_id(item)
    return f"{item['id']}_{layer_id}" if layer_id else item["id"]


def parse_item_categories(categories: Optional[list[str]]) -> Optional[list[str]]:
    """``["/Categories/Water/Lakes"]`` -> ``["Water", "Lakes"]``."""
    if categories is None:
        return None
    parsed = [part for category in categories for part in category.split("/")]
    return [part for part in parsed if part.lower() not in ("categories", "")]


def item_extent_to_boundary(extent: Any) -> Optional[dict[str, Any]]:
    if not extent:
        return None
    (xmin, ymin), (xmax, ymax) = extent[0], extent[1]
    return {
        "geometry": {
            "xmin": xmin,
            "ymin": ymin,
            "xmax": xmax,
            "ymax": ymax,
            "spatialReference": {"wkid": 4326},
        }
    }


def get_item_home_url(item_id: str, portal_url: str) -> str:
    """Item page in the portal's classic home app."""
    return f"{_portal_home(portal_url)}/home/item.html?id={item_id}"


def get_item_thumbnail_url(
    item: Mapping[str, Any],
    portal_url: str,
    token: Optional[str] = None,
) -> Optional[str]:
    """Thumbnail url; non-public items carry the token so the image loads."""
    thumbnail = item.get("thumbnail")
    if not thumbnail:
        return None
    url = f"{_portal_home(portal_url)}/sharing/rest/content/items/{item['id']}/info/{thumbnail}"
    if token and item.get("access") != "public":
        url = f"{url}?token={token}"
    return url


def _portal_home(portal_url: str) -> str:
    return portal_url.split("/sharing/rest")[0].rstrip("/")


def is_page_type(item_type: Optional[str], type_keywords: Optional[list[str]] = None) -> bool:
    return normalize_item_type({"type": item_type, "typeKeywords": type_keywords or []}) in _PAGE_TYPES


def get_hub_relative_url(
    item_type: Optional[str],
    identifier: str,
    type_keywords: Optional[list[str]] = None,
) -> str:
    """Path of an entity relative to a Hub site, e.g. ``/maps/{id}``."""
    normalized = normalize_item_type({"type": item_type, "typeKeywords": type_keywords or []})
    family = get_family(normalized or "")
    if normalized in _PAGE_TYPES:
        return f"/pages/{identifier}"
    if normalized == "Hub Project":
        return f"/projects/{identifier}"
    if normalized == "Discussion":
        return f"/discussions/{identifier}"
    if normalized == "Hub Initiative":
        return f"/initiatives/{identifier}"
    if family == "template":
        return f"/templates/{identifier}/about"
    if family == "feedback":
        return f"/feedback/surveys/{identifier}"
    if family == "content":
        return f"/content/{identifier}"
    return f"/{family}s/{identifier}"


def item_to_content(item: Mapping[str, Any]) -> HubContent:
    """Convert a Portal item into :class:`HubContent`.

    Example::

        content = item_to_content({"id": "3ef", "type": "Feature Service", "access": "public", ...})
        content.family  # "map"
        content.hub_id  # "3ef" or "3ef_0"
    """
    raw = copy.deepcopy(dict(item))
    properties = raw.get("properties") or {}
    normalized_type = normalize_item_type(raw)
    created = parse_epoch_ms(raw.get("created"))
    return HubContent(
        id=raw["id"],
        name=raw.get("title"),
        title=raw.get("title"),
        type=raw.get("type"),
        normalized_type=normalized_type,
        family=get_family(normalized_type or ""),
        hub_id=get_item_hub_id(raw),
        slug=properties.get("slug"),
        owner=raw.get("owner"),
        org_id=raw.get("orgId"),
        access=raw.get("access"),
        url=raw.get("url"),
        type_keywords=raw.get("typeKeywords") or [],
        tags=raw.get("tags") or [],
        categories=parse_item_categories(raw.get("categories")) or [],
        item_categories=raw.get("categories") or [],
        summary=raw.get("snippet") or raw.get("description"),
        description=raw.get("description"),
        publisher={"name": raw.get("owner"), "username": raw.get("owner")},
        permissions={"visibility": raw.get("access"), "control": raw.get("itemControl") or "view"},
        license={"name": "Custom License", "description": raw.get("accessInformation")},
        boundary=item_extent_to_boundary(raw.get("extent")),
        action_links=properties.get("links"),
        hub_actions=properties.get("actions"),
        metrics=properties.get("metrics"),
        created_date=created,
        created_date_source="item.created",
        published_date=created,
        published_date_source="item.created",
        updated_date=parse_epoch_ms(raw.get("modified")),
        updated_date_source="item.modified",
        item=raw,
    )


def get_content_identifier(content: Any, site: Optional[Mapping[str, Any]] = None) -> str:
    """Preferred identifier of a piece of content.

    - template and feedback families: the item id
    - pages: the slug the site stored for the page, else the page id
    - otherwise the slug (org prefix removed unless on an umbrella site),
      then the Hub API id, then the item id
    """
    content_id = get_prop(content, "id")
    if get_prop(content, "family") in ("template", "feedback"):
        return content_id

    if get_prop(content, "type") in _PAGE_TYPES:
        pages = get_prop(site, "data.values.pages") or []
        page = next((p for p in pages if p.get("id") == content_id), None)
        return page.get("slug") if page else content_id

    slug = get_prop(content, "slug")
    if slug:
        if get_prop(site, "data.values.isUmbrella"):
            return slug
        return remove_context_from_slug(slug, get_prop(site, "domainInfo.orgKey"))

    return get_prop(content, "hubId") or content_id


__all__ = [
    "HubContent",
    "get_content_identifier",
    "get_hub_relative_url",
    "get_item_home_url",
    "get_item_hub_id",
    "get_item_layer_id",
    "get_item_thumbnail_url",
    "get_layer_id_from_url",
    "is_page_type",
    "item_extent_to_boundary",
    "item_to_content",
    "parse_epoch_ms",
    "parse_item_categories",
]
