"""Model -> typed Hub entity.

A model is ``{"item": <portal item>, "data": <item data>}``. Every
``model_to_*`` function maps properties with a property map, then layers
the computed fields (thumbnail, dates, links, features, edit rights) on top.
None of them mutate the model they are given.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping, Optional

from ..content.compose import (
    get_hub_relative_url,
    get_item_home_url,
    get_item_thumbnail_url,
    is_page_type,
    parse_epoch_ms,
)
from ..content.families import get_family, normalize_item_type
from ..context import DEFAULT_PORTAL_URL, HubRequestOptions
from ..exceptions import HubError
from ..objects import get_prop, set_prop
from ..permissions.rules import (
    GROUP_DEFAULT_FEATURES,
    INITIATIVE_DEFAULT_FEATURES,
    PROJECT_DEFAULT_FEATURES,
    SITE_DEFAULT_FEATURES,
    TEMPLATE_DEFAULT_FEATURES,
)
from .features import process_entity_features
from .types import (
    HubDiscussion,
    HubGroupRecord,
    HubInitiative,
    HubItemRecord,
    HubPage,
    HubProject,
    HubSite,
    HubTemplate,
)

Model = Mapping[str, Any]

# entity field -> path in the model
ITEM_PROPERTY_MAP: dict[str, str] = {
    "id": "item.id",
    "name": "item.title",
    "summary": "item.snippet",
    "description": "item.description",
    "owner": "item.owner",
    "org_id": "item.orgId",
    "type": "item.type",
    "type_keywords": "item.typeKeywords",
    "tags": "item.tags",
    "categories": "item.categories",
    "culture": "item.culture",
    "url": "item.url",
    "access": "item.access",
    "slug": "item.properties.slug",
    "permissions": "data.permissions",
    "catalog": "data.catalog",
}

FAMILY_PROPERTY_MAPS: dict[str, dict[str, str]] = {
    "project": {"status": "data.status"},
    "site": {
        "subdomain": "data.values.subdomain",
        "default_hostname": "data.values.defaultHostname",
        "custom_hostname": "data.values.customHostname",
    },
    "page": {"layout": "data.values.layout"},
    "discussion": {"prompt": "data.prompt"},
}

_EDIT_CONTROLS = ("admin", "update")


def map_model(model: Model, property_map: Mapping[str, str]) -> dict[str, Any]:
    """Copy the mapped values out of ``model``; unset paths are skipped."""
    mapped = {}
    for field, path in property_map.items():
        value = get_prop(model, path)
        if value is not None:
            mapped[field] = copy.deepcopy(value)
    return mapped


def _portal(request_options: Optional[HubRequestOptions]) -> str:
    return request_options.portal if request_options else f"{DEFAULT_PORTAL_URL}/sharing/rest"


def get_deployed_template_type(item: Mapping[str, Any]) -> Optional[str]:
    """``hubSolutionType|hubSiteApplication`` -> ``hubSiteApplication``."""
    for keyword in item.get("typeKeywords") or []:
        if keyword.startswith("hubSolutionType|"):
            return keyword.split("|", 1)[1]
    return None


def compute_item_links(
    item: Mapping[str, Any],
    request_options: Optional[HubRequestOptions] = None,
) -> dict[str, Optional[str]]:
    portal = _portal(request_options)
    identifier = get_prop(item, "properties.slug") or item["id"]
    if is_page_type(item.get("type"), item.get("typeKeywords")):
        family = "page"
    else:
        family = get_family(normalize_item_type(item) or "")
    return {
        "self": get_item_home_url(item["id"], portal),
        "siteRelative": get_hub_relative_url(item.get("type"), identifier, item.get("typeKeywords")),
        "workspaceRelative": f"/workspace/{family}s/{identifier}",
        "thumbnail": get_item_thumbnail_url(item, portal, request_options.token if request_options else None),
    }


def compute_item_props(
    model: Model,
    defaults: Mapping[str, bool],
    request_options: Optional[HubRequestOptions] = None,
) -> dict[str, Any]:
    """Fields every item-backed entity computes the same way."""
    item = model["item"]
    keywords = item.get("typeKeywords") or []
    links = compute_item_links(item, request_options)
    control = item.get("itemControl")
    return {
        "thumbnail_url": links["thumbnail"],
        "created_date": parse_epoch_ms(item.get("created")),
        "created_date_source": "item.created",
        "updated_date": parse_epoch_ms(item.get("modified")),
        "updated_date_source": "item.modified",
        "is_discussable": "cannotDiscuss" not in keywords,
        "features": process_entity_features(get_prop(model, "data.settings.features"), defaults),
        "links": links,
        "can_edit": control in _EDIT_CONTROLS,
        "can_delete": control == "admin",
    }


def _model_to_item_entity(
    cls: type[HubItemRecord],
    family: str,
    model: Model,
    defaults: Mapping[str, bool],
    request_options: Optional[HubRequestOptions],
) -> Any:
    fields = map_model(model, ITEM_PROPERTY_MAP)
    fields.update(map_model(model, FAMILY_PROPERTY_MAPS.get(family, {})))
    fields.update(compute_item_props(model, defaults, request_options))
    return cls(**fields)


def model_to_project(model: Model, request_options: Optional[HubRequestOptions] = None) -> HubProject:
    return _model_to_item_entity(HubProject, "project", model, PROJECT_DEFAULT_FEATURES, request_options)


def model_to_site(model: Model, request_options: Optional[HubRequestOptions] = None) -> HubSite:
    return _model_to_item_entity(HubSite, "site", model, SITE_DEFAULT_FEATURES, request_options)


def model_to_initiative(model: Model, request_options: Optional[HubRequestOptions] = None) -> HubInitiative:
    return _model_to_item_entity(HubInitiative, "initiative", model, INITIATIVE_DEFAULT_FEATURES, request_options)


def model_to_page(model: Model, request_options: Optional[HubRequestOptions] = None) -> HubPage:
    return _model_to_item_entity(HubPage, "page", model, {}, request_options)


def model_to_discussion(model: Model, request_options: Optional[HubRequestOptions] = None) -> HubDiscussion:
    return _model_to_item_entity(HubDiscussion, "discussion", model, {}, request_options)


def model_to_template(model: Model, request_options: Optional[HubRequestOptions] = None) -> HubTemplate:
    template = _model_to_item_entity(HubTemplate, "template", model, TEMPLATE_DEFAULT_FEATURES, request_options)
    template.is_deployed = "Deployed" in (template.type_keywords or [])
    template.deployed_type = get_deployed_template_type(model["item"])
    return template


def group_to_hub_group(
    group: Mapping[str, Any],
    request_options: Optional[HubRequestOptions] = None,
    current_username: Optional[str] = None,
) -> HubGroupRecord:
    """Convert a Portal group.

    Owners and admins of the group, and the group's owner, may edit and delete it.
    """
    portal = _portal(request_options)
    home = portal.split("/sharing/rest")[0]
    member_type = get_prop(group, "userMembership.memberType")
    thumbnail = group.get("thumbnail")
    can_edit = member_type in ("owner", "admin") or (
        current_username is not None and group.get("owner") == current_username
    )
    return HubGroupRecord(
        id=group["id"],
        name=group.get("title"),
        summary=group.get("snippet"),
        description=group.get("description"),
        owner=group.get("owner"),
        org_id=group.get("orgId"),
        access=group.get("access"),
        tags=copy.deepcopy(group.get("tags") or []),
        thumbnail_url=f"{portal}/community/groups/{group['id']}/info/{thumbnail}" if thumbnail else None,
        created_date=parse_epoch_ms(group.get("created")),
        created_date_source="group.created",
        updated_date=parse_epoch_ms(group.get("modified")),
        updated_date_source="group.modified",
        features=process_entity_features(group.get("features"), GROUP_DEFAULT_FEATURES),
        permissions=copy.deepcopy(group.get("permissions") or []),
        links={
            "self": f"{home}/home/group.html?id={group['id']}",
            "siteRelative": f"/groups/{group['id']}",
            "workspaceRelative": f"/workspace/groups/{group['id']}",
            "thumbnail": f"{portal}/community/groups/{group['id']}/info/{thumbnail}" if thumbnail else None,
        },
        can_edit=can_edit,
        can_delete=can_edit,
        is_protected=bool(group.get("protected")),
        member_type=member_type,
        membership_access=group.get("membershipAccess"),
        is_invitation_only=bool(group.get("isInvitationOnly")),
        is_view_only=bool(group.get("isViewOnly")),
    )


def entity_to_model(entity: HubItemRecord, model: Optional[Model] = None) -> dict[str, Any]:
    """Write an entity back onto a model, the reverse of ``model_to_*``.

    Computed fields are not persisted; ``features`` goes to
    ``data.settings.features``.
    """
    result: dict[str, Any] = copy.deepcopy(dict(model)) if model else {"item": {}, "data": {}}
    result.setdefault("item", {})
    result.setdefault("data", {})
    values = entity.model_dump(mode="json")
    values["permissions"] = [p.model_dump(by_alias=True, exclude_none=True) for p in entity.permissions]
    property_map = {**ITEM_PROPERTY_MAP, **FAMILY_PROPERTY_MAPS.get(entity.kind, {})}
    for field, path in property_map.items():
        if values.get(field) is not None:
            set_prop(result, path, values[field])
    set_prop(result, "data.settings.features", values.get("features") or {})
    return result


def hub_group_to_group(record: HubGroupRecord) -> dict[str, Any]:
    """Portal group document for a group record."""
    group = {
        "id": record.id,
        "title": record.name,
        "snippet": record.summary,
        "description": record.description,
        "owner": record.owner,
        "access": record.access,
        "tags": list(record.tags),
        "protected": record.is_protected,
        "membershipAccess": record.membership_access,
        "isInvitationOnly": record.is_invitation_only,
        "isViewOnly": record.is_view_only,
    }
    return {k: v for k, v in group.items() if v is not None}


MODEL_CONVERTERS = {
    "Hub Project": model_to_project,
    "Hub Site Application": model_to_site,
    "Hub Initiative": model_to_initiative,
    "Hub Page": model_to_page,
    "Discussion": model_to_discussion,
    "Hub Initiative Template": model_to_template,
    "Solution": model_to_template,
}


def model_to_hub_entity(model: Model, request_options: Optional[HubRequestOptions] = None) -> Any:
    """Pick the converter for the model's (normalized) item type."""
    item_type = normalize_item_type(model["item"])
    converter = MODEL_CONVERTERS.get(item_type or "")
    if converter is None:
        raise HubError("modelToHubEntity", f"Item type {item_type!r} is not a Hub entity")
    return converter(model, request_options)


__all__ = [
    "FAMILY_PROPERTY_MAPS",
    "ITEM_PROPERTY_MAP",
    "MODEL_CONVERTERS",
    "compute_item_links",
    "compute_item_props",
    "entity_to_model",
    "get_deployed_template_type",
    "group_to_hub_group",
    "hub_group_to_group",
    "map_model",
    "model_to_discussion",
    "model_to_hub_entity",
    "model_to_initiative",
    "model_to_page",
    "model_to_project",
    "model_to_site",
    "model_to_template",
]
