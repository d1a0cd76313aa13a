"""Static permission tables for every Hub entity family.

Each family contributes:
- ``<Family>Permissions``: the permission strings it defines
- ``<FAMILY>_POLICIES``: the system-level policy for each of them
- ``<FAMILY>_DEFAULT_FEATURES``: features an entity owner can toggle,
  with their default state (only for families that have any)

``HUB_PERMISSION_POLICIES`` concatenates all of them and is the input to
``default_registry()``.
"""

from __future__ import annotations

from .constants import AssertionType, HubAvailability, HubEnvironment, HubLicense, HubService
from .policy import PermissionPolicy, PolicyAssertion

P = PermissionPolicy

_PREMIUM = (HubLicense.HUB_PREMIUM,)
_ALL_LICENSES = (HubLicense.HUB_PREMIUM, HubLicense.HUB_BASIC, HubLicense.ENTERPRISE_SITES)
_DEV_ENVS = (HubEnvironment.DEVEXT, HubEnvironment.QAEXT)
_CREATE_ITEM = ("portal:user:createItem",)

_WORKSPACE_PANES = (
    "overview",
    "dashboard",
    "details",
    "settings",
    "collaborators",
    "content",
    "metrics",
)


def _workspace_policies(family: str, owner_panes: tuple[str, ...] = ("settings",)) -> list[PermissionPolicy]:
    """Workspace policies shared by every item-backed family.

    ``overview`` and ``dashboard`` need view access; every other pane
    needs edit access, and ``owner_panes`` also require ownership.
    """
    base = f"hub:{family}"
    policies = [
        P(
            permission=f"{base}:workspace",
            dependencies=("hub:feature:workspace",),
            environments=_DEV_ENVS,
        )
    ]
    for pane in _WORKSPACE_PANES:
        parent = f"{base}:view" if pane in ("overview", "dashboard") else f"{base}:edit"
        policies.append(
            P(
                permission=f"{base}:workspace:{pane}",
                dependencies=(f"{base}:workspace", parent),
                entity_owner=pane in owner_panes,
            )
        )
    return policies


def _workspace_permissions(family: str) -> tuple[str, ...]:
    return (f"hub:{family}:workspace",) + tuple(f"hub:{family}:workspace:{p}" for p in _WORKSPACE_PANES)


# ---- Sites -------------------------------------------------------------------

SITE_DEFAULT_FEATURES: dict[str, bool] = {
    "hub:site:events": False,
    "hub:site:content": True,
    "hub:site:discussions": False,
}

SitePermissions = (
    "hub:site",
    "hub:site:create",
    "hub:site:delete",
    "hub:site:edit",
    "hub:site:view",
    "hub:site:events",
    "hub:site:content",
    "hub:site:discussions",
    "hub:site:manage",
) + _workspace_permissions("site")

SITE_POLICIES: list[PermissionPolicy] = [
    P(permission="hub:site", services=(HubService.PORTAL,)),
    P(
        permission="hub:site:create",
        dependencies=("hub:site",),
        authenticated=True,
        privileges=_CREATE_ITEM,
    ),
    P(permission="hub:site:view", dependencies=("hub:site",)),
    P(permission="hub:site:edit", dependencies=("hub:site",), authenticated=True, entity_edit=True),
    P(permission="hub:site:delete", dependencies=("hub:site",), authenticated=True, entity_owner=True),
    P(permission="hub:site:events", dependencies=("hub:site:view",)),
    P(permission="hub:site:content", dependencies=("hub:site:edit",)),
    P(permission="hub:site:discussions", dependencies=("hub:site:view",)),
    P(permission="hub:site:manage", dependencies=("hub:site:edit",)),
    *_workspace_policies("site"),
]


# ---- Projects ----------------------------------------------------------------

PROJECT_DEFAULT_FEATURES: dict[str, bool] = {
    "hub:project:events": False,
    "hub:project:content": True,
    "hub:project:discussions": False,
}

ProjectPermissions = (
    "hub:project",
    "hub:project:create",
    "hub:project:delete",
    "hub:project:edit",
    "hub:project:view",
    "hub:project:events",
    "hub:project:content",
    "hub:project:discussions",
    "hub:project:manage",
) + _workspace_permissions("project")

PROJECT_POLICIES: list[PermissionPolicy] = [
    P(permission="hub:project", services=(HubService.PORTAL,), licenses=_PREMIUM),
    P(
        permission="hub:project:create",
        dependencies=("hub:project",),
        authenticated=True,
        privileges=_CREATE_ITEM,
    ),
    P(
        permission="hub:project:view",
        services=(HubService.PORTAL,),
        licenses=(HubLicense.HUB_PREMIUM, HubLicense.HUB_BASIC),
    ),
    P(permission="hub:project:edit", dependencies=("hub:project",), authenticated=True, entity_edit=True),
    P(permission="hub:project:delete", dependencies=("hub:project",), authenticated=True, entity_owner=True),
    P(permission="hub:project:events", dependencies=("hub:project:view",)),
    P(permission="hub:project:content", dependencies=("hub:project:edit",)),
    P(permission="hub:project:discussions", dependencies=("hub:project:view",)),
    P(permission="hub:project:manage", dependencies=("hub:project:edit",)),
    *_workspace_policies("project"),
]


# ---- Initiatives -------------------------------------------------------------

INITIATIVE_DEFAULT_FEATURES: dict[str, bool] = {
    "hub:initiative:events": False,
    "hub:initiative:content": True,
    "hub:initiative:discussions": False,
}

InitiativePermissions = (
    "hub:initiative",
    "hub:initiative:create",
    "hub:initiative:delete",
    "hub:initiative:edit",
    "hub:initiative:view",
    "hub:initiative:events",
    "hub:initiative:content",
    "hub:initiative:discussions",
    "hub:initiative:manage",
) + _workspace_permissions("initiative")

INITIATIVE_POLICIES: list[PermissionPolicy] = [
    P(permission="hub:initiative", services=(HubService.PORTAL,), licenses=_PREMIUM),
    P(
        permission="hub:initiative:create",
        dependencies=("hub:initiative",),
        authenticated=True,
        privileges=_CREATE_ITEM,
    ),
    P(
        permission="hub:initiative:view",
        services=(HubService.PORTAL,),
        authenticated=False,
        licenses=(HubLicense.HUB_PREMIUM, HubLicense.HUB_BASIC),
    ),
    P(permission="hub:initiative:edit", dependencies=("hub:initiative",), authenticated=True, entity_edit=True),
    P(permission="hub:initiative:delete", dependencies=("hub:initiative",), authenticated=True, entity_owner=True),
    P(permission="hub:initiative:events", dependencies=("hub:initiative:view",)),
    P(permission="hub:initiative:content", dependencies=("hub:initiative:edit",)),
    P(permission="hub:initiative:discussions", dependencies=("hub:initiative:view",)),
    P(permission="hub:initiative:manage", dependencies=("hub:initiative:edit",)),
    *_workspace_policies("initiative"),
]


# ---- Initiative templates ----------------------------------------------------

InitiativeTemplatePermissions = (
    "hub:initiativeTemplate",
    "hub:initiativeTemplate:create",
    "hub:initiativeTemplate:delete",
    "hub:initiativeTemplate:edit",
    "hub:initiativeTemplate:view",
    "hub:initiativeTemplate:manage",
) + _workspace_permissions("initiativeTemplate")

INITIATIVE_TEMPLATE_POLICIES: list[PermissionPolicy] = [
    P(permission="hub:initiativeTemplate", services=(HubService.PORTAL,), licenses=_PREMIUM),
    P(
        permission="hub:initiativeTemplate:create",
        dependencies=("hub:initiativeTemplate",),
        authenticated=True,
        privileges=_CREATE_ITEM,
    ),
    P(permission="hub:initiativeTemplate:view", dependencies=("hub:initiativeTemplate",)),
    P(
        permission="hub:initiativeTemplate:edit",
        dependencies=("hub:initiativeTemplate",),
        authenticated=True,
        entity_edit=True,
    ),
    P(
        permission="hub:initiativeTemplate:delete",
        dependencies=("hub:initiativeTemplate",),
        authenticated=True,
        entity_owner=True,
    ),
    P(permission="hub:initiativeTemplate:manage", dependencies=("hub:initiativeTemplate:edit",)),
    *_workspace_policies("initiativeTemplate"),
]


# ---- Discussions -------------------------------------------------------------

DiscussionPermissions = (
    "hub:discussion",
    "hub:discussion:create",
    "hub:discussion:delete",
    "hub:discussion:edit",
    "hub:discussion:view",
    "hub:discussion:manage",
) + _workspace_permissions("discussion")

DISCUSSION_POLICIES: list[PermissionPolicy] = [
    P(permission="hub:discussion", services=(HubService.PORTAL, HubService.DISCUSSIONS)),
    P(
        permission="hub:discussion:create",
        dependencies=("hub:discussion",),
        authenticated=True,
        privileges=_CREATE_ITEM,
    ),
    P(permission="hub:discussion:view", dependencies=("hub:discussion",)),
    P(permission="hub:discussion:edit", dependencies=("hub:discussion",), authenticated=True, entity_edit=True),
    P(permission="hub:discussion:delete", dependencies=("hub:discussion",), authenticated=True, entity_owner=True),
    P(permission="hub:discussion:manage", dependencies=("hub:discussion:edit",)),
    *_workspace_policies("discussion"),
]


# ---- Content -----------------------------------------------------------------

ContentPermissions = (
    "hub:content",
    "hub:content:create",
    "hub:content:delete",
    "hub:content:edit",
    "hub:content:view",
    "hub:content:manage",
    "hub:content:discussions",
) + _workspace_permissions("content")

CONTENT_POLICIES: list[PermissionPolicy] = [
    P(permission="hub:content", services=(HubService.PORTAL,)),
    P(
        permission="hub:content:create",
        dependencies=("hub:content",),
        authenticated=True,
        privileges=_CREATE_ITEM,
    ),
    P(permission="hub:content:view", dependencies=("hub:content",)),
    P(permission="hub:content:edit", dependencies=("hub:content",), authenticated=True, entity_edit=True),
    P(permission="hub:content:delete", dependencies=("hub:content",), authenticated=True, entity_owner=True),
    P(permission="hub:content:manage", dependencies=("hub:content:edit",)),
    P(
        permission="hub:content:discussions",
        dependencies=("hub:content:view",),
        assertions=(
            PolicyAssertion(
                property="entity:typeKeywords",
                type=AssertionType.WITHOUT,
                value="cannotDiscuss",
            ),
        ),
    ),
    *_workspace_policies("content"),
]


# ---- Groups ------------------------------------------------------------------

GROUP_DEFAULT_FEATURES: dict[str, bool] = {
    "hub:group:discussions": False,
}

GroupPermissions = (
    "hub:group",
    "hub:group:create",
    "hub:group:delete",
    "hub:group:edit",
    "hub:group:view",
    "hub:group:discussions",
    "hub:group:shareContent",
    "hub:group:manage",
) + _workspace_permissions("group")

GROUP_POLICIES: list[PermissionPolicy] = [
    P(permission="hub:group", services=(HubService.PORTAL,)),
    P(
        permission="hub:group:create",
        dependencies=("hub:group",),
        authenticated=True,
        privileges=("portal:user:createGroup",),
    ),
    P(permission="hub:group:view", dependencies=("hub:group",)),
    P(permission="hub:group:edit", dependencies=("hub:group",), authenticated=True, entity_edit=True),
    P(permission="hub:group:delete", dependencies=("hub:group",), authenticated=True, entity_owner=True),
    P(permission="hub:group:discussions", dependencies=("hub:group:view",)),
    P(
        permission="hub:group:shareContent",
        dependencies=("hub:group",),
        authenticated=True,
        assertions=(
            PolicyAssertion(
                property="context:currentUser",
                type=AssertionType.IS_GROUP_MEMBER,
                value="entity:id",
            ),
        ),
    ),
    P(permission="hub:group:manage", dependencies=("hub:group:edit",)),
    *_workspace_policies("group"),
]


# ---- Pages -------------------------------------------------------------------

PagePermissions = (
    "hub:page",
    "hub:page:create",
    "hub:page:delete",
    "hub:page:edit",
    "hub:page:view",
) + _workspace_permissions("page")

PAGE_POLICIES: list[PermissionPolicy] = [
    P(permission="hub:page", services=(HubService.PORTAL,)),
    P(
        permission="hub:page:create",
        dependencies=("hub:page",),
        authenticated=True,
        privileges=_CREATE_ITEM,
    ),
    P(permission="hub:page:view", dependencies=("hub:page",)),
    P(permission="hub:page:edit", dependencies=("hub:page",), authenticated=True, entity_edit=True),
    P(permission="hub:page:delete", dependencies=("hub:page",), authenticated=True, entity_owner=True),
    *_workspace_policies("page"),
]


# ---- Templates ---------------------------------------------------------------

TEMPLATE_DEFAULT_FEATURES: dict[str, bool] = {
    "hub:template:workspace:metrics": False,
}

TemplatePermissions = (
    "hub:template",
    "hub:template:create",
    "hub:template:delete",
    "hub:template:edit",
    "hub:template:view",
    "hub:template:manage",
) + _workspace_permissions("template")

TEMPLATE_POLICIES: list[PermissionPolicy] = [
    P(permission="hub:template", services=(HubService.PORTAL,)),
    P(
        permission="hub:template:create",
        dependencies=("hub:template",),
        authenticated=True,
        privileges=_CREATE_ITEM,
    ),
    P(permission="hub:template:view", dependencies=("hub:template",)),
    P(permission="hub:template:edit", dependencies=("hub:template",), authenticated=True, entity_edit=True),
    P(permission="hub:template:delete", dependencies=("hub:template",), authenticated=True, entity_owner=True),
    P(permission="hub:template:manage", dependencies=("hub:template:edit",)),
    *_workspace_policies("template"),
]


# ---- Platform ----------------------------------------------------------------

PlatformPermissions = (
    "platform:portal:user:createItem",
    "platform:portal:user:createGroup",
    "platform:portal:user:shareToGroup",
    "platform:portal:admin:updateItems",
    "platform:portal:admin:viewUsers",
)

PLATFORM_POLICIES: list[PermissionPolicy] = [
    P(
        permission=permission,
        authenticated=True,
        privileges=(permission.split(":", 1)[1],),
    )
    for permission in PlatformPermissions
]


# ---- Temp / System -----------------------------------------------------------

# Deprecated; no new entries.
TempPermissions = ("temp:workspace:released",)

TEMP_POLICIES: list[PermissionPolicy] = [
    P(
        permission="temp:workspace:released",
        availability=(HubAvailability.ALPHA,),
        environments=_DEV_ENVS,
    ),
]

SystemPermissions = (
    "hub:feature:privacy",
    "hub:feature:workspace",
)

SYSTEM_POLICIES: list[PermissionPolicy] = [
    P(
        permission="hub:feature:privacy",
        availability=(HubAvailability.ALPHA,),
        environments=(HubEnvironment.QAEXT,),
    ),
    P(
        permission="hub:feature:workspace",
        availability=(HubAvailability.ALPHA,),
        environments=_DEV_ENVS,
    ),
]


# ---- Legacy alpha gate -------------------------------------------------------

# Gated to alpha orgs regardless of their policy.
# TODO: drop once workspace permissions depend only on hub:feature:workspace.
ALPHA_GATED_PERMISSIONS: frozenset[str] = frozenset(
    {
        "temp:workspace:released",
        "hub:site:workspace",
        "hub:project:workspace",
        "hub:initiative:workspace",
    }
)


HUB_PERMISSION_POLICIES: list[PermissionPolicy] = [
    *SITE_POLICIES,
    *PROJECT_POLICIES,
    *INITIATIVE_POLICIES,
    *DISCUSSION_POLICIES,
    *CONTENT_POLICIES,
    *GROUP_POLICIES,
    *PAGE_POLICIES,
    *TEMPLATE_POLICIES,
    *PLATFORM_POLICIES,
    *TEMP_POLICIES,
    *INITIATIVE_TEMPLATE_POLICIES,
    *SYSTEM_POLICIES,
]

HUB_PERMISSIONS: tuple[str, ...] = (
    SitePermissions
    + ProjectPermissions
    + InitiativePermissions
    + DiscussionPermissions
    + ContentPermissions
    + GroupPermissions
    + PagePermissions
    + TemplatePermissions
    + PlatformPermissions
    + TempPermissions
    + InitiativeTemplatePermissions
    + SystemPermissions
)


__all__ = [
    "ALPHA_GATED_PERMISSIONS",
    "GROUP_DEFAULT_FEATURES",
    "HUB_PERMISSIONS",
    "HUB_PERMISSION_POLICIES",
    "INITIATIVE_DEFAULT_FEATURES",
    "PROJECT_DEFAULT_FEATURES",
    "SITE_DEFAULT_FEATURES",
    "TEMPLATE_DEFAULT_FEATURES",
]
