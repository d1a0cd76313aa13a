"""Policy check functions.

Every system check has the signature ``(policy, context, entity) -> list[PolicyCheck]``
and returns an empty list when the policy does not declare the requirement
it covers. ``entity`` is always a plain dict with camelCase keys (see
:func:`normalize_entity`).

``check_entity_policy`` evaluates a single entity-level grant instead.
"""

from __future__ import annotations

import numbers
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel

from ..logging import safe_preview
from ..objects import get_prop
from .constants import (
    AssertionType,
    CollaborationType,
    HubAvailability,
    PolicyResponse,
    ServiceStatus,
)
from .policy import EntityPermissionPolicy, PermissionPolicy, PolicyAssertion, PolicyCheck
from .rules import ALPHA_GATED_PERMISSIONS

if TYPE_CHECKING:
    from ..context import ArcGISContext

Entity = Optional[dict[str, Any]]

_MISSING = object()


def normalize_entity(entity: Any) -> Entity:
    """Return ``entity`` as a camelCase dict (or ``None``)."""
    if entity is None:
        return None
    if isinstance(entity, BaseModel):
        return entity.model_dump(by_alias=True)
    if hasattr(entity, "to_json"):
        return entity.to_json()
    return dict(entity)


def _check(name: str, value: Any, response: str) -> PolicyCheck:
    return PolicyCheck(name=name, value=safe_preview(value, limit=120), response=response)


# ---- System checks -----------------------------------------------------------


def check_service_status(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    checks = []
    status_map = context.service_status or {}
    for service in policy.services:
        status = status_map.get(service, ServiceStatus.OFFLINE)
        if status == ServiceStatus.ONLINE:
            response = PolicyResponse.GRANTED
        elif status == ServiceStatus.MAINTENANCE:
            response = PolicyResponse.SYSTEM_MAINTENANCE
        else:
            response = PolicyResponse.SYSTEM_OFFLINE
        checks.append(_check(f"service {service} online", f"serviceStatus: {status}", response))
    return checks


def check_entity_feature(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    features = (entity or {}).get("features") or {}
    if policy.permission not in features:
        return []
    enabled = bool(features[policy.permission])
    return [
        _check(
            "entity feature enabled",
            f"entity.features['{policy.permission}']: {enabled}",
            PolicyResponse.GRANTED if enabled else PolicyResponse.DISABLED_BY_ENTITY_FLAG,
        )
    ]


def check_authentication(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    if not policy.authenticated:
        return []
    return [
        _check(
            "is authenticated",
            context.is_authenticated,
            PolicyResponse.GRANTED if context.is_authenticated else PolicyResponse.NOT_AUTHENTICATED,
        )
    ]


def check_environment(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    if not policy.environments or policy.flag_value is True:
        return []
    ok = context.environment in policy.environments
    return [
        _check(
            f"environment in {', '.join(policy.environments)}",
            context.environment,
            PolicyResponse.GRANTED if ok else PolicyResponse.NOT_IN_ENVIRONMENT,
        )
    ]


def check_availability(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    if policy.flag_value is False:
        return [_check("feature flag", False, PolicyResponse.DISABLED_BY_FEATURE_FLAG)]
    if policy.flag_value is True:
        if policy.availability:
            return [_check("feature flag", True, PolicyResponse.GRANTED)]
        return []
    if not policy.availability:
        return []

    if HubAvailability.ALPHA in policy.availability:
        ok = context.is_alpha_org
        return [
            _check(
                "user in alpha org",
                ok,
                PolicyResponse.GRANTED if ok else PolicyResponse.NOT_ALPHA_ORG,
            )
        ]
    if HubAvailability.BETA in policy.availability:
        # alpha orgs see beta features too
        ok = context.is_beta_org or context.is_alpha_org
        return [
            _check(
                "user in beta org",
                ok,
                PolicyResponse.GRANTED if ok else PolicyResponse.NOT_BETA_ORG,
            )
        ]
    return [_check("general availability", True, PolicyResponse.GRANTED)]


def check_license(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    if not policy.licenses:
        return []
    license_ = context.hub_license
    return [
        _check(
            f"license in {', '.join(policy.licenses)}",
            license_,
            PolicyResponse.GRANTED if license_ in policy.licenses else PolicyResponse.NOT_LICENSED,
        )
    ]


def check_privileges(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    checks = []
    user_privileges = get_prop(context.current_user, "privileges") or []
    for privilege in policy.privileges:
        if not context.is_authenticated:
            response = PolicyResponse.NOT_AUTHENTICATED
        elif privilege in user_privileges:
            response = PolicyResponse.GRANTED
        else:
            response = PolicyResponse.PRIVILEGE_REQUIRED
        checks.append(_check(f"user has {privilege} privilege", privilege in user_privileges, response))
    return checks


def check_owner(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    if not policy.entity_owner:
        return []
    if entity is None:
        return [_check("user owns entity", "entity not provided", PolicyResponse.ENTITY_REQUIRED)]

    username = get_prop(context.current_user, "username")
    owner = entity.get("owner")
    if username and owner == username:
        return [_check("user owns entity", f"owner: {owner}", PolicyResponse.GRANTED)]

    # org admins may act on anything owned within their org
    user_org = get_prop(context.current_user, "orgId")
    is_org_admin = get_prop(context.current_user, "role") == "org_admin"
    if is_org_admin and user_org and user_org == entity.get("orgId"):
        return [_check("user owns entity", f"org admin of {user_org}", PolicyResponse.GRANTED)]

    return [_check("user owns entity", f"owner: {owner}", PolicyResponse.NOT_OWNER)]


def check_edit(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    if not policy.entity_edit:
        return []
    if entity is None:
        return [_check("user can edit entity", "entity not provided", PolicyResponse.ENTITY_REQUIRED)]
    can_edit = bool(entity.get("canEdit"))
    return [
        _check(
            "user can edit entity",
            f"entity.canEdit: {can_edit}",
            PolicyResponse.GRANTED if can_edit else PolicyResponse.NO_EDIT_ACCESS,
        )
    ]


def check_assertions(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    return [check_assertion(assertion, context, entity) for assertion in policy.assertions]


def check_alpha_gating(policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
    if policy.permission not in ALPHA_GATED_PERMISSIONS:
        return []
    ok = context.is_alpha_org
    return [_check("alpha gated", ok, PolicyResponse.GRANTED if ok else PolicyResponse.NOT_ALPHA_ORG)]


# ---- Assertions --------------------------------------------------------------


def resolve_reference(value: Any, context: "ArcGISContext", entity: Entity) -> Any:
    """Resolve ``context:``/``entity:`` references; other values are literals."""
    if isinstance(value, str):
        if value.startswith("context:"):
            return get_prop(context, value[len("context:"):], _MISSING)
        if value.startswith("entity:"):
            return get_prop(entity, value[len("entity:"):], _MISSING)
    return value


def _group_membership(user: Any, group_id: Any) -> Optional[str]:
    for group in get_prop(user, "groups") or []:
        if get_prop(group, "id") == group_id:
            return get_prop(group, "userMembership.memberType") or "member"
    return None


def check_assertion(assertion: PolicyAssertion, context: "ArcGISContext", entity: Entity) -> PolicyCheck:
    """Evaluate one assertion into a check."""
    name = f"assertion {assertion.property} {assertion.type} {assertion.value}"
    prop = resolve_reference(assertion.property, context, entity)
    val = resolve_reference(assertion.value, context, entity)

    if prop is _MISSING:
        return _check(name, "property not found", PolicyResponse.ASSERTION_PROPERTY_NOT_FOUND)
    if val is _MISSING:
        val = None

    kind = assertion.type
    response = PolicyResponse.GRANTED

    if kind in (AssertionType.EQ, AssertionType.NEQ):
        equal = prop == val
        if equal != (kind == AssertionType.EQ):
            response = PolicyResponse.ASSERTION_FAILED

    elif kind in (AssertionType.GT, AssertionType.LT):
        if not (isinstance(prop, numbers.Real) and isinstance(val, numbers.Real)):
            response = PolicyResponse.ASSERTION_REQUIRES_NUMERIC_VALUES
        elif not (prop > val if kind == AssertionType.GT else prop < val):
            response = PolicyResponse.ASSERTION_FAILED

    elif kind in (AssertionType.CONTAINS, AssertionType.CONTAINS_ALL, AssertionType.WITHOUT):
        if not isinstance(prop, (list, tuple)):
            response = PolicyResponse.PROPERTY_NOT_ARRAY
        else:
            wanted = list(val) if isinstance(val, (list, tuple)) else [val]
            if kind == AssertionType.CONTAINS and not any(v in prop for v in wanted):
                response = PolicyResponse.ARRAY_MISSING_REQUIRED_VALUE
            elif kind == AssertionType.CONTAINS_ALL and not all(v in prop for v in wanted):
                response = PolicyResponse.ARRAY_MISSING_REQUIRED_VALUE
            elif kind == AssertionType.WITHOUT and any(v in prop for v in wanted):
                response = PolicyResponse.ARRAY_CONTAINS_INVALID_VALUE

    elif kind == AssertionType.INCLUDED_IN:
        if not isinstance(val, (list, tuple)):
            response = PolicyResponse.PROPERTY_NOT_ARRAY
        elif prop not in val:
            response = PolicyResponse.PROPERTY_MISMATCH

    elif kind in (AssertionType.IS_GROUP_ADMIN, AssertionType.IS_GROUP_MEMBER, AssertionType.IS_GROUP_OWNER):
        member_type = _group_membership(prop, val)
        if kind == AssertionType.IS_GROUP_MEMBER and member_type is None:
            response = PolicyResponse.NOT_GROUP_MEMBER
        elif kind == AssertionType.IS_GROUP_ADMIN and member_type not in ("admin", "owner"):
            response = PolicyResponse.NOT_GROUP_ADMIN
        elif kind == AssertionType.IS_GROUP_OWNER and member_type != "owner":
            response = PolicyResponse.NOT_GROUP_OWNER

    elif kind in (
        AssertionType.STARTS_WITH,
        AssertionType.ENDS_WITH,
        AssertionType.NOT_STARTS_WITH,
        AssertionType.NOT_ENDS_WITH,
    ):
        if not isinstance(prop, str) or not isinstance(val, str):
            response = PolicyResponse.PROPERTY_MISMATCH
        else:
            if kind in (AssertionType.STARTS_WITH, AssertionType.NOT_STARTS_WITH):
                matched = prop.startswith(val)
            else:
                matched = prop.endswith(val)
            if kind.startswith("not-"):
                matched = not matched
            if not matched:
                response = PolicyResponse.ASSERTION_FAILED

    else:
        response = PolicyResponse.ASSERTION_FAILED

    return _check(name, prop, response)


# ---- Entity grants -----------------------------------------------------------


def check_entity_policy(policy: EntityPermissionPolicy, context: "ArcGISContext") -> PolicyCheck:
    """Evaluate one grant stored on an entity."""
    kind = policy.collaboration_type
    target = policy.collaboration_id
    user = context.current_user
    name = f"entity policy {policy.permission} {kind} {target or ''}".rstrip()

    if kind == CollaborationType.ANONYMOUS:
        return _check(name, "anonymous", PolicyResponse.GRANTED)

    if kind == CollaborationType.AUTHENTICATED:
        ok = context.is_authenticated
        return _check(name, ok, PolicyResponse.GRANTED if ok else PolicyResponse.NOT_AUTHENTICATED)

    if not context.is_authenticated:
        return _check(name, "not authenticated", PolicyResponse.NOT_AUTHENTICATED)

    if kind == CollaborationType.USER:
        username = get_prop(user, "username")
        ok = username is not None and username == target
        return _check(name, username, PolicyResponse.GRANTED if ok else PolicyResponse.NOT_USER)

    if kind == CollaborationType.GROUP:
        ok = _group_membership(user, target) is not None
        return _check(name, ok, PolicyResponse.GRANTED if ok else PolicyResponse.NOT_GROUP_MEMBER)

    if kind == CollaborationType.ORG:
        org_id = get_prop(user, "orgId")
        ok = org_id is not None and org_id == target
        return _check(name, org_id, PolicyResponse.GRANTED if ok else PolicyResponse.NOT_ORG_MEMBER)

    return _check(name, f"unknown collaboration type {kind}", PolicyResponse.NOT_GRANTED)


__all__ = [
    "check_alpha_gating",
    "check_assertion",
    "check_assertions",
    "check_authentication",
    "check_availability",
    "check_edit",
    "check_entity_feature",
    "check_entity_policy",
    "check_environment",
    "check_license",
    "check_owner",
    "check_privileges",
    "check_service_status",
    "normalize_entity",
    "resolve_reference",
]
