"""Permission-related constants for hubcommon.

Provides:
- ``PolicyResponse``: every response a policy check can produce, in code order.
- ``HubLicense``, ``HubAvailability``, ``HubEnvironment``, ``HubService``:
  the value sets policies are written against.
- ``AssertionType``: comparison operations for policy assertions.
- ``CollaborationType``: targets of entity-level grants.
- ``get_policy_response_code()``: stable ``PC1xx`` code for a response.
"""

from __future__ import annotations


class PolicyResponse:
    """Responses produced by permission checks.

    The position in ``ALL`` defines the stable response code, so new
    responses must only ever be appended.
    """

    GRANTED = "granted"
    ORG_MEMBER = "org-member"
    NOT_ORG_MEMBER = "not-org-member"
    GROUP_MEMBER = "group-member"
    NOT_GROUP_MEMBER = "not-group-member"
    GROUP_ADMIN = "group-admin"
    NOT_GROUP_ADMIN = "not-group-admin"
    IS_USER = "is-user"
    NOT_USER = "not-user"
    NOT_OWNER = "not-owner"
    NOT_LICENSED = "not-licensed"
    NOT_LICENSED_AVAILABLE = "not-licensed-available"
    NOT_AVAILABLE = "not-available"
    NOT_GRANTED = "not-granted"
    NO_EDIT_ACCESS = "no-edit-access"
    EDIT_ACCESS = "edit-access"
    INVALID_PERMISSION = "invalid-permission"
    PRIVILEGE_REQUIRED = "privilege-required"
    SYSTEM_OFFLINE = "system-offline"
    SYSTEM_MAINTENANCE = "system-maintenance"
    ENTITY_REQUIRED = "entity-required"
    NOT_AUTHENTICATED = "not-authenticated"
    NOT_ALPHA_ORG = "not-alpha-org"
    NOT_BETA_ORG = "not-beta-org"
    NOT_IN_ENVIRONMENT = "not-in-environment"
    DISABLED_BY_FEATURE_FLAG = "disabled-by-feature-flag"
    DISABLED_BY_ENTITY_FLAG = "disabled-by-entity-flag"
    ASSERTION_PROPERTY_NOT_FOUND = "assertion-property-not-found"
    ASSERTION_FAILED = "assertion-failed"
    ASSERTION_REQUIRES_NUMERIC_VALUES = "assertion-requires-numeric-values"
    ARRAY_CONTAINS_INVALID_VALUE = "array-contains-invalid-value"
    ARRAY_MISSING_REQUIRED_VALUE = "array-missing-required-value"
    PROPERTY_MISSING = "property-missing"
    PROPERTY_NOT_ARRAY = "property-not-array"
    PROPERTY_MISMATCH = "property-mismatch"
    NOT_GROUP_OWNER = "not-group-owner"

    ALL = (
        GRANTED,
        ORG_MEMBER,
        NOT_ORG_MEMBER,
        GROUP_MEMBER,
        NOT_GROUP_MEMBER,
        GROUP_ADMIN,
        NOT_GROUP_ADMIN,
        IS_USER,
        NOT_USER,
        NOT_OWNER,
        NOT_LICENSED,
        NOT_LICENSED_AVAILABLE,
        NOT_AVAILABLE,
        NOT_GRANTED,
        NO_EDIT_ACCESS,
        EDIT_ACCESS,
        INVALID_PERMISSION,
        PRIVILEGE_REQUIRED,
        SYSTEM_OFFLINE,
        SYSTEM_MAINTENANCE,
        ENTITY_REQUIRED,
        NOT_AUTHENTICATED,
        NOT_ALPHA_ORG,
        NOT_BETA_ORG,
        NOT_IN_ENVIRONMENT,
        DISABLED_BY_FEATURE_FLAG,
        DISABLED_BY_ENTITY_FLAG,
        ASSERTION_PROPERTY_NOT_FOUND,
        ASSERTION_FAILED,
        ASSERTION_REQUIRES_NUMERIC_VALUES,
        ARRAY_CONTAINS_INVALID_VALUE,
        ARRAY_MISSING_REQUIRED_VALUE,
        PROPERTY_MISSING,
        PROPERTY_NOT_ARRAY,
        PROPERTY_MISMATCH,
        NOT_GROUP_OWNER,
    )


def get_policy_response_code(response: str) -> str:
    """Return the stable code for a policy response.

    Example::

        get_policy_response_code("granted")             # "PC100"
        get_policy_response_code("invalid-permission")  # "PC116"
    """
    try:
        index = PolicyResponse.ALL.index(response)
    except ValueError:
        index = PolicyResponse.ALL.index(PolicyResponse.NOT_GRANTED)
    return f"PC{100 + index}"


class HubLicense:
    """License tier of the current user's org."""

    HUB_BASIC = "hub-basic"
    HUB_PREMIUM = "hub-premium"
    ENTERPRISE_SITES = "enterprise-sites"

    ALL = (HUB_BASIC, HUB_PREMIUM, ENTERPRISE_SITES)


class HubAvailability:
    """Release stage a permission is gated to."""

    ALPHA = "alpha"
    BETA = "beta"
    GENERAL = "general"

    ALL = (ALPHA, BETA, GENERAL)


class HubEnvironment:
    """Run-time environment, derived from the portal url."""

    DEVEXT = "devext"
    QAEXT = "qaext"
    PRODUCTION = "production"
    ENTERPRISE = "enterprise"
    ENTERPRISE_K8S = "enterprise-k8s"

    ALL = (DEVEXT, QAEXT, PRODUCTION, ENTERPRISE, ENTERPRISE_K8S)


class HubService:
    """Backend services whose status gates permissions."""

    PORTAL = "portal"
    DISCUSSIONS = "discussions"
    EVENTS = "events"
    METRICS = "metrics"
    NOTIFICATIONS = "notifications"
    HUB_SEARCH = "hub-search"
    DOMAINS = "domains"

    ALL = (PORTAL, DISCUSSIONS, EVENTS, METRICS, NOTIFICATIONS, HUB_SEARCH, DOMAINS)


class ServiceStatus:
    ONLINE = "online"
    OFFLINE = "offline"
    MAINTENANCE = "maintenance"


class AssertionType:
    """Comparison performed by a policy assertion."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    LT = "lt"
    CONTAINS = "contains"
    CONTAINS_ALL = "contains-all"
    WITHOUT = "without"
    INCLUDED_IN = "included-in"
    IS_GROUP_ADMIN = "is-group-admin"
    IS_GROUP_MEMBER = "is-group-member"
    IS_GROUP_OWNER = "is-group-owner"
    STARTS_WITH = "starts-with"
    ENDS_WITH = "ends-with"
    NOT_STARTS_WITH = "not-starts-with"
    NOT_ENDS_WITH = "not-ends-with"

    ALL = (
        EQ,
        NEQ,
        GT,
        LT,
        CONTAINS,
        CONTAINS_ALL,
        WITHOUT,
        INCLUDED_IN,
        IS_GROUP_ADMIN,
        IS_GROUP_MEMBER,
        IS_GROUP_OWNER,
        STARTS_WITH,
        ENDS_WITH,
        NOT_STARTS_WITH,
        NOT_ENDS_WITH,
    )


class CollaborationType:
    """Target of an entity-level permission grant."""

    USER = "user"
    GROUP = "group"
    ORG = "org"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"

    ALL = (USER, GROUP, ORG, AUTHENTICATED, ANONYMOUS)


__all__ = [
    "AssertionType",
    "CollaborationType",
    "HubAvailability",
    "HubEnvironment",
    "HubLicense",
    "HubService",
    "PolicyResponse",
    "ServiceStatus",
    "get_policy_response_code",
]
