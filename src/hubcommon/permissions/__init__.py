"""Permission policies and their evaluation for ArcGIS Hub.

Defines:
- PolicyResponse / HubLicense / HubAvailability / HubEnvironment / HubService
- PermissionPolicy, EntityPermissionPolicy, PolicyCheck, PermissionAccessResponse
- PolicyRegistry: validated, constructed-once policy table
- PermissionEngine / check_permission(): the evaluation pipeline
- Per-family default entity feature tables
"""

from .access import SYSTEM_CHECKS, PermissionEngine, check_permission
from .checks import check_assertion, check_entity_policy
from .constants import (
    AssertionType,
    CollaborationType,
    HubAvailability,
    HubEnvironment,
    HubLicense,
    HubService,
    PolicyResponse,
    ServiceStatus,
    get_policy_response_code,
)
from .policy import (
    EntityPermissionPolicy,
    PermissionAccessResponse,
    PermissionPolicy,
    PolicyAssertion,
    PolicyCheck,
)
from .registry import PolicyRegistry, default_registry, get_permission_policy, is_permission
from .rules import (
    GROUP_DEFAULT_FEATURES,
    HUB_PERMISSION_POLICIES,
    HUB_PERMISSIONS,
    INITIATIVE_DEFAULT_FEATURES,
    PROJECT_DEFAULT_FEATURES,
    SITE_DEFAULT_FEATURES,
    TEMPLATE_DEFAULT_FEATURES,
)

__all__ = [
    "AssertionType",
    "CollaborationType",
    "EntityPermissionPolicy",
    "GROUP_DEFAULT_FEATURES",
    "HUB_PERMISSIONS",
    "HUB_PERMISSION_POLICIES",
    "HubAvailability",
    "HubEnvironment",
    "HubLicense",
    "HubService",
    "INITIATIVE_DEFAULT_FEATURES",
    "PROJECT_DEFAULT_FEATURES",
    "PermissionAccessResponse",
    "PermissionEngine",
    "PermissionPolicy",
    "PolicyAssertion",
    "PolicyCheck",
    "PolicyRegistry",
    "PolicyResponse",
    "SITE_DEFAULT_FEATURES",
    "SYSTEM_CHECKS",
    "ServiceStatus",
    "TEMPLATE_DEFAULT_FEATURES",
    "check_assertion",
    "check_entity_policy",
    "check_permission",
    "default_registry",
    "get_permission_policy",
    "get_policy_response_code",
    "is_permission",
]
