"""Permission policy models.

Provides:
- ``PolicyAssertion``: a single property comparison inside a policy.
- ``PermissionPolicy``: the system-level rule bound to a permission.
- ``EntityPermissionPolicy``: a grant stored on an entity's ``permissions``.
- ``PolicyCheck``: one evaluated rule fragment.
- ``PermissionAccessResponse``: the aggregate decision plus its audit trail.

All models accept camelCase keys (as stored in item data) and snake_case
field names.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from .constants import PolicyResponse, get_policy_response_code

_CAMEL = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class PolicyAssertion(BaseModel):
    """Compare ``property`` against ``value`` using ``type``.

    Either side may reference the context (``"context:currentUser.username"``)
    or the entity (``"entity:owner"``); anything else is a literal.
    """

    property: str
    type: str
    value: Any = None

    model_config = {**_CAMEL, "frozen": True}


class PermissionPolicy(BaseModel):
    """System-level policy for a permission.

    All requirements must be met for the permission to be granted.
    ``flag_value`` is never declared in the static tables; it is applied
    from the context's feature flags when the policy is resolved.
    """

    permission: str
    dependencies: tuple[str, ...] = ()
    services: tuple[str, ...] = ()
    authenticated: Optional[bool] = None
    licenses: tuple[str, ...] = ()
    availability: tuple[str, ...] = ()
    environments: tuple[str, ...] = ()
    privileges: tuple[str, ...] = ()
    entity_configurable: bool = False
    entity_edit: bool = False
    entity_owner: bool = False
    assertions: tuple[PolicyAssertion, ...] = ()
    flag_value: Optional[bool] = None

    model_config = {**_CAMEL, "frozen": True}


class EntityPermissionPolicy(BaseModel):
    """Grant of ``permission`` to a collaborator, stored on an entity."""

    id: Optional[str] = None
    permission: str
    collaboration_type: str
    collaboration_id: Optional[str] = None

    model_config = _CAMEL


class PolicyCheck(BaseModel):
    """Result of evaluating one rule fragment."""

    name: str
    value: str = ""
    code: str = ""
    response: str = PolicyResponse.GRANTED

    model_config = _CAMEL

    @model_validator(mode="after")
    def _fill_code(self) -> "PolicyCheck":
        if not self.code:
            self.code = get_policy_response_code(self.response)
        return self

    @property
    def granted(self) -> bool:
        return self.response == PolicyResponse.GRANTED


class PermissionAccessResponse(BaseModel):
    """Aggregate decision for one permission check.

    ``access`` is always ``response == "granted"``.
    """

    policy: str
    response: str = PolicyResponse.GRANTED
    code: str = ""
    checks: list[PolicyCheck] = Field(default_factory=list)

    model_config = _CAMEL

    @model_validator(mode="after")
    def _fill_code(self) -> "PermissionAccessResponse":
        if not self.code:
            self.code = get_policy_response_code(self.response)
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def access(self) -> bool:
        return self.response == PolicyResponse.GRANTED

    def deny(self, response: str, code: str | None = None) -> None:
        self.response = response
        self.code = code or get_policy_response_code(response)


__all__ = [
    "EntityPermissionPolicy",
    "PermissionAccessResponse",
    "PermissionPolicy",
    "PolicyAssertion",
    "PolicyCheck",
]
