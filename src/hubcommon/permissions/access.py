"""Permission evaluation.

``check_permission()`` is the public entry point. It evaluates a permission
against the system policy (every requirement must pass) and, when an entity
is supplied, against the grants stored on the entity (any one may pass).

Entity grants never override a system-level denial: they can only turn an
otherwise granted result into ``not-granted`` when none of them match.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from .checks import (
    Entity,
    check_alpha_gating,
    check_assertions,
    check_authentication,
    check_availability,
    check_edit,
    check_entity_feature,
    check_entity_policy,
    check_environment,
    check_license,
    check_owner,
    check_privileges,
    check_service_status,
    normalize_entity,
)
from .constants import PolicyResponse
from .policy import EntityPermissionPolicy, PermissionAccessResponse, PermissionPolicy, PolicyCheck
from .registry import PolicyRegistry, default_registry

if TYPE_CHECKING:
    from ..context import ArcGISContext

logger = logging.getLogger(__name__)

CheckFn = Callable[[PermissionPolicy, "ArcGISContext", Entity], list[PolicyCheck]]

# Pipeline after the parent check, in evaluation order.
SYSTEM_CHECKS: tuple[CheckFn, ...] = (
    check_service_status,
    check_entity_feature,
    check_authentication,
    check_environment,
    check_availability,
    check_license,
    check_privileges,
    check_owner,
    check_edit,
    check_assertions,
    check_alpha_gating,
)

_OPTION_KEYS = frozenset({"entity", "label"})


def split_entity_or_options(entity_or_options: Any) -> tuple[Any, str]:
    """Return ``(entity, label)`` from either an entity or ``{"entity", "label"}``."""
    if isinstance(entity_or_options, Mapping) and entity_or_options and set(entity_or_options) <= _OPTION_KEYS:
        return entity_or_options.get("entity"), entity_or_options.get("label") or ""
    return entity_or_options, ""


class PermissionEngine:
    """Evaluates permissions against a :class:`PolicyRegistry`.

    The pipeline is ``check_parents`` followed by :data:`SYSTEM_CHECKS`;
    each stage is a plain function ``(policy, context, entity) -> list[PolicyCheck]``.
    """

    def __init__(self, registry: PolicyRegistry) -> None:
        self.registry = registry
        self.pipeline: tuple[CheckFn, ...] = (self.check_parents,) + SYSTEM_CHECKS

    def check_parents(self, policy: PermissionPolicy, context: "ArcGISContext", entity: Entity) -> list[PolicyCheck]:
        """Evaluate each dependency as a full permission check (without logging)."""
        checks = []
        for dep in policy.dependencies:
            result = self._evaluate(dep, context, entity)
            checks.append(
                PolicyCheck(
                    name=f"dependencies {dep}",
                    value=result.response,
                    code=result.code,
                    response=result.response,
                )
            )
        return checks

    def _evaluate(self, permission: str, context: "ArcGISContext", entity: Entity) -> PermissionAccessResponse:
        response = PermissionAccessResponse(policy=permission)

        policy = self.registry.get(permission, context.feature_flags)
        if policy is None:
            response.deny(PolicyResponse.INVALID_PERMISSION)
            return response

        checks: list[PolicyCheck] = []
        for fn in self.pipeline:
            checks.extend(fn(policy, context, entity))

        # first failure wins; every check is kept for the audit trail
        for check in checks:
            if not check.granted:
                response.deny(check.response, check.code)
                break
        response.checks = checks

        if entity is not None:
            grants = [
                EntityPermissionPolicy.model_validate(p)
                for p in entity.get("permissions") or []
                if _grant_permission(p) == permission
            ]
            entity_checks = [check_entity_policy(grant, context) for grant in grants]
            granted = any(c.granted for c in entity_checks)
            if entity_checks and not granted and response.access:
                response.deny(PolicyResponse.NOT_GRANTED)
            response.checks = checks + entity_checks

        return response

    def check(
        self,
        permission: str,
        context: "ArcGISContext",
        entity_or_options: Any = None,
    ) -> PermissionAccessResponse:
        entity, label = split_entity_or_options(entity_or_options)
        result = self._evaluate(permission, context, normalize_entity(entity))
        if not result.access:
            logger.info(
                "checkPermission: %s %s : %s",
                label,
                permission,
                result.response,
                extra={
                    "label": label,
                    "permission": permission,
                    "checks": [c.model_dump() for c in result.checks],
                },
            )
        return result


def _grant_permission(policy: Any) -> Optional[str]:
    if isinstance(policy, EntityPermissionPolicy):
        return policy.permission
    return policy.get("permission") if isinstance(policy, Mapping) else None


@lru_cache(maxsize=1)
def _default_engine() -> PermissionEngine:
    return PermissionEngine(default_registry())


def check_permission(
    permission: str,
    context: "ArcGISContext",
    entity_or_options: Any = None,
    *,
    registry: Optional[PolicyRegistry] = None,
) -> PermissionAccessResponse:
    """Check ``permission`` for the current user of ``context``.

    Args:
        permission: Permission string, e.g. ``"hub:project:edit"``.
        context: The ambient :class:`ArcGISContext`.
        entity_or_options: An entity (dict, model or entity instance), or
            ``{"entity": ..., "label": "..."}``. The label only appears in logs.
        registry: Policy registry to evaluate against (default: Hub tables).

    Returns:
        A :class:`PermissionAccessResponse` with ``access``, the first failing
        ``response`` (or ``"granted"``) and every check that was run.

    Example::

        result = check_permission("hub:project:edit", context, project)
        if not result.access:
            print(result.response)  # e.g. "no-edit-access"
    """
    engine = _default_engine() if registry is None else PermissionEngine(registry)
    return engine.check(permission, context, entity_or_options)


__all__ = [
    "PermissionEngine",
    "SYSTEM_CHECKS",
    "check_permission",
    "split_entity_or_options",
]
