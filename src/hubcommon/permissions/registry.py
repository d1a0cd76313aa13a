"""Policy registry: the validated, constructed-once set of permission policies."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, Mapping, Optional

from ..exceptions import ConfigurationError
from .policy import PermissionPolicy
from .rules import HUB_PERMISSION_POLICIES

logger = logging.getLogger(__name__)


class PolicyRegistry:
    """Immutable lookup of permission -> system policy.

    Construction validates the table:
    - a permission may only be defined once
    - every dependency must be a defined permission
    - dependencies may not form a cycle

    Any violation raises :class:`ConfigurationError`.

    Example::

        registry = PolicyRegistry([
            PermissionPolicy(permission="app:feature"),
            PermissionPolicy(permission="app:feature:edit", dependencies=("app:feature",)),
        ])
        registry.get("app:feature:edit").dependencies  # ("app:feature",)
    """

    __slots__ = ("_policies",)

    def __init__(self, policies: Iterable[PermissionPolicy]) -> None:
        table: dict[str, PermissionPolicy] = {}
        for policy in policies:
            if policy.permission in table:
                raise ConfigurationError(
                    "PolicyRegistry",
                    f"Permission '{policy.permission}' is defined more than once",
                )
            table[policy.permission] = policy
        self._policies = table
        self._validate_dependencies()

    def _validate_dependencies(self) -> None:
        for policy in self._policies.values():
            for dep in policy.dependencies:
                if dep not in self._policies:
                    raise ConfigurationError(
                        "PolicyRegistry",
                        f"Permission '{policy.permission}' depends on unknown permission '{dep}'",
                    )

        # iterative DFS, 1 = on the stack, 2 = done
        state: dict[str, int] = {}
        for root in self._policies:
            if state.get(root) == 2:
                continue
            stack: list[tuple[str, Iterable[str]]] = [(root, iter(self._policies[root].dependencies))]
            state[root] = 1
            while stack:
                node, deps = stack[-1]
                for dep in deps:
                    if state.get(dep) == 1:
                        raise ConfigurationError(
                            "PolicyRegistry",
                            f"Dependency cycle detected: '{node}' -> '{dep}'",
                        )
                    if state.get(dep) is None:
                        state[dep] = 1
                        stack.append((dep, iter(self._policies[dep].dependencies)))
                        break
                else:
                    state[node] = 2
                    stack.pop()

    @property
    def permissions(self) -> tuple[str, ...]:
        return tuple(self._policies)

    def is_permission(self, value: object) -> bool:
        return isinstance(value, str) and value in self._policies

    def get(
        self,
        permission: str,
        feature_flags: Optional[Mapping[str, bool]] = None,
    ) -> Optional[PermissionPolicy]:
        """Return the policy for ``permission``, or ``None`` if unknown.

        A feature flag for the permission is applied as ``flag_value`` on
        a copy; the stored policy is never modified.
        """
        policy = self._policies.get(permission)
        if policy is None:
            return None
        if feature_flags and permission in feature_flags:
            return policy.model_copy(update={"flag_value": bool(feature_flags[permission])})
        return policy

    def __contains__(self, permission: object) -> bool:
        return self.is_permission(permission)

    def __len__(self) -> int:
        return len(self._policies)

    def __repr__(self) -> str:
        return f"PolicyRegistry(permissions={len(self._policies)})"


@lru_cache(maxsize=1)
def default_registry() -> PolicyRegistry:
    """The registry built from the static Hub policy tables (built once)."""
    registry = PolicyRegistry(HUB_PERMISSION_POLICIES)
    logger.debug("Built default policy registry with %d permissions", len(registry))
    return registry


def is_permission(value: object) -> bool:
    """Is ``value`` a permission defined in the default registry?"""
    return default_registry().is_permission(value)


def get_permission_policy(permission: str) -> Optional[PermissionPolicy]:
    """Return the default registry's policy for ``permission``."""
    return default_registry().get(permission)


__all__ = [
    "PolicyRegistry",
    "default_registry",
    "get_permission_policy",
    "is_permission",
]
