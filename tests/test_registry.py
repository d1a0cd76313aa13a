"""Tests for PolicyRegistry validation and lookup."""

from __future__ import annotations

import pytest

from hubcommon import ArcGISContext
from hubcommon.exceptions import ConfigurationError
from hubcommon.permissions import (
    HUB_PERMISSIONS,
    SYSTEM_CHECKS,
    PermissionEngine,
    PolicyResponse,
    PermissionPolicy,
    PolicyRegistry,
    default_registry,
    get_permission_policy,
    is_permission,
)

P = PermissionPolicy


class TestPolicyRegistry:
    """Tests for registry construction."""

    def test_duplicate_permission(self) -> None:
        with pytest.raises(ConfigurationError, match="defined more than once"):
            PolicyRegistry([P(permission="a"), P(permission="a")])

    def test_unknown_dependency(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown permission 'b'"):
            PolicyRegistry([P(permission="a", dependencies=("b",))])

    def test_dependency_cycle(self) -> None:
        with pytest.raises(ConfigurationError, match="Dependency cycle"):
            PolicyRegistry(
                [
                    P(permission="a", dependencies=("b",)),
                    P(permission="b", dependencies=("c",)),
                    P(permission="c", dependencies=("a",)),
                ]
            )

    def test_self_dependency(self) -> None:
        with pytest.raises(ConfigurationError):
            PolicyRegistry([P(permission="a", dependencies=("a",))])

    def test_shared_dependency_is_not_a_cycle(self) -> None:
        registry = PolicyRegistry(
            [
                P(permission="root"),
                P(permission="left", dependencies=("root",)),
                P(permission="right", dependencies=("root",)),
                P(permission="leaf", dependencies=("left", "right")),
            ]
        )
        assert len(registry) == 4
        assert "leaf" in registry

    def test_get_unknown(self) -> None:
        registry = PolicyRegistry([P(permission="a")])
        assert registry.get("b") is None
        assert registry.is_permission("b") is False
        assert registry.is_permission(42) is False


class TestFeatureFlags:
    """Tests for flag application on lookup."""

    def test_flag_applied_to_copy(self) -> None:
        registry = PolicyRegistry([P(permission="a")])
        flagged = registry.get("a", {"a": False})
        assert flagged is not None
        assert flagged.flag_value is False
        assert registry.get("a").flag_value is None

    def test_flag_for_other_permission_ignored(self) -> None:
        registry = PolicyRegistry([P(permission="a")])
        assert registry.get("a", {"b": True}).flag_value is None

    def test_policies_are_frozen(self) -> None:
        policy = P(permission="a")
        with pytest.raises(Exception):
            policy.permission = "b"  # type: ignore[misc]


class TestDefaultRegistry:
    """Tests for the built-in Hub tables."""

    def test_built_once(self) -> None:
        assert default_registry() is default_registry()

    def test_contains_every_hub_permission(self) -> None:
        registry = default_registry()
        assert set(registry.permissions) == set(HUB_PERMISSIONS)

    def test_module_helpers(self) -> None:
        assert is_permission("hub:project:edit") is True
        assert is_permission("hub:project:fly") is False
        policy = get_permission_policy("hub:project:edit")
        assert policy is not None
        assert policy.dependencies == ("hub:project",)
        assert policy.entity_edit is True

    def test_accepts_camel_case(self) -> None:
        policy = PermissionPolicy.model_validate(
            {"permission": "x", "entityEdit": True, "entityOwner": True}
        )
        assert policy.entity_edit is True
        assert policy.entity_owner is True


class TestPermissionEngine:
    """Tests for an engine bound to its own registry."""

    def _engine(self) -> PermissionEngine:
        return PermissionEngine(
            PolicyRegistry([P(permission="a"), P(permission="b", dependencies=("a",), authenticated=True)])
        )

    def test_pipeline_order(self) -> None:
        engine = self._engine()
        assert engine.pipeline[0] == engine.check_parents
        assert engine.pipeline[1:] == SYSTEM_CHECKS

    def test_parents_are_recorded(self) -> None:
        result = self._engine().check("b", ArcGISContext())
        assert result.response == PolicyResponse.NOT_AUTHENTICATED
        parent = result.checks[0]
        assert parent.name == "dependencies a"
        assert parent.response == PolicyResponse.GRANTED

    def test_registry_is_isolated(self) -> None:
        result = self._engine().check("hub:project:edit", ArcGISContext())
        assert result.response == PolicyResponse.INVALID_PERMISSION
