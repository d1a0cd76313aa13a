"""Tests for permission evaluation."""

from __future__ import annotations

import logging

import pytest
from conftest import make_context, make_portal_self, make_user

from hubcommon.permissions import (
    HUB_PERMISSIONS,
    CollaborationType,
    HubLicense,
    PermissionPolicy,
    PolicyRegistry,
    PolicyResponse,
    check_permission,
    get_policy_response_code,
)
from hubcommon.permissions.access import split_entity_or_options


def _codes(result) -> list[str]:
    return [c.response for c in result.checks]


class TestPolicyResponseCodes:
    """Tests for stable response codes."""

    def test_granted_is_first(self) -> None:
        assert get_policy_response_code("granted") == "PC100"

    def test_invalid_permission_code(self) -> None:
        assert get_policy_response_code("invalid-permission") == "PC116"

    def test_unknown_response_maps_to_not_granted(self) -> None:
        """Unknown responses reuse the not-granted code."""
        assert get_policy_response_code("made-up") == get_policy_response_code("not-granted")


class TestCheckPermissionBasics:
    """Tests for the overall decision."""

    def test_invalid_permission(self, authd_context) -> None:
        """A permission that is not in the registry is never granted."""
        result = check_permission("hub:nope:never", authd_context)
        assert result.access is False
        assert result.response == PolicyResponse.INVALID_PERMISSION
        assert result.code == "PC116"
        assert result.checks == []

    def test_policy_without_requirements_is_granted(self, unauthd_context) -> None:
        registry = PolicyRegistry([PermissionPolicy(permission="app:open")])
        result = check_permission("app:open", unauthd_context, registry=registry)
        assert result.access is True
        assert result.response == PolicyResponse.GRANTED
        assert result.code == "PC100"

    def test_access_mirrors_response(self, authd_context) -> None:
        result = check_permission("hub:site:view", authd_context)
        assert result.access is (result.response == PolicyResponse.GRANTED)

    def test_first_failure_wins(self, unauthd_context) -> None:
        """Authentication runs before licensing, so its failure is reported."""
        registry = PolicyRegistry(
            [
                PermissionPolicy(
                    permission="app:premium",
                    authenticated=True,
                    licenses=(HubLicense.HUB_PREMIUM,),
                )
            ]
        )
        result = check_permission("app:premium", unauthd_context, registry=registry)
        assert result.response == PolicyResponse.NOT_AUTHENTICATED
        # every check is kept for the audit trail
        assert PolicyResponse.NOT_LICENSED in _codes(result)

    def test_every_check_is_recorded(self, authd_context) -> None:
        result = check_permission("hub:project:create", authd_context)
        assert result.access is True
        names = [c.name for c in result.checks]
        assert "dependencies hub:project" in names
        assert "is authenticated" in names
        assert "user has portal:user:createItem privilege" in names


class TestDependencies:
    """Tests for parent permission evaluation."""

    def test_dependency_failure_propagates(self) -> None:
        """hub:project requires premium; a basic org can not edit projects."""
        basic = make_context(portal_self=make_portal_self(portalProperties={"hub": {"enabled": False}}))
        result = check_permission("hub:project:edit", basic, {"canEdit": True})
        assert result.access is False
        assert result.response == PolicyResponse.NOT_LICENSED
        assert result.checks[0].name == "dependencies hub:project"

    def test_view_does_not_need_premium(self, unauthd_context) -> None:
        result = check_permission("hub:project:view", unauthd_context)
        assert result.access is True


class TestSystemChecks:
    """Tests for individual requirements."""

    def test_service_offline(self) -> None:
        ctx = make_context(service_status={"portal": "offline"})
        result = check_permission("hub:site:view", ctx)
        assert result.response == PolicyResponse.SYSTEM_OFFLINE

    def test_service_maintenance(self) -> None:
        ctx = make_context(service_status={"portal": "maintenance"})
        result = check_permission("hub:site", ctx)
        assert result.response == PolicyResponse.SYSTEM_MAINTENANCE

    def test_missing_service_status_is_offline(self) -> None:
        ctx = make_context(service_status={"discussions": "online"})
        result = check_permission("hub:site", ctx)
        assert result.response == PolicyResponse.SYSTEM_OFFLINE

    def test_not_authenticated(self, unauthd_context) -> None:
        result = check_permission("hub:site:edit", unauthd_context, {"canEdit": True})
        assert result.response == PolicyResponse.NOT_AUTHENTICATED

    def test_privilege_required(self) -> None:
        ctx = make_context(user=make_user(privileges=[]))
        result = check_permission("hub:project:create", ctx)
        assert result.response == PolicyResponse.PRIVILEGE_REQUIRED

    def test_edit_requires_entity(self, authd_context) -> None:
        result = check_permission("hub:site:edit", authd_context)
        assert result.response == PolicyResponse.ENTITY_REQUIRED

    def test_edit_access(self, authd_context) -> None:
        assert check_permission("hub:site:edit", authd_context, {"canEdit": True}).access is True
        denied = check_permission("hub:site:edit", authd_context, {"canEdit": False})
        assert denied.response == PolicyResponse.NO_EDIT_ACCESS

    def test_owner(self, authd_context) -> None:
        assert check_permission("hub:project:delete", authd_context, {"owner": "casey"}).access is True
        denied = check_permission("hub:project:delete", authd_context, {"owner": "jordan"})
        assert denied.response == PolicyResponse.NOT_OWNER

    def test_org_admin_counts_as_owner(self) -> None:
        ctx = make_context(user=make_user(role="org_admin"))
        entity = {"owner": "jordan", "orgId": "BRXFAKE"}
        assert check_permission("hub:project:delete", ctx, entity).access is True

    def test_environment(self, authd_context) -> None:
        """Workspace is limited to devext/qaext; production fails the environment check."""
        result = check_permission("hub:feature:workspace", authd_context)
        assert result.response == PolicyResponse.NOT_IN_ENVIRONMENT

    def test_alpha_org_in_devext(self) -> None:
        ctx = make_context(portal_url="https://myorg.mapsdevext.arcgis.com", properties={"alphaOrgs": ["BRXFAKE"]})
        assert ctx.environment == "devext"
        assert check_permission("hub:feature:workspace", ctx).access is True

    def test_not_alpha_org(self) -> None:
        ctx = make_context(portal_url="https://myorg.mapsqa.arcgis.com")
        result = check_permission("hub:feature:privacy", ctx)
        assert result.response == PolicyResponse.NOT_ALPHA_ORG


class TestFlags:
    """Tests for feature flags and entity features."""

    def test_feature_flag_disables(self) -> None:
        ctx = make_context(feature_flags={"hub:site:view": False})
        result = check_permission("hub:site:view", ctx)
        assert result.response == PolicyResponse.DISABLED_BY_FEATURE_FLAG

    def test_feature_flag_enables_outside_environment(self) -> None:
        """A true flag bypasses the environment and availability gates."""
        ctx = make_context(feature_flags={"hub:feature:workspace": True})
        assert check_permission("hub:feature:workspace", ctx).access is True

    def test_entity_feature_disabled(self, authd_context) -> None:
        entity = {"features": {"hub:project:events": False}}
        result = check_permission("hub:project:events", authd_context, entity)
        assert result.response == PolicyResponse.DISABLED_BY_ENTITY_FLAG

    def test_entity_feature_enabled(self, authd_context) -> None:
        entity = {"features": {"hub:project:events": True}}
        assert check_permission("hub:project:events", authd_context, entity).access is True


class TestEntityGrants:
    """Tests for grants stored on an entity."""

    def _grant(self, kind: str, target: str | None, permission: str = "hub:project:view") -> dict:
        return {"permission": permission, "collaborationType": kind, "collaborationId": target}

    def test_matching_user_grant(self, authd_context) -> None:
        entity = {"permissions": [self._grant(CollaborationType.USER, "casey")]}
        assert check_permission("hub:project:view", authd_context, entity).access is True

    def test_no_matching_grant(self, authd_context) -> None:
        entity = {"permissions": [self._grant(CollaborationType.GROUP, "g1")]}
        result = check_permission("hub:project:view", authd_context, entity)
        assert result.response == PolicyResponse.NOT_GRANTED
        assert _codes(result)[-1] == PolicyResponse.NOT_GROUP_MEMBER

    def test_any_grant_suffices(self) -> None:
        ctx = make_context(user=make_user(groups=[{"id": "g2"}]))
        entity = {
            "permissions": [
                self._grant(CollaborationType.GROUP, "g1"),
                self._grant(CollaborationType.GROUP, "g2"),
            ]
        }
        assert check_permission("hub:project:view", ctx, entity).access is True

    def test_grant_never_overrides_system_denial(self, authd_context) -> None:
        """A grant to the current user can not fix missing edit rights."""
        entity = {
            "canEdit": False,
            "permissions": [self._grant(CollaborationType.USER, "casey", "hub:project:edit")],
        }
        result = check_permission("hub:project:edit", authd_context, entity)
        assert result.access is False
        assert result.response == PolicyResponse.NO_EDIT_ACCESS

    def test_grants_for_other_permissions_are_ignored(self, authd_context) -> None:
        entity = {"permissions": [self._grant(CollaborationType.GROUP, "g1", "hub:project:edit")]}
        assert check_permission("hub:project:view", authd_context, entity).access is True

    def test_org_grant(self, authd_context) -> None:
        entity = {"permissions": [self._grant(CollaborationType.ORG, "BRXFAKE")]}
        assert check_permission("hub:project:view", authd_context, entity).access is True

    def test_anonymous_grant(self, unauthd_context) -> None:
        entity = {"permissions": [self._grant(CollaborationType.ANONYMOUS, None)]}
        assert check_permission("hub:project:view", unauthd_context, entity).access is True

    def test_authenticated_grant_needs_session(self, unauthd_context) -> None:
        entity = {"permissions": [self._grant(CollaborationType.AUTHENTICATED, None)]}
        result = check_permission("hub:project:view", unauthd_context, entity)
        assert result.response == PolicyResponse.NOT_GRANTED


class TestLabels:
    """Tests for the ``{"entity", "label"}`` form."""

    def test_label_is_logged_on_denial(self, unauthd_context, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="hubcommon.permissions.access"):
            result = check_permission(
                "hub:site:edit",
                unauthd_context,
                {"entity": {"canEdit": True}, "label": "site-editor"},
            )
        assert result.access is False
        record = caplog.records[-1]
        assert record.label == "site-editor"
        assert record.permission == "hub:site:edit"

    def test_options_entity_is_used(self, authd_context) -> None:
        result = check_permission("hub:site:edit", authd_context, {"entity": {"canEdit": True}, "label": "x"})
        assert result.access is True

    def test_options_entity_without_label(self, authd_context) -> None:
        result = check_permission("hub:site:edit", authd_context, {"entity": {"canEdit": True}})
        assert result.access is True

    def test_split_entity_or_options(self) -> None:
        entity = {"canEdit": True, "owner": "casey"}
        assert split_entity_or_options({"entity": entity}) == (entity, "")
        assert split_entity_or_options({"label": "x"}) == (None, "x")
        assert split_entity_or_options({"entity": entity, "label": "x"}) == (entity, "x")
        assert split_entity_or_options(entity) == (entity, "")
        assert split_entity_or_options(None) == (None, "")

    def test_granted_is_not_logged(self, authd_context, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="hubcommon.permissions.access"):
            check_permission("hub:site:view", authd_context)
        assert caplog.records == []


class TestPermissionTables:
    """Tests for the static Hub permission tables."""

    def test_permission_format(self) -> None:
        """Every permission is colon separated."""
        for permission in HUB_PERMISSIONS:
            assert ":" in permission, permission

    def test_unique_permissions(self) -> None:
        assert len(HUB_PERMISSIONS) == len(set(HUB_PERMISSIONS))

    @pytest.mark.parametrize("permission", HUB_PERMISSIONS)
    def test_every_permission_evaluates(self, permission: str, authd_context) -> None:
        result = check_permission(permission, authd_context, {"owner": "casey", "canEdit": True, "id": "g1"})
        assert result.response != PolicyResponse.INVALID_PERMISSION
