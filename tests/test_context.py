"""Tests for ArcGISContext."""

from __future__ import annotations

import httpx
from conftest import ORG_ID, make_context, make_portal_self

from hubcommon import ArcGISContext, HubConfig
from hubcommon.context import get_environment_from_portal_url
from hubcommon.permissions import HubEnvironment, HubLicense


class TestUnauthenticated:
    """Tests for an anonymous context."""

    def test_defaults(self) -> None:
        context = ArcGISContext()
        assert context.is_authenticated is False
        assert context.portal_url == "https://www.arcgis.com"
        assert context.sharing_api_url == "https://www.arcgis.com/sharing/rest"
        assert context.hub_url == "https://hub.arcgis.com"
        assert context.hub_home_url == "https://hub.arcgis.com"
        assert context.environment == HubEnvironment.PRODUCTION
        assert context.is_portal is False
        assert context.hub_license == HubLicense.HUB_BASIC
        assert context.current_user is None

    def test_service_urls(self) -> None:
        context = ArcGISContext(portal_url="https://www.qaext.arcgis.com")
        assert context.hub_url == "https://hubqa.arcgis.com"
        assert context.hub_search_service_url == "https://hubqa.arcgis.com/api/search/v1"
        assert context.discussions_service_url == "https://hubqa.arcgis.com/api/discussions/v1"
        assert context.domain_service_url == "https://hubqa.arcgis.com/api/v3/domains"

    def test_enterprise(self) -> None:
        context = ArcGISContext(portal_url="https://gis.city.gov/portal/")
        assert context.is_portal is True
        assert context.environment == HubEnvironment.ENTERPRISE
        assert context.hub_url is None
        assert context.hub_home_url is None
        assert context.hub_search_service_url is None
        assert context.hub_license == HubLicense.ENTERPRISE_SITES

    def test_request_options_have_no_token(self) -> None:
        options = ArcGISContext().request_options
        assert options.token is None
        assert options.portal == "https://www.arcgis.com/sharing/rest"


class TestAuthenticated:
    """Tests for a signed-in context."""

    def test_org_urls(self, authd_context) -> None:
        assert authd_context.is_authenticated is True
        assert authd_context.portal_url == "https://fake-org.maps.arcgis.com"
        assert authd_context.sharing_api_url == "https://fake-org.maps.arcgis.com/sharing/rest"
        assert authd_context.hub_home_url == "https://fake-org.hub.arcgis.com"

    def test_license(self, authd_context) -> None:
        assert authd_context.hub_enabled is True
        assert authd_context.hub_license == HubLicense.HUB_PREMIUM
        basic = make_context(portal_self=make_portal_self(portalProperties={}))
        assert basic.hub_license == HubLicense.HUB_BASIC

    def test_enterprise_portal_hostname(self) -> None:
        context = make_context(
            portal_url="https://gis.city.gov/portal",
            portal_self=make_portal_self(isPortal=True, urlKey=None, portalHostname="gis.city.gov/portal"),
        )
        assert context.is_portal is True
        assert context.portal_url == "https://gis.city.gov/portal"
        assert context.hub_license == HubLicense.ENTERPRISE_SITES

    def test_alpha_and_beta(self) -> None:
        context = make_context(properties={"alphaOrgs": [ORG_ID], "betaOrgs": []})
        assert context.is_alpha_org is True
        assert context.is_beta_org is False
        assert make_context().is_alpha_org is False

    def test_community_org(self) -> None:
        portal_self = make_portal_self(
            portalProperties={"hub": {"enabled": True, "settings": {"communityOrg": {"orgId": "COMM"}}}}
        )
        assert make_context(portal_self=portal_self).community_org_id == "COMM"

    def test_request_options(self) -> None:
        client = httpx.AsyncClient()
        context = make_context(http_client=client, timeout=5.0)
        options = context.request_options
        assert options.token == "FAKE-TOKEN"
        assert options.http_client is client
        assert options.timeout == 5.0
        assert options.portal_home == "https://fake-org.maps.arcgis.com"

        hub_options = context.hub_request_options
        assert hub_options.is_portal is False
        assert hub_options.hub_api_url == "https://hub.arcgis.com"
        assert hub_options.portal_self["id"] == ORG_ID
        assert "http_client" not in hub_options.model_dump()

    def test_all_services_online_by_default(self, authd_context) -> None:
        assert set(authd_context.service_status.values()) == {"online"}


class TestEnvironment:
    """Tests for environment detection."""

    def test_from_portal_url(self) -> None:
        assert get_environment_from_portal_url("https://org.mapsdevext.arcgis.com") == HubEnvironment.DEVEXT
        assert get_environment_from_portal_url("https://org.mapsqa.arcgis.com") == HubEnvironment.QAEXT
        assert get_environment_from_portal_url("https://org.maps.arcgis.com") == HubEnvironment.PRODUCTION
        assert get_environment_from_portal_url("https://gis.city.gov/portal") == HubEnvironment.ENTERPRISE


class TestFromConfig:
    """Tests for building a context from HubConfig."""

    def test_defaults_from_config(self) -> None:
        config = HubConfig(
            portal_url="https://org.mapsqa.arcgis.com",
            hub_url="https://hubqa.arcgis.com",
            request_timeout=3.0,
            alpha_orgs=["A1"],
        )
        context = ArcGISContext.from_config(config)
        assert context.portal_url == "https://org.mapsqa.arcgis.com"
        assert context.hub_url == "https://hubqa.arcgis.com"
        assert context.environment == HubEnvironment.QAEXT
        assert context.request_options.timeout == 3.0
        assert context.properties["alphaOrgs"] == ["A1"]

    def test_explicit_arguments_win(self) -> None:
        context = ArcGISContext.from_config(
            HubConfig(alpha_orgs=["A1"]),
            portal_url="https://other.maps.arcgis.com",
            properties={"alphaOrgs": ["A2"]},
        )
        assert context.portal_url == "https://other.maps.arcgis.com"
        assert context.properties["alphaOrgs"] == ["A2"]
