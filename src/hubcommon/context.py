"""Ambient platform context.

``ArcGISContext`` holds the (optional) user session together with the
portal/self, current user and app properties, and derives everything the
rest of the library needs from them: platform urls, license tier, environment,
alpha/beta membership and request options.

Instances are meant to be treated as immutable.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

import httpx
from pydantic import BaseModel, Field

from .config import HubConfig
from .objects import get_prop
from .permissions.constants import HubEnvironment, HubLicense, HubService, ServiceStatus

HUB_API_ENDPOINTS = {
    "search": "/api/search/v1",
    "discussions": "/api/discussions/v1",
    "domains": "/api/v3/domains",
}

DEFAULT_PORTAL_URL = "https://www.arcgis.com"


class UserSession(BaseModel):
    """Authentication for the current user."""

    username: str
    token: str
    portal: str = f"{DEFAULT_PORTAL_URL}/sharing/rest"
    expires: Optional[datetime] = None


class HubRequestOptions(BaseModel):
    """Everything a REST call needs: sharing api url, auth and transport.

    ``http_client`` is never serialized; it lets callers (and tests) route
    every request through a shared ``httpx.AsyncClient``.
    """

    portal: str = f"{DEFAULT_PORTAL_URL}/sharing/rest"
    token: Optional[str] = None
    is_portal: bool = False
    hub_api_url: Optional[str] = None
    portal_self: Optional[dict[str, Any]] = None
    timeout: Optional[float] = None
    http_client: Optional[httpx.AsyncClient] = Field(default=None, exclude=True)

    model_config = {
        "arbitrary_types_allowed": True,
    }

    @property
    def portal_home(self) -> str:
        """Portal base url, without ``/sharing/rest``."""
        return self.portal.split("/sharing/rest")[0].rstrip("/")


def get_environment_from_portal_url(portal_url: str) -> str:
    url = (portal_url or "").lower()
    if "devext.arcgis.com" in url or "mapsdevext" in url:
        return HubEnvironment.DEVEXT
    if "qaext.arcgis.com" in url or "mapsqa" in url:
        return HubEnvironment.QAEXT
    if "arcgis.com" in url:
        return HubEnvironment.PRODUCTION
    return HubEnvironment.ENTERPRISE


def get_hub_url_from_portal_url(portal_url: str) -> Optional[str]:
    env = get_environment_from_portal_url(portal_url)
    return {
        HubEnvironment.DEVEXT: "https://hubdev.arcgis.com",
        HubEnvironment.QAEXT: "https://hubqa.arcgis.com",
        HubEnvironment.PRODUCTION: "https://hub.arcgis.com",
    }.get(env)


class ArcGISContext:
    """Session, org and user information plus derived urls and options.

    Args:
        id: Identifier of this context, useful when debugging.
        portal_url: Portal base url used when not authenticated.
        hub_url: Hub API base url (``None`` for ArcGIS Enterprise).
        session: Authenticated :class:`UserSession`, if any.
        portal_self: ``portals/self`` response.
        current_user: ``community/self`` response.
        properties: App properties, e.g. ``alphaOrgs``/``betaOrgs``.
        service_status: service -> ``online``/``offline``/``maintenance``.
            Defaults to every service online.
        feature_flags: permission -> bool overrides.
        http_client: Shared ``httpx.AsyncClient`` for every request.
    """

    def __init__(
        self,
        *,
        id: int = 0,
        portal_url: str = DEFAULT_PORTAL_URL,
        hub_url: Optional[str] = None,
        session: Optional[UserSession] = None,
        portal_self: Optional[Mapping[str, Any]] = None,
        current_user: Optional[Mapping[str, Any]] = None,
        properties: Optional[Mapping[str, Any]] = None,
        service_status: Optional[Mapping[str, str]] = None,
        feature_flags: Optional[Mapping[str, bool]] = None,
        trusted_org_ids: Optional[list[str]] = None,
        trusted_orgs: Optional[list[dict[str, Any]]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.id = id
        self._portal_url = portal_url.rstrip("/")
        self._hub_url = hub_url.rstrip("/") if hub_url else get_hub_url_from_portal_url(self._portal_url)
        self._session = session
        self._portal_self = dict(portal_self) if portal_self else None
        self._current_user = dict(current_user) if current_user else None
        self._properties = dict(properties or {})
        self._service_status = dict(service_status or {s: ServiceStatus.ONLINE for s in HubService.ALL})
        self._feature_flags = dict(feature_flags or {})
        self._trusted_org_ids = list(trusted_org_ids or [])
        self._trusted_orgs = list(trusted_orgs or [])
        self._http_client = http_client
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: HubConfig, **kwargs: Any) -> "ArcGISContext":
        """Build a context whose defaults come from :class:`HubConfig`."""
        properties = dict(kwargs.pop("properties", None) or {})
        properties.setdefault("alphaOrgs", list(config.alpha_orgs))
        properties.setdefault("betaOrgs", list(config.beta_orgs))
        kwargs.setdefault("portal_url", config.portal_url)
        kwargs.setdefault("hub_url", config.hub_url)
        kwargs.setdefault("timeout", config.request_timeout)
        return cls(properties=properties, **kwargs)

    def __repr__(self) -> str:
        user = get_prop(self._current_user, "username")
        return f"ArcGISContext(id={self.id!r}, portal_url={self.portal_url!r}, user={user!r})"

    # ---- Session -------------------------------------------------------------

    @property
    def session(self) -> Optional[UserSession]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def current_user(self) -> Optional[dict[str, Any]]:
        return self._current_user

    @property
    def portal(self) -> Optional[dict[str, Any]]:
        return self._portal_self

    @property
    def properties(self) -> dict[str, Any]:
        return self._properties

    @property
    def feature_flags(self) -> dict[str, bool]:
        return self._feature_flags

    @property
    def service_status(self) -> dict[str, str]:
        return self._service_status

    @property
    def trusted_org_ids(self) -> list[str]:
        return self._trusted_org_ids

    @property
    def trusted_orgs(self) -> list[dict[str, Any]]:
        return self._trusted_orgs

    # ---- Urls ----------------------------------------------------------------

    @property
    def portal_url(self) -> str:
        """Portal url; the org url once authenticated against ArcGIS Online."""
        if self.is_authenticated and self._portal_self:
            if self.is_portal or not self._portal_self.get("urlKey"):
                hostname = self._portal_self.get("portalHostname")
                if hostname:
                    return f"https://{hostname}"
                return self._portal_url
            return f"https://{self._portal_self['urlKey']}.{self._portal_self.get('customBaseUrl')}"
        return self._portal_url

    @property
    def sharing_api_url(self) -> str:
        return f"{self.portal_url}/sharing/rest"

    @property
    def hub_url(self) -> Optional[str]:
        return self._hub_url

    @property
    def hub_home_url(self) -> Optional[str]:
        """The user's hub home url; ``None`` on ArcGIS Enterprise."""
        if self.is_portal:
            return None
        if self.is_authenticated and self._portal_self and self._hub_url:
            hub_hostname = self._hub_url.replace("https://", "")
            return f"https://{self._portal_self.get('urlKey')}.{hub_hostname}"
        return self._hub_url

    @property
    def is_portal(self) -> bool:
        """Is the backing system ArcGIS Enterprise?"""
        if self._portal_self is not None:
            return bool(self._portal_self.get("isPortal"))
        return "arcgis.com" not in self._portal_url

    @property
    def environment(self) -> str:
        return get_environment_from_portal_url(self._portal_url)

    @property
    def hub_search_service_url(self) -> Optional[str]:
        if self._hub_url:
            return f"{self._hub_url}{HUB_API_ENDPOINTS['search']}"
        return None

    @property
    def discussions_service_url(self) -> Optional[str]:
        if self._hub_url:
            return f"{self._hub_url}{HUB_API_ENDPOINTS['discussions']}"
        return None

    @property
    def domain_service_url(self) -> Optional[str]:
        if self._hub_url:
            return f"{self._hub_url}{HUB_API_ENDPOINTS['domains']}"
        return None

    # ---- Org -----------------------------------------------------------------

    @property
    def hub_enabled(self) -> bool:
        return bool(get_prop(self._portal_self, "portalProperties.hub.enabled", False))

    @property
    def hub_license(self) -> str:
        if self.is_portal:
            return HubLicense.ENTERPRISE_SITES
        return HubLicense.HUB_PREMIUM if self.hub_enabled else HubLicense.HUB_BASIC

    @property
    def community_org_id(self) -> Optional[str]:
        return get_prop(self._portal_self, "portalProperties.hub.settings.communityOrg.orgId")

    @property
    def is_alpha_org(self) -> bool:
        org_id = get_prop(self._portal_self, "id")
        return bool(org_id) and org_id in (self._properties.get("alphaOrgs") or [])

    @property
    def is_beta_org(self) -> bool:
        org_id = get_prop(self._portal_self, "id")
        return bool(org_id) and org_id in (self._properties.get("betaOrgs") or [])

    # ---- Request options -----------------------------------------------------

    @property
    def request_options(self) -> HubRequestOptions:
        """Options for calls that may use auth: portal plus token if signed in."""
        return HubRequestOptions(
            portal=self.sharing_api_url,
            token=self._session.token if self._session else None,
            http_client=self._http_client,
            timeout=self._timeout,
        )

    @property
    def hub_request_options(self) -> HubRequestOptions:
        return HubRequestOptions(
            portal=self.sharing_api_url,
            token=self._session.token if self._session else None,
            is_portal=self.is_portal,
            hub_api_url=self._hub_url,
            portal_self=self._portal_self,
            http_client=self._http_client,
            timeout=self._timeout,
        )


__all__ = [
    "ArcGISContext",
    "DEFAULT_PORTAL_URL",
    "HUB_API_ENDPOINTS",
    "HubRequestOptions",
    "UserSession",
    "get_environment_from_portal_url",
]
