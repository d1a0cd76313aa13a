"""Shared fixtures: contexts and a recording httpx transport."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from hubcommon import ArcGISContext, UserSession

ORG_ID = "BRXFAKE"


def make_portal_self(**overrides: Any) -> dict[str, Any]:
    portal = {
        "id": ORG_ID,
        "name": "DC R&D Center",
        "urlKey": "fake-org",
        "customBaseUrl": "maps.arcgis.com",
        "isPortal": False,
        "portalProperties": {"hub": {"enabled": True}},
    }
    portal.update(overrides)
    return portal


def make_user(**overrides: Any) -> dict[str, Any]:
    user = {
        "username": "casey",
        "orgId": ORG_ID,
        "role": "org_user",
        "privileges": ["portal:user:createItem", "portal:user:createGroup"],
        "groups": [],
    }
    user.update(overrides)
    return user


def make_context(
    *,
    authenticated: bool = True,
    user: dict[str, Any] | None = None,
    portal_self: dict[str, Any] | None = None,
    **kwargs: Any,
) -> ArcGISContext:
    if not authenticated:
        return ArcGISContext(**kwargs)
    kwargs.setdefault("portal_url", "https://myorg.maps.arcgis.com")
    return ArcGISContext(
        session=UserSession(username="casey", token="FAKE-TOKEN"),
        portal_self=portal_self or make_portal_self(),
        current_user=user or make_user(),
        **kwargs,
    )


class Recorder:
    """Collects requests made through a MockTransport."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self._handler(request)
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, content=json.dumps(result).encode())

    def form(self, index: int = -1) -> dict[str, str]:
        """Decoded form body of a POST request."""
        body = self.requests[index].content.decode()
        return dict(httpx.QueryParams(body))


def mock_client(handler: Callable[[httpx.Request], Any]) -> tuple[httpx.AsyncClient, Recorder]:
    recorder = Recorder(handler)
    return httpx.AsyncClient(transport=httpx.MockTransport(recorder)), recorder


@pytest.fixture
def authd_context() -> ArcGISContext:
    return make_context()


@pytest.fixture
def unauthd_context() -> ArcGISContext:
    return make_context(authenticated=False)
