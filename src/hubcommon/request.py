"""Thin JSON-over-HTTP helpers for ArcGIS and Hub REST endpoints.

All network I/O in hubcommon goes through this module so callers (and tests)
can inject an ``httpx.AsyncClient`` via ``HubRequestOptions.http_client``.
ArcGIS REST returns HTTP 200 with an ``{"error": {...}}`` body on failure;
both that and non-2xx statuses are raised as PlatformRequestError. An empty
body (e.g. item data that was never written) decodes to ``{}``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

import httpx

from .exceptions import ConfigurationError, PlatformRequestError
from .logging import safe_log_value

if TYPE_CHECKING:
    from .context import HubRequestOptions

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop None values; join lists with commas."""
    cleaned: dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        elif isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned


def _raise_for_arcgis_error(url: str, payload: Any) -> None:
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        error = payload["error"]
        code = error.get("code")
        message = error.get("message") or "Unknown ArcGIS error"
        details = error.get("details") or []
        raise PlatformRequestError(
            "request",
            f"{code}: {message}" if code else message,
            status=code if isinstance(code, int) else None,
            url=url,
            arcgis_details=details,
        )


async def _send(
    method: str,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    data: Mapping[str, Any] | None = None,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = None,
) -> Any:
    query = _clean_params(params)
    body = _clean_params(data) if data is not None else None
    logger.debug("%s %s params=%s", method, url, safe_log_value(query))

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=timeout or DEFAULT_TIMEOUT)
    try:
        response = await http.request(method, url, params=query or None, data=body)
    except httpx.HTTPError as e:
        raise PlatformRequestError("request", f"Request to {url} failed: {e}", root_cause=e, url=url) from e
    finally:
        if owns_client:
            await http.aclose()

    if response.status_code >= 400:
        raise PlatformRequestError(
            "request",
            f"HTTP {response.status_code} from {url}",
            status=response.status_code,
            url=url,
        )
    if not response.content.strip():
        return {}
    try:
        payload = response.json()
    except ValueError as e:
        raise PlatformRequestError("request", f"Invalid JSON from {url}", root_cause=e, url=url) from e

    _raise_for_arcgis_error(url, payload)
    return payload


async def get_json(
    url: str,
    params: Mapping[str, Any] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = None,
) -> Any:
    """GET a url and return the decoded JSON body."""
    return await _send("GET", url, params=params, client=client, timeout=timeout)


async def post_json(
    url: str,
    data: Mapping[str, Any] | None = None,
    *,
    params: Mapping[str, Any] | None = None,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = None,
) -> Any:
    """POST form-encoded data and return the decoded JSON body."""
    return await _send("POST", url, params=params, data=data or {}, client=client, timeout=timeout)


async def portal_request(
    path: str,
    request_options: "HubRequestOptions | None",
    params: Mapping[str, Any] | None = None,
    method: str = "GET",
) -> Any:
    """Call a Portal sharing REST endpoint.

    Adds ``f=json`` and the session token (if any) and resolves ``path``
    against ``request_options.portal``.

    Args:
        path: Path relative to the sharing API, e.g. ``"search"`` or
            ``"content/items/{id}"``. Absolute urls are used as-is.
        request_options: Request options carrying portal, auth and client.
        params: Query (GET) or form (POST) parameters.
        method: ``"GET"`` or ``"POST"``.
    """
    if request_options is None or not request_options.portal:
        raise ConfigurationError("portalRequest", "requestOptions with a portal url is required.")

    url = path if path.startswith("http") else f"{request_options.portal.rstrip('/')}/{path.lstrip('/')}"
    merged: dict[str, Any] = {"f": "json", **(params or {})}
    if request_options.token:
        merged["token"] = request_options.token

    if method.upper() == "POST":
        return await post_json(
            url,
            merged,
            client=request_options.http_client,
            timeout=request_options.timeout,
        )
    return await get_json(
        url,
        merged,
        client=request_options.http_client,
        timeout=request_options.timeout,
    )


__all__ = [
    "DEFAULT_TIMEOUT",
    "get_json",
    "portal_request",
    "post_json",
]
