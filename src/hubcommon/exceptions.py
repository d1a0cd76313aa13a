"""Unified exception hierarchy for hubcommon.

All errors raised by the library inherit from HubError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to classes
- Platform error remapping (known ArcGIS messages -> friendly messages)

Usage:
    from hubcommon.exceptions import (
        HubError,
        QueryValidationError,
        PlatformRequestError,
    )

Applications may define thin subclasses for their own errors:
    @register_error("SITE_BUILDER_ERROR")
    class SiteBuilderError(HubError):
        code = "SITE_BUILDER_ERROR"
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, TypeVar, cast

__all__ = [
    # Base hierarchy
    "HubError",
    "ConfigurationError",
    "QueryValidationError",
    "EntityDestroyedError",
    "PlatformRequestError",
    "NotFoundError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # Platform helpers
    "PLATFORM_ERROR_MESSAGES",
    "remap_platform_error",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class HubError(Exception):
    """Base exception for all hubcommon errors.

    Attributes:
        name: Stable class-level name (e.g. "HubError").
        code: Stable error code string (e.g. "QUERY_VALIDATION_ERROR").
        operation: Name of the operation that failed (e.g. "getCollection").
        message: Human-readable error description.
        root_cause: Underlying exception, if any.
        details: Additional context as keyword arguments.
    """

    name: str = "HubError"
    code: str = "HUB_ERROR"
    message: str = "An error occurred"

    def __init__(
        self,
        operation: str = "",
        message: str | None = None,
        root_cause: BaseException | None = None,
        code: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.operation = operation
        self.message = message or self.message
        self.root_cause = root_cause
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(operation={self.operation!r}, message={self.message!r})"


class ConfigurationError(HubError):
    """Invalid or missing configuration (policy tables, request options)."""

    code: str = "CONFIGURATION_ERROR"


class QueryValidationError(HubError):
    """A structured query can not be serialized for a search backend."""

    code: str = "QUERY_VALIDATION_ERROR"


class EntityDestroyedError(HubError):
    """An operation was attempted on an entity instance after delete()."""

    code: str = "ENTITY_DESTROYED"
    message: str = "Entity is already destroyed."


class PlatformRequestError(HubError):
    """An ArcGIS / Hub REST call failed (HTTP status or ArcGIS error payload)."""

    code: str = "PLATFORM_REQUEST_ERROR"

    def __init__(
        self,
        operation: str = "",
        message: str | None = None,
        root_cause: BaseException | None = None,
        code: str | None = None,
        *,
        status: int | None = None,
        url: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(operation, message, root_cause, code, **kwargs)
        self.status = status
        self.url = url


class NotFoundError(HubError):
    """The requested entity does not exist or is not accessible."""

    code: str = "NOT_FOUND"


# ---- Error Registry ----------------------------------------------------------

_E = TypeVar("_E", bound=type[HubError])


class ErrorRegistry:
    """Registry for mapping stable error codes to error classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[HubError]] = {}

    def register(self, code: str, error_cls: type[HubError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[HubError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[HubError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("MY_CUSTOM_ERROR")
        class MyCustomError(HubError):
            code = "MY_CUSTOM_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("HUB_ERROR", HubError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("QUERY_VALIDATION_ERROR", QueryValidationError)
error_registry.register("ENTITY_DESTROYED", EntityDestroyedError)
error_registry.register("PLATFORM_REQUEST_ERROR", PlatformRequestError)
error_registry.register("NOT_FOUND", NotFoundError)


# ---- Platform Error Remapping ------------------------------------------------

# Substrings of ArcGIS error messages -> friendlier messages
PLATFORM_ERROR_MESSAGES: dict[str, str] = {
    "group does not exist": "Group not found.",
    "item does not exist": "Item not found.",
    "user does not exist": "User not found.",
}


def remap_platform_error(
    error: BaseException,
    operation: str = "",
    mappings: Mapping[str, str] | None = None,
) -> BaseException:
    """Return a NotFoundError if the platform message is a known one.

    Matching is a case-insensitive substring test against ``str(error)``.
    Unknown errors are returned unchanged so the caller can re-raise them.

    Example::

        try:
            group = await fetch_hub_group(group_id, request_options)
        except PlatformRequestError as err:
            raise remap_platform_error(err, "HubGroup.fetch") from err
    """
    text = str(error).lower()
    for needle, friendly in (mappings or PLATFORM_ERROR_MESSAGES).items():
        if needle.lower() in text:
            logger.debug("Remapped platform error '%s' to '%s'", error, friendly)
            return NotFoundError(operation, friendly, root_cause=error)
    return error
