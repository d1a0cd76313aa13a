"""Shared configuration for hubcommon.

This module provides Pydantic-validated configuration for the settings that
are common to every consumer of the library (log level, default portal,
default Hub API, search backend, paging defaults).

Applications should build a HubConfig once and pass it down, or call
load_hub_config_from_env(). Direct os.environ/os.getenv usage outside of
load_hub_config_from_env() is not allowed for any setting defined here.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SearchApiType(str, Enum):
    """Search backends a query can be dispatched to.

    - ARCGIS: Portal legacy search (``/sharing/rest/search``)
    - ARCGIS_HUB: Hub Search API, OGC features style (``/api/search/v1``)
    """

    ARCGIS = "arcgis"
    ARCGIS_HUB = "arcgis-hub"


class HubConfig(BaseModel):
    """Configuration contract for hubcommon.

    Environment variables (see load_hub_config_from_env):
        LOG_LEVEL            — logging level
        LOG_JSON             — JSON log format (true/false)
        HUB_PORTAL_URL       — default portal, e.g. https://www.arcgis.com
        HUB_URL              — default Hub API, e.g. https://hub.arcgis.com
        HUB_SEARCH_API       — arcgis | arcgis-hub
        HUB_DEFAULT_NUM      — default page size
        HUB_AGG_LIMIT        — default aggregation bucket count
        HUB_REQUEST_TIMEOUT  — HTTP timeout in seconds
        HUB_ALPHA_ORGS       — comma-separated alpha org ids
        HUB_BETA_ORGS        — comma-separated beta org ids
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Platform endpoints
    portal_url: str = Field(
        default="https://www.arcgis.com",
        description="Portal base url used when no context is supplied",
    )
    hub_url: str = Field(
        default="https://hub.arcgis.com",
        description="Hub API base url",
    )

    # Search
    search_api: SearchApiType = Field(
        default=SearchApiType.ARCGIS,
        description="Default search backend",
    )
    default_num: int = Field(
        default=10,
        ge=1,
        description="Default page size for searches",
    )
    agg_limit: int = Field(
        default=10,
        ge=1,
        description="Default number of buckets per aggregation field",
    )

    # HTTP
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout in seconds",
    )

    # Feature gating
    alpha_orgs: list[str] = Field(
        default_factory=list,
        description="Org ids granted alpha features",
    )
    beta_orgs: list[str] = Field(
        default_factory=list,
        description="Org ids granted beta features",
    )

    @field_validator("portal_url", "hub_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an http(s) url and strip the trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("URL must start with https:// or http://")
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "extra": "forbid",  # Prevent accidental extra fields
    }


def _split_csv(raw: str) -> list[str]:
    return [v.strip() for v in raw.split(",") if v.strip()]


def load_hub_config_from_env() -> HubConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed for shared settings.

    Returns:
        HubConfig instance with values from environment or defaults.
    """
    import os

    return HubConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        portal_url=os.getenv("HUB_PORTAL_URL", "https://www.arcgis.com"),
        hub_url=os.getenv("HUB_URL", "https://hub.arcgis.com"),
        search_api=os.getenv("HUB_SEARCH_API", "arcgis"),
        default_num=int(os.getenv("HUB_DEFAULT_NUM", "10")),
        agg_limit=int(os.getenv("HUB_AGG_LIMIT", "10")),
        request_timeout=float(os.getenv("HUB_REQUEST_TIMEOUT", "30")),
        alpha_orgs=_split_csv(os.getenv("HUB_ALPHA_ORGS", "")),
        beta_orgs=_split_csv(os.getenv("HUB_BETA_ORGS", "")),
    )


__all__ = [
    "HubConfig",
    "LogLevel",
    "SearchApiType",
    "load_hub_config_from_env",
]
