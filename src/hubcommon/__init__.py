from .config import HubConfig, LogLevel, SearchApiType, load_hub_config_from_env
from .context import ArcGISContext, HubRequestOptions, UserSession
from .exceptions import (
    ConfigurationError,
    EntityDestroyedError,
    HubError,
    NotFoundError,
    PlatformRequestError,
    QueryValidationError,
)
from .logging import (
    safe_preview,
    redact_secrets,
    safe_log_value,
    HubLogFormatter,
    HubLoggerAdapter,
    setup_logging,
    get_hub_logger,
)
from .content import HubContent, get_family, item_to_content
from .entities import HubGroup, HubItemEntity, HubProject, fetch_hub_entity, fetch_project
from .permissions import PermissionAccessResponse, PolicyResponse, check_permission
from .search import Catalog, Collection, Filter, HubSearchOptions, HubSearchResponse, Query, hub_search

__all__ = [
    'HubConfig',
    'LogLevel',
    'SearchApiType',
    'load_hub_config_from_env',
    'ArcGISContext',
    'HubRequestOptions',
    'UserSession',
    'HubError',
    'ConfigurationError',
    'EntityDestroyedError',
    'NotFoundError',
    'PlatformRequestError',
    'QueryValidationError',
    'safe_preview',
    'redact_secrets',
    'safe_log_value',
    'HubLogFormatter',
    'HubLoggerAdapter',
    'setup_logging',
    'get_hub_logger',
    'HubContent',
    'get_family',
    'item_to_content',
    'HubGroup',
    'HubItemEntity',
    'HubProject',
    'fetch_hub_entity',
    'fetch_project',
    'PermissionAccessResponse',
    'PolicyResponse',
    'check_permission',
    'Catalog',
    'Collection',
    'Filter',
    'HubSearchOptions',
    'HubSearchResponse',
    'Query',
    'hub_search',
]
