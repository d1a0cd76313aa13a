"""Portal item normalization: families, slugs and the HubContent record."""

from .compose import (
    HubContent,
    get_content_identifier,
    get_hub_relative_url,
    get_item_home_url,
    get_item_hub_id,
    get_item_layer_id,
    get_item_thumbnail_url,
    get_layer_id_from_url,
    is_page_type,
    item_to_content,
    parse_epoch_ms,
    parse_item_categories,
)
from .families import COLLECTIONS, get_collection, get_family, normalize_item_type
from .slugs import add_context_to_slug, is_slug, parse_dataset_id, remove_context_from_slug, slug_type_keyword

__all__ = [
    "COLLECTIONS",
    "HubContent",
    "add_context_to_slug",
    "get_collection",
    "get_content_identifier",
    "get_family",
    "get_hub_relative_url",
    "get_item_home_url",
    "get_item_hub_id",
    "get_item_layer_id",
    "get_item_thumbnail_url",
    "get_layer_id_from_url",
    "is_page_type",
    "is_slug",
    "item_to_content",
    "normalize_item_type",
    "parse_dataset_id",
    "parse_epoch_ms",
    "parse_item_categories",
    "remove_context_from_slug",
    "slug_type_keyword",
]
