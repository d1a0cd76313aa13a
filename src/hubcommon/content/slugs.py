"""Hub API slug helpers.

Slugs look like ``{orgKey}::{title-as-slug}``; dataset ids look like
``{itemId}_{layerId}``.
"""

from __future__ import annotations

import re
from typing import Optional

from ..objects import is_guid

_CONTEXT_RE = re.compile(r".+::.+")


def parse_dataset_id(dataset_id: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Split a Hub API record id into ``(item_id, layer_id)``."""
    if not dataset_id:
        return None, None
    parts = dataset_id.split("_")
    return parts[0], parts[1] if len(parts) > 1 else None


def is_slug(identifier: Optional[str]) -> bool:
    """Is ``identifier`` a slug rather than an item or dataset id?"""
    item_id, _ = parse_dataset_id(identifier)
    if not item_id or is_guid(item_id):
        return False
    return True


def add_context_to_slug(slug: str, context: str) -> str:
    """Prefix ``slug`` with ``{context}::`` unless it already has a prefix."""
    if _CONTEXT_RE.match(slug):
        return slug
    return f"{context}::{slug}"


def remove_context_from_slug(slug: str, context: Optional[str]) -> str:
    prefix = f"{context}::"
    if context and prefix in slug:
        return slug.split(prefix)[1]
    return slug


def slug_type_keyword(slug: str) -> str:
    """The type keyword used to store (and search for) a slug on an item."""
    return f"slug|{slug}"


__all__ = [
    "add_context_to_slug",
    "is_slug",
    "parse_dataset_id",
    "remove_context_from_slug",
    "slug_type_keyword",
]
