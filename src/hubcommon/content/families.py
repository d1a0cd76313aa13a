"""Item type -> collection -> family lookup.

Every Portal item type belongs to one Hub collection; the family used for
routing and display is derived from the collection, with a handful of
per-type overrides.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping, Optional

APP_TYPES = (
    "Application",
    "Dashboard",
    "Data Pipeline",
    "Hub Site Application",
    "Insights Model",
    "Insights Page",
    "Insights Theme",
    "Insights Workbook",
    "Mission",
    "Mobile Application",
    "Native Application",
    "Notebook",
    "Operation View",
    "Operations Dashboard Add In",
    "Operations Dashboard Extension",
    "Site Application",
    "StoryMap",
    "Web Experience",
    "Web Mapping Application",
    "Workforce Project",
)

DATASET_TYPES = (
    "CSV Collection",
    "CSV",
    "Feature Collection Template",
    "Feature Collection",
    "Feature Layer",
    "Feature Service",
    "File Geodatabase",
    "GeoJson",
    "GeoJSON",
    "Geocoding Service",
    "Geodata Service",
    "Geometry Service",
    "Geoprocessing Service",
    "Globe Service",
    "Image Service",
    "KML Collection",
    "KML",
    "Map Service",
    "Network Analysis Service",
    "Raster Layer",
    "Shapefile",
    "Stream Service",
    "Table",
    "WFS",
    "WMS",
    "WMTS",
)

DOCUMENT_TYPES = (
    "CAD Drawing",
    "Document Link",
    "Hub Page",
    "Image",
    "iWork Keynote",
    "iWork Numbers",
    "iWork Pages",
    "Microsoft Excel",
    "Microsoft Powerpoint",
    "Microsoft Visio",
    "Microsoft Word",
    "PDF",
    "Pro Map",
    "Report Template",
    "Site Page",
)

MAP_TYPES = (
    "City Engine Web Scene",
    "CityEngine Web Scene",
    "Image Collection",
    "Mobile Map Package",
    "Scene Service",
    "Vector Tile Service",
    "Web Map",
    "Web Scene",
)

COLLECTIONS: dict[str, tuple[str, ...]] = {
    "app": APP_TYPES,
    "dataset": DATASET_TYPES,
    "discussion": ("Discussion",),
    "document": DOCUMENT_TYPES,
    "event": ("Hub Event",),
    "feedback": ("Form", "Quick Capture Project"),
    "initiative": ("Hub Initiative",),
    "map": MAP_TYPES,
    "other": ("360 VR Experience", "Code Attachment", "Code Sample", "Desktop Style", "Style"),
    "project": ("Hub Project",),
    "site": ("Hub Site Application", "Site Application"),
    "solution": ("Hub Initiative Template", "Solution"),
}

# Collections whose family name differs from the collection name
COLLECTION_FAMILY = {
    "other": "content",
    "solution": "template",
}

# Item types whose family does not follow their collection
FAMILY_OVERRIDES = {
    "image service": "dataset",
    "feature service": "map",
    "raster layer": "map",
    "microsoft excel": "document",
    "cad drawing": "content",
    "feature collection template": "content",
    "report template": "content",
}


@lru_cache(maxsize=512)
def get_collection(item_type: str = "") -> Optional[str]:
    """Return the collection for an item type (case-insensitive).

    Sites resolve to ``"site"`` rather than ``"app"`` because site types are
    matched before the generic application types.
    """
    wanted = (item_type or "").lower()
    for collection in ("site", "project", "initiative", "solution"):
        if wanted in (t.lower() for t in COLLECTIONS[collection]):
            return collection
    for collection, types in COLLECTIONS.items():
        if wanted in (t.lower() for t in types):
            return collection
    return None


def get_family(item_type: str) -> str:
    """Return the Hub family for an item type."""
    key = (item_type or "").lower()
    if key in FAMILY_OVERRIDES:
        return FAMILY_OVERRIDES[key]
    collection = get_collection(item_type) or "other"
    return COLLECTION_FAMILY.get(collection, collection)


def normalize_item_type(item: Mapping[str, Any] | None = None) -> Optional[str]:
    """Resolve legacy and keyword-qualified types to their Hub type."""
    item = item or {}
    item_type = item.get("type")
    keywords = item.get("typeKeywords") or []
    result = item_type
    if item_type == "Site Application" or (item_type == "Web Mapping Application" and "hubSite" in keywords):
        result = "Hub Site Application"
    if item_type == "Site Page" or (item_type == "Web Mapping Application" and "hubPage" in keywords):
        result = "Hub Page"
    if item_type == "Hub Initiative" and "hubInitiativeTemplate" in keywords:
        result = "Hub Initiative Template"
    if item_type == "Web Mapping Application" and "hubSolutionTemplate" in keywords:
        result = "Solution"
    return result


def is_feature_service(item_type: Optional[str]) -> bool:
    return bool(item_type) and item_type.lower() == "feature service"


__all__ = [
    "COLLECTIONS",
    "FAMILY_OVERRIDES",
    "get_collection",
    "get_family",
    "is_feature_service",
    "normalize_item_type",
]
