"""Entity feature toggles."""

from __future__ import annotations

from typing import Mapping, Optional


def process_entity_features(
    overrides: Optional[Mapping[str, bool]],
    defaults: Mapping[str, bool],
) -> dict[str, bool]:
    """Merge an entity's feature overrides onto the family defaults.

    Only features the family declares are kept; an explicit override wins
    over the default.

    Example::

        process_entity_features({"hub:project:events": True}, PROJECT_DEFAULT_FEATURES)
        # {"hub:project:events": True, "hub:project:content": True, "hub:project:discussions": False}
    """
    overrides = overrides or {}
    return {key: bool(overrides[key]) if key in overrides else value for key, value in defaults.items()}


__all__ = ["process_entity_features"]
