"""Stateful entity instances.

An instance wraps a record, the context it was loaded in and (for items)
the model it came from. ``save`` creates or updates the backing Portal
object; ``delete`` removes it and leaves the instance destroyed, after
which every operation raises :class:`EntityDestroyedError`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from ..exceptions import EntityDestroyedError, HubError, NotFoundError
from ..items import create_group, create_item, delete_group, delete_item, update_group, update_item
from ..objects import get_prop
from ..permissions.access import check_permission
from ..permissions.policy import EntityPermissionPolicy, PermissionAccessResponse
from .compute import entity_to_model, hub_group_to_group
from .fetch import fetch_hub_entity, fetch_hub_group
from .types import HubEntityRecord, HubGroupRecord, HubItemRecord, parse_hub_entity

if TYPE_CHECKING:
    from ..context import ArcGISContext

logger = logging.getLogger(__name__)

# kind -> Portal item type used when creating the item
ITEM_TYPES: dict[str, str] = {
    "project": "Hub Project",
    "site": "Hub Site Application",
    "initiative": "Hub Initiative",
    "page": "Hub Page",
    "discussion": "Discussion",
    "template": "Solution",
}


def _aliased(record_cls: type[HubEntityRecord], changes: Mapping[str, Any]) -> dict[str, Any]:
    fields = record_cls.model_fields
    return {(fields[key].alias or key) if key in fields else key: value for key, value in changes.items()}


class HubEntityInstance(ABC):
    """Behaviour shared by item-backed entities and groups."""

    def __init__(self, record: HubEntityRecord, context: "ArcGISContext") -> None:
        self._record = record
        self.context = context
        self._destroyed = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._record.id!r}, destroyed={self._destroyed})"

    def _assert_live(self, operation: str) -> None:
        if self._destroyed:
            raise EntityDestroyedError(operation, f"{type(self).__name__} is already destroyed.")

    @property
    def _username(self) -> Optional[str]:
        return get_prop(self.context.current_user, "username")

    @property
    def id(self) -> Optional[str]:
        return self._record.id

    @property
    def record(self) -> HubEntityRecord:
        return self._record

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def can_edit(self) -> bool:
        return self._record.can_edit

    @property
    def can_delete(self) -> bool:
        return self._record.can_delete

    def to_json(self) -> dict[str, Any]:
        """camelCase JSON form of the record."""
        self._assert_live("toJson")
        return self._record.model_dump(by_alias=True, exclude_none=True, mode="json")

    def update(self, changes: Mapping[str, Any]) -> None:
        """Apply ``changes`` (snake_case or camelCase keys) locally; ``save`` persists them."""
        self._assert_live("update")
        record_cls = type(self._record)
        merged = {**self._record.model_dump(by_alias=True), **_aliased(record_cls, changes)}
        self._record = record_cls.model_validate(merged)

    # ---- Permissions ---------------------------------------------------------

    def get_permission_policies(self, permission: str) -> list[dict[str, Any]]:
        self._assert_live("getPermissionPolicies")
        return [
            policy.model_dump(by_alias=True, exclude_none=True)
            for policy in self._record.permissions
            if policy.permission == permission
        ]

    def add_permission_policy(self, policy: Union[EntityPermissionPolicy, Mapping[str, Any]]) -> None:
        """Add a grant; one already present for the same collaborator is kept as is."""
        self._assert_live("addPermissionPolicy")
        if not isinstance(policy, EntityPermissionPolicy):
            policy = EntityPermissionPolicy.model_validate(policy)
        for existing in self._record.permissions:
            if (
                existing.permission == policy.permission
                and existing.collaboration_type == policy.collaboration_type
                and existing.collaboration_id == policy.collaboration_id
            ):
                logger.debug("Permission policy %s already present on %s", policy.permission, self.id)
                return
        self._record.permissions.append(policy)

    def remove_permission_policy(self, permission: str, collaboration_id: Optional[str]) -> None:
        self._assert_live("removePermissionPolicy")
        self._record.permissions = [
            p
            for p in self._record.permissions
            if not (p.permission == permission and p.collaboration_id == collaboration_id)
        ]

    def check_permission(self, permission: str) -> PermissionAccessResponse:
        self._assert_live("checkPermission")
        return check_permission(permission, self.context, self)

    # ---- Persistence ---------------------------------------------------------

    @abstractmethod
    async def save(self) -> None:
        """Persist the record."""

    @abstractmethod
    async def delete(self) -> None:
        """Delete the backing record and destroy the instance."""


class HubItemEntity(HubEntityInstance):
    """A project, site, initiative, page, discussion or template."""

    def __init__(
        self,
        record: HubItemRecord,
        context: "ArcGISContext",
        model: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(record, context)
        self._model = dict(model) if model else None

    @classmethod
    def from_json(cls, json: Mapping[str, Any], context: "ArcGISContext", kind: str = "project") -> "HubItemEntity":
        """Build an unsaved instance. Nothing is sent to the platform."""
        record = parse_hub_entity({"kind": kind, **json})
        if isinstance(record, HubGroupRecord):
            raise TypeError("Use HubGroup for group records")
        return cls(record, context)

    @classmethod
    async def fetch(cls, identifier: str, context: "ArcGISContext") -> "HubItemEntity":
        """Load by item id or slug.

        Raises:
            NotFoundError: no item has the slug.
        """
        record = await fetch_hub_entity(identifier, context.request_options)
        if record is None:
            raise NotFoundError("HubItemEntity.fetch", f"Entity {identifier} not found.")
        return cls(record, context)

    def _owner(self) -> str:
        owner = self._record.owner or self._username
        if not owner:
            raise HubError("HubItemEntity.save", "An owner or an authenticated user is required to save.")
        return owner

    async def save(self) -> None:
        """Create the backing item on first save, update it afterwards."""
        self._assert_live("save")
        record = self._record
        owner = self._owner()
        if record.type is None:
            record.type = ITEM_TYPES[record.kind]
        model = entity_to_model(record, self._model)
        if record.id is None:
            item_id = await create_item(owner, model["item"], model["data"], self.context.request_options)
            record.id = item_id
            model["item"]["id"] = item_id
            logger.info("Created %s item %s", record.kind, item_id)
        else:
            await update_item(owner, model["item"], model["data"], self.context.request_options)
            logger.info("Updated %s item %s", record.kind, record.id)
        self._model = model

    async def delete(self) -> None:
        """Delete the backing item (if it was ever saved) and destroy the instance."""
        self._assert_live("delete")
        if self._record.id is not None:
            await delete_item(self._owner(), self._record.id, self.context.request_options)
            logger.info("Deleted %s item %s", self._record.kind, self._record.id)
        self._destroyed = True


class HubGroup(HubEntityInstance):
    """A Portal group as a Hub entity."""

    @classmethod
    def from_json(cls, json: Mapping[str, Any], context: "ArcGISContext") -> "HubGroup":
        """Build an instance from group JSON.

        ``protected`` is accepted for ``isProtected``. Edit and delete rights
        are recomputed from ``memberType`` and ``owner``.
        """
        data = dict(json)
        if "protected" in data:
            data.setdefault("isProtected", data.pop("protected"))
        data["kind"] = "group"
        record = HubGroupRecord.model_validate(data)
        username = get_prop(context.current_user, "username")
        allowed = record.member_type in ("owner", "admin") or (
            username is not None and record.owner == username
        )
        record.can_edit = allowed
        record.can_delete = allowed
        return cls(record, context)

    @classmethod
    async def fetch(cls, group_id: str, context: "ArcGISContext") -> "HubGroup":
        """Load a group.

        Raises:
            NotFoundError: ``"Group not found."``.
        """
        username = get_prop(context.current_user, "username")
        record = await fetch_hub_group(group_id, context.request_options, username)
        return cls(record, context)

    @property
    def is_protected(self) -> bool:
        return self._record.is_protected

    async def save(self) -> None:
        self._assert_live("save")
        group = hub_group_to_group(self._record)
        if self._record.id is None:
            created = await create_group(group, self.context.request_options)
            self._record.id = created.get("id")
            logger.info("Created group %s", self._record.id)
        else:
            await update_group(group, self.context.request_options)
            logger.info("Updated group %s", self._record.id)

    async def delete(self) -> None:
        self._assert_live("delete")
        if self._record.id is not None:
            await delete_group(self._record.id, self.context.request_options)
            logger.info("Deleted group %s", self._record.id)
        self._destroyed = True


__all__ = [
    "HubEntityInstance",
    "HubGroup",
    "HubItemEntity",
    "ITEM_TYPES",
]
