"""Hub entity records.

``HubEntity`` is a tagged union on ``kind``. Item-backed families share
:class:`HubItemRecord`; groups are not items and have their own record.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from ..permissions.policy import EntityPermissionPolicy

_CAMEL = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class ProjectStatus:
    NOT_STARTED = "notStarted"
    IN_PROGRESS = "inProgress"
    ON_HOLD = "onHold"
    COMPLETE = "complete"

    ALL = (NOT_STARTED, IN_PROGRESS, ON_HOLD, COMPLETE)


class HubEntityRecord(BaseModel):
    """Fields every Hub entity has; ``id`` is unset until the entity is saved."""

    id: Optional[str] = None
    name: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[str] = None
    org_id: Optional[str] = None
    access: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    thumbnail_url: Optional[str] = None
    created_date: Optional[datetime] = None
    created_date_source: Optional[str] = None
    updated_date: Optional[datetime] = None
    updated_date_source: Optional[str] = None
    is_discussable: bool = True
    features: dict[str, bool] = Field(default_factory=dict)
    permissions: list[EntityPermissionPolicy] = Field(default_factory=list)
    links: dict[str, Optional[str]] = Field(default_factory=dict)
    can_edit: bool = False
    can_delete: bool = False

    model_config = _CAMEL


class HubItemRecord(HubEntityRecord):
    """Fields shared by every item-backed entity."""

    type: Optional[str] = None
    type_keywords: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    culture: Optional[str] = None
    url: Optional[str] = None
    slug: Optional[str] = None
    catalog: Optional[dict[str, Any]] = None


class HubSite(HubItemRecord):
    kind: Literal["site"] = "site"
    subdomain: Optional[str] = None
    default_hostname: Optional[str] = None
    custom_hostname: Optional[str] = None


class HubProject(HubItemRecord):
    kind: Literal["project"] = "project"
    status: str = ProjectStatus.NOT_STARTED


class HubInitiative(HubItemRecord):
    kind: Literal["initiative"] = "initiative"


class HubPage(HubItemRecord):
    kind: Literal["page"] = "page"
    layout: Optional[dict[str, Any]] = None


class HubDiscussion(HubItemRecord):
    kind: Literal["discussion"] = "discussion"
    prompt: Optional[str] = None


class HubTemplate(HubItemRecord):
    kind: Literal["template"] = "template"
    is_deployed: bool = False
    deployed_type: Optional[str] = None


class HubGroupRecord(HubEntityRecord):
    kind: Literal["group"] = "group"
    is_protected: bool = False
    member_type: Optional[str] = None
    membership_access: Optional[str] = None
    is_invitation_only: bool = False
    is_view_only: bool = False


HubEntity = Annotated[
    Union[HubSite, HubProject, HubInitiative, HubPage, HubDiscussion, HubTemplate, HubGroupRecord],
    Field(discriminator="kind"),
]

_hub_entity_adapter: TypeAdapter[Any] = TypeAdapter(HubEntity)


def parse_hub_entity(json: dict[str, Any]) -> Any:
    """Validate a serialized entity into its variant using ``kind``."""
    return _hub_entity_adapter.validate_python(json)


__all__ = [
    "HubDiscussion",
    "HubEntity",
    "HubEntityRecord",
    "HubGroupRecord",
    "HubInitiative",
    "HubItemRecord",
    "HubPage",
    "HubProject",
    "HubSite",
    "HubTemplate",
    "ProjectStatus",
    "parse_hub_entity",
]
