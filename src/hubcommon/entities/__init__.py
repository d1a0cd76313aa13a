"""Hub entities: typed records, model conversion, fetching and instances."""

from .compute import (
    entity_to_model,
    group_to_hub_group,
    hub_group_to_group,
    model_to_discussion,
    model_to_hub_entity,
    model_to_initiative,
    model_to_page,
    model_to_project,
    model_to_site,
    model_to_template,
)
from .features import process_entity_features
from .fetch import fetch_hub_entity, fetch_hub_group, fetch_model_from_item, fetch_project
from .instance import HubEntityInstance, HubGroup, HubItemEntity
from .types import (
    HubDiscussion,
    HubEntity,
    HubEntityRecord,
    HubGroupRecord,
    HubInitiative,
    HubItemRecord,
    HubPage,
    HubProject,
    HubSite,
    HubTemplate,
    ProjectStatus,
    parse_hub_entity,
)

__all__ = [
    "HubDiscussion",
    "HubEntity",
    "HubEntityInstance",
    "HubEntityRecord",
    "HubGroup",
    "HubGroupRecord",
    "HubInitiative",
    "HubItemEntity",
    "HubItemRecord",
    "HubPage",
    "HubProject",
    "HubSite",
    "HubTemplate",
    "ProjectStatus",
    "entity_to_model",
    "fetch_hub_entity",
    "fetch_hub_group",
    "fetch_model_from_item",
    "fetch_project",
    "group_to_hub_group",
    "hub_group_to_group",
    "model_to_discussion",
    "model_to_hub_entity",
    "model_to_initiative",
    "model_to_page",
    "model_to_project",
    "model_to_site",
    "model_to_template",
    "parse_hub_entity",
    "process_entity_features",
]
