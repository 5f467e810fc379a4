"""Population planning.

Computes the nested ``populate`` specification handed to the data source
so that one fetch returns a record together with the referenced records
the traversal will need to read identifiers from.

A specification is one of:

* ``True``: fetch the attribute (or model) but expand nothing further.
* ``None``: do not populate at all.
* ``{"populate": {attribute_name: specification, ...}}``.
"""

from typing import Any, Dict, Optional

from .config import ExportConfig
from .core.model import (
    ComponentAttribute,
    DynamicZoneAttribute,
    Model,
    RelationAttribute,
    is_component,
    is_dynamic_zone,
    is_media,
    is_relation,
)
from .core.registry import ModelRegistry
from .core.source import PopulateSpec


def merge_populate(base: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge two population mappings into a new mapping.

    A nested mapping always wins over ``True`` for the same key, since it
    already implies fetching the attribute.

    Args:
        base: Mapping merged so far
        incoming: Mapping to merge in

    Returns:
        New merged mapping; neither input is modified
    """
    merged = dict(base)
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_populate(current, value)
        elif isinstance(current, dict) and value is True:
            continue
        else:
            merged[key] = value
    return merged


def population_attributes(model: Model, config: ExportConfig):
    """Attributes of a model considered for population, in schema order.

    Attributes configured as ignored for the model are skipped.
    """
    ignored = config.ignored_attributes_for(model.uid)
    return [attr for attr in model.attributes.values() if attr.name not in ignored]


def plan_population(
    registry: ModelRegistry,
    model_id: str,
    depth: int,
    config: Optional[ExportConfig] = None,
) -> PopulateSpec:
    """Build the population specification for a model.

    Args:
        registry: Schema registry
        model_id: Model to plan for
        depth: Remaining depth budget
        config: Export configuration (defaults used if None)

    Returns:
        ``True``, ``None`` or a ``{"populate": ...}`` mapping
    """
    config = config or ExportConfig()

    if depth <= 1:
        return True

    if model_id in config.excluded_models:
        return None

    model = registry.get_model(model_id)
    populate: Dict[str, Any] = {}

    for attribute in population_attributes(model, config):
        if is_component(attribute):
            populate[attribute.name] = _plan_component(registry, attribute, depth, config)
        elif is_dynamic_zone(attribute):
            populate[attribute.name] = _plan_dynamic_zone(registry, attribute, depth, config)
        elif is_relation(attribute):
            relation_populate = _plan_relation(registry, attribute, depth, config)
            if relation_populate:
                populate[attribute.name] = relation_populate
        elif is_media(attribute):
            populate[attribute.name] = True

    return {"populate": populate} if populate else True


def _plan_component(registry, attribute: ComponentAttribute, depth: int, config) -> PopulateSpec:
    return plan_population(registry, attribute.component, depth - 1, config)


def _plan_dynamic_zone(registry, attribute: DynamicZoneAttribute, depth: int, config) -> PopulateSpec:
    zone_populate: Dict[str, Any] = {}
    for component in attribute.components:
        component_populate = plan_population(registry, component, depth - 1, config)
        # Components collapse to True when they have nothing to expand
        if isinstance(component_populate, dict):
            zone_populate = merge_populate(zone_populate, component_populate)
    return zone_populate if zone_populate else True


def _plan_relation(registry, attribute: RelationAttribute, depth: int, config) -> PopulateSpec:
    return plan_population(registry, attribute.target, depth - 1, config)
