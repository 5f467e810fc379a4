"""Hierarchy building.

The hierarchy is the static map of a traversal: for every reference
attribute reachable from a root model (down to the depth limit) it records
which model the attribute leads to. The traversal engine consults it to
know the target model of a nested attribute even where population has
already stopped expanding.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from .config import ExportConfig
from .core.model import is_component, is_dynamic_zone, is_media, is_relation
from .core.registry import ModelRegistry
from .population import population_attributes


@dataclass
class HierarchyNode:
    """One node of the hierarchy.

    ``children`` maps an attribute name to either the node of its target
    model or, for dynamic zones, a mapping ``component_kind -> node``.
    """

    model_id: str
    children: Dict[str, Union['HierarchyNode', Dict[str, 'HierarchyNode']]] = field(default_factory=dict)

    def child(self, attribute_name: str) -> Optional['HierarchyNode']:
        """Get the node a relation, component or media attribute leads to.

        Args:
            attribute_name: Attribute name

        Returns:
            Child node, or None if the attribute is not mapped at this depth
        """
        node = self.children.get(attribute_name)
        return node if isinstance(node, HierarchyNode) else None

    def zone(self, attribute_name: str, component_kind: str) -> Optional['HierarchyNode']:
        """Get the node of one component kind of a dynamic zone.

        Args:
            attribute_name: Dynamic zone attribute name
            component_kind: Component model identifier

        Returns:
            Child node, or None if not mapped at this depth
        """
        zone = self.children.get(attribute_name)
        if isinstance(zone, dict):
            return zone.get(component_kind)
        return None

    @property
    def is_terminal(self) -> bool:
        return not self.children

    def iter_nodes(self) -> Iterator['HierarchyNode']:
        """Yield child nodes (dynamic-zone entries flattened), not recursive."""
        for value in self.children.values():
            if isinstance(value, HierarchyNode):
                yield value
            else:
                yield from value.values()

    def depth(self) -> int:
        """Length of the longest path from this node (a terminal node is 1)."""
        return 1 + max((node.depth() for node in self.iter_nodes()), default=0)

    def to_dict(self) -> Dict[str, Any]:
        """Nested plain-dict form, with the model identifier under ``__slug``."""
        result: Dict[str, Any] = {"__slug": self.model_id}
        for name, value in self.children.items():
            if isinstance(value, HierarchyNode):
                result[name] = value.to_dict()
            else:
                result[name] = {kind: node.to_dict() for kind, node in value.items()}
        return result


def build_hierarchy(
    registry: ModelRegistry,
    model_id: str,
    depth: int,
    config: Optional[ExportConfig] = None,
) -> HierarchyNode:
    """Build the hierarchy rooted at a model.

    The result depends only on the schema, the model identifier and the
    depth; no data is fetched.

    Args:
        registry: Schema registry
        model_id: Root model identifier or alias
        depth: Depth budget
        config: Export configuration (defaults used if None)

    Returns:
        Root HierarchyNode
    """
    config = config or ExportConfig()
    model_id = config.resolve_alias(model_id)

    node = HierarchyNode(model_id)
    if depth <= 1:
        return node

    # Excluded models are never traversed, so their schema is not needed
    if model_id in config.excluded_models:
        return node

    # Media targets are valid even when the file model's schema is not registered
    if model_id == config.media_model_id and not registry.has_model(model_id):
        return node

    model = registry.get_model(model_id)
    for attribute in population_attributes(model, config):
        if is_component(attribute):
            node.children[attribute.name] = build_hierarchy(registry, attribute.component, depth - 1, config)
        elif is_dynamic_zone(attribute):
            node.children[attribute.name] = {
                component: build_hierarchy(registry, component, depth - 1, config)
                for component in attribute.components
            }
        elif is_relation(attribute):
            node.children[attribute.name] = build_hierarchy(registry, attribute.target, depth - 1, config)
        elif is_media(attribute):
            node.children[attribute.name] = build_hierarchy(registry, config.media_model_id, depth - 1, config)

    return node


def iter_paths(node: HierarchyNode, prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], str]]:
    """Yield ``(attribute_path, model_id)`` for every node below ``node``.

    Dynamic-zone paths include the component kind as a path segment.
    """
    for name, value in node.children.items():
        if isinstance(value, HierarchyNode):
            yield prefix + (name,), value.model_id
            yield from iter_paths(value, prefix + (name,))
        else:
            for kind, child in value.items():
                yield prefix + (name, kind), child.model_id
                yield from iter_paths(child, prefix + (name, kind))
