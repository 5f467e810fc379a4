"""Content model schema abstraction.

Defines the attribute variants a content model can declare and the
predicates used to dispatch on them. Records themselves are plain
dictionaries owned by the data source; only schemas are modelled here.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..exceptions import SchemaError


class AttributeKind(Enum):
    """Kind of a model attribute."""
    SCALAR = "scalar"
    RELATION = "relation"
    COMPONENT = "component"
    DYNAMIC_ZONE = "dynamiczone"
    MEDIA = "media"


class ModelKind(Enum):
    """Kind of a content model."""
    COLLECTION_TYPE = "collectionType"
    SINGLE_TYPE = "singleType"
    COMPONENT = "component"


@dataclass(frozen=True)
class Attribute:
    """Base attribute specification."""
    name: str

    kind = AttributeKind.SCALAR

    def targets(self) -> Tuple[str, ...]:
        """Model identifiers this attribute can reference.

        Returns:
            Tuple of target model identifiers (empty for scalars and media)
        """
        return ()


@dataclass(frozen=True)
class ScalarAttribute(Attribute):
    """Plain value attribute (string, number, boolean, json, ...)."""
    type: str = "string"


@dataclass(frozen=True)
class RelationAttribute(Attribute):
    """Reference to records of another model."""
    target: str = ""
    relation: str = "oneToOne"

    kind = AttributeKind.RELATION

    def targets(self) -> Tuple[str, ...]:
        return (self.target,)


@dataclass(frozen=True)
class ComponentAttribute(Attribute):
    """Embedded structure backed by a component model."""
    component: str = ""
    repeatable: bool = False

    kind = AttributeKind.COMPONENT

    def targets(self) -> Tuple[str, ...]:
        return (self.component,)


@dataclass(frozen=True)
class DynamicZoneAttribute(Attribute):
    """Ordered list of elements, each one of several component kinds."""
    components: Tuple[str, ...] = ()

    kind = AttributeKind.DYNAMIC_ZONE

    def targets(self) -> Tuple[str, ...]:
        return tuple(self.components)


@dataclass(frozen=True)
class MediaAttribute(Attribute):
    """Reference to uploaded file assets."""
    multiple: bool = False

    kind = AttributeKind.MEDIA


def is_scalar(attribute: Attribute) -> bool:
    return attribute.kind is AttributeKind.SCALAR


def is_relation(attribute: Attribute) -> bool:
    return attribute.kind is AttributeKind.RELATION


def is_component(attribute: Attribute) -> bool:
    return attribute.kind is AttributeKind.COMPONENT


def is_dynamic_zone(attribute: Attribute) -> bool:
    return attribute.kind is AttributeKind.DYNAMIC_ZONE


def is_media(attribute: Attribute) -> bool:
    return attribute.kind is AttributeKind.MEDIA


def is_mixed(attribute: Attribute) -> bool:
    """Check if an attribute references other records.

    Args:
        attribute: Attribute to classify

    Returns:
        True for relation, component, dynamic zone and media attributes
    """
    return not is_scalar(attribute)


def parse_attribute(name: str, spec: Mapping[str, Any]) -> Attribute:
    """Build an attribute variant from a schema mapping.

    Args:
        name: Attribute name
        spec: Schema fragment, e.g. ``{"type": "relation", "target": "api::a.a"}``

    Returns:
        The matching Attribute subclass instance

    Raises:
        SchemaError: If a reference attribute is missing its target
    """
    attr_type = spec.get("type", "string")

    if attr_type == "relation":
        target = spec.get("target")
        if not target:
            raise SchemaError(f"Relation attribute '{name}' has no target")
        return RelationAttribute(name, target=target, relation=spec.get("relation", "oneToOne"))

    if attr_type == "component":
        component = spec.get("component")
        if not component:
            raise SchemaError(f"Component attribute '{name}' has no component")
        return ComponentAttribute(name, component=component, repeatable=bool(spec.get("repeatable", False)))

    if attr_type == "dynamiczone":
        return DynamicZoneAttribute(name, components=tuple(spec.get("components", ())))

    if attr_type == "media":
        return MediaAttribute(name, multiple=bool(spec.get("multiple", False)))

    return ScalarAttribute(name, type=attr_type)


@dataclass
class Model:
    """A content model: a named record type with an ordered attribute schema."""

    uid: str
    attributes: "OrderedDict[str, Attribute]" = field(default_factory=OrderedDict)
    kind: ModelKind = ModelKind.COLLECTION_TYPE
    localized: bool = False

    @classmethod
    def from_schema(cls, schema: Mapping[str, Any]) -> "Model":
        """Create a model from a schema mapping.

        Example schema::

            {
                "uid": "api::article.article",
                "kind": "collectionType",
                "pluginOptions": {"i18n": {"localized": True}},
                "attributes": {
                    "title": {"type": "string"},
                    "author": {"type": "relation", "target": "api::author.author"},
                },
            }

        Args:
            schema: Schema mapping

        Returns:
            Parsed Model

        Raises:
            SchemaError: If the schema has no uid or an invalid attribute
        """
        uid = schema.get("uid")
        if not uid:
            raise SchemaError("Schema has no uid")

        attributes = OrderedDict(
            (name, parse_attribute(name, spec))
            for name, spec in (schema.get("attributes") or {}).items()
        )

        try:
            kind = ModelKind(schema.get("kind", ModelKind.COLLECTION_TYPE.value))
        except ValueError as e:
            raise SchemaError(f"Unknown model kind for '{uid}': {schema.get('kind')}") from e

        plugin_options = schema.get("pluginOptions") or {}
        localized = bool((plugin_options.get("i18n") or {}).get("localized", False))

        return cls(uid=uid, attributes=attributes, kind=kind, localized=localized)

    def get_attributes(self, *kinds: AttributeKind) -> List[Attribute]:
        """Get attributes filtered by kind, in declaration order.

        Args:
            *kinds: Kinds to keep (all attributes when omitted)

        Returns:
            List of matching attributes
        """
        if not kinds:
            return list(self.attributes.values())
        return [attr for attr in self.attributes.values() if attr.kind in kinds]

    def mixed_attributes(self) -> List[Attribute]:
        """Attributes whose values reference other records."""
        return [attr for attr in self.attributes.values() if is_mixed(attr)]

    def get_attribute(self, name: str) -> Optional[Attribute]:
        return self.attributes.get(name)

    @property
    def is_component(self) -> bool:
        return self.kind is ModelKind.COMPONENT

    def __repr__(self) -> str:
        return f"Model({self.uid!r}, attributes={list(self.attributes)})"


# Reference attribute kinds, in the order the traversal descends into them
MIXED_KINDS = (
    AttributeKind.COMPONENT,
    AttributeKind.DYNAMIC_ZONE,
    AttributeKind.RELATION,
    AttributeKind.MEDIA,
)
