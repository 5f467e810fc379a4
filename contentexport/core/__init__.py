"""Core abstractions for content export.

This module defines the schema model, the registry, the data source
interface and the export store that every other component builds on.
"""

from .model import (
    Attribute,
    AttributeKind,
    ScalarAttribute,
    RelationAttribute,
    ComponentAttribute,
    DynamicZoneAttribute,
    MediaAttribute,
    Model,
    ModelKind,
    MIXED_KINDS,
    is_scalar,
    is_relation,
    is_component,
    is_dynamic_zone,
    is_media,
    is_mixed,
    parse_attribute,
)
from .registry import ModelRegistry
from .source import DataSource, PopulateSpec
from .store import ExportStore, FlattenedRecord

__all__ = [
    # Schema
    'Attribute',
    'AttributeKind',
    'ScalarAttribute',
    'RelationAttribute',
    'ComponentAttribute',
    'DynamicZoneAttribute',
    'MediaAttribute',
    'Model',
    'ModelKind',
    'MIXED_KINDS',
    'is_scalar',
    'is_relation',
    'is_component',
    'is_dynamic_zone',
    'is_media',
    'is_mixed',
    'parse_attribute',
    # Registry
    'ModelRegistry',
    # Source
    'DataSource',
    'PopulateSpec',
    # Store
    'ExportStore',
    'FlattenedRecord',
]
