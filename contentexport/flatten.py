"""Record flattening.

Rewrites the reference attributes of a fetched record into bare
identifiers so the export holds every record exactly once, keyed by its
model, instead of nested copies.
"""

import copy
from typing import Any, Dict, Iterable, List

from .core.model import Attribute, is_component, is_dynamic_zone, is_media, is_relation

COMPONENT_KEY = "__component"
ID_KEY = "id"
LOCALIZATIONS_KEY = "localizations"
KIND_FIELD = "componentKind"
IDENTIFIER_FIELD = "identifier"


def flatten_reference(value: Any) -> Any:
    """Replace nested records by their identifiers.

    Lists are flattened element-wise; elements that are not mappings
    (already flattened identifiers) pass through unchanged.

    Args:
        value: Attribute value (record, list of records, or identifier)

    Returns:
        Identifier, list of identifiers, or value unchanged
    """
    if value is None:
        return None
    if isinstance(value, list):
        return [item.get(ID_KEY) if isinstance(item, dict) else item for item in value]
    if isinstance(value, dict):
        return value.get(ID_KEY)
    return value


def flatten_dynamic_zone(value: Any) -> Any:
    """Replace every zone element by its ``{componentKind, identifier}`` pair, in order."""
    if value is None:
        return None
    return [
        {KIND_FIELD: element.get(COMPONENT_KEY), IDENTIFIER_FIELD: element.get(ID_KEY)}
        if isinstance(element, dict) else element
        for element in value
    ]


def flatten_value(attribute: Attribute, value: Any) -> Any:
    """Flatten one attribute value according to the attribute kind.

    Args:
        attribute: Attribute specification
        value: Raw value from the record

    Returns:
        Flattened value
    """
    if value is None:
        return None
    if is_dynamic_zone(attribute):
        return flatten_dynamic_zone(value)
    if is_component(attribute) or is_media(attribute) or is_relation(attribute):
        return flatten_reference(value)
    return value


def flatten_record(record: Dict[str, Any], mixed_attributes: Iterable[Attribute]) -> Dict[str, Any]:
    """Flatten a record for storage.

    Works on a deep copy; the caller's record is never modified.
    Attributes the record does not carry stay absent.

    Args:
        record: Fetched record
        mixed_attributes: Reference attributes of the record's model

    Returns:
        New flattened record
    """
    flattened = copy.deepcopy(record)
    handled = set()
    for attribute in mixed_attributes:
        handled.add(attribute.name)
        if attribute.name in flattened:
            flattened[attribute.name] = flatten_value(attribute, flattened[attribute.name])

    # Translation siblings are stored as records of their own
    if LOCALIZATIONS_KEY in flattened and LOCALIZATIONS_KEY not in handled:
        flattened[LOCALIZATIONS_KEY] = flatten_reference(flattened[LOCALIZATIONS_KEY])
    return flattened


def flatten_records(records: Iterable[Dict[str, Any]], mixed_attributes: List[Attribute]) -> List[Dict[str, Any]]:
    return [flatten_record(record, mixed_attributes) for record in records]
