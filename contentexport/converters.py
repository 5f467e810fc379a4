"""Export envelope converters.

Each supported DataFormat maps to a converter turning the export envelope
into its serialized text.
"""

import json
from typing import Any, Callable, Dict, Union

from .config import DataFormat
from .exceptions import UnsupportedFormatError

Converter = Callable[..., str]


def convert_to_json(envelope: Dict[str, Any], indent: int = None, **options) -> str:
    """Serialize an envelope to JSON.

    Entry identifiers become JSON object keys, so they are serialized as
    strings. Values JSON cannot represent (dates, decimals) use ``str()``.

    Args:
        envelope: ``{"version": ..., "data": ...}`` mapping
        indent: Optional indentation for pretty output

    Returns:
        JSON text
    """
    return json.dumps(envelope, indent=indent, default=str, ensure_ascii=False)


_CONVERTERS: Dict[DataFormat, Converter] = {
    DataFormat.JSON: convert_to_json,
}


def get_converter(data_format: Union[DataFormat, str]) -> Converter:
    """Look up the converter of a data format.

    Args:
        data_format: DataFormat member or its value (e.g. ``"json"``)

    Returns:
        Converter callable

    Raises:
        UnsupportedFormatError: If no converter is registered for the format
    """
    try:
        fmt = data_format if isinstance(data_format, DataFormat) else DataFormat(data_format)
    except ValueError:
        raise UnsupportedFormatError(data_format) from None

    converter = _CONVERTERS.get(fmt)
    if converter is None:
        raise UnsupportedFormatError(fmt.value)
    return converter


def convert_data(envelope: Dict[str, Any], data_format: Union[DataFormat, str] = DataFormat.JSON, **options) -> str:
    """Convert an envelope with the converter of ``data_format``."""
    converter = get_converter(data_format)
    return converter(envelope, **options)
