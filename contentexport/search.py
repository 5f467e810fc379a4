"""Search string parsing.

Turns an admin-panel style query string such as::

    filters[$and][0][title][$contains]=news&sort=publishedAt:DESC

into the filter and sort structures accepted by ``DataSource.fetch_page``.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from urllib.parse import parse_qsl

_KEY_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


@dataclass
class SearchSpec:
    """Parsed search: filter structure plus a single-field sort."""
    filters: Optional[Dict[str, Any]] = None
    sort: Dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.filters and not self.sort


def _split_key(key: str) -> List[str]:
    """Split ``a[b][c]`` into ``['a', 'b', 'c']``."""
    head, _, rest = key.partition("[")
    if not rest:
        return [key]
    return [head] + _KEY_SEGMENT.findall("[" + rest)


def _assign(container: Dict[str, Any], path: List[str], value: str) -> None:
    node = container
    for segment in path[:-1]:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = child
    last = path[-1]
    if last == "":
        # ``key[]=v`` appends
        index = 0
        while str(index) in node:
            index += 1
        last = str(index)
    node[last] = value


def _listify(value: Any) -> Any:
    """Turn dicts keyed by consecutive integers into lists, recursively."""
    if not isinstance(value, dict):
        return value
    converted = {key: _listify(item) for key, item in value.items()}
    keys = list(converted)
    if keys and all(key.isdigit() for key in keys):
        indices = sorted(int(key) for key in keys)
        if indices == list(range(len(indices))):
            return [converted[str(i)] for i in indices]
    return converted


def parse_query_string(query: str) -> Dict[str, Any]:
    """Parse a query string with bracket notation into nested structures.

    Args:
        query: Query string, with or without a leading ``?``

    Returns:
        Nested dict; integer-indexed groups become lists
    """
    result: Dict[str, Any] = {}
    for key, value in parse_qsl(query.lstrip("?"), keep_blank_values=True):
        _assign(result, _split_key(key), value)
    return _listify(result)


def parse_sort(sort_raw: Union[str, None]) -> Dict[str, str]:
    """Parse a ``field:direction`` token.

    Args:
        sort_raw: Raw sort token

    Returns:
        ``{field: direction}`` with the direction lowercased, or empty dict
    """
    if not isinstance(sort_raw, str):
        return {}
    attr, _, direction = sort_raw.partition(":")
    if attr and direction:
        return {attr: direction.lower()}
    return {}


def parse_search(search: Optional[str]) -> SearchSpec:
    """Parse a search string into filters and sort.

    Args:
        search: Query string (empty or None yields an empty spec)

    Returns:
        SearchSpec
    """
    if not search:
        return SearchSpec()

    parsed = parse_query_string(search)
    filters = parsed.get("filters")
    return SearchSpec(
        filters=filters if isinstance(filters, dict) else None,
        sort=parse_sort(parsed.get("sort")),
    )
