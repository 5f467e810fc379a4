"""Test fixtures for ContentExport consumers.

These fixtures provide an in-memory data source that behaves like a real
content store (pagination, population, filters) and records every call,
so exports can be tested without a database.
"""

import copy
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import MEDIA_MODEL
from ..core.model import Model, is_component, is_dynamic_zone, is_media, is_mixed, is_relation
from ..core.registry import ModelRegistry
from ..core.source import DataSource, PopulateSpec
from ..flatten import COMPONENT_KEY, ID_KEY, LOCALIZATIONS_KEY


@dataclass
class FetchCall:
    """One recorded call to the data source."""
    method: str
    model_id: str
    populate: PopulateSpec
    page: Optional[int] = None
    page_size: Optional[int] = None
    ids: Tuple[Any, ...] = ()
    filters: Optional[Dict[str, Any]] = None
    sort: Optional[Dict[str, str]] = None
    failed: bool = False


class InMemoryDataSource(DataSource):
    """Data source over records held in memory.

    Records are stored in their raw form, where every reference is an
    identifier:

    * relation / component / media: ``id`` or list of ids
    * dynamic zone: list of ``{"__component": kind, "id": id}``
    * ``localizations``: list of ids of the same model

    On fetch, references are expanded into nested records according to the
    population specification, the way a content store would return them.

    Example:
        source = InMemoryDataSource(registry)
        source.add("api::article.article", {"id": 1, "title": "Hi", "author": 7})
        source.fail_on("api::article.article", page=2)
        ...
        assert source.fetch_count("api::article.article") == 2
    """

    def __init__(self, registry: ModelRegistry, media_model_id: str = MEDIA_MODEL):
        """Initialize source.

        Args:
            registry: Schema registry used to interpret raw records
            media_model_id: Model that media attributes point to
        """
        super().__init__()
        self.registry = registry
        self.media_model_id = media_model_id
        self.calls: List[FetchCall] = []
        self._records: Dict[str, "OrderedDict[Any, Dict[str, Any]]"] = {}
        self._failures: Dict[Tuple[str, str], Optional[set]] = {}

    # Data setup

    def add(self, model_id: str, record: Dict[str, Any]) -> Dict[str, Any]:
        self._records.setdefault(model_id, OrderedDict())[record[ID_KEY]] = copy.deepcopy(record)
        return record

    def add_many(self, model_id: str, records: Iterable[Dict[str, Any]]) -> None:
        for record in records:
            self.add(model_id, record)

    def fail_on(self, model_id: str, page: Optional[int] = None, method: str = 'fetch_page') -> None:
        """Make a fetch raise.

        Args:
            model_id: Model whose fetches fail
            page: Page number that fails (every call when None)
            method: 'fetch_page' or 'fetch_by_ids'
        """
        key = (method, model_id)
        if page is None:
            self._failures[key] = None
        else:
            pages = self._failures.get(key, set())
            if pages is not None:
                pages.add(page)
                self._failures[key] = pages

    # Call inspection

    def fetch_count(self, model_id: Optional[str] = None, method: Optional[str] = None) -> int:
        return len(self.calls_for(model_id, method))

    def calls_for(self, model_id: Optional[str] = None, method: Optional[str] = None) -> List[FetchCall]:
        return [
            call for call in self.calls
            if (model_id is None or call.model_id == model_id)
            and (method is None or call.method == method)
        ]

    def requested_ids(self, model_id: str) -> List[Any]:
        """Every identifier requested by id for a model, in call order (with repeats)."""
        return [entry_id for call in self.calls_for(model_id, 'fetch_by_ids') for entry_id in call.ids]

    # DataSource interface

    async def fetch_page(
        self,
        model_id: str,
        populate: PopulateSpec,
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[Dict[str, str]] = None,
        page: int = 1,
        page_size: int = 500,
    ) -> List[Dict[str, Any]]:
        call = FetchCall('fetch_page', model_id, populate, page=page, page_size=page_size,
                         filters=filters, sort=sort)
        self.calls.append(call)
        self._maybe_fail(call)

        raws = [raw for raw in self._records.get(model_id, {}).values() if _matches(raw, filters)]
        for attr, direction in reversed(list((sort or {}).items())):
            raws.sort(key=lambda raw: (raw.get(attr) is None, raw.get(attr)), reverse=direction == 'desc')

        start = (page - 1) * page_size
        return [self._materialize(model_id, raw, populate) for raw in raws[start:start + page_size]]

    async def fetch_by_ids(
        self,
        model_id: str,
        populate: PopulateSpec,
        ids: Sequence[Any],
    ) -> List[Dict[str, Any]]:
        call = FetchCall('fetch_by_ids', model_id, populate, ids=tuple(ids))
        self.calls.append(call)
        self._maybe_fail(call)

        wanted = set(ids)
        return [
            self._materialize(model_id, raw, populate)
            for entry_id, raw in self._records.get(model_id, {}).items()
            if entry_id in wanted
        ]

    # Internals

    def _maybe_fail(self, call: FetchCall) -> None:
        key = (call.method, call.model_id)
        if key not in self._failures:
            return
        pages = self._failures[key]
        if pages is None or call.page in pages:
            call.failed = True
            raise ConnectionError(f"Simulated failure fetching '{call.model_id}' ({call.method}, page={call.page})")

    def _model(self, model_id: str) -> Optional[Model]:
        return self.registry.get_model(model_id) if self.registry.has_model(model_id) else None

    def _materialize(self, model_id: str, raw: Dict[str, Any], populate: PopulateSpec,
                     with_localizations: bool = True) -> Dict[str, Any]:
        """Expand a raw record's references according to ``populate``."""
        model = self._model(model_id)
        if model is None:
            return copy.deepcopy(raw)

        mixed = {attr.name: attr for attr in model.attributes.values() if is_mixed(attr)}
        record = {
            key: copy.deepcopy(value) for key, value in raw.items()
            if key not in mixed and key != LOCALIZATIONS_KEY
        }

        for name, attribute in mixed.items():
            if name not in raw:
                continue
            sub_populate = _attribute_populate(populate, name)
            if sub_populate is None:
                continue
            value = raw[name]
            if value is None:
                record[name] = None
            elif is_dynamic_zone(attribute):
                record[name] = self._expand_zone(value, sub_populate)
            elif is_relation(attribute):
                record[name] = self._expand(attribute.target, value, sub_populate)
            elif is_component(attribute):
                record[name] = self._expand(attribute.component, value, sub_populate)
            elif is_media(attribute):
                record[name] = self._expand(self.media_model_id, value, sub_populate)

        if with_localizations and model.localized and raw.get(LOCALIZATIONS_KEY):
            siblings = self._records.get(model_id, {})
            record[LOCALIZATIONS_KEY] = [
                self._materialize(model_id, siblings[sibling_id], populate, with_localizations=False)
                for sibling_id in raw[LOCALIZATIONS_KEY] if sibling_id in siblings
            ]

        return record

    def _expand(self, model_id: str, ref: Any, populate: PopulateSpec) -> Any:
        nested_populate = populate if isinstance(populate, dict) else False
        records = self._records.get(model_id, {})
        if isinstance(ref, list):
            return [
                self._materialize(model_id, records[entry_id], nested_populate, with_localizations=False)
                for entry_id in ref if entry_id in records
            ]
        if ref in records:
            return self._materialize(model_id, records[ref], nested_populate, with_localizations=False)
        return None

    def _expand_zone(self, elements: List[Dict[str, Any]], populate: PopulateSpec) -> List[Dict[str, Any]]:
        expanded = []
        for element in elements:
            kind = element[COMPONENT_KEY]
            nested = self._expand(kind, element[ID_KEY], populate)
            if nested is not None:
                nested[COMPONENT_KEY] = kind
                expanded.append(nested)
        return expanded


def _attribute_populate(populate: PopulateSpec, name: str) -> PopulateSpec:
    """Population of one attribute: True (shallow), a nested spec, or None (not populated)."""
    if populate is True:
        return True
    if isinstance(populate, dict):
        return (populate.get("populate") or {}).get(name)
    return None


def _matches(raw: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    """Evaluate a small subset of filter operators against a raw record."""
    if not filters:
        return True
    for key, condition in filters.items():
        if key == "$and":
            if not all(_matches(raw, sub) for sub in condition):
                return False
            continue
        if key == "$or":
            if not any(_matches(raw, sub) for sub in condition):
                return False
            continue
        value = raw.get(key)
        if not isinstance(condition, dict):
            condition = {"$eq": condition}
        for operator, expected in condition.items():
            if not _compare(operator, value, expected):
                return False
    return True


def _compare(operator: str, value: Any, expected: Any) -> bool:
    # Query strings carry every value as text
    if operator == "$eq":
        return str(value) == str(expected)
    if operator == "$ne":
        return str(value) != str(expected)
    if operator == "$in":
        return str(value) in {str(item) for item in expected}
    if operator == "$contains":
        return value is not None and str(expected) in str(value)
    if operator == "$containsi":
        return value is not None and str(expected).lower() in str(value).lower()
    raise ValueError(f"Unsupported filter operator: {operator}")


def build_registry(schemas: Iterable[Dict[str, Any]], **kwargs) -> ModelRegistry:
    """Shortcut for ModelRegistry.from_schemas."""
    return ModelRegistry.from_schemas(schemas, **kwargs)
