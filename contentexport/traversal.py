"""Depth-bounded traversal of the content graph.

The TraversalEngine fetches the records of one model page by page,
flattens them into the export store, and for every page descends into the
records it references before the next page is fetched. Descent is bounded
by the depth budget only: a cycle between two models is followed on every
level until the budget runs out, while the store (acting as memo) keeps
any record from being fetched twice.

All fetches are awaited one at a time. The store is only touched between
two fetches, so no locking is needed.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .config import ExportConfig
from .core.model import MIXED_KINDS, AttributeKind, Model
from .core.registry import ModelRegistry
from .core.store import ExportStore
from .error_handling import ErrorHandlingSource, policy_from_config
from .flatten import COMPONENT_KEY, ID_KEY, LOCALIZATIONS_KEY, flatten_records
from .hierarchy import HierarchyNode
from .population import plan_population
from .search import SearchSpec, parse_search

logger = logging.getLogger(__name__)

# Descent order; only affects when the store is filled, not what it ends up holding
DESCENT_ORDER = MIXED_KINDS


@dataclass
class TraversalStats:
    """Counters collected while traversing."""
    pages_fetched: int = 0
    records_fetched: int = 0
    records_merged: int = 0
    descents: int = 0
    memoized_ids: int = 0
    excluded_visits: int = 0
    models_visited: Dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'pages_fetched': self.pages_fetched,
            'records_fetched': self.records_fetched,
            'records_merged': self.records_merged,
            'descents': self.descents,
            'memoized_ids': self.memoized_ids,
            'excluded_visits': self.excluded_visits,
            'models_visited': dict(self.models_visited),
        }


def unique_ids(ids: Iterable[Any]) -> List[Any]:
    """Deduplicate identifiers, keeping first-seen order."""
    seen = set()
    result = []
    for entry_id in ids:
        if entry_id not in seen:
            seen.add(entry_id)
            result.append(entry_id)
    return result


def referenced_records(records: Sequence[Dict[str, Any]], attribute_name: str) -> List[Dict[str, Any]]:
    """Nested records an attribute holds across a page (single or to-many values)."""
    nested = []
    for record in records:
        value = record.get(attribute_name)
        if not value:
            continue
        for item in value if isinstance(value, list) else [value]:
            if isinstance(item, dict):
                nested.append(item)
    return nested


def expand_localizations(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Append translation siblings not already present in the page.

    Siblings are taken from each record's ``localizations`` list; they are
    not expanded further.

    Args:
        records: Page records

    Returns:
        New list: the page records followed by the new siblings
    """
    expanded = list(records)
    seen = {record.get(ID_KEY) for record in records}
    for record in records:
        for localization in record.get(LOCALIZATIONS_KEY) or ():
            if not isinstance(localization, dict):
                continue
            localization_id = localization.get(ID_KEY)
            if localization_id is not None and localization_id not in seen:
                expanded.append(localization)
                seen.add(localization_id)
    return expanded


def strip_attributes(records: List[Dict[str, Any]], names: Sequence[str]) -> List[Dict[str, Any]]:
    """Copy records without the named attributes (records themselves are left intact)."""
    if not names:
        return records
    return [{key: value for key, value in record.items() if key not in names} for record in records]


class TraversalEngine:
    """Export traversal over a schema registry and a data source.

    Example:
        >>> engine = TraversalEngine(registry, source, ExportConfig(depth=3))
        >>> hierarchy = build_hierarchy(registry, "api::article.article", 3)
        >>> store = await engine.traverse(ExportStore(), "api::article.article", hierarchy, 3)
    """

    def __init__(
        self,
        registry: ModelRegistry,
        source: Any,
        config: Optional[ExportConfig] = None,
    ):
        """Initialize engine.

        Args:
            registry: Schema registry
            source: DataSource; wrapped in an ErrorHandlingSource using the
                configured fetch error policy unless it already is one
            config: Export configuration (defaults used if None)
        """
        self.registry = registry
        self.config = config or ExportConfig()
        if isinstance(source, ErrorHandlingSource):
            self.source = source
        else:
            self.source = ErrorHandlingSource(source, policy_from_config(self.config))
        self.stats = TraversalStats()

    @property
    def policy(self):
        return self.source.get_policy()

    async def traverse(
        self,
        store: ExportStore,
        model_id: str,
        hierarchy: HierarchyNode,
        depth: int,
        *,
        search: Union[str, SearchSpec, None] = None,
        ids: Optional[Sequence[Any]] = None,
    ) -> ExportStore:
        """Export the records of a model and everything they reference.

        With ``ids`` the engine fetches exactly those records, in batches of
        ``page_size`` (explicit-id mode, used for every descent). Without it
        the engine pages through the model, optionally filtered and sorted
        by ``search`` (discovery mode, used at the export root).

        Args:
            store: Accumulating store; merged into in place
            model_id: Model to export
            hierarchy: Hierarchy node of the model
            depth: Remaining depth budget
            search: Search string or parsed SearchSpec (discovery mode only)
            ids: Identifiers to fetch (explicit-id mode)

        Returns:
            The store, holding the merged result
        """
        if model_id in self.config.excluded_models:
            logger.debug("Skipping excluded model '%s'", model_id)
            self.stats.excluded_visits += 1
            return store

        model = self.registry.get_model(model_id)
        populate = plan_population(self.registry, model_id, depth, self.config)
        self.stats.models_visited[model_id] = self.stats.models_visited.get(model_id, 0) + 1

        if ids is not None:
            await self._fetch_explicit(store, model, hierarchy, depth, populate, ids)
        else:
            await self._fetch_discovery(store, model, hierarchy, depth, populate, search)

        return store

    async def _fetch_explicit(self, store, model: Model, hierarchy, depth, populate, ids) -> None:
        page_size = self.config.page_size
        pending = unique_ids(ids)

        for start in range(0, len(pending), page_size):
            chunk = pending[start:start + page_size]
            logger.debug("Fetching %d '%s' records by id (depth %d)", len(chunk), model.uid, depth)
            records = await self.source.fetch_by_ids(model.uid, populate, chunk)
            self.stats.pages_fetched += 1
            await self._process_page(store, model, hierarchy, depth, records)

    async def _fetch_discovery(self, store, model: Model, hierarchy, depth, populate, search) -> None:
        spec = search if isinstance(search, SearchSpec) else parse_search(search)
        page_size = self.config.page_size
        page = 1

        while True:
            logger.debug("Fetching '%s' page %d (depth %d)", model.uid, page, depth)
            records = await self.source.fetch_page(
                model.uid,
                populate,
                filters=spec.filters,
                sort=spec.sort or None,
                page=page,
                page_size=page_size,
            )
            records = list(records or [])
            self.stats.pages_fetched += 1
            if not records:
                break

            await self._process_page(store, model, hierarchy, depth, records)

            if len(records) < page_size:
                break
            page += 1

    async def _process_page(
        self,
        store: ExportStore,
        model: Model,
        hierarchy: HierarchyNode,
        depth: int,
        raw_records: Optional[List[Dict[str, Any]]],
    ) -> None:
        """Merge one page into the store, then descend into its references."""
        records = [record for record in raw_records or [] if record]
        self.stats.records_fetched += len(records)

        if model.localized:
            records = expand_localizations(records)

        disallowed = [
            attribute.name
            for attribute in model.get_attributes(AttributeKind.RELATION)
            if attribute.target in self.config.disallowed_relation_targets
        ]
        records = strip_attributes(records, disallowed)

        page_entries: Dict[Any, Dict[str, Any]] = {}
        for flattened in flatten_records(records, model.mixed_attributes()):
            if flattened.get(ID_KEY) is None:
                continue
            page_entries.setdefault(flattened.get(ID_KEY), flattened)
        self.stats.records_merged += store.merge(model.uid, page_entries)

        await self._descend(store, model, hierarchy, depth, records)

    async def _descend(
        self,
        store: ExportStore,
        model: Model,
        hierarchy: HierarchyNode,
        depth: int,
        records: List[Dict[str, Any]],
    ) -> None:
        """Recurse into every referenced model for identifiers not yet stored."""
        for kind in DESCENT_ORDER:
            for attribute in model.get_attributes(kind):
                if kind is AttributeKind.DYNAMIC_ZONE:
                    for component_kind in attribute.components:
                        node = hierarchy.zone(attribute.name, component_kind)
                        if node is None:
                            continue
                        elements = [
                            element for element in referenced_records(records, attribute.name)
                            if element.get(COMPONENT_KEY) == component_kind
                        ]
                        await self._descend_into(store, node, depth, elements)
                else:
                    node = hierarchy.child(attribute.name)
                    if node is None:
                        continue
                    await self._descend_into(store, node, depth, referenced_records(records, attribute.name))

    async def _descend_into(
        self,
        store: ExportStore,
        node: HierarchyNode,
        depth: int,
        nested: List[Dict[str, Any]],
    ) -> None:
        candidates = unique_ids(item.get(ID_KEY) for item in nested if item.get(ID_KEY) is not None)
        ids = [entry_id for entry_id in candidates if not store.contains(node.model_id, entry_id)]
        self.stats.memoized_ids += len(candidates) - len(ids)
        if not ids:
            return

        self.stats.descents += 1
        logger.debug("Descending into '%s' for %d records (depth %d)", node.model_id, len(ids), depth - 1)
        result = await self.traverse(store, node.model_id, node, depth - 1, ids=ids)
        store.merge_store(result)
