"""Export planning and orchestration.

This module provides the ExportPlan class that resolves an export scope to
model identifiers, runs the traversal engine once per model into a single
store, and converts the resulting envelope.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from .config import ExportConfig
from .converters import get_converter
from .core.registry import ModelRegistry
from .core.store import ExportStore
from .hierarchy import build_hierarchy
from .search import SearchSpec
from .traversal import TraversalEngine

logger = logging.getLogger(__name__)


class ExportPlan:
    """Orchestrates an export run with configuration validation.

    This class brings together the registry, the data source and the
    traversal engine to produce one export document.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        source: Any,
        config: Optional[ExportConfig] = None,
    ):
        """Initialize export plan.

        Args:
            registry: Schema registry
            source: DataSource to fetch records from
            config: Export configuration (defaults used if None)

        Raises:
            ValueError: If the configuration is invalid
        """
        self.config = config or ExportConfig()

        errors = self.config.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {', '.join(errors)}")

        self.registry = registry
        self.engine = TraversalEngine(registry, source, self.config)
        self.stats = {
            'models_exported': 0,
            'entries_exported': 0,
        }

    def resolve_scope(self, scope: str, include_extension_models: bool = False) -> List[str]:
        """Resolve an export scope to model identifiers.

        Args:
            scope: Whole-database sentinel, alias, or model identifier
            include_extension_models: Include extension models in a
                whole-database export

        Returns:
            Model identifiers to export, in order
        """
        if scope == self.config.whole_database_scope:
            return self.registry.get_all_model_ids(
                include_extensions=include_extension_models,
                extension_ids=self.config.extension_model_ids,
            )
        if scope in self.config.aliases:
            return list(self.config.aliases[scope])
        return [scope]

    async def collect(
        self,
        scope: str,
        search: Union[str, SearchSpec, None] = None,
        apply_search: bool = False,
        depth: Optional[int] = None,
        include_extension_models: bool = False,
        store: Optional[ExportStore] = None,
    ) -> Dict[str, Any]:
        """Run the export and return the unconverted envelope.

        Args:
            scope: Whole-database sentinel, alias, or model identifier
            search: Search string applied to each root model
            apply_search: Only when True is ``search`` used
            depth: Depth budget (config.depth if None)
            include_extension_models: Include extension models in a
                whole-database export
            store: Starting store; entries already in it are not re-fetched

        Returns:
            ``{"version": ..., "data": {model_id: {entry_id: record}}}``
        """
        depth = self.config.depth if depth is None else depth
        store = store if store is not None else ExportStore()

        model_ids = self.resolve_scope(scope, include_extension_models)
        for model_id in model_ids:
            before = len(store)
            hierarchy = build_hierarchy(self.registry, model_id, depth, self.config)
            result = await self.engine.traverse(
                store,
                hierarchy.model_id,
                hierarchy,
                depth,
                search=search if apply_search else None,
            )
            store.merge_store(result)
            self.stats['models_exported'] += 1
            logger.info("Exported '%s': %d new entries", model_id, len(store) - before)

        self.stats['entries_exported'] = len(store)
        return {
            'version': self.config.version,
            'data': store.as_dict(),
        }

    async def execute(
        self,
        scope: str,
        search: Union[str, SearchSpec, None] = None,
        apply_search: bool = False,
        depth: Optional[int] = None,
        include_extension_models: bool = False,
        **converter_options,
    ) -> str:
        """Run the export and convert it with the configured data format.

        The converter is resolved before anything is fetched, so an
        unsupported format fails immediately.

        Returns:
            The converter's output

        Raises:
            UnsupportedFormatError: If config.data_format has no converter
        """
        converter = get_converter(self.config.data_format)
        envelope = await self.collect(
            scope,
            search=search,
            apply_search=apply_search,
            depth=depth,
            include_extension_models=include_extension_models,
        )
        return converter(envelope, **converter_options)

    def get_stats(self) -> Dict[str, Any]:
        """Get plan and traversal statistics."""
        stats = dict(self.stats)
        stats['traversal'] = self.engine.stats.as_dict()
        policy = self.engine.policy
        if hasattr(policy, 'get_statistics'):
            stats['fetch_errors'] = policy.get_statistics()
        return stats
