"""High-level API for ContentExport.

Simple entry points for the common case: export a model, an alias or the
whole database to a serialized document.
"""

import asyncio
from typing import Any, Dict, Optional

from .config import ExportConfig
from .core.registry import ModelRegistry
from .planning import ExportPlan


async def export_data(
    registry: ModelRegistry,
    source: Any,
    scope: str,
    search: Optional[str] = None,
    apply_search: bool = False,
    depth: Optional[int] = None,
    include_extension_models: bool = False,
    config: Optional[ExportConfig] = None,
) -> str:
    """Export records reachable from a scope and serialize them.

    Args:
        registry: Schema registry
        source: DataSource to fetch from
        scope: Model identifier, alias (e.g. ``"media"``) or the
            whole-database sentinel (``"custom:db"``)
        search: Search string, e.g. ``"filters[title][$eq]=x&sort=title:asc"``
        apply_search: Only when True is ``search`` applied
        depth: How many reference levels to follow (config.depth if None)
        include_extension_models: Include extension models in a
            whole-database export
        config: Export configuration (defaults used if None)

    Returns:
        Serialized export (JSON by default)

    Example:
        >>> content = await export_data(registry, source, "api::article.article", depth=3)
    """
    plan = ExportPlan(registry, source, config)
    return await plan.execute(
        scope,
        search=search,
        apply_search=apply_search,
        depth=depth,
        include_extension_models=include_extension_models,
    )


async def collect_export(
    registry: ModelRegistry,
    source: Any,
    scope: str,
    depth: Optional[int] = None,
    config: Optional[ExportConfig] = None,
    **kwargs,
) -> Dict[str, Any]:
    """Like export_data, but return the envelope without converting it."""
    plan = ExportPlan(registry, source, config)
    return await plan.collect(scope, depth=depth, **kwargs)


def export_data_sync(*args, **kwargs) -> str:
    """Blocking wrapper around export_data for scripts.

    Must not be called from inside a running event loop.
    """
    return asyncio.run(export_data(*args, **kwargs))
