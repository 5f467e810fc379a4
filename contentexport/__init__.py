"""ContentExport - depth-bounded export of content graphs.

ContentExport walks the records of a content store from one or more root
models, following relations, components, dynamic zones and media down to a
depth limit, and produces a single flattened snapshot:

    {"version": 2, "data": {model_id: {entry_id: record}}}

Quick start:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from contentexport import ModelRegistry, export_data

    registry = ModelRegistry.from_schemas(schemas)
    content = await export_data(registry, source, "api::article.article", depth=3)
━━━━━━━━━━━━━━━━━━━━━━━━━━

``source`` is any DataSource implementation; see
contentexport.testing.InMemoryDataSource for a reference one.
"""

__version__ = "0.2.0"

from .config import (
    ExportConfig,
    DataFormat,
    FetchErrorMode,
    EXPORT_VERSION,
    DEFAULT_DEPTH,
    DEFAULT_PAGE_SIZE,
    WHOLE_DATABASE,
)
from .core import (
    AttributeKind,
    ScalarAttribute,
    RelationAttribute,
    ComponentAttribute,
    DynamicZoneAttribute,
    MediaAttribute,
    Model,
    ModelKind,
    ModelRegistry,
    DataSource,
    ExportStore,
)
from .exceptions import (
    ExportError,
    SchemaError,
    UnknownModelError,
    UnsupportedFormatError,
    FetchError,
)
from .population import plan_population
from .hierarchy import HierarchyNode, build_hierarchy
from .flatten import flatten_record
from .search import SearchSpec, parse_search
from .converters import convert_data, get_converter
from .error_policies import (
    FetchErrorPolicy,
    FailFastPolicy,
    StopOnFetchErrorPolicy,
    CollectErrorsPolicy,
    ThresholdPolicy,
)
from .error_handling import ErrorHandlingSource, create_resilient_source
from .traversal import TraversalEngine, TraversalStats
from .planning import ExportPlan
from .api import export_data, collect_export, export_data_sync

__all__ = [
    "__version__",
    # Configuration
    "ExportConfig",
    "DataFormat",
    "FetchErrorMode",
    "EXPORT_VERSION",
    "DEFAULT_DEPTH",
    "DEFAULT_PAGE_SIZE",
    "WHOLE_DATABASE",
    # Core
    "AttributeKind",
    "ScalarAttribute",
    "RelationAttribute",
    "ComponentAttribute",
    "DynamicZoneAttribute",
    "MediaAttribute",
    "Model",
    "ModelKind",
    "ModelRegistry",
    "DataSource",
    "ExportStore",
    # Errors
    "ExportError",
    "SchemaError",
    "UnknownModelError",
    "UnsupportedFormatError",
    "FetchError",
    # Building blocks
    "plan_population",
    "HierarchyNode",
    "build_hierarchy",
    "flatten_record",
    "SearchSpec",
    "parse_search",
    "convert_data",
    "get_converter",
    # Error handling
    "FetchErrorPolicy",
    "FailFastPolicy",
    "StopOnFetchErrorPolicy",
    "CollectErrorsPolicy",
    "ThresholdPolicy",
    "ErrorHandlingSource",
    "create_resilient_source",
    # Traversal and orchestration
    "TraversalEngine",
    "TraversalStats",
    "ExportPlan",
    "export_data",
    "collect_export",
    "export_data_sync",
]
