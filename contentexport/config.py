"""Configuration system for ContentExport.

This module defines how callers specify an export run: how deep to
follow references, how large fetch pages are, which models are never
exported, how scopes and aliases resolve, and what to do when the data
source fails.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple


EXPORT_VERSION = 2
DEFAULT_PAGE_SIZE = 500
DEFAULT_DEPTH = 5

ADMIN_USER_MODEL = "admin::user"
MEDIA_MODEL = "plugin::upload.file"
WHOLE_DATABASE = "custom:db"


class DataFormat(Enum):
    """Serialization formats an export can be converted to."""
    JSON = "json"


class FetchErrorMode(Enum):
    """What happens when the data source raises during a fetch."""
    STOP = "stop"      # Treat the failure as end of data (compatible default)
    RAISE = "raise"    # Propagate as FetchError


def _default_ignored_attributes() -> Dict[str, FrozenSet[str]]:
    # The media model's back-reference to every owner would pull the whole database in
    return {MEDIA_MODEL: frozenset({"related"})}


def _default_aliases() -> Dict[str, Tuple[str, ...]]:
    return {"media": (MEDIA_MODEL,)}


def _default_extension_models() -> Tuple[str, ...]:
    return (
        MEDIA_MODEL,
        "plugin::upload.folder",
        "plugin::i18n.locale",
        "plugin::users-permissions.permission",
        "plugin::users-permissions.role",
        "plugin::users-permissions.user",
    )


@dataclass
class ExportConfig:
    """Complete configuration for an export run.

    The ExportPlan validates this configuration before any fetch is made.
    """

    # Traversal limits
    depth: int = DEFAULT_DEPTH
    page_size: int = DEFAULT_PAGE_SIZE

    # Output
    data_format: DataFormat = DataFormat.JSON
    version: int = EXPORT_VERSION

    # Models never exported, and relation targets never referenced
    excluded_models: FrozenSet[str] = frozenset({ADMIN_USER_MODEL})
    disallowed_relation_targets: FrozenSet[str] = frozenset({ADMIN_USER_MODEL})

    # Schema shaping
    media_model_id: str = MEDIA_MODEL
    ignored_attributes: Dict[str, FrozenSet[str]] = field(default_factory=_default_ignored_attributes)

    # Scope resolution
    whole_database_scope: str = WHOLE_DATABASE
    aliases: Dict[str, Tuple[str, ...]] = field(default_factory=_default_aliases)
    extension_model_ids: Tuple[str, ...] = field(default_factory=_default_extension_models)

    # Error handling
    fetch_errors: FetchErrorMode = FetchErrorMode.STOP
    error_policy: Optional[Any] = None  # Explicit FetchErrorPolicy, overrides fetch_errors
    verbose_errors: bool = False

    def __post_init__(self):
        # Accept plain strings for enum fields
        if isinstance(self.data_format, str):
            try:
                self.data_format = DataFormat(self.data_format)
            except ValueError:
                pass  # Left as-is; get_converter() reports it
        if isinstance(self.fetch_errors, str):
            try:
                self.fetch_errors = FetchErrorMode(self.fetch_errors)
            except ValueError:
                pass
        self.excluded_models = frozenset(self.excluded_models)
        self.disallowed_relation_targets = frozenset(self.disallowed_relation_targets)

    # Convenience constructors for common configurations

    @classmethod
    def shallow(cls, depth: int = 1) -> 'ExportConfig':
        """Create config exporting only the requested models' own records.

        Args:
            depth: Reference depth (default 1 = no descent)

        Returns:
            ExportConfig for a shallow export
        """
        return cls(depth=depth)

    @classmethod
    def strict(cls, depth: int = DEFAULT_DEPTH) -> 'ExportConfig':
        """Create config that propagates data source failures.

        Args:
            depth: Reference depth

        Returns:
            ExportConfig raising FetchError on fetch failures
        """
        return cls(depth=depth, fetch_errors=FetchErrorMode.RAISE)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> 'ExportConfig':
        """Create config from a plain mapping (e.g. parsed settings file).

        Unknown keys are ignored so settings can carry unrelated options.

        Args:
            mapping: Settings mapping

        Returns:
            ExportConfig populated from the mapping
        """
        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in mapping.items() if key in known}

        if "aliases" in kwargs:
            kwargs["aliases"] = {
                alias: tuple([targets] if isinstance(targets, str) else targets)
                for alias, targets in kwargs["aliases"].items()
            }
        if "ignored_attributes" in kwargs:
            kwargs["ignored_attributes"] = {
                model_id: frozenset(names)
                for model_id, names in kwargs["ignored_attributes"].items()
            }
        if "extension_model_ids" in kwargs:
            kwargs["extension_model_ids"] = tuple(kwargs["extension_model_ids"])

        return cls(**kwargs)

    def ignored_attributes_for(self, model_id: str) -> FrozenSet[str]:
        return self.ignored_attributes.get(model_id, frozenset())

    def resolve_alias(self, model_id: str) -> str:
        """Map a single-target alias to its canonical model identifier.

        Args:
            model_id: Model identifier or alias

        Returns:
            The first canonical target of the alias, or model_id unchanged
        """
        targets = self.aliases.get(model_id)
        if targets:
            return targets[0]
        return model_id

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.depth, int) or isinstance(self.depth, bool):
            errors.append("depth must be an integer")
        elif self.depth < 1:
            errors.append("depth must be at least 1")

        if not isinstance(self.page_size, int) or isinstance(self.page_size, bool):
            errors.append("page_size must be an integer")
        elif self.page_size <= 0:
            errors.append("page_size must be positive")

        if not isinstance(self.fetch_errors, FetchErrorMode):
            errors.append(f"fetch_errors must be one of: {', '.join(m.value for m in FetchErrorMode)}")

        for alias, targets in self.aliases.items():
            if not targets:
                errors.append(f"alias '{alias}' has no targets")

        if not self.media_model_id:
            errors.append("media_model_id cannot be empty")

        return errors
