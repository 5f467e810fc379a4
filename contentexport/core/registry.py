"""Schema registry.

Read-only lookup of content models by identifier. The registry is passed
explicitly to every component that needs schema information, so tests can
build a fabricated model graph in memory.
"""

from collections import OrderedDict
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..exceptions import UnknownModelError
from .model import Model, ModelKind


APP_MODEL_PREFIX = "api::"


class ModelRegistry:
    """In-memory registry of content models.

    Models are kept in registration order so that whole-database exports
    visit them deterministically.
    """

    def __init__(
        self,
        models: Optional[Iterable[Model]] = None,
        extension_model_ids: Sequence[str] = (),
    ):
        """Initialize registry.

        Args:
            models: Initial models to register
            extension_model_ids: Identifiers of models provided by extensions
                (plugins); only exported on request
        """
        self._models: "OrderedDict[str, Model]" = OrderedDict()
        self.extension_model_ids = tuple(extension_model_ids)
        for model in models or ():
            self.register(model)

    @classmethod
    def from_schemas(
        cls,
        schemas: Iterable[Mapping[str, Any]],
        extension_model_ids: Sequence[str] = (),
    ) -> 'ModelRegistry':
        """Build a registry from schema mappings.

        Args:
            schemas: Schema mappings accepted by Model.from_schema
            extension_model_ids: Identifiers of extension-provided models

        Returns:
            Populated registry
        """
        return cls(
            (Model.from_schema(schema) for schema in schemas),
            extension_model_ids=extension_model_ids,
        )

    def register(self, model: Model) -> Model:
        self._models[model.uid] = model
        return model

    def has_model(self, model_id: str) -> bool:
        return model_id in self._models

    def get_model(self, model_id: str) -> Model:
        """Look up a model.

        Args:
            model_id: Model identifier

        Returns:
            The registered model

        Raises:
            UnknownModelError: If no model is registered under model_id
        """
        try:
            return self._models[model_id]
        except KeyError:
            raise UnknownModelError(model_id) from None

    def get_all_model_ids(
        self,
        include_extensions: bool = False,
        extension_ids: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """List every exportable model identifier.

        Exportable models are the application's collection and single types.
        Components are never exported on their own; they are reached
        through the records that embed them.

        Args:
            include_extensions: Also list registered extension models
            extension_ids: Extension model identifiers to use instead of the
                registry's own extension_model_ids

        Returns:
            Model identifiers in registration order
        """
        extensions = self.extension_model_ids if extension_ids is None else tuple(extension_ids)
        model_ids = []
        for uid, model in self._models.items():
            if model.kind is ModelKind.COMPONENT:
                continue
            if uid.startswith(APP_MODEL_PREFIX):
                model_ids.append(uid)
            elif include_extensions and uid in extensions:
                model_ids.append(uid)
        return model_ids

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self):
        return iter(self._models.values())
