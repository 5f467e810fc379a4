"""Exceptions raised by ContentExport."""


class ExportError(Exception):
    """Base class for all export errors."""


class SchemaError(ExportError, ValueError):
    """A model schema could not be parsed."""


class UnknownModelError(ExportError, KeyError):
    """A model identifier is not registered."""

    def __init__(self, model_id: str):
        super().__init__(model_id)
        self.model_id = model_id

    def __str__(self) -> str:
        return f"Unknown model: {self.model_id}"


class UnsupportedFormatError(ExportError, ValueError):
    """The requested data format has no registered converter."""

    def __init__(self, data_format):
        super().__init__(f"Data format {data_format} is not supported.")
        self.data_format = data_format


class FetchError(ExportError):
    """The data source failed while fetching records.

    Only raised when the configured fetch error policy propagates
    failures; the default policy treats them as end of data.
    """

    def __init__(self, model_id: str, method_name: str, cause: Exception):
        super().__init__(f"{method_name} failed for '{model_id}': {cause}")
        self.model_id = model_id
        self.method_name = method_name
        self.cause = cause
