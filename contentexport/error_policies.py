"""
Fetch error policies for ContentExport.

This module provides a flexible error handling system through the Policy
pattern, letting callers decide what a data source failure means for an
export: end of data for that branch (the default), or a fatal error.

No policy retries. A transient failure is indistinguishable from the end
of the data it was fetching.
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .exceptions import FetchError

logger = logging.getLogger(__name__)

FETCH_METHODS = ('fetch_page', 'fetch_by_ids')


def _default_result(method_name: str) -> Any:
    """Value returned in place of a failed call so traversal can continue."""
    if method_name in FETCH_METHODS:
        return []  # Empty page ends pagination / yields nothing for an id batch
    return None


class FetchErrorPolicy(ABC):
    """
    Base class for fetch error policies.

    Subclasses implement different strategies for handling errors raised
    by a DataSource during an export.
    """

    @abstractmethod
    async def handle(self, error: Exception, method_name: str, model_id: str, *args, **kwargs) -> Any:
        """
        Handle an error raised by a data source call.

        Args:
            error: The exception that was raised
            method_name: Name of the source method that failed (e.g. 'fetch_page')
            model_id: Model being fetched when the error occurred
            *args: Remaining positional arguments of the failed call
            **kwargs: Keyword arguments of the failed call

        Returns:
            A value standing in for the failed call's result,
            or raises to stop the export.
        """
        pass


class FailFastPolicy(FetchErrorPolicy):
    """
    Policy that raises on the first failure, stopping the export.

    Useful when a partial export is worse than no export.
    """

    async def handle(self, error: Exception, method_name: str, model_id: str, *args, **kwargs) -> Any:
        """Raise FetchError chained to the original error."""
        raise FetchError(model_id, method_name, error) from error


class _RecordingPolicy(FetchErrorPolicy):
    """Shared bookkeeping for policies that keep going after a failure."""

    def __init__(self):
        self.errors: List[Dict[str, Any]] = []

    def _record(self, error: Exception, method_name: str, model_id: str, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        error_record = {
            'model_id': model_id,
            'method': method_name,
            'page': kwargs.get('page'),
            'error': error,
            'error_type': type(error).__name__,
            'error_message': str(error),
        }
        self.errors.append(error_record)
        return error_record

    @property
    def failed_models(self) -> List[str]:
        """Models for which at least one fetch failed, in first-failure order."""
        seen = []
        for record in self.errors:
            if record['model_id'] not in seen:
                seen.append(record['model_id'])
        return seen

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        return {
            'total_errors': len(self.errors),
            'failed_models': self.failed_models,
            'errors': self.errors,
        }


class StopOnFetchErrorPolicy(_RecordingPolicy):
    """
    Policy that treats a failed fetch as the end of the data.

    Errors are recorded for later inspection and logged as warnings; the
    failed call yields no records. This is the default policy.
    """

    def __init__(self, verbose: bool = False):
        """
        Initialize the policy.

        Args:
            verbose: If True, also print warnings to stderr
        """
        super().__init__()
        self.verbose = verbose

    async def handle(self, error: Exception, method_name: str, model_id: str, *args, **kwargs) -> Any:
        """Record the error and return an empty page."""
        self._record(error, method_name, model_id, kwargs)

        logger.warning("%s failed for '%s', treating as end of data: %s", method_name, model_id, error)
        if self.verbose:
            print(f"\nWARNING: {method_name} failed for '{model_id}': {error}", file=sys.stderr)

        return _default_result(method_name)


class CollectErrorsPolicy(_RecordingPolicy):
    """
    Policy that collects all errors without logging, for batch processing.

    Same outcome as StopOnFetchErrorPolicy, but silent.
    """

    async def handle(self, error: Exception, method_name: str, model_id: str, *args, **kwargs) -> Any:
        """Silently collect the error and return a default."""
        self._record(error, method_name, model_id, kwargs)
        return _default_result(method_name)


class ThresholdPolicy(_RecordingPolicy):
    """
    Policy that tolerates errors up to a threshold, then fails.

    Useful when an occasional failure is acceptable but many indicate an
    unavailable data source.
    """

    def __init__(self, max_errors: int = 10, verbose: bool = False):
        """
        Initialize threshold policy.

        Args:
            max_errors: Maximum errors to tolerate before failing
            verbose: If True, print warnings for tolerated errors
        """
        super().__init__()
        self.max_errors = max_errors
        self.verbose = verbose

    @property
    def error_count(self) -> int:
        return len(self.errors)

    async def handle(self, error: Exception, method_name: str, model_id: str, *args, **kwargs) -> Any:
        """Handle error if under threshold, otherwise raise FetchError."""
        self._record(error, method_name, model_id, kwargs)

        if self.error_count > self.max_errors:
            raise FetchError(
                model_id, method_name,
                RuntimeError(f"Error threshold exceeded ({self.max_errors} errors): {error}"),
            ) from error

        logger.warning("%s failed for '%s' [%d/%d]: %s",
                       method_name, model_id, self.error_count, self.max_errors, error)
        if self.verbose:
            print(f"\nWARNING [{self.error_count}/{self.max_errors}]: {method_name} failed for '{model_id}': {error}",
                  file=sys.stderr)

        return _default_result(method_name)
