"""
Error handling data source for ContentExport.

This module provides the ErrorHandlingSource that wraps a DataSource and
delegates fetch failures to pluggable policies.
"""

import asyncio
import functools
from typing import Any, Iterable, Optional

from .config import ExportConfig, FetchErrorMode
from .error_policies import (
    FETCH_METHODS,
    FailFastPolicy,
    FetchErrorPolicy,
    StopOnFetchErrorPolicy,
)


class ErrorHandlingSource:
    """
    Data source proxy that routes fetch failures through a policy.

    Uses the dynamic proxy pattern: attribute access falls through to the
    wrapped source, and fetch methods are wrapped so that an exception
    raised while awaiting them is handed to the policy, whose return value
    stands in for the fetch result.

    Other methods (``close`` and any source-specific helpers) are passed
    through untouched, so their errors propagate.
    """

    def __init__(
        self,
        base_source: Any,
        policy: Optional[FetchErrorPolicy] = None,
        handled_methods: Iterable[str] = FETCH_METHODS,
    ):
        """
        Initialize the error handling source.

        Args:
            base_source: The DataSource to wrap
            policy: Error handling policy (defaults to StopOnFetchErrorPolicy)
            handled_methods: Names of the methods whose failures go to the policy
        """
        self._base_source = base_source
        self._policy = policy or StopOnFetchErrorPolicy()
        self._handled_methods = frozenset(handled_methods)

    async def __aenter__(self):
        if hasattr(self._base_source, '__aenter__'):
            await self._base_source.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if hasattr(self._base_source, '__aexit__'):
            return await self._base_source.__aexit__(exc_type, exc_val, exc_tb)
        return None

    def __getattr__(self, name: str) -> Any:
        """
        Proxy attribute access to the wrapped source.

        Args:
            name: The attribute name being accessed

        Returns:
            The attribute of the wrapped source, wrapped if it is a handled method
        """
        attr = getattr(self._base_source, name)

        if not callable(attr) or name not in self._handled_methods:
            return attr

        @functools.wraps(attr)
        def wrapper(*args, **kwargs):
            result = attr(*args, **kwargs)
            if asyncio.iscoroutine(result):
                return self._handle_coroutine(result, name, *args, **kwargs)
            return result

        return wrapper

    async def _handle_coroutine(self, coro, method_name: str, *args, **kwargs) -> Any:
        """
        Await a fetch, handing any exception to the policy.

        Args:
            coro: The fetch coroutine
            method_name: Name of the method being called
            *args: Original call arguments (model identifier first)
            **kwargs: Original keyword arguments

        Returns:
            The fetch result, or the policy's stand-in value
        """
        try:
            return await coro
        except Exception as e:
            model_id = args[0] if args else kwargs.pop('model_id', None)
            return await self._policy.handle(e, method_name, model_id, *args[1:], **kwargs)

    def get_policy(self) -> FetchErrorPolicy:
        return self._policy

    def set_policy(self, policy: FetchErrorPolicy) -> None:
        self._policy = policy

    def get_base_source(self) -> Any:
        return self._base_source

    def __repr__(self) -> str:
        return f"ErrorHandlingSource({self._base_source!r}, policy={self._policy.__class__.__name__})"


def policy_from_config(config: ExportConfig) -> FetchErrorPolicy:
    """
    Select the fetch error policy for a configuration.

    An explicit ``config.error_policy`` wins; otherwise ``fetch_errors``
    picks between stopping silently and failing fast.

    Args:
        config: Export configuration

    Returns:
        A FetchErrorPolicy instance
    """
    if config.error_policy is not None:
        return config.error_policy
    if config.fetch_errors is FetchErrorMode.RAISE:
        return FailFastPolicy()
    return StopOnFetchErrorPolicy(verbose=config.verbose_errors)


def create_resilient_source(base_source: Any, strict: bool = False, verbose: bool = False) -> ErrorHandlingSource:
    """
    Convenience function to wrap a source with error handling.

    Args:
        base_source: The source to wrap
        strict: If True, use FailFastPolicy; otherwise StopOnFetchErrorPolicy
        verbose: If True, print warnings for errors (only when strict=False)

    Returns:
        An ErrorHandlingSource configured appropriately
    """
    policy = FailFastPolicy() if strict else StopOnFetchErrorPolicy(verbose=verbose)
    return ErrorHandlingSource(base_source, policy)
