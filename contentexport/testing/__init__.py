"""Testing utilities for ContentExport consumers."""

from .fixtures import FetchCall, InMemoryDataSource, build_registry

__all__ = ['FetchCall', 'InMemoryDataSource', 'build_registry']
