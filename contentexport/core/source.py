"""Async data source abstraction.

Defines how an external record store is adapted into the export engine.
The engine only ever awaits one fetch at a time, so implementations do
not need to be safe for concurrent use.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Set, Union

PopulateSpec = Union[Dict[str, Any], bool, None]


class DataSource(ABC):
    """Abstract base class for record data sources.

    Both fetch methods may return fewer records than requested and may
    raise; how a failure is treated is decided by the fetch error policy,
    not by the source.
    """

    def __init__(self):
        self._capabilities = self._define_capabilities()

    @abstractmethod
    async def fetch_page(
        self,
        model_id: str,
        populate: PopulateSpec,
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[Dict[str, str]] = None,
        page: int = 1,
        page_size: int = 500,
    ) -> List[Dict[str, Any]]:
        """Fetch one page of records.

        Args:
            model_id: Model to fetch records of
            populate: Population specification (see population.plan_population)
            filters: Optional filter structure
            sort: Optional ``{field: direction}`` sort
            page: 1-based page number
            page_size: Maximum records per page

        Returns:
            List of records (possibly shorter than page_size, or empty)
        """
        pass

    @abstractmethod
    async def fetch_by_ids(
        self,
        model_id: str,
        populate: PopulateSpec,
        ids: Sequence[Any],
    ) -> List[Dict[str, Any]]:
        """Fetch the records with the given identifiers.

        Args:
            model_id: Model to fetch records of
            populate: Population specification
            ids: Identifiers to fetch

        Returns:
            The matching records; unknown identifiers are skipped
        """
        pass

    def supports_capability(self, capability: str) -> bool:
        return capability in self._capabilities

    def _define_capabilities(self) -> Set[str]:
        """Define source capabilities.

        Override in subclasses to declare supported features.
        """
        return {
            'fetch_page',
            'fetch_by_ids',
        }

    async def close(self):
        """Clean up source resources.

        Override if the source holds connections.
        """
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
