"""Export store.

Accumulates flattened records keyed by model identifier and entry
identifier. The store is the memo of the traversal: an entry that is
present is never fetched again, and a later merge of the same
``(model_id, entry_id)`` pair never replaces it.
"""

from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union


FlattenedRecord = Dict[str, Any]


class ExportStore:
    """Double-keyed mapping ``model_id -> entry_id -> flattened record``.

    Merges are additive and first-seen-wins, which makes them idempotent:
    merging the same entries twice leaves the store as after the first
    merge.
    """

    def __init__(self, data: Optional[Mapping[str, Mapping[Any, FlattenedRecord]]] = None):
        """Initialize store.

        Args:
            data: Optional initial ``{model_id: {entry_id: record}}`` content
        """
        self._data: Dict[str, Dict[Any, FlattenedRecord]] = {}
        self.merged_count = 0
        self.skipped_count = 0
        if data:
            for model_id, entries in data.items():
                self.merge(model_id, entries)

    def merge(self, model_id: str, entries: Mapping[Any, FlattenedRecord]) -> int:
        """Merge entries of one model into the store.

        Entries already present are kept; the incoming duplicate is dropped.

        Args:
            model_id: Model the entries belong to
            entries: Mapping of entry identifier to flattened record

        Returns:
            Number of entries actually added
        """
        bucket = self._data.setdefault(model_id, {})
        added = 0
        for entry_id, record in entries.items():
            if entry_id in bucket:
                self.skipped_count += 1
                continue
            bucket[entry_id] = record
            added += 1
        self.merged_count += added
        return added

    def merge_store(self, other: Union['ExportStore', Mapping[str, Mapping[Any, FlattenedRecord]]]) -> int:
        """Merge another store into this one, existing entries taking precedence.

        Args:
            other: Store (or plain nested mapping) to merge in

        Returns:
            Number of entries added
        """
        if other is self:
            return 0
        return sum(self.merge(model_id, entries) for model_id, entries in list(other.items()))

    def contains(self, model_id: str, entry_id: Any) -> bool:
        return entry_id in self._data.get(model_id, {})

    def get(self, model_id: str, entry_id: Any) -> Optional[FlattenedRecord]:
        return self._data.get(model_id, {}).get(entry_id)

    def entries(self, model_id: str) -> Dict[Any, FlattenedRecord]:
        """Get the entries stored for a model (empty dict if none)."""
        return self._data.get(model_id, {})

    def model_ids(self):
        return list(self._data)

    def items(self) -> Iterator[Tuple[str, Dict[Any, FlattenedRecord]]]:
        return iter(self._data.items())

    def as_dict(self) -> Dict[str, Dict[Any, FlattenedRecord]]:
        """Plain nested dict view (new outer dicts, shared records).

        Models without entries are omitted.
        """
        return {model_id: dict(entries) for model_id, entries in self._data.items() if entries}

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._data.values())

    def __contains__(self, key: Tuple[str, Any]) -> bool:
        model_id, entry_id = key
        return self.contains(model_id, entry_id)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ExportStore):
            return self.as_dict() == other.as_dict()
        if isinstance(other, Mapping):
            return self.as_dict() == {k: dict(v) for k, v in other.items() if v}
        return NotImplemented

    def __repr__(self) -> str:
        counts = {model_id: len(entries) for model_id, entries in self._data.items()}
        return f"ExportStore({counts})"
