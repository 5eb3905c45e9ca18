import copy
from typing import Any, Dict

from prediction_tracker.interfaces.history_repository import HistoryRepository


class InMemoryHistoryRepository(HistoryRepository):
    def __init__(self, initial: Dict[str, Any] | None = None):
        # In-memory storage
        self._storage: Dict[str, Any] = dict(initial or {})

    def load_payload(self, key: str) -> Any | None:
        """Return a copy so callers never mutate the stored payload."""
        return copy.deepcopy(self._storage.get(key))

    def save_payload(self, key: str, payload: list[dict[str, Any]]) -> None:
        self._storage[key] = copy.deepcopy(payload)

    def delete(self, key: str) -> None:
        self._storage.pop(key, None)
