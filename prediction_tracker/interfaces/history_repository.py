from abc import ABC, abstractmethod
from typing import Any


class HistoryRepository(ABC):
    """Key/value persistence for serialized sample histories.

    Payloads are stored as given (a JSON-compatible list); validation is the
    caller's concern.
    """

    @abstractmethod
    def load_payload(self, key: str) -> Any | None:
        pass

    @abstractmethod
    def save_payload(self, key: str, payload: list[dict[str, Any]]) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass
