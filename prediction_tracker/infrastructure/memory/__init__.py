from .in_memory_history_repository import InMemoryHistoryRepository

__all__ = ["InMemoryHistoryRepository"]
