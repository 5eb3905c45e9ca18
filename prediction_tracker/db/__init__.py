from .history_records import DBHistoryRepository
from .init_db import init_db
from .session import build_engine, create_session
from .tables import PredictionHistoryRow

__all__ = [
    "DBHistoryRepository",
    "PredictionHistoryRow",
    "build_engine",
    "create_session",
    "init_db",
]
