from .history_store import HistoryStore, export_csv, storage_key
from .reconcile import ReconciliationEngine, TrackerState, change_pct, combine_series
from .scheduler import RefreshScheduler, ScheduleSettings

__all__ = [
    "HistoryStore",
    "ReconciliationEngine",
    "RefreshScheduler",
    "ScheduleSettings",
    "TrackerState",
    "change_pct",
    "combine_series",
    "export_csv",
    "storage_key",
]
