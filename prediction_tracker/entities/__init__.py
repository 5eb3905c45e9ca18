from .instrument import Instrument
from .sample import MAX_POINTS, ReconciledPoint, RefreshStatus, Sample, StatusKind, bounded

__all__ = [
    "Instrument",
    "Sample",
    "ReconciledPoint",
    "RefreshStatus",
    "StatusKind",
    "MAX_POINTS",
    "bounded",
]
