from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from math import isfinite
from typing import Any, Mapping

MAX_POINTS = 1000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Sample:
    """One scalar observation; `t` is a ms epoch timestamp."""

    t: int
    v: float

    def to_dict(self) -> dict[str, Any]:
        return {"t": self.t, "v": self.v}

    @classmethod
    def from_dict(cls, payload: Any) -> "Sample | None":
        if not isinstance(payload, Mapping):
            return None

        t = payload.get("t")
        v = payload.get("v")
        if not _is_finite_number(t) or not _is_finite_number(v):
            return None

        return cls(t=int(t), v=float(v))

    @property
    def timestamp(self) -> datetime:
        return _EPOCH + timedelta(milliseconds=self.t)


@dataclass(frozen=True)
class ReconciledPoint:
    t: int
    live: float | None
    prediction: float | None

    def to_dict(self) -> dict[str, Any]:
        return {"t": self.t, "live": self.live, "prediction": self.prediction}


class StatusKind(StrEnum):
    LOADING = "loading"
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class RefreshStatus:
    kind: StatusKind
    text: str
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {"kind": str(self.kind), "text": self.text, "at": self.at.isoformat()}


def bounded(samples: list[Sample], max_points: int = MAX_POINTS) -> list[Sample]:
    """Keep the most recent `max_points` samples, oldest evicted first."""
    if max_points <= 0:
        return []
    return list(samples[-max_points:])


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isfinite(value)
