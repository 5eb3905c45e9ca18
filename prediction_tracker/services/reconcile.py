from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from math import isfinite
from typing import Any, Callable, Sequence

from prediction_tracker.entities.instrument import Instrument
from prediction_tracker.entities.sample import (
    MAX_POINTS,
    ReconciledPoint,
    RefreshStatus,
    Sample,
    StatusKind,
    bounded,
)
from prediction_tracker.interfaces.sources import PredictionSource, PriceSource
from prediction_tracker.services.history_store import HistoryStore, export_csv

logger = logging.getLogger(__name__)

BOOT_MESSAGE = "Booting prediction tracker..."
UPDATED_MESSAGE = "Data updated."
CLEARED_MESSAGE = "Prediction history cleared for this topic."
NETWORK_ERROR_MESSAGE = "Network error (timeout). Data may be stale; retrying..."

_NETWORK_HINTS = ("failed to fetch", "network", "abort", "timeout")


def change_pct(live: float | None, prediction: float | None) -> float | None:
    """Signed distance of the prediction from the live price, in percent."""
    if live is None or prediction is None:
        return None
    if not isfinite(live) or not isfinite(prediction) or live == 0:
        return None
    return (prediction - live) / live * 100


def combine_series(
    live_history: Sequence[Sample],
    prediction_history: Sequence[Sample],
    max_points: int = MAX_POINTS,
) -> list[ReconciledPoint]:
    """Pair the i-th live sample with the i-th prediction sample.

    Both histories are assumed to grow by one element per cycle, so the
    pairing is by index rather than by timestamp.
    """
    length = min(len(live_history), len(prediction_history))
    start = max(0, length - max_points)
    return [
        ReconciledPoint(
            t=prediction_history[i].t,
            live=live_history[i].v,
            prediction=prediction_history[i].v,
        )
        for i in range(start, length)
    ]


def describe_failure(error: BaseException) -> str:
    message = str(error) or type(error).__name__
    if any(hint in message.lower() for hint in _NETWORK_HINTS):
        return NETWORK_ERROR_MESSAGE
    return f"Fetch failed: {message}"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class TrackerState:
    instrument: Instrument | None = None
    status: RefreshStatus = field(default_factory=lambda: RefreshStatus(StatusKind.LOADING, BOOT_MESSAGE))
    latest_prediction: float | None = None
    live_price: float | None = None
    change_pct: float | None = None
    prediction_history: list[Sample] = field(default_factory=list)
    live_history: list[Sample] = field(default_factory=list)
    last_updated: datetime | None = None

    @property
    def sample_count(self) -> int:
        return len(self.prediction_history)


class ReconciliationEngine:
    """Runs refresh cycles and owns the in-memory tracker state.

    Cycles for the same instrument may overlap; each applies its writes when
    it completes, so the last one to finish wins.
    """

    def __init__(
        self,
        prediction_source: PredictionSource,
        price_source: PriceSource,
        history_store: HistoryStore,
        *,
        max_points: int = MAX_POINTS,
        clock: Callable[[], int] = now_ms,
    ):
        self.prediction_source = prediction_source
        self.price_source = price_source
        self.history_store = history_store
        self.max_points = max_points
        self.clock = clock
        self.state = TrackerState()

    def select(self, instrument: Instrument) -> None:
        """Switch the tracked instrument: live history resets, durable history loads."""
        self.state.instrument = instrument
        self.state.prediction_history = self.history_store.load(instrument.topic_id)
        self.state.live_history = []
        self.state.latest_prediction = None
        self.state.live_price = None
        self.state.change_pct = None
        logger.info(
            "Selected %s (topic %d), %d stored predictions",
            instrument.name,
            instrument.topic_id,
            len(self.state.prediction_history),
        )

    async def run_cycle(self, instrument: Instrument | None = None) -> None:
        instrument = instrument or self.state.instrument
        if instrument is None:
            return

        self._set_status(StatusKind.LOADING, f"Fetching inference for topic {instrument.topic_id}...")

        try:
            prediction, live = await asyncio.gather(
                self.prediction_source.fetch_prediction(instrument.topic_id),
                self.price_source.fetch_price(instrument.coin_id),
            )

            if self.state.instrument != instrument:
                self._persist_detached(instrument, prediction)
                return

            self._apply(instrument, prediction, live)
            self._set_status(StatusKind.OK, UPDATED_MESSAGE)
        except Exception as error:
            logger.exception("Refresh cycle failed for topic %d", instrument.topic_id)
            if self.state.instrument != instrument:
                return
            # previous values stay in place
            self._set_status(StatusKind.ERROR, describe_failure(error))

    def clear_history(self) -> None:
        instrument = self.state.instrument
        if instrument is None:
            return
        self.history_store.clear(instrument.topic_id)
        self.state.prediction_history = []
        self._set_status(StatusKind.OK, CLEARED_MESSAGE)

    def export_csv(self) -> str | None:
        if self.state.instrument is None or not self.state.prediction_history:
            return None
        return export_csv(self.state.prediction_history)

    def combined_series(self) -> list[ReconciledPoint]:
        return combine_series(self.state.live_history, self.state.prediction_history, self.max_points)

    def snapshot(self) -> dict[str, Any]:
        state = self.state
        return {
            "instrument": state.instrument.to_dict() if state.instrument else None,
            "status": state.status.to_dict(),
            "latest_prediction": state.latest_prediction,
            "live_price": state.live_price,
            "change_pct": state.change_pct,
            "sample_count": state.sample_count,
            "live_sample_count": len(state.live_history),
            "last_updated": state.last_updated.isoformat() if state.last_updated else None,
        }

    def _apply(self, instrument: Instrument, prediction: float | None, live: float | None) -> None:
        state = self.state
        now = self.clock()
        state.last_updated = datetime.fromtimestamp(now / 1000, tz=timezone.utc)

        if prediction is not None:
            state.latest_prediction = prediction
            state.prediction_history = bounded(
                state.prediction_history + [Sample(t=now, v=prediction)], self.max_points
            )
            self.history_store.save(instrument.topic_id, state.prediction_history)
        else:
            state.latest_prediction = None

        if live is not None:
            state.live_price = live
            state.live_history = bounded(state.live_history + [Sample(t=now, v=live)], self.max_points)
        else:
            state.live_price = None

        state.change_pct = change_pct(live, prediction)

        logger.info(
            "Topic %d: prediction=%s live=%s change=%s",
            instrument.topic_id,
            prediction,
            live,
            f"{state.change_pct:.3f}%" if state.change_pct is not None else None,
        )

    def _persist_detached(self, instrument: Instrument, prediction: float | None) -> None:
        """Store a result whose instrument was deselected while the cycle was in flight."""
        logger.debug("Topic %d is no longer selected, keeping only its durable history", instrument.topic_id)
        if prediction is not None:
            self.history_store.append(instrument.topic_id, Sample(t=self.clock(), v=prediction))

    def _set_status(self, kind: StatusKind, text: str) -> None:
        self.state.status = RefreshStatus(kind, text)
