from __future__ import annotations

import csv
import io
import logging
from typing import Iterable, Sequence

from prediction_tracker.entities.sample import MAX_POINTS, Sample, bounded
from prediction_tracker.interfaces.history_repository import HistoryRepository

logger = logging.getLogger(__name__)

CSV_HEADER = ("timestamp", "value")


def storage_key(topic_id: int) -> str:
    return f"history:{topic_id}"


class HistoryStore:
    """Bounded, durable per-instrument prediction history.

    Reads never raise: a missing or malformed record loads as an empty
    history. Writes never raise either; a failed write is logged and the
    caller's in-memory copy stays authoritative for the session.
    """

    def __init__(self, repository: HistoryRepository, max_points: int = MAX_POINTS):
        self.repository = repository
        self.max_points = max_points

    def load(self, topic_id: int) -> list[Sample]:
        try:
            payload = self.repository.load_payload(storage_key(topic_id))
        except Exception:
            logger.exception("Failed to read prediction history for topic %s", topic_id)
            return []

        if not isinstance(payload, list):
            if payload is not None:
                logger.warning("Ignoring non-array history payload for topic %s", topic_id)
            return []

        samples = [sample for sample in (Sample.from_dict(entry) for entry in payload) if sample is not None]
        if len(samples) != len(payload):
            logger.debug("Dropped %d malformed history entries for topic %s", len(payload) - len(samples), topic_id)

        return bounded(samples, self.max_points)

    def append(self, topic_id: int, sample: Sample) -> list[Sample]:
        history = bounded(self.load(topic_id) + [sample], self.max_points)
        self.save(topic_id, history)
        return history

    def save(self, topic_id: int, samples: Sequence[Sample]) -> bool:
        """Persist the most recent `max_points` samples; returns False on failure."""
        payload = [sample.to_dict() for sample in bounded(list(samples), self.max_points)]
        try:
            self.repository.save_payload(storage_key(topic_id), payload)
        except Exception:
            logger.exception("Failed to persist prediction history for topic %s", topic_id)
            return False
        return True

    def clear(self, topic_id: int) -> None:
        try:
            self.repository.delete(storage_key(topic_id))
        except Exception:
            logger.exception("Failed to clear prediction history for topic %s", topic_id)


def export_csv(samples: Iterable[Sample]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for sample in samples:
        writer.writerow((format_timestamp(sample), repr(sample.v)))
    return buffer.getvalue()


def format_timestamp(sample: Sample) -> str:
    return sample.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
