from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from prediction_tracker.db.tables import PredictionHistoryRow, utc_now
from prediction_tracker.interfaces.history_repository import HistoryRepository


class DBHistoryRepository(HistoryRepository):
    def __init__(self, session: Session):
        self._session = session

    def rollback(self) -> None:
        self._session.rollback()

    def load_payload(self, key: str) -> Any | None:
        row = self._session.get(PredictionHistoryRow, key)
        if row is None:
            return None
        return row.samples_json

    def save_payload(self, key: str, payload: list[dict[str, Any]]) -> None:
        try:
            existing = self._session.get(PredictionHistoryRow, key)
            if existing is None:
                self._session.add(PredictionHistoryRow(key=key, samples_json=list(payload)))
            else:
                # reassign so the JSON column is flagged dirty
                existing.samples_json = list(payload)
                existing.updated_at = utc_now()
                self._session.add(existing)
            self._session.commit()
        except SQLAlchemyError:
            self.rollback()
            raise

    def delete(self, key: str) -> None:
        try:
            existing = self._session.get(PredictionHistoryRow, key)
            if existing is None:
                return
            self._session.delete(existing)
            self._session.commit()
        except SQLAlchemyError:
            self.rollback()
            raise
