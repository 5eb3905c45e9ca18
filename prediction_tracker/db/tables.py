"""Durable prediction history table."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PredictionHistoryRow(SQLModel, table=True):
    __tablename__ = "prediction_histories"

    # one row per instrument, e.g. "history:69"
    key: str = Field(primary_key=True)

    samples_json: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False),
    )
    updated_at: datetime = Field(default_factory=utc_now, index=True)
