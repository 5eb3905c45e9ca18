from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from prediction_tracker.db.tables import PredictionHistoryRow

logger = logging.getLogger(__name__)


def tables_to_create() -> list[str]:
    return [PredictionHistoryRow.__tablename__]


def init_db(engine: Engine) -> None:
    logger.info("Ensuring tables exist: %s", ", ".join(tables_to_create()))
    SQLModel.metadata.create_all(engine)
