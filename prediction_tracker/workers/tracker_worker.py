from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass

from prediction_tracker.config.catalog import CATALOG, InstrumentCatalog
from prediction_tracker.config.runtime import RuntimeSettings
from prediction_tracker.data_sources import AlloraInferenceClient, CoinGeckoPriceClient
from prediction_tracker.entities.instrument import Instrument
from prediction_tracker.db import DBHistoryRepository, build_engine, create_session, init_db
from prediction_tracker.interfaces.history_repository import HistoryRepository
from prediction_tracker.services.history_store import HistoryStore
from prediction_tracker.services.reconcile import ReconciliationEngine
from prediction_tracker.services.scheduler import RefreshScheduler, ScheduleSettings
from prediction_tracker.utils.logging_config import setup_logging


@dataclass
class Tracker:
    settings: RuntimeSettings
    catalog: InstrumentCatalog
    engine: ReconciliationEngine
    scheduler: RefreshScheduler


def build_history_repository(settings: RuntimeSettings) -> HistoryRepository:
    db_engine = build_engine(settings.database_url)
    init_db(db_engine)
    return DBHistoryRepository(create_session(db_engine))


def build_tracker(
    settings: RuntimeSettings | None = None,
    *,
    repository: HistoryRepository | None = None,
    catalog: InstrumentCatalog = CATALOG,
) -> Tracker:
    settings = settings or RuntimeSettings.from_env()
    store = HistoryStore(repository or build_history_repository(settings), max_points=settings.max_points)

    engine = ReconciliationEngine(
        AlloraInferenceClient.from_settings(settings),
        CoinGeckoPriceClient.from_settings(settings),
        store,
        max_points=settings.max_points,
    )
    scheduler = RefreshScheduler(engine, ScheduleSettings.from_runtime(settings))

    return Tracker(settings=settings, catalog=catalog, engine=engine, scheduler=scheduler)


async def run(tracker: Tracker, instrument: Instrument | None = None) -> None:
    logger = logging.getLogger(__name__)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    instrument = instrument or tracker.catalog.resolve_or_default(
        tracker.settings.default_asset, tracker.settings.default_horizon
    )
    tracker.scheduler.select_instrument(instrument)
    tracker.scheduler.start()

    logger.info("Tracking %s (topic %d)", instrument.name, instrument.topic_id)
    try:
        await stop_event.wait()
    finally:
        logger.info("shutdown")
        await tracker.scheduler.stop()


async def main() -> None:
    settings = RuntimeSettings.from_env()
    setup_logging(settings.log_level)
    logging.getLogger(__name__).info("prediction tracker worker bootstrap")

    await run(build_tracker(settings))


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
