from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException, Response, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from prediction_tracker.config.runtime import RuntimeSettings
from prediction_tracker.utils.logging_config import setup_logging
from prediction_tracker.workers.tracker_worker import Tracker, build_tracker

logger = logging.getLogger(__name__)


class SelectRequest(BaseModel):
    asset: str
    horizon: str


class AutoRefreshRequest(BaseModel):
    enabled: bool


class IntervalRequest(BaseModel):
    interval_ms: int = Field(gt=0)


def create_app(tracker: Tracker | None = None, *, autostart: bool = True) -> FastAPI:
    tracker = tracker or build_tracker()
    engine = tracker.engine
    scheduler = tracker.scheduler

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if autostart:
            if engine.state.instrument is None:
                scheduler.select_instrument(
                    tracker.catalog.resolve_or_default(tracker.settings.default_asset, tracker.settings.default_horizon)
                )
            scheduler.start()
        yield
        await scheduler.stop()

    app = FastAPI(title="Prediction Tracker Report Worker", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.tracker = tracker

    def _state() -> dict[str, Any]:
        snapshot = engine.snapshot()
        snapshot["schedule"] = {
            "enabled": scheduler.schedule.enabled,
            "interval_ms": scheduler.schedule.interval_ms,
        }
        return snapshot

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/instruments")
    def get_instruments() -> list[dict[str, Any]]:
        return [instrument.to_dict() for instrument in tracker.catalog]

    @app.get("/state")
    def get_state() -> dict[str, Any]:
        return _state()

    @app.get("/history/predictions")
    def get_prediction_history() -> list[dict[str, Any]]:
        return [sample.to_dict() for sample in engine.state.prediction_history]

    @app.get("/history/live")
    def get_live_history() -> list[dict[str, Any]]:
        return [sample.to_dict() for sample in engine.state.live_history]

    @app.get("/history/combined")
    def get_combined_history() -> list[dict[str, Any]]:
        return [point.to_dict() for point in engine.combined_series()]

    @app.get("/export.csv")
    def export_predictions() -> Response:
        content = engine.export_csv()
        if content is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No prediction history to export")

        filename = f"predictions_topic_{engine.state.instrument.topic_id}.csv"
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/select")
    async def select_instrument(request: SelectRequest) -> dict[str, Any]:
        instrument = tracker.catalog.resolve(request.asset, request.horizon)
        if instrument is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown instrument {request.asset} / {request.horizon}",
            )
        scheduler.select_instrument(instrument)
        return _state()

    @app.post("/auto")
    async def set_auto_refresh(request: AutoRefreshRequest) -> dict[str, Any]:
        scheduler.set_enabled(request.enabled)
        return _state()

    @app.post("/interval")
    async def set_interval(request: IntervalRequest) -> dict[str, Any]:
        scheduler.set_interval(request.interval_ms)
        return _state()

    @app.post("/fetch")
    async def fetch_once() -> dict[str, Any]:
        await scheduler.fetch_once()
        return _state()

    @app.post("/clear")
    async def clear_history() -> dict[str, Any]:
        engine.clear_history()
        return _state()

    return app


def main() -> None:
    settings = RuntimeSettings.from_env()
    setup_logging(settings.log_level)
    logger.info("prediction tracker report worker bootstrap")

    app = create_app(build_tracker(settings))
    uvicorn.run(app, host=settings.report_host, port=settings.report_port)


if __name__ == "__main__":
    main()
