from __future__ import annotations

from typing import Protocol


class PredictionSource(Protocol):
    async def fetch_prediction(self, topic_id: int) -> float | None: ...


class PriceSource(Protocol):
    async def fetch_price(self, coin_id: str) -> float | None: ...
