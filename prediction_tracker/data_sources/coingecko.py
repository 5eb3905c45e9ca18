from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from prediction_tracker.config.runtime import RuntimeSettings
from prediction_tracker.data_sources.common import dig, parse_positive_number
from prediction_tracker.infrastructure.http import fetch_json, with_retry

logger = logging.getLogger(__name__)

COINGECKO_API_BASE = "https://api.coingecko.com/api/v3"


@dataclass
class CoinGeckoPriceClient:
    base_url: str = COINGECKO_API_BASE
    vs_currency: str = "usd"
    timeout_ms: int = 12_000
    max_retries: int = 1
    retry_delay_ms: int = 800
    session: Any | None = None

    @classmethod
    def from_settings(cls, settings: RuntimeSettings, session: Any | None = None) -> "CoinGeckoPriceClient":
        return cls(
            base_url=settings.coingecko_api_base,
            timeout_ms=settings.request_timeout_ms,
            max_retries=settings.max_retries,
            retry_delay_ms=settings.retry_delay_ms,
            session=session,
        )

    async def fetch_price(self, coin_id: str) -> float | None:
        if not isinstance(coin_id, str) or not coin_id.strip():
            raise ValueError(f"coin id must be a non-empty string, got {coin_id!r}")

        url = f"{self.base_url.rstrip('/')}/simple/price"
        params = {"ids": coin_id, "vs_currencies": self.vs_currency}

        async def _attempt() -> Any:
            return await fetch_json(url, params=params, timeout_ms=self.timeout_ms, session=self.session)

        payload = await with_retry(_attempt, max_retries=self.max_retries, initial_delay_ms=self.retry_delay_ms)
        value = parse_positive_number(dig(payload, coin_id, self.vs_currency))

        if value is None:
            logger.debug("No usable %s price for %s", self.vs_currency, coin_id)

        return value
