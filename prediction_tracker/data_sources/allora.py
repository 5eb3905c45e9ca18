from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from prediction_tracker.config.runtime import RuntimeSettings
from prediction_tracker.data_sources.common import dig, parse_positive_number
from prediction_tracker.infrastructure.http import fetch_json, with_retry

logger = logging.getLogger(__name__)

ALLORA_API_BASE = "https://api.allora.network/v2/allora/consumer"
ALLORA_CHAIN = "ethereum-11155111"
INFERENCE_PATH = ("data", "inference_data", "network_inference_normalized")


@dataclass
class AlloraInferenceClient:
    api_key: str = ""
    base_url: str = ALLORA_API_BASE
    chain: str = ALLORA_CHAIN
    timeout_ms: int = 12_000
    max_retries: int = 1
    retry_delay_ms: int = 800
    session: Any | None = None

    @classmethod
    def from_settings(cls, settings: RuntimeSettings, session: Any | None = None) -> "AlloraInferenceClient":
        return cls(
            api_key=settings.allora_api_key,
            base_url=settings.allora_api_base,
            chain=settings.allora_chain,
            timeout_ms=settings.request_timeout_ms,
            max_retries=settings.max_retries,
            retry_delay_ms=settings.retry_delay_ms,
            session=session,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.chain}"

    async def fetch_prediction(self, topic_id: int) -> float | None:
        if isinstance(topic_id, bool) or not isinstance(topic_id, int) or topic_id <= 0:
            raise ValueError(f"topic id must be a positive integer, got {topic_id!r}")

        headers = {"accept": "application/json", "x-api-key": self.api_key}
        params = {"allora_topic_id": topic_id}

        async def _attempt() -> Any:
            return await fetch_json(
                self.endpoint,
                headers=headers,
                params=params,
                timeout_ms=self.timeout_ms,
                session=self.session,
            )

        payload = await with_retry(_attempt, max_retries=self.max_retries, initial_delay_ms=self.retry_delay_ms)
        value = parse_positive_number(dig(payload, *INFERENCE_PATH))

        if value is None:
            logger.debug("No usable inference for topic %d", topic_id)

        return value
