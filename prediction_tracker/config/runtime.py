from __future__ import annotations

from dataclasses import dataclass
import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RuntimeSettings:
    allora_api_base: str
    allora_chain: str
    allora_api_key: str
    coingecko_api_base: str
    request_timeout_ms: int
    max_retries: int
    retry_delay_ms: int
    refresh_interval_ms: int
    min_refresh_interval_ms: int
    max_refresh_interval_ms: int
    auto_refresh: bool
    max_points: int
    default_asset: str
    default_horizon: str
    database_url: str
    report_host: str
    report_port: int
    log_level: str

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        return cls(
            allora_api_base=os.getenv("ALLORA_API_BASE", "https://api.allora.network/v2/allora/consumer"),
            allora_chain=os.getenv("ALLORA_CHAIN", "ethereum-11155111"),
            allora_api_key=os.getenv("ALLORA_API_KEY", ""),
            coingecko_api_base=os.getenv("COINGECKO_API_BASE", "https://api.coingecko.com/api/v3"),
            request_timeout_ms=int(os.getenv("REQUEST_TIMEOUT_MS", "12000")),
            max_retries=int(os.getenv("FETCH_MAX_RETRIES", "1")),
            retry_delay_ms=int(os.getenv("FETCH_RETRY_DELAY_MS", "800")),
            refresh_interval_ms=int(os.getenv("REFRESH_INTERVAL_MS", "30000")),
            min_refresh_interval_ms=int(os.getenv("MIN_REFRESH_INTERVAL_MS", "5000")),
            max_refresh_interval_ms=int(os.getenv("MAX_REFRESH_INTERVAL_MS", "120000")),
            auto_refresh=_env_bool("AUTO_REFRESH", "true"),
            max_points=int(os.getenv("MAX_HISTORY_POINTS", "1000")),
            default_asset=os.getenv("DEFAULT_ASSET", "BTC/USD"),
            default_horizon=os.getenv("DEFAULT_HORIZON", "1 day"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///prediction_tracker.db"),
            report_host=os.getenv("REPORT_HOST", "0.0.0.0"),
            report_port=int(os.getenv("REPORT_PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        )
