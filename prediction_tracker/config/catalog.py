from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from prediction_tracker.entities.instrument import Instrument

_CATALOG_ROWS: tuple[tuple[str, str, int, str, str], ...] = (
    # asset, horizon, topic id, display name, coin id
    ("BTC/USD", "1 day", 69, "BTC/USD - 1 Day Prediction", "bitcoin"),
    ("BTC/USD", "8h", 42, "BTC/USD - 8 Hour Prediction", "bitcoin"),
    ("BTC/USD", "5min", 14, "BTC/USD - 5 Minute Prediction", "bitcoin"),
    ("ETH/USD", "8h", 41, "ETH/USD - 8 Hour Prediction", "ethereum"),
    ("ETH/USD", "5min", 13, "ETH/USD - 5 Minute Prediction", "ethereum"),
    ("SOL/USD", "8h", 38, "SOL/USD - 8 Hour Prediction", "solana"),
    ("SOL/USD", "5min", 37, "SOL/USD - 5 Minute Prediction", "solana"),
    ("SOL/USD", "10min", 5, "SOL/USD - 10 Minute Prediction", "solana"),
    ("ETH/USDC", "6h", 46, "ETH/USDC - 6 Hour Prediction", "ethereum"),
    ("BNB", "20min", 8, "BNB/USD - 20 Minute Prediction", "binancecoin"),
)


class InstrumentCatalog:
    """Read-only lookup of instruments keyed by (asset, horizon).

    Insertion order is preserved: the first asset and its first horizon
    form the default selection.
    """

    def __init__(self, instruments: Iterable[Instrument]):
        by_asset: dict[str, dict[str, Instrument]] = {}
        by_topic: dict[int, Instrument] = {}

        for instrument in instruments:
            horizons = by_asset.setdefault(instrument.asset, {})
            if instrument.horizon in horizons:
                raise ValueError(f"duplicate instrument {instrument.asset} / {instrument.horizon}")
            if instrument.topic_id in by_topic:
                raise ValueError(f"duplicate topic id {instrument.topic_id}")
            horizons[instrument.horizon] = instrument
            by_topic[instrument.topic_id] = instrument

        if not by_asset:
            raise ValueError("instrument catalog must not be empty")

        self._by_asset: Mapping[str, Mapping[str, Instrument]] = MappingProxyType(
            {asset: MappingProxyType(horizons) for asset, horizons in by_asset.items()}
        )
        self._by_topic: Mapping[int, Instrument] = MappingProxyType(by_topic)

    def __iter__(self):
        for horizons in self._by_asset.values():
            yield from horizons.values()

    def __len__(self) -> int:
        return len(self._by_topic)

    def assets(self) -> list[str]:
        return list(self._by_asset)

    def horizons(self, asset: str) -> list[str]:
        return list(self._by_asset.get(asset, {}))

    def resolve(self, asset: str, horizon: str) -> Instrument | None:
        return self._by_asset.get(asset, {}).get(horizon)

    def find_by_topic(self, topic_id: int) -> Instrument | None:
        return self._by_topic.get(topic_id)

    def default_instrument(self) -> Instrument:
        return next(iter(self))

    def resolve_or_default(self, asset: str | None, horizon: str | None) -> Instrument:
        """Unknown asset -> first asset; unknown horizon -> the asset's first horizon."""
        if asset not in self._by_asset:
            asset = self.assets()[0]
        horizons = self._by_asset[asset]
        if horizon in horizons:
            return horizons[horizon]
        return next(iter(horizons.values()))


def default_catalog() -> InstrumentCatalog:
    return InstrumentCatalog(
        Instrument(topic_id=topic_id, name=name, coin_id=coin_id, asset=asset, horizon=horizon)
        for asset, horizon, topic_id, name, coin_id in _CATALOG_ROWS
    )


CATALOG = default_catalog()
