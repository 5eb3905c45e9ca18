from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Instrument:
    """A tracked asset/horizon pair.

    `topic_id` is assigned by the inference provider and never changes;
    `coin_id` is the lookup key on the spot-price provider.
    """

    topic_id: int
    name: str
    coin_id: str
    asset: str
    horizon: str

    def to_dict(self) -> dict[str, object]:
        return {
            "topic_id": self.topic_id,
            "name": self.name,
            "coin_id": self.coin_id,
            "asset": self.asset,
            "horizon": self.horizon,
        }
