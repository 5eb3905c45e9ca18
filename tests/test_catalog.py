import unittest

from prediction_tracker.config.catalog import CATALOG, InstrumentCatalog
from prediction_tracker.entities import Instrument


class TestInstrumentCatalog(unittest.TestCase):
    def test_default_catalog_contents(self):
        self.assertEqual(len(CATALOG), 10)
        self.assertEqual(CATALOG.assets(), ["BTC/USD", "ETH/USD", "SOL/USD", "ETH/USDC", "BNB"])
        self.assertEqual(CATALOG.horizons("SOL/USD"), ["8h", "5min", "10min"])

    def test_resolve_known_instruments(self):
        btc = CATALOG.resolve("BTC/USD", "1 day")
        self.assertEqual((btc.topic_id, btc.coin_id), (69, "bitcoin"))
        self.assertEqual(btc.name, "BTC/USD - 1 Day Prediction")

        self.assertEqual(CATALOG.resolve("ETH/USDC", "6h").coin_id, "ethereum")
        self.assertEqual(CATALOG.resolve("BNB", "20min").topic_id, 8)

    def test_unknown_pair_resolves_to_none(self):
        self.assertIsNone(CATALOG.resolve("BTC/USD", "6h"))
        self.assertIsNone(CATALOG.resolve("DOGE/USD", "1 day"))

    def test_find_by_topic(self):
        self.assertEqual(CATALOG.find_by_topic(37).asset, "SOL/USD")
        self.assertIsNone(CATALOG.find_by_topic(999999))

    def test_default_and_fallback_selection(self):
        self.assertEqual(CATALOG.default_instrument().topic_id, 69)
        self.assertEqual(CATALOG.resolve_or_default("ETH/USD", "5min").topic_id, 13)
        self.assertEqual(CATALOG.resolve_or_default("ETH/USD", "1 day").topic_id, 41)
        self.assertEqual(CATALOG.resolve_or_default("DOGE/USD", None).topic_id, 69)

    def test_topics_are_unique(self):
        topic_ids = [instrument.topic_id for instrument in CATALOG]
        self.assertEqual(len(topic_ids), len(set(topic_ids)))

    def test_rejects_duplicates_and_empty(self):
        row = Instrument(topic_id=1, name="A", coin_id="a", asset="A/USD", horizon="1h")

        with self.assertRaises(ValueError):
            InstrumentCatalog([row, Instrument(topic_id=2, name="B", coin_id="a", asset="A/USD", horizon="1h")])
        with self.assertRaises(ValueError):
            InstrumentCatalog([row, Instrument(topic_id=1, name="B", coin_id="a", asset="A/USD", horizon="2h")])
        with self.assertRaises(ValueError):
            InstrumentCatalog([])


if __name__ == "__main__":
    unittest.main()
