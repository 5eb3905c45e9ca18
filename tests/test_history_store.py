from __future__ import annotations

import unittest

from prediction_tracker.entities import Sample
from prediction_tracker.infrastructure.memory import InMemoryHistoryRepository
from prediction_tracker.services.history_store import HistoryStore, export_csv, storage_key


class FailingWriteRepository(InMemoryHistoryRepository):
    def save_payload(self, key, payload):
        raise OSError("quota exceeded")

    def delete(self, key):
        raise OSError("storage unavailable")


class FailingReadRepository(InMemoryHistoryRepository):
    def load_payload(self, key):
        raise RuntimeError("corrupt storage")


class TestHistoryStore(unittest.TestCase):
    def setUp(self):
        self.repository = InMemoryHistoryRepository()
        self.store = HistoryStore(self.repository)

    def test_storage_key_pattern(self):
        self.assertEqual(storage_key(69), "history:69")

    def test_load_unknown_topic_is_empty(self):
        self.assertEqual(self.store.load(999999), [])

    def test_append_then_load_preserves_order(self):
        self.store.append(69, Sample(t=1, v=10.0))
        self.store.append(69, Sample(t=2, v=11.0))
        returned = self.store.append(69, Sample(t=3, v=12.0))

        loaded = self.store.load(69)

        self.assertEqual(returned, loaded)
        self.assertEqual([s.t for s in loaded], [1, 2, 3])
        self.assertEqual(self.repository.load_payload("history:69")[0], {"t": 1, "v": 10.0})

    def test_histories_are_isolated_per_topic(self):
        self.store.append(69, Sample(t=1, v=10.0))
        self.store.append(42, Sample(t=1, v=20.0))

        self.assertEqual(self.store.load(69), [Sample(t=1, v=10.0)])
        self.assertEqual(self.store.load(42), [Sample(t=1, v=20.0)])

    def test_append_at_capacity_evicts_exactly_the_oldest(self):
        self.store.save(69, [Sample(t=i, v=float(i + 1)) for i in range(1000)])

        history = self.store.append(69, Sample(t=1000, v=1001.0))

        self.assertEqual(len(history), 1000)
        self.assertEqual(history[0].t, 1)
        self.assertEqual(history[-1].t, 1000)

    def test_length_never_exceeds_bound(self):
        store = HistoryStore(self.repository, max_points=5)
        for i in range(12):
            history = store.append(7, Sample(t=i, v=1.0))
            self.assertLessEqual(len(history), 5)

        self.assertEqual([s.t for s in store.load(7)], [7, 8, 9, 10, 11])
        self.assertEqual(len(self.repository.load_payload("history:7")), 5)

    def test_malformed_entries_are_filtered(self):
        self.repository.save_payload(
            "history:69",
            [
                {"t": 1, "v": 10.0},
                {"t": "2", "v": 11.0},
                {"t": 3},
                {"t": 4, "v": float("nan")},
                {"t": 5, "v": True},
                "junk",
                None,
                {"t": 6, "v": 12.5},
            ],
        )

        self.assertEqual(self.store.load(69), [Sample(t=1, v=10.0), Sample(t=6, v=12.5)])

    def test_non_array_payload_loads_empty(self):
        for payload in ({"t": 1, "v": 1.0}, "[]", 42):
            with self.subTest(payload=payload):
                repository = InMemoryHistoryRepository({"history:69": payload})
                self.assertEqual(HistoryStore(repository).load(69), [])

    def test_clear_is_idempotent(self):
        self.store.clear(69)
        self.assertEqual(self.store.load(69), [])

        self.store.append(69, Sample(t=1, v=1.0))
        self.store.clear(69)
        self.store.clear(69)

        self.assertEqual(self.store.load(69), [])
        self.assertIsNone(self.repository.load_payload("history:69"))

    def test_write_failures_are_swallowed(self):
        store = HistoryStore(FailingWriteRepository())

        with self.assertLogs("prediction_tracker.services.history_store", level="ERROR"):
            history = store.append(69, Sample(t=1, v=1.0))
            saved = store.save(69, history)
            store.clear(69)

        self.assertEqual(history, [Sample(t=1, v=1.0)])
        self.assertFalse(saved)

    def test_read_failures_load_empty(self):
        store = HistoryStore(FailingReadRepository())

        with self.assertLogs("prediction_tracker.services.history_store", level="ERROR"):
            self.assertEqual(store.load(69), [])


class TestExportCsv(unittest.TestCase):
    def test_header_and_iso_rows(self):
        content = export_csv([Sample(t=0, v=1.5), Sample(t=1_700_000_000_123, v=67000.25)])

        self.assertEqual(
            content.splitlines(),
            [
                "timestamp,value",
                "1970-01-01T00:00:00.000Z,1.5",
                "2023-11-14T22:13:20.123Z,67000.25",
            ],
        )

    def test_empty_history_exports_header_only(self):
        self.assertEqual(export_csv([]), "timestamp,value\n")


if __name__ == "__main__":
    unittest.main()
