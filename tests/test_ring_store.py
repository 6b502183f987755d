import unittest

from core.ring_store import RingStore


class TestRingStore(unittest.TestCase):
    def test_put_and_get(self):
        store = RingStore(max_entries=3)
        store.put("a", 1)
        self.assertEqual(store.get("a"), 1)
        self.assertIn("a", store)
        self.assertEqual(len(store), 1)
        self.assertIsNone(store.get("missing"))

    def test_fifo_eviction_at_capacity(self):
        store = RingStore(max_entries=3)
        for key in ("c", "a", "b"):
            store.put(key, key.upper())
        evicted = store.put("d", "D")
        self.assertEqual(evicted, "c")
        self.assertNotIn("c", store)
        self.assertEqual(store.keys(), ["a", "b", "d"])
        self.assertEqual(len(store), 3)

    def test_update_does_not_refresh_eviction_order(self):
        store = RingStore(max_entries=2)
        store.put("a", 1)
        store.put("b", 2)
        self.assertIsNone(store.put("a", 10))
        store.put("c", 3)
        # "a" was admitted first, so it goes first even though it was updated last
        self.assertNotIn("a", store)
        self.assertEqual(store.get("b"), 2)
        self.assertEqual(store.get("c"), 3)

    def test_delete(self):
        store = RingStore(max_entries=3)
        store.put("a", 1)
        store.put("b", 2)
        self.assertTrue(store.delete("a"))
        self.assertFalse(store.delete("a"))
        self.assertEqual(store.keys(), ["b"])
        store.put("c", 3)
        store.put("d", 4)
        self.assertEqual(len(store), 3)

    def test_never_exceeds_capacity(self):
        store = RingStore(max_entries=5)
        for i in range(50):
            store.put(f"h{i}", i)
            self.assertLessEqual(len(store), 5)
        self.assertEqual(store.keys(), [f"h{i}" for i in range(45, 50)])

    def test_unbounded_when_max_entries_not_positive(self):
        store = RingStore(max_entries=0)
        for i in range(200):
            store.put(i, i)
        self.assertEqual(len(store), 200)
        self.assertEqual(len(store.snapshot()), 200)

    def test_snapshot_sorted_by_key(self):
        store = RingStore(max_entries=10)
        for key in ("10.0.0.3", "10.0.0.1", "10.0.0.2"):
            store.put(key, key)
        self.assertEqual(store.snapshot(), ["10.0.0.1", "10.0.0.2", "10.0.0.3"])

    def test_snapshot_trims_to_trailing_window(self):
        store = RingStore(max_entries=10, snapshot_limit=3)
        for key in ("e", "a", "d", "b", "c"):
            store.put(key, key)
        self.assertEqual(store.snapshot(), ["c", "d", "e"])

    def test_snapshot_is_idempotent(self):
        store = RingStore(max_entries=20, snapshot_limit=4)
        for i in (7, 3, 19, 11, 5, 2, 13):
            store.put(f"host-{i:02d}", i)
        first = store.snapshot()
        for _ in range(10):
            self.assertEqual(store.snapshot(), first)
        self.assertEqual(first, [7, 11, 13, 19])

    def test_clear(self):
        store = RingStore(max_entries=2)
        store.put("a", 1)
        store.clear()
        self.assertEqual(len(store), 0)
        self.assertEqual(store.keys(), [])


if __name__ == "__main__":
    unittest.main()
