import json
import os
import tempfile
import unittest

from reviewsync.errors import StorageError
from reviewsync.operations import JsonFileQueueStore, MemoryQueueStore


class TestMemoryQueueStore(unittest.IsolatedAsyncioTestCase):
    async def test_empty_then_saved(self) -> None:
        store = MemoryQueueStore()
        self.assertEqual(await store.get_operations(), [])

        entries = [{"type": "post", "movie": {"id": "m1"}}]
        await store.save_operations(entries)
        entries.append({"type": "delete", "movie": {"id": "m2"}})

        # Saved data is a copy, not the caller's list.
        self.assertEqual(await store.get_operations(), [{"type": "post", "movie": {"id": "m1"}}])
        self.assertEqual(store.save_count, 1)


class TestJsonFileQueueStore(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "nested", "operations.json")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def test_missing_file_reads_empty(self) -> None:
        store = JsonFileQueueStore(self.path)
        self.assertEqual(await store.get_operations(), [])

    async def test_save_writes_operations_key_and_keeps_other_keys(self) -> None:
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"other": 1}, f)

        store = JsonFileQueueStore(self.path)
        entries = [
            {"type": "post", "movie": {"id": "m1"}},
            {"type": "delete", "movie": {"id": "m2"}},
        ]
        await store.save_operations(entries)

        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["operations"], entries)
        self.assertEqual(data["other"], 1)

        # A fresh store (new process) sees the same sequence.
        self.assertEqual(await JsonFileQueueStore(self.path).get_operations(), entries)
        leftovers = [n for n in os.listdir(os.path.dirname(self.path)) if n.endswith(".tmp")]
        self.assertEqual(leftovers, [])

    async def test_corrupt_file_raises_storage_error(self) -> None:
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")

        with self.assertRaises(StorageError):
            await JsonFileQueueStore(self.path).get_operations()

    async def test_save_replaces_corrupt_file(self) -> None:
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")

        store = JsonFileQueueStore(self.path)
        entries = [{"type": "post", "movie": {"id": "m1"}}]
        with self.assertLogs("reviewsync.operations.store", level="WARNING"):
            await store.save_operations(entries)

        self.assertEqual(await store.get_operations(), entries)
        self.assertEqual(await JsonFileQueueStore(self.path).get_operations(), entries)

    async def test_non_list_operations_raises_storage_error(self) -> None:
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"operations": {"type": "post"}}, f)

        with self.assertRaises(StorageError):
            await JsonFileQueueStore(self.path).get_operations()


if __name__ == "__main__":
    unittest.main()
