import json
import tempfile
import unittest
from pathlib import Path

from breathing import InMemoryKeyValueStore, JsonFileKeyValueStore, StorageError


class InMemoryKeyValueStoreTests(unittest.TestCase):
    def test_get_missing_returns_none(self) -> None:
        self.assertIsNone(InMemoryKeyValueStore().get("missing"))

    def test_set_then_get(self) -> None:
        store = InMemoryKeyValueStore({"a": "1"})
        store.set("b", "2")
        self.assertEqual("1", store.get("a"))
        self.assertEqual("2", store.get("b"))


class JsonFileKeyValueStoreTests(unittest.TestCase):
    def test_missing_file_reads_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            store = JsonFileKeyValueStore(Path(temp_dir) / "store.json")
            self.assertIsNone(store.get("breathingAppSettings"))

    def test_set_creates_parent_dirs_and_persists(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "data" / "store.json"
            store = JsonFileKeyValueStore(path)

            store.set("breathingAppSettings", '{"speechVolume": 10}')
            store.set("breathingAppExercises", "{}")

            reopened = JsonFileKeyValueStore(path)
            self.assertEqual('{"speechVolume": 10}', reopened.get("breathingAppSettings"))
            self.assertEqual("{}", reopened.get("breathingAppExercises"))
            self.assertFalse(path.with_suffix(".json.tmp").exists())

    def test_non_string_values_are_returned_as_json_text(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "store.json"
            path.write_text(
                json.dumps({"breathingAppSettings": {"speechVolume": 15}}),
                encoding="utf-8",
            )

            value = JsonFileKeyValueStore(path).get("breathingAppSettings")

            self.assertEqual({"speechVolume": 15}, json.loads(value))

    def test_corrupt_file_raises_storage_error(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "store.json"
            path.write_text("{not json", encoding="utf-8")

            store = JsonFileKeyValueStore(path)

            with self.assertRaises(StorageError):
                store.get("anything")
            with self.assertRaises(StorageError):
                store.set("anything", "1")

    def test_non_string_write_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            store = JsonFileKeyValueStore(Path(temp_dir) / "store.json")
            with self.assertRaises(StorageError):
                store.set("key", 5)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
