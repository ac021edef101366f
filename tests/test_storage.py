"""
Unit tests for the persistent store backends and JSON helpers.
"""
import unittest
import tempfile
import shutil
import logging
from pathlib import Path

from animal_atlas.storage import (
    FileStore,
    MemoryStore,
    PersistentStore,
    StoreError,
    StoreReadError,
    StoreWriteError,
    delete_key,
    read_json,
    write_json,
)
from tests.test_fixtures import FailingStore


class TestMemoryStore(unittest.TestCase):

    def setUp(self):
        logging.disable(logging.CRITICAL)
        self.store = MemoryStore()

    def tearDown(self):
        logging.disable(logging.NOTSET)

    def test_get_missing_key_returns_none(self):
        self.assertIsNone(self.store.get("missing"))

    def test_set_and_get(self):
        self.store.set("k", "v")
        self.assertEqual(self.store.get("k"), "v")
        self.assertEqual(self.store.keys(), ["k"])

    def test_set_rejects_non_string(self):
        with self.assertRaises(StoreWriteError):
            self.store.set("k", 5)

    def test_delete_missing_key_is_not_error(self):
        self.store.delete("missing")
        self.store.set("k", "v")
        self.store.delete("k")
        self.assertIsNone(self.store.get("k"))

    def test_base_class_is_abstract(self):
        store = PersistentStore()
        with self.assertRaises(NotImplementedError):
            store.get("k")
        with self.assertRaises(NotImplementedError):
            store.set("k", "v")
        with self.assertRaises(NotImplementedError):
            store.delete("k")


class TestFileStore(unittest.TestCase):

    def setUp(self):
        logging.disable(logging.CRITICAL)
        self.temp_dir = tempfile.mkdtemp()
        self.directory = Path(self.temp_dir) / "store"
        self.store = FileStore(str(self.directory))

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        logging.disable(logging.NOTSET)

    def test_missing_key_returns_none(self):
        self.assertIsNone(self.store.get("animal_views"))

    def test_set_creates_directory_and_file(self):
        self.store.set("animal_views", "[]")
        self.assertTrue((self.directory / "animal_views.json").exists())
        self.assertEqual(self.store.get("animal_views"), "[]")

    def test_set_leaves_no_temp_file(self):
        self.store.set("animal_views", "[]")
        self.assertEqual([p.name for p in self.directory.iterdir()], ["animal_views.json"])

    def test_values_survive_new_instance(self):
        self.store.set("animal_atlas_quiz_stats", '{"totalQuizzes": 1}')
        reopened = FileStore(str(self.directory))
        self.assertEqual(reopened.get("animal_atlas_quiz_stats"), '{"totalQuizzes": 1}')

    def test_delete(self):
        self.store.set("animal_views", "[]")
        self.store.delete("animal_views")
        self.assertIsNone(self.store.get("animal_views"))
        # Deleting again is fine
        self.store.delete("animal_views")

    def test_unsafe_keys_rejected(self):
        for key in ("../escape", "a/b", "", "spaces here"):
            with self.subTest(key=key):
                with self.assertRaises(StoreError):
                    self.store.get(key)

    def test_unreadable_path_raises_read_error(self):
        # A directory where the file should be cannot be read as text
        (self.directory / "animal_views.json").mkdir(parents=True)
        with self.assertRaises(StoreReadError):
            self.store.get("animal_views")

    def test_unwritable_path_raises_write_error(self):
        blocker = Path(self.temp_dir) / "blocker"
        blocker.write_text("file, not a directory")
        store = FileStore(str(blocker / "nested"))
        with self.assertRaises(StoreWriteError):
            store.set("animal_views", "[]")


class TestJsonHelpers(unittest.TestCase):

    def setUp(self):
        logging.disable(logging.CRITICAL)
        self.store = MemoryStore()

    def tearDown(self):
        logging.disable(logging.NOTSET)

    def test_read_missing_key_succeeds_with_default(self):
        result = read_json(self.store, "k", default=[])
        self.assertTrue(result.success)
        self.assertEqual(result.value, [])

    def test_write_then_read(self):
        self.assertTrue(write_json(self.store, "k", {"a": [1, 2]}).success)
        self.assertEqual(read_json(self.store, "k").value, {"a": [1, 2]})

    def test_read_corrupt_value_fails(self):
        self.store.set("k", "{ nope")
        result = read_json(self.store, "k", default=[])
        self.assertFalse(result.success)
        self.assertIn("Corrupt", result.error)
        self.assertEqual(result.value_or("fallback"), "fallback")

    def test_read_backend_failure(self):
        store = FailingStore(fail_reads=True)
        result = read_json(store, "k")
        self.assertFalse(result.success)
        self.assertIn("Simulated read failure", result.error)

    def test_write_backend_failure(self):
        store = FailingStore(fail_writes=True)
        result = write_json(store, "k", [1])
        self.assertFalse(result.success)
        self.assertIsNone(store.get("k"))

    def test_write_unserializable_value(self):
        result = write_json(self.store, "k", {"bad": object()})
        self.assertFalse(result.success)
        self.assertIsNone(self.store.get("k"))

    def test_delete_key(self):
        self.store.set("k", "1")
        self.assertTrue(delete_key(self.store, "k").success)
        self.assertIsNone(self.store.get("k"))
        self.assertFalse(delete_key(FailingStore(fail_writes=True), "k").success)


if __name__ == '__main__':
    unittest.main()
