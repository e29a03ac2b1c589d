"""Tests for SQLite persistence, config and logging.

Covers: stt.core.database, stt.core.config, stt.common.logger, and the
engine's save/load cycle against a real database file.
"""

import logging
import os
import shutil
import sqlite3
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

os.environ.setdefault("STT_DATA_DIR", tempfile.mkdtemp(prefix="stt_tests_"))


class FakeNow:

    def __init__(self, start=1_000_000.0):
        self.t = start

    def __call__(self):
        return self.t

    def advance(self, seconds):
        self.t += seconds


# ──────────────────────────────────────────────────────────────────────────
# database.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestDatabase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = Path(self.tmpdir) / "simple_time_tracker.sqlite"

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _db(self):
        from stt.core.database import Database
        return Database(self.path)

    def test_fresh_database_is_empty(self):
        db = self._db()
        self.assertEqual(db.load_states(), {})
        self.assertEqual(db.load_tracked_times(), [])
        self.assertTrue(self.path.exists())

    def test_tracked_times_roundtrip_keeps_order(self):
        rows = [("Standup", 900), ("Code review", 2700), ("Standup", 60)]
        self._db().save_tracked_times(rows)
        loaded = self._db().load_tracked_times()
        self.assertEqual([(t.description, t.seconds) for t in loaded], rows)

    def test_save_replaces_all_rows(self):
        db = self._db()
        db.save_tracked_times([("A", 1), ("B", 2), ("C", 3)])
        db.save_tracked_times([("D", 4)])
        loaded = db.load_tracked_times()
        self.assertEqual([(t.description, t.seconds) for t in loaded], [("D", 4)])

    def test_save_empty_ledger_clears_rows(self):
        db = self._db()
        db.save_tracked_times([("A", 1)])
        db.save_tracked_times([])
        self.assertEqual(db.load_tracked_times(), [])

    def test_states_roundtrip(self):
        db = self._db()
        db.save_states(1234, True, False)
        self.assertEqual(db.load_states(), {"time": 1234, "paused": 1, "darkmode": 0})
        db.save_states(1_700_000_000, False, True)
        self.assertEqual(db.load_states(), {"time": 1_700_000_000, "paused": 0, "darkmode": 1})

    def test_non_integer_state_is_dropped(self):
        self._db().load_states()
        with sqlite3.connect(self.path) as conn:
            conn.execute("INSERT INTO States (Key, Value) VALUES ('time', 'soon')")
            conn.execute("INSERT INTO States (Key, Value) VALUES ('darkmode', 0)")
        conn.close()
        self.assertEqual(self._db().load_states(), {"darkmode": 0})

    def test_wrong_schema_raises_persistence_error(self):
        from stt.core.database import PersistenceError
        with sqlite3.connect(self.path) as conn:
            conn.execute("CREATE TABLE TrackedTimes (ID INTEGER PRIMARY KEY, Minutes INTEGER)")
        conn.close()
        with self.assertRaises(PersistenceError):
            self._db().load_tracked_times()

    def test_corrupt_row_raises_persistence_error(self):
        from stt.core.database import PersistenceError
        self._db().load_tracked_times()
        with sqlite3.connect(self.path) as conn:
            conn.execute("INSERT INTO TrackedTimes (Seconds, Description) VALUES (-5, 'Negative')")
        conn.close()
        with self.assertRaises(PersistenceError):
            self._db().load_tracked_times()

    def test_unopenable_path_raises_persistence_error(self):
        from stt.core.database import Database, PersistenceError
        # A directory can't be opened as a database file
        with self.assertRaises(PersistenceError):
            Database(self.tmpdir).load_states()

    def test_not_a_database_raises_persistence_error(self):
        from stt.core.database import PersistenceError
        self.path.write_bytes(b"this is definitely not sqlite" * 100)
        with self.assertRaises(PersistenceError):
            self._db().load_states()

    def test_persistence_error_is_runtime_error(self):
        from stt.core.database import PersistenceError
        self.assertTrue(issubclass(PersistenceError, RuntimeError))

    def _reject_tracked_time_inserts(self):
        # Same columns, but no row can ever be inserted
        with sqlite3.connect(self.path) as conn:
            conn.execute("DROP TABLE TrackedTimes")
            conn.execute("CREATE TABLE TrackedTimes (ID INTEGER PRIMARY KEY, Seconds INTEGER NOT NULL "
                         "CHECK (Seconds < 0), Description TEXT NOT NULL)")
        conn.close()

    def test_save_all_writes_both_tables(self):
        db = self._db()
        db.save_all(42, True, False, [("A", 1), ("B", 2)])
        self.assertEqual(db.load_states(), {"time": 42, "paused": 1, "darkmode": 0})
        self.assertEqual([(t.description, t.seconds) for t in db.load_tracked_times()], [("A", 1), ("B", 2)])

    def test_failed_save_all_changes_neither_table(self):
        from stt.core.database import PersistenceError
        db = self._db()
        db.save_states(10, True, True)
        self._reject_tracked_time_inserts()
        with self.assertRaises(PersistenceError):
            db.save_all(99, False, False, [("A", 1)])
        self.assertEqual(db.load_states(), {"time": 10, "paused": 1, "darkmode": 1})
        self.assertEqual(db.load_tracked_times(), [])


# ──────────────────────────────────────────────────────────────────────────
# engine + database tests
# ──────────────────────────────────────────────────────────────────────────

class TestEngineRestart(unittest.TestCase):
    """Engine state survives a save and reload through a real database file."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = Path(self.tmpdir) / "simple_time_tracker.sqlite"
        self.now = FakeNow()

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _load(self):
        from stt.core.database import Database
        from stt.core.engine import TimeAccountingEngine
        return TimeAccountingEngine.load(Database(self.path), now=self.now)

    def test_ledger_survives_restart(self):
        from stt.core.engine import Outcome
        engine = self._load()
        engine.toggle_start_stop()
        self.now.advance(2 * 3600)
        self.assertIs(engine.apply_operation("30", "Planning", ""), Outcome.OK)
        self.assertIs(engine.apply_operation("1:00", "Coding", ""), Outcome.OK)
        self.assertIs(engine.apply_operation("15", "", "1"), Outcome.OK)

        reloaded = self._load()
        self.assertEqual(reloaded.ledger.entries, engine.ledger.entries)
        self.assertEqual(reloaded.ledger.entries, (("Planning", 2700), ("Coding", 3600)))

    def test_paused_clock_survives_restart(self):
        engine = self._load()
        engine.toggle_start_stop()
        self.now.advance(500)
        engine.toggle_start_stop()
        engine.toggle_dark_mode()
        engine.shutdown()

        # Time spent closed doesn't count while paused
        self.now.advance(10_000)
        reloaded = self._load()
        self.assertFalse(reloaded.clock.running)
        self.assertEqual(reloaded.clock.current_elapsed, 500)
        self.assertFalse(reloaded.dark_mode)

    def test_running_clock_keeps_counting_across_restart(self):
        engine = self._load()
        engine.toggle_start_stop()
        self.now.advance(500)
        engine.shutdown()

        self.now.advance(100)
        reloaded = self._load()
        self.assertTrue(reloaded.clock.running)
        self.assertEqual(reloaded.clock.current_elapsed, 600)

    def test_delete_survives_restart(self):
        from stt.core.engine import Outcome
        engine = self._load()
        engine.toggle_start_stop()
        self.now.advance(3 * 60)
        for name in ("A", "B", "C"):
            engine.apply_operation("1", name, "")
        self.assertIs(engine.delete_entry(2), Outcome.OK)

        reloaded = self._load()
        self.assertEqual(reloaded.ledger.entries, (("A", 60), ("C", 60)))

    def test_failed_apply_leaves_disk_and_engine_unchanged(self):
        from stt.core.database import PersistenceError
        from stt.core.engine import Outcome
        engine = self._load()
        engine.toggle_start_stop()
        self.now.advance(600)
        self.assertIs(engine.apply_operation("1", "A", ""), Outcome.OK)
        self.assertIs(engine.apply_operation("1", "B", ""), Outcome.OK)
        engine.toggle_start_stop()

        with sqlite3.connect(self.path) as conn:
            conn.execute("DROP TABLE TrackedTimes")
            conn.execute("CREATE TABLE TrackedTimes (ID INTEGER PRIMARY KEY, Seconds INTEGER NOT NULL "
                         "CHECK (Seconds < 0), Description TEXT NOT NULL)")
        conn.close()

        with self.assertRaises(PersistenceError):
            engine.apply_operation("", "C", "")
        self.assertEqual(engine.ledger.entries, (("A", 60), ("B", 60)))
        self.assertEqual(engine.clock.current_elapsed, 480)
        with self.assertRaises(PersistenceError):
            engine.delete_entry(1)
        self.assertEqual(engine.ledger.entries, (("A", 60), ("B", 60)))

        # The States table still holds the running clock from the last good save
        from stt.core.database import Database
        states = Database(self.path).load_states()
        self.assertEqual(states["paused"], 0)
        self.assertEqual(states["time"], 1_000_120)


# ──────────────────────────────────────────────────────────────────────────
# config.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestConfig(unittest.TestCase):

    def test_defaults(self):
        from stt.common.setup import PATHS
        from stt.core.config import load_config
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("STT_TICK_MS", None)
            os.environ.pop("STT_LOG_LEVEL", None)
            os.environ.pop("STT_DATABASE_PATH", None)
            os.environ.pop("STT_DEFAULT_DARK_MODE", None)
            config = load_config()
        self.assertEqual(config.tick_interval_ms, 500)
        self.assertEqual(config.log_level, logging.INFO)
        self.assertTrue(config.default_dark_mode)
        self.assertEqual(config.database_path, PATHS.database)

    def test_env_overrides(self):
        from stt.core.config import load_config
        with patch.dict(os.environ, {"STT_TICK_MS": "250", "STT_LOG_LEVEL": "debug"}):
            config = load_config()
        self.assertEqual(config.tick_interval_ms, 250)
        self.assertEqual(config.log_level, logging.DEBUG)

    def test_invalid_env_falls_back(self):
        from stt.core.config import load_config
        for tick in ("fast", "0", "-10"):
            with self.subTest(tick=tick):
                with patch.dict(os.environ, {"STT_TICK_MS": tick, "STT_LOG_LEVEL": "chatty"}):
                    config = load_config()
                self.assertEqual(config.tick_interval_ms, 500)
                self.assertEqual(config.log_level, logging.INFO)

    def test_config_is_frozen(self):
        from pydantic import ValidationError
        from stt.core.config import load_config
        config = load_config()
        with self.assertRaises(ValidationError):
            config.tick_interval_ms = 1
        self.assertNotEqual(config.tick_interval_ms, 1)

    def test_database_path_from_env(self):
        from stt.core.config import load_config
        target = Path(self._tmp()) / "other.db"
        with patch.dict(os.environ, {"STT_DATABASE_PATH": str(target)}):
            config = load_config()
        self.assertEqual(config.database_path, target)

    def test_unrelated_env_ignored(self):
        from stt.core.config import load_config
        with patch.dict(os.environ, {"STT_SOMETHING_ELSE": "1", "STT_DEFAULT_DARK_MODE": "false"}):
            config = load_config()
        self.assertFalse(config.default_dark_mode)

    def test_data_dir_override(self):
        from stt.common.setup import user_data_dir
        with patch.dict(os.environ, {"STT_DATA_DIR": self._tmp()}):
            self.assertEqual(user_data_dir(), Path(os.environ["STT_DATA_DIR"]))

    def _tmp(self):
        path = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, path, True)
        return path


# ──────────────────────────────────────────────────────────────────────────
# logger.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestLogger(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        logger = logging.getLogger("stt_test_logger")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _logger(self):
        from stt.common.logger import get_logger
        return get_logger(name="stt_test_logger", log_dir=Path(self.tmpdir), historical_debugs=2)

    def test_handlers_not_duplicated(self):
        first = len(self._logger().handlers)
        second = len(self._logger().handlers)
        self.assertEqual(first, second)
        self.assertEqual(first, 3)

    def test_writes_log_files(self):
        logger = self._logger()
        logger.info("hello from the tests")
        for handler in logger.handlers:
            handler.flush()
        self.assertTrue((Path(self.tmpdir) / "stt_test_logger.log").exists())
        self.assertIn("hello from the tests", (Path(self.tmpdir) / "latest.log").read_text(encoding="utf-8"))

    def test_set_level_spares_debug_log(self):
        from stt.common.logger import set_level
        logger = self._logger()
        set_level(logging.WARNING, logger)
        levels = {h.get_name(): h.level for h in logger.handlers}
        self.assertEqual(levels["stt_test_logger:persistent"], logging.WARNING)
        self.assertEqual(levels["stt_test_logger:latest"], logging.WARNING)
        self.assertEqual(levels["stt_test_logger:historical_debug"], logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
