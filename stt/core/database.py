import sqlite3
from contextlib import closing
from stt.common.logger import log
from stt.core.ledger import TrackedTime

TIME_KEY = "time"
PAUSED_KEY = "paused"
DARKMODE_KEY = "darkmode"

_CREATE_STATES = """
CREATE TABLE IF NOT EXISTS States (
    Key TEXT PRIMARY KEY,
    Value INTEGER NOT NULL
)"""
_CREATE_TRACKED_TIMES = """
CREATE TABLE IF NOT EXISTS TrackedTimes (
    ID INTEGER PRIMARY KEY,
    Seconds INTEGER NOT NULL,
    Description TEXT NOT NULL
)"""


# Raised whenever the database can't be opened, read or written. Unlike a rejected user edit, this means the
# tracker can no longer guarantee anything it shows will survive a restart.
class PersistenceError(RuntimeError):
    pass


# Durable storage for the clock/theme key-value table and the tracked time rows, backed by a single SQLite file.
# Every call opens its own short-lived connection; saves are a full replace inside one transaction.
class Database:

    def __init__(self, path):
        self.path = path

    def _connect(self):
        conn = None
        try:
            conn = sqlite3.connect(self.path)
            conn.execute(_CREATE_STATES)
            conn.execute(_CREATE_TRACKED_TIMES)
            return conn
        except sqlite3.Error as e:
            if conn is not None:
                conn.close()
            log.exception(f"Could not open database at '{self.path}'")
            raise PersistenceError(f"Could not open database at '{self.path}': {e}") from e

    #region === Loading ===

    # Returns the States table as a dict. Rows whose value isn't an integer are dropped with a warning so the
    # caller falls back to its defaults for them.
    def load_states(self):
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute("SELECT Key, Value FROM States").fetchall()
        except sqlite3.Error as e:
            log.exception(f"Failed to read States from '{self.path}'")
            raise PersistenceError(f"Failed to read States from '{self.path}': {e}") from e

        states = {}
        dropped = set()
        for key, value in rows:
            if isinstance(value, int) and not isinstance(value, bool):
                states[key] = value
            else:
                dropped.add(str(key))
        if dropped:
            log.warning(f"Loaded States from '{self.path}', but ignored non-integer values for: {', '.join(sorted(dropped))}")
        else:
            log.info(f"Successfully loaded {len(states)} states from '{self.path}'.")
        return states

    # Returns the TrackedTimes rows in insertion order.
    def load_tracked_times(self):
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute("SELECT Seconds, Description FROM TrackedTimes ORDER BY ID").fetchall()
        except sqlite3.Error as e:
            log.exception(f"Failed to read TrackedTimes from '{self.path}'")
            raise PersistenceError(f"Failed to read TrackedTimes from '{self.path}': {e}") from e

        tracked_times = []
        for seconds, description in rows:
            if not isinstance(seconds, int) or seconds < 0 or not isinstance(description, str) or not description:
                raise PersistenceError(f"Corrupt tracked time row ({seconds!r}, {description!r}) in '{self.path}'")
            tracked_times.append(TrackedTime(description, seconds))
        log.info(f"Successfully loaded {len(tracked_times)} tracked times from '{self.path}'.")
        return tracked_times

    #endregion === Loading ===

    #region === Saving ===

    # Full replace of one or more tables inside a single transaction: either every table is rewritten or none is.
    def _replace(self, *replacements):
        label = " and ".join(table for table, _, _ in replacements)
        try:
            with closing(self._connect()) as conn:
                with conn:
                    for table, insert_sql, rows in replacements:
                        conn.execute(f"DELETE FROM {table}")
                        conn.executemany(insert_sql, rows)
        except sqlite3.Error as e:
            log.exception(f"Failed to save {label} to '{self.path}'")
            raise PersistenceError(f"Failed to save {label} to '{self.path}': {e}") from e

    @staticmethod
    def _states(time_value, paused, dark_mode):
        rows = [
            (TIME_KEY, int(time_value)),
            (PAUSED_KEY, int(bool(paused))),
            (DARKMODE_KEY, int(bool(dark_mode))),
        ]
        return "States", "INSERT INTO States (Key, Value) VALUES (?, ?)", rows

    @staticmethod
    def _tracked_times(tracked_times):
        rows = [(int(seconds), description) for description, seconds in tracked_times]
        return "TrackedTimes", "INSERT INTO TrackedTimes (Seconds, Description) VALUES (?, ?)", rows

    # Writes the clock and theme state. `time` meaning depends on `paused`, see TimerClock.persisted_time().
    def save_states(self, time_value, paused, dark_mode):
        self._replace(self._states(time_value, paused, dark_mode))
        log.info(f"Successfully saved states to '{self.path}' (time={int(time_value)}, paused={int(bool(paused))})")

    def save_tracked_times(self, tracked_times):
        replacement = self._tracked_times(tracked_times)
        self._replace(replacement)
        log.info(f"Successfully saved {len(replacement[2])} tracked times to '{self.path}'")

    # Writes both tables in one transaction, so the ledger never lands on disk without the clock it came off.
    def save_all(self, time_value, paused, dark_mode, tracked_times):
        replacement = self._tracked_times(tracked_times)
        self._replace(replacement, self._states(time_value, paused, dark_mode))
        log.info(f"Successfully saved {len(replacement[2])} tracked times and states to '{self.path}'")

    #endregion === Saving ===
