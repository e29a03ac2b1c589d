"""Time accounting engine: turns user intents into clock and ledger changes.

The engine owns the clock, the ledger, the three text buffers of the entry
form and the dark mode flag.  The UI forwards intents to it and renders
whatever TimeAccountingEngine.snapshot() returns; it never touches
the clock or ledger directly.

Rejected intents never raise.  They return an Outcome other than
``Outcome.OK`` and leave every piece of state, buffers included, exactly
as it was.
"""

import time
from dataclasses import dataclass
from enum import Enum
from stt.common.logger import log
from stt.core import filters
from stt.core.clock import TimerClock
from stt.core.database import DARKMODE_KEY, PAUSED_KEY, TIME_KEY, PersistenceError
from stt.core.duration import DurationError, parse_duration
from stt.core.ledger import TrackedTimeLedger


class Outcome(Enum):
    OK = "ok"
    INVALID_DURATION = "invalid_duration"
    EXCEEDS_ELAPSED = "exceeds_elapsed"
    AMBIGUOUS_TARGET = "ambiguous_target"
    INVALID_INDEX = "invalid_index"
    OVERFLOW = "overflow"


@dataclass(frozen=True)
class EngineView:
    """Read-only picture of the engine for one redraw."""
    elapsed: float
    running: bool
    dark_mode: bool
    time_text: str
    description_text: str
    index_text: str
    entries: tuple


class TimeAccountingEngine:

    def __init__(self, database, clock=None, ledger=None, dark_mode=True, now=time.time):
        self.database = database
        self.clock = clock if clock is not None else TimerClock(now=now)
        self.ledger = ledger if ledger is not None else TrackedTimeLedger()
        self.dark_mode = dark_mode
        self.time_text = ""
        self.description_text = ""
        self.index_text = ""

    @classmethod
    def load(cls, database, default_dark_mode=True, now=time.time):
        """Build an engine from whatever the database holds.

        Missing keys fall back to a paused 0:00:00 clock and
        ``default_dark_mode``.  A PersistenceError from the database
        propagates.
        """
        states = database.load_states()
        tracked_times = database.load_tracked_times()

        running = states.get(PAUSED_KEY, 1) == 0
        if TIME_KEY in states:
            clock = TimerClock.from_persisted(states[TIME_KEY], running, now=now)
        else:
            clock = TimerClock(now=now)
        dark_mode = states[DARKMODE_KEY] == 1 if DARKMODE_KEY in states else default_dark_mode

        log.info(f"Loaded engine: {len(tracked_times)} tracked times, clock {'running' if clock.running else 'paused'}")
        return cls(database, clock=clock, ledger=TrackedTimeLedger(tracked_times), dark_mode=dark_mode)

    #region === Reading ===

    @property
    def should_tick(self):
        return self.clock.running

    def snapshot(self):
        return EngineView(
            elapsed=self.clock.current_elapsed,
            running=self.clock.running,
            dark_mode=self.dark_mode,
            time_text=self.time_text,
            description_text=self.description_text,
            index_text=self.index_text,
            entries=self.ledger.entries,
        )

    #endregion === Reading ===

    #region === Clock and theme intents ===

    def toggle_start_stop(self):
        self.clock.toggle()
        log.info(f"Clock {'started' if self.clock.running else 'paused'}")

    def clear_timer(self):
        self.clock.reset()
        log.info("Clock cleared")

    def toggle_dark_mode(self):
        self.dark_mode = not self.dark_mode

    #endregion === Clock and theme intents ===

    #region === Text buffers ===

    def set_time_text(self, text):
        if not filters.accept_time_text(text):
            return False
        self.time_text = text
        return True

    def set_description_text(self, text):
        if not filters.accept_description_text(text):
            return False
        self.description_text = text
        return True

    def set_index_text(self, text):
        if not filters.accept_index_text(text):
            return False
        self.index_text = text
        return True

    #endregion === Text buffers ===

    #region === Ledger operations ===

    def apply(self):
        """Run apply_operation() on the engine's own text buffers."""
        return self.apply_operation(self.time_text, self.description_text, self.index_text)

    def apply_operation(self, time_text, description_text, index_text):
        """Commit part of the clock to a new or existing tracked time.

        ``time_text`` picks how much (empty means everything on the clock).
        Exactly one of ``description_text`` (new entry) or ``index_text``
        (1-based position to merge into) must be filled in.  On success the
        buffers are cleared, the amount comes off the clock and everything
        is saved.  If the save fails the clock, ledger and buffers are put
        back as they were and the PersistenceError propagates.
        """
        bound = self.clock.current_elapsed
        try:
            seconds = parse_duration(time_text, bound)
        except DurationError as e:
            log.debug(f"Apply rejected: {e}")
            return Outcome.INVALID_DURATION
        if seconds > bound:
            log.debug(f"Apply rejected: {seconds}s is more than the {bound:.0f}s on the clock")
            return Outcome.EXCEEDS_ELAPSED

        if bool(description_text) == bool(index_text):
            log.debug("Apply rejected: exactly one of description or index must be set")
            return Outcome.AMBIGUOUS_TARGET

        # Changes go to a copy of the ledger that only replaces the live one once it is on disk.
        ledger = TrackedTimeLedger(self.ledger)
        if description_text:
            ledger.append(description_text, seconds)
        else:
            if not (index_text.isascii() and index_text.isdigit()):
                log.debug(f"Apply rejected: index '{index_text}' is not a number")
                return Outcome.INVALID_INDEX
            position = int(index_text)
            if ledger.get(position) is None:
                return Outcome.INVALID_INDEX
            if not ledger.merge(position, seconds):
                return Outcome.OVERFLOW

        anchors = (self.clock.start, self.clock.paused_at)
        self.clock.commit(seconds)
        try:
            self._save(ledger)
        except PersistenceError:
            self.clock.start, self.clock.paused_at = anchors
            log.warning(f"Apply of {seconds}s rolled back, the save failed")
            raise

        self.ledger = ledger
        self.time_text = ""
        self.description_text = ""
        self.index_text = ""
        return Outcome.OK

    def delete_entry(self, position):
        """Remove the entry at ``position``; a failed save leaves the ledger untouched and propagates."""
        ledger = TrackedTimeLedger(self.ledger)
        if not ledger.delete(position):
            return Outcome.INVALID_INDEX
        try:
            self.database.save_tracked_times(ledger.entries)
        except PersistenceError:
            log.warning(f"Delete of #{position} rolled back, the save failed")
            raise
        self.ledger = ledger
        return Outcome.OK

    # Returns the description to put on the clipboard, or None for a position that doesn't exist.
    def copy_description(self, position):
        entry = self.ledger.get(position)
        if entry is None:
            log.debug(f"Copy of #{position} ignored, ledger has {len(self.ledger)} entries")
            return None
        return entry.description

    #endregion === Ledger operations ===

    #region === Persistence ===

    def save_states(self):
        self.database.save_states(self.clock.persisted_time(), not self.clock.running, self.dark_mode)

    # Writes the ledger and the state table together in one transaction.
    def _save(self, ledger):
        self.database.save_all(self.clock.persisted_time(), not self.clock.running, self.dark_mode, ledger.entries)

    # Called when the window closes, so the clock and theme survive a restart.
    def shutdown(self):
        self.save_states()
        log.info("Engine state saved on shutdown")

    #endregion === Persistence ===
