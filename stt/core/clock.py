import math
import time
from stt.common.logger import log
from stt.core.duration import format_hms

# The single stopwatch of the tracker. Elapsed time is the distance between two wall-clock anchors, `start`
# and `paused_at`, so committing time to the ledger is just a matter of moving one of them.
class TimerClock:

    # Starts out paused at 0:00:00 unless told otherwise. `now` is any zero-arg callable returning epoch seconds.
    def __init__(self, now=time.time):
        self._now = now
        instant = now()
        self.running = False
        self.start = instant
        self.paused_at = instant

    # Rebuilds a clock from the persisted `time` value. While running it is the start instant's epoch second,
    # while paused it is the number of seconds that had elapsed.
    @classmethod
    def from_persisted(cls, seconds, running, now=time.time):
        clock = cls(now=now)
        if running:
            clock.start = float(seconds)
            clock.running = True
        else:
            clock.start = clock.paused_at - max(0, seconds)
        log.debug(f"Restored clock from persisted time {seconds} (running={running}), elapsed {format_hms(clock.current_elapsed)}")
        return clock

    # Returns how many seconds are currently on the clock.
    @property
    def current_elapsed(self):
        if self.running:
            return self._now() - self.start
        return self.paused_at - self.start

    # The integer stored under the `time` key, see from_persisted(). A running start is rounded up so a restart
    # never finds more time on the clock than there was.
    def persisted_time(self):
        if self.running:
            return math.ceil(self.start)
        return int(self.current_elapsed)

    # Pauses a running clock or resumes a paused one. On resume the start anchor is pushed forward by however
    # long the clock sat paused, so no time is gained or lost across the pair.
    def toggle(self):
        now = self._now()
        if self.running:
            self.paused_at = now
            log.debug(f"Paused clock at {format_hms(self.current_elapsed)}")
        else:
            self.start += now - self.paused_at
            log.debug(f"Resumed clock after {now - self.paused_at:.1f}s paused")
        self.running = not self.running

    # Simply restores the clock to 0:00:00 without touching the run state.
    def reset(self):
        now = self._now()
        self.start = now
        self.paused_at = now
        log.debug("Reset clock to 0")

    # Takes `seconds` off the visible elapsed time. Callers must have checked seconds <= current_elapsed.
    def commit(self, seconds):
        if self.running:
            self.start += seconds
        else:
            self.paused_at -= seconds
        log.debug(f"Committed {seconds}s off the clock, {format_hms(self.current_elapsed)} left")
