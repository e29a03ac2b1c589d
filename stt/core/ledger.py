"""Tracked-time ledger: an ordered list of named durations, pure logic, no UI.

Positions are 1-based and only meaningful for the current contents: deleting
entry ``k`` moves every later entry down by one.
"""

from dataclasses import dataclass
from stt.common.logger import log
from stt.core.duration import MAX_SECONDS


@dataclass
class TrackedTime:
    description: str
    seconds: int


class TrackedTimeLedger:

    def __init__(self, entries=()):
        self._entries = [TrackedTime(e.description, int(e.seconds)) for e in entries]

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self):
        """Immutable view for rendering: a tuple of ``(description, seconds)`` pairs."""
        return tuple((e.description, e.seconds) for e in self._entries)

    @property
    def total_seconds(self):
        return sum(e.seconds for e in self._entries)

    def _in_range(self, position):
        return 1 <= position <= len(self._entries)

    def get(self, position):
        if not self._in_range(position):
            return None
        return self._entries[position - 1]

    def append(self, description, seconds):
        if not description:
            raise ValueError("Tracked time needs a non-empty description")
        self._entries.append(TrackedTime(description, int(seconds)))
        log.info(f"Added tracked time #{len(self._entries)} '{description}' ({seconds}s)")

    def merge(self, position, seconds):
        """Add ``seconds`` onto the entry at ``position``.

        Returns False and leaves the ledger untouched when the position is
        out of range or the sum would overflow.
        """
        entry = self.get(position)
        if entry is None:
            log.debug(f"Merge into #{position} ignored, ledger has {len(self._entries)} entries")
            return False
        total = entry.seconds + int(seconds)
        if total > MAX_SECONDS:
            log.debug(f"Merge of {seconds}s into #{position} ignored, duration would overflow")
            return False
        entry.seconds = total
        log.info(f"Merged {seconds}s into tracked time #{position} '{entry.description}', now {total}s")
        return True

    def delete(self, position):
        if not self._in_range(position):
            log.debug(f"Delete of #{position} ignored, ledger has {len(self._entries)} entries")
            return False
        removed = self._entries.pop(position - 1)
        log.info(f"Deleted tracked time #{position} '{removed.description}'")
        return True
