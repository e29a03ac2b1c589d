"""Duration input grammar and display formatting: pure logic, no UI.

Accepted input is either empty (take everything on the clock), ``M`` or
``H:M``.  Every field must be plain ASCII digits.  The value is checked
against a *bound*, the clock's elapsed seconds at the time of the request,
and rejected outright rather than clamped when it does not fit.
"""

import re

# Largest value a SQLite INTEGER column can hold. Durations and sums above this count as overflow.
MAX_SECONDS = 2**63 - 1

_DIGITS = re.compile(r"[0-9]+")


class DurationError(ValueError):
    """Raised when duration text is malformed or does not fit the bound."""


def _parse_field(field, name):
    if not _DIGITS.fullmatch(field):
        raise DurationError(f"{name} field {field!r} is not a non-negative integer")
    return int(field)


def parse_duration(text, bound):
    """Parse ``text`` into whole seconds, validated against ``bound`` seconds.

    Checks run in a fixed order and the first failure raises
    DurationError:

    1. at most one ``:`` separator
    2. minutes are a non-negative integer below 60
    3. with less than an hour on the clock, minutes may not exceed the
       clock's whole minutes
    4. hours, when present, are a non-negative integer no larger than the
       clock's whole hours
    5. the total must fit in MAX_SECONDS

    An empty string returns the bound floored to whole seconds.
    """
    bound_seconds = max(0, int(bound))
    if not text:
        return bound_seconds

    parts = text.split(":")
    if len(parts) > 2:
        raise DurationError(f"too many ':' separators in {text!r}")

    bound_hours = bound_seconds // 3600
    bound_minutes = bound_seconds // 60

    minutes = _parse_field(parts[-1], "minutes")
    if minutes >= 60:
        raise DurationError(f"minutes must be below 60, got {minutes}")
    if bound_hours == 0 and minutes > bound_minutes:
        raise DurationError(f"{minutes} minutes exceeds the {bound_minutes} minutes elapsed")

    hours = 0
    if len(parts) == 2:
        hours = _parse_field(parts[0], "hours")
        if hours > bound_hours:
            raise DurationError(f"{hours} hours exceeds the {bound_hours} hours elapsed")

    seconds = hours * 3600 + minutes * 60
    if seconds > MAX_SECONDS:
        raise DurationError(f"{text!r} does not fit in a duration")
    return seconds


def format_hm(seconds):
    """Format seconds as ``H:MM``, the way ledger rows show them."""
    seconds = max(0, int(seconds))
    return f"{seconds // 3600}:{seconds // 60 % 60:02d}"


def format_hms(seconds):
    """Format seconds as ``H:MM:SS`` for the clock readout. Negative values clamp to zero."""
    seconds = max(0, int(seconds))
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h}:{m:02d}:{s:02d}"
