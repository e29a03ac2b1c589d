# Per-keystroke filters for the three text fields. Each returns True if the proposed text may replace the
# current buffer. A refused edit simply leaves the old text in place.

_TIME_CHARS = set("0123456789:")
_DIGIT_CHARS = set("0123456789")


# Short inputs may be bare minutes ("45"), anything of three or more characters must already contain the
# colon ("1:30"), and nothing longer than five characters ("12:34") is taken.
def accept_time_text(text):
    if not set(text) <= _TIME_CHARS:
        return False
    if len(text) < 3:
        return True
    if len(text) < 6:
        return ":" in text
    return False


# Ledger positions are typed as one or two digits.
def accept_index_text(text):
    return text == "" or (len(text) < 3 and set(text) <= _DIGIT_CHARS)


def accept_description_text(text):
    return True
