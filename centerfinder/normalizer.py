import re
import unicodedata

_COMBINING = re.compile(r"[\u0300-\u036f]")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_SPACES = re.compile(r"\s+")

def normalize(text) -> str:
    """
    Canonical comparison form of a region string:
    - lower-case, NFD, combining accents removed
    - anything other than a-z, 0-9 and whitespace becomes a space
    - whitespace collapsed and trimmed
    None and "" both give "".
    """
    if text is None:
        return ""
    s = str(text).lower()
    s = unicodedata.normalize("NFD", s)
    s = _COMBINING.sub("", s)
    s = _NON_ALNUM.sub(" ", s)
    s = _SPACES.sub(" ", s)
    return s.strip()
