import re

_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")
_WHITESPACE_RUN = re.compile(r"\s{2,}")
_NON_WORD = re.compile(r"[^\w\s]")


def normalize_text(text: str | None) -> str:
    """Lower-case, drop punctuation and collapse whitespace for keyword matching."""
    if not text:
        return ""
    text = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE_RUN.sub(" ", text).strip()


def strip_non_word(text: str) -> str:
    return _NON_WORD.sub("", text).strip()
