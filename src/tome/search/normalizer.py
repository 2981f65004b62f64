# ABOUTME: Text normalization for the local search index.
# ABOUTME: Case-folds, strips diacritics and punctuation, and splits text into tokens.

import unicodedata


def _strip_diacritics(text: str) -> str:
    """Drop combining marks after canonical decomposition ("José" -> "Jose")."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def _strip_punctuation(text: str) -> str:
    """Remove every character in a Unicode punctuation category (Pc, Pd, Ps, ...)."""
    return "".join(ch for ch in text if not unicodedata.category(ch).startswith("P"))


def normalize_for_search(text: str | None) -> str:
    """Convert raw text into the canonical form stored in and matched against the index.

    Lower-cases, removes diacritics and punctuation, and trims surrounding
    whitespace. Internal whitespace is kept so callers can tokenize.
    Total and idempotent: ``normalize_for_search(normalize_for_search(x))``
    equals ``normalize_for_search(x)`` and None yields "".

    Examples:
        "F. Scott Fitzgerald" -> "f scott fitzgerald"
        "978-0-7432-7356-5"   -> "9780743273565"
    """
    if not text:
        return ""
    folded = _strip_diacritics(text.casefold())
    # casefold can expand characters (e.g. "ß" -> "ss") but never reintroduces marks
    return _strip_punctuation(folded).strip()


def tokenize(text: str | None) -> list[str]:
    """Normalize text and split it on whitespace, dropping empty tokens."""
    return normalize_for_search(text).split()
