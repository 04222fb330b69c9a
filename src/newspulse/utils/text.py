"""Text utility functions."""

import re
from typing import List, Set, Tuple

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
_WORD = re.compile(r"[^\W\d_]+(?:[-'][^\W\d_]+)*")
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "`": "'"})


def normalize_apostrophes(text: str) -> str:
    """Map typographic apostrophes to ASCII so patterns like "n'" match."""
    return text.translate(_APOSTROPHES) if text else ""


def normalize_whitespace(text: str) -> str:
    """Normalize whitespace in text."""
    if not text:
        return ""
    return " ".join(text.split())


def is_blank(text) -> bool:
    return not isinstance(text, str) or not text.strip()


def split_sentences(text: str) -> List[str]:
    """Split on terminal punctuation; pieces are returned unstripped, empties dropped."""
    if not text:
        return []
    return [s for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]


def sentence_spans(text: str) -> List[Tuple[int, int]]:
    """(start, end) offsets of each sentence, so callers can map matches to sentences."""
    spans = []
    start = 0
    for m in _SENTENCE_BOUNDARY.finditer(text):
        if text[start:m.start()].strip():
            spans.append((start, m.start()))
        start = m.end()
    if text[start:].strip():
        spans.append((start, len(text)))
    return spans


def words(text: str) -> List[str]:
    """Alphabetic words (hyphenated and elided forms kept whole), lower-cased."""
    return [w.lower() for w in _WORD.findall(text or "")]


def word_count(text: str) -> int:
    return len(text.split()) if text else 0


def token_set(text: str) -> Set[str]:
    return set(text.lower().split()) if text else set()


def jaccard_similarity(text1: str, text2: str) -> float:
    """Jaccard overlap of whitespace tokens."""
    words1 = token_set(text1)
    words2 = token_set(text2)
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def mask_spans(text: str, spans: List[Tuple[int, int]]) -> str:
    """Blank out spans with spaces, keeping every other offset unchanged."""
    if not spans:
        return text
    chars = list(text)
    for start, end in spans:
        for i in range(start, min(end, len(chars))):
            chars[i] = " "
    return "".join(chars)


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value to range [lo, hi]."""
    return max(lo, min(hi, float(value)))
