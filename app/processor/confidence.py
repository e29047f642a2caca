"""Heuristic confidence score for OCR output.

General-purpose OCR engines do not expose a per-document confidence that is
comparable across inputs, so the score is a proxy built from three signals:

1. **Length**: more recognized content on a form-like document suggests a
   more complete read. Capped at ``BASE_CAP`` so a long document alone never
   reaches the top of the scale.
2. **Noise**: misread glyphs tend to come out as unusual symbols, so the
   ratio of characters outside letters, digits, whitespace and ``@.,-`` is
   subtracted.
3. **Vocabulary**: each keyword from ``KEYWORDS`` found anywhere in the text
   (case-insensitive substring) adds a fixed bonus.

The result is clamped to ``[0, 100]`` and rounded.
"""

import re

BASE_CAP = 80.0
CHARS_PER_BASE_POINT = 10
NOISE_PENALTY_WEIGHT = 20.0
KEYWORD_BONUS = 5

KEYWORDS: tuple[str, ...] = (
    "the",
    "and",
    "member",
    "application",
    "name",
    "email",
    "address",
)

_NOISE_PATTERN = re.compile(r"[^a-zA-Z0-9\s@.,\-]")


def special_char_ratio(text: str) -> float:
    if not text:
        return 0.0
    return len(_NOISE_PATTERN.findall(text)) / len(text)


def keyword_matches(text: str) -> list[str]:
    lowered = text.lower()
    return [word for word in KEYWORDS if word in lowered]


def score(text: str) -> int:
    """Return a deterministic quality estimate in ``[0, 100]`` for ``text``."""
    if not text:
        return 0

    value = min(BASE_CAP, len(text) / CHARS_PER_BASE_POINT)
    value -= special_char_ratio(text) * NOISE_PENALTY_WEIGHT
    value += len(keyword_matches(text)) * KEYWORD_BONUS

    return max(0, min(100, round(value)))
