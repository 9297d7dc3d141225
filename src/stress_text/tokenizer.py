"""Text normalization and tokenization for stress classification."""

from __future__ import annotations

import re

_NON_WORD_RE = re.compile(r"[^\w\s]|_")

MIN_TOKEN_LENGTH = 3


def tokenize(text: str) -> list[str]:
    """Split text into lowercase terms.

    Every character that is not a letter, digit or whitespace is replaced
    by a space (underscores included), the result is split on whitespace
    runs, and tokens shorter than ``MIN_TOKEN_LENGTH`` characters are
    discarded.

    Args:
        text: Raw input text.

    Returns:
        List of normalized terms in document order (possibly empty).
    """
    cleaned = _NON_WORD_RE.sub(" ", text.lower())
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]
