"""TF-IDF vectorization with a bounded, frequency-ranked vocabulary.

Converts free text into dense feature vectors for the stress regression.
Pure Python, no numpy: vectors are plain ``list[float]`` indexed by the
learned vocabulary.

Weighting:

- term frequency is ``count(term, doc) / total_tokens(doc)``;
- inverse document frequency is ``ln(N / df(term))``;
- the vocabulary keeps the ``max_features`` terms with the highest raw
  frequency across the whole corpus, ties going to the term seen first.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from loguru import logger

from .tokenizer import tokenize

if TYPE_CHECKING:
    from .storage import ModelStore


@dataclass
class TfidfVectorizer:
    """Dense TF-IDF vectorizer.

    Args:
        max_features: Maximum vocabulary size.
    """

    max_features: int = 100

    # Learned state
    vocabulary_: dict[str, int] = field(default_factory=dict, repr=False)
    idf_: dict[str, float] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.max_features < 1:
            raise ValueError(f"max_features must be positive, got {self.max_features}")

    @property
    def size(self) -> int:
        """Number of features produced by :meth:`transform`."""
        return len(self.vocabulary_)

    def fit(self, documents: list[str]) -> "TfidfVectorizer":
        """Learn vocabulary and IDF weights from a corpus.

        Any previously learned state is discarded. An empty corpus yields an
        empty vocabulary.

        Args:
            documents: List of raw text documents.

        Returns:
            Self (for method chaining).
        """
        n_docs = len(documents)

        # Counter preserves insertion order, so ties keep first-seen order
        term_freq: Counter[str] = Counter()
        doc_freq: Counter[str] = Counter()
        for doc in documents:
            tokens = tokenize(doc)
            term_freq.update(tokens)
            doc_freq.update(set(tokens))

        top_terms = term_freq.most_common(self.max_features)
        self.vocabulary_ = {term: idx for idx, (term, _) in enumerate(top_terms)}
        self.idf_ = {
            term: math.log(n_docs / doc_freq[term]) for term in self.vocabulary_
        }

        logger.debug(
            "Fitted TF-IDF vocabulary: {} terms from {} documents",
            len(self.vocabulary_), n_docs,
        )
        return self

    def transform(self, document: str) -> list[float]:
        """Transform one document into a dense TF-IDF vector.

        Args:
            document: Raw text.

        Returns:
            Vector of length :attr:`size`; all zeros for an empty document
            or one without vocabulary terms.
        """
        vector = [0.0] * len(self.vocabulary_)
        tokens = tokenize(document)
        if not tokens:
            return vector

        total = len(tokens)
        counts = Counter(t for t in tokens if t in self.vocabulary_)
        for term, count in counts.items():
            vector[self.vocabulary_[term]] = (count / total) * self.idf_[term]
        return vector

    def fit_transform(self, documents: list[str]) -> list[list[float]]:
        """Fit and transform in one step."""
        self.fit(documents)
        return [self.transform(doc) for doc in documents]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize learned state as ordered ``[term, value]`` pairs."""
        ordered = sorted(self.vocabulary_.items(), key=lambda x: x[1])
        return {
            "vocabulary": [[term, idx] for term, idx in ordered],
            "idf": [[term, self.idf_[term]] for term, _ in ordered],
        }

    @classmethod
    def from_dict(cls, data: dict, max_features: int = 100) -> "TfidfVectorizer":
        """Deserialize a vectorizer.

        Raises:
            ValueError: If the payload is structurally invalid.
        """
        vocabulary, idf = _parse_state(data)
        vec = cls(max_features=max(max_features, len(vocabulary), 1))
        vec.vocabulary_ = vocabulary
        vec.idf_ = idf
        return vec

    def save(self, store: "ModelStore", fit_id: Optional[str] = None) -> None:
        """Persist vocabulary and IDF through the model store."""
        store.save_vectorizer(self.to_dict(), fit_id)

    def load(self, store: "ModelStore") -> bool:
        """Restore state from the model store.

        Returns:
            ``True`` on success. On a missing or malformed record, returns
            ``False`` and leaves the current state untouched.
        """
        data = store.load_vectorizer()
        if data is None:
            return False

        try:
            vocabulary, idf = _parse_state(data)
        except ValueError as e:
            logger.warning("Failed to load TF-IDF model: {}", e)
            return False

        self.vocabulary_ = vocabulary
        self.idf_ = idf
        return True


def _parse_state(data: dict) -> tuple[dict[str, int], dict[str, float]]:
    """Validate a serialized vectorizer payload."""
    try:
        vocab_pairs = data["vocabulary"]
        idf_pairs = data["idf"]
    except (KeyError, TypeError) as e:
        raise ValueError(f"missing vectorizer field: {e}") from e

    if not isinstance(vocab_pairs, list) or not isinstance(idf_pairs, list):
        raise ValueError("vocabulary and idf must be lists of pairs")

    vocabulary: dict[str, int] = {}
    for pair in vocab_pairs:
        if not (isinstance(pair, list) and len(pair) == 2):
            raise ValueError(f"bad vocabulary entry: {pair!r}")
        term, idx = pair
        if not isinstance(term, str) or isinstance(idx, bool) or not isinstance(idx, int):
            raise ValueError(f"bad vocabulary entry: {pair!r}")
        vocabulary[term] = idx

    if sorted(vocabulary.values()) != list(range(len(vocab_pairs))):
        raise ValueError("vocabulary indices are not a dense 0..n-1 range")

    idf: dict[str, float] = {}
    for pair in idf_pairs:
        if not (isinstance(pair, list) and len(pair) == 2):
            raise ValueError(f"bad idf entry: {pair!r}")
        term, weight = pair
        if not isinstance(term, str) or isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise ValueError(f"bad idf entry: {pair!r}")
        idf[term] = float(weight)

    if idf.keys() != vocabulary.keys():
        raise ValueError("idf terms do not match vocabulary terms")

    return vocabulary, idf
