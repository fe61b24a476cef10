"""
Feature vectorization of critique rule texts.

Turns a batch of short rule descriptions into term-frequency vectors over
the batch's own word unigram and bigram vocabulary, so that rules can be
compared with cosine similarity.
"""

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np
from sklearn.feature_extraction.text import CountVectorizer

from debateprep.memory.errors import VectorizationUnavailable


class Vectorizer(ABC):
    """Capability that maps a batch of texts to comparable vectors."""

    @abstractmethod
    def vectorize(self, texts: Sequence[str]) -> np.ndarray:
        """
        Vectorize a batch of texts.

        Args:
            texts: Batch of texts; the first entry is the candidate

        Returns:
            Array with one row per text, in input order

        Raises:
            VectorizationUnavailable: If the batch cannot be featurized
        """


class NGramVectorizer(Vectorizer):
    """
    Bag of word unigrams and bigrams weighted by term frequency.

    Text is lowercased and English stop words are dropped before n-grams are
    formed. The vocabulary is fitted on each batch and capped at
    ``max_features``; every text is counted over that combined vocabulary.

    Example:
        >>> vectorizer = NGramVectorizer()
        >>> vectors = vectorizer.vectorize(["uses ad hominem attacks", "uses ad hominem"])
        >>> vectors.shape
        (2, 7)
    """

    def __init__(self, max_features: int = 5000):
        """
        Initialize the vectorizer.

        Args:
            max_features: Upper bound on vocabulary size per batch
        """
        self.max_features = max_features

    def vectorize(self, texts: Sequence[str]) -> np.ndarray:
        if not texts:
            raise VectorizationUnavailable("Cannot vectorize an empty batch")

        counter = CountVectorizer(
            lowercase=True,
            stop_words="english",
            ngram_range=(1, 2),
            max_features=self.max_features,
            dtype=np.float64,
        )
        try:
            counts = counter.fit_transform(list(texts)).toarray()
        except ValueError as e:
            # Raised when the whole batch is empty or stop words only
            raise VectorizationUnavailable(f"No usable vocabulary in batch: {e}") from e

        if not counts[0].any():
            raise VectorizationUnavailable(
                f"Candidate text has no usable tokens: {texts[0]!r}"
            )
        return counts
