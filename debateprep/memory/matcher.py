"""
Similarity matching between a candidate critique and existing rules.

Matching is first-match in store order (strongest, then most recent rule
first), not best-match: when several rules clear the threshold the one the
store lists first wins.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from debateprep.memory.errors import VectorizationUnavailable
from debateprep.memory.schemas import CritiqueRuleRecord
from debateprep.memory.vectorizer import Vectorizer

log = logger.bind(component="memory")

SIMILARITY_PRECISION = 2


@dataclass(frozen=True)
class RuleMatch:
    """An existing rule judged to be the same critique as the candidate."""

    rule_id: int
    similarity: float
    exact_fallback: bool = False


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when the vectors differ in length or either has zero norm.
    """
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    if a.shape != b.shape:
        return 0.0

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


class SimilarityMatcher:
    """
    Finds the existing rule a new critique should merge into.

    Example:
        >>> matcher = SimilarityMatcher(NGramVectorizer())
        >>> match = matcher.match_rules("uses ad hominem attacks", store.list_rules(3))
    """

    def __init__(self, vectorizer: Vectorizer, threshold: float = 0.80):
        """
        Initialize the matcher.

        Args:
            vectorizer: Featurizes candidate and existing rule texts as a batch
            threshold: Rounded cosine similarity at which rules match
        """
        self.vectorizer = vectorizer
        self.threshold = threshold

    def find_match(
        self,
        candidate: np.ndarray,
        existing: Iterable[Tuple[int, np.ndarray]],
    ) -> Optional[RuleMatch]:
        """
        First existing rule whose rounded similarity clears the threshold.

        Args:
            candidate: Vector of the new critique
            existing: ``(rule_id, vector)`` pairs in store order

        Returns:
            RuleMatch, or None if nothing clears the threshold
        """
        for rule_id, vector in existing:
            similarity = round(cosine_similarity(candidate, vector), SIMILARITY_PRECISION)
            if similarity >= self.threshold:
                return RuleMatch(rule_id=rule_id, similarity=similarity)
        return None

    def match_rules(
        self, candidate_text: str, rules: Sequence[CritiqueRuleRecord]
    ) -> Optional[RuleMatch]:
        """
        Match a candidate rule text against a participant's stored rules.

        Falls back to case-insensitive exact text equality when the
        vectorizer cannot featurize the batch.

        Args:
            candidate_text: Rule text of the new critique
            rules: Existing rules of the same participant, in store order

        Returns:
            RuleMatch, or None if the candidate is a new critique
        """
        if not rules:
            return None

        try:
            vectors = self.vectorizer.vectorize(
                [candidate_text] + [rule.rule for rule in rules]
            )
            if len(vectors) != len(rules) + 1:
                raise VectorizationUnavailable(
                    f"Vectorizer returned {len(vectors)} rows for {len(rules) + 1} texts"
                )
        except VectorizationUnavailable as e:
            log.warning(
                "Vectorization unavailable, using exact text match",
                reason=str(e),
                candidate=candidate_text[:100],
            )
            return self._exact_match(candidate_text, rules)

        return self.find_match(
            vectors[0], ((rule.id, vectors[i]) for i, rule in enumerate(rules, start=1))
        )

    @staticmethod
    def _exact_match(
        candidate_text: str, rules: Sequence[CritiqueRuleRecord]
    ) -> Optional[RuleMatch]:
        needle = candidate_text.casefold()
        for rule in rules:
            if rule.rule.casefold() == needle:
                return RuleMatch(rule_id=rule.id, similarity=1.0, exact_fallback=True)
        return None
