"""
Critique Memory Engine.

Deduplicates, merges, decays and summarizes per-participant critique rules
so accumulated feedback converges into a small, strength-ranked guidance set.
"""

from debateprep.memory.composer import GuidanceComposer
from debateprep.memory.decay import DecayEngine
from debateprep.memory.engine import CritiqueMemory, ParticipantLocks
from debateprep.memory.errors import (
    CritiqueMemoryError,
    StorageError,
    ValidationError,
    VectorizationUnavailable,
)
from debateprep.memory.matcher import RuleMatch, SimilarityMatcher, cosine_similarity
from debateprep.memory.merge import CritiqueMerger, MergeOutcome
from debateprep.memory.schemas import CritiqueRuleRecord
from debateprep.memory.store import RuleStore, SQLRuleStore
from debateprep.memory.vectorizer import NGramVectorizer, Vectorizer

__all__ = [
    "CritiqueMemory",
    "ParticipantLocks",
    "CritiqueMerger",
    "MergeOutcome",
    "DecayEngine",
    "GuidanceComposer",
    "SimilarityMatcher",
    "RuleMatch",
    "cosine_similarity",
    "Vectorizer",
    "NGramVectorizer",
    "RuleStore",
    "SQLRuleStore",
    "CritiqueRuleRecord",
    "CritiqueMemoryError",
    "StorageError",
    "ValidationError",
    "VectorizationUnavailable",
]
