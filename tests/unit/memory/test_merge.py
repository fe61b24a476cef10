"""
Unit tests for the merge-or-insert policy.
"""

from unittest.mock import patch

import numpy as np
import pytest

from debateprep.config import MemoryConfig
from debateprep.memory.errors import StorageError, VectorizationUnavailable
from debateprep.memory.matcher import SimilarityMatcher
from debateprep.memory.merge import CritiqueMerger
from debateprep.memory.store import SQLRuleStore
from debateprep.memory.vectorizer import NGramVectorizer, Vectorizer


class FixedVectorizer(Vectorizer):
    """Looks up a constructed vector for each text."""

    def __init__(self, vectors):
        self.vectors = vectors

    def vectorize(self, texts):
        return np.array([self.vectors[text] for text in texts])


class BrokenVectorizer(Vectorizer):
    def vectorize(self, texts):
        raise VectorizationUnavailable("featurizer crashed")


@pytest.fixture
def store():
    store = SQLRuleStore("sqlite://")
    yield store
    store.close()


@pytest.fixture
def participant_id(store):
    return store.add_participant("Opponent")


def make_merger(store, vectorizer=None):
    settings = MemoryConfig()
    matcher = SimilarityMatcher(vectorizer or NGramVectorizer(), settings.similarity_threshold)
    return CritiqueMerger(store, matcher, settings)


class TestCritiqueMerger:
    def test_first_critique_inserted_at_default_strength(self, store, participant_id):
        merger = make_merger(store)

        outcome = merger.submit(participant_id, "uses ad hominem", "bad", "stick to the argument")

        assert outcome.merged is False
        assert outcome.strength == 0.7
        [rule] = store.list_rules(participant_id)
        assert rule.id == outcome.rule_id
        assert rule.strength == 0.7
        assert rule.bad_pattern == "bad"

    def test_same_critique_twice_merges(self, store, participant_id):
        merger = make_merger(store)

        merger.submit(participant_id, "uses ad hominem", "", "stick to the argument")
        outcome = merger.submit(participant_id, "uses ad hominem", "", "attack the claim")

        assert outcome.merged is True
        assert outcome.similarity == 1.0
        [rule] = store.list_rules(participant_id)
        assert rule.strength == 0.8
        assert rule.guidance == "stick to the argument; attack the claim"

    def test_merge_keeps_original_rule_and_bad_pattern(self, store, participant_id):
        merger = make_merger(store)

        merger.submit(participant_id, "uses ad hominem", "first excerpt", "g1")
        merger.submit(participant_id, "uses ad hominem attacks", "second excerpt", "g2")

        [rule] = store.list_rules(participant_id)
        assert rule.rule == "uses ad hominem"
        assert rule.bad_pattern == "first excerpt"

    def test_critiques_sharing_one_word_stay_separate(self, store, participant_id):
        merger = make_merger(store)

        merger.submit(participant_id, "uses strawman arguments", "", "restate the opponent fairly")
        outcome = merger.submit(participant_id, "makes circular arguments", "", "justify each premise")

        assert outcome.merged is False
        rules = store.list_rules(participant_id)
        assert len(rules) == 2
        assert {r.guidance for r in rules} == {
            "restate the opponent fairly",
            "justify each premise",
        }
        assert all(r.strength == 0.7 for r in rules)

    def test_different_evidence_critiques_stay_separate(self, store, participant_id):
        merger = make_merger(store)

        merger.submit(participant_id, "ignores opponent evidence", "", "rebut their sources")
        outcome = merger.submit(participant_id, "fabricates statistical evidence", "", "cite real data")

        assert outcome.merged is False
        assert len(store.list_rules(participant_id)) == 2

    def test_strength_capped_at_one(self, store, participant_id):
        merger = make_merger(store)

        for _ in range(6):
            outcome = merger.submit(participant_id, "uses ad hominem", "", "g")

        assert outcome.strength == 1.0
        assert store.list_rules(participant_id)[0].strength == 1.0

    def test_merge_at_080_similarity(self, store, participant_id):
        vectorizer = FixedVectorizer(
            {"existing": [1.0, 0.0], "candidate": [0.8, 0.6]}
        )
        merger = make_merger(store, vectorizer)
        store.insert_rule(participant_id, "existing", "", "g", 0.7)

        outcome = merger.submit(participant_id, "candidate", "", "more")

        assert outcome.merged is True
        assert len(store.list_rules(participant_id)) == 1

    def test_insert_at_079_similarity(self, store, participant_id):
        vectorizer = FixedVectorizer(
            {"existing": [1.0, 0.0], "candidate": [0.79, 0.613]}
        )
        merger = make_merger(store, vectorizer)
        store.insert_rule(participant_id, "existing", "", "g", 0.7)

        outcome = merger.submit(participant_id, "candidate", "", "more")

        assert outcome.merged is False
        assert len(store.list_rules(participant_id)) == 2

    def test_merges_into_first_rule_in_store_order(self, store, participant_id):
        """First match above threshold wins even if a later rule is closer."""
        vectorizer = FixedVectorizer(
            {"candidate": [1.0, 0.0], "strong": [0.8, 0.6], "exact": [1.0, 0.0]}
        )
        merger = make_merger(store, vectorizer)
        strong = store.insert_rule(participant_id, "strong", "", "g", 0.9)
        exact = store.insert_rule(participant_id, "exact", "", "g", 0.7)

        outcome = merger.submit(participant_id, "candidate", "", "more")

        assert outcome.rule_id == strong
        assert store.get_rule(strong).strength == 1.0
        assert store.get_rule(exact).strength == 0.7

    def test_vectorizer_failure_falls_back_to_exact_match(self, store, participant_id):
        merger = make_merger(store, BrokenVectorizer())
        store.insert_rule(participant_id, "Uses Ad Hominem", "", "g", 0.7)

        exact = merger.submit(participant_id, "uses ad hominem", "", "g2")
        similar = merger.submit(participant_id, "relies on ad hominem attacks", "", "g3")

        assert exact.merged is True
        assert similar.merged is False
        assert len(store.list_rules(participant_id)) == 2

    def test_storage_error_propagates(self, store, participant_id):
        merger = make_merger(store)
        store.insert_rule(participant_id, "uses ad hominem", "", "g", 0.7)

        with patch.object(store, "update_rule", side_effect=StorageError("disk full")):
            with pytest.raises(StorageError, match="disk full"):
                merger.submit(participant_id, "uses ad hominem", "", "g2")

        assert store.list_rules(participant_id)[0].strength == 0.7

    def test_single_write_per_submit(self, store, participant_id):
        merger = make_merger(store)
        store.insert_rule(participant_id, "uses ad hominem", "", "g", 0.7)

        with patch.object(store, "insert_rule", wraps=store.insert_rule) as insert, patch.object(
            store, "update_rule", wraps=store.update_rule
        ) as update:
            merger.submit(participant_id, "uses ad hominem", "", "g2")

        assert insert.call_count == 0
        assert update.call_count == 1
