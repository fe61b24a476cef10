"""
Critique memory engine.

Public entry point used by the session and turn orchestration layer:
submit critiques from downvotes, decay rules after each turn, list rules and
compose the guidance addendum for the next generation.

Read-then-write operations on one participant's rules are serialized with a
per-participant lock; operations on different participants run in parallel.
"""

import threading
from contextlib import contextmanager
from typing import AbstractSet, Dict, Iterator, List, Optional

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from debateprep.config import MemoryConfig, config
from debateprep.logging import track_memory_operation
from debateprep.memory.composer import GuidanceComposer
from debateprep.memory.decay import DecayEngine
from debateprep.memory.errors import ValidationError
from debateprep.memory.matcher import SimilarityMatcher
from debateprep.memory.merge import CritiqueMerger, MergeOutcome
from debateprep.memory.schemas import (
    CritiqueRuleRecord,
    CritiqueSubmission,
    GuidanceRequest,
    TurnDecayRequest,
)
from debateprep.memory.store import RuleStore
from debateprep.memory.vectorizer import NGramVectorizer, Vectorizer

log = logger.bind(component="memory")


class ParticipantLocks:
    """
    Registry handing out one lock per participant id.

    Locks are created on first use and kept for the life of the registry, so
    it holds one lock for every participant id it has seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}

    def get(self, participant_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(participant_id)
            if lock is None:
                lock = self._locks[participant_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, participant_id: int) -> Iterator[None]:
        with self.get(participant_id):
            yield


def _validation_error(message: str, error: PydanticValidationError) -> ValidationError:
    details = [
        f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" for e in error.errors()
    ]
    return ValidationError(f"{message}: {'; '.join(details)}", details)


class CritiqueMemory:
    """
    Per-participant critique memory.

    Example:
        >>> store = SQLRuleStore("sqlite://")
        >>> memory = CritiqueMemory(store)
        >>> participant_id = store.add_participant("Opponent", "Against")
        >>> memory.submit_critique(
        ...     participant_id,
        ...     "uses ad hominem",
        ...     "you're wrong because...",
        ...     "stick to the argument",
        ... )
        >>> memory.compose_guidance(participant_id)
        '- stick to the argument (strength: 0.70)'
    """

    def __init__(
        self,
        store: RuleStore,
        vectorizer: Optional[Vectorizer] = None,
        settings: Optional[MemoryConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Rule store the engine reads from and writes through
            vectorizer: Featurizer for similarity; defaults to NGramVectorizer
            settings: Policy constants; defaults to the global configuration
        """
        self.store = store
        self.settings = settings or config.memory
        self.vectorizer = vectorizer or NGramVectorizer(
            max_features=self.settings.max_features
        )
        self.matcher = SimilarityMatcher(
            self.vectorizer, threshold=self.settings.similarity_threshold
        )
        self.merger = CritiqueMerger(store, self.matcher, self.settings)
        self.decay = DecayEngine(store, self.settings)
        self.composer = GuidanceComposer(store, self.settings)
        self._locks = ParticipantLocks()

    def _require_participant(self, participant_id: int) -> None:
        if not self.store.participant_exists(participant_id):
            raise ValidationError(
                f"Unknown participant id {participant_id}",
                [f"participant_id: {participant_id} does not exist"],
            )

    @track_memory_operation("submit_critique")
    def submit_critique(
        self, participant_id: int, rule: str, bad_pattern: str, guidance: str
    ) -> MergeOutcome:
        """
        Record a critique, merging it into a similar existing rule if any.

        Raises:
            ValidationError: Blank rule or guidance, or unknown participant
            StorageError: If the store read or write fails
        """
        try:
            submission = CritiqueSubmission(
                participant_id=participant_id,
                rule=rule,
                bad_pattern=bad_pattern,
                guidance=guidance,
            )
        except PydanticValidationError as e:
            raise _validation_error("Invalid critique", e) from e

        with self._locks.hold(submission.participant_id):
            self._require_participant(submission.participant_id)
            return self.merger.submit(
                submission.participant_id,
                submission.rule,
                submission.bad_pattern,
                submission.guidance,
            )

    @track_memory_operation("turn_decay")
    def apply_turn_decay(
        self, participant_id: int, used_rule_ids: AbstractSet[int]
    ) -> None:
        """
        Weaken every rule of the participant not surfaced in the last turn.

        Args:
            participant_id: Owning participant
            used_rule_ids: Ids of rules whose guidance was in the last prompt

        Raises:
            ValidationError: Unknown participant or non-integer rule ids
            StorageError: If the store update fails
        """
        try:
            request = TurnDecayRequest(
                participant_id=participant_id, used_rule_ids=used_rule_ids
            )
        except PydanticValidationError as e:
            raise _validation_error("Invalid decay request", e) from e

        with self._locks.hold(request.participant_id):
            self._require_participant(request.participant_id)
            self.decay.apply(request.participant_id, request.used_rule_ids)

    def list_rules(self, participant_id: int) -> List[CritiqueRuleRecord]:
        """
        Rules of a participant, strongest first, then most recent first.

        Raises:
            StorageError: If the store read fails
        """
        return self.store.list_rules(participant_id)

    def surfaced_rule_ids(self, participant_id: int) -> AbstractSet[int]:
        """Ids of the rules :meth:`compose_guidance` currently renders."""
        return frozenset(r.id for r in self.composer.active_rules(participant_id))

    @track_memory_operation("compose_guidance")
    def compose_guidance(self, participant_id: int, max_tokens: Optional[int] = None) -> str:
        """
        Compose the guidance addendum for the participant's next generation.

        Never raises: any failure is logged and yields an empty string so
        guidance problems cannot block turn generation.
        """
        if max_tokens is None:
            max_tokens = self.settings.max_guidance_tokens
        try:
            request = GuidanceRequest(participant_id=participant_id, max_tokens=max_tokens)
            return self.composer.compose(request.participant_id, request.max_tokens)
        except Exception as e:
            log.warning(
                f"Guidance composition failed for participant {participant_id}",
                participant_id=participant_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ""
