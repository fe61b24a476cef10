"""
Merge-or-insert policy for incoming critiques.

A critique that matches an existing rule of the same participant reinforces
it: strength rises by the merge increment and the new guidance is appended.
Otherwise the critique becomes a new rule at the default strength.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from debateprep.config import MemoryConfig
from debateprep.memory.matcher import SimilarityMatcher
from debateprep.memory.models import utcnow
from debateprep.memory.schemas import clamp_strength
from debateprep.memory.store import RuleStore

log = logger.bind(component="memory")

GUIDANCE_SEPARATOR = "; "


@dataclass(frozen=True)
class MergeOutcome:
    """Result of submitting one critique."""

    rule_id: int
    merged: bool
    strength: float
    similarity: Optional[float] = None


class CritiqueMerger:
    """Decides whether a critique merges into an existing rule or is new."""

    def __init__(
        self, store: RuleStore, matcher: SimilarityMatcher, settings: MemoryConfig
    ):
        self.store = store
        self.matcher = matcher
        self.settings = settings

    def submit(
        self, participant_id: int, rule: str, bad_pattern: str, guidance: str
    ) -> MergeOutcome:
        """
        Merge a critique into a matching rule or insert it as a new one.

        Performs exactly one store write. Vectorization failures are handled
        by the matcher's exact-text fallback; store failures propagate.

        Args:
            participant_id: Owning participant
            rule: Short description of the critique pattern
            bad_pattern: Offending text that triggered the critique
            guidance: Instruction for future generations

        Returns:
            MergeOutcome describing the write

        Raises:
            StorageError: If the store read or write fails
        """
        existing = self.store.list_rules(participant_id)
        match = self.matcher.match_rules(rule, existing) if existing else None

        if match is None:
            strength = clamp_strength(
                self.settings.default_strength,
                self.settings.strength_floor,
                self.settings.strength_ceiling,
            )
            rule_id = self.store.insert_rule(
                participant_id, rule, bad_pattern, guidance, strength
            )
            log.info(
                f"New critique rule {rule_id} for participant {participant_id}",
                participant_id=participant_id,
                rule_id=rule_id,
                strength=strength,
            )
            return MergeOutcome(rule_id=rule_id, merged=False, strength=strength)

        target = next(r for r in existing if r.id == match.rule_id)
        strength = clamp_strength(
            target.strength + self.settings.merge_increment,
            self.settings.strength_floor,
            self.settings.strength_ceiling,
        )
        combined_guidance = f"{target.guidance}{GUIDANCE_SEPARATOR}{guidance}"
        self.store.update_rule(target.id, strength, combined_guidance, utcnow())

        log.info(
            f"Merged critique into rule {target.id} for participant {participant_id}",
            participant_id=participant_id,
            rule_id=target.id,
            similarity=match.similarity,
            exact_fallback=match.exact_fallback,
            strength=strength,
        )
        return MergeOutcome(
            rule_id=target.id,
            merged=True,
            strength=strength,
            similarity=match.similarity,
        )
