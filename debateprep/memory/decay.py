"""
Turn-by-turn decay of critique rules.

Rules whose guidance was not surfaced in the latest generation lose a fixed
amount of strength, down to the floor. Surfaced rules are left as they are;
reinforcement only comes from merges.
"""

from typing import AbstractSet

from loguru import logger

from debateprep.config import MemoryConfig
from debateprep.memory.store import RuleStore

log = logger.bind(component="memory")


class DecayEngine:
    """Weakens the rules a turn did not use."""

    def __init__(self, store: RuleStore, settings: MemoryConfig):
        self.store = store
        self.settings = settings

    def apply(self, participant_id: int, used_rule_ids: AbstractSet[int]) -> int:
        """
        Decay every rule of the participant not in ``used_rule_ids``.

        Each call decays again; repeated calls model consecutive turns.

        Returns:
            Number of rules decayed
        """
        count = self.store.decay_rules(
            participant_id,
            frozenset(used_rule_ids),
            self.settings.decay_amount,
            self.settings.strength_floor,
        )
        log.info(
            f"Decayed {count} rules for participant {participant_id}",
            participant_id=participant_id,
            used=sorted(used_rule_ids),
            decay_amount=self.settings.decay_amount,
        )
        return count
