"""
Guidance composition for generation prompts.

Renders a participant's strongest active rules as a short addendum for the
next generation request, bounded by a character-estimated token budget.
"""

from typing import List

from loguru import logger

from debateprep.config import MemoryConfig
from debateprep.memory.schemas import CritiqueRuleRecord
from debateprep.memory.store import RuleStore

log = logger.bind(component="memory")


def render_rule(rule: CritiqueRuleRecord) -> str:
    """Render one rule as a guidance line."""
    return f"- {rule.guidance} (strength: {rule.strength:.2f})"


def truncate_to_budget(text: str, max_tokens: int, chars_per_token: int = 4) -> str:
    """
    Bound text to an estimated token budget.

    Tokens are estimated as ``len(text) // chars_per_token``. Over budget,
    the text is cut to ``max_tokens * chars_per_token`` characters and then
    back to its last period, if it has one after the first character.
    """
    if len(text) // chars_per_token <= max_tokens:
        return text

    truncated = text[: max_tokens * chars_per_token]
    last_period = truncated.rfind(".")
    if last_period > 0:
        truncated = truncated[: last_period + 1]
    return truncated


class GuidanceComposer:
    """
    Builds the critique guidance addendum for a participant.

    Output is computed from current strengths on every call; nothing is
    cached.
    """

    def __init__(self, store: RuleStore, settings: MemoryConfig):
        self.store = store
        self.settings = settings

    def active_rules(self, participant_id: int) -> List[CritiqueRuleRecord]:
        """Strongest active rules, at most ``max_guidance_rules``, in store order."""
        rules = self.store.list_rules(participant_id)
        active = [r for r in rules if r.strength >= self.settings.active_threshold]
        return active[: self.settings.max_guidance_rules]

    def compose(self, participant_id: int, max_tokens: int) -> str:
        """
        Render active rules into a newline-joined guidance block.

        Returns:
            Guidance text, or an empty string if no rule is active
        """
        selected = self.active_rules(participant_id)
        if not selected:
            return ""

        guidance = "\n".join(render_rule(rule) for rule in selected)
        bounded = truncate_to_budget(
            guidance, max_tokens, self.settings.chars_per_token
        )
        if len(bounded) < len(guidance):
            log.debug(
                f"Truncated guidance for participant {participant_id}",
                participant_id=participant_id,
                original_chars=len(guidance),
                truncated_chars=len(bounded),
            )
        return bounded
