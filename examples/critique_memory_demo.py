#!/usr/bin/env python3
"""
Critique Memory Demo.

Walks one simulated opponent through a few debate turns:
1. Downvote a turn for an ad hominem attack
2. Downvote a rephrased version of the same critique (merged)
3. Downvote an unrelated weakness (new rule)
4. Decay the rules the next turn did not surface
5. Print the guidance addendum for the following generation

Usage:
    python examples/critique_memory_demo.py
"""

from debateprep.memory import CritiqueMemory, SQLRuleStore


def print_rules(memory: CritiqueMemory, participant_id: int) -> None:
    for rule in memory.list_rules(participant_id):
        print(f"  [{rule.id}] {rule.strength:.2f}  {rule.rule!r} -> {rule.guidance!r}")


def main():
    store = SQLRuleStore("sqlite://")
    memory = CritiqueMemory(store)
    opponent = store.add_participant("Opponent", "Against the motion")

    print("\n" + "=" * 70)
    print("DOWNVOTES")
    print("=" * 70)

    critiques = [
        ("uses ad hominem", "you're wrong because you're naive", "stick to the argument"),
        (
            "uses ad hominem attacks",
            "only a fool would believe that",
            "address the claim, not the speaker",
        ),
        ("ignores burden of proof", "prove me wrong", "support claims with evidence"),
    ]
    for rule, bad_pattern, guidance in critiques:
        outcome = memory.submit_critique(opponent, rule, bad_pattern, guidance)
        action = "merged into" if outcome.merged else "created"
        print(f"{rule!r}: {action} rule {outcome.rule_id} ({outcome.strength:.2f})")

    print_rules(memory, opponent)

    print("\n" + "=" * 70)
    print("NEXT TURN")
    print("=" * 70)

    first_rule = memory.list_rules(opponent)[0]
    memory.apply_turn_decay(opponent, {first_rule.id})
    print(f"Only rule {first_rule.id} was surfaced; the rest decayed:")
    print_rules(memory, opponent)

    print("\n" + "=" * 70)
    print("GUIDANCE ADDENDUM")
    print("=" * 70)
    print(memory.compose_guidance(opponent))

    store.close()


if __name__ == "__main__":
    main()
