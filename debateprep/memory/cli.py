"""
CLI interface for critique memory operations.

Provides command-line tools to inspect and exercise a participant's
critique memory outside the application.
"""

from typing import Tuple

import click

from debateprep.config import config
from debateprep.logging import initialize_logging_from_config
from debateprep.memory.engine import CritiqueMemory
from debateprep.memory.errors import CritiqueMemoryError
from debateprep.memory.store import SQLRuleStore

database_option = click.option(
    "--database-url",
    default=config.database.url,
    show_default=True,
    help="Database connection URL",
)


@click.group()
def cli():
    """Debate Prep critique memory CLI."""
    initialize_logging_from_config(config.logging)


@cli.command()
@database_option
def init(database_url: str):
    """Initialize the critique memory database."""
    store = _open_store(database_url)
    click.echo(f"Initialized database: {database_url}")
    store.close()


@cli.command("add-participant")
@click.argument("name")
@click.option("--position", default="", help="Position the participant argues")
@database_option
def add_participant(name: str, position: str, database_url: str):
    """Add a participant to attach critiques to."""
    store = _open_store(database_url)
    try:
        participant_id = store.add_participant(name, position)
        click.echo(f"Added participant: {participant_id}")
    except CritiqueMemoryError as e:
        raise click.ClickException(str(e))
    finally:
        store.close()


@cli.command()
@click.argument("participant_id", type=int)
@click.argument("rule")
@click.option("--guidance", required=True, help="Instruction for future turns")
@click.option("--bad-pattern", default="", help="Offending text excerpt")
@database_option
def critique(
    participant_id: int, rule: str, guidance: str, bad_pattern: str, database_url: str
):
    """Submit a critique for a participant."""
    store = _open_store(database_url)
    try:
        outcome = CritiqueMemory(store).submit_critique(
            participant_id, rule, bad_pattern, guidance
        )
        action = "Merged into" if outcome.merged else "Created"
        click.echo(f"{action} rule {outcome.rule_id} (strength: {outcome.strength:.2f})")
    except CritiqueMemoryError as e:
        raise click.ClickException(str(e))
    finally:
        store.close()


@cli.command()
@click.argument("participant_id", type=int)
@click.option(
    "--used", "used", multiple=True, type=int, help="Rule id surfaced in the last turn"
)
@database_option
def decay(participant_id: int, used: Tuple[int, ...], database_url: str):
    """Decay the participant's rules not used in the last turn."""
    store = _open_store(database_url)
    try:
        CritiqueMemory(store).apply_turn_decay(participant_id, set(used))
        click.echo(f"Decayed rules for participant {participant_id}")
    except CritiqueMemoryError as e:
        raise click.ClickException(str(e))
    finally:
        store.close()


@cli.command()
@click.argument("participant_id", type=int)
@database_option
def rules(participant_id: int, database_url: str):
    """List a participant's rules, strongest first."""
    store = _open_store(database_url)
    try:
        records = CritiqueMemory(store).list_rules(participant_id)
    except CritiqueMemoryError as e:
        raise click.ClickException(str(e))
    finally:
        store.close()

    click.echo(f"Found {len(records)} rules:\n")
    for record in records:
        click.echo(f"ID: {record.id}")
        click.echo(f"Rule: {record.rule}")
        click.echo(f"Strength: {record.strength:.2f}")
        click.echo(f"Guidance: {record.guidance}")
        if record.bad_pattern:
            click.echo(f"Bad pattern: {record.bad_pattern}")
        click.echo()


@cli.command()
@click.argument("participant_id", type=int)
@click.option("--max-tokens", type=int, default=200, show_default=True)
@database_option
def guidance(participant_id: int, max_tokens: int, database_url: str):
    """Print the guidance addendum for a participant's next turn."""
    store = _open_store(database_url)
    try:
        click.echo(CritiqueMemory(store).compose_guidance(participant_id, max_tokens))
    finally:
        store.close()


def _open_store(database_url: str) -> SQLRuleStore:
    try:
        return SQLRuleStore(database_url)
    except CritiqueMemoryError as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    cli()
