"""
Tests for the critique memory CLI.
"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from debateprep.config import config
from debateprep.memory.cli import cli
from debateprep.memory.store import SQLRuleStore


@pytest.fixture(autouse=True)
def init_logging():
    with patch("debateprep.memory.cli.initialize_logging_from_config") as init:
        yield init


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


@pytest.fixture
def participant_id(database_url):
    store = SQLRuleStore(database_url)
    participant_id = store.add_participant("Opponent")
    store.close()
    return participant_id


class TestMemoryCLI:
    def test_configures_logging_from_config(self, runner, database_url, init_logging):
        result = runner.invoke(cli, ["init", "--database-url", database_url])

        assert result.exit_code == 0
        init_logging.assert_called_once_with(config.logging)

    def test_init(self, runner, database_url, tmp_path):
        result = runner.invoke(cli, ["init", "--database-url", database_url])

        assert result.exit_code == 0
        assert "Initialized database" in result.output
        assert (tmp_path / "cli.db").exists()

    def test_add_participant(self, runner, database_url):
        result = runner.invoke(
            cli, ["add-participant", "Opponent", "--position", "Against", "--database-url", database_url]
        )

        assert result.exit_code == 0
        assert "Added participant: 1" in result.output

    def test_critique_then_merge(self, runner, database_url, participant_id):
        args = [
            "critique",
            str(participant_id),
            "uses ad hominem",
            "--guidance",
            "stick to the argument",
            "--database-url",
            database_url,
        ]

        first = runner.invoke(cli, args)
        second = runner.invoke(cli, args)

        assert first.exit_code == 0
        assert "Created rule 1 (strength: 0.70)" in first.output
        assert second.exit_code == 0
        assert "Merged into rule 1 (strength: 0.80)" in second.output

    def test_critique_unknown_participant_fails(self, runner, database_url):
        result = runner.invoke(
            cli,
            ["critique", "42", "uses ad hominem", "--guidance", "g", "--database-url", database_url],
        )

        assert result.exit_code != 0
        assert "Unknown participant" in result.output

    def test_rules_and_guidance(self, runner, database_url, participant_id):
        runner.invoke(
            cli,
            [
                "critique",
                str(participant_id),
                "uses ad hominem",
                "--guidance",
                "stick to the argument",
                "--bad-pattern",
                "you're wrong because...",
                "--database-url",
                database_url,
            ],
        )

        listed = runner.invoke(cli, ["rules", str(participant_id), "--database-url", database_url])
        guidance = runner.invoke(
            cli, ["guidance", str(participant_id), "--database-url", database_url]
        )

        assert "Found 1 rules" in listed.output
        assert "Strength: 0.70" in listed.output
        assert "Bad pattern: you're wrong because..." in listed.output
        assert guidance.output.strip() == "- stick to the argument (strength: 0.70)"

    def test_decay(self, runner, database_url, participant_id):
        store = SQLRuleStore(database_url)
        kept = store.insert_rule(participant_id, "kept", "", "g", 0.8)
        decayed = store.insert_rule(participant_id, "decayed", "", "g", 0.7)
        store.close()

        result = runner.invoke(
            cli,
            ["decay", str(participant_id), "--used", str(kept), "--database-url", database_url],
        )

        assert result.exit_code == 0
        store = SQLRuleStore(database_url)
        assert store.get_rule(kept).strength == 0.8
        assert store.get_rule(decayed).strength == 0.68
        store.close()
