"""
Unit tests for configuration system.

These tests verify that the configuration system works correctly
and can load settings from environment variables.
"""

import pytest
from pydantic import ValidationError

from debateprep.config import Config, DatabaseConfig, LogConfig, MemoryConfig


def test_config_has_defaults() -> None:
    """Test that Config initializes with sensible defaults."""
    config = Config()

    assert config.memory.default_strength == 0.7
    assert config.memory.similarity_threshold == 0.80
    assert config.database.url == "sqlite:///debate_prep.db"
    assert config.logging.level == "INFO"


def test_memory_config_defaults() -> None:
    """Test MemoryConfig default values."""
    memory = MemoryConfig()

    assert memory.default_strength == 0.7
    assert memory.merge_increment == 0.1
    assert memory.decay_amount == 0.02
    assert memory.strength_floor == 0.1
    assert memory.strength_ceiling == 1.0
    assert memory.active_threshold == 0.3
    assert memory.max_guidance_rules == 5
    assert memory.max_guidance_tokens == 200
    assert memory.chars_per_token == 4
    assert memory.max_features == 5000


def test_memory_config_rejects_inverted_bounds() -> None:
    """Floor above ceiling is invalid."""
    with pytest.raises(ValidationError):
        MemoryConfig(strength_floor=0.9, strength_ceiling=0.5)


def test_memory_config_rejects_default_outside_bounds() -> None:
    with pytest.raises(ValidationError):
        MemoryConfig(default_strength=0.05)


def test_database_config_defaults() -> None:
    database = DatabaseConfig()

    assert database.url == "sqlite:///debate_prep.db"
    assert database.echo is False


def test_log_config_defaults() -> None:
    log_config = LogConfig()

    assert log_config.level == "INFO"
    assert log_config.enable_file_logging is True


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test loading configuration from environment variables."""
    monkeypatch.setenv("CRITIQUE_DECAY_AMOUNT", "0.05")
    monkeypatch.setenv("CRITIQUE_MAX_GUIDANCE_RULES", "3")
    monkeypatch.setenv("DEBATE_PREP_DATABASE_URL", "sqlite:///other.db")
    monkeypatch.setenv("DEBATE_PREP_DATABASE_ECHO", "true")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    config = Config.from_env()

    assert config.memory.decay_amount == 0.05
    assert config.memory.max_guidance_rules == 3
    assert config.database.url == "sqlite:///other.db"
    assert config.database.echo is True
    assert config.logging.level == "DEBUG"


def test_config_strength_bounds_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRITIQUE_STRENGTH_FLOOR", "0.2")
    monkeypatch.setenv("CRITIQUE_STRENGTH_CEILING", "0.9")
    monkeypatch.setenv("CRITIQUE_CHARS_PER_TOKEN", "3")

    config = Config.from_env()

    assert config.memory.strength_floor == 0.2
    assert config.memory.strength_ceiling == 0.9
    assert config.memory.chars_per_token == 3


def test_config_rejects_invalid_threshold() -> None:
    with pytest.raises(ValidationError):
        MemoryConfig(similarity_threshold=1.5)
