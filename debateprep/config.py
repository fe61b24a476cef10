"""
Configuration management for Debate Prep.

This module provides centralized configuration for the critique memory:
- Strength, merge and decay policy
- Similarity and vectorizer limits
- Database connection settings
- Logging settings
"""

import os
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()


class MemoryConfig(BaseModel):
    """Policy constants for the critique memory engine."""

    default_strength: float = Field(
        default=0.7, ge=0.1, le=1.0, description="Strength of a newly created rule"
    )
    merge_increment: float = Field(
        default=0.1, gt=0.0, le=1.0, description="Strength gained by a merge"
    )
    decay_amount: float = Field(
        default=0.02, gt=0.0, le=1.0, description="Strength lost per unused turn"
    )
    strength_floor: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Lowest strength a rule can reach"
    )
    strength_ceiling: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Highest strength a rule can reach"
    )
    similarity_threshold: float = Field(
        default=0.80,
        ge=0.0,
        le=1.0,
        description="Rounded cosine similarity at which two rules are the same critique",
    )
    active_threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Minimum strength for a rule to appear in composed guidance",
    )
    max_guidance_rules: int = Field(
        default=5, gt=0, description="Maximum rules rendered into guidance"
    )
    max_guidance_tokens: int = Field(
        default=200, gt=0, description="Default token budget for composed guidance"
    )
    chars_per_token: int = Field(
        default=4, gt=0, description="Characters per token for budget estimation"
    )
    max_features: int = Field(
        default=5000, gt=0, description="Vocabulary cap for rule vectorization"
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> "MemoryConfig":
        if self.strength_floor > self.strength_ceiling:
            raise ValueError("strength_floor must not exceed strength_ceiling")
        if not self.strength_floor <= self.default_strength <= self.strength_ceiling:
            raise ValueError("default_strength must lie within the strength bounds")
        return self


class DatabaseConfig(BaseModel):
    """Configuration for the rule store database."""

    url: str = Field(
        default="sqlite:///debate_prep.db", description="SQLAlchemy database URL"
    )
    echo: bool = Field(default=False, description="Echo SQL statements (debugging)")


class LogConfig(BaseModel):
    """Configuration for logging system."""

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
        "<level>{message}</level>",
        description="Log message format",
    )
    rotation: str = Field(default="100 MB", description="Log file rotation size")
    retention: str = Field(default="1 month", description="Log file retention period")
    log_dir: str = Field(default="logs", description="Directory for log files")
    enable_file_logging: bool = Field(
        default=True, description="Whether to enable file logging"
    )
    enable_console_logging: bool = Field(
        default=True, description="Whether to enable console logging"
    )


class Config(BaseModel):
    """Main configuration object for Debate Prep."""

    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            memory=MemoryConfig(
                default_strength=float(os.getenv("CRITIQUE_DEFAULT_STRENGTH", "0.7")),
                merge_increment=float(os.getenv("CRITIQUE_MERGE_INCREMENT", "0.1")),
                decay_amount=float(os.getenv("CRITIQUE_DECAY_AMOUNT", "0.02")),
                strength_floor=float(os.getenv("CRITIQUE_STRENGTH_FLOOR", "0.1")),
                strength_ceiling=float(os.getenv("CRITIQUE_STRENGTH_CEILING", "1.0")),
                similarity_threshold=float(
                    os.getenv("CRITIQUE_SIMILARITY_THRESHOLD", "0.80")
                ),
                active_threshold=float(os.getenv("CRITIQUE_ACTIVE_THRESHOLD", "0.3")),
                max_guidance_rules=int(os.getenv("CRITIQUE_MAX_GUIDANCE_RULES", "5")),
                max_guidance_tokens=int(
                    os.getenv("CRITIQUE_MAX_GUIDANCE_TOKENS", "200")
                ),
                chars_per_token=int(os.getenv("CRITIQUE_CHARS_PER_TOKEN", "4")),
                max_features=int(os.getenv("CRITIQUE_MAX_FEATURES", "5000")),
            ),
            database=DatabaseConfig(
                url=os.getenv("DEBATE_PREP_DATABASE_URL", "sqlite:///debate_prep.db"),
                echo=os.getenv("DEBATE_PREP_DATABASE_ECHO", "false").lower()
                in {"1", "true", "yes"},
            ),
            logging=LogConfig(
                level=cast(
                    Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                    os.getenv("LOG_LEVEL", "INFO"),
                ),
                log_dir=os.getenv("LOG_DIR", "logs"),
            ),
        )


# Global configuration instance
# This can be imported throughout the codebase
config = Config.from_env()
