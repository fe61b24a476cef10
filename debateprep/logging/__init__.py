"""
Logging infrastructure for Debate Prep.

Provides component-bound loguru loggers and operation tracking decorators.
"""

from .logger import (
    DebatePrepLogger,
    get_component_logger,
    initialize_logging,
    initialize_logging_from_config,
    get_logger_instance,
)

from .decorators import track_memory_operation

__all__ = [
    # Logger
    "DebatePrepLogger",
    "get_component_logger",
    "initialize_logging",
    "initialize_logging_from_config",
    "get_logger_instance",
    # Decorators
    "track_memory_operation",
]
