"""
Logging infrastructure for the Debate Prep critique memory.

Provides structured logging with:
- Component-specific sinks (memory engine, rule store)
- Log rotation and retention
- Error-only log file
"""

import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from debateprep.config import LogConfig


class DebatePrepLogger:
    """
    Configures loguru sinks for the critique memory.

    Records are routed by the ``component`` value bound through
    :func:`get_component_logger`: ``memory`` for merge/decay/guidance events
    and ``storage`` for rule store activity.
    """

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        rotation: str = "100 MB",
        retention: str = "1 month",
        level: str = "INFO",
        format_string: Optional[str] = None,
        enable_file_logging: bool = True,
        enable_console_logging: bool = True,
    ):
        """
        Initialize the logger.

        Args:
            log_dir: Directory for log files
            rotation: When to rotate log files
            retention: How long to keep old logs
            level: Default log level
            format_string: Custom format string
            enable_file_logging: Whether to log to files
            enable_console_logging: Whether to log to console
        """
        self.log_dir = log_dir or Path("logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.rotation = rotation
        self.retention = retention
        self.level = level

        self.format_string = format_string or (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

        # Records logged through the bare loguru logger carry no component
        logger.configure(extra={"component": "system"})

        # Remove default handler
        logger.remove()

        if enable_console_logging:
            logger.add(
                sys.stderr,
                format=self.format_string,
                level=level,
                colorize=True,
            )

        if enable_file_logging:
            self._add_file_handlers()

        self.logger = logger.bind(component="system")

    def _add_file_handlers(self) -> None:
        """Add file handlers for the main log, each component and errors."""

        logger.add(
            self.log_dir / "debateprep.log",
            format=self.format_string,
            level=self.level,
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )

        # Merge, decay and guidance decisions
        logger.add(
            self.log_dir / "critique_memory.log",
            format=self.format_string,
            level="DEBUG",
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
            filter=lambda record: record["extra"].get("component") == "memory",
        )

        logger.add(
            self.log_dir / "rule_store.log",
            format=self.format_string,
            level="DEBUG",
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
            filter=lambda record: record["extra"].get("component") == "storage",
        )

        logger.add(
            self.log_dir / "errors.log",
            format=self.format_string,
            level="ERROR",
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )

    def get_logger(self, component: str) -> Any:
        """
        Get a logger bound to a specific component.

        Args:
            component: Component name (e.g., "memory", "storage")

        Returns:
            Logger instance bound to the component
        """
        return logger.bind(component=component)


def get_component_logger(component: str = "system") -> Any:
    """
    Get a component-specific logger.

    Example:
        >>> log = get_component_logger("memory")
        >>> log.info("Merged critique", participant_id=3, rule_id=7)
    """
    return logger.bind(component=component)


# Global logger instance
_debateprep_logger: Optional[DebatePrepLogger] = None


def initialize_logging(
    log_dir: Optional[Path] = None, level: str = "INFO", **kwargs: Any
) -> DebatePrepLogger:
    """
    Initialize the logging system.

    This should be called once at application startup.

    Args:
        log_dir: Directory for log files
        level: Default log level
        **kwargs: Additional configuration for DebatePrepLogger

    Returns:
        Configured DebatePrepLogger instance
    """
    global _debateprep_logger
    _debateprep_logger = DebatePrepLogger(log_dir=log_dir, level=level, **kwargs)
    return _debateprep_logger


def initialize_logging_from_config(log_config: LogConfig) -> DebatePrepLogger:
    """Initialize logging from a :class:`LogConfig` section."""
    return initialize_logging(
        log_dir=Path(log_config.log_dir),
        level=log_config.level,
        rotation=log_config.rotation,
        retention=log_config.retention,
        enable_file_logging=log_config.enable_file_logging,
        enable_console_logging=log_config.enable_console_logging,
    )


def get_logger_instance() -> Optional[DebatePrepLogger]:
    """Get the global logger instance."""
    return _debateprep_logger
