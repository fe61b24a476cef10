"""
Decorators for automatic logging of critique memory operations.

These decorators enable traceability without cluttering business logic.
"""

import functools
import inspect
import time
from datetime import datetime, timezone
from typing import Any, Callable

from .logger import get_component_logger


def track_memory_operation(operation_type: str) -> Callable:
    """
    Decorator to track critique memory operations.

    Logs the start, completion and failure of merges, decays and guidance
    composition, with truncated arguments and elapsed time.

    Args:
        operation_type: Type of operation (e.g., "submit_critique", "decay")

    Example:
        >>> @track_memory_operation("decay")
        ... def apply_turn_decay(self, participant_id, used_rule_ids):
        ...     ...
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = get_component_logger("memory")

            bound_args = signature.bind(*args, **kwargs)
            bound_args.apply_defaults()

            operation_id = datetime.now(timezone.utc).timestamp()
            log.debug(
                f"Memory operation: {operation_type}",
                operation=operation_type,
                operation_id=operation_id,
                function=func.__name__,
                arguments={
                    k: str(v)[:100]
                    for k, v in bound_args.arguments.items()
                    if k != "self"
                },
            )

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log.debug(
                    f"Memory operation: {operation_type}_error",
                    operation=f"{operation_type}_error",
                    operation_id=operation_id,
                    function=func.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                    success=False,
                )
                raise

            log.debug(
                f"Memory operation: {operation_type}_complete",
                operation=f"{operation_type}_complete",
                operation_id=operation_id,
                function=func.__name__,
                elapsed_ms=(time.perf_counter() - start_time) * 1000,
                success=True,
            )
            return result

        return wrapper

    return decorator
