"""
Custom exceptions for the critique memory.

Provides specific error types for different failure modes.
"""

from __future__ import annotations


class CritiqueMemoryError(Exception):
    """Base exception for all critique memory errors."""

    pass


class StorageError(CritiqueMemoryError):
    """The rule store could not complete a read or write."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class ValidationError(CritiqueMemoryError):
    """Input rejected before any store mutation."""

    def __init__(self, message: str, validation_errors: list[str] | None = None):
        super().__init__(message)
        self.validation_errors = validation_errors or []


class VectorizationUnavailable(CritiqueMemoryError):
    """The vectorizer cannot featurize the current batch of rule texts."""

    pass
