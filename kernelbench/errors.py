"""Custom exceptions for kernelbench."""

from __future__ import annotations


class KernelbenchError(Exception):
    """Base class for kernelbench exceptions."""


class InvalidArgumentError(ValueError, KernelbenchError):
    """Raised when a kernel argument is outside its valid domain."""


class ShapeMismatchError(ValueError, KernelbenchError):
    """Raised when a buffer or matrix does not have the expected length."""


class ResourceExhaustedError(MemoryError, KernelbenchError):
    """Raised when a kernel would need more memory than can be allocated."""


class ResultMismatchError(AssertionError, KernelbenchError):
    """Raised when two providers disagree on the output for the same input."""


__all__ = [
    "InvalidArgumentError",
    "KernelbenchError",
    "ResourceExhaustedError",
    "ResultMismatchError",
    "ShapeMismatchError",
]
