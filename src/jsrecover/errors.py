"""Exception hierarchy shared by the deobfuscation pipeline."""

from __future__ import annotations


class DeobfuscationError(Exception):
    """Base class for all deobfuscation related errors."""


class ParseError(DeobfuscationError):
    """Raised when source text cannot be parsed into a syntax tree."""


class GenerationError(DeobfuscationError):
    """Raised when a syntax tree cannot be turned back into source text."""


class EvaluationError(DeobfuscationError):
    """Raised when a sandboxed fragment throws, times out or is rejected."""


class StructuralRemovalError(DeobfuscationError):
    """Raised when a node scheduled for deletion is no longer attached."""


class ConfigurationError(DeobfuscationError, ValueError):
    """Raised for unknown option names or values of the wrong type."""


__all__ = [
    "DeobfuscationError",
    "ParseError",
    "GenerationError",
    "EvaluationError",
    "StructuralRemovalError",
    "ConfigurationError",
]
