"""Custom exception classes for the checkout normalizer."""

from __future__ import annotations


class NormalizerError(Exception):
    """Base exception for checkout normalizer failures."""


class ConfigurationError(NormalizerError):
    """Raised when the runtime configuration cannot be loaded or is inconsistent."""

    def __init__(self, message: str, source: str | None = None):
        prefix = f"Invalid configuration in {source}: " if source else "Invalid configuration: "
        super().__init__(f"{prefix}{message}")
        self.source = source


class TransliterationError(NormalizerError):
    """Raised by an uppercase strategy that cannot convert its input.

    The case converter catches it and falls back to the table strategy,
    so callers of the public helpers never see it.
    """

    def __init__(self, strategy: str, message: str):
        super().__init__(f"Uppercase strategy '{strategy}' failed: {message}")
        self.strategy = strategy
