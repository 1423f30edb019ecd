"""Error definitions for the source comment translator."""

from __future__ import annotations


class SourceTransError(Exception):
    """Base exception for all custom errors."""


class InvalidDirectionError(SourceTransError):
    """Raised when a translation direction is not in the allow-list."""


class InvalidModeError(SourceTransError):
    """Raised when the mode selector does not name a translation mode."""


class OverwriteRefusedError(SourceTransError):
    """Raised when attempting to overwrite an output without consent."""


class SourceEncodingError(SourceTransError):
    """Raised when the source cannot be decoded or the result encoded."""


class TranslationProviderConfigurationError(SourceTransError):
    """Raised when the translation provider is misconfigured."""


class TranslationProviderError(SourceTransError):
    """Raised when a translation request fails."""
