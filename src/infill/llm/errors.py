from __future__ import annotations


class CompletionsError(Exception):
    """Base error for code-completion pipeline failures."""


class UnknownModelError(CompletionsError, ValueError):
    """Raised when a configured model id is not in the supported model table."""


class CompletionsClientError(CompletionsError):
    """Raised for backend request/stream failures."""


class ProviderSDKMissingError(CompletionsError):
    """Raised when the backend SDK is not installed."""
