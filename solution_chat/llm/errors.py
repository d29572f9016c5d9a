"""Failures raised by the completion provider client."""


class CompletionError(Exception):
    """Base class for completion provider failures."""


class ProviderError(CompletionError):
    """Raised when the completion service fails at the transport or HTTP level."""


class ProviderTimeout(CompletionError):
    """Raised when the completion service does not answer within the bounded wait."""
