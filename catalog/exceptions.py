"""
Exception hierarchy for catalog reconciliation and image resolution.
"""


class CatalogReconciliationError(Exception):
    """Base class for errors raised by the reconciliation services."""


class LabelResolutionError(CatalogReconciliationError):
    """A brand or category row could not be created or found after retry."""

    def __init__(self, label_type: str, name: str):
        self.label_type = label_type
        self.name = name
        super().__init__(f"Could not resolve {label_type} label '{name}'")


class ProviderError(CatalogReconciliationError):
    """An image provider failed to produce a result."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ProviderTimeoutError(ProviderError):
    """An image provider did not answer within its timeout."""
