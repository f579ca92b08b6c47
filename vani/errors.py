"""Errors raised by the speech provider clients."""


class ProviderError(Exception):
    """A third-party speech provider failed to do its job."""


class ProviderNotConfiguredError(ProviderError):
    """Credentials for the selected provider are missing."""


class ProviderTimeoutError(ProviderError):
    """The provider did not finish within the allowed time."""
