"""
Exceptions raised by the DNS updater and its plugins.
"""


class DNSUpdaterError(Exception):
    """Base class for all DNS updater errors."""


class ConfigurationError(DNSUpdaterError):
    """Raised when the configuration file or a record entry is invalid."""


class ProviderNotFoundError(DNSUpdaterError):
    """Raised when no provider plugin is registered under an identifier."""

    def __init__(self, provider: str):
        super().__init__(f"DNS provider '{provider}' is not available")
        self.provider = provider


class ResolverNotFoundError(DNSUpdaterError):
    """Raised when no resolver plugin is registered under an identifier."""

    def __init__(self, resolver: str):
        super().__init__(f"IP resolver '{resolver}' is not available")
        self.resolver = resolver


class NoDnsUpdateError(DNSUpdaterError, NotImplementedError):
    """Raised by providers which do not implement update()."""

    def __init__(self, provider: str = ""):
        name = f" '{provider}'" if provider else ""
        super().__init__(f"The DNS provider{name} does not implement update()")
