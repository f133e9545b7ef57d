"""
DNS provider and IP resolver plugins.

Importing this package registers the bundled plugins: the BIND and mock
providers, and the OpenDNS and static resolvers.
"""

from .base_provider import DNSProvider
from .base_resolver import IPResolver
from .bind_provider import BINDProvider
from .mock_provider import MockDNSProvider
from .opendns_resolver import OpenDNSResolver
from .registry import (
    PROVIDER_CLASSES,
    RESOLVER_CLASSES,
    PluginRegistry,
    register_provider,
    register_resolver,
)
from .static_resolver import StaticResolver

__all__ = [
    "DNSProvider",
    "IPResolver",
    "BINDProvider",
    "MockDNSProvider",
    "OpenDNSResolver",
    "StaticResolver",
    "PluginRegistry",
    "PROVIDER_CLASSES",
    "RESOLVER_CLASSES",
    "register_provider",
    "register_resolver",
]
