"""
Plugin Registry - Identifier to plugin lookup for providers and resolvers

Plugin classes are registered under a string identifier. At startup the
registry instantiates the plugins the configuration actually refers to, and
the update orchestrator only ever talks to those in-memory handles.
"""

import logging
from typing import Dict, Iterable, Optional, Type

from ..exceptions import ProviderNotFoundError, ResolverNotFoundError
from .base_provider import DNSProvider
from .base_resolver import IPResolver

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: Dict[str, Type[DNSProvider]] = {}
RESOLVER_CLASSES: Dict[str, Type[IPResolver]] = {}


def register_provider(name: str):
    """Class decorator registering a DNS provider under `name`."""

    def decorator(cls: Type[DNSProvider]) -> Type[DNSProvider]:
        cls.name = name
        PROVIDER_CLASSES[name] = cls
        return cls

    return decorator


def register_resolver(name: str):
    """Class decorator registering an IP resolver under `name`."""

    def decorator(cls: Type[IPResolver]) -> Type[IPResolver]:
        cls.name = name
        RESOLVER_CLASSES[name] = cls
        return cls

    return decorator


class PluginRegistry:
    """In-memory plugin handles, keyed by identifier."""

    def __init__(
        self,
        providers: Optional[Dict[str, DNSProvider]] = None,
        resolvers: Optional[Dict[str, IPResolver]] = None,
    ):
        self.providers: Dict[str, DNSProvider] = dict(providers or {})
        self.resolvers: Dict[str, IPResolver] = dict(resolvers or {})

    @classmethod
    def from_config(
        cls,
        provider_names: Iterable[str],
        resolver_names: Iterable[str],
        plugin_config: Optional[Dict] = None,
    ) -> "PluginRegistry":
        """
        Instantiate the named plugins from the registered classes.

        Args:
            provider_names: Provider identifiers referenced by DNS records
            resolver_names: Resolver identifiers from the priority list
            plugin_config: The `plugins` configuration section

        Returns:
            Registry holding every plugin which could be created
        """
        plugin_config = plugin_config or {}
        registry = cls()

        for name in dict.fromkeys(provider_names):
            provider_cls = PROVIDER_CLASSES.get(name)
            if provider_cls is None:
                logger.warning(f"Unknown DNS provider '{name}'")
                continue
            try:
                registry.providers[name] = provider_cls(plugin_config.get(name) or {})
            except Exception as e:
                logger.error(f"Failed to initialize DNS provider '{name}': {e}")

        for name in dict.fromkeys(resolver_names):
            resolver_cls = RESOLVER_CLASSES.get(name)
            if resolver_cls is None:
                logger.warning(f"Unknown IP resolver '{name}'")
                continue
            try:
                registry.resolvers[name] = resolver_cls(plugin_config.get(name) or {})
            except Exception as e:
                logger.error(f"Failed to initialize IP resolver '{name}': {e}")

        logger.info(
            f"Loaded {len(registry.providers)} DNS provider(s) and "
            f"{len(registry.resolvers)} IP resolver(s)"
        )
        return registry

    def add_provider(self, name: str, provider: DNSProvider) -> None:
        self.providers[name] = provider

    def add_resolver(self, name: str, resolver: IPResolver) -> None:
        self.resolvers[name] = resolver

    def get_provider(self, name: str) -> DNSProvider:
        try:
            return self.providers[name]
        except KeyError:
            raise ProviderNotFoundError(name)

    def get_resolver(self, name: str) -> IPResolver:
        try:
            return self.resolvers[name]
        except KeyError:
            raise ResolverNotFoundError(name)
