"""
Base IP resolver interface.

An IP resolver reports the current public address of the host for one or
both address families.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..core.models import ResolverCapabilities


class IPResolver(ABC):
    """Abstract base class for IP resolvers."""

    name = "unnamed"
    supports_ipv4 = False
    supports_ipv6 = False

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}

    @property
    def capabilities(self) -> ResolverCapabilities:
        return ResolverCapabilities(
            supports_ipv4=self.supports_ipv4, supports_ipv6=self.supports_ipv6
        )

    @abstractmethod
    def ip(self) -> Dict[str, str]:
        """
        Get the public addresses of the host.

        Returns:
            Dictionary with an "ipv4" and/or "ipv6" key; keys may be missing
            when the family cannot be determined
        """
        pass
