"""
Static IP resolver.

Reports addresses written in the configuration. Useful for hosts with a
fixed address on one family, and for dry runs.
"""

from typing import Dict, Optional

from .base_resolver import IPResolver
from .registry import register_resolver


@register_resolver("static")
class StaticResolver(IPResolver):
    """Return the `ipv4`/`ipv6` values from the plugin configuration."""

    def __init__(self, config: Optional[Dict] = None):
        super().__init__(config)
        self.supports_ipv4 = bool(self.config.get("ipv4"))
        self.supports_ipv6 = bool(self.config.get("ipv6"))

    def ip(self) -> Dict[str, str]:
        return {
            key: str(self.config[key])
            for key in ("ipv4", "ipv6")
            if self.config.get(key)
        }
