"""
OpenDNS IP resolver.

Asks the OpenDNS resolvers for the special name myip.opendns.com, which they
answer with the address the query came from.
"""

import logging
from typing import Dict, Optional

import dns.exception
import dns.resolver

from .base_resolver import IPResolver
from .registry import register_resolver

logger = logging.getLogger(__name__)

MYIP_NAME = "myip.opendns.com"
IPV4_NAMESERVERS = ["208.67.222.222", "208.67.220.220"]
IPV6_NAMESERVERS = ["2620:119:35::35", "2620:119:53::53"]


@register_resolver("opendns")
class OpenDNSResolver(IPResolver):
    """Resolve the public addresses through myip.opendns.com."""

    supports_ipv4 = True
    supports_ipv6 = True

    def __init__(self, config: Optional[Dict] = None):
        super().__init__(config)
        self.timeout = float(self.config.get("timeout", 5))
        self.ipv4_nameservers = self.config.get("ipv4_nameservers", IPV4_NAMESERVERS)
        self.ipv6_nameservers = self.config.get("ipv6_nameservers", IPV6_NAMESERVERS)

    def _initialize_dns_resolver(self, nameservers) -> dns.resolver.Resolver:
        """Create a resolver that only talks to the given name servers."""
        resolver = dns.resolver.Resolver(configure=False)
        resolver.nameservers = list(nameservers)
        resolver.timeout = self.timeout
        resolver.lifetime = self.timeout
        return resolver

    def _query(self, nameservers, record_type: str) -> Optional[str]:
        resolver = self._initialize_dns_resolver(nameservers)
        try:
            answers = resolver.resolve(MYIP_NAME, record_type)
        except dns.exception.DNSException as e:
            # No route over one family must not hide the other one.
            logger.debug(f"OpenDNS {record_type} query failed: {e}")
            return None

        for answer in answers:
            return answer.to_text()
        return None

    def ip(self) -> Dict[str, str]:
        """Query the IPv4 and IPv6 name servers for our own address."""
        result = {}

        ipv4 = self._query(self.ipv4_nameservers, "A")
        if ipv4:
            result["ipv4"] = ipv4

        ipv6 = self._query(self.ipv6_nameservers, "AAAA")
        if ipv6:
            result["ipv6"] = ipv6

        return result
