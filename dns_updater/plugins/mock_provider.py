"""
Mock DNS provider for testing and demonstration.

This module provides a mock DNS provider that stores records in memory
for safe testing and demonstration purposes.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..core.models import DnsRecordIntent, ResolvedAddressSet
from ..utils.validators import sanitize_fqdn
from .base_provider import DNSProvider
from .registry import register_provider

logger = logging.getLogger(__name__)


@register_provider("mock")
class MockDNSProvider(DNSProvider):
    """Mock DNS provider for testing and demonstration purposes.

    Records listed in the `fail` option are rejected with a RuntimeError.
    """

    def __init__(self, config: Optional[Dict] = None):
        """Initialize mock provider."""
        super().__init__(config)
        self.records: Dict[Tuple[str, str], Dict] = {}
        self.calls: List[Tuple[DnsRecordIntent, str]] = []
        self.fail = {sanitize_fqdn(name) for name in self.config.get("fail", [])}
        logger.info("Mock DNS provider initialized")

    def update(self, record: DnsRecordIntent, resolved: ResolvedAddressSet) -> None:
        """Store the record with the address of its family."""
        address = self.address_for(record, resolved)
        fqdn = sanitize_fqdn(record.record)
        self.calls.append((record, address))

        if fqdn in self.fail:
            raise RuntimeError(f"Mock: Rejected update of {record.record}")

        self.records[(fqdn, record.record_type)] = {
            "fqdn": fqdn,
            "type": record.record_type,
            "address": address,
            "ttl": record.ttl,
        }
        logger.info(f"Mock: Updated record {fqdn} {record.record_type} -> {address}")

    def get_address(self, record: str, record_type: str = "A") -> Optional[str]:
        entry = self.records.get((sanitize_fqdn(record), record_type))
        return entry["address"] if entry else None
