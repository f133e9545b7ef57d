"""
Base DNS provider interface.

This module defines the abstract base class that all DNS providers must implement.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from ..core.models import DnsRecordIntent, ResolvedAddressSet
from ..exceptions import ConfigurationError, NoDnsUpdateError
from ..utils.validators import split_record


class DNSProvider(ABC):
    """Abstract base class for DNS providers."""

    name = "unnamed"

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}

    @abstractmethod
    def update(self, record: DnsRecordIntent, resolved: ResolvedAddressSet) -> None:
        """
        Point `record` at the resolved address of its family.

        Raises when the provider rejects the change, cannot be reached or the
        record cannot be mapped onto the provider.
        """
        raise NoDnsUpdateError(self.name)

    def address_for(self, record: DnsRecordIntent, resolved: ResolvedAddressSet) -> str:
        """Return the address to publish for a record."""
        address = resolved.get(record.address_family)
        if not address:
            raise ValueError(
                f"No {record.address_family.key} address resolved for {record.record}"
            )
        return address

    @staticmethod
    def split_record(record: DnsRecordIntent) -> Tuple[str, str]:
        """Split the record name into its (subdomain, domain) pair."""
        parts = split_record(record.record)
        if parts is None:
            raise ConfigurationError(f"Cannot split record name '{record.record}'")
        return parts
