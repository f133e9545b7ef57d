"""
BIND DNS provider implementation.

This module pushes address changes to a BIND (or any RFC 2136 capable)
name server using the dnspython library.
"""

import logging
import re
from typing import Dict, Optional

import dns.message
import dns.name
import dns.query
import dns.rcode
import dns.rdatatype
import dns.tsigkeyring
import dns.update

from ..core.models import DnsRecordIntent, ResolvedAddressSet
from ..utils.validators import sanitize_fqdn
from .base_provider import DNSProvider
from .registry import register_provider

logger = logging.getLogger(__name__)


@register_provider("bind")
class BINDProvider(DNSProvider):
    """BIND DNS provider implementation using dnspython library."""

    def __init__(self, config: Optional[Dict] = None):
        """Initialize BIND provider."""
        super().__init__(config)
        self.nameserver = self.config.get("nameserver", "127.0.0.1")
        self.port = int(self.config.get("port", 53))
        self.timeout = float(self.config.get("timeout", 30))
        self.zone = self.config.get("zone", "")
        self.min_ttl = int(self.config.get("min_ttl", 0))
        self.key_file = self.config.get("key_file", "")
        self.key_name = self.config.get("key_name", "")

        self.keyring = None
        if self.key_file and self.key_name:
            try:
                with open(self.key_file, "r") as f:
                    key_content = f.read().strip()

                secret = self._parse_bind_key_file(key_content, self.key_name)

                if secret:
                    self.keyring = dns.tsigkeyring.from_text({self.key_name: secret})
                    logger.info(f"TSIG key loaded from {self.key_file}")
                else:
                    logger.warning(
                        f"Could not extract secret for key '{self.key_name}' from {self.key_file}"
                    )
            except OSError as e:
                logger.warning(f"Failed to load TSIG key: {e}")
                logger.debug("TSIG authentication will not be available")

        logger.info(
            f"BIND provider initialized for nameserver {self.nameserver}:{self.port}"
        )

    def _parse_bind_key_file(self, key_content: str, key_name: str) -> Optional[str]:
        """Parse BIND key file format to extract the secret for a specific key."""
        key_pattern = rf'key\s+"{re.escape(key_name)}"\s*{{(.*?)}};'
        match = re.search(key_pattern, key_content, re.DOTALL)
        if match:
            secret_match = re.search(r'secret\s+"([^"]+)"', match.group(1))
            if secret_match:
                return secret_match.group(1)
        return None

    def update(self, record: DnsRecordIntent, resolved: ResolvedAddressSet) -> None:
        """Replace the record's A/AAAA rrset with the resolved address."""
        address = self.address_for(record, resolved)
        zone = self._zone_for(record)
        update = self._create_update_message(zone, record, address)

        try:
            response = dns.query.tcp(
                update, self.nameserver, port=self.port, timeout=self.timeout
            )
        except Exception as e:
            logger.error(f"Failed to update record {record.record}: {e}")
            raise

        if response.rcode() != dns.rcode.NOERROR:
            self._handle_dns_error(response, record)

        logger.debug(f"Updated record {record.record} {record.record_type} -> {address}")

    def _zone_for(self, record: DnsRecordIntent) -> str:
        """Use the configured zone, otherwise the registered domain of the record."""
        if self.zone:
            return sanitize_fqdn(self.zone)
        _, domain = self.split_record(record)
        return sanitize_fqdn(domain)

    def _create_update_message(
        self, zone: str, record: DnsRecordIntent, address: str
    ) -> dns.update.Update:
        """Create a DNS update message."""
        update = dns.update.Update(zone, keyring=self.keyring)

        fqdn = dns.name.from_text(sanitize_fqdn(record.record))
        ttl = max(record.ttl, self.min_ttl)
        rdtype = dns.rdatatype.from_text(record.record_type)

        update.replace(fqdn, ttl, rdtype, address)
        return update

    def _handle_dns_error(self, response: dns.message.Message, record: DnsRecordIntent) -> None:
        """Handle DNS error responses by logging and raising appropriate exceptions."""
        error_message = (
            f"DNS update failed with response code: {dns.rcode.to_text(response.rcode())}"
        )
        logger.error(error_message)
        raise RuntimeError(f"Failed to update the record {record.record}: {error_message}")
