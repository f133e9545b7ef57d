"""
Validators - Input validation for DNS records and resolved addresses

This module provides validation functions for record names and IP addresses
so that neither a bad configuration entry nor a misbehaving resolver plugin
can push garbage to a DNS provider.
"""

import ipaddress
import logging
import re
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r"^[a-zA-Z0-9_]([a-zA-Z0-9-]*[a-zA-Z0-9])?$")
_RECORD_RE = re.compile(
    r"^(?:([a-zA-Z0-9\-\._]+)\.)?([a-zA-Z0-9\-]+\.[a-zA-Z0-9\-]{2,63})\.?$"
)


def validate_record_name(record: str) -> bool:
    """
    Validate the host name of a DNS record.

    Unlike a strict FQDN, a record may carry a trailing dot and its labels
    may start with a digit or an underscore.

    Args:
        record: The record name to validate

    Returns:
        True if valid, False otherwise
    """
    if not record or not isinstance(record, str):
        return False

    name = record[:-1] if record.endswith(".") else record

    if len(name) > 253:
        logger.warning(f"Record name too long: {record}")
        return False

    labels = name.split(".")
    if len(labels) < 2:
        logger.warning(f"Record name must have at least 2 labels: {record}")
        return False

    for label in labels:
        if not _validate_label(label):
            logger.warning(f"Invalid label '{label}' in record name: {record}")
            return False

    return True


def _validate_label(label: str) -> bool:
    if len(label) == 0 or len(label) > 63:
        return False

    return bool(_LABEL_RE.match(label))


def validate_ipv4(ipv4: str) -> bool:
    """
    Validate IPv4 address.

    Args:
        ipv4: The IPv4 address to validate

    Returns:
        True if valid, False otherwise
    """
    if not ipv4 or not isinstance(ipv4, str):
        return False

    try:
        ipaddress.IPv4Address(ipv4.strip())
        return True
    except ipaddress.AddressValueError:
        logger.warning(f"Invalid IPv4 address: {ipv4}")
        return False


def validate_ipv6(ipv6: str) -> bool:
    """
    Validate IPv6 address.

    Args:
        ipv6: The IPv6 address to validate

    Returns:
        True if valid, False otherwise
    """
    if not ipv6 or not isinstance(ipv6, str):
        return False

    try:
        ipaddress.IPv6Address(ipv6.strip())
        return True
    except ipaddress.AddressValueError:
        logger.warning(f"Invalid IPv6 address: {ipv6}")
        return False


def split_record(record: str) -> Optional[Tuple[str, str]]:
    """
    Split a record name into its subdomain and registered domain.

    "www.home.example.com" gives ("www.home", "example.com") and
    "example.com" gives ("", "example.com").

    Returns:
        The (subdomain, domain) pair, None if the name cannot be split
    """
    if not record:
        return None

    match = _RECORD_RE.match(record.strip())
    if not match:
        return None

    return match.group(1) or "", match.group(2)


def sanitize_fqdn(fqdn: str) -> str:
    """
    Sanitize FQDN by normalizing case and removing surrounding dots.

    Args:
        fqdn: The FQDN to sanitize

    Returns:
        Sanitized FQDN
    """
    if not fqdn:
        return fqdn

    fqdn = fqdn.strip().strip(".").lower()

    # Remove any invalid characters (keep only letters, digits, hyphens, underscores, dots)
    fqdn = re.sub(r"[^a-z0-9._-]", "", fqdn)
    fqdn = re.sub(r"\.+", ".", fqdn)

    return fqdn.strip(".")
