"""
Utility functions and helpers.

This package contains validation helpers shared by the core and the plugins.
"""

from .validators import (
    sanitize_fqdn,
    split_record,
    validate_ipv4,
    validate_ipv6,
    validate_record_name,
)

__all__ = [
    "sanitize_fqdn",
    "split_record",
    "validate_ipv4",
    "validate_ipv6",
    "validate_record_name",
]
