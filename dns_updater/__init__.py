"""
DNS Updater - Dynamic DNS record synchronization

Keeps DNS records pointed at the host's current public IPv4/IPv6 address,
with pluggable IP resolvers and DNS providers.
"""

__version__ = "1.0.0"
__author__ = "DNS Updater Team"
__description__ = "Keep DNS records in sync with a changing public IP address"

from .core.models import AddressFamily, CycleReport, DnsRecordIntent, ResolvedAddressSet
from .core.record_store import RecordStore
from .core.updater import UpdateOrchestrator
from .plugins.registry import PluginRegistry

__all__ = [
    "AddressFamily",
    "CycleReport",
    "DnsRecordIntent",
    "PluginRegistry",
    "RecordStore",
    "ResolvedAddressSet",
    "UpdateOrchestrator",
]
