"""
Record Store - Durable DNS record intents and global settings

This module loads the YAML (or JSON) configuration file holding the DNS
entries, the ordered list of IP resolvers, the poll interval and the
per-plugin settings, and offers the accessors and CRUD operations used by
the update orchestrator and the command line.
"""

import copy
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from ..exceptions import ConfigurationError
from ..utils.validators import validate_record_name
from .models import AddressFamily, DnsRecordIntent

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_MS = 300000

# Keys written by older, JSON based versions of the configuration.
KEY_ALIASES = {
    "serviceTimeout": "service_timeout",
    "ipPlugins": "ip_plugins",
    "dnsEntries": "dns_entries",
}


def get_default_config() -> Dict:
    """Return default configuration."""
    return {
        "service_timeout": DEFAULT_POLL_INTERVAL_MS,
        "ip_plugins": [],
        "dns_entries": [],
        "plugins": {},
    }


class RecordStore:
    """Holds the DNS record intents and the global settings."""

    def __init__(self, config: Optional[Dict] = None, path: Optional[str] = None):
        """Initialize the store from an in-memory configuration dictionary."""
        self.path = Path(os.path.expanduser(path)).resolve() if path else None
        self._config = get_default_config()
        self._records: List[DnsRecordIntent] = []
        if config:
            self._apply(config)

    @classmethod
    def from_file(cls, path: str) -> "RecordStore":
        store = cls(path=path)
        store.load()
        return store

    @property
    def config(self) -> Dict:
        return self._config

    def load(self) -> None:
        """Load the configuration file; a missing file gives the defaults."""
        if self.path is None:
            raise ConfigurationError("No configuration file path set")

        logger.info(f"Loading config from: {self.path}")
        try:
            with open(self.path, "r") as f:
                config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning(f"Config file {self.path} not found, using defaults")
            config = get_default_config()
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            raise ConfigurationError(f"Error parsing config file {self.path}: {e}")

        if not isinstance(config, dict):
            raise ConfigurationError(f"Config file {self.path} must contain a mapping")

        self._config = get_default_config()
        self._records = []
        self._apply(config)

    def save(self) -> None:
        """Write the configuration, records included, back to the file."""
        if self.path is None:
            raise ConfigurationError("No configuration file path set")

        logger.info(f"Saving the configuration to: {self.path}")
        data = copy.deepcopy(self._config)
        data["dns_entries"] = [record.to_dict() for record in self._records]
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def _apply(self, config: Dict) -> None:
        for key, value in config.items():
            self._config[KEY_ALIASES.get(key, key)] = value

        if not isinstance(self._config.get("plugins"), dict):
            self._config["plugins"] = {}

        ip_plugins = self._config.get("ip_plugins")
        if ip_plugins is not None and not isinstance(ip_plugins, list):
            raise ConfigurationError(f"ip_plugins must be a list, got {type(ip_plugins).__name__}")

        entries = self._config.pop("dns_entries", None) or []
        if not isinstance(entries, list):
            raise ConfigurationError(f"dns_entries must be a list, got {type(entries).__name__}")

        for entry in entries:
            record = DnsRecordIntent.from_dict(entry)
            if not validate_record_name(record.record):
                logger.warning(f"DNS entry '{record.record}' does not look like a host name")
            self.upsert(record)

    # Read accessors used by the update orchestrator

    def records(self) -> List[DnsRecordIntent]:
        return list(self._records)

    def list_enabled_records(self) -> List[DnsRecordIntent]:
        return [record for record in self._records if record.enabled]

    def get_resolver_priority_list(self) -> List[str]:
        return [str(name) for name in self._config.get("ip_plugins") or []]

    def get_poll_interval_ms(self) -> int:
        value = self._config.get("service_timeout") or DEFAULT_POLL_INTERVAL_MS
        try:
            interval = int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid service_timeout: {value!r}")
        if interval <= 0:
            raise ConfigurationError(f"service_timeout must be positive, got {interval}")
        return interval

    def provider_names(self) -> List[str]:
        return list(dict.fromkeys(record.provider for record in self._records))

    # CRUD

    def _index(self, key: Tuple[str, str, AddressFamily]) -> Optional[int]:
        for i, record in enumerate(self._records):
            if record.key == key:
                return i
        return None

    def find(self, provider: str, record: str, family) -> Optional[DnsRecordIntent]:
        index = self._index((provider, record, AddressFamily.parse(family)))
        return None if index is None else self._records[index]

    def upsert(self, record: DnsRecordIntent) -> None:
        """Add a record, replacing the one with the same identity if any."""
        index = self._index(record.key)
        if index is None:
            self._records.append(record)
        else:
            self._records[index] = record

    def toggle(self, provider: str, record: str, family) -> Optional[DnsRecordIntent]:
        """Flip the enabled flag of a record; no-op when it does not exist."""
        index = self._index((provider, record, AddressFamily.parse(family)))
        if index is None:
            return None
        toggled = replace(self._records[index], enabled=not self._records[index].enabled)
        self._records[index] = toggled
        return toggled

    def delete(self, provider: str, record: str, family) -> bool:
        index = self._index((provider, record, AddressFamily.parse(family)))
        if index is None:
            return False
        del self._records[index]
        return True

    def plugin_config(self, name: str, values: Optional[Dict] = None) -> Dict:
        """
        Get the configuration of a plugin, merging `values` into it first.

        Keys set to None in `values` are removed.
        """
        plugins = self._config["plugins"]
        if values is None:
            return plugins.get(name) or {}

        current = plugins.setdefault(name, {})
        current.update(values)
        for key in [k for k, v in current.items() if v is None]:
            del current[key]

        logger.debug(f"New value of plugin {name} is: {current}")
        return current
