"""
Models - Data types shared by the record store, the resolution chain and the
update orchestrator.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

from ..exceptions import ConfigurationError


TRUE_VALUES = ("true", "yes", "on", "1")
FALSE_VALUES = ("false", "no", "off", "0")


def parse_flag(value, name: str) -> bool:
    """
    Parse a boolean configuration value.

    Accepts booleans, 0 and 1, and the usual yes/no spellings in any case.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    raise ConfigurationError(f"Invalid value for {name}: {value!r}")


class AddressFamily(enum.Enum):
    """IP address family of a DNS record."""

    IPV4 = 4
    IPV6 = 6

    @property
    def record_type(self) -> str:
        """DNS record type carrying an address of this family."""
        return "A" if self is AddressFamily.IPV4 else "AAAA"

    @property
    def key(self) -> str:
        return "ipv4" if self is AddressFamily.IPV4 else "ipv6"

    @classmethod
    def parse(cls, value: Union[int, str, "AddressFamily"]) -> "AddressFamily":
        """
        Parse an address family from its persisted representation.

        Accepts 4/6 (as int or str), "ipv4"/"ipv6" and "A"/"AAAA".
        """
        if isinstance(value, cls):
            return value

        aliases = {
            "4": cls.IPV4,
            "ipv4": cls.IPV4,
            "a": cls.IPV4,
            "6": cls.IPV6,
            "ipv6": cls.IPV6,
            "aaaa": cls.IPV6,
        }
        family = aliases.get(str(value).strip().lower())
        if family is None:
            raise ConfigurationError(f"Unknown address family: {value!r}")
        return family


class _Sentinel:
    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return False


# Last-known value before the first cycle has run.
UNKNOWN = _Sentinel("UNKNOWN")

# Last-known value after a cycle in which no resolver answered for the family.
NO_ANSWER = _Sentinel("NO_ANSWER")


@dataclass(frozen=True)
class DnsRecordIntent:
    """One desired DNS mapping: keep `record` at `provider` pointed at our address."""

    provider: str
    record: str
    address_family: AddressFamily
    ttl: int = 300
    enabled: bool = True

    @property
    def key(self) -> Tuple[str, str, AddressFamily]:
        return (self.provider, self.record, self.address_family)

    @property
    def record_type(self) -> str:
        return self.address_family.record_type

    @classmethod
    def from_dict(cls, data: Dict) -> "DnsRecordIntent":
        """Build an intent from a `dns_entries` item of the configuration."""
        if not isinstance(data, dict):
            raise ConfigurationError(f"DNS entry must be a mapping: {data!r}")

        try:
            provider = data["provider"]
            record = data["record"]
            family = data["type"]
        except KeyError as e:
            raise ConfigurationError(f"DNS entry is missing field {e}: {data}")

        if not provider or not record:
            raise ConfigurationError(f"DNS entry has an empty provider or record: {data}")

        try:
            ttl = int(data.get("ttl", 300))
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid TTL in DNS entry: {data}")

        return cls(
            provider=str(provider),
            record=str(record),
            address_family=AddressFamily.parse(family),
            ttl=ttl,
            enabled=parse_flag(data.get("enable", data.get("enabled", True)), "enable"),
        )

    def to_dict(self) -> Dict:
        return {
            "provider": self.provider,
            "record": self.record,
            "type": self.address_family.value,
            "ttl": self.ttl,
            "enable": self.enabled,
        }

    def __str__(self) -> str:
        return f"{self.record} ({self.record_type} via {self.provider})"


@dataclass
class ResolvedAddressSet:
    """Public addresses found during one cycle. Never persisted."""

    ipv4: Optional[str] = None
    ipv6: Optional[str] = None

    def get(self, family: AddressFamily) -> Optional[str]:
        return getattr(self, family.key)

    def set(self, family: AddressFamily, value: Optional[str]) -> None:
        setattr(self, family.key, value)

    def has(self, family: AddressFamily) -> bool:
        return bool(self.get(family))

    def families(self) -> List[AddressFamily]:
        return [family for family in AddressFamily if self.has(family)]

    def to_dict(self) -> Dict[str, str]:
        return {family.key: self.get(family) for family in self.families()}


@dataclass(frozen=True)
class ResolverCapabilities:
    """Address families a resolver plugin is able to report."""

    supports_ipv4: bool = False
    supports_ipv6: bool = False

    def supports(self, family: AddressFamily) -> bool:
        if family is AddressFamily.IPV4:
            return self.supports_ipv4
        return self.supports_ipv6


class LastKnownAddress:
    """Address per family seen by the previous cycle of an orchestrator."""

    def __init__(self):
        self._values = {family: UNKNOWN for family in AddressFamily}

    def get(self, family: AddressFamily):
        return self._values[family]

    def changed(self, family: AddressFamily, resolved: Optional[str]) -> bool:
        """
        Tell whether `resolved` must trigger an update for `family`.

        A missing answer never counts as a change, whatever was known before.
        """
        if not resolved:
            return False
        return resolved != self._values[family]

    def remember(self, resolved: ResolvedAddressSet) -> None:
        """Replace every family with the outcome of the latest resolution."""
        for family in AddressFamily:
            self._values[family] = resolved.get(family) or NO_ANSWER


class RecordStatus(enum.Enum):
    UPDATED = "updated"
    FAILED = "failed"
    PROVIDER_NOT_FOUND = "provider_not_found"


@dataclass
class RecordResult:
    """Outcome of dispatching one record during a cycle."""

    record: DnsRecordIntent
    status: RecordStatus
    address: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is RecordStatus.UPDATED


@dataclass
class CycleReport:
    """Aggregated outcome of one orchestration cycle."""

    resolved: ResolvedAddressSet = field(default_factory=ResolvedAddressSet)
    changed: Dict[AddressFamily, bool] = field(default_factory=dict)
    results: List[RecordResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def updated(self) -> List[RecordResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[RecordResult]:
        return [r for r in self.results if not r.ok]

    @property
    def success(self) -> bool:
        return not self.failed
