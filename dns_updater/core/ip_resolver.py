"""
IP Resolution Chain - Find the public addresses of the host

Resolver plugins are queried one after the other, in priority order, until
every needed address family has an answer. The first answer for a family
wins; a failing resolver only costs its own turn.
"""

import logging
from typing import Iterable, Sequence, Set

from ..exceptions import ResolverNotFoundError
from ..utils.validators import validate_ipv4, validate_ipv6
from .models import AddressFamily, ResolvedAddressSet

logger = logging.getLogger(__name__)

_VALIDATORS = {
    AddressFamily.IPV4: validate_ipv4,
    AddressFamily.IPV6: validate_ipv6,
}


class IPResolutionChain:
    """Queries an ordered list of resolver plugins with partial-result fallback."""

    def __init__(self, registry):
        """
        Args:
            registry: Plugin registry providing `get_resolver(name)`
        """
        self.registry = registry

    def resolve(
        self,
        needed_families: Iterable[AddressFamily],
        ordered_resolver_ids: Sequence[str],
    ) -> ResolvedAddressSet:
        """
        Resolve the public address of every needed family.

        Args:
            needed_families: Families at least one enabled record relies on
            ordered_resolver_ids: Resolver identifiers, most preferred first

        Returns:
            The resolved addresses; families nobody could answer are left unset
        """
        needed: Set[AddressFamily] = set(needed_families)
        result = ResolvedAddressSet()

        if not needed:
            logger.debug("No address family needed, skipping IP resolution")
            return result

        for name in ordered_resolver_ids:
            missing = self._missing(needed, result)
            if not missing:
                break

            try:
                resolver = self.registry.get_resolver(name)
            except ResolverNotFoundError as e:
                logger.warning(f"Unable to load IP resolver {name}: {e}")
                continue

            capabilities = resolver.capabilities
            wanted = {family for family in missing if capabilities.supports(family)}
            if not wanted:
                logger.debug(f"Skipping IP resolver {name}, it cannot resolve the missing families")
                continue

            logger.info(f"Getting IP with {name}...")
            try:
                answer = resolver.ip() or {}
            except Exception as e:
                logger.warning(f"Unable to resolve ip using resolver {name}: {e}")
                continue

            self._merge(name, answer, wanted, result)

        for family in self._missing(needed, result):
            logger.warning(
                f"The resolver was unable to resolve the public {family.key.replace('ip', 'IP')}"
            )

        return result

    @staticmethod
    def _missing(needed: Set[AddressFamily], result: ResolvedAddressSet) -> Set[AddressFamily]:
        return {family for family in needed if not result.has(family)}

    @staticmethod
    def _merge(
        name: str,
        answer,
        missing: Set[AddressFamily],
        result: ResolvedAddressSet,
    ) -> None:
        """Take every still missing family the resolver answered for."""
        if not isinstance(answer, dict):
            logger.warning(f"IP resolver {name} returned an unexpected result: {answer!r}")
            return

        for family in missing:
            address = answer.get(family.key)
            if not address:
                continue
            address = str(address).strip()
            if not _VALIDATORS[family](address):
                logger.warning(f"IP resolver {name} returned an invalid {family.key} address: {address}")
                continue
            result.set(family, address)
            logger.info(f"Resolved public {family.key} {address} with {name}")
