"""
Update Orchestrator - Keep DNS records pointed at the host's public address

Each cycle resolves the public addresses through the IP resolution chain,
compares them with the addresses seen by the previous cycle, and asks the
provider of every enabled record whose address family changed to update it.
A failing record never prevents the others from being updated. In recurring
mode the next cycle is scheduled once the current one is complete.
"""

import enum
import logging
import threading
from datetime import datetime
from typing import Optional

from ..exceptions import ProviderNotFoundError
from .ip_resolver import IPResolutionChain
from .models import (
    AddressFamily,
    CycleReport,
    DnsRecordIntent,
    LastKnownAddress,
    RecordResult,
    RecordStatus,
    ResolvedAddressSet,
)

logger = logging.getLogger(__name__)


class OrchestratorState(enum.Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    DISPATCHING = "dispatching"
    SCHEDULED = "scheduled"
    STOPPED = "stopped"


class UpdateOrchestrator:
    """Main update loop that orchestrates resolution and DNS dispatch."""

    def __init__(self, store, registry, single: bool = True, chain: Optional[IPResolutionChain] = None):
        """
        Initialize the orchestrator.

        Args:
            store: Record store with the DNS entries and global settings
            registry: Plugin registry holding the providers and resolvers
            single: True to run one cycle only, False to keep rescheduling
            chain: IP resolution chain, built from the registry when omitted
        """
        self.store = store
        self.registry = registry
        self.single = single
        self.chain = chain or IPResolutionChain(registry)
        self.state = OrchestratorState.IDLE
        self.last_report: Optional[CycleReport] = None

        self._last_known = LastKnownAddress()
        self._cycle_lock = threading.Lock()
        self._timer_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._stopped = threading.Event()
        self._running = False
        self._generation = 0
        self._error: Optional[BaseException] = None

    @property
    def timeout(self) -> float:
        """Delay between two recurring cycles, in seconds."""
        return self.store.get_poll_interval_ms() / 1000.0

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def run_once(self) -> CycleReport:
        """Run one complete cycle; cycles never overlap."""
        with self._cycle_lock:
            report = self._run_cycle()
        self.last_report = report
        return report

    def start(self) -> Optional[CycleReport]:
        """
        Run the first cycle now and, in recurring mode, keep rescheduling.

        Calling start() again while recurring is a no-op.

        Returns:
            The report of the first cycle, None if it failed unexpectedly
            in recurring mode or the orchestrator was already running
        """
        if self.single:
            return self.run_once()

        with self._timer_lock:
            if self._running:
                logger.warning("DNS updater is already running")
                return None
            self._running = True
            self._error = None
            self._stopped.clear()
            self._generation += 1
            generation = self._generation

        report = self._run_guarded()
        try:
            self._schedule(generation)
        except Exception:
            with self._timer_lock:
                self._running = False
            raise
        return report

    def stop(self) -> None:
        """Cancel the pending cycle. A cycle in progress runs to completion."""
        with self._timer_lock:
            self._stopped.set()
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self.state = OrchestratorState.STOPPED
        logger.info("DNS updater stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the updater stops; return False on timeout.

        Re-raises the error which stopped recurring scheduling, if any.
        """
        stopped = self._stopped.wait(timeout)
        if self._error is not None:
            raise self._error
        return stopped

    def _set_state(self, state: OrchestratorState) -> None:
        with self._timer_lock:
            if not self._stopped.is_set():
                self.state = state

    def _schedule(self, generation: int) -> None:
        with self._timer_lock:
            if self._stopped.is_set() or generation != self._generation:
                return
            timer = threading.Timer(self.timeout, self._run_scheduled, args=(generation,))
            timer.daemon = True
            timer.start()
            self._timer = timer
            self.state = OrchestratorState.SCHEDULED
        logger.debug(f"Next DNS update cycle in {self.timeout:g} seconds")

    def _run_scheduled(self, generation: int) -> None:
        with self._timer_lock:
            if self._stopped.is_set() or generation != self._generation:
                return
            self._timer = None
        self._run_guarded()
        try:
            self._schedule(generation)
        except Exception as e:
            # Runs on the timer thread; wait() hands the error to the caller.
            logger.error(f"Unable to schedule the next DNS update cycle: {e}")
            with self._timer_lock:
                self._error = e
                self._running = False
                self._stopped.set()
                self.state = OrchestratorState.STOPPED

    def _run_guarded(self) -> Optional[CycleReport]:
        try:
            return self.run_once()
        except Exception as e:
            logger.exception(f"DNS update cycle failed: {e}")
            self._set_state(OrchestratorState.IDLE)
            return None

    def _run_cycle(self) -> CycleReport:
        report = CycleReport()
        logger.info("Starting DNS update cycle")

        records = self.store.list_enabled_records()
        needed = {record.address_family for record in records}

        self._set_state(OrchestratorState.RESOLVING)
        resolved = self.chain.resolve(needed, self.store.get_resolver_priority_list())
        report.resolved = resolved

        report.changed = {
            family: self._last_known.changed(family, resolved.get(family))
            for family in AddressFamily
        }
        # Provider outcomes never affect what is remembered.
        self._last_known.remember(resolved)

        self._set_state(OrchestratorState.DISPATCHING)
        for record in records:
            if not report.changed[record.address_family]:
                continue
            report.results.append(self._dispatch(record, resolved))

        report.finished_at = datetime.now()
        self._set_state(OrchestratorState.IDLE)

        logger.info(
            f"DNS update cycle complete: {len(report.updated)} updated, "
            f"{len(report.failed)} failed"
        )
        return report

    def _dispatch(self, record: DnsRecordIntent, resolved: ResolvedAddressSet) -> RecordResult:
        """Send one record to its provider, turning any failure into a result."""
        address = resolved.get(record.address_family)

        try:
            provider = self.registry.get_provider(record.provider)
        except ProviderNotFoundError as e:
            logger.error(f"Unable to update DNS {record}: {e}")
            return RecordResult(record, RecordStatus.PROVIDER_NOT_FOUND, address, str(e))

        try:
            provider.update(record, resolved)
        except Exception as e:
            logger.error(f"Unable to update DNS {record}: {e}")
            logger.debug("Provider error details", exc_info=True)
            return RecordResult(record, RecordStatus.FAILED, address, str(e))

        logger.info(f"Updated DNS {record} -> {address}")
        return RecordResult(record, RecordStatus.UPDATED, address)
