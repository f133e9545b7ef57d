"""
Core DNS update functionality.

This package contains the record store, the IP resolution chain and the
update orchestrator.
"""

from .ip_resolver import IPResolutionChain
from .record_store import RecordStore
from .updater import OrchestratorState, UpdateOrchestrator

__all__ = ["IPResolutionChain", "OrchestratorState", "RecordStore", "UpdateOrchestrator"]
