"""
Cluster-initialization coordination.

This module provides the components of one coordination run:
- MembershipResolver: Group name -> replica endpoints
- HealthProber: Concurrent status checks and cross-node validation
- InitializationOrchestrator: One-time bootstrap and key persistence
- UnsealSequencer: Per-node unseal with freshly generated shares
- ClusterInitCoordinator: Drives the above end to end
"""

from vault_core.cluster.coordinator import (
    ClusterInitCoordinator,
    InitOutcome,
    ProbeProgress,
)
from vault_core.cluster.membership import MembershipResolver
from vault_core.cluster.orchestrator import (
    BootstrapRequest,
    BootstrapState,
    InitializationOrchestrator,
    check_threshold,
    share_parameter_name,
)
from vault_core.cluster.prober import HealthProber
from vault_core.cluster.unseal import SealState, UnsealOutcome, UnsealSequencer

__all__ = [
    "ClusterInitCoordinator",
    "InitOutcome",
    "ProbeProgress",
    "MembershipResolver",
    "HealthProber",
    "BootstrapRequest",
    "BootstrapState",
    "InitializationOrchestrator",
    "share_parameter_name",
    "check_threshold",
    "SealState",
    "UnsealOutcome",
    "UnsealSequencer",
]
