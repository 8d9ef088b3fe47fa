"""State synchronization and transaction orchestration."""

from crowdfund_client.sync.classify import REVERT_TABLE, classify_revert
from crowdfund_client.sync.derived import (
    GOAL_REACHED_THRESHOLD,
    NEARLY_FUNDED_THRESHOLD,
    DerivedState,
    ProgressBand,
    derive,
    progress_percent,
    seconds_remaining,
)
from crowdfund_client.sync.orchestrator import TransactionOrchestrator
from crowdfund_client.sync.synchronizer import StateSynchronizer

__all__ = [
    "REVERT_TABLE", "classify_revert",
    "GOAL_REACHED_THRESHOLD", "NEARLY_FUNDED_THRESHOLD",
    "DerivedState", "ProgressBand", "derive", "progress_percent", "seconds_remaining",
    "TransactionOrchestrator",
    "StateSynchronizer",
]
