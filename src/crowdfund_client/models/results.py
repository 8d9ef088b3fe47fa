"""Transaction handles, receipts and operation outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from crowdfund_client.errors import RefreshFailed
from crowdfund_client.models.state import PendingOperation


class TxPhase(str, Enum):
    """Orchestrator state for the mutating action in flight."""

    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    CONFIRMING = "confirming"
    SETTLING = "settling"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"  # confirmation gate answered "no"


class RevertKind(str, Enum):
    OWNER_ONLY = "owner_only"
    GOAL_REACHED = "goal_reached"
    FUNDING_STOPPED = "funding_stopped"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class PendingTransaction:
    """Handle for a transaction accepted by the node but not yet final."""

    tx_hash: str
    function_name: str
    submitted_at: float = 0.0


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    ledger: int | None = None
    status: str = "success"


@dataclass(frozen=True)
class RevertClassification:
    """Best-effort friendly reading of a revert. ``raw_reason`` is authoritative."""

    kind: RevertKind
    message: str
    raw_reason: str


@dataclass
class TxOutcome:
    """Structured result of one orchestrated action."""

    action: PendingOperation
    kind: OutcomeKind
    message: str
    tx_hash: str | None = None
    revert: RevertClassification | None = None
    error: Exception | None = None
    refresh_error: RefreshFailed | None = None

    @property
    def succeeded(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS


@dataclass(frozen=True)
class OperationStatus:
    """The one status message currently shown to the user.

    ``kind`` is None for progress messages such as "Transaction pending...".
    """

    message: str
    pending: PendingOperation = PendingOperation.NONE
    kind: OutcomeKind | None = None
