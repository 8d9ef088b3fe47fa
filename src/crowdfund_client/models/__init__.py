"""Data models for the crowdfund client."""

from crowdfund_client.models.config import (
    CONTRACT_METHODS,
    CROWDFUND_CONTRACT_ID,
    NETWORK_PASSPHRASES,
    ClientConfig,
    ContractMethods,
)
from crowdfund_client.models.state import (
    ContractSnapshot,
    PendingOperation,
    Session,
    same_address,
)
from crowdfund_client.models.results import (
    OperationStatus,
    OutcomeKind,
    PendingTransaction,
    Receipt,
    RevertClassification,
    RevertKind,
    TxOutcome,
    TxPhase,
)

__all__ = [
    "CONTRACT_METHODS", "CROWDFUND_CONTRACT_ID", "NETWORK_PASSPHRASES",
    "ClientConfig", "ContractMethods",
    "ContractSnapshot", "PendingOperation", "Session", "same_address",
    "OperationStatus", "OutcomeKind", "PendingTransaction", "Receipt",
    "RevertClassification", "RevertKind", "TxOutcome", "TxPhase",
]
