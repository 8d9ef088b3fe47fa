"""Versioned value objects describing on-chain and session state."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum


class PendingOperation(str, Enum):
    """The single user-visible operation in flight. Gates every action."""

    NONE = "none"
    CONNECTING = "connecting"
    FUNDING = "funding"
    ENDING_FUNDING = "ending_funding"
    WITHDRAWING_SOME = "withdrawing_some"
    WITHDRAWING_ALL = "withdrawing_all"
    CHECKING_ADDRESS = "checking_address"


@dataclass(frozen=True)
class ContractSnapshot:
    """All contract reads from one fetch round. Replaced wholesale."""

    goal_amount: int
    total_funded: int
    end_time: int  # unix seconds
    is_started: bool
    owner_address: str
    version: int = 0
    fetched_at: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def same_address(a: str | None, b: str | None) -> bool:
    """Addresses are not case-sensitive identifiers."""
    if not a or not b:
        return False
    return a.casefold() == b.casefold()


@dataclass(frozen=True)
class Session:
    """Wallet-bound state. Empty until connected."""

    account: str | None = None
    is_owner: bool = False
    caller_balance: int = 0
    balance_address: str | None = None
    version: int = 0

    @property
    def connected(self) -> bool:
        return self.account is not None

    def to_dict(self) -> dict:
        return asdict(self)
