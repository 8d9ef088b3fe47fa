"""ContractProxy protocol - typed facade over the crowdfund contract."""

from __future__ import annotations

from typing import Protocol

from crowdfund_client.models.results import PendingTransaction, Receipt


class ContractProxy(Protocol):
    """Read and mutating calls against the crowdfund contract.

    Reads have no side effects and each raise RpcError independently.
    Mutating calls return a handle once accepted for broadcast and raise
    SubmissionRejected before that point; await_confirmation() may raise
    RevertedOnChain or RpcError.
    """

    # ── Reads ──────────────────────────────────────────────

    async def get_goal_amount(self) -> int:
        ...

    async def get_total_funded(self) -> int:
        ...

    async def get_end_time(self) -> int:
        ...

    async def get_is_started(self) -> bool:
        ...

    async def get_balance_of(self, address: str) -> int:
        """Contribution recorded for ``address``, in base units."""
        ...

    async def get_owner(self) -> str:
        ...

    # ── Mutating calls ─────────────────────────────────────

    async def fund(self, amount: int) -> PendingTransaction:
        ...

    async def end_funding(self) -> PendingTransaction:
        ...

    async def withdraw_some(self, amount: int) -> PendingTransaction:
        ...

    async def withdraw_all(self) -> PendingTransaction:
        ...

    async def await_confirmation(self, handle: PendingTransaction) -> Receipt:
        """Suspend until the ledger includes and finalizes the transaction."""
        ...

    async def close(self) -> None:
        ...
