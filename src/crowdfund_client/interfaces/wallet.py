"""WalletProvider and Signer protocols - the connected-account capability."""

from __future__ import annotations

from typing import Callable, Protocol

from stellar_sdk import TransactionEnvelope

AccountsListener = Callable[[list[str]], None]
ChainListener = Callable[[], None]


class Signer(Protocol):
    """An account able to authorize mutating calls."""

    @property
    def address(self) -> str:
        ...

    def sign(self, envelope: TransactionEnvelope) -> None:
        """Sign in place. Raises SubmissionRejected to decline."""
        ...


class WalletProvider(Protocol):
    """Source of accounts, signers and account/network change events."""

    async def request_accounts(self) -> list[str]:
        ...

    def get_signer(self, address: str) -> Signer:
        ...

    def on_accounts_changed(self, listener: AccountsListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        ...

    def on_chain_changed(self, listener: ChainListener) -> Callable[[], None]:
        ...
