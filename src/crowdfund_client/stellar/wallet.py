"""Keypair-backed wallet provider for headless use (CLI, scripts, tests)."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from stellar_sdk import Keypair, TransactionEnvelope

from crowdfund_client.errors import SubmissionRejected
from crowdfund_client.interfaces.wallet import AccountsListener, ChainListener
from crowdfund_client.models.state import same_address

log = logging.getLogger(__name__)


class KeypairSigner:
    """Signer backed by a local secret key."""

    def __init__(self, keypair: Keypair) -> None:
        if not keypair.can_sign():
            raise SubmissionRejected(f"keypair {keypair.public_key[:16]} has no secret")
        self._keypair = keypair

    @property
    def address(self) -> str:
        return self._keypair.public_key

    def sign(self, envelope: TransactionEnvelope) -> None:
        envelope.sign(self._keypair)


class KeypairWallet:
    """WalletProvider over a fixed set of secret keys.

    The first key is the active account. switch_account(), disconnect() and
    switch_network() emit the same events a browser wallet would.
    """

    def __init__(self, secrets: Iterable[str], network_passphrase: str = "") -> None:
        self._keypairs = [Keypair.from_secret(s) for s in secrets]
        self._active: str | None = self._keypairs[0].public_key if self._keypairs else None
        self._network_passphrase = network_passphrase
        self._account_listeners: list[AccountsListener] = []
        self._chain_listeners: list[ChainListener] = []

    @property
    def network_passphrase(self) -> str:
        return self._network_passphrase

    async def request_accounts(self) -> list[str]:
        if self._active is None:
            return []
        others = [kp.public_key for kp in self._keypairs if kp.public_key != self._active]
        return [self._active, *others]

    def get_signer(self, address: str) -> KeypairSigner:
        for kp in self._keypairs:
            if same_address(kp.public_key, address):
                return KeypairSigner(kp)
        raise SubmissionRejected(f"no key for account {address[:16]}")

    # ── Events ─────────────────────────────────────────────

    def on_accounts_changed(self, listener: AccountsListener) -> Callable[[], None]:
        self._account_listeners.append(listener)
        return lambda: self._account_listeners.remove(listener)

    def on_chain_changed(self, listener: ChainListener) -> Callable[[], None]:
        self._chain_listeners.append(listener)
        return lambda: self._chain_listeners.remove(listener)

    def switch_account(self, address: str) -> None:
        self.get_signer(address)  # must be one of ours
        self._active = address
        log.info("Wallet switched to %s", address[:16])
        self._emit_accounts([address])

    def disconnect(self) -> None:
        self._active = None
        log.info("Wallet disconnected")
        self._emit_accounts([])

    def switch_network(self, network_passphrase: str) -> None:
        self._network_passphrase = network_passphrase
        log.info("Wallet network changed")
        for listener in list(self._chain_listeners):
            listener()

    def _emit_accounts(self, accounts: list[str]) -> None:
        for listener in list(self._account_listeners):
            listener(list(accounts))
