"""Crowdfund client - wires wallet, proxy, synchronizer and orchestrator together."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Coroutine

from crowdfund_client.api.subscriptions import StatusBus
from crowdfund_client.api.view import DashboardView, build_dashboard
from crowdfund_client.errors import CrowdfundError, RefreshFailed, SubmissionRejected
from crowdfund_client.interfaces.proxy import ContractProxy
from crowdfund_client.interfaces.wallet import Signer, WalletProvider
from crowdfund_client.models.config import ClientConfig
from crowdfund_client.models.results import OperationStatus, OutcomeKind, TxOutcome
from crowdfund_client.models.state import (
    ContractSnapshot,
    PendingOperation,
    Session,
    same_address,
)
from crowdfund_client.stellar.proxy import SorobanContractProxy
from crowdfund_client.stellar.wallet import KeypairWallet
from crowdfund_client.sync.orchestrator import ConfirmGate, TransactionOrchestrator
from crowdfund_client.sync.synchronizer import StateSynchronizer

log = logging.getLogger(__name__)

ProxyFactory = Callable[[Signer], ContractProxy]


class CrowdfundClient:
    """One wallet session against the crowdfund contract.

    Reacts to wallet events: an empty accounts list disconnects, a new
    first account rebinds the signer and refreshes, and a chain change drops
    all cached state and reconnects from scratch.
    """

    def __init__(
        self,
        wallet: WalletProvider,
        proxy_factory: ProxyFactory,
        confirm: ConfirmGate | None = None,
        symbol: str = "CFT",
        bus: StatusBus | None = None,
    ) -> None:
        self.bus = bus or StatusBus()
        self.synchronizer = StateSynchronizer(self.bus)
        self.orchestrator = TransactionOrchestrator(self.synchronizer, self.bus, confirm, symbol)
        self._wallet = wallet
        self._proxy_factory = proxy_factory
        self._symbol = symbol
        self._tasks: set[asyncio.Task] = set()
        self._unsubscribe = [
            wallet.on_accounts_changed(self._on_accounts_changed),
            wallet.on_chain_changed(self._on_chain_changed),
        ]

    @classmethod
    def from_config(cls, cfg: ClientConfig, confirm: ConfirmGate | None = None) -> "CrowdfundClient":
        wallet = KeypairWallet([cfg.keypair_secret], cfg.passphrase)
        return cls(
            wallet,
            lambda signer: SorobanContractProxy.from_config(cfg, signer),
            confirm=confirm,
            symbol=cfg.symbol,
        )

    # ── State ──────────────────────────────────────────────

    @property
    def snapshot(self) -> ContractSnapshot | None:
        return self.synchronizer.snapshot

    @property
    def session(self) -> Session:
        return self.synchronizer.session

    @property
    def pending(self) -> PendingOperation:
        return self.orchestrator.pending

    @property
    def status(self) -> OperationStatus | None:
        return self.bus.current_status

    def dashboard(self, now: float | None = None) -> DashboardView:
        return build_dashboard(
            self.snapshot, self.session, self.status, self.pending, self._symbol, now,
        )

    # ── Connection ─────────────────────────────────────────

    async def connect(self) -> TxOutcome:
        """Request accounts, bind a signer and load the first snapshot."""
        action = PendingOperation.CONNECTING
        if self.orchestrator.busy:
            return self.orchestrator.busy_outcome(action)

        async with self.orchestrator.exclusive(action):
            try:
                accounts = await self._wallet.request_accounts()
                if not accounts:
                    raise SubmissionRejected("wallet returned no accounts")
                await self._bind_account(accounts[0])
            except CrowdfundError as exc:
                log.error("Wallet connection failed: %s", exc)
                outcome = TxOutcome(
                    action, OutcomeKind.FAILURE, "Failed to connect wallet.", error=exc,
                )
            else:
                outcome = TxOutcome(action, OutcomeKind.SUCCESS, "Wallet connected successfully!")
                try:
                    await self.synchronizer.refresh()
                except RefreshFailed as exc:
                    outcome.refresh_error = exc
                log.info("Connected as %s", accounts[0])

        self.orchestrator.publish_status(outcome.message, outcome.kind)
        return outcome

    async def _bind_account(self, account: str) -> None:
        signer = self._wallet.get_signer(account)
        old = self.synchronizer.proxy
        self.synchronizer.bind(self._proxy_factory(signer))
        self.synchronizer.set_account(account)
        if old is not None:
            self._retire(old)

    def _retire(self, proxy: ContractProxy) -> None:
        """Close ``proxy`` once no operation can still be confirming through it."""
        self._spawn(self._close_when_idle(proxy))

    async def _close_when_idle(self, proxy: ContractProxy) -> None:
        await self.orchestrator.wait_until_idle()
        await proxy.close()

    async def disconnect(self) -> None:
        proxy = self.synchronizer.proxy
        self.synchronizer.bind(None)
        self.synchronizer.clear_session()
        if proxy is not None:
            self._retire(proxy)
        log.info("Disconnected")

    async def refresh(self) -> ContractSnapshot:
        """On-demand resynchronization."""
        return await self.synchronizer.refresh()

    # ── Wallet events ──────────────────────────────────────

    async def handle_accounts_changed(self, accounts: list[str]) -> None:
        if not accounts:
            log.info("Wallet reports no accounts, disconnecting")
            await self.disconnect()
            return

        account = accounts[0]
        if same_address(account, self.session.account):
            return

        log.info("Account changed to %s", account[:16])
        try:
            await self._bind_account(account)
            await self.synchronizer.refresh()
        except RefreshFailed as exc:
            log.warning("Refresh after account change failed: %s", exc)
        except CrowdfundError as exc:
            log.error("Could not switch to %s: %s", account[:16], exc)
            await self.disconnect()

    async def handle_chain_changed(self) -> TxOutcome:
        """Discard everything and rebuild from a fresh connection."""
        log.info("Network changed, rebuilding contract state")
        proxy = self.synchronizer.proxy
        self.synchronizer.bind(None)
        self.synchronizer.invalidate()
        self.bus.clear_status()
        if proxy is not None:
            self._retire(proxy)
        if self.orchestrator.busy:
            log.info("Waiting for %s to finish before reconnecting", self.orchestrator.pending.value)
            await self.orchestrator.wait_until_idle()
        return await self.connect()

    def _on_accounts_changed(self, accounts: list[str]) -> None:
        self._spawn(self.handle_accounts_changed(accounts))

    def _on_chain_changed(self) -> None:
        self._spawn(self.handle_chain_changed())

    def _spawn(self, coro: Coroutine) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait for wallet-event handlers still running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ── Actions ────────────────────────────────────────────

    async def fund(self, amount: str) -> TxOutcome:
        return await self.orchestrator.fund(amount)

    async def withdraw_some(self, amount: str) -> TxOutcome:
        return await self.orchestrator.withdraw_some(amount)

    async def withdraw_all(self) -> TxOutcome:
        return await self.orchestrator.withdraw_all()

    async def end_funding(self) -> TxOutcome:
        return await self.orchestrator.end_funding()

    async def check_address(self, address: str) -> TxOutcome:
        return await self.orchestrator.check_address(address)

    async def close(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()
        await self.wait_idle()
        proxy = self.synchronizer.proxy
        self.synchronizer.bind(None)
        if proxy is not None:
            await proxy.close()
