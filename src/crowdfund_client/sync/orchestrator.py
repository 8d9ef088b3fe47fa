"""Transaction orchestrator - validate, submit, confirm, classify, settle."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

from crowdfund_client.api.subscriptions import StatusBus
from crowdfund_client.errors import (
    CrowdfundError,
    InvalidAmount,
    RefreshFailed,
    RevertedOnChain,
    RpcError,
    SubmissionRejected,
    ValidationError,
)
from crowdfund_client.interfaces.proxy import ContractProxy
from crowdfund_client.models.results import (
    OperationStatus,
    OutcomeKind,
    PendingTransaction,
    TxOutcome,
    TxPhase,
)
from crowdfund_client.models.state import PendingOperation
from crowdfund_client.sync.classify import classify_revert
from crowdfund_client.sync.derived import shorten_address
from crowdfund_client.sync.synchronizer import StateSynchronizer
from crowdfund_client.units import format_amount, to_base_units

log = logging.getLogger(__name__)

T = TypeVar("T")

ConfirmGate = Callable[[str], bool]

PENDING_MESSAGE = "Transaction pending..."

_VALIDATION_MESSAGES = {
    "invalid amount": "Enter valid amount > 0",
    "funding inactive": "Funding is not active",
    "not connected": "Connect a wallet first",
    "invalid address": "Invalid address",
    "operation in progress": "Another operation is in progress",
}


def _deny(prompt: str) -> bool:
    log.warning("No confirmation gate configured, refusing: %s", prompt)
    return False


def validation_message(error: ValidationError) -> str:
    return _VALIDATION_MESSAGES.get(error.reason, error.reason)


class TransactionOrchestrator:
    """Runs one user action at a time through the transaction state machine.

    IDLE -> VALIDATING -> SUBMITTING -> CONFIRMING -> SETTLING -> IDLE.
    Validation failures return straight to IDLE without touching the
    network. A rejection before broadcast skips the refresh; every outcome
    after broadcast (success, revert, RPC failure) triggers one, and a
    refresh failure is attached to the outcome without replacing it.
    """

    def __init__(
        self,
        synchronizer: StateSynchronizer,
        bus: StatusBus,
        confirm: ConfirmGate | None = None,
        symbol: str = "CFT",
    ) -> None:
        self._sync = synchronizer
        self._bus = bus
        self._confirm = confirm or _deny
        self._symbol = symbol
        self._pending = PendingOperation.NONE
        self._phase = TxPhase.IDLE
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def pending(self) -> PendingOperation:
        return self._pending

    @property
    def phase(self) -> TxPhase:
        return self._phase

    @property
    def busy(self) -> bool:
        return self._pending is not PendingOperation.NONE

    def _set_phase(self, phase: TxPhase) -> None:
        if phase is not self._phase:
            log.debug("%s: %s -> %s", self._pending.value, self._phase.value, phase.value)
        self._phase = phase

    def publish_status(self, message: str, kind: OutcomeKind | None = None) -> None:
        self._bus.publish_status(OperationStatus(message=message, pending=self._pending, kind=kind))

    @asynccontextmanager
    async def exclusive(self, operation: PendingOperation) -> AsyncIterator[None]:
        """Hold the single operation slot for the duration of the block."""
        if self.busy:
            raise ValidationError("operation in progress")
        self._pending = operation
        self._idle.clear()
        try:
            yield
        finally:
            self._pending = PendingOperation.NONE
            self._set_phase(TxPhase.IDLE)
            self._idle.set()

    async def wait_until_idle(self) -> None:
        """Return once no operation holds the slot."""
        while self.busy:
            await self._idle.wait()

    # ── Validation ─────────────────────────────────────────

    def _require_proxy(self) -> ContractProxy:
        proxy = self._sync.proxy
        if proxy is None or not self._sync.session.connected:
            raise ValidationError("not connected")
        return proxy

    @staticmethod
    def parse_amount(amount: str) -> int:
        try:
            return to_base_units(amount)
        except InvalidAmount as exc:
            raise ValidationError("invalid amount") from exc

    def validate_fund(self, amount: str) -> int:
        """Amount must be a positive decimal and funding must be active."""
        value = self.parse_amount(amount)
        snapshot = self._sync.snapshot
        if snapshot is None or not snapshot.is_started:
            raise ValidationError("funding inactive")
        return value

    def validate_withdraw_some(self, amount: str) -> int:
        """Only positivity is checked; sufficiency is the contract's call."""
        return self.parse_amount(amount)

    # ── Actions ────────────────────────────────────────────

    async def fund(self, amount: str) -> TxOutcome:
        return await self._execute(
            PendingOperation.FUNDING,
            validate=lambda: self.validate_fund(amount),
            submit=lambda proxy, value: proxy.fund(value),
            success_message=f"Funded {amount.strip()} {self._symbol} successfully!",
            failure_message="Funding failed",
        )

    async def withdraw_some(self, amount: str) -> TxOutcome:
        return await self._execute(
            PendingOperation.WITHDRAWING_SOME,
            validate=lambda: self.validate_withdraw_some(amount),
            submit=lambda proxy, value: proxy.withdraw_some(value),
            success_message=f"Withdrew {amount.strip()} {self._symbol}",
            failure_message="Withdrawal failed",
            prompt=f"Withdraw {amount.strip()} {self._symbol}?",
        )

    async def withdraw_all(self) -> TxOutcome:
        return await self._execute(
            PendingOperation.WITHDRAWING_ALL,
            validate=lambda: None,
            submit=lambda proxy, _: proxy.withdraw_all(),
            success_message="Withdrew all funds",
            failure_message="Withdraw all failed",
            prompt="Withdraw ALL funds?",
        )

    async def end_funding(self) -> TxOutcome:
        return await self._execute(
            PendingOperation.ENDING_FUNDING,
            validate=lambda: None,
            submit=lambda proxy, _: proxy.end_funding(),
            success_message="Funding ended successfully",
            failure_message="Failed to end funding",
            prompt="End funding? This is irreversible.",
        )

    async def check_address(self, address: str) -> TxOutcome:
        """Look up the contribution of any address (no transaction)."""
        action = PendingOperation.CHECKING_ADDRESS
        if self.busy:
            return self.busy_outcome(action)

        async with self.exclusive(action):
            address = (address or "").strip()
            try:
                self._require_proxy()
                if not address:
                    raise ValidationError("invalid address")
                balance = await self._sync.check_balance(address)
            except ValidationError as exc:
                outcome = TxOutcome(action, OutcomeKind.FAILURE, validation_message(exc), error=exc)
            except RpcError as exc:
                log.warning("Balance check for %s failed: %s", address[:16], exc)
                outcome = TxOutcome(
                    action, OutcomeKind.FAILURE, "Failed to check address", error=exc,
                )
            else:
                outcome = TxOutcome(
                    action,
                    OutcomeKind.SUCCESS,
                    f"Address {shorten_address(address)}: {format_amount(balance, self._symbol)}",
                )

        self.publish_status(outcome.message, outcome.kind)
        return outcome

    # ── State machine ──────────────────────────────────────

    def busy_outcome(self, action: PendingOperation) -> TxOutcome:
        error = ValidationError("operation in progress")
        log.info("%s refused: %s already in flight", action.value, self._pending.value)
        return TxOutcome(action, OutcomeKind.FAILURE, validation_message(error), error=error)

    async def _execute(
        self,
        action: PendingOperation,
        *,
        validate: Callable[[], T],
        submit: Callable[[ContractProxy, T], Awaitable[PendingTransaction]],
        success_message: str,
        failure_message: str,
        prompt: str | None = None,
    ) -> TxOutcome:
        if self.busy:
            return self.busy_outcome(action)

        async with self.exclusive(action):
            outcome = await self._drive(
                action, validate, submit, success_message, failure_message, prompt,
            )

        if outcome.kind is not OutcomeKind.CANCELLED:
            self.publish_status(outcome.message, outcome.kind)
        return outcome

    async def _drive(
        self,
        action: PendingOperation,
        validate: Callable[[], T],
        submit: Callable[[ContractProxy, T], Awaitable[PendingTransaction]],
        success_message: str,
        failure_message: str,
        prompt: str | None,
    ) -> TxOutcome:
        self._set_phase(TxPhase.VALIDATING)
        try:
            proxy = self._require_proxy()
            value = validate()
        except ValidationError as exc:
            log.info("%s not submitted: %s", action.value, exc.reason)
            return TxOutcome(action, OutcomeKind.FAILURE, validation_message(exc), error=exc)

        if prompt is not None and not self._confirm(prompt):
            log.info("%s cancelled at confirmation", action.value)
            return TxOutcome(action, OutcomeKind.CANCELLED, "Cancelled")

        self._set_phase(TxPhase.SUBMITTING)
        self.publish_status(PENDING_MESSAGE)
        tx_hash: str | None = None
        try:
            handle = await submit(proxy, value)
            tx_hash = handle.tx_hash
            self._set_phase(TxPhase.CONFIRMING)
            receipt = await proxy.await_confirmation(handle)

        except SubmissionRejected as exc:
            # Nothing reached the ledger, so nothing to refresh
            log.warning("%s rejected before broadcast: %s", action.value, exc)
            return TxOutcome(action, OutcomeKind.FAILURE, failure_message, error=exc)

        except ValidationError as exc:
            return TxOutcome(action, OutcomeKind.FAILURE, validation_message(exc), error=exc)

        except RevertedOnChain as exc:
            revert = classify_revert(exc.reason)
            log.warning(
                "%s reverted: %s (raw reason: %s)", action.value, revert.kind.value, exc.reason,
            )
            outcome = TxOutcome(
                action,
                OutcomeKind.FAILURE,
                revert.message,
                tx_hash=exc.tx_hash or tx_hash,
                revert=revert,
                error=exc,
            )

        except RpcError as exc:
            log.error("%s RPC failure after submission: %s", action.value, exc)
            outcome = TxOutcome(
                action, OutcomeKind.FAILURE, failure_message, tx_hash=tx_hash, error=exc,
            )

        except Exception as exc:
            log.error("%s unexpected error: %s", action.value, exc, exc_info=True)
            outcome = TxOutcome(
                action, OutcomeKind.FAILURE, failure_message, tx_hash=tx_hash, error=exc,
            )

        else:
            log.info("%s confirmed (tx=%s)", action.value, receipt.tx_hash[:16])
            outcome = TxOutcome(
                action, OutcomeKind.SUCCESS, success_message, tx_hash=receipt.tx_hash,
            )

        await self._settle(outcome)
        return outcome

    async def _settle(self, outcome: TxOutcome) -> None:
        """Refresh after the outcome is fully classified. Funds may have moved."""
        self._set_phase(TxPhase.SETTLING)
        try:
            await self._sync.refresh()
        except RefreshFailed as exc:
            log.warning("Refresh after %s failed: %s", outcome.action.value, exc)
            outcome.refresh_error = exc
        except CrowdfundError as exc:
            log.warning("Refresh after %s failed: %s", outcome.action.value, exc)
            outcome.refresh_error = RefreshFailed(str(exc), [exc])
