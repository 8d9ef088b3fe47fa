"""Soroban contract proxy - reads via simulation, writes via signed submission."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Sequence, TypeVar

from stellar_sdk import (
    Account,
    SorobanServerAsync,
    TransactionBuilder,
    TransactionEnvelope,
    scval,
    xdr,
)
from stellar_sdk.exceptions import PrepareTransactionException, SdkError
from stellar_sdk.soroban_rpc import GetTransactionStatus, SendTransactionStatus

from crowdfund_client.errors import (
    RevertedOnChain,
    RpcError,
    SubmissionRejected,
    ValidationError,
)
from crowdfund_client.interfaces.wallet import Signer
from crowdfund_client.models.config import CONTRACT_METHODS, ClientConfig, ContractMethods
from crowdfund_client.models.results import PendingTransaction, Receipt

log = logging.getLogger(__name__)

T = TypeVar("T")

# All-zero account; simulation does not require the source to exist
SIMULATION_SOURCE = "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"

# Markers the host puts in a simulation error when the contract itself failed
_CONTRACT_FAILURE_MARKERS = ("HostError", "Error(Contract")

_TRANSPORT_ERRORS = (SdkError, asyncio.TimeoutError, OSError)


def _address_scval(address: str) -> xdr.SCVal:
    try:
        return scval.to_address(address)
    except ValueError as exc:
        raise ValidationError("invalid address") from exc


def _is_contract_failure(reason: str) -> bool:
    return any(marker in reason for marker in _CONTRACT_FAILURE_MARKERS)


def _scval_text(value: xdr.SCVal) -> list[str]:
    """Human-readable strings and symbols inside a diagnostic payload."""
    if value.type == xdr.SCValType.SCV_SYMBOL:
        return [scval.from_symbol(value)]
    if value.type == xdr.SCValType.SCV_STRING:
        return [scval.from_string(value).decode("utf-8", errors="replace")]
    if value.type == xdr.SCValType.SCV_VEC:
        return [text for item in scval.from_vec(value) for text in _scval_text(item)]
    return []


def _diagnostic_events(response) -> list[xdr.DiagnosticEvent]:
    """Diagnostic events from a get_transaction response, or its result meta."""
    encoded = getattr(response, "diagnostic_events_xdr", None) or []
    events = [xdr.DiagnosticEvent.from_xdr(e) for e in encoded]
    meta_xdr = getattr(response, "result_meta_xdr", None)
    if events or not meta_xdr:
        return events

    meta = xdr.TransactionMeta.from_xdr(meta_xdr)
    v4 = getattr(meta, "v4", None)
    if v4 is not None:
        return list(v4.diagnostic_events or [])
    v3 = getattr(meta, "v3", None)
    if v3 is not None and v3.soroban_meta is not None:
        return list(v3.soroban_meta.diagnostic_events or [])
    return []


def _contract_diagnostics(response) -> list[str]:
    """Messages the host attached to "error" diagnostic events."""
    messages: list[str] = []
    for event in _diagnostic_events(response):
        body = event.event.body.v0
        topics = [text for topic in body.topics for text in _scval_text(topic)]
        if "error" in topics:
            messages.extend(_scval_text(body.data))
    return messages


def _failure_reason(response) -> str:
    """Best-effort text for a FAILED transaction: result code plus contract diagnostics."""
    reason = "transaction failed"
    result_xdr = getattr(response, "result_xdr", None)
    if result_xdr:
        try:
            result = xdr.TransactionResult.from_xdr(result_xdr)
            reason = f"transaction failed: {result.result.code.name}"
        except Exception:
            reason = f"transaction failed: {result_xdr}"

    try:
        messages = _contract_diagnostics(response)
    except Exception as exc:
        log.debug("Could not decode diagnostic events: %s", exc)
        messages = []
    if messages:
        reason = f"{reason}: {'; '.join(messages)}"
    return reason


class SorobanContractProxy:
    """ContractProxy over Soroban RPC.

    Reads simulate an invocation from a null source account and decode the
    returned SCVal. Writes load the signer's account, prepare (simulate and
    assemble), sign, and send. Confirmation polls get_transaction().
    """

    def __init__(
        self,
        contract_id: str,
        rpc_url: str,
        network_passphrase: str,
        signer: Signer | None = None,
        *,
        methods: ContractMethods = CONTRACT_METHODS,
        base_fee: int = 100,
        tx_timeout: int = 300,
        confirm_timeout: float = 60.0,
        confirm_poll_interval: float = 1.0,
        server: SorobanServerAsync | None = None,
    ) -> None:
        self._contract_id = contract_id
        self._network_passphrase = network_passphrase
        self._signer = signer
        self._methods = methods
        self._base_fee = base_fee
        self._tx_timeout = tx_timeout
        self._confirm_timeout = confirm_timeout
        self._poll_interval = confirm_poll_interval
        self._server = server if server is not None else SorobanServerAsync(rpc_url)

    @classmethod
    def from_config(
        cls, cfg: ClientConfig, signer: Signer | None = None
    ) -> "SorobanContractProxy":
        return cls(
            cfg.contract_id,
            cfg.rpc_url,
            cfg.passphrase,
            signer,
            base_fee=cfg.base_fee,
            tx_timeout=cfg.tx_timeout,
            confirm_timeout=cfg.confirm_timeout,
            confirm_poll_interval=cfg.confirm_poll_interval,
        )

    @property
    def signer(self) -> Signer | None:
        return self._signer

    async def close(self) -> None:
        """Close the underlying aiohttp session."""
        try:
            await self._server.close()
        except Exception as exc:
            log.debug("Closing RPC client failed: %s", exc)

    # ── Reads ──────────────────────────────────────────────

    async def _read(
        self,
        function_name: str,
        decode: Callable[[xdr.SCVal], T],
        parameters: Sequence[xdr.SCVal] = (),
    ) -> T:
        tx = (
            TransactionBuilder(
                Account(SIMULATION_SOURCE, 0),
                self._network_passphrase,
                base_fee=self._base_fee,
            )
            .append_invoke_contract_function_op(
                contract_id=self._contract_id,
                function_name=function_name,
                parameters=list(parameters),
            )
            .set_timeout(self._tx_timeout)
            .build()
        )
        try:
            response = await self._server.simulate_transaction(tx)
        except _TRANSPORT_ERRORS as exc:
            log.warning("%s() read failed: %s", function_name, exc)
            raise RpcError(f"{function_name}: {exc}") from exc

        if response.error:
            log.warning("%s() simulation error: %s", function_name, response.error)
            raise RpcError(f"{function_name}: {response.error}")
        if not response.results:
            raise RpcError(f"{function_name}: empty simulation result")

        try:
            value = decode(xdr.SCVal.from_xdr(response.results[0].xdr))
        except Exception as exc:
            raise RpcError(f"{function_name}: undecodable result ({exc})") from exc
        log.debug("%s() -> %s", function_name, value)
        return value

    async def get_goal_amount(self) -> int:
        return await self._read(self._methods.goal_amount, scval.from_int128)

    async def get_total_funded(self) -> int:
        return await self._read(self._methods.total_funded, scval.from_int128)

    async def get_end_time(self) -> int:
        return await self._read(self._methods.end_time, scval.from_uint64)

    async def get_is_started(self) -> bool:
        return await self._read(self._methods.is_started, scval.from_bool)

    async def get_balance_of(self, address: str) -> int:
        return await self._read(
            self._methods.balance_of, scval.from_int128, [_address_scval(address)],
        )

    async def get_owner(self) -> str:
        return await self._read(
            self._methods.owner, lambda v: scval.from_address(v).address,
        )

    # ── Mutating calls ─────────────────────────────────────

    async def fund(self, amount: int) -> PendingTransaction:
        signer = self._require_signer()
        return await self._submit(
            self._methods.fund,
            [_address_scval(signer.address), scval.to_int128(amount)],
        )

    async def end_funding(self) -> PendingTransaction:
        signer = self._require_signer()
        return await self._submit(self._methods.end_funding, [_address_scval(signer.address)])

    async def withdraw_some(self, amount: int) -> PendingTransaction:
        signer = self._require_signer()
        return await self._submit(
            self._methods.withdraw_some,
            [_address_scval(signer.address), scval.to_int128(amount)],
        )

    async def withdraw_all(self) -> PendingTransaction:
        signer = self._require_signer()
        return await self._submit(self._methods.withdraw_all, [_address_scval(signer.address)])

    def _require_signer(self) -> Signer:
        if self._signer is None:
            raise SubmissionRejected("no signer connected")
        return self._signer

    async def _build_signed(
        self, function_name: str, parameters: list[xdr.SCVal]
    ) -> TransactionEnvelope:
        signer = self._require_signer()
        try:
            source = await self._server.load_account(signer.address)
            tx = (
                TransactionBuilder(source, self._network_passphrase, base_fee=self._base_fee)
                .append_invoke_contract_function_op(
                    contract_id=self._contract_id,
                    function_name=function_name,
                    parameters=parameters,
                )
                .set_timeout(self._tx_timeout)
                .build()
            )
            tx = await self._server.prepare_transaction(tx)
        except PrepareTransactionException as exc:
            reason = exc.simulate_transaction_response.error or str(exc)
            if _is_contract_failure(reason):
                log.warning("%s() rejected by contract in simulation: %s", function_name, reason)
                raise RevertedOnChain(reason) from exc
            raise SubmissionRejected(f"{function_name}: {reason}") from exc
        except _TRANSPORT_ERRORS as exc:
            raise SubmissionRejected(f"{function_name}: {exc}") from exc

        signer.sign(tx)
        return tx

    async def _submit(
        self, function_name: str, parameters: list[xdr.SCVal]
    ) -> PendingTransaction:
        log.info("Submitting %s()", function_name)
        tx = await self._build_signed(function_name, parameters)

        try:
            response = await self._server.send_transaction(tx)
        except _TRANSPORT_ERRORS as exc:
            # The node may or may not have received it
            log.error("%s() send failed: %s", function_name, exc)
            raise RpcError(f"{function_name}: {exc}") from exc

        if response.status in (SendTransactionStatus.ERROR, SendTransactionStatus.TRY_AGAIN_LATER):
            detail = response.error_result_xdr or response.status.value
            log.warning("%s() rejected by node: %s", function_name, detail)
            raise SubmissionRejected(f"{function_name}: {detail}")

        log.info("%s() sent (tx=%s)", function_name, response.hash[:16])
        return PendingTransaction(
            tx_hash=response.hash,
            function_name=function_name,
            submitted_at=time.time(),
        )

    async def await_confirmation(self, handle: PendingTransaction) -> Receipt:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._confirm_timeout

        while True:
            try:
                response = await self._server.get_transaction(handle.tx_hash)
            except _TRANSPORT_ERRORS as exc:
                raise RpcError(f"get_transaction({handle.tx_hash[:16]}): {exc}") from exc

            if response.status == GetTransactionStatus.SUCCESS:
                log.info(
                    "%s() confirmed in ledger %s (tx=%s)",
                    handle.function_name, response.ledger, handle.tx_hash[:16],
                )
                return Receipt(tx_hash=handle.tx_hash, ledger=response.ledger)

            if response.status == GetTransactionStatus.FAILED:
                reason = _failure_reason(response)
                log.warning("%s() failed on-chain: %s", handle.function_name, reason)
                raise RevertedOnChain(reason, tx_hash=handle.tx_hash)

            if loop.time() >= deadline:
                raise RpcError(
                    f"timed out after {self._confirm_timeout}s waiting for "
                    f"{handle.tx_hash[:16]}"
                )
            await asyncio.sleep(self._poll_interval)
