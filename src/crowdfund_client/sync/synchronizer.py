"""State synchronizer - fetches the read-side snapshot as one logical unit."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace

from crowdfund_client.api.subscriptions import StatusBus
from crowdfund_client.errors import RefreshFailed, ValidationError
from crowdfund_client.interfaces.proxy import ContractProxy
from crowdfund_client.models.state import ContractSnapshot, Session, same_address

log = logging.getLogger(__name__)


class StateSynchronizer:
    """Owns the current ContractSnapshot and Session.

    refresh() issues all reads concurrently and publishes only when every
    read succeeded. Results are applied synchronously on completion, so
    overlapping refreshes land in completion order and a reader never sees
    fields from two rounds. Rounds that straddle invalidate() or an account
    switch are discarded.
    """

    def __init__(self, bus: StatusBus, proxy: ContractProxy | None = None) -> None:
        self._bus = bus
        self._proxy = proxy
        self._snapshot: ContractSnapshot | None = None
        self._session = Session()
        self._snapshot_version = 0
        self._session_version = 0
        self._epoch = 0
        self._rounds_started = 0

    # ── State ──────────────────────────────────────────────

    @property
    def snapshot(self) -> ContractSnapshot | None:
        return self._snapshot

    @property
    def session(self) -> Session:
        return self._session

    @property
    def proxy(self) -> ContractProxy | None:
        return self._proxy

    def bind(self, proxy: ContractProxy | None) -> None:
        """Route subsequent reads through ``proxy``."""
        self._proxy = proxy

    def _require_proxy(self) -> ContractProxy:
        if self._proxy is None:
            raise ValidationError("not connected")
        return self._proxy

    def _publish_session(self, **changes) -> Session:
        self._session_version += 1
        self._session = replace(self._session, version=self._session_version, **changes)
        self._bus.publish_session(self._session)
        return self._session

    # ── Session lifecycle ──────────────────────────────────

    def set_account(self, account: str) -> Session:
        """Switch the connected account. In-flight rounds for the old one are dropped."""
        self._epoch += 1
        owner = self._snapshot.owner_address if self._snapshot else None
        return self._publish_session(
            account=account,
            is_owner=same_address(account, owner),
            caller_balance=0,
            balance_address=account,
        )

    def clear_session(self) -> Session:
        self._epoch += 1
        log.info("Session cleared")
        return self._publish_session(
            account=None, is_owner=False, caller_balance=0, balance_address=None,
        )

    def invalidate(self) -> None:
        """Drop every cached value, e.g. after a network change."""
        self._epoch += 1
        self._snapshot = None
        self._bus.publish_snapshot(None)
        self.clear_session()
        log.info("Cached contract state invalidated")

    # ── Reads ──────────────────────────────────────────────

    async def refresh(self) -> ContractSnapshot:
        proxy = self._require_proxy()
        epoch = self._epoch
        account = self._session.account
        self._rounds_started += 1
        round_id = self._rounds_started

        reads = [
            proxy.get_goal_amount(),
            proxy.get_total_funded(),
            proxy.get_end_time(),
            proxy.get_is_started(),
            proxy.get_owner(),
        ]
        if account is not None:
            reads.append(proxy.get_balance_of(account))

        log.debug("Refresh round %d started (%d reads)", round_id, len(reads))
        results = await asyncio.gather(*reads, return_exceptions=True)

        errors = [r for r in results if isinstance(r, BaseException)]
        if epoch != self._epoch:
            log.info("Refresh round %d discarded: state changed while in flight", round_id)
            raise RefreshFailed("state changed while refreshing", errors)

        if errors:
            error = RefreshFailed(
                f"refresh failed: {len(errors)} of {len(reads)} reads failed ({errors[0]})",
                errors,
            )
            log.warning("Refresh round %d discarded: %s", round_id, error)
            self._bus.publish_sync_error(error)
            raise error from errors[0]

        goal, total, end_time, started, owner, *rest = results
        balance = rest[0] if rest else 0

        # No await from here on: snapshot and session commit together
        self._snapshot_version += 1
        self._snapshot = ContractSnapshot(
            goal_amount=int(goal),
            total_funded=int(total),
            end_time=int(end_time),
            is_started=bool(started),
            owner_address=str(owner),
            version=self._snapshot_version,
            fetched_at=time.time(),
        )
        self._bus.publish_snapshot(self._snapshot)
        self._publish_session(
            is_owner=same_address(account, self._snapshot.owner_address),
            caller_balance=int(balance),
            balance_address=account,
        )
        log.debug(
            "Refresh round %d applied as v%d (total=%d goal=%d started=%s)",
            round_id, self._snapshot.version, self._snapshot.total_funded,
            self._snapshot.goal_amount, self._snapshot.is_started,
        )
        return self._snapshot

    async def check_balance(self, address: str) -> int:
        """Read the contribution of any address and make it the displayed balance."""
        proxy = self._require_proxy()
        epoch = self._epoch
        balance = await proxy.get_balance_of(address)
        if epoch == self._epoch:
            self._publish_session(caller_balance=int(balance), balance_address=address)
        return int(balance)
