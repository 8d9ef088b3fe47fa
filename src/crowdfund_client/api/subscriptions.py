"""Subscription bus - how presentation code observes the client."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from crowdfund_client.errors import RefreshFailed
from crowdfund_client.models.results import OperationStatus
from crowdfund_client.models.state import ContractSnapshot, Session

log = logging.getLogger(__name__)

T = TypeVar("T")


class _Channel(Generic[T]):
    def __init__(self, name: str) -> None:
        self._name = name
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, value: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                log.exception("%s listener failed", self._name)


class StatusBus:
    """Fan-out of snapshot, session, status and sync-error updates.

    ``current_status`` is the single status message on screen; each new
    status replaces the previous one.
    """

    def __init__(self) -> None:
        self._snapshot: _Channel[ContractSnapshot | None] = _Channel("snapshot")
        self._session: _Channel[Session] = _Channel("session")
        self._status: _Channel[OperationStatus] = _Channel("status")
        self._sync_error: _Channel[RefreshFailed] = _Channel("sync_error")
        self.current_status: OperationStatus | None = None

    # ── Subscribe ──────────────────────────────────────────

    def on_snapshot_changed(
        self, listener: Callable[[ContractSnapshot | None], None]
    ) -> Callable[[], None]:
        return self._snapshot.subscribe(listener)

    def on_session_changed(self, listener: Callable[[Session], None]) -> Callable[[], None]:
        return self._session.subscribe(listener)

    def on_operation_status(
        self, listener: Callable[[OperationStatus], None]
    ) -> Callable[[], None]:
        return self._status.subscribe(listener)

    def on_sync_error(self, listener: Callable[[RefreshFailed], None]) -> Callable[[], None]:
        return self._sync_error.subscribe(listener)

    # ── Publish ────────────────────────────────────────────

    def publish_snapshot(self, snapshot: ContractSnapshot | None) -> None:
        self._snapshot.publish(snapshot)

    def publish_session(self, session: Session) -> None:
        self._session.publish(session)

    def publish_status(self, status: OperationStatus) -> None:
        self.current_status = status
        self._status.publish(status)

    def publish_sync_error(self, error: RefreshFailed) -> None:
        self._sync_error.publish(error)

    def clear_status(self) -> None:
        self.current_status = None
