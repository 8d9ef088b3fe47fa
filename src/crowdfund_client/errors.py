"""Error taxonomy for contract reads, submissions and local validation.

Nothing here is fatal: every error resolves to an idle state with a status
message. ``RefreshFailed`` is always reported separately from the outcome of the
mutating call that triggered the refresh.
"""

from __future__ import annotations


class CrowdfundError(Exception):
    """Base class for all crowdfund client errors."""


class InvalidAmount(CrowdfundError, ValueError):
    """A decimal amount string could not be converted to base units."""

    def __init__(self, value: str, detail: str = "not a positive decimal") -> None:
        super().__init__(f"invalid amount {value!r}: {detail}")
        self.value = value
        self.detail = detail


class ValidationError(CrowdfundError):
    """Local pre-flight check failed. The network was never contacted."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class SubmissionRejected(CrowdfundError):
    """Signer declined or the RPC node refused the transaction before broadcast."""


class RevertedOnChain(CrowdfundError):
    """The contract rejected the call. ``reason`` is the raw diagnostic text."""

    def __init__(self, reason: str, tx_hash: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.tx_hash = tx_hash


class RpcError(CrowdfundError):
    """Transport or node failure on a read or while polling for confirmation."""


class RefreshFailed(CrowdfundError):
    """A read batch failed as a whole. The previous snapshot is still in place."""

    def __init__(self, message: str, errors: list[BaseException] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
