"""Synthetic state factories for testing."""

from __future__ import annotations

from crowdfund_client.models.state import ContractSnapshot, Session

from tests.mocks import FUNDER, OWNER, TOKEN


def make_snapshot(
    goal_amount: int = 1000 * TOKEN,
    total_funded: int = 0,
    end_time: int = 2_000_000_000,
    is_started: bool = True,
    owner_address: str = OWNER,
    version: int = 1,
) -> ContractSnapshot:
    return ContractSnapshot(
        goal_amount=goal_amount,
        total_funded=total_funded,
        end_time=end_time,
        is_started=is_started,
        owner_address=owner_address,
        version=version,
        fetched_at=1_700_000_000.0,
    )


def make_session(
    account: str | None = FUNDER,
    is_owner: bool = False,
    caller_balance: int = 0,
) -> Session:
    return Session(
        account=account,
        is_owner=is_owner,
        caller_balance=caller_balance,
        balance_address=account,
        version=1,
    )
