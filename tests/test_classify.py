"""Revert reason classification."""

from __future__ import annotations

import pytest

from crowdfund_client.models.results import RevertKind
from crowdfund_client.sync.classify import classify_revert


@pytest.mark.parametrize(
    "reason, kind, message",
    [
        ("not allowed", RevertKind.OWNER_ONLY, "Only the owner can do this"),
        ("Error: Caller NOT ALLOWED", RevertKind.OWNER_ONLY, "Only the owner can do this"),
        ("goal already reached", RevertKind.GOAL_REACHED, "Goal reached"),
        ("funding stopped", RevertKind.FUNDING_STOPPED, "Funding ended"),
    ],
)
def test_known_reasons(reason, kind, message):
    c = classify_revert(reason)
    assert c.kind is kind
    assert c.message == message
    assert c.raw_reason == reason


def test_unknown_reason_keeps_raw_text():
    c = classify_revert("HostError: Error(Contract, #7)")
    assert c.kind is RevertKind.UNCLASSIFIED
    assert c.message == "HostError: Error(Contract, #7)"


def test_empty_reason():
    c = classify_revert("")
    assert c.kind is RevertKind.UNCLASSIFIED
    assert c.message == "Transaction reverted"


def test_first_match_wins():
    assert classify_revert("not allowed: goal").kind is RevertKind.OWNER_ONLY
