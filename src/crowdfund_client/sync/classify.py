"""Revert reason classification - maps contract wording to friendly kinds."""

from __future__ import annotations

from crowdfund_client.models.results import RevertClassification, RevertKind

# (phrase, kind, message). First match wins; matching is case-insensitive.
REVERT_TABLE: tuple[tuple[str, RevertKind, str], ...] = (
    ("not allowed", RevertKind.OWNER_ONLY, "Only the owner can do this"),
    ("goal", RevertKind.GOAL_REACHED, "Goal reached"),
    ("stopped", RevertKind.FUNDING_STOPPED, "Funding ended"),
)


def classify_revert(reason: str) -> RevertClassification:
    """Classify a raw revert reason. Unknown wording is UNCLASSIFIED with the raw text."""
    text = (reason or "").casefold()
    for phrase, kind, message in REVERT_TABLE:
        if phrase in text:
            return RevertClassification(kind=kind, message=message, raw_reason=reason)
    return RevertClassification(
        kind=RevertKind.UNCLASSIFIED,
        message=reason or "Transaction reverted",
        raw_reason=reason,
    )
