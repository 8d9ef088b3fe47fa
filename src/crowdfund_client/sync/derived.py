"""Derived-state calculator - pure functions over the latest snapshot."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from enum import Enum

from crowdfund_client.models.state import ContractSnapshot, Session

# Progress band boundaries, shared with the presentation layer
NEARLY_FUNDED_THRESHOLD = 80.0
GOAL_REACHED_THRESHOLD = 100.0


class ProgressBand(str, Enum):
    ON_TRACK = "on_track"  # below NEARLY_FUNDED_THRESHOLD
    NEARLY_FUNDED = "nearly_funded"
    GOAL_REACHED = "goal_reached"  # at or above GOAL_REACHED_THRESHOLD


def progress_percent(snapshot: ContractSnapshot) -> float:
    """Funded share of the goal in percent. A zero goal reads as 0%.

    Not capped: the contract may accept funds past the goal.
    """
    if snapshot.goal_amount <= 0:
        return 0.0
    return snapshot.total_funded / snapshot.goal_amount * 100


def seconds_remaining(snapshot: ContractSnapshot, now: float | None = None) -> int:
    """Seconds until end_time, never negative. Independent of is_started."""
    if now is None:
        now = time.time()
    return max(0, int(snapshot.end_time - now))


def format_time_left(seconds: int) -> str:
    if seconds <= 0:
        return "Ended"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


def progress_band(percent: float) -> ProgressBand:
    if percent < NEARLY_FUNDED_THRESHOLD:
        return ProgressBand.ON_TRACK
    if percent < GOAL_REACHED_THRESHOLD:
        return ProgressBand.NEARLY_FUNDED
    return ProgressBand.GOAL_REACHED


def bar_width(percent: float) -> float:
    """Progress clamped to [0, 100] for bar rendering."""
    return min(max(percent, 0.0), 100.0)


def shorten_address(address: str | None) -> str:
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"


@dataclass(frozen=True)
class DerivedState:
    progress_percent: float
    band: ProgressBand
    bar_width: float
    seconds_remaining: int
    time_left: str
    is_active: bool
    is_owner: bool

    def to_dict(self) -> dict:
        return asdict(self)


def derive(
    snapshot: ContractSnapshot, session: Session | None = None, now: float | None = None
) -> DerivedState:
    pct = progress_percent(snapshot)
    remaining = seconds_remaining(snapshot, now)
    return DerivedState(
        progress_percent=pct,
        band=progress_band(pct),
        bar_width=bar_width(pct),
        seconds_remaining=remaining,
        time_left=format_time_left(remaining),
        is_active=snapshot.is_started,
        is_owner=bool(session and session.is_owner),
    )
