"""JSON-serializable dashboard view for presentation clients."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from crowdfund_client.models.results import OperationStatus
from crowdfund_client.models.state import ContractSnapshot, PendingOperation, Session
from crowdfund_client.sync.derived import derive, shorten_address
from crowdfund_client.units import format_amount


@dataclass
class CampaignView:
    goal: str  # "10.0 CFT"
    total_funded: str
    progress_percent: float
    progress_label: str  # "25.0%"
    band: str
    bar_width: float
    is_active: bool
    status_label: str  # "Active" | "Stopped"
    seconds_remaining: int
    time_left: str  # "5h 12m" | "Ended"
    owner: str
    version: int


@dataclass
class AccountView:
    address: str | None
    short_address: str
    is_owner: bool
    balance: str
    balance_address: str | None


@dataclass
class DashboardView:
    """Everything a UI needs to render one frame."""

    connected: bool
    pending: str
    account: AccountView
    campaign: CampaignView | None = None
    status_message: str = ""
    status_kind: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def build_dashboard(
    snapshot: ContractSnapshot | None,
    session: Session,
    status: OperationStatus | None = None,
    pending: PendingOperation = PendingOperation.NONE,
    symbol: str = "CFT",
    now: float | None = None,
) -> DashboardView:
    campaign = None
    if snapshot is not None:
        d = derive(snapshot, session, now)
        campaign = CampaignView(
            goal=format_amount(snapshot.goal_amount, symbol),
            total_funded=format_amount(snapshot.total_funded, symbol),
            progress_percent=d.progress_percent,
            progress_label=f"{d.progress_percent:.1f}%",
            band=d.band.value,
            bar_width=d.bar_width,
            is_active=d.is_active,
            status_label="Active" if d.is_active else "Stopped",
            seconds_remaining=d.seconds_remaining,
            time_left=d.time_left,
            owner=snapshot.owner_address,
            version=snapshot.version,
        )

    return DashboardView(
        connected=session.connected,
        pending=pending.value,
        account=AccountView(
            address=session.account,
            short_address=shorten_address(session.account),
            is_owner=session.is_owner,
            balance=format_amount(session.caller_balance, symbol),
            balance_address=session.balance_address,
        ),
        campaign=campaign,
        status_message=status.message if status else "",
        status_kind=status.kind.value if status and status.kind else None,
    )
