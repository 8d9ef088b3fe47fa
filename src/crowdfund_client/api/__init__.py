"""API components - subscription bus and dashboard view."""

from crowdfund_client.api.subscriptions import StatusBus
from crowdfund_client.api.view import DashboardView, build_dashboard

__all__ = ["StatusBus", "DashboardView", "build_dashboard"]
