"""
Money Services - reporting, live prices and the command surface.

Services:
    - reporting: ReportAggregator, every derived view
    - price_source: PriceSource interface and the httpx-backed client
    - price_refresh: SAVEPOINT-per-item price refresh sweep
    - commands: TrackerCommands, one method per command
"""

from money_services.commands import CommandResult, CommandStatus, TrackerCommands
from money_services.price_refresh import PriceRefreshSweep, RefreshItemResult, RefreshResult
from money_services.price_source import HttpPriceSource, PriceSource
from money_services.reporting import DashboardData, ReportAggregator

__all__ = [
    "CommandResult",
    "CommandStatus",
    "DashboardData",
    "HttpPriceSource",
    "PriceRefreshSweep",
    "PriceSource",
    "RefreshItemResult",
    "RefreshResult",
    "ReportAggregator",
    "TrackerCommands",
]
