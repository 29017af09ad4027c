"""
Aggregates shown on the dashboard: search, upcoming renewals and revenue.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional

from clientdash.sdk.models import ClientRecord

RENEWAL_WINDOW_DAYS = 30


@dataclass(frozen=True)
class DashboardSummary:
    total_clients: int
    upcoming_renewals: int
    total_revenue: float


def filter_clients(clients: Iterable[ClientRecord], term: str) -> List[ClientRecord]:
    """Case-insensitive match of ``term`` against name, email or company."""
    term = (term or "").strip().lower()
    if not term:
        return list(clients)
    return [
        client for client in clients
        if term in client.name.lower()
        or term in client.email.lower()
        or term in client.company.lower()
    ]


def is_upcoming(client: ClientRecord, today: Optional[date] = None,
                window_days: int = RENEWAL_WINDOW_DAYS) -> bool:
    """True when the renewal falls before the end of the window, overdue included."""
    today = today or date.today()
    return client.subscription_renewal_date <= today + timedelta(days=window_days)


def upcoming_renewals(clients: Iterable[ClientRecord], today: Optional[date] = None,
                      window_days: int = RENEWAL_WINDOW_DAYS) -> List[ClientRecord]:
    """Clients renewing between today and ``today + window_days``, both inclusive."""
    today = today or date.today()
    horizon = today + timedelta(days=window_days)
    return [
        client for client in clients
        if today <= client.subscription_renewal_date <= horizon
    ]


def total_revenue(clients: Iterable[ClientRecord]) -> float:
    return sum(client.subscription_amount for client in clients)


def summarize(clients: Iterable[ClientRecord], today: Optional[date] = None) -> DashboardSummary:
    clients = list(clients)
    return DashboardSummary(
        total_clients=len(clients),
        upcoming_renewals=len(upcoming_renewals(clients, today)),
        total_revenue=total_revenue(clients),
    )
