from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List

from quits.pipeline.policy import SubscriptionLike, days_until

UPCOMING_RENEWALS_LIMIT = 5


@dataclass(frozen=True)
class UpcomingRenewal:
    provider: str
    renewal_date: str
    days_until_renewal: int
    price: float | None = None
    frequency: str = "monthly"


@dataclass(frozen=True)
class SpendSummary:
    subscriptions: int
    monthly_total: float
    yearly_total: float
    upcoming_renewals: List[UpcomingRenewal] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subscriptions": self.subscriptions,
            "monthlyTotal": self.monthly_total,
            "yearlyTotal": self.yearly_total,
            "upcomingRenewals": [
                {
                    "provider": r.provider,
                    "renewal_date": r.renewal_date,
                    "daysUntilRenewal": r.days_until_renewal,
                    "price": r.price,
                    "frequency": r.frequency,
                }
                for r in self.upcoming_renewals
            ],
        }


def summarize_spend(subscriptions: Iterable[SubscriptionLike], today: date) -> SpendSummary:
    """
    Monthly total counts monthly plans only; yearly total is yearly plans plus
    twelve times every monthly plan.
    """
    subs = list(subscriptions)
    monthly_total = sum(s.price or 0.0 for s in subs if s.frequency == "monthly")
    yearly_total = sum(
        (s.price or 0.0) if s.frequency == "yearly" else (s.price or 0.0) * 12
        for s in subs
    )

    upcoming: List[UpcomingRenewal] = []
    for s in subs:
        remaining = days_until(s.renewal_date, today)
        if remaining is None or remaining <= 0:
            continue
        upcoming.append(
            UpcomingRenewal(
                provider=s.provider,
                renewal_date=s.renewal_date or "",
                days_until_renewal=remaining,
                price=s.price,
                frequency=s.frequency,
            )
        )
    upcoming.sort(key=lambda r: r.days_until_renewal)

    return SpendSummary(
        subscriptions=len(subs),
        monthly_total=round(monthly_total, 2),
        yearly_total=round(yearly_total, 2),
        upcoming_renewals=upcoming[:UPCOMING_RENEWALS_LIMIT],
    )
