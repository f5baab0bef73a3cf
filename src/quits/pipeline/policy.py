from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Literal, Optional, Union

from dateutil import parser as date_parser

from quits.models import ExtractedSubscription, PreviousSubscriptionRecord, PriceChange

NotificationType = Literal["price_increase", "renewal_reminder"]
SubscriptionLike = Union[ExtractedSubscription, PreviousSubscriptionRecord]


@dataclass(frozen=True)
class NotificationSettings:
    # Minimum absolute percentage change worth an alert.
    price_change_threshold: float = 5.0
    renewal_reminder_days: int = 7


@dataclass(frozen=True)
class Notification:
    type: NotificationType
    provider: str
    old_price: Optional[float] = None
    new_price: Optional[float] = None
    percentage_change: Optional[float] = None
    price: Optional[float] = None
    frequency: Optional[str] = None
    renewal_date: Optional[str] = None
    term_months: Optional[int] = None
    days_until_renewal: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.type == "price_increase":
            return {
                "type": self.type,
                "provider": self.provider,
                "oldPrice": self.old_price,
                "newPrice": self.new_price,
                "percentageChange": self.percentage_change,
                "renewal_date": self.renewal_date,
                "term_months": self.term_months,
            }
        return {
            "type": self.type,
            "provider": self.provider,
            "renewal_date": self.renewal_date,
            "days_until_renewal": self.days_until_renewal,
            "price": self.price,
            "frequency": self.frequency,
        }


def days_until(renewal_date: Optional[str], today: date) -> Optional[int]:
    if not renewal_date:
        return None
    try:
        parsed = date_parser.isoparse(renewal_date)
    except (ValueError, OverflowError):
        return None
    return (parsed.date() - today).days


def notifications_for(
    price_changes: Iterable[PriceChange],
    subscriptions: Iterable[SubscriptionLike],
    settings: NotificationSettings,
    today: date,
) -> List[Notification]:
    # Policy layer decides what is worth telling the user; delivery happens elsewhere.
    notifications: List[Notification] = []

    for change in price_changes:
        if abs(change.percentage_change) < settings.price_change_threshold:
            continue
        notifications.append(
            Notification(
                type="price_increase",
                provider=change.provider,
                old_price=change.old_price,
                new_price=change.new_price,
                percentage_change=change.percentage_change,
                renewal_date=change.renewal_date,
                term_months=change.term_months,
            )
        )

    for sub in subscriptions:
        remaining = days_until(sub.renewal_date, today)
        if remaining is None or remaining != settings.renewal_reminder_days:
            continue
        notifications.append(
            Notification(
                type="renewal_reminder",
                provider=sub.provider,
                price=sub.price,
                frequency=sub.frequency,
                renewal_date=sub.renewal_date,
                days_until_renewal=remaining,
            )
        )

    return notifications
