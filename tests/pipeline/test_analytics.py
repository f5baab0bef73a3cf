from __future__ import annotations

from datetime import date

import pytest

from quits.models import PreviousSubscriptionRecord
from quits.pipeline.analytics import summarize_spend


def test_totals_and_upcoming_renewals() -> None:
    subs = [
        PreviousSubscriptionRecord(provider="Netflix", price=15.99, renewal_date="2025-01-20"),
        PreviousSubscriptionRecord(provider="Adobe", price=120.0, frequency="yearly", renewal_date="2025-01-12"),
        PreviousSubscriptionRecord(provider="Hulu", price=None, renewal_date="2025-01-01"),
    ]

    summary = summarize_spend(subs, date(2025, 1, 10))

    assert summary.subscriptions == 3
    assert summary.monthly_total == pytest.approx(15.99)
    assert summary.yearly_total == pytest.approx(120.0 + 15.99 * 12)
    assert [r.provider for r in summary.upcoming_renewals] == ["Adobe", "Netflix"]
    assert summary.to_dict()["upcomingRenewals"][0]["daysUntilRenewal"] == 2


def test_upcoming_renewals_are_capped_at_five() -> None:
    subs = [
        PreviousSubscriptionRecord(provider=f"P{i}", price=1.0, renewal_date=f"2025-02-{i + 1:02d}")
        for i in range(8)
    ]

    summary = summarize_spend(subs, date(2025, 1, 10))

    assert [r.provider for r in summary.upcoming_renewals] == ["P0", "P1", "P2", "P3", "P4"]
