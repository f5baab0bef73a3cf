from __future__ import annotations

from typing import Optional

from quits.models import ExtractedSubscription, PreviousSubscriptionRecord, PriceChange


def detect_price_change(
    extracted: ExtractedSubscription,
    previous: Optional[PreviousSubscriptionRecord],
) -> Optional[PriceChange]:
    """
    Compare a fresh extraction against the stored record for the same provider.

    Only emails carrying price-increase language are diffed, so a quiet price
    drop in a plain receipt is never reported here.
    """
    new_price = extracted.known_price
    if new_price is None or not extracted.is_price_increase:
        return None
    # No history, or a zero price that cannot anchor a percentage.
    if previous is None or not previous.price:
        return None
    if previous.price == new_price:
        return None

    change = new_price - previous.price
    return PriceChange(
        provider=extracted.provider,
        old_price=previous.price,
        new_price=new_price,
        change=change,
        percentage_change=change / previous.price * 100,
        term_months=extracted.term_months if extracted.term_months is not None else previous.term_months,
        renewal_date=extracted.renewal_date if extracted.renewal_date is not None else previous.renewal_date,
    )
