from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from quits.models import RawEmail
from quits.rules.core import parse_amount

APPLE_SENDER_MARKERS: Tuple[str, ...] = ("apple.com", "itunes.com")
APPLE_SUBJECT_MARKERS: Tuple[str, ...] = ("app store", "receipt from apple", "apple receipt", "apple subscription")

# "App Store subscription" names the store, not an app.
APP_NAME_RE = re.compile(r"\bApp\s+(?!Store\b)(.{1,60}?)\s+Subscription\b", re.IGNORECASE)
EURO_PERIOD_RE = re.compile(r"€\s*(\d+[.,]\d{2})\s*/\s*(\d{1,3})\s*months?", re.IGNORECASE)


@dataclass(frozen=True)
class ApplePrice:
    price: float
    period_months: int


def is_apple_receipt(email: RawEmail) -> bool:
    sender = (email.from_email or "").lower()
    subject = (email.subject or "").lower()
    return any(m in sender for m in APPLE_SENDER_MARKERS) or any(m in subject for m in APPLE_SUBJECT_MARKERS)


def apple_app_name(text: str) -> Optional[str]:
    if "babbel" in (text or "").lower():
        return "Babbel"
    m = APP_NAME_RE.search(text or "")
    if not m:
        return None
    return m.group(1).strip() or None


def apple_price(text: str) -> Optional[ApplePrice]:
    """
    Euro receipts state "€X.XX/N months". The price is X/N for N > 1.
    N == 1 yields 0.0; kept as observed in production receipts, pending product review.
    """
    m = EURO_PERIOD_RE.search(text or "")
    if not m:
        return None
    amount = parse_amount(m.group(1))
    months = int(m.group(2))
    if amount is None or months <= 0:
        return None
    if months > 1:
        return ApplePrice(price=round(amount / months, 2), period_months=months)
    return ApplePrice(price=0.0, period_months=months)
