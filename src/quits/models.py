from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional

Frequency = Literal["monthly", "yearly"]
ExtractionVariant = Literal["generic", "apple"]

UNKNOWN_PROVIDER = "Unknown Service"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class RawEmail:
    id: str
    subject: str = ""
    from_email: str = ""
    date: str = ""
    snippet: str = ""

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "RawEmail":
        # Accept both the wire key "from" and the attribute name.
        return RawEmail(
            id=_text(data.get("id")),
            subject=_text(data.get("subject")),
            from_email=_text(data.get("from", data.get("from_email"))),
            date=_text(data.get("date")),
            snippet=_text(data.get("snippet")),
        )


@dataclass(frozen=True)
class ClassifiedFields:
    type: Optional[str] = None
    renewal_date: Optional[str] = None
    term_months: Optional[int] = None
    is_price_increase: bool = False


@dataclass(frozen=True)
class ExtractedSubscription:
    provider: str
    email_id: str
    last_detected_date: str
    price: Optional[float] = None
    frequency: Frequency = "monthly"
    renewal_date: Optional[str] = None
    term_months: Optional[int] = None
    is_price_increase: bool = False
    type: Optional[str] = None
    variant: ExtractionVariant = "generic"

    @property
    def known_price(self) -> Optional[float]:
        # Single-month Apple receipts report 0.0, which carries no price.
        if self.variant == "apple" and self.price == 0.0:
            return None
        return self.price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "price": self.price,
            "frequency": self.frequency,
            "renewal_date": self.renewal_date,
            "term_months": self.term_months,
            "is_price_increase": self.is_price_increase,
            "type": self.type,
            "lastDetectedDate": self.last_detected_date,
            "email_id": self.email_id,
        }


@dataclass(frozen=True)
class PreviousSubscriptionRecord:
    provider: str
    price: Optional[float] = None
    term_months: Optional[int] = None
    renewal_date: Optional[str] = None
    frequency: Frequency = "monthly"

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "PreviousSubscriptionRecord":
        price = data.get("price")
        term = data.get("term_months")
        frequency = data.get("frequency")
        return PreviousSubscriptionRecord(
            provider=_text(data.get("provider")),
            price=float(price) if price is not None else None,
            term_months=int(term) if term is not None else None,
            renewal_date=data.get("renewal_date") or None,
            frequency="yearly" if frequency == "yearly" else "monthly",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "price": self.price,
            "term_months": self.term_months,
            "renewal_date": self.renewal_date,
            "frequency": self.frequency,
        }


@dataclass(frozen=True)
class PriceChange:
    provider: str
    old_price: float
    new_price: float
    change: float
    percentage_change: float
    term_months: Optional[int] = None
    renewal_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "oldPrice": self.old_price,
            "newPrice": self.new_price,
            "change": self.change,
            "percentageChange": self.percentage_change,
            "term_months": self.term_months,
            "renewal_date": self.renewal_date,
        }


@dataclass(frozen=True)
class ScanResult:
    subscriptions: List[ExtractedSubscription] = field(default_factory=list)
    price_changes: List[PriceChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subscriptions": [s.to_dict() for s in self.subscriptions],
            "priceChanges": [c.to_dict() for c in self.price_changes],
        }
