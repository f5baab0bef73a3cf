from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from quits.extractors.apple import apple_app_name, apple_price, is_apple_receipt
from quits.extractors.price import PriceExtractor
from quits.extractors.provider import ProviderNormalizer
from quits.models import (
    UNKNOWN_PROVIDER,
    ClassifiedFields,
    ExtractedSubscription,
    ExtractionVariant,
    Frequency,
    RawEmail,
)
from quits.rules.classification import FieldClassifier


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def derive_frequency(term_months: Optional[int], text: str) -> Frequency:
    if term_months:
        return "yearly" if term_months > 12 else "monthly"
    t = (text or "").lower()
    if "yearly" in t or "annual" in t:
        return "yearly"
    return "monthly"


@dataclass(frozen=True)
class SubscriptionExtractor:
    normalizer: ProviderNormalizer = field(default_factory=ProviderNormalizer)
    prices: PriceExtractor = field(default_factory=PriceExtractor)
    classifier: FieldClassifier = field(default_factory=FieldClassifier)
    clock: Callable[[], datetime] = _utcnow

    def variant_for(self, email: RawEmail) -> ExtractionVariant:
        return "apple" if is_apple_receipt(email) else "generic"

    def extract(self, email: RawEmail) -> ExtractedSubscription:
        # Pick the path once; the apple path replaces the generic one entirely.
        variant = self.variant_for(email)
        text = f"{email.subject or ''} {email.snippet or ''}"
        fields = self.classifier.classify(email.subject, email.snippet)
        detected_at = self.clock().isoformat()

        if variant == "apple":
            return self._extract_apple(email, text, fields, detected_at)
        return self._extract_generic(email, text, fields, detected_at)

    def provider_for(self, email: RawEmail) -> str:
        provider = self.normalizer.normalize(email.from_email)
        if provider == UNKNOWN_PROVIDER:
            provider = self.normalizer.match_known(email.subject) or UNKNOWN_PROVIDER
        return provider

    def _extract_generic(
        self, email: RawEmail, text: str, fields: ClassifiedFields, detected_at: str
    ) -> ExtractedSubscription:
        return ExtractedSubscription(
            provider=self.provider_for(email),
            email_id=email.id,
            last_detected_date=detected_at,
            price=self.prices.extract(text),
            frequency=derive_frequency(fields.term_months, text),
            renewal_date=fields.renewal_date,
            term_months=fields.term_months,
            is_price_increase=fields.is_price_increase,
            type=fields.type,
            variant="generic",
        )

    def _extract_apple(
        self, email: RawEmail, text: str, fields: ClassifiedFields, detected_at: str
    ) -> ExtractedSubscription:
        quoted = apple_price(text)
        term_months = quoted.period_months if quoted else fields.term_months
        return ExtractedSubscription(
            provider=apple_app_name(text) or self.provider_for(email),
            email_id=email.id,
            last_detected_date=detected_at,
            price=quoted.price if quoted else None,
            frequency=derive_frequency(term_months, text),
            renewal_date=fields.renewal_date,
            term_months=term_months,
            is_price_increase=fields.is_price_increase,
            type=fields.type,
            variant="apple",
        )


def extract_subscription(email: RawEmail) -> ExtractedSubscription:
    return SubscriptionExtractor().extract(email)
