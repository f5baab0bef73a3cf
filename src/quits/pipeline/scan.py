from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from quits.models import ExtractedSubscription, PreviousSubscriptionRecord, PriceChange, RawEmail, ScanResult
from quits.pipeline.orchestrator import SubscriptionExtractor
from quits.pipeline.price_changes import detect_price_change

logger = logging.getLogger(__name__)

PreviousLookup = Callable[[str], Optional[PreviousSubscriptionRecord]]


def _no_history(_provider: str) -> Optional[PreviousSubscriptionRecord]:
    return None


@dataclass(frozen=True)
class ScanOrchestrator:
    extractor: SubscriptionExtractor = field(default_factory=SubscriptionExtractor)

    def scan(
        self,
        emails: Iterable[RawEmail],
        lookup_previous: PreviousLookup = _no_history,
    ) -> ScanResult:
        """
        Extract one subscription per provider and diff it against stored history.

        The first email seen for a provider wins; later emails for the same
        provider in this batch are dropped, not merged.
        """
        by_provider: Dict[str, ExtractedSubscription] = {}
        for email in emails:
            extracted = self.extractor.extract(email)
            kept = by_provider.get(extracted.provider)
            if kept is not None:
                logger.debug(
                    "dropping email %s for %s, already have %s",
                    email.id, extracted.provider, kept.email_id,
                )
                continue
            by_provider[extracted.provider] = extracted

        price_changes: List[PriceChange] = []
        for provider, extracted in by_provider.items():
            change = detect_price_change(extracted, lookup_previous(provider))
            if change is not None:
                price_changes.append(change)

        return ScanResult(subscriptions=list(by_provider.values()), price_changes=price_changes)


def scan_emails(
    emails: Iterable[RawEmail],
    lookup_previous: PreviousLookup = _no_history,
) -> ScanResult:
    return ScanOrchestrator().scan(emails, lookup_previous)
