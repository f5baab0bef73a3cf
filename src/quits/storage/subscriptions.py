from __future__ import annotations
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from quits.models import UNKNOWN_PROVIDER, PreviousSubscriptionRecord, ScanResult

@dataclass
class SubscriptionStore:
    # Latest known record per provider (keyed by display name).
    subscriptions: Dict[str, PreviousSubscriptionRecord] = field(default_factory=dict)
    # Append-only log of detected price changes.
    price_history: List[Dict[str, Any]] = field(default_factory=list)
    scans: int = 0

    def previous(self, provider: str) -> Optional[PreviousSubscriptionRecord]:
        # The catch-all name groups unrelated senders, so it has no history.
        if provider == UNKNOWN_PROVIDER:
            return None
        return self.subscriptions.get(provider)

    def apply_scan(self, result: ScanResult, recorded_at: str) -> None:
        for sub in result.subscriptions:
            if sub.provider == UNKNOWN_PROVIDER:
                continue
            known = self.subscriptions.get(sub.provider)
            # A later email without a price must not erase a known price.
            price = sub.known_price if sub.known_price is not None else (known.price if known else None)
            self.subscriptions[sub.provider] = PreviousSubscriptionRecord(
                provider=sub.provider,
                price=price,
                term_months=sub.term_months if sub.term_months is not None else (known.term_months if known else None),
                renewal_date=sub.renewal_date or (known.renewal_date if known else None),
                frequency=sub.frequency,
            )
        for change in result.price_changes:
            entry = change.to_dict()
            entry["created_at"] = recorded_at
            self.price_history.append(entry)
        self.scans += 1

def load_store(path: Path) -> SubscriptionStore:
    if not path.exists():
        return SubscriptionStore()
    data = json.loads(path.read_text(encoding="utf-8"))
    # Keep load resilient to legacy/extra fields.
    raw_subs = data.get("subscriptions") or {}
    if isinstance(raw_subs, list):
        # Legacy: a plain list of rows as exported from the hosted database.
        raw_subs = {row.get("provider"): row for row in raw_subs if row.get("provider")}
    return SubscriptionStore(
        subscriptions={
            provider: PreviousSubscriptionRecord.from_dict({**row, "provider": provider})
            for provider, row in raw_subs.items()
        },
        # Backward compatibility: keep reading the camelCase key if present.
        price_history=list(data.get("price_history") or data.get("priceHistory") or []),
        scans=int(data.get("scans") or 0),
    )

def save_store(path: Path, store: SubscriptionStore) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "subscriptions": {p: r.to_dict() for p, r in sorted(store.subscriptions.items())},
        "price_history": store.price_history,
        "scans": store.scans,
    }
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
