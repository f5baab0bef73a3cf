from __future__ import annotations

from typing import Optional

from dateutil import parser as date_parser

from quits.rules.BaseRule import BaseRule


class RenewalConfirmationRule(BaseRule):
    name = "renewal_confirmation"
    priority = 100
    field = "type"

    PATTERN = (
        r"renewal confirmation|subscription renewal|your subscription will renew"
        r"|renewal notice|renewal reminder"
    )

    def match(self, text: str) -> Optional[str]:
        return "renewal_confirmation" if self.search(text, self.PATTERN) else None


class PaymentReceiptRule(BaseRule):
    name = "payment_receipt"
    priority = 80
    field = "type"

    PHRASES = (
        "payment receipt",
        "your receipt",
        "payment confirmation",
        "payment received",
        "thanks for your payment",
        "thank you for your payment",
        "invoice",
    )

    def match(self, text: str) -> Optional[str]:
        return "payment_receipt" if self.contains_any(text, self.PHRASES) else None


class PriceIncreaseRule(BaseRule):
    name = "price_increase"
    priority = 60
    field = "is_price_increase"

    PATTERN = (
        r"price increase|rate increase|new rate|new price|price change|rate change"
        r"|price adjustment|rate adjustment"
    )

    def match(self, text: str) -> Optional[bool]:
        return True if self.search(text, self.PATTERN) else None


class RenewalDateRule(BaseRule):
    name = "renewal_date"
    priority = 50
    field = "renewal_date"

    PATTERN = (
        r"(?:renewal|next billing|next payment) (?:date|on|at):?\s*"
        r"(\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4}"
        r"|\d{1,2}\s+(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+\d{2,4})"
    )

    def match(self, text: str) -> Optional[str]:
        m = self.search(text, self.PATTERN)
        if not m:
            return None
        try:
            parsed = date_parser.parse(m.group(1), dayfirst=True)
        except (ValueError, OverflowError):
            return None
        return parsed.date().isoformat()


class TermLengthRule(BaseRule):
    name = "term_length"
    priority = 40
    field = "term_months"

    PATTERN = r"\b(?:term|duration|period)\s+(?:of\s+)?(\d{1,3})\s*(year|month|yr|mo)"

    def match(self, text: str) -> Optional[int]:
        m = self.search(text, self.PATTERN)
        if not m:
            return None
        count = int(m.group(1))
        if count <= 0:
            return None
        return count * (12 if m.group(2).startswith("y") else 1)
