from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from quits.rules.core import PatternRule, first_match, parse_amount


def _per_month(m: "re.Match[str]") -> Optional[float]:
    amount = parse_amount(m.group(1))
    months = int(m.group(2))
    if amount is None or months <= 0:
        return None
    return round(amount / months, 2)


def _joined_decimal(m: "re.Match[str]") -> Optional[float]:
    return parse_amount(f"{m.group(1)}.{m.group(2)}")


# Most specific first: a bare symbol match would otherwise grab the amount of "€32.97/3 months".
DEFAULT_PRICE_RULES: Tuple[PatternRule[float], ...] = (
    PatternRule(
        "amount_per_months",
        re.compile(r"[$€£]\s*(\d+[.,]\d+)\s*/\s*(\d{1,3})\s*months?", re.IGNORECASE),
        _per_month,
    ),
    PatternRule("symbol_before", re.compile(r"[$€£]\s*(\d+[.,]?\d*)"), lambda m: parse_amount(m.group(1))),
    # Amounts before the symbol start at the head of a digit run; long runs scan once.
    PatternRule(
        "symbol_after",
        re.compile(r"(?<![\d.,])(\d+(?:[.,]\d+)?)\s*[$€£]"),
        lambda m: parse_amount(m.group(1)),
    ),
    PatternRule("euro_comma_decimal", re.compile(r"(?<!\d)(\d+),(\d+)\s*€"), _joined_decimal),
)


@dataclass(frozen=True)
class PriceExtractor:
    rules: Tuple[PatternRule[float], ...] = DEFAULT_PRICE_RULES

    def extract(self, text: str | None) -> Optional[float]:
        """Return the first amount found, as a monthly equivalent when a period is stated."""
        return first_match(self.rules, text or "")


def extract_price(text: str | None) -> Optional[float]:
    return PriceExtractor().extract(text)
