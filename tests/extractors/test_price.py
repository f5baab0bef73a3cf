from __future__ import annotations

import re

import pytest

from quits.extractors.price import PriceExtractor, extract_price
from quits.rules.core import PatternRule, first_match


def test_symbol_before_amount() -> None:
    assert extract_price("Your new price is $15.99/month") == 15.99
    assert extract_price("Total: £ 7,50 per month") == 7.5


def test_comma_decimal_euro_after_amount() -> None:
    assert extract_price("Betrag: 10,99 €") == 10.99


def test_amount_over_months_is_monthly_equivalent() -> None:
    assert extract_price("€32.97/3 months") == pytest.approx(10.99)
    assert extract_price("Plan: $59.88 / 12 months") == pytest.approx(4.99)


def test_zero_month_period_is_not_used_as_divisor() -> None:
    # The period rule rejects it, the plain symbol rule still finds the amount.
    assert extract_price("€9.99/0 months") == 9.99


def test_no_amount_returns_none() -> None:
    assert extract_price("Your subscription renews soon") is None
    assert extract_price("") is None
    assert extract_price(None) is None


def test_first_rule_in_order_wins() -> None:
    text = "Was $12.00, now 14,00 €"
    assert extract_price(text) == 12.0

    reversed_rules = tuple(reversed(PriceExtractor().rules))
    assert PriceExtractor(rules=reversed_rules).extract(text) == 14.0


def test_first_match_skips_rules_whose_extractor_rejects() -> None:
    rules = (
        PatternRule("rejects", re.compile(r"(\d+)"), lambda m: None),
        PatternRule("accepts", re.compile(r"(\d+)"), lambda m: int(m.group(1))),
    )
    assert first_match(rules, "order 42") == 42
    assert first_match(rules, "no digits") is None


def test_overlong_period_falls_back_to_plain_amount() -> None:
    assert extract_price("€9.99/" + "9" * 5000 + " months") == 9.99
    assert extract_price("paid " + "9" * 5000 + " points") is None
