from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Tuple

from quits.models import ClassifiedFields
from quits.rules.BaseRule import BaseRule
from quits.rules.builtins import (
    PaymentReceiptRule,
    PriceIncreaseRule,
    RenewalConfirmationRule,
    RenewalDateRule,
    TermLengthRule,
)

logger = logging.getLogger(__name__)

DEFAULT_RULES: Tuple[BaseRule, ...] = (
    RenewalConfirmationRule(),
    PaymentReceiptRule(),
    PriceIncreaseRule(),
    RenewalDateRule(),
    TermLengthRule(),
)


@dataclass(frozen=True)
class FieldClassifier:
    rules: Tuple[BaseRule, ...] = DEFAULT_RULES

    def classify(self, subject: str, snippet: str) -> ClassifiedFields:
        """
        Run every rule over the combined, lowercased subject and snippet.
        A field keeps the value of the first (highest priority) rule that filled it.
        """
        text = f"{subject or ''} {snippet or ''}".lower()
        fields = ClassifiedFields()

        # Higher priority rules win when multiple could match.
        for rule in sorted(self.rules, key=lambda r: r.priority, reverse=True):
            if getattr(fields, rule.field) not in (None, False):
                continue
            value = rule.match(text)
            if value is None:
                continue
            logger.debug("rule %s matched: %s=%r", rule.name, rule.field, value)
            fields = replace(fields, **{rule.field: value})

        return fields


def classify_fields(subject: str, snippet: str) -> ClassifiedFields:
    return FieldClassifier().classify(subject, snippet)
