from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import reduce
from typing import Callable, Generic, Optional, Pattern, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PatternRule(Generic[T]):
    """A regex paired with an extractor. The extractor may still reject a match by returning None."""
    name: str
    pattern: Pattern[str]
    extract: Callable[["re.Match[str]"], Optional[T]]

    def apply(self, text: str) -> Optional[T]:
        m = self.pattern.search(text or "")
        if m is None:
            return None
        return self.extract(m)


def first_match(rules: Sequence[PatternRule[T]], text: str) -> Optional[T]:
    """Fold over rules in order; the first rule that yields a value wins."""
    return reduce(
        lambda found, rule: found if found is not None else rule.apply(text),
        rules,
        None,
    )


def parse_amount(raw: str) -> Optional[float]:
    """Parse '10,99' or '15.99' into a float. Anything unparsable or negative is no match."""
    try:
        value = float(raw.replace(",", "."))
    except (ValueError, AttributeError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value
