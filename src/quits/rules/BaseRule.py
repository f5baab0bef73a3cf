from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence


class BaseRule(ABC):
    """
    Base class for all field rules.

    Each rule looks at the lowercased subject+snippet text and either returns
    a value for one ClassifiedFields attribute or None when it does not apply.
    Probes are independent: several may match the same text.
    """

    # Human-/debug-friendly unique name
    name: str = "base_rule"

    # Higher runs earlier; for a shared field the earlier rule wins
    priority: int = 0

    # ClassifiedFields attribute this rule fills
    field: str = ""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, priority={self.priority}, field={self.field!r})"

    # --- Helpers (None-safe, case-insensitive) ---

    def norm(self, s: str | None) -> str:
        """Normalize text for matching (None-safe, lowercased)."""
        return (s or "").lower()

    def contains_any(self, text: str | None, needles: Sequence[str]) -> bool:
        """True if any needle is a substring of text (case-insensitive)."""
        t = self.norm(text)
        return any(n.lower() in t for n in needles)

    def search(self, text: str | None, pattern: str) -> Optional["re.Match[str]"]:
        """Regex search on text (case-insensitive)."""
        return re.search(pattern, self.norm(text), flags=re.IGNORECASE)

    # --- Rule API ---

    @abstractmethod
    def match(self, text: str) -> Optional[Any]:
        """Return the extracted value, or None when the rule does not apply."""
        raise NotImplementedError
