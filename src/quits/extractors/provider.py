from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from quits.models import UNKNOWN_PROVIDER
from quits.rules.core import PatternRule, first_match

# Keys match whole words only, so compound brand domains get their own key.
# Order matters: the first key found in the text wins, so specific keys come first.
DEFAULT_PROVIDERS: Mapping[str, str] = MappingProxyType({
    "netflix": "Netflix",
    "spotify": "Spotify",
    "youtube": "YouTube Premium",
    "amazon prime": "Amazon Prime",
    "primevideo": "Amazon Prime",
    "amazon": "Amazon Prime",
    "audible": "Audible",
    "kindle": "Kindle Unlimited",
    "hbomax": "HBO Max",
    "hbo": "HBO Max",
    "disneyplus": "Disney+",
    "disney": "Disney+",
    "hulu": "Hulu",
    "paramountplus": "Paramount+",
    "paramount": "Paramount+",
    "peacocktv": "Peacock",
    "peacock": "Peacock",
    "crunchyroll": "Crunchyroll",
    "dazn": "DAZN",
    "deezer": "Deezer",
    "tidal": "Tidal",
    "apple music": "Apple Music",
    "icloud": "iCloud+",
    "apple": "Apple",
    "adobe": "Adobe",
    "microsoft": "Microsoft 365",
    "dropbox": "Dropbox",
    "babbel": "Babbel",
    "duolingo": "Duolingo",
    "headspace": "Headspace",
    "notion": "Notion",
    "slack": "Slack",
    "canva": "Canva",
    "github": "GitHub",
    "linkedin": "LinkedIn Premium",
    "openai": "ChatGPT Plus",
    "chatgpt": "ChatGPT Plus",
    "grammarly": "Grammarly",
    "evernote": "Evernote",
    "nordvpn": "NordVPN",
    "expressvpn": "ExpressVPN",
    "1password": "1Password",
    "lastpass": "LastPass",
    "patreon": "Patreon",
    "twitch": "Twitch",
    "playstation": "PlayStation Plus",
    "xbox": "Xbox Game Pass",
    "nintendo": "Nintendo Switch Online",
    "strava": "Strava",
    "peloton": "Peloton",
})

GENERIC_SENDERS: Tuple[str, ...] = (
    "noreply",
    "no-reply",
    "notify",
    "notifications",
    "info",
    "support",
    "billing",
)

# Leading labels that say nothing about the sender ("mail.acme.com" -> "acme").
MAIL_SUBDOMAINS: Tuple[str, ...] = ("mail", "email", "e", "em", "news", "mailer", "notifications", "www")

ADDRESS_RE = re.compile(r"([A-Za-z0-9._%+-]+)@([A-Za-z0-9._-]+\.[A-Za-z]{2,})")

DISPLAY_NAME_RULES: Tuple[PatternRule[str], ...] = (
    PatternRule("double_quoted", re.compile(r'"\s*([^"]{3,}?)\s*"'), lambda m: m.group(1)),
    PatternRule("single_quoted", re.compile(r"'\s*([^']{3,}?)\s*'"), lambda m: m.group(1)),
    PatternRule("angle_prefix", re.compile(r"^\s*([^<>\"'\[\]()]{3,}?)\s*<[^>]*>"), lambda m: m.group(1)),
    PatternRule("bracketed", re.compile(r"\[\s*([^\]]{3,}?)\s*\]"), lambda m: m.group(1)),
    PatternRule("parenthesized", re.compile(r"\(\s*([^)]{3,}?)\s*\)"), lambda m: m.group(1)),
)


@dataclass(frozen=True)
class ProviderNormalizer:
    """Map sender or subject text to a canonical provider name."""

    # mappingproxy is unhashable, so dataclasses rejects it as a plain default.
    known_providers: Mapping[str, str] = field(default_factory=lambda: DEFAULT_PROVIDERS)
    generic_senders: Tuple[str, ...] = GENERIC_SENDERS
    fallback: str = UNKNOWN_PROVIDER

    def match_known(self, text: str | None) -> Optional[str]:
        """Dictionary lookup only: first known key found as a whole word in text."""
        t = (text or "").lower()
        if not t:
            return None
        for key, display in self.known_providers.items():
            # "canva" must not fire inside "canvas" nor "apple" inside "pineapple".
            if re.search(rf"\b{re.escape(key)}\b", t):
                return display
        return None

    def normalize(self, raw: str | None) -> str:
        text = (raw or "").strip()
        if not text:
            return self.fallback

        known = self.match_known(text)
        if known:
            return known

        address = ADDRESS_RE.search(text)
        token = _domain_token(address.group(2)) if address else None
        if token:
            known = self.match_known(token)
            if known:
                return known
            if address.group(1).lower() in self.generic_senders:
                return _title_from_token(token)

        display = first_match(DISPLAY_NAME_RULES, text)
        if display and "@" not in display:
            return display

        if token:
            return _title_from_token(token)
        return self.fallback


def _domain_token(domain: str) -> Optional[str]:
    labels = [label for label in domain.lower().split(".") if label]
    # Drop the TLD, then any leading mail-only subdomains.
    labels = labels[:-1]
    while len(labels) > 1 and labels[0] in MAIL_SUBDOMAINS:
        labels = labels[1:]
    return labels[0] if labels else None


def _title_from_token(token: str) -> str:
    parts = [p for p in re.split(r"[-_.]+", token) if p]
    return " ".join(p[:1].upper() + p[1:] for p in parts) or UNKNOWN_PROVIDER


def normalize_provider(raw: str | None) -> str:
    return ProviderNormalizer().normalize(raw)
