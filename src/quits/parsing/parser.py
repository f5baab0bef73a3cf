from __future__ import annotations

import html
from typing import Any, Dict

from quits.models import RawEmail

ENVELOPE_HEADERS = ("Subject", "From", "Date")


def headers_from_payload(payload: dict) -> Dict[str, str]:
    """
    Flatten Gmail payload headers into a dict keyed by lowercased header name.
    The first occurrence of a repeated header wins.
    """
    headers: Dict[str, str] = {}
    for h in payload.get("headers", []) or []:
        name = (h.get("name") or "").lower()
        if name and name not in headers:
            headers[name] = h.get("value") or ""
    return headers


def envelope_from_message(msg: Dict[str, Any]) -> RawEmail:
    """Build a RawEmail from a Gmail message resource (format 'metadata' or 'full')."""
    headers = headers_from_payload(msg.get("payload", {}) or {})
    # Gmail snippets are HTML-escaped ("&#39;", "&amp;").
    snippet = html.unescape(msg.get("snippet", "") or "")
    return RawEmail(
        id=str(msg.get("id", "")),
        subject=headers.get("subject", ""),
        from_email=headers.get("from", ""),
        date=headers.get("date", ""),
        snippet=snippet,
    )
