# src/quits/app/run.py
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any, List, Callable

from quits.config.settings import (
    GMAIL_BATCH_SIZE,
    GMAIL_QUERY,
    PRICE_CHANGE_THRESHOLD,
    RENEWAL_REMINDER_DAYS,
    SECRETS_DIR,
)
from quits.gmail.client import GmailClient, GmailClientConfig
from quits.pipeline.analytics import summarize_spend
from quits.pipeline.policy import NotificationSettings, notifications_for
from quits.pipeline.scan import ScanOrchestrator
from quits.storage.subscriptions import load_store, save_store

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    message_ids_seen: int
    processed: int
    skipped: int
    subscriptions: List[Dict[str, Any]] = field(default_factory=list)
    price_changes: List[Dict[str, Any]] = field(default_factory=list)
    notifications: List[Dict[str, Any]] = field(default_factory=list)
    spend: Dict[str, Any] = field(default_factory=dict)


def load_gmail_config() -> GmailClientConfig:
    credentials_path = SECRETS_DIR / "credentials.json"
    if not credentials_path.exists():
        raise RuntimeError(
            f"Missing Gmail credentials at {credentials_path}. "
            "Did you configure QUITS_SECRETS_DIR?"
        )

    token_path = SECRETS_DIR / "gmail_token.json"
    return GmailClientConfig(
        credentials_path=credentials_path,
        token_path=token_path,
        user_id="me",
    )


def default_notification_settings() -> NotificationSettings:
    return NotificationSettings(
        price_change_threshold=PRICE_CHANGE_THRESHOLD,
        renewal_reminder_days=RENEWAL_REMINDER_DAYS,
    )


def run_scan(
    *,
    store_path: Path,
    client: Optional[GmailClient] = None,
    access_token: Optional[str] = None,
    query: str = GMAIL_QUERY,
    newer_than_days: Optional[int] = None,
    max_results: int = 200,
    batch_size: int = GMAIL_BATCH_SIZE,
    settings: Optional[NotificationSettings] = None,
    orchestrator: Optional[ScanOrchestrator] = None,
    today: Optional[date] = None,
    verbose: bool = False,
    progress_cb: Optional[Callable[[str, Dict[str, Any]], None]] = None,
) -> Dict[str, Any]:
    """
    Execute a single scan and return a machine-readable summary.

    Args:
        store_path: Path to the persisted subscription store (e.g. .state/subscriptions.json).
        client: Connected GmailClient; built from access_token or the local OAuth flow when omitted.
        access_token: Gmail access token validated by the caller.
        newer_than_days: Restrict the Gmail query to recent mail.
        verbose: If True, print progress for CLI usage.

    Returns:
        dict summary (JSON-serializable).
    """
    def log(msg: str) -> None:
        if verbose:
            print(msg)

    def report(
        step: str,
        *,
        detail: str | None = None,
        counts: Optional[Dict[str, int]] = None,
        **extra: Any,
    ) -> None:
        if not progress_cb:
            return
        # Normalize the payload shape for both UI and CLI consumers.
        payload: Dict[str, Any] = {"detail": detail}
        if counts:
            payload["counts"] = counts
        if extra:
            payload.update(extra)
        progress_cb(step, payload)

    settings = settings or default_notification_settings()
    orchestrator = orchestrator or ScanOrchestrator()
    today = today or datetime.now(timezone.utc).date()

    # --- Load store ---
    report("load_store", detail="Loading stored subscriptions")
    store = load_store(store_path)

    # --- Gmail client ---
    if client is None:
        report("connect_gmail", detail="Connecting to Gmail")
        if access_token:
            client = GmailClient.from_access_token(access_token)
        else:
            client = GmailClient(load_gmail_config())
            client.connect()

    # --- Fetch ---
    full_query = f"{query} newer_than:{newer_than_days}d" if newer_than_days else query
    report("fetch_messages", detail="Listing messages")
    message_ids = client.list_messages(query=full_query, max_results=max_results)
    seen = len(message_ids)
    log(f"[run] Found {seen} messages for query: {full_query}")

    report("load_messages", detail=f"Loading envelopes 0/{seen}", counts={"message_ids_seen": seen})
    envelopes = client.fetch_envelopes(message_ids, batch_size=batch_size)
    skipped = seen - len(envelopes)
    if skipped:
        log(f"[skip] {skipped} messages could not be fetched")
        report("error", detail=f"{skipped} messages could not be fetched", error={"skipped": skipped})

    # --- Scan ---
    report(
        "processing",
        detail=f"Scanning {len(envelopes)} envelopes",
        counts={"message_ids_seen": seen, "processed": len(envelopes), "skipped": skipped},
    )
    result = orchestrator.scan(envelopes, store.previous)
    log(f"[run] {len(result.subscriptions)} subscriptions, {len(result.price_changes)} price changes")
    for change in result.price_changes:
        report("price_change", detail=f"Price change for {change.provider}", change=change.to_dict())

    # --- Persist ---
    report(
        "save_store",
        detail="Saving subscriptions",
        counts={"subscriptions_found": len(result.subscriptions), "price_changes": len(result.price_changes)},
    )
    store.apply_scan(result, recorded_at=datetime.now(timezone.utc).isoformat())
    save_store(store_path, store)

    # --- Notify ---
    known = list(store.subscriptions.values())
    notifications = notifications_for(result.price_changes, known, settings, today)
    spend = summarize_spend(known, today)

    summary = RunSummary(
        message_ids_seen=seen,
        processed=len(envelopes),
        skipped=skipped,
        subscriptions=[s.to_dict() for s in result.subscriptions],
        price_changes=[c.to_dict() for c in result.price_changes],
        notifications=[n.to_dict() for n in notifications],
        spend=spend.to_dict(),
    )
    logger.info("scan finished: %d envelopes, %d subscriptions", len(envelopes), len(result.subscriptions))
    report(
        "done",
        detail="Scan completed",
        counts={
            "message_ids_seen": seen,
            "processed": len(envelopes),
            "skipped": skipped,
            "subscriptions_found": len(result.subscriptions),
            "price_changes": len(result.price_changes),
        },
    )
    return asdict(summary)
