from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from quits.models import PreviousSubscriptionRecord, RawEmail
from quits.pipeline.analytics import summarize_spend
from quits.pipeline.policy import NotificationSettings, notifications_for
from quits.pipeline.scan import ScanOrchestrator

router = APIRouter()
orchestrator = ScanOrchestrator()


class EmailEnvelope(BaseModel):
    id: str
    subject: str = ""
    # "from" is a keyword, so the wire name is an alias.
    sender: str = Field(default="", alias="from")
    date: str = ""
    snippet: str = ""


class PreviousRecord(BaseModel):
    provider: str
    price: Optional[float] = None
    term_months: Optional[int] = None
    renewal_date: Optional[str] = None
    frequency: str = "monthly"


class ScanRequest(BaseModel):
    emails: List[EmailEnvelope] = Field(default_factory=list)
    previous: List[PreviousRecord] = Field(default_factory=list)
    price_change_threshold: float = 5.0
    renewal_reminder_days: int = 7
    today: Optional[date] = None


@router.post("/scan")
def scan_endpoint(req: ScanRequest) -> dict:
    emails = [
        RawEmail(id=e.id, subject=e.subject, from_email=e.sender, date=e.date, snippet=e.snippet)
        for e in req.emails
    ]
    previous = {
        r.provider: PreviousSubscriptionRecord.from_dict(r.model_dump())
        for r in req.previous
    }

    result = orchestrator.scan(emails, previous.get)

    today = req.today or date.today()
    settings = NotificationSettings(
        price_change_threshold=req.price_change_threshold,
        renewal_reminder_days=req.renewal_reminder_days,
    )
    notifications = notifications_for(result.price_changes, result.subscriptions, settings, today)
    return {
        "ok": True,
        **result.to_dict(),
        "notifications": [n.to_dict() for n in notifications],
        "spend": summarize_spend(result.subscriptions, today).to_dict(),
    }
