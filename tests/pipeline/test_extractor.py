from __future__ import annotations

from datetime import datetime, timezone

import pytest

from quits.models import UNKNOWN_PROVIDER, RawEmail
from quits.pipeline.orchestrator import SubscriptionExtractor, derive_frequency

FIXED_NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


def _extractor() -> SubscriptionExtractor:
    return SubscriptionExtractor(clock=lambda: FIXED_NOW)


def test_generic_extraction_fills_all_fields() -> None:
    email = RawEmail(
        id="m-1",
        subject="Netflix: price increase for your plan",
        from_email="Netflix <info@account.netflix.com>",
        date="Fri, 10 Jan 2025 10:00:00 +0000",
        snippet="Your new price is $15.99/month starting with your next billing date: 12/02/2025.",
    )

    sub = _extractor().extract(email)

    assert sub.provider == "Netflix"
    assert sub.price == 15.99
    assert sub.frequency == "monthly"
    assert sub.renewal_date == "2025-02-12"
    assert sub.is_price_increase is True
    assert sub.email_id == "m-1"
    assert sub.variant == "generic"
    assert sub.last_detected_date == FIXED_NOW.isoformat()


def test_price_is_never_taken_from_sender() -> None:
    email = RawEmail(id="m-2", subject="Welcome", from_email="$5 deals <deals@shop5.com>", snippet="")

    assert _extractor().extract(email).price is None


def test_subject_retry_when_sender_is_unknown() -> None:
    email = RawEmail(id="m-3", subject="Your Spotify Premium receipt", from_email="", snippet="")

    assert _extractor().extract(email).provider == "Spotify"


def test_garbage_input_returns_conservative_defaults() -> None:
    sub = _extractor().extract(RawEmail(id="m-4", subject="???", from_email="", snippet="%%%"))

    assert sub.provider == UNKNOWN_PROVIDER
    assert sub.price is None
    assert sub.frequency == "monthly"
    assert sub.renewal_date is None
    assert sub.term_months is None
    assert sub.is_price_increase is False


def test_extraction_is_idempotent_apart_from_timestamp() -> None:
    email = RawEmail(id="m-5", subject="Adobe renewal notice", from_email="billing@adobe.com", snippet="€59.88/12 months")
    first = SubscriptionExtractor(clock=lambda: FIXED_NOW).extract(email)
    second = SubscriptionExtractor(clock=lambda: datetime(2030, 1, 1, tzinfo=timezone.utc)).extract(email)

    a = first.to_dict()
    b = second.to_dict()
    a.pop("lastDetectedDate")
    b.pop("lastDetectedDate")
    assert a == b


def test_apple_path_replaces_generic_output() -> None:
    email = RawEmail(
        id="m-6",
        subject="Your receipt from Apple.",
        from_email="App Store <no_reply@email.apple.com>",
        snippet="App Babbel - Language Learning Subscription €32.97/3 months",
    )

    sub = _extractor().extract(email)

    assert sub.variant == "apple"
    assert sub.provider == "Babbel"
    assert sub.price == pytest.approx(10.99)
    assert sub.term_months == 3
    assert sub.frequency == "monthly"


def test_apple_path_single_month_keeps_observed_zero_price() -> None:
    email = RawEmail(
        id="m-7",
        subject="Your receipt from Apple.",
        from_email="no_reply@email.apple.com",
        snippet="App Calm Subscription €14.99/1 month",
    )

    sub = _extractor().extract(email)

    assert sub.provider == "Calm"
    assert sub.price == 0.0


def test_frequency_derivation() -> None:
    assert derive_frequency(24, "") == "yearly"
    assert derive_frequency(12, "annual plan") == "monthly"
    assert derive_frequency(None, "Your annual plan") == "yearly"
    assert derive_frequency(None, "billed monthly") == "monthly"
    assert derive_frequency(None, "") == "monthly"


def test_overlong_digit_runs_degrade_to_defaults() -> None:
    digits = "9" * 5000

    term = _extractor().extract(RawEmail(id="m-8", snippet=f"term of {digits} months"))
    period = _extractor().extract(RawEmail(id="m-9", snippet=f"€9.99/{digits} months"))
    apple = _extractor().extract(
        RawEmail(id="m-10", from_email="no_reply@email.apple.com", snippet=f"App Calm Subscription €9.99/{digits} months")
    )

    assert term.term_months is None
    assert term.price is None
    assert period.price == 9.99
    assert apple.price is None
    assert apple.term_months is None


def test_app_store_subject_is_not_an_app_name() -> None:
    email = RawEmail(
        id="m-11",
        subject="Your App Store subscription renewal",
        from_email="no_reply@email.apple.com",
        snippet="Headway: Daily Growth €29.97/3 months",
    )

    sub = _extractor().extract(email)

    assert sub.provider == "Apple"
    assert sub.price == pytest.approx(9.99)
