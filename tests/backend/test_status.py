from __future__ import annotations

from backend.app.status import RECENT_LIMIT, RunStatusStore


def test_progress_events_fill_scan_counters() -> None:
    store = RunStatusStore()
    store.start()

    store.record_progress("load_messages", {"detail": "Loading envelopes 0/3", "counts": {"message_ids_seen": 3}})
    store.record_progress(
        "save_store",
        {"detail": "Saving subscriptions", "counts": {"subscriptions_found": 2, "price_changes": 1}},
    )
    status = store.snapshot()

    assert status["state"] == "running"
    assert status["step"] == "save_store"
    assert status["message_ids_seen"] == 3
    assert status["subscriptions_found"] == 2
    assert status["price_changes"] == 1


def test_change_and_error_feeds_are_newest_first_and_capped() -> None:
    store = RunStatusStore()
    store.start()

    for i in range(RECENT_LIMIT + 5):
        store.record_progress("price_change", {"detail": None, "change": {"provider": f"P{i}"}})
    store.record_progress("error", {"detail": "1 messages could not be fetched", "error": {"skipped": 1}})
    status = store.snapshot()

    assert len(status["recent_changes"]) == RECENT_LIMIT
    assert status["recent_changes"][0] == {"provider": f"P{RECENT_LIMIT + 4}"}
    assert status["recent_errors"] == [{"skipped": 1}]


def test_finish_takes_counters_from_summary_and_start_resets() -> None:
    store = RunStatusStore()
    store.start()
    store.finish(
        {
            "message_ids_seen": 4,
            "processed": 3,
            "skipped": 1,
            "subscriptions": [{"provider": "Netflix"}, {"provider": "Spotify"}],
            "price_changes": [{"provider": "Netflix"}],
        }
    )
    done = store.snapshot()

    assert done["state"] == "done"
    assert (done["processed"], done["skipped"], done["subscriptions_found"], done["price_changes"]) == (3, 1, 2, 1)
    assert done["summary"]["processed"] == 3

    store.start()

    assert store.snapshot()["subscriptions_found"] == 0
    assert store.snapshot()["summary"] is None


def test_snapshot_is_a_copy() -> None:
    store = RunStatusStore()
    store.record_progress("price_change", {"change": {"provider": "Netflix"}})

    store.snapshot()["recent_changes"].clear()

    assert store.snapshot()["recent_changes"] == [{"provider": "Netflix"}]
