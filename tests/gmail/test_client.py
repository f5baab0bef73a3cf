from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from quits.gmail.client import GmailClient


class FakeRequest:
    def __init__(self, result: Dict[str, Any]) -> None:
        self.result = result

    def execute(self, num_retries: int = 0) -> Dict[str, Any]:
        return self.result


class FakeBatch:
    def __init__(self, service: "FakeService", callback: Callable[..., None]) -> None:
        self._service = service
        self._callback = callback
        self._ids: List[str] = []

    def add(self, request: FakeRequest, request_id: str) -> None:
        self._ids.append(request_id)

    def execute(self) -> None:
        self._service.batch_sizes.append(len(self._ids))
        for mid in self._ids:
            if mid in self._service.failing:
                self._callback(mid, None, RuntimeError("404 not found"))
            else:
                self._callback(mid, self._service.message(mid), None)


class FakeService:
    def __init__(self, pages: Optional[List[Dict[str, Any]]] = None, failing: tuple = ()) -> None:
        self._pages = pages or []
        self.failing = set(failing)
        self.page_tokens: List[Optional[str]] = []
        self.batch_sizes: List[int] = []

    def users(self) -> "FakeService":
        return self

    def messages(self) -> "FakeService":
        return self

    def list(self, userId: str, q: str, maxResults: int, pageToken: Optional[str] = None) -> FakeRequest:
        self.page_tokens.append(pageToken)
        return FakeRequest(self._pages[len(self.page_tokens) - 1])

    def get(self, userId: str, id: str, format: str, metadataHeaders: List[str]) -> FakeRequest:
        return FakeRequest(self.message(id))

    def new_batch_http_request(self, callback: Callable[..., None]) -> FakeBatch:
        return FakeBatch(self, callback)

    @staticmethod
    def message(mid: str) -> Dict[str, Any]:
        return {
            "id": mid,
            "snippet": f"Receipt {mid}",
            "payload": {"headers": [{"name": "Subject", "value": f"Order {mid}"}]},
        }


def _client(service: FakeService) -> GmailClient:
    client = GmailClient()
    client._service = service
    return client


PAGES = [
    {"messages": [{"id": "a"}, {"id": "b"}], "nextPageToken": "p2"},
    {"messages": [{"id": "c"}], "nextPageToken": "p3"},
    {"messages": [{"id": "d"}]},
]


def test_list_messages_follows_page_tokens() -> None:
    service = FakeService(pages=PAGES)

    ids = _client(service).list_messages(query="subject:receipt", max_results=10)

    assert ids == ["a", "b", "c", "d"]
    assert service.page_tokens == [None, "p2", "p3"]


def test_list_messages_stops_at_max_results() -> None:
    service = FakeService(pages=PAGES)

    ids = _client(service).list_messages(query="subject:receipt", max_results=3)

    assert ids == ["a", "b", "c"]
    assert service.page_tokens == [None, "p2"]


def test_fetch_envelopes_batches_and_skips_failures(caplog) -> None:
    service = FakeService(failing=("m5",))
    message_ids = [f"m{i}" for i in range(23)] + ["m0"]

    with caplog.at_level(logging.WARNING, logger="quits.gmail.client"):
        envelopes = _client(service).fetch_envelopes(message_ids, batch_size=10)

    assert service.batch_sizes == [10, 10, 3]
    assert [e.id for e in envelopes] == [f"m{i}" for i in range(23) if i != 5]
    assert envelopes[0].subject == "Order m0"
    assert envelopes[0].snippet == "Receipt m0"
    assert "m5" in caplog.text
