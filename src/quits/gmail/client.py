from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from quits.models import RawEmail
from quits.parsing.parser import ENVELOPE_HEADERS, envelope_from_message

logger = logging.getLogger(__name__)

# Scanning only reads subject/from/date/snippet.
SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]

# Retries with exponential backoff on 429/5xx, handled by googleapiclient.
NUM_RETRIES = 3


@dataclass(frozen=True)
class GmailClientConfig:
    # Path to OAuth client credentials downloaded from Google Cloud Console.
    credentials_path: Path
    # Token cache will be created here after first login.
    token_path: Path
    # Gmail userId, "me" refers to the authenticated user.
    user_id: str = "me"


class GmailClient:
    def __init__(self, cfg: Optional[GmailClientConfig] = None, user_id: str = "me"):
        self._cfg = cfg
        self._user_id = cfg.user_id if cfg else user_id
        self._creds: Optional[Credentials] = None
        self._service = None

    @classmethod
    def from_access_token(cls, access_token: str, user_id: str = "me") -> "GmailClient":
        """Wrap an access token that was already validated upstream."""
        client = cls(user_id=user_id)
        client._creds = Credentials(token=access_token)
        client._service = build("gmail", "v1", credentials=client._creds, cache_discovery=False)
        return client

    def connect(self) -> None:
        """Create an authenticated Gmail API service client (local installed-app flow)."""
        if self._cfg is None:
            raise RuntimeError("GmailClient has no config; use from_access_token() or pass a GmailClientConfig.")
        creds = None

        if self._cfg.token_path.exists():
            creds = Credentials.from_authorized_user_file(str(self._cfg.token_path), SCOPES)

        # If there are no (valid) credentials available, let the user log in.
        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            else:
                flow = InstalledAppFlow.from_client_secrets_file(
                    str(self._cfg.credentials_path),
                    SCOPES,
                )
                creds = flow.run_local_server(port=0)

            # Save the credentials for the next run.
            self._cfg.token_path.parent.mkdir(parents=True, exist_ok=True)
            self._cfg.token_path.write_text(creds.to_json(), encoding="utf-8")

        self._creds = creds
        self._service = build("gmail", "v1", credentials=creds, cache_discovery=False)

    @property
    def service(self):
        if self._service is None:
            raise RuntimeError("GmailClient is not connected. Call connect() first.")
        return self._service

    def list_messages(self, query: str = "", max_results: int = 100) -> List[str]:
        """
        List message IDs matching a Gmail search query, following page tokens.
        Example query: 'subject:(subscription OR invoice) newer_than:90d'
        """
        ids: List[str] = []
        page_token: Optional[str] = None
        while len(ids) < max_results:
            resp = (
                self.service.users()
                .messages()
                .list(
                    userId=self._user_id,
                    q=query,
                    maxResults=min(500, max_results - len(ids)),
                    pageToken=page_token,
                )
                .execute(num_retries=NUM_RETRIES)
            )
            ids.extend(m["id"] for m in resp.get("messages", []))
            page_token = resp.get("nextPageToken")
            if not page_token:
                break
        return ids[:max_results]

    def fetch_envelopes(self, message_ids: List[str], batch_size: int = 10) -> List[RawEmail]:
        """
        Fetch envelopes in Gmail batch requests of batch_size messages.
        Failed messages are logged and skipped; order follows message_ids.
        """
        fetched: Dict[str, RawEmail] = {}

        def on_response(request_id: str, response: Dict[str, Any], exception: Exception | None) -> None:
            if exception is not None:
                logger.warning("failed to fetch message %s: %s", request_id, exception)
                return
            fetched[request_id] = envelope_from_message(response)

        # Batch request ids must be unique.
        unique_ids = list(dict.fromkeys(message_ids))
        size = max(1, batch_size)
        for start in range(0, len(unique_ids), size):
            batch = self.service.new_batch_http_request(callback=on_response)
            for mid in unique_ids[start:start + size]:
                batch.add(
                    self.service.users()
                    .messages()
                    .get(userId=self._user_id, id=mid, format="metadata", metadataHeaders=list(ENVELOPE_HEADERS)),
                    request_id=mid,
                )
            batch.execute()

        return [fetched[mid] for mid in unique_ids if mid in fetched]
