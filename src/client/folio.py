# src/client/folio.py
"""
Trading-platform client for the notes portfolio and the Folio secondary market.

Exports
-------
- SaleGateway          (protocol the orchestrator depends on)
- FolioClient          (synchronous, requests.Session based)
- AsyncFolioGateway    (adapts FolioClient to SaleGateway via threads)
- max_expiration_date(days=7, today=None)

Errors
------
Transport failures, non-2xx statuses, undecodable bodies and schema
mismatches all raise ExternalCallError. A fetch never returns a partial
collection.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Sequence
from datetime import date, timedelta
from typing import Any, Protocol

import requests
from pydantic import TypeAdapter, ValidationError

from src.core.errors import ExternalCallError
from src.schemas.models import Note, SaleResponse, SellRequest

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.lendingclub.com/api/investor/v1"
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_EXPIRATION_DAYS = 7

_NOTES_ADAPTER = TypeAdapter(list[Note])


def max_expiration_date(days: int = DEFAULT_EXPIRATION_DAYS, today: date | None = None) -> date:
    """Latest listing expiration the platform accepts: today + `days`."""
    return (today or date.today()) + timedelta(days=days)


class SaleGateway(Protocol):
    async def fetch_notes(self, investor_id: int) -> list[Note]: ...

    async def submit_sale(
        self,
        investor_id: int,
        expiration_date: date,
        sell_requests: Sequence[SellRequest],
    ) -> SaleResponse: ...


class FolioClient:
    """
    Thin client for the two endpoints liquidation needs.

    Constructed once with credentials and passed by reference. requests.Session
    is not thread-safe, so each calling thread (AsyncFolioGateway runs calls in
    worker threads) gets its own session. An injected `session` is shared by
    every thread instead; the caller owns its thread safety.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._headers = {
            "Authorization": api_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        self._shared_session = session
        if session is not None:
            session.headers.update(self._headers)
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """Session for the calling thread."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self._headers)
            self._local.session = session
        return session

    # ---------- Public API ----------

    def detailed_notes(self, investor_id: int) -> list[Note]:
        """All notes currently held by `investor_id`."""
        body = self._request("GET", f"/accounts/{investor_id}/detailednotes")
        raw = body.get("myNotes")
        if not isinstance(raw, list):
            raise ExternalCallError("detailednotes response has no 'myNotes' list")
        try:
            return _NOTES_ADAPTER.validate_python(raw)
        except ValidationError as e:
            raise ExternalCallError(f"detailednotes returned malformed notes:\n{e}") from e

    def sell_notes(
        self,
        investor_id: int,
        expiration_date: date,
        sell_requests: Sequence[SellRequest],
    ) -> SaleResponse:
        """List `sell_requests` on Folio until `expiration_date`; one batched call."""
        payload = {
            "aid": investor_id,
            "expireDate": expiration_date.strftime("%m/%d/%Y"),
            "notes": [r.to_payload() for r in sell_requests],
        }
        body = self._request("POST", f"/accounts/{investor_id}/trades/sell", json=payload)
        try:
            return SaleResponse.model_validate(body)
        except ValidationError as e:
            raise ExternalCallError(f"sell response is malformed:\n{e}") from e

    # ---------- Internals ----------

    def _request(self, method: str, path: str, *, json: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=json, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise ExternalCallError(f"{method} {path} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise ExternalCallError(f"{method} {path} returned HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            body = resp.json()
        except ValueError as e:
            raise ExternalCallError(f"{method} {path} returned invalid JSON: {e}") from e
        if not isinstance(body, dict):
            raise ExternalCallError(f"{method} {path} returned {type(body).__name__}, expected an object")
        return body


class AsyncFolioGateway:
    """SaleGateway backed by a FolioClient; blocking calls run in worker threads."""

    def __init__(self, client: FolioClient) -> None:
        self.client = client

    async def fetch_notes(self, investor_id: int) -> list[Note]:
        return await asyncio.to_thread(self.client.detailed_notes, investor_id)

    async def submit_sale(
        self,
        investor_id: int,
        expiration_date: date,
        sell_requests: Sequence[SellRequest],
    ) -> SaleResponse:
        logger.info("Submitting %d sell requests (expires %s)", len(sell_requests), expiration_date.isoformat())
        return await asyncio.to_thread(self.client.sell_notes, investor_id, expiration_date, list(sell_requests))
