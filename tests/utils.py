# tests/utils.py
"""
Single source of truth for test data, factories, and fakes.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

from dateutil.relativedelta import relativedelta

from src.core.errors import ExternalCallError
from src.inputs.inputs import AppConfig
from src.schemas.models import Note, SaleResponse, SellRequest

# -----------------------------
# Global defaults (edit once)
# -----------------------------

AS_OF = date(2024, 6, 15)
DEFAULT_PURPOSE = "Credit card refinancing"
DEFAULT_STATUS = "Current"
DEFAULT_INVESTOR_ID = 4242

# -----------------------------
# Note factories
# -----------------------------


def make_note(
    note_id: int = 1,
    *,
    principal_pending: float = 1000.0,
    accrued_interest: float = 10.0,
    interest_rate: float = 15.0,
    loan_length: int = 36,
    months_ago: int | None = 14,
    issue_date: date | None = None,
    loan_status: str = DEFAULT_STATUS,
    purpose: str = DEFAULT_PURPOSE,
    as_of: date = AS_OF,
) -> Note:
    """Note issued `months_ago` calendar months before `as_of` unless `issue_date` is given."""
    if issue_date is None and months_ago is not None:
        issue_date = as_of - relativedelta(months=months_ago)
    return Note(
        note_id=note_id,
        loan_id=10_000 + note_id,
        order_id=20_000 + note_id,
        principal_pending=principal_pending,
        accrued_interest=accrued_interest,
        interest_rate=interest_rate,
        loan_length=loan_length,
        issue_date=issue_date,
        loan_status=loan_status,
        purpose=purpose,
    )


def raw_note_payload(note_id: int = 1, **overrides: Any) -> dict[str, Any]:
    """Platform-shaped (camelCase) note JSON."""
    payload: dict[str, Any] = {
        "noteId": note_id,
        "loanId": 10_000 + note_id,
        "orderId": 20_000 + note_id,
        "principalPending": 1000.0,
        "accruedInterest": 10.0,
        "interestRate": 15.0,
        "loanLength": 36,
        "issueDate": "2023-04-15T00:00:00.000-07:00",
        "loanStatus": DEFAULT_STATUS,
        "purpose": DEFAULT_PURPOSE,
        "grade": "C2",
        "currentPaymentStatus": "Paid",
    }
    payload.update(overrides)
    return payload


def make_portfolio(as_of: date = AS_OF) -> list[Note]:
    """
    One note per cohort of the default [8, 4, 1] schedule plus one too young to sell:
      1 -> 14 months old (cohort 0)
      2 ->  6 months old (cohort 1)
      3 ->  2 months old (cohort 2)
      4 -> issued this month (no cohort)
    """
    return [
        make_note(1, months_ago=14, as_of=as_of),
        make_note(2, months_ago=6, as_of=as_of),
        make_note(3, months_ago=2, as_of=as_of),
        make_note(4, months_ago=0, as_of=as_of),
    ]


# -----------------------------
# Config factories
# -----------------------------


def make_config(**sections: dict[str, Any]) -> AppConfig:
    """AppConfig with defaults; keyword sections are merged into the JSON payload."""
    data: dict[str, Any] = {"investor": {"investor_id": DEFAULT_INVESTOR_ID, "api_key": "test-key"}}
    for name, values in sections.items():
        data[name] = {**data.get(name, {}), **values}
    return AppConfig.model_validate(data)


# -----------------------------
# Gateway fake
# -----------------------------


class FakeGateway:
    """
    In-memory SaleGateway.

    - `fail_note_ids`: a batch containing any of these ids raises ExternalCallError.
    - `status_by_note_id`: a batch containing one of these ids gets that status.
    - `boom_note_ids`: a batch containing any of these ids raises RuntimeError.
    - Calls are recorded in initiation order in `sales`.
    """

    def __init__(
        self,
        notes: Iterable[Note] = (),
        *,
        fail_fetch: bool = False,
        fail_note_ids: Iterable[int] = (),
        status_by_note_id: dict[int, str] | None = None,
        boom_note_ids: Iterable[int] = (),
    ) -> None:
        self.notes = list(notes)
        self.fail_fetch = fail_fetch
        self.fail_note_ids = set(fail_note_ids)
        self.status_by_note_id = dict(status_by_note_id or {})
        self.boom_note_ids = set(boom_note_ids)
        self.sales: list[tuple[int, date, list[SellRequest]]] = []
        self.fetch_calls = 0

    async def fetch_notes(self, investor_id: int) -> list[Note]:
        self.fetch_calls += 1
        await asyncio.sleep(0)
        if self.fail_fetch:
            raise ExternalCallError("detailednotes returned HTTP 503")
        return list(self.notes)

    async def submit_sale(
        self,
        investor_id: int,
        expiration_date: date,
        sell_requests: Sequence[SellRequest],
    ) -> SaleResponse:
        batch = list(sell_requests)
        self.sales.append((investor_id, expiration_date, batch))
        await asyncio.sleep(0)

        ids = {r.note_id for r in batch}
        if ids & self.boom_note_ids:
            raise RuntimeError("connection reset by peer")
        if ids & self.fail_note_ids:
            raise ExternalCallError("trades/sell returned HTTP 500")
        status = "SUCCESS"
        for note_id in ids:
            status = self.status_by_note_id.get(note_id, status)
        return SaleResponse(
            status=status,
            confirmations=[{"noteId": r.note_id, "executionStatus": ["SUCCESS_PENDING_SETTLEMENT"]} for r in batch],
        )
