# src/schemas/models.py

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# =========================
# Platform records
# =========================


class Note(BaseModel):
    """
    One note held in the investor's portfolio, as returned by the platform.
    Field aliases follow the platform's camelCase JSON; unknown fields are ignored.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    note_id: int = Field(..., alias="noteId", description="Note identifier, unique within a portfolio.")
    loan_id: int = Field(..., alias="loanId", description="Underlying loan identifier (passed through to sales).")
    order_id: int = Field(..., alias="orderId", description="Purchase order identifier (passed through to sales).")
    principal_pending: float = Field(..., ge=0, alias="principalPending", description="Remaining principal owed to the note.")
    accrued_interest: float = Field(0.0, ge=0, alias="accruedInterest", description="Interest accrued since the last payment.")
    interest_rate: float = Field(..., alias="interestRate", description="Nominal annual rate in percent (15.0 = 15%).")
    loan_length: int = Field(..., ge=1, alias="loanLength", description="Original term in months.")
    issue_date: date | None = Field(
        None, alias="issueDate", description="Issuance date (date only). None while the loan is still in funding."
    )
    loan_status: str = Field("", alias="loanStatus", description="Platform status label, e.g. 'Current'.")
    purpose: str = Field("", description="Borrower-stated loan purpose, e.g. 'Credit card refinancing'.")

    @field_validator("issue_date", mode="before")
    @classmethod
    def _date_only(cls, v: Any) -> Any:
        # Platform sends ISO datetimes with offsets; only the calendar date matters.
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return datetime.fromisoformat(v).date()
        return v


class SellRequest(BaseModel):
    """One entry of a Folio sell batch."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    loan_id: int = Field(..., alias="loanId")
    order_id: int = Field(..., alias="orderId")
    note_id: int = Field(..., alias="noteId")
    asking_price: float = Field(..., alias="askingPrice", description="Ask in currency units; never below principal.")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SaleResponse(BaseModel):
    """Platform answer to a sell batch."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status: str = Field(..., alias="sellNoteStatus", description="'SUCCESS' or a platform failure code.")
    confirmations: list[dict[str, Any]] = Field(default_factory=list, alias="sellNoteConfirmations")

    @property
    def succeeded(self) -> bool:
        return self.status == "SUCCESS"


# =========================
# Pricing outputs
# =========================


class CohortTarget(BaseModel):
    """Yield/markup pair one cohort is priced against."""

    model_config = ConfigDict(frozen=True)

    acceptable_ytm: float = Field(..., description="Minimum annual YTM a buyer should still earn (0.0595 = 5.95%).")
    acceptable_markup: float = Field(..., description="Markups at or below this are not worth listing.")


class PricedNote(BaseModel):
    """A note with the markup found for it and the before/after figures."""

    model_config = ConfigDict(frozen=True)

    note: Note
    initial_markup: float
    final_markup: float
    initial_asking_price: float
    final_asking_price: float
    initial_ytm: float
    final_ytm: float


class SkippedNote(BaseModel):
    """A note excluded from a cohort's batch, with the reason."""

    model_config = ConfigDict(frozen=True)

    note_id: int
    reason: str


class CohortOutcome(BaseModel):
    """Everything one cohort produced in a run; `error` is set when the cohort failed."""

    index: int = Field(..., description="0 = oldest cohort.")
    month_threshold: int = Field(..., description="Notes in this cohort were issued at least this many months ago.")
    target: CohortTarget
    priced: list[PricedNote] = Field(default_factory=list)
    skipped: list[SkippedNote] = Field(default_factory=list)
    requests: list[SellRequest] = Field(default_factory=list, description="Batch built for this cohort.")
    response: SaleResponse | None = None
    error: str | None = None
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def submitted(self) -> list[SellRequest]:
        """Requests the platform accepted (empty for dry runs and failures)."""
        if self.response is None or not self.response.succeeded:
            return []
        return list(self.requests)


class LiquidationReport(BaseModel):
    """Aggregate of one liquidation run, cohorts ordered oldest first."""

    investor_id: int
    as_of: date
    dry_run: bool = False
    cohorts: list[CohortOutcome] = Field(default_factory=list)

    @property
    def failed_cohorts(self) -> list[CohortOutcome]:
        return [c for c in self.cohorts if not c.ok]

    @property
    def submitted_count(self) -> int:
        return sum(len(c.submitted) for c in self.cohorts)
