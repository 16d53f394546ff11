# src/core/finance/yields.py
"""
Yield to maturity from an asking price.

The buyer of a note receives the note's fixed monthly payment for the
remaining term. Paying `ask_price` for that stream is equivalent to lending
`ask_price` at the monthly rate r solving

    monthly_payment(ask_price, n, r) == payment

YTM is that r annualized (r * 12).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from src.core.finance.amortization import asking_price, monthly_payment, remaining_payments
from src.core.finance.root_finder import FiniteDifferenceObjective, newton
from src.schemas.models import Note

# Newton seed for the monthly rate
INITIAL_RATE_GUESS = 1.0

PAYMENTS_PER_YEAR = 12


@dataclass(frozen=True)
class YieldParams:
    """
    Inputs for one yield evaluation.

    Attributes:
        monthly_payment: Fixed payment computed from the note's *actual*
            principal and stated rate; it does not move with the ask price.
        remaining_payments: Months left until maturity.
        ask_price: Price paid for the remaining payments.
    """

    monthly_payment: float
    remaining_payments: int
    ask_price: float

    def with_ask_price(self, ask_price: float) -> YieldParams:
        return replace(self, ask_price=ask_price)


@dataclass(frozen=True)
class _PaymentGap(FiniteDifferenceObjective):
    # f(r) = target payment - payment implied by ask_price at rate r
    target_payment: float
    principal: float
    n: int

    def evaluate(self, x: float) -> float:
        return self.target_payment - monthly_payment(self.principal, self.n, x)


def implied_monthly_rate(monthly_payment: float, remaining_payments: int, ask_price: float) -> float:
    """Monthly rate at which `ask_price` amortizes into `monthly_payment` over `remaining_payments`."""
    gap = _PaymentGap(target_payment=monthly_payment, principal=ask_price, n=remaining_payments)
    return newton(gap, INITIAL_RATE_GUESS)


def calc_yield(params: YieldParams) -> float:
    """Annual YTM (0.0595 = 5.95%) for buying the remaining payments at params.ask_price."""
    return implied_monthly_rate(params.monthly_payment, params.remaining_payments, params.ask_price) * PAYMENTS_PER_YEAR


def stated_monthly_rate(note: Note) -> float:
    """Note's nominal APR in percent converted to a per-month fraction."""
    return note.interest_rate / 100.0 / PAYMENTS_PER_YEAR


def note_asking_price(note: Note, markup: float) -> float:
    return asking_price(note.principal_pending, note.accrued_interest, markup)


def note_yield_params(note: Note, markup: float, *, as_of: date) -> YieldParams:
    """YieldParams for selling `note` at `markup` on `as_of`."""
    n = remaining_payments(note.issue_date, note.loan_length, as_of)
    return YieldParams(
        monthly_payment=monthly_payment(note.principal_pending, n, stated_monthly_rate(note)),
        remaining_payments=n,
        ask_price=note_asking_price(note, markup),
    )
