# src/core/finance/amortization.py

from __future__ import annotations

import math
from datetime import date

from dateutil.relativedelta import relativedelta

from src.core.errors import ComputationError


def monthly_payment(principal: float, n: int, r: float) -> float:
    """
    Constant per-period payment for a fully-amortizing loan.

    Formula (standard annuity):
        PMT = P * [ r * (1 + r)^n ] / [ (1 + r)^n - 1 ]

    Where:
        P = principal still owed
        n = number of remaining periods (months)
        r = interest rate per period (APR 15% paid monthly -> 0.15 / 12)

    Args:
        principal: Remaining balance (>= 0).
        n: Remaining periods (>= 1).
        r: Per-period rate. Negative values above -1 are accepted; the
           root finder may probe them while searching.

    Returns:
        The fixed payment per period.

    Raises:
        ComputationError: principal < 0, n < 1, r == 0 exactly (0/0 in the
            formula) or any other zero/overflowing denominator. NaN is never
            returned.
    """
    if principal < 0:
        raise ComputationError(f"principal must be >= 0, got {principal}")
    if n < 1:
        raise ComputationError(f"remaining payments must be >= 1, got {n}")
    if r == 0:
        raise ComputationError("per-period rate of exactly 0 makes the annuity formula undefined")

    try:
        growth = (1.0 + r) ** n
        den = growth - 1.0
        if den == 0.0:
            raise ComputationError(f"annuity denominator vanished for r={r}, n={n}")
        pmt = principal * (r * growth) / den
    except (OverflowError, ZeroDivisionError) as e:
        raise ComputationError(f"annuity formula failed for r={r}, n={n}: {e}") from e

    if not math.isfinite(pmt):
        raise ComputationError(f"annuity formula is not finite for r={r}, n={n}")
    return pmt


def asking_price(principal_pending: float, accrued_interest: float, markup: float) -> float:
    """(principal + accrued interest) scaled by 1 + markup. No validation."""
    return (principal_pending + accrued_interest) * (1.0 + markup)


def remaining_payments(issue_date: date | None, loan_length: int, as_of: date) -> int:
    """
    Scheduled payments still due after `as_of`: due dates fall on each monthly
    anniversary of `issue_date`, the last one at maturity
    (issue_date + loan_length months). A partial month before the next due
    date counts as one payment.

    Raises:
        ComputationError: no issue date, or maturity is on or before `as_of`.
    """
    if issue_date is None:
        raise ComputationError("note has no issue date; remaining term is unknown")

    maturity = issue_date + relativedelta(months=loan_length)
    if maturity <= as_of:
        raise ComputationError(f"loan term has elapsed (maturity {maturity.isoformat()}, as of {as_of.isoformat()})")

    delta = relativedelta(maturity, as_of)
    months = delta.years * 12 + delta.months
    if delta.days > 0:
        months += 1
    return months
