# src/core/finance/markup.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from src.core.finance.amortization import asking_price
from src.core.finance.root_finder import FiniteDifferenceObjective, newton
from src.core.finance.yields import YieldParams, calc_yield, note_yield_params
from src.schemas.models import Note


@dataclass(frozen=True)
class _YieldGap(FiniteDifferenceObjective):
    # g(m) = acceptable_ytm - YTM when asking (principal + accrued) * (1 + m)
    params: YieldParams
    principal_pending: float
    accrued_interest: float
    acceptable_ytm: float

    def evaluate(self, x: float) -> float:
        price = asking_price(self.principal_pending, self.accrued_interest, x)
        return self.acceptable_ytm - calc_yield(self.params.with_ask_price(price))


def optimal_markup(note: Note, initial_markup: float, acceptable_ytm: float, *, as_of: date) -> float:
    """
    Highest markup at which a buyer still earns `acceptable_ytm`.

    Only YTM is considered. The result is not bounded here; callers reject
    markups outside their acceptable band and asks below principal.

    Raises:
        NoConvergenceError: the markup or an inner rate solve did not converge.
        ComputationError: the note has no remaining term.
    """
    gap = _YieldGap(
        params=note_yield_params(note, initial_markup, as_of=as_of),
        principal_pending=note.principal_pending,
        accrued_interest=note.accrued_interest,
        acceptable_ytm=acceptable_ytm,
    )
    return newton(gap, initial_markup)
