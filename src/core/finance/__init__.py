# src/core/finance/__init__.py

from .amortization import (
    asking_price,
    monthly_payment,
    remaining_payments,
)
from .markup import optimal_markup
from .root_finder import (
    FD_STEP,
    NEWTON_MAX_ITER,
    NEWTON_TOL,
    FiniteDifferenceObjective,
    newton,
)
from .yields import (
    YieldParams,
    calc_yield,
    implied_monthly_rate,
    note_asking_price,
    note_yield_params,
)

__all__ = [
    "monthly_payment",
    "asking_price",
    "remaining_payments",
    "FD_STEP",
    "NEWTON_TOL",
    "NEWTON_MAX_ITER",
    "FiniteDifferenceObjective",
    "newton",
    "YieldParams",
    "calc_yield",
    "implied_monthly_rate",
    "note_asking_price",
    "note_yield_params",
    "optimal_markup",
]
