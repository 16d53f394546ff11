# src/orchestrators/pricing.py
"""
Per-note pricing and sell-request validation for one cohort.

Public API
----------
price_note(note, target, *, initial_markup, max_markup, as_of) -> PricedNote
select_sellable(notes, target, ...) -> (priced, skipped)
build_sell_request(note, asking_price) -> SellRequest
build_sell_requests(priced) -> list[SellRequest]
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import date

from src.core.errors import PRICING_ERRORS, ValidationError
from src.core.finance import asking_price, calc_yield, note_yield_params, optimal_markup
from src.schemas.models import CohortTarget, Note, PricedNote, SellRequest, SkippedNote

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_MARKUP = 0.011
MAX_MARKUP = 0.7


def build_sell_request(note: Note, asking_price: float) -> SellRequest:
    """
    Sell request for `note` at `asking_price`.

    Raises:
        ValidationError: ask is not finite or below the note's pending principal.
            The price is never clamped.
    """
    if not math.isfinite(asking_price):
        raise ValidationError(f"note {note.note_id}: asking price {asking_price} is not finite")
    if asking_price < note.principal_pending:
        raise ValidationError(
            f"note {note.note_id}: asking price {asking_price:.2f} is below principal pending {note.principal_pending:.2f}"
        )
    return SellRequest(
        loan_id=note.loan_id,
        order_id=note.order_id,
        note_id=note.note_id,
        asking_price=asking_price,
    )


def price_note(
    note: Note,
    target: CohortTarget,
    *,
    initial_markup: float = DEFAULT_INITIAL_MARKUP,
    max_markup: float = MAX_MARKUP,
    as_of: date,
) -> PricedNote:
    """
    Find the highest markup that still leaves the buyer `target.acceptable_ytm`
    and check it is worth listing.

    Rejections (ValidationError):
      - markup outside (0, max_markup)
      - markup <= target.acceptable_markup
      - resulting ask below principal pending

    Solver and term failures propagate as NoConvergenceError / ComputationError.
    """
    params = note_yield_params(note, initial_markup, as_of=as_of)
    initial_ytm = calc_yield(params)

    markup = optimal_markup(note, initial_markup, target.acceptable_ytm, as_of=as_of)
    if not 0.0 < markup < max_markup:
        raise ValidationError(f"note {note.note_id}: markup {markup:.4f} is outside (0, {max_markup})")
    if markup <= target.acceptable_markup:
        raise ValidationError(
            f"note {note.note_id}: markup {markup:.4f} is not above acceptable markup {target.acceptable_markup:.4f}"
        )

    final_price = asking_price(note.principal_pending, note.accrued_interest, markup)
    if final_price < note.principal_pending:
        raise ValidationError(
            f"note {note.note_id}: asking price {final_price:.2f} is below principal pending {note.principal_pending:.2f}"
        )

    return PricedNote(
        note=note,
        initial_markup=initial_markup,
        final_markup=markup,
        initial_asking_price=params.ask_price,
        final_asking_price=final_price,
        initial_ytm=initial_ytm,
        final_ytm=calc_yield(params.with_ask_price(final_price)),
    )


def select_sellable(
    notes: Iterable[Note],
    target: CohortTarget,
    *,
    initial_markup: float = DEFAULT_INITIAL_MARKUP,
    max_markup: float = MAX_MARKUP,
    as_of: date,
) -> tuple[list[PricedNote], list[SkippedNote]]:
    """
    Price every note; a note that cannot be priced or fails validation is
    excluded with its reason and never aborts the rest.
    """
    priced: list[PricedNote] = []
    skipped: list[SkippedNote] = []
    for note in notes:
        try:
            priced.append(price_note(note, target, initial_markup=initial_markup, max_markup=max_markup, as_of=as_of))
        except PRICING_ERRORS as e:
            logger.warning("Excluding note %s: %s", note.note_id, e)
            skipped.append(SkippedNote(note_id=note.note_id, reason=f"{type(e).__name__}: {e}"))
    return priced, skipped


def build_sell_requests(priced: Iterable[PricedNote]) -> list[SellRequest]:
    return [build_sell_request(p.note, p.final_asking_price) for p in priced]
