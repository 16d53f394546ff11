# tests/unit/test_pricing.py
import pytest

from src.core.errors import ComputationError, ValidationError
from src.orchestrators.pricing import build_sell_request, build_sell_requests, price_note, select_sellable
from src.schemas.models import CohortTarget
from tests.utils import AS_OF, make_note

TARGET = CohortTarget(acceptable_ytm=0.0595, acceptable_markup=0.04)


def test_price_note_records_initial_and_final_figures(sample_note):
    priced = price_note(sample_note, TARGET, initial_markup=0.011, as_of=AS_OF)

    assert priced.initial_markup == 0.011
    assert priced.initial_asking_price == pytest.approx(1010.0 * 1.011)
    assert priced.final_markup > TARGET.acceptable_markup
    assert priced.final_asking_price >= sample_note.principal_pending
    assert priced.final_ytm == pytest.approx(0.0595, abs=1e-4)
    # Cheaper initial ask leaves the buyer more yield
    assert priced.initial_ytm > priced.final_ytm


def test_price_note_rejects_markup_at_or_below_floor(sample_note):
    high_floor = CohortTarget(acceptable_ytm=0.0595, acceptable_markup=0.2)
    with pytest.raises(ValidationError):
        price_note(sample_note, high_floor, as_of=AS_OF)


def test_price_note_rejects_markup_above_ceiling(sample_note):
    with pytest.raises(ValidationError):
        price_note(sample_note, TARGET, max_markup=0.05, as_of=AS_OF)


def test_price_note_rejects_underwater_sale():
    # 2% coupon: the target yield is only reachable below par
    with pytest.raises(ValidationError):
        price_note(make_note(interest_rate=2.0), TARGET, as_of=AS_OF)


def test_price_note_propagates_computation_error():
    with pytest.raises(ComputationError):
        price_note(make_note(months_ago=40), TARGET, as_of=AS_OF)


def test_select_sellable_excludes_failures_without_aborting():
    notes = [
        make_note(1),
        make_note(2, months_ago=40),  # term elapsed
        make_note(3, interest_rate=2.0),  # underwater
        make_note(4, principal_pending=0.0, accrued_interest=0.0),  # solver cannot converge
        make_note(5, months_ago=None),  # no issue date
        make_note(6, months_ago=10),
    ]
    priced, skipped = select_sellable(notes, TARGET, as_of=AS_OF)

    assert [p.note.note_id for p in priced] == [1, 6]
    assert [s.note_id for s in skipped] == [2, 3, 4, 5]
    reasons = {s.note_id: s.reason for s in skipped}
    assert reasons[2].startswith("ComputationError")
    assert reasons[3].startswith("ValidationError")
    assert reasons[4].startswith("NoConvergenceError")


def test_every_selected_note_asks_at_least_principal():
    notes = [make_note(i, interest_rate=rate, months_ago=m) for i, (rate, m) in enumerate(
        [(6.0, 14), (9.5, 20), (15.0, 14), (22.0, 3), (28.0, 30), (4.0, 9)], start=1
    )]
    priced, _ = select_sellable(notes, TARGET, as_of=AS_OF)
    assert priced
    for p in priced:
        assert p.final_asking_price >= p.note.principal_pending
    for req, p in zip(build_sell_requests(priced), priced):
        assert req.asking_price >= p.note.principal_pending


def test_build_sell_request_passes_identifiers_through(sample_note):
    req = build_sell_request(sample_note, 1087.0)
    assert (req.loan_id, req.order_id, req.note_id) == (sample_note.loan_id, sample_note.order_id, sample_note.note_id)
    assert req.asking_price == 1087.0


def test_build_sell_request_never_clamps_below_principal(sample_note):
    with pytest.raises(ValidationError):
        build_sell_request(sample_note, 999.99)
    with pytest.raises(ValidationError):
        build_sell_request(sample_note, float("nan"))
