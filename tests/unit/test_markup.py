# tests/unit/test_markup.py
import pytest

from src.core.errors import ComputationError, NoConvergenceError
from src.core.finance.amortization import asking_price
from src.core.finance.markup import optimal_markup
from src.core.finance.yields import calc_yield, note_yield_params
from tests.utils import AS_OF, make_note


def test_worked_example_hits_target_yield(sample_note):
    m = optimal_markup(sample_note, 0.005, 0.0595, as_of=AS_OF)

    price = asking_price(sample_note.principal_pending, sample_note.accrued_interest, m)
    assert price >= 1010.0

    params = note_yield_params(sample_note, m, as_of=AS_OF)
    assert calc_yield(params) == pytest.approx(0.0595, abs=1e-4)
    # ~22 payments of ~52.3 discounted at 5.95% is worth ~1087
    assert 0.06 < m < 0.09


def test_markup_independent_of_seed(sample_note):
    a = optimal_markup(sample_note, 0.005, 0.0595, as_of=AS_OF)
    b = optimal_markup(sample_note, 0.011, 0.0595, as_of=AS_OF)
    assert a == pytest.approx(b, abs=1e-6)


def test_lower_target_yield_allows_higher_markup(sample_note):
    strict = optimal_markup(sample_note, 0.011, 0.0595, as_of=AS_OF)
    lenient = optimal_markup(sample_note, 0.011, 0.0435, as_of=AS_OF)
    assert lenient > strict


def test_low_coupon_note_needs_negative_markup():
    # 2% note cannot give a buyer 5.95% at or above par
    note = make_note(interest_rate=2.0)
    assert optimal_markup(note, 0.011, 0.0595, as_of=AS_OF) < 0


def test_elapsed_term_raises_computation_error():
    note = make_note(months_ago=40, loan_length=36)
    with pytest.raises(ComputationError):
        optimal_markup(note, 0.011, 0.0595, as_of=AS_OF)


def test_worthless_note_does_not_converge():
    note = make_note(principal_pending=0.0, accrued_interest=0.0)
    with pytest.raises(NoConvergenceError):
        optimal_markup(note, 0.011, 0.0595, as_of=AS_OF)
