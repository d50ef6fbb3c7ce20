from types import SimpleNamespace

import pytest

from wastealns.classes.EarlyStopping import StagnationStoppingCriterion


def state(objective):
    return SimpleNamespace(objective=lambda: objective)


def test_stops_after_max_iterations():
    stop = StagnationStoppingCriterion(max_iterations=3, max_stagnation=100, is_verbose=False)
    # First call happens before any iteration
    results = [stop(None, state(10.0), state(10.0)) for _ in range(4)]
    assert results == [False, False, False, True]
    assert stop.current_iteration == 3
    assert "maximum iterations" in stop.stop_reason


def test_stops_on_stagnation():
    stop = StagnationStoppingCriterion(max_iterations=100, max_stagnation=2, is_verbose=False)
    assert not stop(None, state(10.0), state(10.0))
    assert not stop(None, state(10.0), state(12.0))
    assert stop(None, state(10.0), state(11.0))
    assert stop.iterations_without_improvement == 2
    assert "no new best" in stop.stop_reason


def test_new_best_resets_stagnation():
    stop = StagnationStoppingCriterion(max_iterations=100, max_stagnation=2, is_verbose=False)
    stop(None, state(10.0), state(10.0))
    stop(None, state(10.0), state(10.0))
    assert not stop(None, state(9.0), state(9.0))
    assert stop.iterations_without_improvement == 0
    assert stop.total_improvements == 1
    assert stop.best_objective == 9.0


def test_abort_stops_at_next_check():
    stop = StagnationStoppingCriterion(max_iterations=100, max_stagnation=100, is_verbose=False)
    assert not stop(None, state(10.0), state(10.0))
    stop.abort("worst_removal: list index out of range")
    assert stop.aborted
    assert stop(None, state(10.0), state(10.0))
    assert stop.stop_reason.startswith("aborted after iteration 1")


def test_negative_limits_rejected():
    with pytest.raises(ValueError):
        StagnationStoppingCriterion(max_iterations=-1)
