import numpy as np

from natureopt.foundation.metrics import (
    crowding_distance,
    dominated_by_rows,
    dominates,
    dominates_rows,
    is_not_worse,
    not_worse_rows,
)


def test_dominates_basic():
    assert dominates([1.0, 1.0], [2.0, 1.0])
    assert not dominates([1.0, 1.0], [1.0, 1.0])
    assert not dominates([1.0, 2.0], [2.0, 1.0])


def test_is_not_worse_scalar_and_vector():
    assert is_not_worse(1.0, 1.0)
    assert is_not_worse([0.5], [1.0])
    assert not is_not_worse([2.0], [1.0])
    assert is_not_worse([1.0, 2.0], [2.0, 1.0])
    assert not is_not_worse([2.0, 2.0], [1.0, 1.0])
    assert is_not_worse([np.inf], [np.inf])


def test_not_worse_rows_matches_scalar_helper():
    A = np.array([[1.0, 2.0], [3.0, 3.0], [0.0, 0.0], [2.0, 1.0]])
    B = np.array([[2.0, 1.0], [1.0, 1.0], [0.0, 0.0], [2.0, 1.0]])
    expected = [is_not_worse(a, b) for a, b in zip(A, B)]
    np.testing.assert_array_equal(not_worse_rows(A, B), expected)
    np.testing.assert_array_equal(not_worse_rows(np.array([[1.0], [3.0]]), np.array([[2.0], [2.0]])), [True, False])


def test_row_masks():
    A = np.array([[0.0, 0.0], [2.0, 2.0], [0.5, 3.0]])
    b = np.array([1.0, 1.0])
    np.testing.assert_array_equal(dominates_rows(A, b), [True, False, False])
    np.testing.assert_array_equal(dominated_by_rows(A, b), [False, True, False])


def test_crowding_distance_extremes_infinite():
    F = np.array([[0.0, 1.0], [0.25, 0.75], [0.5, 0.5], [1.0, 0.0]])
    d = crowding_distance(F)
    assert np.isinf(d[0]) and np.isinf(d[3])
    assert np.all(np.isfinite(d[1:3]))
    assert d[2] > d[1]
    assert np.all(np.isinf(crowding_distance(F[:2])))
