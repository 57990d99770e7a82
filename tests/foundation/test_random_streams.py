from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from natureopt.foundation.exceptions import ConfigurationError, InvalidParameterError
from natureopt.foundation.random import DRIVER_STREAM, RngRoot, seed


def test_stream_is_pure_in_seed_and_id():
    root = seed(42)
    a = root.stream(3).uniform(0.0, 1.0, size=5)
    b = seed(42).stream(3).uniform(0.0, 1.0, size=5)
    np.testing.assert_array_equal(a, b)


def test_stream_order_does_not_matter():
    root = seed(7)
    forward = [root.stream(i).random() for i in range(8)]
    backward = [root.stream(i).random() for i in reversed(range(8))][::-1]
    assert forward == backward


def test_streams_identical_across_threads():
    root = seed(11)

    def draw(i):
        return root.stream(i).normal(0.0, 1.0, size=4)

    with ThreadPoolExecutor(max_workers=4) as pool:
        threaded = list(pool.map(draw, range(16)))
    serial = [draw(i) for i in range(16)]
    for t, s in zip(threaded, serial):
        np.testing.assert_array_equal(t, s)


def test_different_ids_and_seeds_differ():
    root = seed(0)
    assert root.stream(0).random() != root.stream(1).random()
    assert seed(0).stream(5).random() != seed(1).stream(5).random()


def test_driver_stream_is_reserved_id():
    root = seed(3)
    assert root.driver().stream_id == DRIVER_STREAM
    assert root.driver().random() == root.stream(DRIVER_STREAM).random()


def test_seed_zero_is_valid():
    assert seed(0).seed == 0


def test_none_seed_draws_entropy_and_records_it():
    root = seed(None)
    assert isinstance(root, RngRoot)
    replay = seed(root.seed)
    assert replay.stream(0).random() == root.stream(0).random()


@pytest.mark.parametrize("bad", [-1, 1.5, "3", True, 2**64])
def test_invalid_seed_rejected(bad):
    with pytest.raises(InvalidParameterError):
        seed(bad)
    with pytest.raises(ConfigurationError):
        seed(bad)


def test_uniform_contract():
    rng = seed(1).stream(0)
    x = rng.uniform(np.array([-1.0, 2.0]), np.array([1.0, 2.0]))
    assert -1.0 <= x[0] < 1.0
    assert x[1] == 2.0
    with pytest.raises(ValueError):
        rng.uniform(1.0, 0.0)


def test_normal_rejects_negative_std():
    rng = seed(1).stream(0)
    assert np.isfinite(rng.normal(0.0, 0.0))
    with pytest.raises(ValueError):
        rng.normal(0.0, -1.0)


def test_index_range_and_contract():
    rng = seed(2).stream(0)
    draws = {rng.index(3) for _ in range(200)}
    assert draws == {0, 1, 2}
    with pytest.raises(ValueError):
        rng.index(0)


def test_maybe_extremes():
    rng = seed(2).stream(1)
    assert not any(rng.maybe(0.0) for _ in range(50))
    assert all(rng.maybe(1.0) for _ in range(50))


def test_shuffle_list_and_array_in_place():
    rng = seed(5).stream(0)
    items = list(range(10))
    rng.shuffle(items)
    assert sorted(items) == list(range(10))
    arr = np.arange(10)
    rng.shuffle(arr)
    assert sorted(arr.tolist()) == list(range(10))


def test_distinct_excludes_and_is_unique():
    rng = seed(9).stream(0)
    for _ in range(100):
        picks = rng.distinct(6, 5, exclude=2)
        assert len(set(picks.tolist())) == 5
        assert 2 not in picks
        assert picks.min() >= 0 and picks.max() < 6
    with pytest.raises(ValueError):
        rng.distinct(4, 4, exclude=0)
