import numpy as np
import pytest

from natureopt.engine.archive import ParetoFront, SingleBest
from natureopt.foundation.metrics import crowding_distance, dominates
from natureopt.foundation.random import seed


def test_single_best_keeps_strictly_smaller():
    best = SingleBest(n_var=2)
    assert best.empty and best.f == np.inf
    with pytest.raises(LookupError):
        best.x
    assert best.offer(np.array([1.0, 1.0]), 2.0)
    assert not best.offer(np.array([0.0, 0.0]), 2.0)
    assert best.offer(np.array([0.5, 0.5]), [0.5])
    np.testing.assert_array_equal(best.x, [0.5, 0.5])
    assert best.f == 0.5


def test_single_best_offer_many_takes_first_minimum():
    best = SingleBest(n_var=1)
    X = np.array([[3.0], [1.0], [2.0], [1.5]])
    F = np.array([[3.0], [1.0], [2.0], [1.0]])
    assert best.offer_many(X, F) == 1
    np.testing.assert_array_equal(best.x, [1.0])


def test_front_rejects_dominated_and_duplicates():
    front = ParetoFront(n_var=1, n_obj=2)
    assert front.offer(np.array([0.2]), np.array([0.2, -0.2]))
    assert not front.offer(np.array([0.3]), np.array([0.3, -0.1]))
    assert not front.offer(np.array([0.2]), np.array([0.2, -0.2]))
    assert len(front) == 1


def test_front_evicts_members_dominated_by_newcomer():
    front = ParetoFront(n_var=1, n_obj=2)
    front.offer(np.array([1.0]), np.array([1.0, 1.0]))
    front.offer(np.array([2.0]), np.array([0.0, 2.0]))
    assert len(front) == 2
    assert front.offer(np.array([3.0]), np.array([0.5, 0.5]))
    np.testing.assert_array_equal(np.sort(front.X[:, 0]), [2.0, 3.0])


def test_front_soundness_after_random_offers():
    rng = np.random.default_rng(4)
    front = ParetoFront(n_var=2, n_obj=2)
    X = rng.random((200, 2))
    F = rng.random((200, 2))
    front.offer_many(X, F)

    FF = front.F
    for i in range(len(FF)):
        for j in range(len(FF)):
            if i != j:
                assert not dominates(FF[i], FF[j])
    for f in F:
        in_front = np.any(np.all(FF == f, axis=1))
        assert in_front or any(dominates(g, f) for g in FF)


def test_front_limit_drops_most_crowded():
    front = ParetoFront(n_var=1, n_obj=2, limit=3)
    for t in (0.0, 1.0, 0.5, 0.45):
        front.offer(np.array([t]), np.array([t, 1.0 - t]))
    assert len(front) == 3
    kept = np.sort(front.X[:, 0])
    assert kept[0] == 0.0 and kept[-1] == 1.0


def test_front_limit_must_be_positive():
    with pytest.raises(ValueError):
        ParetoFront(n_var=1, n_obj=2, limit=0)


def test_representative_sample_and_tournament():
    front = ParetoFront(n_var=1, n_obj=2)
    for t in (0.0, 0.3, 1.0):
        front.offer(np.array([t]), np.array([t, 1.2 - 2 * t if t < 1 else -1.0]))
    x, f = front.representative()
    assert f.sum() == front.F.sum(axis=1).min()
    rng = seed(0).stream(0)
    for _ in range(10):
        xs, _ = front.sample(rng)
        assert np.any(np.all(front.X == xs, axis=1))
        xt = front.tournament(rng)
        assert np.any(np.all(front.X == xt, axis=1))


def test_empty_front_lookups():
    front = ParetoFront(n_var=1, n_obj=2)
    with pytest.raises(LookupError):
        front.representative()
    with pytest.raises(LookupError):
        front.sample(seed(0).stream(0))


def test_tournament_reuses_crowding_until_membership_changes(monkeypatch):
    from natureopt.engine import archive

    calls = []
    real = archive.crowding_distance

    def counting(F):
        calls.append(len(F))
        return real(F)

    monkeypatch.setattr(archive, "crowding_distance", counting)
    front = ParetoFront(n_var=1, n_obj=2)
    for t in np.linspace(0.0, 1.0, 40):
        front.offer(np.array([t]), np.array([t, 1.0 - t]))
    rng = seed(1).stream(0)
    for _ in range(200):
        front.tournament(rng)
    assert calls == [40]

    assert not front.offer(np.array([0.5]), np.array([0.6, 0.6]))
    front.tournament(rng)
    assert calls == [40]

    assert front.offer(np.array([2.0]), np.array([-1.0, 2.0]))
    for _ in range(50):
        front.tournament(rng)
    np.testing.assert_array_equal(front.crowding(), real(front.F))
    assert calls == [40, 41]


def test_truncation_refreshes_crowding():
    front = ParetoFront(n_var=1, n_obj=2, limit=4)
    for t in (0.0, 1.0, 0.5, 0.25):
        front.offer(np.array([t]), np.array([t, 1.0 - t]))
    front.crowding()
    front.offer(np.array([0.75]), np.array([0.75, 0.25]))
    assert len(front) == 4
    np.testing.assert_array_equal(front.crowding(), crowding_distance(front.F))


def test_single_best_carries_product_of_incumbent():
    best = SingleBest(n_var=1)
    assert best.product is None
    best.offer(np.array([1.0]), 1.0, product="first")
    best.offer(np.array([2.0]), 2.0, product="worse")
    assert best.product == "first"
    best.offer_many(np.array([[0.5], [0.2]]), np.array([[0.5], [0.2]]), products=["a", "b"])
    assert best.product == "b"
    np.testing.assert_array_equal(best.x, [0.2])


def test_front_products_stay_aligned_through_eviction_and_truncation():
    front = ParetoFront(n_var=1, n_obj=2, limit=3)
    front.offer(np.array([9.0]), np.array([1.0, 1.0]), product="dominated")
    for t in (0.0, 1.0, 0.5, 0.45):
        front.offer(np.array([t]), np.array([t, 1.0 - t]), product=f"p{t}")
    assert len(front.products) == len(front) == 3
    for x, p in zip(front.X[:, 0], front.products):
        assert p == f"p{x}"
    x, _ = front.representative()
    assert front.representative_product() == f"p{x[0]}"
