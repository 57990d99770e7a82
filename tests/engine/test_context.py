import logging

import numpy as np
import pytest

from natureopt.engine.context import Context
from natureopt.engine.initializers import gaussian_pool, lhs_pool, uniform_by, uniform_pool
from natureopt.foundation.exceptions import ConfigurationError, EvaluationError, InvalidParameterError
from natureopt.foundation.problem import Problem


def sphere(x):
    return float(np.sum(x * x))


def _ctx(objective=sphere, pop_size=6, seed=3, **kwargs):
    problem = Problem([(-5, 5), (-1, 1)], objective)
    return Context.init(problem, pop_size, seed, **kwargs)


def test_init_samples_inside_box_and_marks_stale():
    ctx = _ctx()
    assert ctx.X.shape == (6, 2)
    assert ctx.bounds.contains(ctx.X)
    assert ctx.stale.all()
    assert ctx.generation == 0 and ctx.n_eval == 0
    with pytest.raises(LookupError):
        ctx.F
    with pytest.raises(LookupError):
        ctx.best_x


def test_pop_size_must_exceed_one():
    with pytest.raises(InvalidParameterError):
        _ctx(pop_size=1)


def test_evaluate_all_counts_and_tracks_best():
    ctx = _ctx()
    assert ctx.evaluate_all() == 6
    assert ctx.evaluate_all() == 0
    ctx.update_best()
    assert ctx.n_eval == 6
    assert not ctx.stale.any()
    assert ctx.n_obj == 1 and not ctx.is_multi_objective
    assert ctx.best_f == pytest.approx(ctx.F[:, 0].min())


def test_population_arrays_are_read_only():
    ctx = _ctx()
    ctx.evaluate_all()
    with pytest.raises(ValueError):
        ctx.X[0, 0] = 0.0
    with pytest.raises(ValueError):
        ctx.F[0, 0] = 0.0


def test_replace_and_set_positions_clip_to_bounds():
    ctx = _ctx()
    ctx.evaluate_all()
    ctx.replace([0], np.array([[9.0, -9.0]]), np.array([[0.0]]))
    np.testing.assert_array_equal(ctx.X[0], [5.0, -1.0])
    assert ctx.F[0, 0] == 0.0
    ctx.set_positions(np.array([[-7.0, 0.5], [1.0, 3.0]]), indices=[1, 2])
    np.testing.assert_array_equal(ctx.X[1], [-5.0, 0.5])
    np.testing.assert_array_equal(ctx.X[2], [1.0, 1.0])
    np.testing.assert_array_equal(ctx.stale, [False, True, True, False, False, False])
    assert ctx.evaluate_all() == 2


def test_best_includes_off_population_evaluations():
    ctx = _ctx()
    ctx.evaluate_all()
    ctx.update_best()
    F = ctx.evaluate(np.array([[0.0, 0.0]]))
    assert F[0, 0] == 0.0
    ctx.update_best()
    assert ctx.best_f == 0.0
    np.testing.assert_array_equal(ctx.best_x, [0.0, 0.0])
    assert ctx.n_eval == 7


def test_non_finite_fitness_warns_once(caplog):
    def objective(x):
        return float("nan") if x[0] > 0 else float(x[0])

    ctx = _ctx(objective, pop_size=10)
    with caplog.at_level(logging.WARNING, logger="natureopt"):
        ctx.evaluate_all()
        ctx.evaluate(np.array([[1.0, 0.0], [2.0, 0.0]]))
    warnings = [r for r in caplog.records if "non-finite" in r.getMessage()]
    assert len(warnings) == 1
    assert not np.isnan(ctx.F).any()
    assert ctx.non_finite_count >= 2


def test_objective_width_change_is_rejected():
    calls = {"n": 0}

    def objective(x):
        calls["n"] += 1
        return [1.0] if calls["n"] <= 4 else [1.0, 2.0]

    ctx = _ctx(objective, pop_size=4)
    ctx.evaluate_all()
    with pytest.raises(EvaluationError):
        ctx.evaluate(np.array([[0.0, 0.0]]))


def test_multi_objective_context_uses_front():
    ctx = Context.init(Problem([(0, 1)], lambda x: (x[0], 1.0 - x[0])), 8, 0)
    ctx.evaluate_all()
    ctx.update_best()
    assert ctx.is_multi_objective
    assert len(ctx.front) == 8
    view = ctx.view()
    assert view.is_multi_objective
    assert view.front_F.shape == (8, 2)


def test_view_is_a_detached_snapshot():
    ctx = _ctx()
    ctx.evaluate_all()
    ctx.update_best()
    view = ctx.view()
    with pytest.raises(ValueError):
        view.X[0, 0] = 1.0
    before = view.X.copy()
    ctx.set_positions(np.zeros((6, 2)))
    np.testing.assert_array_equal(view.X, before)
    assert view.best_f == ctx.best_f


def test_individual_snapshot_includes_aux_rows():
    ctx = _ctx()
    ctx.evaluate_all()
    ctx.aux["velocity"] = np.arange(12, dtype=float).reshape(6, 2)
    ind = ctx.individual(2)
    np.testing.assert_array_equal(ind.aux["velocity"], [4.0, 5.0])
    np.testing.assert_array_equal(ind.x, ctx.X[2])
    ctx.set_positions(np.zeros(2), indices=[2])
    assert ctx.individual(2).f is None


def test_streams_are_stable_per_individual():
    a = _ctx(seed=11)
    b = _ctx(seed=11)
    assert a.stream(4).random() == b.stream(4).random()
    assert a.stream(4) is a.stream(4)
    np.testing.assert_array_equal(a.X, b.X)


def test_uniform_pool_rows_depend_only_on_stream():
    small = _ctx(pop_size=3, seed=5)
    large = _ctx(pop_size=6, seed=5)
    np.testing.assert_array_equal(small.X, large.X[:3])
    explicit = _ctx(pop_size=3, seed=5, initializer=uniform_pool)
    np.testing.assert_array_equal(explicit.X, small.X)


def test_gaussian_pool_clips_and_validates():
    ctx = _ctx(initializer=gaussian_pool(mean=[4.5, 0.0], std=2.0), pop_size=20)
    assert ctx.bounds.contains(ctx.X)
    assert ctx.X[:, 0].mean() > 2.0
    with pytest.raises(InvalidParameterError):
        gaussian_pool(0.0, -1.0)


def test_lhs_pool_covers_every_stratum():
    ctx = _ctx(initializer=lhs_pool, pop_size=10)
    lower, span = ctx.bounds.lower, ctx.bounds.span
    for j in range(2):
        strata = np.floor((ctx.X[:, j] - lower[j]) / span[j] * 10).astype(int)
        assert sorted(np.clip(strata, 0, 9).tolist()) == list(range(10))


def test_initializer_shape_is_checked():
    with pytest.raises(ConfigurationError):
        _ctx(initializer=lambda ctx: np.zeros((2, 2)))


def test_uniform_by_keeps_only_accepted_rows():
    ctx = _ctx(initializer=uniform_by(lambda x: x[0] > 0.0), pop_size=12)
    assert ctx.bounds.contains(ctx.X)
    assert np.all(ctx.X[:, 0] > 0.0)
    again = _ctx(initializer=uniform_by(lambda x: x[0] > 0.0), pop_size=12)
    np.testing.assert_array_equal(ctx.X, again.X)


def test_uniform_by_accepting_everything_matches_uniform_pool():
    filtered = _ctx(initializer=uniform_by(lambda x: True), seed=8)
    plain = _ctx(initializer=uniform_pool, seed=8)
    np.testing.assert_array_equal(filtered.X, plain.X)


def test_uniform_by_gives_up_after_max_tries():
    with pytest.raises(ConfigurationError, match="rejected 5 samples"):
        _ctx(initializer=uniform_by(lambda x: False, max_tries=5))
    with pytest.raises(ConfigurationError):
        uniform_by("x > 0")
    with pytest.raises(InvalidParameterError):
        uniform_by(lambda x: True, max_tries=0)


def test_seeded_population_is_not_evaluated_again():
    calls = []

    def counted(x):
        calls.append(1)
        return sphere(x)

    X0 = np.array([[1.0, 0.5], [-2.0, 0.0], [0.5, -0.5]])
    F0 = np.array([1.25, 4.0, 0.5])
    ctx = _ctx(counted, pop_size=3, population=(X0, F0))
    assert not ctx.stale.any()
    assert ctx.evaluate_all() == 0
    ctx.update_best()
    assert calls == [] and ctx.n_eval == 0
    np.testing.assert_array_equal(ctx.X, X0)
    np.testing.assert_array_equal(ctx.F[:, 0], F0)
    np.testing.assert_array_equal(ctx.best_x, X0[2])
    assert ctx.best_f == 0.5


@pytest.mark.parametrize(
    "X0, F0",
    [
        (np.zeros((2, 2)), np.zeros(3)),
        (np.zeros((3, 3)), np.zeros(3)),
        (np.zeros((3, 2)), np.zeros(2)),
        (np.array([[6.0, 0.0], [0.0, 0.0], [0.0, 0.0]]), np.zeros(3)),
    ],
)
def test_seeded_population_shape_is_checked(X0, F0):
    with pytest.raises(ConfigurationError):
        _ctx(pop_size=3, population=(X0, F0))


def test_seeded_population_excludes_initializer():
    with pytest.raises(ConfigurationError):
        _ctx(pop_size=3, population=(np.zeros((3, 2)), np.zeros(3)), initializer=uniform_pool)


def test_best_product_follows_incumbent():
    problem = Problem([(-5, 5), (-1, 1)], lambda x: (sphere(x), {"x": x.copy()}), returns_product=True)
    ctx = Context.init(problem, 5, 0)
    ctx.evaluate_all()
    ctx.update_best()
    np.testing.assert_array_equal(ctx.best_product["x"], ctx.best_x)
    ctx.evaluate(np.zeros((1, 2)))
    ctx.update_best()
    assert ctx.best_f == 0.0
    np.testing.assert_array_equal(ctx.best_product["x"], [0.0, 0.0])
