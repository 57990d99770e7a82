import numpy as np
import pytest

from natureopt import optimize
from natureopt.engine.algorithm import DE, PSO, RGA, accept, build_algorithm
from natureopt.engine.context import Context
from natureopt.foundation.problem import Problem

STRATEGIES = ["rga", "de", "pso", "fa", "tlbo"]
TOLERANCE = {"rga": 5e-2, "de": 1e-3, "pso": 1e-2, "fa": 5e-2, "tlbo": 1e-3}

BOUNDS = [(-5.0, 5.0), (-5.0, 5.0)]


def sphere(x):
    return float(np.sum(x * x))


def corner(x):
    # Optimum outside the box, so the best point sits on the upper bound.
    return float(np.sum((x - 7.0) ** 2))


@pytest.mark.parametrize("name", STRATEGIES)
def test_strategy_converges_on_sphere(name):
    result = optimize(name, (BOUNDS, sphere), termination=100, seed=1, pop_size=20)
    assert result.best_f < TOLERANCE[name]
    assert result.best_f == pytest.approx(sphere(result.best_x))
    assert result.generations == 100


@pytest.mark.parametrize("name", STRATEGIES)
def test_best_fitness_never_increases(name):
    result = optimize(name, (BOUNDS, sphere), termination=40, seed=2, pop_size=12)
    best = result.best_history()
    assert np.all(np.diff(best) <= 0.0)


@pytest.mark.parametrize("name", STRATEGIES)
def test_population_stays_inside_bounds(name):
    lower = np.array([b[0] for b in BOUNDS])
    upper = np.array([b[1] for b in BOUNDS])

    def check(view):
        assert np.all(view.X >= lower) and np.all(view.X <= upper)

    result = optimize(name, (BOUNDS, corner), termination=30, seed=3, pop_size=12, callback=check)
    assert np.all(result.best_x <= upper) and np.all(result.best_x >= lower)


def _ready_context(pop_size=8, seed=0):
    ctx = Context.init(Problem(BOUNDS, sphere), pop_size, seed)
    ctx.evaluate_all()
    ctx.update_best()
    return ctx


def test_pso_keeps_clamped_velocity_per_particle():
    algo = PSO(pop_size=8, vmax_fraction=0.1)
    ctx = _ready_context()
    algo.initialize(ctx)
    algo.step(ctx)
    V = ctx.aux["velocity"]
    assert V.shape == (8, 2)
    assert np.all(np.abs(V) <= 0.1 * 10.0 + 1e-12)
    assert ctx.stale.all()
    np.testing.assert_array_equal(ctx.individual(3).aux["velocity"], V[3])


@pytest.mark.parametrize("strategy", ["rand1", "best1", "current_to_best1", "best2", "rand2"])
@pytest.mark.parametrize("crossover", ["bin", "exp"])
def test_de_variants_improve(strategy, crossover):
    algo = DE(pop_size=12, strategy=strategy, crossover=crossover)
    result = optimize(algo, (BOUNDS, sphere), termination=60, seed=4)
    assert result.best_f < 1e-2


@pytest.mark.parametrize("crossover", ["sbx", "blx"])
@pytest.mark.parametrize("mutation", ["pm", "gaussian"])
def test_rga_operator_choices(crossover, mutation):
    algo = RGA(pop_size=20, crossover=crossover, mutation=mutation)
    result = optimize(algo, (BOUNDS, sphere), termination=60, seed=5)
    assert result.best_f < 0.5


def test_accept_keeps_only_not_worse_rows():
    ctx = _ready_context(pop_size=4)
    F_old = np.array(ctx.F, copy=True)
    X_new = np.zeros((4, 2))
    F_new = np.array([[F_old[0, 0] - 1.0], [F_old[1, 0] + 1.0], [F_old[2, 0]], [np.inf]])
    mask = accept(ctx, np.arange(4), X_new, F_new)
    np.testing.assert_array_equal(mask, [True, False, True, F_old[3, 0] == np.inf])
    np.testing.assert_array_equal(ctx.X[0], [0.0, 0.0])
    assert ctx.F[1, 0] == F_old[1, 0]


def test_step_only_touches_the_context():
    algo = build_algorithm("tlbo", pop_size=10)
    first = optimize(algo, (BOUNDS, sphere), termination=10, seed=6)
    second = optimize(algo, (BOUNDS, sphere), termination=10, seed=6)
    np.testing.assert_array_equal(first.best_x, second.best_x)
    assert first.history == second.history
