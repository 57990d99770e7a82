import numpy as np
import pytest

from natureopt import optimize
from natureopt.foundation.eval import ThreadEvalBackend

STRATEGIES = ["rga", "de", "pso", "fa", "tlbo"]
BOUNDS = [(-3.0, 3.0), (-3.0, 3.0), (-3.0, 3.0)]


def rastrigin(x):
    return float(10.0 * x.size + np.sum(x * x - 10.0 * np.cos(2.0 * np.pi * x)))


def _run(name, backend, **kwargs):
    return optimize(name, (BOUNDS, rastrigin), termination=15, seed=123, pop_size=12, eval_backend=backend, **kwargs)


def _assert_same(a, b):
    np.testing.assert_array_equal(a.best_x, b.best_x)
    assert a.best_f == b.best_f
    assert a.n_eval == b.n_eval
    assert a.history == b.history


@pytest.mark.parametrize("name", STRATEGIES)
def test_threads_match_serial(name):
    serial = _run(name, "serial")
    threaded = _run(name, "threads", n_workers=4)
    _assert_same(serial, threaded)


@pytest.mark.parametrize("name", STRATEGIES)
def test_joblib_matches_serial(name):
    _assert_same(_run(name, "serial"), _run(name, "joblib", n_workers=2))


def test_chunking_does_not_change_results():
    backend = ThreadEvalBackend(n_workers=3, chunk_size=1)
    try:
        chunked = _run("de", backend)
    finally:
        backend.close()
    _assert_same(_run("de", "serial"), chunked)


def test_same_seed_same_run_different_seed_differs():
    a = _run("pso", "serial")
    b = _run("pso", "serial")
    _assert_same(a, b)
    c = optimize("pso", (BOUNDS, rastrigin), termination=15, seed=124, pop_size=12)
    assert not np.array_equal(a.best_x, c.best_x)


def test_multi_objective_fronts_match_across_backends():
    def objective(x):
        return (x[0], 1.0 - np.sqrt(max(x[0], 0.0)) + x[1] ** 2)

    bounds = [(0.0, 1.0), (-1.0, 1.0)]
    serial = optimize("de", (bounds, objective), termination=10, seed=7, pop_size=12)
    threaded = optimize("de", (bounds, objective), termination=10, seed=7, pop_size=12, eval_backend="threads")
    np.testing.assert_array_equal(serial.front_X, threaded.front_X)
    np.testing.assert_array_equal(serial.front_F, threaded.front_F)
    assert serial.history == threaded.history
