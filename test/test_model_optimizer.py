import math

import pytest

from feecast import ModelOptimizer


def quadratic(param):
    return (param["x"] - 0.3) ** 2 + (param["y"] - 0.8) ** 2


param_space = {"x": [0.0, 1.0], "y": [0.0, 1.0]}


def test_optimizer_finds_minimum():
    optimizer = ModelOptimizer(
        objective=quadratic,
        param_space=param_space,
        initial_param={"x": 0.5, "y": 0.5},
        num_optimization_iteration=50,
    )
    optimizer.optimize()
    best = optimizer.get_best_param()

    assert best["x"] == pytest.approx(0.3, abs=1e-3)
    assert best["y"] == pytest.approx(0.8, abs=1e-3)
    assert optimizer.metric_optim == pytest.approx(quadratic(best))


def test_optimizer_respects_bounds():
    optimizer = ModelOptimizer(
        objective=lambda param: (param["x"] - 1.7) ** 2,
        param_space={"x": [0.0, 1.0]},
        initial_param={"x": 0.95},
        num_optimization_iteration=20,
    )
    optimizer.optimize()

    assert optimizer.get_best_param()["x"] == 1.0


def test_optimizer_iteration_budget():
    """The objective is evaluated at most twice per parameter and iteration"""

    calls = []

    def objective(param):
        calls.append(param)
        return quadratic(param)

    optimizer = ModelOptimizer(
        objective=objective,
        param_space=param_space,
        initial_param={"x": 0.0, "y": 0.0},
        num_optimization_iteration=3,
    )
    optimizer.optimize()

    assert optimizer.num_iteration <= 3
    assert len(calls) <= 1 + 3 * 2 * len(param_space)
    for param in calls:
        assert all(0.0 <= value <= 1.0 for value in param.values())


def test_optimizer_zero_iteration():
    optimizer = ModelOptimizer(
        objective=quadratic,
        param_space=param_space,
        initial_param={"x": 0.1, "y": 0.2},
        num_optimization_iteration=0,
    )
    optimizer.optimize()

    assert optimizer.get_best_param() == {"x": 0.1, "y": 0.2}
    assert optimizer.num_iteration == 0


def test_optimizer_never_worse():
    """NaN metrics are never accepted"""

    def objective(param):
        return math.nan if param["x"] != 0.5 else 1.0

    optimizer = ModelOptimizer(
        objective=objective,
        param_space={"x": [0.0, 1.0]},
        initial_param={"x": 0.5},
        num_optimization_iteration=10,
    )
    optimizer.optimize()

    assert optimizer.get_best_param() == {"x": 0.5}
    assert optimizer.metric_optim == 1.0


def test_optimizer_default_start():
    """Without initial parameters the search starts in the middle of the bounds"""

    optimizer = ModelOptimizer(
        objective=lambda param: 0.0,
        param_space={"x": [0.0, 4.0]},
        num_optimization_iteration=5,
    )
    optimizer.optimize()

    assert optimizer.get_best_param() == {"x": 2.0}


@pytest.mark.parametrize(
    "space",
    [{"x": [0.0]}, {"x": [1.0, 0.0]}, {"x": 0.5}],
)
def test_optimizer_invalid_space(space):
    with pytest.raises(ValueError):
        ModelOptimizer(objective=quadratic, param_space=space)
