"""
This module searches the smoothing coefficients of a seasonal model with a
bounded number of iterations of coordinate descent.
"""

import logging
import math
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class ModelOptimizer:
    """
    Minimize an objective over a box of continuous parameters.

    Each iteration probes every parameter, one at a time, one step up and one
    step down (clipped to its bounds) and keeps the first probe that strictly
    improves the metric. When a full iteration brings no improvement, the steps
    are halved. The search stops after `num_optimization_iteration` iterations
    or once every step is below `min_step`, so it always terminates and the
    returned parameters are never worse than the initial ones.

    Args:
        objective (Callable):
            Function mapping a parameter dict to the metric to minimize. NaN is
            treated as the worst possible metric.
        param_space (Dict[str, list]):
            Parameter search space: two-value lists [min, max] for defining the
            bounds of the optimization.
        initial_param (Dict[str, float], optional):
            Starting point. Values are clipped into the bounds. Defaults to the
            middle of each interval.
        num_optimization_iteration (int, optional):
            Maximum number of iterations. Defaults to 50.
        initial_step (float, optional):
            First step, as a fraction of each interval's width. Defaults to 0.1.
        min_step (float, optional):
            Smallest step, as a fraction of each interval's width. Defaults to 1e-4.

    Attributes:
        param_optim (Dict[str, float]):
            The best parameters found during optimization.
        metric_optim (float):
            Metric of :attr:`param_optim`.
        num_iteration (int):
            Number of iterations actually run.

    Examples:
        >>> optimizer = ModelOptimizer(
                objective=lambda p: (p["x"] - 0.3) ** 2,
                param_space={"x": [0.0, 1.0]},
                num_optimization_iteration=20,
            )
        >>> optimizer.optimize()
        >>> optimizer.get_best_param()
    """

    def __init__(
        self,
        objective: Callable[[Dict[str, float]], float],
        param_space: Dict[str, list],
        initial_param: Optional[Dict[str, float]] = None,
        num_optimization_iteration: Optional[int] = 50,
        initial_step: Optional[float] = 0.1,
        min_step: Optional[float] = 1e-4,
    ):
        for param_name, values in param_space.items():
            if not (isinstance(values, (list, tuple)) and len(values) == 2):
                raise ValueError(
                    f"Parameter {param_name} should be a list of two values (min, max)."
                )
            low, high = values
            if not low < high:
                raise ValueError(
                    f"Invalid bounds for parameter {param_name}: {values}"
                )
        if num_optimization_iteration < 0:
            raise ValueError(
                "num_optimization_iteration must be non-negative, "
                f"got {num_optimization_iteration}."
            )

        self._objective = objective
        self._param_space = {name: tuple(values) for name, values in param_space.items()}
        self._initial_param = initial_param or {}
        self._num_optimization_iteration = int(num_optimization_iteration)
        self._initial_step = initial_step
        self._min_step = min_step
        self.param_optim = None
        self.metric_optim = None
        self.num_iteration = 0

    def _clip(self, param_name: str, value: float) -> float:
        low, high = self._param_space[param_name]
        return min(max(value, low), high)

    def _evaluate(self, param: Dict[str, float]) -> float:
        metric = self._objective(param)
        if metric is None or math.isnan(metric):
            return math.inf
        return metric

    def optimize(self):
        """
        Run the coordinate descent from the initial parameters.
        """

        best_param = {}
        for param_name, (low, high) in self._param_space.items():
            value = self._initial_param.get(param_name, (low + high) / 2)
            best_param[param_name] = self._clip(param_name, value)
        best_metric = self._evaluate(best_param)

        step = {
            param_name: self._initial_step * (high - low)
            for param_name, (low, high) in self._param_space.items()
        }
        min_step = {
            param_name: self._min_step * (high - low)
            for param_name, (low, high) in self._param_space.items()
        }

        self.num_iteration = 0
        for iteration in range(self._num_optimization_iteration):
            self.num_iteration = iteration + 1
            improved = False
            for param_name in self._param_space:
                for direction in (1.0, -1.0):
                    candidate = dict(best_param)
                    candidate[param_name] = self._clip(
                        param_name, best_param[param_name] + direction * step[param_name]
                    )
                    if candidate[param_name] == best_param[param_name]:
                        continue
                    metric = self._evaluate(candidate)
                    if metric < best_metric:
                        best_param, best_metric = candidate, metric
                        improved = True
                        break

            logger.debug(
                "# %d/%d - Metric: %.6g - Parameter: %s",
                iteration + 1,
                self._num_optimization_iteration,
                best_metric,
                best_param,
            )

            if not improved:
                step = {param_name: value / 2 for param_name, value in step.items()}
                if all(step[name] < min_step[name] for name in step):
                    break

        self.param_optim = best_param
        self.metric_optim = best_metric

    def get_best_param(self) -> Dict[str, float]:
        """
        Retrieve the optimal parameters after running optimization.

        Returns:
            Dict[str, float]: Best parameters found.
        """
        return self.param_optim
