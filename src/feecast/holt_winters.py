"""
Triple exponential smoothing (Holt-Winters) and the forecaster that fits it on
a filtered series.

The model keeps three hidden states updated at each time step `t` from the
observation :math:`y_t`, for a season of length :math:`L`:

- level: :math:`\\ell_t = \\alpha\\, y_t \\oslash s_{t-L} + (1-\\alpha)(\\ell_{t-1} + b_{t-1})`
- trend: :math:`b_t = \\beta(\\ell_t - \\ell_{t-1}) + (1-\\beta)\\, b_{t-1}`
- season: :math:`s_t = \\gamma\\, y_t \\oslash \\ell_t + (1-\\gamma)\\, s_{t-L}`

where :math:`\\oslash` is a division for the multiplicative model and a
subtraction for the additive one. The one-step-ahead prediction is
:math:`(\\ell_{t-1} + b_{t-1}) \\otimes s_{t-L}`.
"""

import dataclasses
import logging
from typing import Optional, Tuple
import numpy as np
import feecast.common as common
from feecast.data_process import HOUR
from feecast.data_struct import Forecast, ModelParameters
from feecast.errors import InsufficientTrainingDataError
from feecast.model_optimizer import ModelOptimizer

logger = logging.getLogger(__name__)


class HoltWinters:
    """
    Holt-Winters smoothing of a complete series.

    Args:
        data (np.ndarray): 1D array without missing values, at least two seasons long.
        level_coef (float): Smoothing coefficient of the level.
        trend_coef (float): Smoothing coefficient of the trend.
        season_coef (float): Smoothing coefficient of the seasonal indices.
        season_length (int): Number of time steps in one season.
        multiplicative (bool): Multiplicative seasonality if True, additive otherwise.
            Defaults to True.

    Raises:
        InsufficientTrainingDataError: If `data` is shorter than two seasons.

    Examples:
        >>> model = HoltWinters(data, 0.3, 0.1, 0.2, season_length=24)
        >>> predicted = model.predict()
        >>> model.mse()
    """

    def __init__(
        self,
        data: np.ndarray,
        level_coef: float = 0.0,
        trend_coef: float = 0.0,
        season_coef: float = 0.0,
        season_length: int = 24,
        multiplicative: Optional[bool] = True,
    ):
        if season_length < 1:
            raise ValueError(f"season_length must be positive, got {season_length}.")
        self.data = np.asarray(data, dtype=float).ravel()
        if len(self.data) < 2 * season_length:
            raise InsufficientTrainingDataError(len(self.data), 2 * season_length)

        self.level_coef = level_coef
        self.trend_coef = trend_coef
        self.season_coef = season_coef
        self.season_length = int(season_length)
        self.multiplicative = multiplicative

        self.level = None
        self.trend = None
        self.seasonal = None
        self._predicted = None

    def _combine(self, level: float, season: float) -> float:
        if self.multiplicative:
            return level * season
        return level + season

    def _remove(self, value: float, component: float, neutral: float) -> float:
        """
        Remove `component` from `value`: division for the multiplicative model,
        subtraction for the additive one. A zero divisor returns `neutral`.
        """
        if not self.multiplicative:
            return value - component
        if component == 0:
            return neutral
        return value / component

    def initial_level(self) -> float:
        """Mean of the first season."""
        return float(np.mean(self.data[: self.season_length]))

    def initial_trend(self) -> float:
        """Average per-step change between the first two seasons."""
        season_length = self.season_length
        first = self.data[:season_length]
        second = self.data[season_length : 2 * season_length]
        return float(np.mean((second - first) / season_length))

    def initial_seasonal_indices(self) -> np.ndarray:
        """Seasonal indices of the first season relative to its mean."""
        level = self.initial_level()
        return np.array(
            [
                self._remove(value, level, 1.0)
                for value in self.data[: self.season_length]
            ]
        )

    def predict(self) -> np.ndarray:
        """
        Run the smoothing over the series and forecast one season ahead.

        Returns:
            np.ndarray: Array of length `len(data) + season_length`. Entries
            before `season_length` hold the seeded fit of the first season,
            entries up to `len(data) - 1` the one-step-ahead predictions and the
            last `season_length` entries the forecast.
        """
        if self._predicted is not None:
            return self._predicted

        season_length = self.season_length
        num_data = len(self.data)
        alpha, beta, gamma = self.level_coef, self.trend_coef, self.season_coef

        level = self.initial_level()
        trend = self.initial_trend()
        seasonal = np.empty(num_data)
        seasonal[:season_length] = self.initial_seasonal_indices()

        predicted = np.empty(num_data + season_length)
        for i in range(season_length):
            predicted[i] = self._combine(level, seasonal[i])

        for t in range(season_length, num_data):
            obs = float(self.data[t])
            last_season = float(seasonal[t - season_length])
            predicted[t] = self._combine(level + trend, last_season)

            last_level = level
            level = alpha * self._remove(obs, last_season, obs) + (1 - alpha) * (
                level + trend
            )
            trend = beta * (level - last_level) + (1 - beta) * trend
            seasonal[t] = (
                gamma * self._remove(obs, level, 1.0) + (1 - gamma) * last_season
            )

        for step in range(1, season_length + 1):
            t = num_data - 1 + step
            predicted[t] = self._combine(
                level + step * trend, seasonal[t - season_length]
            )

        self.level = level
        self.trend = trend
        self.seasonal = seasonal
        self._predicted = predicted
        return predicted

    def sse(self) -> float:
        """Sum of squared one-step-ahead errors after the first season."""
        residual = self.data[self.season_length :] - self.predict()[
            self.season_length : len(self.data)
        ]
        return float(np.sum(residual**2))

    def mse(self) -> float:
        """Mean squared one-step-ahead error after the first season."""
        return common.mse(
            self.predict()[self.season_length : len(self.data)],
            self.data[self.season_length :],
        )


class SeasonalForecaster:
    """
    Fit a :class:`HoltWinters` model on a filtered series and build a
    :class:`~feecast.data_struct.Forecast`.

    When the parameters allow it, the smoothing coefficients are first searched
    with :class:`~feecast.model_optimizer.ModelOptimizer`, starting from the
    current coefficients, to minimize the one-step-ahead error.

    Args:
        bucket_size (int): Bucket width in seconds. Defaults to one hour.
        multiplicative (bool): Multiplicative seasonality. Defaults to True.
    """

    def __init__(self, bucket_size: int = HOUR, multiplicative: Optional[bool] = True):
        self.bucket_size = int(bucket_size)
        self.multiplicative = multiplicative

    def _model(self, values: np.ndarray, parameters: ModelParameters, **coefficients):
        coefficients = {**parameters.coefficients, **coefficients}
        return HoltWinters(
            values,
            season_length=parameters.season_length,
            multiplicative=self.multiplicative,
            **coefficients,
        )

    def fit(
        self,
        timestamps: np.ndarray,
        values: np.ndarray,
        parameters: ModelParameters,
    ) -> Tuple[Forecast, ModelParameters, float]:
        """
        Args:
            timestamps (np.ndarray): Bucket timestamps, strictly increasing and contiguous.
            values (np.ndarray): Filtered values, same length as `timestamps`.
            parameters (ModelParameters): Current parameters.

        Returns:
            Tuple[Forecast, ModelParameters, float]: The new forecast, the
            parameters it was built with, and its one-step-ahead mean squared error.
            Nothing is committed: the caller publishes the results.

        Raises:
            InsufficientTrainingDataError: If there are fewer than two seasons of values.
        """
        timestamps = np.asarray(timestamps, dtype=np.int64)
        values = np.asarray(values, dtype=float)
        if len(timestamps) != len(values):
            raise ValueError(
                f"Got {len(timestamps)} timestamps for {len(values)} values."
            )
        if len(values) < parameters.min_training_data:
            raise InsufficientTrainingDataError(
                len(values), parameters.min_training_data
            )

        if parameters.optimization_iterations > 0:
            optimizer = ModelOptimizer(
                objective=lambda param: self._model(values, parameters, **param).mse(),
                param_space={name: [0.0, 1.0] for name in parameters.coefficients},
                initial_param=parameters.coefficients,
                num_optimization_iteration=parameters.optimization_iterations,
            )
            optimizer.optimize()
            parameters = dataclasses.replace(parameters, **optimizer.get_best_param())
            logger.debug(
                "Optimal coefficients after %d iterations: %s",
                optimizer.num_iteration,
                optimizer.get_best_param(),
            )

        model = self._model(values, parameters)
        season_length = parameters.season_length
        forecast = Forecast(
            predicted=model.predict(),
            from_timestamp=int(timestamps[season_length]),
            to_timestamp=int(timestamps[-1]) + season_length * self.bucket_size,
            season_length=season_length,
            bucket_size=self.bucket_size,
        )
        return forecast, parameters, model.mse()
