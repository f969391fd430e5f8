"""
This module defines the values exchanged between the pipeline stages and the
callers of an analyser:

- `Observation`: One timestamped sample for a monitored entity.
- `ModelParameters`: Smoothing coefficients and anomaly settings of an analyser.
- `Forecast`: Immutable snapshot of predicted values produced by one training.
- `TrainResult`: Outcome and diagnostics of a training.
- `AnomalyResult`: Verdict for one observation.

"""

import math
import numbers
from dataclasses import dataclass, field
from typing import Optional
import numpy as np
from feecast.errors import InvalidObservationError


@dataclass(frozen=True)
class Observation:
    """
    One sample, e.g. the priority fee of a transaction.

    Attributes:
        timestamp (int): Unix timestamp in seconds.
        value (Optional[float]): Observed value. `None` when the producer has
            no usable sample for this event.

    Raises:
        InvalidObservationError: If the timestamp is not a non-negative integer
            or the value is not a finite number.

    Examples:
        >>> Observation(timestamp=1672531200, value=2.5)
        >>> Observation(timestamp=1672531200)
    """

    timestamp: int
    value: Optional[float] = None

    def __post_init__(self):
        timestamp = self.timestamp
        if isinstance(timestamp, bool) or not isinstance(timestamp, numbers.Real):
            raise InvalidObservationError(f"Invalid timestamp: {timestamp!r}")
        if not isinstance(timestamp, numbers.Integral):
            if not math.isfinite(timestamp) or not float(timestamp).is_integer():
                raise InvalidObservationError(f"Invalid timestamp: {timestamp!r}")
        if timestamp < 0:
            raise InvalidObservationError(f"Negative timestamp: {timestamp!r}")
        object.__setattr__(self, "timestamp", int(timestamp))

        value = self.value
        if value is None:
            return
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidObservationError(f"Invalid value: {value!r}")
        if not math.isfinite(value):
            raise InvalidObservationError(f"Non-finite value: {value!r}")
        object.__setattr__(self, "value", float(value))


@dataclass(frozen=True)
class ModelParameters:
    """
    Parameters of a seasonal model. Instances are immutable: a successful
    training publishes a new instance instead of editing the current one.

    Attributes:
        level_coef (float): Smoothing coefficient of the level, in [0, 1].
        trend_coef (float): Smoothing coefficient of the trend, in [0, 1].
        season_coef (float): Smoothing coefficient of the seasonal indices, in [0, 1].
        season_length (int): Number of buckets in one season.
        optimization_iterations (int): Iteration budget of the coefficient search.
            0 disables the search.
        anomaly_threshold_rate (float): Relative tolerance above the predicted value.
    """

    level_coef: float = 0.0
    trend_coef: float = 0.0
    season_coef: float = 0.0
    season_length: int = 24
    optimization_iterations: int = 0
    anomaly_threshold_rate: float = 0.5

    def __post_init__(self):
        for name in ("level_coef", "trend_coef", "season_coef"):
            coef = getattr(self, name)
            if not 0.0 <= coef <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {coef}.")
        if (
            isinstance(self.season_length, bool)
            or not isinstance(self.season_length, numbers.Integral)
            or self.season_length < 1
        ):
            raise ValueError(
                f"season_length must be a positive integer, got {self.season_length}."
            )
        if (
            not isinstance(self.optimization_iterations, numbers.Integral)
            or self.optimization_iterations < 0
        ):
            raise ValueError(
                "optimization_iterations must be a non-negative integer, "
                f"got {self.optimization_iterations}."
            )
        if not self.anomaly_threshold_rate >= 0:
            raise ValueError(
                "anomaly_threshold_rate must be non-negative, "
                f"got {self.anomaly_threshold_rate}."
            )

    @property
    def min_training_data(self) -> int:
        """
        int: Minimum number of buckets required to train, i.e. two seasons.
        """
        return 2 * self.season_length

    @property
    def coefficients(self) -> dict:
        """
        dict: Smoothing coefficients keyed by parameter name.
        """
        return {
            "level_coef": self.level_coef,
            "trend_coef": self.trend_coef,
            "season_coef": self.season_coef,
        }


@dataclass(frozen=True, eq=False)
class Forecast:
    """
    Predicted values covering the training span plus one season ahead.

    `predicted[i]` is the prediction for the `i`-th training bucket for
    `i < len(training data)` and the forecast for the following buckets after
    that. Positions before `season_length` only hold the seeded fit and are
    never used for scoring.

    Attributes:
        predicted (np.ndarray): Read-only 1D array of predicted values.
        from_timestamp (int): Timestamp of the bucket at index `season_length`.
        to_timestamp (int): Timestamp of the last forecast bucket.
        season_length (int): Season length the forecast was built with.
        bucket_size (int): Bucket width in seconds.
    """

    predicted: np.ndarray
    from_timestamp: int
    to_timestamp: int
    season_length: int
    bucket_size: int = 3600

    def __post_init__(self):
        predicted = np.array(self.predicted, dtype=float)
        predicted.setflags(write=False)
        object.__setattr__(self, "predicted", predicted)

    def __len__(self) -> int:
        return len(self.predicted)


@dataclass(eq=False)
class TrainResult:
    """
    Outcome of :meth:`~feecast.analyser.BaseAnalyser.train`.

    Attributes:
        success (bool): Whether a new forecast was committed.
        reason (Optional[str]): Why training was skipped, when it was.
        prepared_data (np.ndarray): Bucketed and trimmed values, NaN for gaps.
        interpolated_data (np.ndarray): Values after gap interpolation.
        filtered_data (np.ndarray): Values after noise filtering.
        timestamps (np.ndarray): Bucket timestamps of the series above.
        metric (Optional[float]): One-step-ahead mean squared error of the
            committed model on the filtered data.
        parameters (Optional[ModelParameters]): Committed parameters.
    """

    success: bool
    reason: Optional[str] = None
    prepared_data: np.ndarray = field(default_factory=lambda: np.array([]))
    interpolated_data: np.ndarray = field(default_factory=lambda: np.array([]))
    filtered_data: np.ndarray = field(default_factory=lambda: np.array([]))
    timestamps: np.ndarray = field(
        default_factory=lambda: np.array([], dtype=np.int64)
    )
    metric: Optional[float] = None
    parameters: Optional[ModelParameters] = None


@dataclass(frozen=True)
class AnomalyResult:
    """
    Verdict for one observation. `expected` and `actual` are only set for
    anomalies.
    """

    is_anomaly: bool = False
    expected: Optional[float] = None
    actual: Optional[float] = None
