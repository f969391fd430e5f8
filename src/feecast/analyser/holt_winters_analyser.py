import logging
import threading
from typing import Iterable, Optional, Tuple, Union
import numpy as np
from feecast.analyser.base_analyser import BaseAnalyser
from feecast.anomaly import AnomalyScorer
from feecast.config import AnalyserConfig
from feecast.data_process import (
    GapInterpolator,
    TimeBucketer,
    to_observation,
    trim_missing,
)
from feecast.data_struct import (
    AnomalyResult,
    Forecast,
    ModelParameters,
    Observation,
    TrainResult,
)
from feecast.errors import InsufficientDataError, InsufficientTrainingDataError
from feecast.holt_winters import SeasonalForecaster
from feecast.noise_filter import NoiseFilter

logger = logging.getLogger(__name__)


class HoltWintersAnalyser(BaseAnalyser):
    """
    `HoltWintersAnalyser` class, inheriting from `BaseAnalyser`.
    It forecasts the hourly maximum of the observed values with a Holt-Winters
    model and flags observations exceeding the forecast by more than
    `anomaly_threshold_rate`.

    Training runs the pipeline:

    1. Bucket observations and keep the maximum value per bucket.
    2. Trim leading and trailing empty buckets.
    3. Interpolate interior empty buckets.
    4. Denoise with a scalar Kalman filter.
    5. Fit the seasonal model, optionally searching its coefficients, and
       forecast one season ahead.

    The new forecast and parameters are built aside and published with a
    single assignment each, so :meth:`is_anomaly` always reads a complete
    forecast, even while training runs in another thread.

    Args:
        config (Union[AnalyserConfig, dict]): Settings of the analyser.

    Examples:
        >>> analyser = HoltWintersAnalyser({"seasonLength": 24, "changeRate": 0.5})
        >>> analyser.train(observations).success
        True
        >>> analyser.is_anomaly(Observation(timestamp=1672660800, value=12.0))
    """

    key = "holt-winters"
    name = "Holt Winters Analyser"

    def __init__(self, config: Optional[Union[AnalyserConfig, dict]] = None):
        if config is None:
            raise ValueError(f"{self.name} requires initial config")
        if not isinstance(config, AnalyserConfig):
            config = AnalyserConfig.from_dict(config)

        self.config = config
        self._parameters = config.to_parameters()
        self._forecast = None
        self._train_lock = threading.Lock()

        self.bucketer = TimeBucketer(bucket_size=config.bucket_size)
        self.interpolator = GapInterpolator()
        self.forecaster = SeasonalForecaster(
            bucket_size=config.bucket_size, multiplicative=config.multiplicative
        )
        self.scorer = AnomalyScorer()

    @property
    def parameters(self) -> ModelParameters:
        return self._parameters

    @property
    def forecast(self) -> Optional[Forecast]:
        return self._forecast

    @property
    def min_training_data(self) -> int:
        """
        int: Minimum number of observations and buckets required to train.
        """
        return self._parameters.min_training_data

    def train(self, observations: Iterable[Observation]) -> TrainResult:
        """
        Fit a new model on a window of observations.

        Args:
            observations (Iterable[Observation]): Training window, in any order.

        Returns:
            TrainResult: Successful result with the pipeline's intermediate
            series, or an unsuccessful one when there is not enough data. The
            committed forecast and parameters only change on success.

        Raises:
            InvalidObservationError: If an observation is malformed.
        """
        observations = [to_observation(item) for item in observations]
        with self._train_lock:
            try:
                result, forecast, parameters = self._fit(
                    observations, self._parameters
                )
            except InsufficientDataError as error:
                logger.info("%s: training skipped, %s", self.name, error)
                return TrainResult(success=False, reason=str(error))
            self._parameters = parameters
            self._forecast = forecast
        logger.info(
            "%s: committed forecast of %d values from %d to %d (mse %.6g)",
            self.name,
            len(forecast),
            forecast.from_timestamp,
            forecast.to_timestamp,
            result.metric,
        )
        return result

    def _fit(
        self, observations, parameters: ModelParameters
    ) -> Tuple[TrainResult, Forecast, ModelParameters]:
        min_data = parameters.min_training_data
        if len(observations) < min_data:
            raise InsufficientTrainingDataError(len(observations), min_data)

        series = trim_missing(self.bucketer.bucket(observations))
        if len(series) < min_data:
            raise InsufficientTrainingDataError(len(series), min_data)

        interpolated = self.interpolator.interpolate(series)
        noise_filter = NoiseFilter(
            process_noise=self.config.process_noise,
            observation_noise=self.config.observation_noise,
        )
        filtered = noise_filter.filter(interpolated.to_numpy())
        timestamps = series.index.to_numpy(dtype=np.int64)

        forecast, parameters, metric = self.forecaster.fit(
            timestamps, filtered, parameters
        )
        result = TrainResult(
            success=True,
            prepared_data=series.to_numpy(dtype=float),
            interpolated_data=interpolated.to_numpy(dtype=float),
            filtered_data=filtered,
            timestamps=timestamps,
            metric=metric,
            parameters=parameters,
        )
        return result, forecast, parameters

    def is_anomaly(self, observation: Observation) -> AnomalyResult:
        """
        Classify one observation against the committed forecast.

        Args:
            observation (Observation): Observation to classify.

        Returns:
            AnomalyResult: Negative when there is no forecast yet, no value, or
            when the observation falls outside the forecast window.
        """
        observation = to_observation(observation)
        forecast = self._forecast
        return self.scorer.score(
            observation, forecast, self._parameters.anomaly_threshold_rate
        )
