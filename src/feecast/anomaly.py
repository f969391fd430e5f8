"""
Decision rule comparing an observation with a committed forecast.
"""

from typing import Optional
from feecast.data_struct import AnomalyResult, Forecast, Observation

NOT_ANOMALOUS = AnomalyResult(is_anomaly=False)


class AnomalyScorer:
    """
    Flag observations exceeding their predicted value by more than a relative
    tolerance. Only upward deviations are flagged.

    The scorer declines to judge, and reports no anomaly, when there is no
    forecast or no value, and when the observation falls outside the forecast
    window: before its first usable bucket, or after its last bucket (the
    model is then stale and due for retraining).

    Examples:
        >>> scorer = AnomalyScorer()
        >>> scorer.score(Observation(1672660800, 200.0), forecast, anomaly_threshold_rate=0.5)
        AnomalyResult(is_anomaly=True, expected=100.0, actual=200.0)
    """

    @staticmethod
    def forecast_index(timestamp: int, forecast: Forecast) -> int:
        """
        Index in `forecast.predicted` of the bucket containing `timestamp`.
        """
        bucket_size = forecast.bucket_size
        distance = (
            timestamp // bucket_size - forecast.from_timestamp // bucket_size
        )
        return int(distance) + forecast.season_length

    def score(
        self,
        observation: Observation,
        forecast: Optional[Forecast],
        anomaly_threshold_rate: float,
    ) -> AnomalyResult:
        """
        Args:
            observation (Observation): Observation to classify.
            forecast (Optional[Forecast]): Committed forecast, if any.
            anomaly_threshold_rate (float): Relative tolerance above the prediction.

        Returns:
            AnomalyResult: Anomaly with the expected and actual values, or a
            negative result.
        """
        if forecast is None or observation.value is None:
            return NOT_ANOMALOUS

        index = self.forecast_index(observation.timestamp, forecast)
        if index < forecast.season_length or index >= len(forecast.predicted):
            return NOT_ANOMALOUS

        expected = float(forecast.predicted[index])
        actual = observation.value
        if actual > expected * (1 + anomaly_threshold_rate):
            return AnomalyResult(is_anomaly=True, expected=expected, actual=actual)
        return NOT_ANOMALOUS
