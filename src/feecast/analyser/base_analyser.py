from abc import ABC, abstractmethod
from typing import Iterable, Optional
from feecast.data_struct import (
    AnomalyResult,
    Forecast,
    ModelParameters,
    Observation,
    TrainResult,
)


class BaseAnalyser(ABC):
    """
    `BaseAnalyser` abstract class. It defines the capabilities required from
    any anomaly analyser, so that several algorithms, or several settings of
    the same algorithm, can check the same entity side by side.
    Subclasses must define:

    - `key`: Stable identifier, used to look the analyser up in the registry
      and in configurations.
    - `name`: Human-readable name.
    - `train`: Fit a new model on a window of observations.
    - `is_anomaly`: Classify one observation against the committed model.

    """

    key: str = None
    name: str = None

    @property
    @abstractmethod
    def parameters(self) -> ModelParameters:
        """
        ModelParameters: Currently committed parameters.
        """

    @property
    @abstractmethod
    def forecast(self) -> Optional[Forecast]:
        """
        Optional[Forecast]: Currently committed forecast, None before the
        first successful training.
        """

    @abstractmethod
    def train(self, observations: Iterable[Observation]) -> TrainResult:
        """
        Fit a new model. Insufficient data is reported through an unsuccessful
        result, in which case the committed model is left unchanged.
        """

    @abstractmethod
    def is_anomaly(self, observation: Observation) -> AnomalyResult:
        """
        Classify one observation against the committed model.
        """
