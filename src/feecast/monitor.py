"""
Per-entity bookkeeping around analysers: the bounded window of training
samples and the decision of when to retrain.

A host typically calls :meth:`EntityMonitor.observe` for each new event of a
monitored entity and :meth:`EntityMonitor.retrain` once per tick (e.g. per
block). A monitor is owned by a single caller; it does not synchronize
concurrent `observe` and `retrain` calls.
"""

import logging
from collections import deque
from typing import Dict, List, Optional, Sequence, Tuple
from feecast.analyser import ANALYSERS, BaseAnalyser, create_analyser
from feecast.config import MonitorConfig
from feecast.data_process import to_observation
from feecast.data_struct import AnomalyResult, Observation, TrainResult

logger = logging.getLogger(__name__)


class EntityMonitor:
    """
    Analysers and training window of one monitored entity.

    Args:
        address (str): Identifier of the entity, e.g. a contract address.
        analysers (Sequence[BaseAnalyser]): Analysers checking this entity.
        max_training_data (int): Maximum number of samples kept; the oldest
            samples are evicted first.
        name (str, optional): Human-readable name of the entity.

    Attributes:
        is_up_to_date (bool): False when samples arrived since the last training.

    Examples:
        >>> monitor = EntityMonitor("0xabc", [create_analyser("holt-winters", {"seasonLength": 24})], 5000)
        >>> anomalies = monitor.observe(Observation(1672531200, 3.2))
        >>> monitor.retrain()
    """

    def __init__(
        self,
        address: str,
        analysers: Sequence[BaseAnalyser],
        max_training_data: int,
        name: Optional[str] = "",
    ):
        if max_training_data < 1:
            raise ValueError(
                f"max_training_data must be positive, got {max_training_data}."
            )
        self.address = address
        self.name = name
        self.analysers = list(analysers)
        self.max_training_data = max_training_data
        self._observations = deque(maxlen=max_training_data)
        self.is_up_to_date = True

    @property
    def observations(self) -> List[Observation]:
        """
        List[Observation]: Current training window, oldest first.
        """
        return list(self._observations)

    def observe(self, observation: Observation) -> List[Tuple[BaseAnalyser, AnomalyResult]]:
        """
        Classify an observation with every analyser, then add it to the
        training window. Observations without a value are classified but
        neither stored nor marking the monitor stale.

        Args:
            observation (Observation): New observation.

        Returns:
            List[Tuple[BaseAnalyser, AnomalyResult]]: Analysers that flagged
            the observation, with their verdicts.
        """
        if not self.analysers:
            return []

        observation = to_observation(observation)
        anomalies = []
        for analyser in self.analysers:
            result = analyser.is_anomaly(observation)
            if result.is_anomaly:
                logger.info(
                    "%s flagged %s at %d: expected %.6g, actual %.6g",
                    analyser.name,
                    self.address,
                    observation.timestamp,
                    result.expected,
                    result.actual,
                )
                anomalies.append((analyser, result))

        if observation.value is not None:
            self._observations.append(observation)
            self.is_up_to_date = False
        return anomalies

    def retrain(self) -> List[Tuple[BaseAnalyser, TrainResult]]:
        """
        Train every analyser on the current window if samples arrived since the
        last training. The monitor is up to date afterwards, even if an analyser
        did not have enough data.

        Returns:
            List[Tuple[BaseAnalyser, TrainResult]]: Training results, empty if
            nothing was trained.
        """
        if self.is_up_to_date or not self._observations or not self.analysers:
            return []

        window = list(self._observations)
        results = [(analyser, analyser.train(window)) for analyser in self.analysers]
        self.is_up_to_date = True
        logger.debug(
            "Retrained %d analysers of %s on %d samples",
            len(results),
            self.address,
            len(window),
        )
        return results


def build_monitors(config: MonitorConfig) -> Dict[str, EntityMonitor]:
    """
    Build one monitor per configured entity, with the global analysers
    followed by the entity's own analysers. Analyser keys that are not
    registered are skipped with a warning.

    Args:
        config (MonitorConfig): Monitor configuration.

    Returns:
        Dict[str, EntityMonitor]: Monitors keyed by lower-cased entity address.
    """
    monitors = {}
    for entity in config.entities:
        analysers = []
        for item in config.analysers_for(entity):
            if item.key not in ANALYSERS:
                logger.warning(
                    "Skipping unknown analyser %r for %s", item.key, entity.address
                )
                continue
            analysers.append(create_analyser(item.key, item.config))
        monitors[entity.address] = EntityMonitor(
            address=entity.address,
            analysers=analysers,
            max_training_data=config.max_training_data,
            name=entity.name,
        )
    return monitors
