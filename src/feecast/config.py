"""
Configuration of analysers and monitors.

Configurations are built from already-loaded mappings (e.g. a parsed JSON
file). Keys are accepted in snake_case and in the camelCase names used by
existing agent configuration files.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import List, Optional
from feecast.data_process import HOUR
from feecast.data_struct import ModelParameters

_ANALYSER_ALIASES = {
    "seasonLength": "season_length",
    "trainingCycles": "optimization_iterations",
    "optimizationIterations": "optimization_iterations",
    "changeRate": "anomaly_threshold_rate",
    "anomalyThresholdRate": "anomaly_threshold_rate",
    "alpha": "level_coef",
    "gamma": "trend_coef",
    "delta": "season_coef",
    "R": "process_noise",
    "Q": "observation_noise",
    "processNoise": "process_noise",
    "observationNoise": "observation_noise",
    "bucketSize": "bucket_size",
}


def _normalize_keys(config: dict, aliases: dict, fields: set, owner: str) -> dict:
    normalized = {}
    for key, value in config.items():
        name = aliases.get(key, key)
        if name not in fields:
            raise ValueError(f"Unknown {owner} option: {key!r}")
        if name in normalized:
            raise ValueError(f"Option {name!r} is given more than once.")
        normalized[name] = value
    return normalized


@dataclass
class AnalyserConfig:
    """
    Settings of a :class:`~feecast.analyser.HoltWintersAnalyser`.

    Args:
        season_length (int): Number of buckets in one season. Defaults to 24.
        optimization_iterations (int): Iteration budget of the coefficient
            search run at each training. Defaults to 0 (no search).
        anomaly_threshold_rate (float): Relative tolerance above the predicted
            value. Defaults to 0.5.
        level_coef (float): Initial level smoothing coefficient.
        trend_coef (float): Initial trend smoothing coefficient.
        season_coef (float): Initial season smoothing coefficient.
        process_noise (float): Process noise variance of the noise filter.
        observation_noise (float): Observation noise variance of the noise filter.
        bucket_size (int): Bucket width in seconds. Defaults to one hour.
        multiplicative (bool): Multiplicative seasonality. Defaults to True.

    Examples:
        >>> AnalyserConfig.from_dict({"seasonLength": 24, "trainingCycles": 10, "changeRate": 0.5})
    """

    season_length: int = 24
    optimization_iterations: int = 0
    anomaly_threshold_rate: float = 0.5
    level_coef: float = 0.0
    trend_coef: float = 0.0
    season_coef: float = 0.0
    process_noise: float = 0.1
    observation_noise: float = 6.0
    bucket_size: int = HOUR
    multiplicative: bool = True

    def __post_init__(self):
        # Validates the model parameters early.
        self.to_parameters()
        if not self.process_noise > 0 or not self.observation_noise > 0:
            raise ValueError("Noise filter variances must be positive.")
        if self.bucket_size <= 0:
            raise ValueError(f"bucket_size must be positive, got {self.bucket_size}.")

    @classmethod
    def from_dict(cls, config: Optional[dict]) -> "AnalyserConfig":
        """
        Build a configuration from a mapping.

        Raises:
            ValueError: For unknown or duplicated options.
        """
        fields = {f.name for f in dataclasses.fields(cls)}
        return cls(**_normalize_keys(config or {}, _ANALYSER_ALIASES, fields, "analyser"))

    def to_parameters(self) -> ModelParameters:
        """
        Returns:
            ModelParameters: Initial model parameters described by this configuration.
        """
        return ModelParameters(
            level_coef=self.level_coef,
            trend_coef=self.trend_coef,
            season_coef=self.season_coef,
            season_length=self.season_length,
            optimization_iterations=self.optimization_iterations,
            anomaly_threshold_rate=self.anomaly_threshold_rate,
        )


@dataclass
class AnalyserItemConfig:
    """
    Analyser to build, identified by its registry key, with its settings.
    """

    key: str
    config: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, item: dict) -> "AnalyserItemConfig":
        if "key" not in item:
            raise ValueError(f"Analyser entry without key: {item!r}")
        return cls(key=item["key"], config=dict(item.get("config") or {}))


@dataclass
class EntityConfig:
    """
    Monitored entity, e.g. a contract address, with its own analysers in
    addition to the global ones.
    """

    address: str
    name: str = ""
    analysers: List[AnalyserItemConfig] = field(default_factory=list)

    def __post_init__(self):
        self.address = self.address.lower()

    @classmethod
    def from_dict(cls, entity: dict) -> "EntityConfig":
        if "address" not in entity:
            raise ValueError(f"Entity entry without address: {entity!r}")
        return cls(
            address=entity["address"],
            name=entity.get("name", ""),
            analysers=[
                AnalyserItemConfig.from_dict(item)
                for item in entity.get("analysers") or []
            ],
        )


@dataclass
class MonitorConfig:
    """
    Configuration of every monitored entity.

    Args:
        entities (List[EntityConfig]): Monitored entities.
        analysers (List[AnalyserItemConfig]): Analysers built for every entity.
        max_training_data (int): Maximum number of samples kept per entity.

    Examples:
        >>> MonitorConfig.from_dict({
                "contracts": [{"address": "0xAbC", "name": "Router"}],
                "analysers": [{"key": "holt-winters", "config": {"seasonLength": 24}}],
                "maxTrainingData": 5000,
            })
    """

    entities: List[EntityConfig] = field(default_factory=list)
    analysers: List[AnalyserItemConfig] = field(default_factory=list)
    max_training_data: int = 10000

    def __post_init__(self):
        if self.max_training_data < 1:
            raise ValueError(
                f"max_training_data must be positive, got {self.max_training_data}."
            )

    @classmethod
    def from_dict(cls, config: dict) -> "MonitorConfig":
        entities = config.get("entities", config.get("contracts", []))
        max_training_data = config.get(
            "max_training_data", config.get("maxTrainingData", 10000)
        )
        return cls(
            entities=[EntityConfig.from_dict(entity) for entity in entities],
            analysers=[
                AnalyserItemConfig.from_dict(item)
                for item in config.get("analysers") or []
            ],
            max_training_data=max_training_data,
        )

    def analysers_for(self, entity: EntityConfig) -> List[AnalyserItemConfig]:
        """
        Global analysers followed by the entity's own analysers.
        """
        return [*self.analysers, *entity.analysers]
