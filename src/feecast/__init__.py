from feecast import common
from feecast import data_struct
from feecast.data_struct import (
    AnomalyResult,
    Forecast,
    ModelParameters,
    Observation,
    TrainResult,
)
from feecast.data_process import GapInterpolator, TimeBucketer, trim_missing
from feecast.noise_filter import NoiseFilter
from feecast.holt_winters import HoltWinters, SeasonalForecaster
from feecast.model_optimizer import ModelOptimizer
from feecast.anomaly import AnomalyScorer
from feecast.config import AnalyserConfig, MonitorConfig
from feecast.analyser import (
    ANALYSERS,
    BaseAnalyser,
    HoltWintersAnalyser,
    create_analyser,
    register_analyser,
)
from feecast.monitor import EntityMonitor, build_monitors
from feecast.errors import (
    FeecastError,
    InsufficientDataError,
    InsufficientTrainingDataError,
    InvalidObservationError,
)
