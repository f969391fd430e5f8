import logging

from conftest import HOUR, START, hourly
from feecast import (
    AnomalyResult,
    BaseAnalyser,
    EntityMonitor,
    HoltWintersAnalyser,
    MonitorConfig,
    Observation,
    TrainResult,
    build_monitors,
)


class MockAnalyser(BaseAnalyser):
    """Analyser recording its calls"""

    key = "analyser-mock"
    name = "Analyser name"

    def __init__(self, anomaly=False):
        self.anomaly = anomaly
        self.trained_on = []
        self.checked = []

    @property
    def parameters(self):
        return None

    @property
    def forecast(self):
        return None

    def train(self, observations):
        self.trained_on.append(list(observations))
        return TrainResult(success=True)

    def is_anomaly(self, observation):
        self.checked.append(observation)
        if self.anomaly:
            return AnomalyResult(True, expected=1.0, actual=observation.value)
        return AnomalyResult()


def test_observe_checks_then_stores():
    analyser = MockAnalyser()
    monitor = EntityMonitor("0xabc", [analyser], max_training_data=10)

    assert monitor.is_up_to_date
    assert monitor.observe(Observation(START, 1.0)) == []
    assert analyser.checked == [Observation(START, 1.0)]
    assert monitor.observations == [Observation(START, 1.0)]
    assert not monitor.is_up_to_date


def test_observe_returns_anomalies():
    flagging, quiet = MockAnalyser(anomaly=True), MockAnalyser()
    monitor = EntityMonitor("0xabc", [flagging, quiet], max_training_data=10)

    anomalies = monitor.observe((START, 5.0))
    assert len(anomalies) == 1
    analyser, result = anomalies[0]
    assert analyser is flagging
    assert result.actual == 5.0


def test_observe_without_analysers():
    monitor = EntityMonitor("0xabc", [], max_training_data=10)
    assert monitor.observe(Observation(START, 1.0)) == []
    assert monitor.observations == []


def test_retrain_only_when_stale():
    analyser = MockAnalyser()
    monitor = EntityMonitor("0xabc", [analyser], max_training_data=10)

    assert monitor.retrain() == []

    monitor.observe(Observation(START, 1.0))
    results = monitor.retrain()
    assert len(results) == 1 and results[0][0] is analyser
    assert monitor.is_up_to_date

    assert monitor.retrain() == []
    assert len(analyser.trained_on) == 1


def test_window_is_capped():
    """The oldest samples are evicted first"""

    analyser = MockAnalyser()
    monitor = EntityMonitor("0xabc", [analyser], max_training_data=5)
    observations = hourly(range(8))
    for observation in observations:
        monitor.observe(observation)
    monitor.retrain()

    assert analyser.trained_on[0] == observations[-5:]


def test_monitor_end_to_end(season_length):
    config = MonitorConfig.from_dict(
        {
            "contracts": [{"address": "0xABC", "name": "Router"}],
            "analysers": [
                {
                    "key": "holt-winters",
                    "config": {"seasonLength": season_length, "changeRate": 0.5},
                }
            ],
            "maxTrainingData": 10 * season_length,
        }
    )
    monitors = build_monitors(config)
    monitor = monitors["0xabc"]

    assert monitor.name == "Router"
    assert isinstance(monitor.analysers[0], HoltWintersAnalyser)

    for observation in hourly([100.0] * (2 * season_length)):
        assert monitor.observe(observation) == []
    (analyser, result), = monitor.retrain()
    assert result.success

    timestamp = START + (2 * season_length + 1) * HOUR
    anomalies = monitor.observe(Observation(timestamp, 200.0))
    assert len(anomalies) == 1
    assert anomalies[0][0] is analyser
    assert anomalies[0][1].expected == 100.0
    assert monitor.observe(Observation(timestamp, 120.0)) == []


def test_valueless_observations_are_not_stored():
    """Events without a value keep the window and the up to date flag as is"""

    analyser = MockAnalyser()
    monitor = EntityMonitor("0xabc", [analyser], max_training_data=4)
    observations = hourly([100.0] * 4)
    for observation in observations:
        monitor.observe(observation)
    monitor.retrain()
    assert monitor.is_up_to_date

    for i in range(4):
        monitor.observe(Observation(START + (4 + i) * HOUR, None))

    assert len(analyser.checked) == 8
    assert monitor.observations == observations
    assert monitor.is_up_to_date
    assert monitor.retrain() == []
    assert len(analyser.trained_on) == 1


def test_unknown_analyser_is_skipped(caplog):
    config = MonitorConfig.from_dict(
        {
            "entities": [
                {
                    "address": "0xabc",
                    "analysers": [{"key": "arima", "config": {}}],
                }
            ],
            "analysers": [{"key": "holt-winters", "config": {"seasonLength": 4}}],
        }
    )
    with caplog.at_level(logging.WARNING, logger="feecast.monitor"):
        monitors = build_monitors(config)

    analysers = monitors["0xabc"].analysers
    assert len(analysers) == 1
    assert isinstance(analysers[0], HoltWintersAnalyser)
    assert "arima" in caplog.text
