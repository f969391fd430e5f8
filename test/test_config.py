import pytest

from feecast import AnalyserConfig, ModelParameters, MonitorConfig


def test_analyser_config_aliases():
    config = AnalyserConfig.from_dict(
        {
            "seasonLength": 24,
            "trainingCycles": 10,
            "changeRate": 0.3,
            "alpha": 0.1,
            "gamma": 0.2,
            "delta": 0.3,
            "R": 0.05,
            "Q": 4,
        }
    )

    assert config.season_length == 24
    assert config.optimization_iterations == 10
    assert config.anomaly_threshold_rate == 0.3
    assert (config.level_coef, config.trend_coef, config.season_coef) == (0.1, 0.2, 0.3)
    assert config.process_noise == 0.05
    assert config.observation_noise == 4


def test_analyser_config_defaults():
    config = AnalyserConfig.from_dict(None)

    assert config == AnalyserConfig()
    assert config.bucket_size == 3600
    assert config.multiplicative
    assert config.to_parameters() == ModelParameters(
        season_length=24, optimization_iterations=0, anomaly_threshold_rate=0.5
    )


@pytest.mark.parametrize(
    "options",
    [
        {"unknown": 1},
        {"alpha": 0.1, "level_coef": 0.2},
        {"alpha": 1.5},
        {"season_length": 0},
        {"changeRate": -0.1},
        {"trainingCycles": -1},
        {"Q": 0},
        {"bucket_size": 0},
    ],
)
def test_analyser_config_invalid(options):
    with pytest.raises(ValueError):
        AnalyserConfig.from_dict(options)


def test_model_parameters_immutable():
    parameters = ModelParameters()
    with pytest.raises(AttributeError):
        parameters.level_coef = 0.5
    assert parameters.min_training_data == 48


def test_monitor_config():
    config = MonitorConfig.from_dict(
        {
            "contracts": [
                {"address": "0xAbC", "name": "Router"},
                {
                    "address": "0xDEF",
                    "analysers": [
                        {"key": "holt-winters", "config": {"seasonLength": 12}}
                    ],
                },
            ],
            "analysers": [{"key": "holt-winters", "config": {"seasonLength": 24}}],
            "maxTrainingData": 5000,
        }
    )

    assert config.max_training_data == 5000
    assert [entity.address for entity in config.entities] == ["0xabc", "0xdef"]
    assert config.entities[0].name == "Router"

    first, second = config.entities
    assert [item.config["seasonLength"] for item in config.analysers_for(first)] == [24]
    assert [item.config["seasonLength"] for item in config.analysers_for(second)] == [
        24,
        12,
    ]


def test_monitor_config_invalid():
    with pytest.raises(ValueError):
        MonitorConfig.from_dict({"contracts": [{"name": "no address"}]})
    with pytest.raises(ValueError):
        MonitorConfig.from_dict({"analysers": [{"config": {}}]})
    with pytest.raises(ValueError):
        MonitorConfig.from_dict({"maxTrainingData": 0})
