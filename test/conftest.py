import pytest

from feecast import Observation

# 2023-01-01 00:00:00 UTC, aligned on an hour
START = 1672531200
HOUR = 3600


def pytest_addoption(parser):
    parser.addoption(
        "--season-length",
        action="store",
        default=20,
        type=int,
        help="Season length used by the end-to-end scenarios",
    )


@pytest.fixture(scope="session")
def season_length(request):
    return request.config.getoption("--season-length")


def hourly(values, start=START, offset=0):
    """One observation per hour, `offset` seconds after the start of the hour"""
    return [
        Observation(timestamp=start + i * HOUR + offset, value=value)
        for i, value in enumerate(values)
    ]


@pytest.fixture
def constant_observations(season_length):
    return hourly([100.0] * (2 * season_length))


@pytest.fixture
def analyser_config(season_length):
    return {
        "season_length": season_length,
        "optimization_iterations": 0,
        "anomaly_threshold_rate": 0.5,
    }
