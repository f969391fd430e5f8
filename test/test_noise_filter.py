import numpy as np
import numpy.testing as npt
import pytest

from feecast import NoiseFilter, common


@pytest.mark.parametrize("num_data", [0, 1, 2, 17])
def test_filter_output_length(num_data):
    """The output has one value per input"""

    values = np.linspace(0.0, 1.0, num_data)
    assert len(NoiseFilter().filter(values)) == num_data


def test_filter_constant_series():
    values = np.full(30, 100.0)
    npt.assert_allclose(NoiseFilter().filter(values), values)


def test_filter_manual_update():
    """Compare with a manual scalar Kalman filter"""

    process_noise, observation_noise = 0.5, 2.0
    values = np.array([1.0, 3.0, 2.0, 5.0])

    mu, var = values[0], observation_noise
    expected = [mu]
    for obs in values[1:]:
        var_prior = var + process_noise
        gain = var_prior / (var_prior + observation_noise)
        mu = mu + gain * (obs - mu)
        var = var_prior - gain * var_prior
        expected.append(mu)

    npt.assert_allclose(
        NoiseFilter(process_noise, observation_noise).filter(values), expected
    )


def test_filter_is_causal():
    """Output i only depends on inputs 0..i"""

    values = np.array([1.0, 4.0, 2.0, 8.0, 3.0])
    changed = values.copy()
    changed[3:] = [100.0, -50.0]

    noise_filter = NoiseFilter()
    npt.assert_allclose(
        noise_filter.filter(values)[:3], noise_filter.filter(changed)[:3]
    )


def test_filter_calls_are_independent():
    noise_filter = NoiseFilter()
    first = noise_filter.filter(np.array([10.0, 20.0, 30.0]))
    noise_filter.filter(np.array([1000.0, -1000.0]))
    npt.assert_allclose(noise_filter.filter(np.array([10.0, 20.0, 30.0])), first)


def test_filter_smooths_noise():
    rng = np.random.default_rng(1)
    values = 50.0 + rng.normal(0.0, 3.0, 500)
    filtered = NoiseFilter().filter(values)

    assert np.std(filtered[100:]) < np.std(values[100:])


@pytest.mark.parametrize(
    "process_noise, observation_noise", [(0.0, 1.0), (1.0, 0.0), (-1.0, 1.0)]
)
def test_filter_invalid_noise(process_noise, observation_noise):
    with pytest.raises(ValueError):
        NoiseFilter(process_noise, observation_noise)


def test_forward_backward():
    """Prediction and update steps in matrix form"""

    transition_matrix = np.array([[1.0, 1.0], [0.0, 1.0]])
    observation_matrix = np.array([[1.0, 0.0]])
    process_noise_matrix = 0.1 * np.eye(2)
    mu_states = np.array([[1.0], [0.5]])
    var_states = np.eye(2)

    mu_obs, var_obs, mu_prior, var_prior = common.forward(
        mu_states, var_states, transition_matrix, process_noise_matrix, observation_matrix
    )
    npt.assert_allclose(mu_prior, [[1.5], [0.5]])
    npt.assert_allclose(var_prior, [[2.1, 1.0], [1.0, 1.1]])
    npt.assert_allclose(mu_obs, [[1.5]])
    npt.assert_allclose(var_obs, [[2.1]])

    delta_mu, delta_var = common.backward(
        2.0, mu_obs, var_obs, var_prior, observation_matrix
    )
    npt.assert_allclose(delta_mu, [[0.5], [0.5 / 2.1]])
    npt.assert_allclose(delta_var, -np.array([[2.1, 1.0], [1.0, 1.0 / 2.1]]))
