"""
Utility functions that are used in multiple classes.
"""

from typing import Tuple
import numpy as np


def calc_observation(
    mu_states: np.ndarray,
    var_states: np.ndarray,
    observation_matrix: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Estimate observation mean and variance from hidden states and the observation_matrix.

    Args:
        mu_states (np.ndarray): Mean of the state variables.
        var_states (np.ndarray): Covariance matrix of the state variables.
        observation_matrix (np.ndarray): Observation model matrix.

    Returns:
        Tuple[np.ndarray, np.ndarray]: Predicted mean and variance of observations.
    """
    mu_obs_predict = observation_matrix @ mu_states
    var_obs_predict = observation_matrix @ var_states @ observation_matrix.T
    return mu_obs_predict, var_obs_predict


def forward(
    mu_states_posterior: np.ndarray,
    var_states_posterior: np.ndarray,
    transition_matrix: np.ndarray,
    process_noise_matrix: np.ndarray,
    observation_matrix: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Perform the prediction step in Kalman filter.

    Args:
        mu_states_posterior (np.ndarray): Posterior hidden states mean vector.
        var_states_posterior (np.ndarray): Posterior hidden state covariance matrix.
        transition_matrix (np.ndarray): Transition matrix.
        process_noise_matrix (np.ndarray): Process noise matrix.
        observation_matrix (np.ndarray): Observation matrix.

    Returns:
        Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
            Predicted observation mean/var and state prior mean/var.
    """
    mu_states_prior = transition_matrix @ mu_states_posterior
    var_states_prior = (
        transition_matrix @ var_states_posterior @ transition_matrix.T
        + process_noise_matrix
    )
    mu_obs_predict, var_obs_predict = calc_observation(
        mu_states_prior, var_states_prior, observation_matrix
    )
    return mu_obs_predict, var_obs_predict, mu_states_prior, var_states_prior


def backward(
    obs: float,
    mu_obs_predict: np.ndarray,
    var_obs_predict: np.ndarray,
    var_states_prior: np.ndarray,
    observation_matrix: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Perform the update step in Kalman filter.

    Args:
        obs (float): Observation.
        mu_obs_predict (np.ndarray): Predicted mean.
        var_obs_predict (np.ndarray): Predicted variance, observation noise included.
        var_states_prior (np.ndarray): Prior covariance matrix for hidden states.
        observation_matrix (np.ndarray): Observation matrix.

    Returns:
        Tuple[np.ndarray, np.ndarray]: Delta/Correction for hidden states' mean and covariance matrix.
    """
    cov_obs_states = observation_matrix @ var_states_prior
    delta_mu_states = cov_obs_states.T / var_obs_predict @ (obs - mu_obs_predict)
    delta_var_states = -cov_obs_states.T / var_obs_predict @ cov_obs_states
    return delta_mu_states, delta_var_states


def mse(prediction: np.ndarray, observation: np.ndarray) -> float:
    """
    Mean squared error between two arrays of the same length. NaN for empty
    arrays.
    """
    prediction = np.asarray(prediction, dtype=float)
    observation = np.asarray(observation, dtype=float)
    if prediction.size == 0:
        return float("nan")
    return float(np.mean((prediction - observation) ** 2))
