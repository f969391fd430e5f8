"""
Scalar Kalman filter used to denoise a series before fitting a seasonal model.
"""

import logging
from typing import Optional
import numpy as np
import feecast.common as common

logger = logging.getLogger(__name__)


class NoiseFilter:
    """
    Random-walk Kalman filter with one hidden state, the denoised value.

    The first value initializes the state with a variance equal to the
    observation noise. Every following value goes through a prediction step,
    which adds `process_noise` to the state variance, and an update step.
    A new filter state is created on each call to :meth:`filter`, so calls are
    independent of each other.

    Args:
        process_noise (float): Variance added to the hidden state at each step.
            Defaults to 0.1.
        observation_noise (float): Variance of the observation noise. Defaults to 6.
            The larger the ratio `observation_noise / process_noise`, the
            smoother the output.

    Examples:
        >>> noise_filter = NoiseFilter(process_noise=0.1, observation_noise=6)
        >>> noise_filter.filter(np.array([1.0, 1.2, 0.9]))
    """

    def __init__(
        self,
        process_noise: Optional[float] = 0.1,
        observation_noise: Optional[float] = 6.0,
    ):
        if not process_noise > 0:
            raise ValueError(f"process_noise must be positive, got {process_noise}.")
        if not observation_noise > 0:
            raise ValueError(
                f"observation_noise must be positive, got {observation_noise}."
            )
        self.process_noise = process_noise
        self.observation_noise = observation_noise
        self.transition_matrix = np.array([[1.0]])
        self.observation_matrix = np.array([[1.0]])
        self.process_noise_matrix = np.array([[process_noise]])

    def filter(self, values: np.ndarray) -> np.ndarray:
        """
        Filter the values from left to right.

        Args:
            values (np.ndarray): 1D array without missing values.

        Returns:
            np.ndarray: Posterior mean after each value, same length as `values`.
        """
        values = np.asarray(values, dtype=float).ravel()
        filtered = np.empty_like(values)
        if len(values) == 0:
            return filtered

        mu_states = np.array([[values[0]]])
        var_states = np.array([[self.observation_noise]])
        filtered[0] = values[0]

        for i in range(1, len(values)):
            mu_obs_predict, var_obs_predict, mu_states_prior, var_states_prior = (
                common.forward(
                    mu_states,
                    var_states,
                    self.transition_matrix,
                    self.process_noise_matrix,
                    self.observation_matrix,
                )
            )
            delta_mu_states, delta_var_states = common.backward(
                values[i],
                mu_obs_predict,
                var_obs_predict + self.observation_noise,
                var_states_prior,
                self.observation_matrix,
            )
            mu_states = mu_states_prior + delta_mu_states
            var_states = var_states_prior + delta_var_states
            filtered[i] = mu_states.item()

        logger.debug(
            "Filtered %d values, final state variance %.4g",
            len(values),
            var_states.item(),
        )
        return filtered
