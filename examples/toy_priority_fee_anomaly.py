import logging
import fire
import numpy as np
import pandas as pd
from feecast import HoltWintersAnalyser, Observation

# Synthetic priority fees: a daily cycle, noise, and missing hours
rng = np.random.default_rng(7)
time_index = pd.date_range(start="2023-01-01", periods=24 * 14, freq="h", tz="UTC")
hours = np.arange(len(time_index))
fees = 2.0 + 0.8 * np.sin(2 * np.pi * hours / 24) + rng.normal(0, 0.1, len(hours))
fees[rng.choice(len(hours), size=20, replace=False)] = np.nan
df_raw = pd.DataFrame({"fee": fees}, index=time_index)

# Several transactions per hour, a few minutes apart
timestamps = (df_raw.index.asi8 // 10**9).astype(np.int64)
observations = [
    Observation(int(timestamp) + minute * 60, None if np.isnan(fee) else fee * scale)
    for timestamp, fee in zip(timestamps, df_raw["fee"])
    for minute, scale in ((5, 0.9), (25, 1.0), (50, 0.95))
]


def main(
    season_length: int = 24,
    optimization_iterations: int = 20,
    anomaly_threshold_rate: float = 0.5,
    spike: float = 6.0,
):
    logging.basicConfig(level=logging.INFO)

    analyser = HoltWintersAnalyser(
        {
            "season_length": season_length,
            "optimization_iterations": optimization_iterations,
            "anomaly_threshold_rate": anomaly_threshold_rate,
            "level_coef": 0.3,
            "trend_coef": 0.05,
            "season_coef": 0.3,
        }
    )
    result = analyser.train(observations)
    if not result.success:
        print(f"Training failed: {result.reason}")
        return

    print(f"Optimal parameters: {analyser.parameters}")
    print(f"One-step-ahead MSE: {result.metric:.4f}")

    # Check the next few hours, with a spike in the middle
    next_hour = int(timestamps[-1]) + 3600
    for i, value in enumerate([2.1, 2.4, spike, 2.2]):
        observation = Observation(next_hour + i * 3600 + 600, value)
        verdict = analyser.is_anomaly(observation)
        print(
            f"{pd.Timestamp(observation.timestamp, unit='s')} - value {value:.2f} - "
            f"anomaly: {verdict.is_anomaly} - expected: {verdict.expected}"
        )


if __name__ == "__main__":
    fire.Fire(main)
