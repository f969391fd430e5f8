"""
Data processing for fee time series.

This module provides:

- `TimeBucketer`: Group raw observations into fixed-width time buckets.
- `trim_missing`: Remove leading and trailing gaps of a bucketed series.
- `GapInterpolator`: Fill interior gaps with an eased curve.
"""

import logging
from typing import Iterable, Union
import numpy as np
import pandas as pd
from feecast.data_struct import Observation
from feecast.errors import InsufficientDataError, InvalidObservationError

logger = logging.getLogger(__name__)

HOUR = 3600


def to_observation(item: Union[Observation, tuple, dict]) -> Observation:
    """
    Convert a `(timestamp, value)` tuple or a `{"timestamp", "value"}` mapping
    to an :class:`~feecast.data_struct.Observation`.

    Args:
        item (Union[Observation, tuple, dict]): Sample to convert.

    Returns:
        Observation: The converted sample.

    Raises:
        InvalidObservationError: If the sample does not have the shape of an
            observation.
    """
    if isinstance(item, Observation):
        return item
    try:
        if isinstance(item, dict):
            return Observation(**item)
        return Observation(*item)
    except TypeError as error:
        raise InvalidObservationError(f"Malformed observation: {item!r}") from error


def check_bucket_index(series: pd.Series):
    """
    Ensure the index of a bucketed series is strictly increasing.

    Raises:
        InvalidObservationError: If timestamps are duplicated or out of order.
    """
    if not (series.index.is_monotonic_increasing and series.index.is_unique):
        raise InvalidObservationError(
            "Bucket timestamps must be strictly increasing."
        )


class TimeBucketer:
    """
    Discretize observations into buckets of `bucket_size` seconds. Buckets are
    aligned on multiples of `bucket_size` since the Unix epoch, i.e. minutes and
    seconds are zeroed for hourly buckets.

    Each bucket holds the largest value observed in it, so a spike is never
    under-reported. Buckets without any defined value are NaN.

    Args:
        bucket_size (int): Width of a bucket in seconds. Defaults to one hour.

    Examples:
        >>> bucketer = TimeBucketer()
        >>> bucketer.bucket([Observation(0, 5.0), Observation(60, 9.0), Observation(7200, 3.0)])
        timestamp
        0       9.0
        3600    NaN
        7200    3.0
        Name: value, dtype: float64
    """

    def __init__(self, bucket_size: int = HOUR):
        if bucket_size <= 0:
            raise ValueError(f"bucket_size must be positive, got {bucket_size}.")
        self.bucket_size = int(bucket_size)

    def floor(self, timestamp):
        """
        Timestamp of the bucket containing `timestamp`. Works on scalars and arrays.
        """
        return timestamp // self.bucket_size * self.bucket_size

    def bucket_distance(self, timestamp1: int, timestamp2: int) -> int:
        """
        Number of whole buckets from the bucket of `timestamp2` to the bucket
        of `timestamp1`. Negative when `timestamp1` is earlier.
        """
        return int(
            (self.floor(timestamp1) - self.floor(timestamp2)) // self.bucket_size
        )

    def bucket(
        self, observations: Iterable[Union[Observation, tuple, dict]]
    ) -> pd.Series:
        """
        Group observations into contiguous buckets.

        Args:
            observations (Iterable): Observations in any order.

        Returns:
            pd.Series: Maximum value per bucket, indexed by bucket timestamp. One
            entry per bucket from the first to the last observation's bucket.

        Raises:
            InsufficientDataError: If `observations` is empty.
        """
        observations = [to_observation(item) for item in observations]
        if not observations:
            raise InsufficientDataError("Cannot bucket an empty set of observations.")

        frame = pd.DataFrame(
            {
                "timestamp": np.array(
                    [obs.timestamp for obs in observations], dtype=np.int64
                ),
                "value": np.array(
                    [np.nan if obs.value is None else obs.value for obs in observations],
                    dtype=float,
                ),
            }
        )
        frame = frame.sort_values("timestamp", kind="stable")
        frame["bucket"] = self.floor(frame["timestamp"])

        bucket_max = frame.groupby("bucket")["value"].max()
        first_bucket = int(frame["bucket"].iloc[0])
        last_bucket = int(frame["bucket"].iloc[-1])
        buckets = np.arange(
            first_bucket, last_bucket + self.bucket_size, self.bucket_size
        )

        series = bucket_max.reindex(buckets)
        series.index.name = "timestamp"
        series.name = "value"
        logger.debug(
            "Bucketed %d observations into %d buckets (%d missing)",
            len(observations),
            len(series),
            int(series.isna().sum()),
        )
        return series


def trim_missing(series: pd.Series) -> pd.Series:
    """
    Remove the leading and trailing runs of missing values.

    Args:
        series (pd.Series): Bucketed series.

    Returns:
        pd.Series: Series starting and ending with a present value, or an
        empty series if every bucket is missing.
    """
    present = np.flatnonzero(series.notna().to_numpy())
    if len(present) == 0:
        return series.iloc[0:0]
    return series.iloc[present[0] : present[-1] + 1]


class GapInterpolator:
    """
    Fill every run of missing values lying between two present values.

    A position at normalized distance `t` in `(0, 1)` from the left neighbour
    receives `left + (right - left) * t ** exponent`: the filled values stay
    close to the earlier value and reach the later one near the end of the
    run, without overshooting either.

    Args:
        exponent (float): Easing exponent. Defaults to 5.

    Examples:
        >>> GapInterpolator().interpolate(pd.Series([0.0, np.nan, 32.0]))
        0     0.0
        1     1.0
        2    32.0
        dtype: float64
    """

    def __init__(self, exponent: float = 5):
        if exponent <= 0:
            raise ValueError(f"exponent must be positive, got {exponent}.")
        self.exponent = exponent

    def interpolate(self, series: pd.Series) -> pd.Series:
        """
        Args:
            series (pd.Series): Trimmed series, NaN for missing values.

        Returns:
            pd.Series: Series with the same index and no missing value. Present
            values are left unchanged.

        Raises:
            ValueError: If the series starts or ends with a missing value.
        """
        check_bucket_index(series)
        values = series.to_numpy(dtype=float, copy=True)
        missing = np.isnan(values)
        if not missing.any():
            return pd.Series(values, index=series.index, name=series.name)
        if missing[0] or missing[-1]:
            raise ValueError(
                "Cannot interpolate leading or trailing gaps, trim the series first."
            )

        present = np.flatnonzero(~missing)
        for left, right in zip(present[:-1], present[1:]):
            if right - left < 2:
                continue
            positions = np.arange(left + 1, right)
            t = (positions - left) / (right - left)
            values[positions] = (
                values[left] + (values[right] - values[left]) * t**self.exponent
            )

        logger.debug("Interpolated %d missing buckets", int(missing.sum()))
        return pd.Series(values, index=series.index, name=series.name)
