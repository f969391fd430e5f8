"""
Exceptions raised by the training and scoring pipeline.
"""


class FeecastError(Exception):
    """Base class for every error raised by feecast."""


class InsufficientDataError(FeecastError, ValueError):
    """
    Raised when there are not enough samples to build a series, e.g. when
    bucketing an empty sequence of observations.
    """


class InsufficientTrainingDataError(InsufficientDataError):
    """
    Raised by the seasonal forecaster when the filtered series is shorter than
    two full seasons. :meth:`~feecast.analyser.BaseAnalyser.train` turns it
    into an unsuccessful :class:`~feecast.data_struct.TrainResult`.
    """

    def __init__(self, num_data: int, min_data: int):
        self.num_data = num_data
        self.min_data = min_data
        super().__init__(
            f"At least {min_data} values are required for training, got {num_data}."
        )


class InvalidObservationError(FeecastError, ValueError):
    """
    Raised when an observation breaks the producer's contract: non-integral
    or negative timestamp, non-finite value, or a non-monotonic bucket index.
    """
