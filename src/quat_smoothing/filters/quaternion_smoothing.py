"""Double exponential smoothing for quaternion streams.

Quaternions cannot be averaged component-wise: q and -q are the same
rotation, and their sum cancels. The filter instead smooths the
self-outer-product matrices q * q^T, which are sign-invariant, and recovers
the average orientation as the dominant eigenvector of the smoothed matrix
(the eigenvector method from Markley et al., "Averaging Quaternions", 2007).

Decay factors are raised to the elapsed time so the same smoothing
constants give the same result regardless of the sample rate.

Reference: https://en.wikipedia.org/wiki/Exponential_smoothing#Double_exponential_smoothing
"""

import logging
import numpy as np
from typing import Optional

from quat_smoothing.utils.config import SmoothingConfig
from quat_smoothing.utils.geometry import quaternion_normalize, quaternion_outer
from quat_smoothing.utils.linalg import Eigensolver, dominant_eigenvector, symmetric_eigh

log = logging.getLogger(__name__)


class QuaternionAverager:
    """Frame-rate independent running average of unit quaternions.

    Keeps a level term (weighted sum of q * q^T) and a trend term (weighted
    change of the level per update), both 4x4 symmetric matrices.

    Inputs are not validated. The caller is responsible for
    ``0 < data_smoothing, trend_smoothing < 1``, ``delta_time >= 0`` and
    approximately unit-length samples; anything else propagates through the
    arithmetic into the output.

    Not safe for concurrent use: every ``add`` mutates the accumulator.

    Args:
        data_smoothing: Per-second decay of the level term. Close to 0 is
            responsive, close to 1 is sluggish.
        trend_smoothing: Per-second decay of the trend term. Close to 1
            keeps the trend persistent.
        eigensolver: Symmetric eigendecomposition ``matrix -> (eigenvalues,
            eigenvectors)`` with eigenvectors as columns.
    """

    def __init__(
        self,
        data_smoothing: float = 0.1,
        trend_smoothing: float = 0.9,
        eigensolver: Eigensolver = symmetric_eigh,
    ):
        self.data_smoothing = data_smoothing
        self.trend_smoothing = trend_smoothing
        self.eigensolver = eigensolver

        self._sum: Optional[np.ndarray] = None
        self._previous_sum: Optional[np.ndarray] = None
        self._prediction: Optional[np.ndarray] = None

    @classmethod
    def from_config(cls, config: SmoothingConfig, **kwargs) -> "QuaternionAverager":
        """Build a filter from a SmoothingConfig."""
        return cls(
            data_smoothing=config.data_smoothing,
            trend_smoothing=config.trend_smoothing,
            **kwargs,
        )

    @property
    def initialized(self) -> bool:
        return self._sum is not None

    @property
    def sum(self) -> Optional[np.ndarray]:
        """Smoothed second-moment matrix [4, 4], None before the first sample."""
        return None if self._sum is None else self._sum.copy()

    @property
    def previous_sum(self) -> Optional[np.ndarray]:
        return None if self._previous_sum is None else self._previous_sum.copy()

    @property
    def prediction(self) -> Optional[np.ndarray]:
        """Smoothed trend of the second-moment matrix [4, 4]."""
        return None if self._prediction is None else self._prediction.copy()

    def reset(self) -> None:
        """Forget all samples; the next ``add`` starts from zero."""
        self._sum = None
        self._previous_sum = None
        self._prediction = None
        log.debug("Quaternion averager reset")

    def add(self, sample: np.ndarray, delta_time: float) -> np.ndarray:
        """Add one sample and return the smoothed orientation.

        Args:
            sample: Quaternion [4]. Any fixed component order works; the
                output uses the same order. [w, x, y, z] elsewhere in
                this package.
            delta_time: Seconds since the previous sample. 0 gives the
                sample no weight.

        Returns:
            Unit quaternion [4], defined up to sign.

        Raises:
            EigendecompositionError: If the eigensolver fails.
        """
        sample = np.asarray(sample)
        out_dtype = sample.dtype if np.issubdtype(sample.dtype, np.floating) else np.float64
        q = sample.astype(np.float64).reshape(4)

        if self._sum is None:
            self._sum = np.zeros((4, 4), dtype=np.float64)
            self._prediction = np.zeros((4, 4), dtype=np.float64)
            self._previous_sum = self._sum
            log.debug(
                f"Initialized quaternion averager (data_smoothing={self.data_smoothing}, "
                f"trend_smoothing={self.trend_smoothing})"
            )

        s_data = float(np.power(np.float64(self.data_smoothing), delta_time))
        s_trend = float(np.power(np.float64(self.trend_smoothing), delta_time))

        # Level uses the old sum, trend uses the level change
        self._previous_sum = self._sum
        self._sum = s_data * (self._sum + self._prediction) + (1.0 - s_data) * quaternion_outer(q)
        self._prediction = (
            s_trend * self._prediction + (1.0 - s_trend) * (self._sum - self._previous_sum)
        )

        eigenvalues, eigenvectors = self.eigensolver(self._sum)
        average = quaternion_normalize(dominant_eigenvector(eigenvalues, eigenvectors))

        return average.astype(out_dtype)

    def filter_sequence(
        self,
        quaternions: np.ndarray,
        timestamps: Optional[np.ndarray] = None,
        dt: Optional[float] = None,
    ) -> np.ndarray:
        """Apply the filter to a full orientation stream.

        Continues from the current state; call ``reset`` first for a fresh run.

        Args:
            quaternions: Samples [T, 4].
            timestamps: Sample times [T] in seconds. If omitted, samples are
                spaced ``dt`` apart.
            dt: Delta for the first sample (and every sample without
                timestamps). Defaults to the first timestamp difference,
                or 0 for a single sample.

        Returns:
            Smoothed quaternions [T, 4].
        """
        quaternions = np.asarray(quaternions, dtype=np.float64)
        if quaternions.ndim != 2 or quaternions.shape[1] != 4:
            raise ValueError(f"Expected quaternions of shape [T, 4], got {quaternions.shape}")
        T = len(quaternions)

        if timestamps is not None:
            timestamps = np.asarray(timestamps, dtype=np.float64)
            if timestamps.shape != (T,):
                raise ValueError(
                    f"Expected {T} timestamps, got shape {timestamps.shape}"
                )
            deltas = np.diff(timestamps, prepend=timestamps[:1])
            if dt is None:
                dt = float(deltas[1]) if T > 1 else 0.0
            if T > 0:
                deltas[0] = dt
        else:
            if dt is None:
                raise ValueError("Either timestamps or dt must be given")
            deltas = np.full(T, dt, dtype=np.float64)

        smoothed = np.zeros((T, 4), dtype=np.float64)
        for t in range(T):
            smoothed[t] = self.add(quaternions[t], float(deltas[t]))

        return smoothed
