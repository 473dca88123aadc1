"""Orientation streams: container, synthetic generation and file IO.

CSV layout (header row required):
    timestamp, qw, qx, qy, qz[, gt_qw, gt_qx, gt_qy, gt_qz]

HDF5 layout:
    timestamps [T], orientation [T, 4], optional ground_truth [T, 4] and
    smoothed [T, 4]; attrs sequence_name and the smoothing constants.
"""

import logging
import numpy as np
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from scipy.spatial.transform import Rotation

from quat_smoothing.utils.geometry import from_scipy_quaternion

log = logging.getLogger(__name__)

CSV_COLUMNS = ["timestamp", "qw", "qx", "qy", "qz"]
CSV_GT_COLUMNS = ["gt_qw", "gt_qx", "gt_qy", "gt_qz"]


@dataclass
class OrientationStream:
    """Timestamped quaternion samples in [w, x, y, z] order."""
    timestamps: np.ndarray
    quaternions: np.ndarray
    ground_truth: Optional[np.ndarray] = None
    name: str = "stream"

    def __post_init__(self):
        self.timestamps = np.asarray(self.timestamps, dtype=np.float64)
        self.quaternions = np.asarray(self.quaternions, dtype=np.float64)
        T = len(self.timestamps)

        if self.timestamps.ndim != 1:
            raise ValueError(f"timestamps must be 1-D, got shape {self.timestamps.shape}")
        if self.quaternions.shape != (T, 4):
            raise ValueError(
                f"quaternions must have shape ({T}, 4), got {self.quaternions.shape}"
            )
        if self.ground_truth is not None:
            self.ground_truth = np.asarray(self.ground_truth, dtype=np.float64)
            if self.ground_truth.shape != (T, 4):
                raise ValueError(
                    f"ground_truth must have shape ({T}, 4), got {self.ground_truth.shape}"
                )

    def __len__(self) -> int:
        return len(self.timestamps)

    def delta_times(self) -> np.ndarray:
        """Seconds between consecutive samples [T].

        The first sample has no predecessor; it gets the first interval of
        the stream (0 for a single sample) so it is not ignored by the filter.
        """
        deltas = np.diff(self.timestamps, prepend=self.timestamps[:1])
        if len(deltas) > 1:
            deltas[0] = deltas[1]
        return deltas


def generate_noisy_stream(
    duration: float = 10.0,
    rate: float = 60.0,
    noise_std: float = 0.05,
    drift_rate: float = 0.3,
    jitter: float = 0.0,
    sign_flips: bool = True,
    seed: int = 42,
    name: str = "synthetic",
) -> OrientationStream:
    """Generate a slowly rotating orientation with noisy observations.

    The ground truth turns at ``drift_rate`` rad/s about a random fixed
    axis. Each observation is perturbed by a Gaussian rotation vector.

    Args:
        duration: Stream length in seconds.
        rate: Nominal sample rate in Hz.
        noise_std: Std of the per-axis rotation noise in radians.
        drift_rate: Angular velocity of the ground truth in rad/s.
        jitter: Relative timing jitter in [0, 1); 0 gives a uniform rate.
        sign_flips: Randomly negate observations (same rotation, other
            hemisphere of the double cover).
        seed: Random seed.
        name: Stream name.

    Returns:
        OrientationStream with ground truth.
    """
    rng = np.random.default_rng(seed)
    T = max(int(round(duration * rate)), 1)

    nominal_dt = 1.0 / rate
    if jitter > 0:
        steps = nominal_dt * (1.0 + jitter * rng.uniform(-1.0, 1.0, size=T - 1))
        timestamps = np.concatenate([[0.0], np.cumsum(steps)])
    else:
        timestamps = np.arange(T) * nominal_dt

    axis = rng.normal(size=3)
    axis /= np.linalg.norm(axis)
    truth = Rotation.from_rotvec(np.outer(timestamps * drift_rate, axis))

    noise = Rotation.from_rotvec(rng.normal(0.0, noise_std, size=(T, 3)))
    observed = from_scipy_quaternion((noise * truth).as_quat())
    if sign_flips:
        observed *= rng.choice([-1.0, 1.0], size=(T, 1))

    ground_truth = from_scipy_quaternion(truth.as_quat())

    return OrientationStream(timestamps, observed, ground_truth=ground_truth, name=name)


def load_stream_csv(path: str) -> OrientationStream:
    """Load an orientation stream from CSV."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stream file not found: {path}")

    with open(path, "r") as f:
        header = [h.strip() for h in f.readline().split(",")]

    if header[:5] != CSV_COLUMNS:
        raise ValueError(f"Unexpected CSV header {header}, expected {CSV_COLUMNS}[+{CSV_GT_COLUMNS}]")

    data = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    ground_truth = data[:, 5:9] if header[5:9] == CSV_GT_COLUMNS else None

    log.info(f"Loaded {len(data)} samples from {path}")
    return OrientationStream(data[:, 0], data[:, 1:5], ground_truth=ground_truth, name=path.stem)


def save_stream_csv(stream: OrientationStream, path: str) -> None:
    """Write an orientation stream to CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    columns = [stream.timestamps[:, None], stream.quaternions]
    header = list(CSV_COLUMNS)
    if stream.ground_truth is not None:
        columns.append(stream.ground_truth)
        header += CSV_GT_COLUMNS

    np.savetxt(path, np.hstack(columns), delimiter=",", header=",".join(header), comments="")


def save_stream_h5(
    stream: OrientationStream,
    path: str,
    smoothed: Optional[np.ndarray] = None,
    data_smoothing: Optional[float] = None,
    trend_smoothing: Optional[float] = None,
) -> None:
    """Write a stream (and optionally its smoothed output) to HDF5."""
    import h5py

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with h5py.File(path, "w") as f:
        f.create_dataset("timestamps", data=stream.timestamps)
        f.create_dataset("orientation", data=stream.quaternions)
        if stream.ground_truth is not None:
            f.create_dataset("ground_truth", data=stream.ground_truth)
        if smoothed is not None:
            f.create_dataset("smoothed", data=np.asarray(smoothed, dtype=np.float64))
        f.attrs["sequence_name"] = stream.name
        if data_smoothing is not None:
            f.attrs["data_smoothing"] = data_smoothing
        if trend_smoothing is not None:
            f.attrs["trend_smoothing"] = trend_smoothing

    log.info(f"Saved {len(stream)} samples to {path}")


def load_stream_h5(path: str) -> OrientationStream:
    """Load an orientation stream from HDF5 (the smoothed dataset is ignored)."""
    import h5py

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stream file not found: {path}")

    with h5py.File(path, "r") as f:
        timestamps = f["timestamps"][:]
        quaternions = f["orientation"][:]
        ground_truth = f["ground_truth"][:] if "ground_truth" in f else None
        name = f.attrs.get("sequence_name", path.stem)

    if isinstance(name, bytes):
        name = name.decode()

    return OrientationStream(timestamps, quaternions, ground_truth=ground_truth, name=str(name))


def load_stream(path: str) -> OrientationStream:
    """Load a stream from ``.csv`` or ``.h5``/``.hdf5`` by extension."""
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return load_stream_csv(path)
    if suffix in (".h5", ".hdf5"):
        return load_stream_h5(path)
    raise ValueError(f"Unsupported stream format: {suffix}")
