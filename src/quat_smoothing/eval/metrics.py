import numpy as np
from typing import Dict, Optional

from quat_smoothing.utils.geometry import quaternion_angular_distance


def angular_errors(estimated, reference):
    """
    Per-sample angular error between two orientation sequences.

    Args:
        estimated: Array of shape (T, 4).
        reference: Array of same shape.

    Returns:
        Array of shape (T,) in radians, sign-invariant.
    """
    return quaternion_angular_distance(estimated, reference)


def orientation_rmse(estimated, reference):
    """Root mean square angular error in radians."""
    errors = angular_errors(estimated, reference)
    return float(np.sqrt(np.mean(errors ** 2)))


def jitter(quaternions):
    """
    Mean angular step between consecutive samples.

    A smooth signal has small steps; sensor noise inflates them.

    Args:
        quaternions: Array of shape (T, 4).

    Returns:
        Mean step in radians (0 for fewer than two samples).
    """
    quaternions = np.asarray(quaternions)
    if len(quaternions) < 2:
        return 0.0
    steps = quaternion_angular_distance(quaternions[1:], quaternions[:-1])
    return float(steps.mean())


def summarize(
    smoothed: np.ndarray,
    raw: np.ndarray,
    ground_truth: Optional[np.ndarray] = None,
    warmup: int = 0,
) -> Dict[str, float]:
    """
    Compare a smoothed stream against its raw input (and ground truth).

    Args:
        smoothed: Filter output (T, 4).
        raw: Filter input (T, 4).
        ground_truth: True orientation (T, 4), optional.
        warmup: Number of leading samples to skip.

    Returns:
        Dict with jitter in degrees, plus RMSE in degrees and the
        'noise_reduction' ratio (raw_rmse / smoothed_rmse) when ground
        truth is given.
    """
    smoothed = np.asarray(smoothed)[warmup:]
    raw = np.asarray(raw)[warmup:]

    results = {
        "num_samples": int(len(smoothed)),
        "raw_jitter_deg": float(np.degrees(jitter(raw))),
        "smoothed_jitter_deg": float(np.degrees(jitter(smoothed))),
    }

    if ground_truth is not None:
        ground_truth = np.asarray(ground_truth)[warmup:]
        raw_rmse = orientation_rmse(raw, ground_truth)
        smoothed_rmse = orientation_rmse(smoothed, ground_truth)
        results["raw_rmse_deg"] = float(np.degrees(raw_rmse))
        results["smoothed_rmse_deg"] = float(np.degrees(smoothed_rmse))
        results["noise_reduction"] = raw_rmse / (smoothed_rmse + 1e-12)

    return results
