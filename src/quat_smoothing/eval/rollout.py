import logging
import numpy as np
from tqdm import tqdm

from quat_smoothing.data.streams import OrientationStream
from quat_smoothing.filters.quaternion_smoothing import QuaternionAverager
from quat_smoothing.utils.config import SmoothingConfig
from quat_smoothing.utils.geometry import IDENTITY, quaternion_angular_distance

log = logging.getLogger(__name__)


def smooth_stream(averager, stream, progress=False):
    """
    Run a filter over every sample of a stream.

    Args:
        averager: QuaternionAverager (state is continued, not reset).
        stream: OrientationStream.
        progress: Show a tqdm progress bar.

    Returns:
        Array of shape (T, 4) with smoothed quaternions.
    """
    deltas = stream.delta_times()
    smoothed = np.zeros((len(stream), 4), dtype=np.float64)

    for t in tqdm(range(len(stream)), desc=stream.name, disable=not progress):
        smoothed[t] = averager.add(stream.quaternions[t], float(deltas[t]))

    return smoothed


def dt_generalization_test(config: SmoothingConfig, dt_values, duration=10.0, sample=None):
    """
    Feed a constant sample at several update intervals for the same
    wall-clock duration and compare the final filter state.

    With frame-rate independent decay every dt should converge to the same
    accumulator; 'deviation' is the largest absolute entry of the difference
    to the first dt's accumulator.

    Args:
        config: SmoothingConfig for every run.
        dt_values: List of update intervals in seconds.
        duration: Simulated seconds per run.
        sample: Quaternion (4,) to feed, identity by default.

    Returns:
        Dict mapping dt -> {'sum': (4, 4), 'output': (4,), 'steps': int,
        'deviation': float, 'angular_error': float}.
    """
    sample = IDENTITY if sample is None else np.asarray(sample, dtype=np.float64)
    results = {}
    reference = None

    for dt in dt_values:
        averager = QuaternionAverager.from_config(config)
        steps = max(int(round(duration / dt)), 1)
        output = None
        for _ in range(steps):
            output = averager.add(sample, dt)

        accumulated = averager.sum
        if reference is None:
            reference = accumulated

        results[dt] = {
            "sum": accumulated,
            "output": output,
            "steps": steps,
            "deviation": float(np.abs(accumulated - reference).max()),
            "angular_error": float(quaternion_angular_distance(output, sample)),
        }
        log.debug(f"dt={dt}: steps={steps}, deviation={results[dt]['deviation']:.3e}")

    return results
