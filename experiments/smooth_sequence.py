"""Smooth an orientation stream with the quaternion double exponential filter.

Reads a recorded stream (CSV or HDF5) or generates a synthetic noisy one
from the config, runs the filter, and writes the smoothed stream, metrics
and optional plots.

Usage:
    python experiments/smooth_sequence.py
    python experiments/smooth_sequence.py --config configs/default.yaml --plot
    python experiments/smooth_sequence.py --input data/head_pose.csv --data-smoothing 0.05
"""

import argparse
import json
import logging
from pathlib import Path

from quat_smoothing.data.streams import generate_noisy_stream, load_stream, save_stream_h5
from quat_smoothing.eval.metrics import angular_errors, summarize
from quat_smoothing.eval.rollout import smooth_stream
from quat_smoothing.filters.quaternion_smoothing import QuaternionAverager
from quat_smoothing.utils.config import ExperimentConfig, load_config, save_config

log = logging.getLogger(__name__)


def run(config: ExperimentConfig, input_path=None, plot=False, progress=True):
    """Run one smoothing experiment.

    Args:
        config: Experiment configuration.
        input_path: Recorded stream to smooth; synthetic stream if None.
        plot: Save PNG plots next to the results.
        progress: Show a progress bar.

    Returns:
        Metrics dictionary.
    """
    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if input_path:
        stream = load_stream(input_path)
    else:
        s = config.stream
        stream = generate_noisy_stream(
            duration=s.duration,
            rate=s.rate,
            noise_std=s.noise_std,
            drift_rate=s.drift_rate,
            jitter=s.jitter,
            sign_flips=s.sign_flips,
            seed=s.seed,
            name=config.name,
        )
        log.info(f"Generated synthetic stream '{stream.name}' with {len(stream)} samples")

    averager = QuaternionAverager.from_config(config.smoothing)
    smoothed = smooth_stream(averager, stream, progress=progress)

    save_stream_h5(
        stream,
        output_dir / "smoothed.h5",
        smoothed=smoothed,
        data_smoothing=config.smoothing.data_smoothing,
        trend_smoothing=config.smoothing.trend_smoothing,
    )
    save_config(config, output_dir / "config.yaml")

    metrics = summarize(smoothed, stream.quaternions, stream.ground_truth)
    metrics_path = output_dir / "metrics.json"
    with open(metrics_path, "w") as f:
        json.dump(metrics, f, indent=2)

    log.info(f"Jitter: {metrics['raw_jitter_deg']:.3f} deg raw -> {metrics['smoothed_jitter_deg']:.3f} deg smoothed")
    if "smoothed_rmse_deg" in metrics:
        log.info(f"RMSE:   {metrics['raw_rmse_deg']:.3f} deg raw -> {metrics['smoothed_rmse_deg']:.3f} deg smoothed")
    log.info(f"Results saved to {output_dir}")

    if plot:
        import matplotlib.pyplot as plt
        from quat_smoothing.data.visualization import plot_angular_error, plot_quaternion_components

        fig = plot_quaternion_components(stream.timestamps, stream.quaternions, smoothed, stream.ground_truth)
        fig.savefig(output_dir / "components.png", dpi=150, bbox_inches="tight")
        plt.close(fig)

        if stream.ground_truth is not None:
            fig = plot_angular_error(
                stream.timestamps,
                angular_errors(stream.quaternions, stream.ground_truth),
                angular_errors(smoothed, stream.ground_truth),
            )
            fig.savefig(output_dir / "angular_error.png", dpi=150, bbox_inches="tight")
            plt.close(fig)
        log.info(f"Plots saved to {output_dir}")

    return metrics


def main(argv=None):
    parser = argparse.ArgumentParser(description="Quaternion double exponential smoothing")
    parser.add_argument("--config", default=None, help="YAML experiment config")
    parser.add_argument("--input", default=None, help="Stream file (.csv or .h5); synthetic if omitted")
    parser.add_argument("--output-dir", default=None)
    parser.add_argument("--data-smoothing", type=float, default=None)
    parser.add_argument("--trend-smoothing", type=float, default=None)
    parser.add_argument("--plot", action="store_true")
    parser.add_argument("--no-progress", action="store_true")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = load_config(args.config) if args.config else ExperimentConfig()
    if args.output_dir:
        config.output_dir = args.output_dir
    if args.data_smoothing is not None:
        config.smoothing.data_smoothing = args.data_smoothing
    if args.trend_smoothing is not None:
        config.smoothing.trend_smoothing = args.trend_smoothing

    return run(config, input_path=args.input, plot=args.plot, progress=not args.no_progress)


if __name__ == "__main__":
    main()
