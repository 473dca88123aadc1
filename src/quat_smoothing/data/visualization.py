"""Orientation stream visualization utilities."""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from typing import Optional, Tuple

from quat_smoothing.utils.geometry import canonicalize_quaternion

COMPONENT_LABELS = ("w", "x", "y", "z")


def plot_quaternion_components(
    timestamps: np.ndarray,
    raw: np.ndarray,
    smoothed: np.ndarray,
    ground_truth: Optional[np.ndarray] = None,
    title: str = "Quaternion Components",
    figsize: Tuple[int, int] = (12, 10),
) -> Figure:
    """Plot raw, smoothed and ground-truth quaternion components.

    All sequences are shown with w >= 0 so sign flips do not appear as jumps.

    Args:
        timestamps: Sample times [T].
        raw: Filter input [T, 4].
        smoothed: Filter output [T, 4].
        ground_truth: True orientation [T, 4].
        title: Plot title.
        figsize: Figure size.

    Returns:
        Matplotlib figure.
    """
    fig, axes = plt.subplots(4, 1, figsize=figsize, sharex=True)

    raw = canonicalize_quaternion(raw)
    smoothed = canonicalize_quaternion(smoothed)
    if ground_truth is not None:
        ground_truth = canonicalize_quaternion(ground_truth)

    for i, ax in enumerate(axes):
        ax.plot(timestamps, raw[:, i], color="tab:gray", alpha=0.5, linewidth=0.8, label="Raw")
        ax.plot(timestamps, smoothed[:, i], "b-", linewidth=1.5, label="Smoothed")
        if ground_truth is not None:
            ax.plot(timestamps, ground_truth[:, i], "k--", linewidth=1.2, label="Ground Truth")
        ax.set_ylabel(COMPONENT_LABELS[i])
        ax.grid(True, alpha=0.3)

    axes[0].legend(fontsize=8)
    axes[-1].set_xlabel("Time (s)")
    fig.suptitle(title)
    fig.tight_layout()
    return fig


def plot_angular_error(
    timestamps: np.ndarray,
    raw_errors: np.ndarray,
    smoothed_errors: np.ndarray,
    title: str = "Orientation Error",
    figsize: Tuple[int, int] = (12, 5),
) -> Figure:
    """Plot angular error of raw and smoothed orientation over time.

    Args:
        timestamps: Sample times [T].
        raw_errors: Raw error [T] in radians.
        smoothed_errors: Smoothed error [T] in radians.
        title: Plot title.
        figsize: Figure size.

    Returns:
        Matplotlib figure.
    """
    fig, ax = plt.subplots(figsize=figsize)

    ax.plot(timestamps, np.degrees(raw_errors), color="tab:gray", alpha=0.6, linewidth=0.8, label="Raw")
    ax.plot(timestamps, np.degrees(smoothed_errors), "b-", linewidth=1.5, label="Smoothed")

    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Angular error (deg)")
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    return fig
