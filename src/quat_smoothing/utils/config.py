"""Configuration management for quaternion smoothing experiments."""

import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any


@dataclass
class SmoothingConfig:
    """Filter constants.

    Both are per-second decay rates in (0, 1). Values are not validated.
    """
    data_smoothing: float = 0.1
    trend_smoothing: float = 0.9


@dataclass
class StreamConfig:
    """Synthetic orientation stream configuration."""
    duration: float = 10.0
    rate: float = 60.0
    noise_std: float = 0.05
    drift_rate: float = 0.3
    jitter: float = 0.0
    sign_flips: bool = True
    seed: int = 42


@dataclass
class ExperimentConfig:
    """Full experiment configuration."""
    name: str = "default"
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    stream: StreamConfig = field(default_factory=StreamConfig)
    output_dir: str = "results"


def load_config(config_path: str) -> ExperimentConfig:
    """Load experiment configuration from a YAML file."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}

    config = ExperimentConfig()

    for key in ("name", "output_dir"):
        if key in raw:
            setattr(config, key, raw[key])

    if "smoothing" in raw:
        config.smoothing = _update_dataclass(SmoothingConfig(), raw["smoothing"])
    if "stream" in raw:
        config.stream = _update_dataclass(StreamConfig(), raw["stream"])

    return config


def _update_dataclass(instance: Any, updates: dict) -> Any:
    """Update dataclass fields from a dictionary."""
    for key, value in (updates or {}).items():
        if hasattr(instance, key):
            setattr(instance, key, value)
    return instance


def save_config(config: ExperimentConfig, save_path: str) -> None:
    """Save experiment configuration to a YAML file."""
    import dataclasses

    def _to_dict(obj: Any) -> Any:
        if dataclasses.is_dataclass(obj):
            return {k: _to_dict(v) for k, v in dataclasses.asdict(obj).items()}
        return obj

    path = Path(save_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(_to_dict(config), f, default_flow_style=False, sort_keys=False)
