from pathlib import Path

import pytest

from quat_smoothing.utils.config import (
    ExperimentConfig,
    SmoothingConfig,
    StreamConfig,
    load_config,
    save_config,
)

DEFAULT_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


def test_defaults():
    config = ExperimentConfig()
    assert config.smoothing == SmoothingConfig(data_smoothing=0.1, trend_smoothing=0.9)
    assert config.stream.rate == 60.0


def test_round_trip(tmp_path):
    config = ExperimentConfig(
        name="head_pose",
        smoothing=SmoothingConfig(data_smoothing=0.05, trend_smoothing=0.7),
        stream=StreamConfig(duration=3.0, jitter=0.25, seed=9),
        output_dir=str(tmp_path / "out"),
    )
    path = tmp_path / "nested" / "config.yaml"

    save_config(config, str(path))
    loaded = load_config(str(path))

    assert loaded == config


def test_partial_config_keeps_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("name: partial\nsmoothing:\n  data_smoothing: 0.3\n  unknown_key: 1\n")

    config = load_config(str(path))

    assert config.name == "partial"
    assert config.smoothing.data_smoothing == 0.3
    assert config.smoothing.trend_smoothing == 0.9
    assert not hasattr(config.smoothing, "unknown_key")
    assert config.stream == StreamConfig()


def test_empty_config(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == ExperimentConfig()


def test_missing_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_shipped_default_config_loads():
    config = load_config(str(DEFAULT_CONFIG))
    assert config.smoothing.data_smoothing == 0.1
    assert config.smoothing.trend_smoothing == 0.9
    assert config.stream.sign_flips is True
