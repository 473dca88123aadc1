import numpy as np
import pytest
import scipy.linalg

from quat_smoothing.data.streams import generate_noisy_stream
from quat_smoothing.filters.quaternion_smoothing import QuaternionAverager
from quat_smoothing.utils.config import SmoothingConfig
from quat_smoothing.utils.geometry import IDENTITY, quaternion_normalize, quaternion_outer
from quat_smoothing.utils.linalg import EigendecompositionError, is_symmetric, symmetric_eigh


def _same_rotation(a, b, atol):
    return min(np.linalg.norm(a - b), np.linalg.norm(a + b)) < atol


@pytest.fixture
def noisy_stream():
    return generate_noisy_stream(duration=5.0, rate=60.0, noise_std=0.05, drift_rate=0.4, jitter=0.3, seed=7)


def test_defaults():
    averager = QuaternionAverager()
    assert averager.data_smoothing == 0.1
    assert averager.trend_smoothing == 0.9


def test_state_is_created_on_first_add():
    averager = QuaternionAverager()
    assert not averager.initialized
    assert averager.sum is None
    assert averager.prediction is None

    averager.add(IDENTITY, 0.1)

    assert averager.initialized
    assert averager.sum.shape == (4, 4)
    assert averager.prediction.shape == (4, 4)


def test_first_two_updates_follow_recurrence():
    q = quaternion_normalize([0.5, -0.3, 0.7, 0.2])
    Q = quaternion_outer(q)
    averager = QuaternionAverager(0.1, 0.9)

    averager.add(q, 1.0)
    np.testing.assert_allclose(averager.sum, 0.9 * Q, atol=1e-12)
    np.testing.assert_allclose(averager.previous_sum, np.zeros((4, 4)), atol=1e-12)
    np.testing.assert_allclose(averager.prediction, 0.09 * Q, atol=1e-12)

    averager.add(q, 1.0)
    np.testing.assert_allclose(averager.sum, 0.999 * Q, atol=1e-12)
    np.testing.assert_allclose(averager.previous_sum, 0.9 * Q, atol=1e-12)
    np.testing.assert_allclose(averager.prediction, 0.0909 * Q, atol=1e-12)


def test_identity_converges_within_50_updates():
    averager = QuaternionAverager()
    for _ in range(50):
        out = averager.add(IDENTITY, 1.0)
    assert _same_rotation(out, IDENTITY, 1e-4)


def test_constant_sample_converges():
    q = quaternion_normalize([0.5, -0.3, 0.7, 0.2])
    averager = QuaternionAverager()
    for _ in range(200):
        out = averager.add(q, 0.1)
    assert _same_rotation(out, q, 1e-6)


def test_accumulators_stay_symmetric(noisy_stream):
    averager = QuaternionAverager()
    for q, dt in zip(noisy_stream.quaternions, noisy_stream.delta_times()):
        averager.add(q, dt)
        assert is_symmetric(averager.sum)
        assert is_symmetric(averager.prediction)


def test_outputs_are_unit_length(noisy_stream):
    averager = QuaternionAverager(0.05, 0.8)
    for q, dt in zip(noisy_stream.quaternions, noisy_stream.delta_times()):
        out = averager.add(q, dt)
        assert abs(np.linalg.norm(out) - 1.0) < 1e-5


def test_unnormalized_sample_output_is_unit_length():
    averager = QuaternionAverager()
    out = averager.add(np.array([2.0, 0.0, 0.0, 0.0]), 0.5)
    assert abs(np.linalg.norm(out) - 1.0) < 1e-9
    assert _same_rotation(out, IDENTITY, 1e-9)


def test_zero_delta_time_ignores_sample():
    q = quaternion_normalize([0.5, -0.3, 0.7, 0.2])
    other = quaternion_normalize([0.1, 0.9, -0.2, 0.3])
    averager = QuaternionAverager()
    for _ in range(100):
        previous = averager.add(q, 0.1)

    first = averager.add(other, 0.0)
    second = averager.add(other, 0.0)

    assert _same_rotation(first, previous, 1e-9)
    assert _same_rotation(second, previous, 1e-9)


def test_frame_rate_independent_steady_state():
    q = quaternion_normalize([0.9, 0.1, -0.2, 0.3])
    duration = 300.0

    coarse = QuaternionAverager()
    for _ in range(int(duration / 1.0)):
        coarse.add(q, 1.0)

    fine = QuaternionAverager()
    for _ in range(int(duration / 0.5)):
        fine.add(q, 0.5)

    np.testing.assert_allclose(coarse.sum, fine.sum, atol=1e-8)
    np.testing.assert_allclose(coarse.prediction, fine.prediction, atol=1e-8)


def test_sign_flipped_inputs_give_same_rotation():
    stream = generate_noisy_stream(duration=3.0, rate=30.0, sign_flips=False, seed=3)
    deltas = stream.delta_times()
    rng = np.random.default_rng(0)
    flipped = stream.quaternions * rng.choice([-1.0, 1.0], size=(len(stream), 1))

    a = QuaternionAverager()
    b = QuaternionAverager()
    for q, q_flipped, dt in zip(stream.quaternions, flipped, deltas):
        out_a = a.add(q, dt)
        out_b = b.add(q_flipped, dt)
        assert _same_rotation(out_a, out_b, 1e-9)


def test_same_inputs_give_same_outputs():
    samples = [IDENTITY, np.array([0.0, 1.0, 0.0, 0.0]), IDENTITY]
    a = QuaternionAverager()
    b = QuaternionAverager()
    for q in samples:
        np.testing.assert_array_equal(a.add(q, 0.0), b.add(q, 0.0))


def test_tracks_slow_rotation_better_than_raw_jitter(noisy_stream):
    from quat_smoothing.eval.metrics import jitter

    averager = QuaternionAverager()
    smoothed = averager.filter_sequence(noisy_stream.quaternions, noisy_stream.timestamps)

    assert jitter(smoothed[30:]) < jitter(noisy_stream.quaternions[30:])


def test_reset_starts_over():
    q = quaternion_normalize([0.5, -0.3, 0.7, 0.2])
    averager = QuaternionAverager()
    for _ in range(10):
        averager.add(IDENTITY, 0.1)

    averager.reset()
    assert not averager.initialized

    fresh = QuaternionAverager()
    np.testing.assert_array_equal(averager.add(q, 0.1), fresh.add(q, 0.1))
    np.testing.assert_array_equal(averager.sum, fresh.sum)


def test_state_properties_return_copies():
    averager = QuaternionAverager()
    averager.add(IDENTITY, 1.0)
    snapshot = averager.sum
    snapshot[:] = 0.0
    assert averager.sum[0, 0] > 0.0


def test_float32_sample_returns_float32():
    averager = QuaternionAverager()
    out = averager.add(np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float32), 1.0)
    assert out.dtype == np.float32


def test_custom_eigensolver_is_used():
    calls = []

    def recording_solver(matrix):
        calls.append(matrix.copy())
        return symmetric_eigh(matrix)

    averager = QuaternionAverager(eigensolver=recording_solver)
    averager.add(IDENTITY, 1.0)
    averager.add(IDENTITY, 1.0)

    assert len(calls) == 2
    np.testing.assert_array_equal(calls[-1], averager.sum)


def test_eigensolver_failure_is_reported(monkeypatch):
    def failing_eigh(*args, **kwargs):
        raise scipy.linalg.LinAlgError("did not converge")

    monkeypatch.setattr(scipy.linalg, "eigh", failing_eigh)

    averager = QuaternionAverager()
    with pytest.raises(EigendecompositionError, match="did not converge"):
        averager.add(IDENTITY, 1.0)


def test_from_config():
    averager = QuaternionAverager.from_config(SmoothingConfig(data_smoothing=0.2, trend_smoothing=0.5))
    assert averager.data_smoothing == 0.2
    assert averager.trend_smoothing == 0.5


def test_filter_sequence_matches_add_loop(noisy_stream):
    expected = []
    manual = QuaternionAverager()
    deltas = noisy_stream.delta_times()
    for q, dt in zip(noisy_stream.quaternions, deltas):
        expected.append(manual.add(q, dt))

    result = QuaternionAverager().filter_sequence(noisy_stream.quaternions, noisy_stream.timestamps)

    np.testing.assert_allclose(result, np.array(expected), atol=0.0)


def test_filter_sequence_with_fixed_dt():
    quats = np.tile(IDENTITY, (20, 1))
    result = QuaternionAverager().filter_sequence(quats, dt=0.5)
    assert result.shape == (20, 4)
    assert _same_rotation(result[-1], IDENTITY, 1e-9)


def test_filter_sequence_rejects_bad_input():
    averager = QuaternionAverager()
    with pytest.raises(ValueError):
        averager.filter_sequence(np.zeros((5, 3)), dt=0.1)
    with pytest.raises(ValueError):
        averager.filter_sequence(np.tile(IDENTITY, (5, 1)), timestamps=np.arange(4.0))
    with pytest.raises(ValueError):
        averager.filter_sequence(np.tile(IDENTITY, (5, 1)))
