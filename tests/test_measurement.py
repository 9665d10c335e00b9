import numpy as np
import pytest

from quantum_canvas.circuit import Circuit
from quantum_canvas.config import QuantumMode, SamplingMode, StyleParameters
from quantum_canvas.gates import Gate
from quantum_canvas.measurement import (
    HARDWARE_NOISE,
    MeasurementResult,
    apply_hardware_noise,
    direct_distribution,
    measure,
    sample_shots,
)
from quantum_canvas.simulator import simulate


def test_shot_counts_sum_to_shots(rng):
    probs = rng.random(16)
    probs /= probs.sum()
    result = sample_shots(probs, 4, 1024, rng)
    assert result.total == 1024
    assert result.shots == 1024
    assert all(len(bits) == 4 and set(bits) <= {"0", "1"} for bits in result.values)
    assert all(v > 0 for v in result.values.values())


def test_shots_never_land_on_zero_probability_states(rng):
    state = simulate(Circuit(3, [Gate("H", 0), Gate("CX", target=2, control=0)]))
    result = sample_shots(state.probabilities(), 3, 2048, rng)
    assert set(result.values) <= {"000", "101"}


def test_single_outcome_collects_every_shot(rng):
    probs = np.zeros(8)
    probs[5] = 1.0
    assert sample_shots(probs, 3, 100, rng).values == {"101": 100}


def test_sampling_tolerates_float_drift(rng):
    probs = np.full(4, 0.25 - 1e-12)
    assert sample_shots(probs, 2, 5000, rng).total == 5000


def test_shots_rejects_bad_input(rng):
    with pytest.raises(ValueError):
        sample_shots(np.ones(4) / 4, 2, 0, rng)
    with pytest.raises(ValueError):
        sample_shots(np.ones(4) / 4, 3, 10, rng)
    with pytest.raises(ValueError):
        sample_shots(np.zeros(4), 2, 10, rng)


def test_direct_distribution_renormalises():
    result = direct_distribution(np.array([0.2, 0.0, 0.2, 0.0]), 2)
    assert result.mode is SamplingMode.DISTRIBUTION
    assert result.values == pytest.approx({"00": 0.5, "10": 0.5})
    assert result.total == pytest.approx(1.0)


def test_hardware_noise_mixes_with_uniform():
    noisy = apply_hardware_noise(np.array([1.0, 0.0, 0.0, 0.0]))
    assert noisy.sum() == pytest.approx(1.0)
    assert noisy[1] == pytest.approx(HARDWARE_NOISE / 4)
    assert noisy[0] == pytest.approx(1 - HARDWARE_NOISE + HARDWARE_NOISE / 4)


def test_measure_hardware_mode_falls_back_with_noise():
    state = simulate(Circuit(2, []))
    params = StyleParameters(quantum_mode=QuantumMode.HARDWARE, sampling_mode=SamplingMode.DISTRIBUTION)
    result = measure(state, params)
    assert set(result.values) == {"00", "01", "10", "11"}


def test_measure_seeded_is_reproducible():
    state = simulate(Circuit(3, [Gate("H", 0), Gate("H", 1), Gate("H", 2)]))
    params = StyleParameters(seed=42, shots=512)
    assert measure(state, params).values == measure(state, params).values


def test_ranked_breaks_ties_by_integer_value():
    result = MeasurementResult(3, SamplingMode.SHOTS, {"110": 5, "001": 5, "011": 9, "000": 1}, shots=20)
    assert [bits for bits, _ in result.ranked()] == ["011", "001", "110", "000"]
    assert result.top_k(2) == [("011", 9), ("001", 5)]
    assert result.probabilities()["011"] == pytest.approx(0.45)
