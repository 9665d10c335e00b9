"""
Measurement of a simulated state.

Two modes are supported:

* ``shots`` (the default): draw ``S`` samples by walking the cumulative
  distribution in basis-index order and count them per bitstring.
* ``distribution``: expose ``|amplitude|^2`` directly, renormalised to sum to 1.

Bitstrings are written most-significant qubit first, i.e. ``format(i, "0{n}b")``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .config import QuantumMode, SamplingMode, StyleParameters
from .errors import SimulationError
from .simulator import AmplitudeVector

logger = logging.getLogger(__name__)

# depolarising mix used when hardware mode falls back to the simulator
HARDWARE_NOISE = 0.02

Weight = Union[int, float]


@dataclass(frozen=True)
class MeasurementResult:
    """Outcome weights keyed by bitstring.

    In ``shots`` mode the weights are integer counts summing to ``shots``; in
    ``distribution`` mode they are probabilities summing to 1. Only outcomes
    with a non-zero weight are present.
    """

    n_qubits: int
    mode: SamplingMode
    values: Dict[str, Weight] = field(default_factory=dict)
    shots: Optional[int] = None

    @property
    def total(self) -> float:
        return sum(self.values.values())

    def probabilities(self) -> Dict[str, float]:
        total = self.total
        if total <= 0:
            return {}
        return {bits: w / total for bits, w in self.values.items()}

    def ranked(self) -> List[Tuple[str, Weight]]:
        """Outcomes by descending weight; ties by ascending integer value."""

        return sorted(self.values.items(), key=lambda kv: (-kv[1], int(kv[0], 2)))

    def top_k(self, k: int = 5) -> List[Tuple[str, Weight]]:
        return self.ranked()[:k]

    def to_dict(self) -> dict:
        return {
            "n_qubits": self.n_qubits,
            "mode": self.mode.value,
            "shots": self.shots,
            "values": dict(self.values),
        }


def bitstring(index: int, n_qubits: int) -> str:
    return format(index, f"0{n_qubits}b")


# ------------------------------- Samplers -----------------------------------


def _normalised(probs: np.ndarray) -> np.ndarray:
    probs = np.clip(np.asarray(probs, dtype=np.float64), 0.0, None)
    total = probs.sum()
    if not np.isfinite(total) or total <= 0:
        raise ValueError("Probability distribution has zero total mass.")
    return probs / total


def apply_hardware_noise(probs: np.ndarray, eps: float = HARDWARE_NOISE) -> np.ndarray:
    """Mix *probs* with the uniform distribution: ``(1 - eps) p + eps / N``."""

    probs = _normalised(probs)
    return (1.0 - eps) * probs + eps / probs.shape[0]


def sample_shots(
    probs: np.ndarray,
    n_qubits: int,
    shots: int,
    rng: np.random.Generator,
) -> MeasurementResult:
    """Draw *shots* samples from *probs* and count them per bitstring."""

    if shots <= 0:
        raise ValueError("shots must be a positive integer.")
    probs = np.clip(np.asarray(probs, dtype=np.float64), 0.0, None)
    if probs.shape[0] != 1 << n_qubits:
        raise ValueError(f"Expected {1 << n_qubits} probabilities, got {probs.shape[0]}")

    # walk only states that can actually be drawn
    support = np.flatnonzero(probs > 0)
    if support.size == 0:
        raise ValueError("Probability distribution has zero total mass.")
    cumulative = np.cumsum(probs[support])
    cumulative /= cumulative[-1]

    draws = rng.random(shots)
    pos = np.searchsorted(cumulative, draws, side="left")
    # float drift can leave the last cumulative value just below a draw
    pos = np.minimum(pos, support.size - 1)
    outcomes = support[pos]

    counts = np.bincount(outcomes, minlength=probs.shape[0])
    values = {bitstring(int(i), n_qubits): int(counts[i]) for i in np.flatnonzero(counts)}
    return MeasurementResult(n_qubits, SamplingMode.SHOTS, values, shots=shots)


def direct_distribution(probs: np.ndarray, n_qubits: int) -> MeasurementResult:
    """Expose the renormalised distribution itself as the measurement."""

    probs = _normalised(probs)
    values = {bitstring(int(i), n_qubits): float(probs[i]) for i in np.flatnonzero(probs > 0)}
    return MeasurementResult(n_qubits, SamplingMode.DISTRIBUTION, values)


def measure(
    state: AmplitudeVector,
    params: StyleParameters,
    rng: Optional[np.random.Generator] = None,
) -> MeasurementResult:
    """Measure *state* according to the sampling and quantum modes in *params*.

    A state that cannot be sampled (no probability mass, wrong size) raises
    :class:`SimulationError`.
    """

    probs = state.probabilities()
    try:
        if params.quantum_mode is QuantumMode.HARDWARE:
            logger.warning("Hardware execution is not available; using the simulator with %.0f%% "
                           "depolarising noise", HARDWARE_NOISE * 100)
            probs = apply_hardware_noise(probs)

        if params.sampling_mode is SamplingMode.DISTRIBUTION:
            logger.debug("Exposing direct distribution over %d states", probs.shape[0])
            return direct_distribution(probs, state.n)

        if rng is None:
            rng = np.random.default_rng(params.seed)
        logger.debug("Sampling %d shots over %d states", params.shots, probs.shape[0])
        return sample_shots(probs, state.n, params.shots, rng)
    except ValueError as exc:
        raise SimulationError(f"Cannot measure state: {exc}") from exc
