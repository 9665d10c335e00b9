"""
Dense state-vector simulator.

Convention: qubit 0 is the least significant bit of the basis index, so
index ``i`` of an n-qubit vector is the basis state ``|b_{n-1} ... b_0>``.

Every gate application reads the previous vector and writes a fresh one, so
no amplitude is read after it has been overwritten within the same gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .circuit import Circuit
from .errors import SimulationError
from .gates import Gate, gate_matrix

logger = logging.getLogger(__name__)

# skipped when reduced_gate_set is on
REDUCED_NOOP_GATES = frozenset({"RZ", "P", "CZ", "SWAP"})


@dataclass
class AmplitudeVector:
    n: int
    psi: np.ndarray  # shape (2**n,), complex128

    @staticmethod
    def zero(n: int) -> "AmplitudeVector":
        N = 1 << n
        try:
            psi = np.zeros(N, dtype=np.complex128)
        except MemoryError as exc:
            raise SimulationError(f"Cannot allocate a {n}-qubit state vector ({N} amplitudes)") from exc
        psi[0] = 1.0 + 0.0j
        return AmplitudeVector(n=n, psi=psi)

    def __len__(self) -> int:
        return self.psi.shape[0]

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def probabilities(self) -> np.ndarray:
        """``real^2 + imag^2`` per basis state, clamped to be non-negative."""

        probs = self.psi.real ** 2 + self.psi.imag ** 2
        return np.clip(probs, 0.0, None)

    def copy(self) -> "AmplitudeVector":
        return AmplitudeVector(self.n, self.psi.copy())


# ------------------------------ Gate kernels --------------------------------


def apply_single_qubit(psi: np.ndarray, U2: np.ndarray, k: int, n: int) -> np.ndarray:
    """Apply 2x2 gate *U2* to qubit *k* and return the new vector."""

    # split the index into (high bits, bit k, low bits)
    view = psi.reshape(1 << (n - 1 - k), 2, 1 << k)
    return np.einsum("ij,ajb->aib", U2, view).reshape(-1)


def apply_cx(psi: np.ndarray, control: int, target: int) -> np.ndarray:
    idx = np.arange(psi.shape[0])
    out = psi.copy()
    on = ((idx >> control) & 1) == 1
    out[on] = psi[idx[on] ^ (1 << target)]
    return out


def apply_cz(psi: np.ndarray, control: int, target: int) -> np.ndarray:
    idx = np.arange(psi.shape[0])
    out = psi.copy()
    both = (((idx >> control) & 1) == 1) & (((idx >> target) & 1) == 1)
    out[both] *= -1
    return out


def apply_swap(psi: np.ndarray, a: int, b: int) -> np.ndarray:
    idx = np.arange(psi.shape[0])
    differ = ((idx >> a) & 1) != ((idx >> b) & 1)
    src = np.where(differ, idx ^ ((1 << a) | (1 << b)), idx)
    return psi[src]


_TWO_QUBIT_KERNELS = {
    "CX": apply_cx,
    "CZ": apply_cz,
    "SWAP": apply_swap,
}


# ------------------------------- Simulator ----------------------------------


class StateVectorSimulator:
    """Runs a :class:`Circuit` from ``|0...0>``.

    With ``reduced_gate_set=True`` only H, X, CX, RX and RY act on the state;
    RZ, P, CZ and SWAP are skipped, matching the minimal gate set early
    releases rendered with.
    """

    def __init__(self, reduced_gate_set: bool = False):
        self.reduced_gate_set = reduced_gate_set

    def apply(self, state: AmplitudeVector, gate: Gate) -> AmplitudeVector:
        if self.reduced_gate_set and gate.name in REDUCED_NOOP_GATES:
            logger.debug("Reduced gate set: skipping %s", gate)
            return state
        if gate.is_two_qubit:
            psi = _TWO_QUBIT_KERNELS[gate.name](state.psi, gate.control, gate.target)
        else:
            psi = apply_single_qubit(state.psi, gate_matrix(gate.name, gate.angle), gate.target, state.n)
        return AmplitudeVector(state.n, psi)

    def run(self, circuit: Circuit) -> AmplitudeVector:
        state = AmplitudeVector.zero(circuit.n_qubits)
        try:
            for gate in circuit:
                state = self.apply(state, gate)
        except MemoryError as exc:
            raise SimulationError("Out of memory while applying gates") from exc

        logger.debug("Simulated %d gates on %d qubits, ||psi||^2=%.9f",
                     len(circuit), circuit.n_qubits, state.norm2())
        return state


def simulate(circuit: Circuit, reduced_gate_set: bool = False) -> AmplitudeVector:
    return StateVectorSimulator(reduced_gate_set=reduced_gate_set).run(circuit)
