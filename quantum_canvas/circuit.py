"""
Circuit value and the two circuit builders.

*Random mode* picks ``3n`` gates uniformly from a style-specific pool.
Two-qubit gates use a ring topology: the control is a random qubit and the
target is always ``(control + 1) % n``.

*Parametric mode* is deterministic: layers of RY/RZ rotations whose angles
follow the entropy and harmonics knobs, followed by a ring of CX links whose
count grows with complexity.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Sequence, Tuple

import numpy as np

from .config import QUBIT_RANGES, CircuitMode, Style, StyleParameters
from .gates import PARAMETRIC_GATES, TWO_QUBIT_GATES, Gate

logger = logging.getLogger(__name__)

GATE_POOLS: Dict[Style, Tuple[str, ...]] = {
    Style.CHAOTIC: ("H", "RX", "RY"),
    Style.STRUCTURED: ("CX", "CZ", "SWAP"),
    Style.FLOWING: ("RX", "RY", "RZ", "P"),
    Style.MINIMAL: ("X", "H", "CX"),
    Style.ABSTRACT: ("H", "RY", "CX", "RZ"),
    Style.DALI: ("RY", "RZ", "P", "H"),
    Style.PICASSO: ("H", "X", "CX", "SWAP"),
    Style.KANDINSKY: ("H", "RX", "CZ", "P"),
    Style.POLLOCK: ("H", "RX", "RY", "CX"),
    Style.MONDRIAN: ("X", "CX", "SWAP"),
    Style.VAN_GOGH: ("RX", "RY", "RZ", "CX"),
    Style.ESCHER: ("H", "RY", "CZ", "SWAP"),
}


@dataclass(frozen=True)
class Circuit:
    n_qubits: int
    gates: Tuple[Gate, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "gates", tuple(self.gates))
        for gate in self.gates:
            for q in gate.qubits:
                if not 0 <= q < self.n_qubits:
                    raise ValueError(f"{gate} addresses qubit {q} outside 0..{self.n_qubits - 1}")

    def __len__(self) -> int:
        return len(self.gates)

    def __iter__(self) -> Iterator[Gate]:
        return iter(self.gates)

    def gate_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for gate in self.gates:
            counts[gate.name] = counts.get(gate.name, 0) + 1
        return counts

    def describe(self) -> str:
        return "; ".join(str(g) for g in self.gates)


# ------------------------------ Random mode ---------------------------------


def build_random_circuit(
    n_qubits: int,
    pool: Sequence[str],
    rng: np.random.Generator,
) -> Circuit:
    """Draw ``3 * n`` gates uniformly from *pool*.

    *n_qubits* is clamped to the random-mode range [3, 5].
    """

    low, high = QUBIT_RANGES[CircuitMode.RANDOM]
    n = min(max(int(n_qubits), low), high)
    pool = tuple(g.upper() for g in pool)
    if not pool:
        raise ValueError("gate pool must not be empty")

    gates = []
    for _ in range(n * 3):
        name = pool[int(rng.integers(0, len(pool)))]
        qubit = int(rng.integers(0, n))
        if name in TWO_QUBIT_GATES:
            gates.append(Gate(name, target=(qubit + 1) % n, control=qubit))
        elif name in PARAMETRIC_GATES:
            gates.append(Gate(name, target=qubit, angle=float(rng.random() * 2 * math.pi)))
        else:
            gates.append(Gate(name, target=qubit))
    return Circuit(n, tuple(gates))


# ---------------------------- Parametric mode -------------------------------


def build_parametric_circuit(
    n_qubits: int,
    entropy: float,
    harmonics: int,
    complexity: int,
    layer_depth: int,
) -> Circuit:
    """Deterministic layered circuit driven by the style knobs.

    *n_qubits* is clamped to the parametric-mode range [2, 8].
    """

    low, high = QUBIT_RANGES[CircuitMode.PARAMETRIC]
    n = min(max(int(n_qubits), low), high)
    links = max(1, math.ceil(n * complexity / 10))

    gates = []
    for layer in range(layer_depth):
        for q in range(n):
            gates.append(Gate("RY", target=q, angle=math.pi * entropy * (q + 1) / n))
            gates.append(Gate("RZ", target=q, angle=2 * math.pi * harmonics * (layer + 1) / (n + q)))
        # ring start shifts by one each layer
        for k in range(links):
            control = (k + layer) % n
            gates.append(Gate("CX", target=(control + 1) % n, control=control))
    return Circuit(n, tuple(gates))


def build_circuit(params: StyleParameters, rng: Optional[np.random.Generator] = None) -> Circuit:
    """Build the circuit for *params* in its configured circuit mode."""

    if params.circuit_mode is CircuitMode.PARAMETRIC:
        circuit = build_parametric_circuit(
            params.qubit_count,
            params.entropy,
            params.harmonics,
            params.complexity,
            params.layer_depth,
        )
    else:
        if rng is None:
            rng = np.random.default_rng(params.seed)
        circuit = build_random_circuit(params.qubit_count, GATE_POOLS[params.style], rng)

    logger.debug("Built %s circuit: %d qubits, %d gates (%s)",
                 params.circuit_mode.value, circuit.n_qubits, len(circuit), circuit.gate_counts())
    return circuit
