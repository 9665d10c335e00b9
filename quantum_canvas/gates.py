"""
Gate values and the single-qubit gate library.

Matrices act on one qubit's two-dimensional subspace, rows/columns ordered
``|0>, |1>``. Two-qubit gates (CX, CZ, SWAP) are permutation / sign gates and
have no dense matrix here: :func:`gate_matrix` returns ``None`` for them and
the simulator applies them with index arithmetic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

SINGLE_QUBIT_GATES = ("H", "X", "RX", "RY", "RZ", "P")
TWO_QUBIT_GATES = ("CX", "CZ", "SWAP")
PARAMETRIC_GATES = ("RX", "RY", "RZ", "P")


@dataclass(frozen=True)
class Gate:
    """One gate application.

    Single-qubit gates use ``target`` (and ``angle`` for rotations);
    two-qubit gates use ``control`` and ``target``.
    """

    name: str
    target: int
    control: Optional[int] = None
    angle: float = 0.0

    def __post_init__(self) -> None:
        name = self.name.upper()
        object.__setattr__(self, "name", name)
        if name not in SINGLE_QUBIT_GATES and name not in TWO_QUBIT_GATES:
            raise ValueError(f"Unknown gate {self.name!r}")
        if name in TWO_QUBIT_GATES:
            if self.control is None:
                raise ValueError(f"{name} needs a control qubit")
            if self.control == self.target:
                raise ValueError("control and target must differ")

    @property
    def is_two_qubit(self) -> bool:
        return self.name in TWO_QUBIT_GATES

    @property
    def qubits(self) -> tuple:
        if self.is_two_qubit:
            return (self.control, self.target)
        return (self.target,)

    def __str__(self) -> str:
        if self.is_two_qubit:
            return f"{self.name.lower()}(q{self.control}, q{self.target})"
        if self.name in PARAMETRIC_GATES:
            return f"{self.name.lower()}({self.angle:.3f}) q{self.target}"
        return f"{self.name.lower()} q{self.target}"


# ------------------------------ Gate library --------------------------------


def H() -> np.ndarray:
    s = 1.0 / math.sqrt(2.0)
    return np.array([[s, s],
                     [s, -s]], dtype=np.complex128)


def X() -> np.ndarray:
    return np.array([[0, 1],
                     [1, 0]], dtype=np.complex128)


def RX(theta: float = 0.0) -> np.ndarray:
    c = math.cos(theta / 2.0)
    s = -1j * math.sin(theta / 2.0)
    return np.array([[c, s],
                     [s, c]], dtype=np.complex128)


def RY(theta: float = 0.0) -> np.ndarray:
    c = math.cos(theta / 2.0)
    s = math.sin(theta / 2.0)
    return np.array([[c, -s],
                     [s, c]], dtype=np.complex128)


def RZ(theta: float = 0.0) -> np.ndarray:
    return np.array([[np.exp(-0.5j * theta), 0],
                     [0, np.exp(+0.5j * theta)]], dtype=np.complex128)


def P(theta: float = 0.0) -> np.ndarray:
    return np.array([[1, 0],
                     [0, np.exp(1j * theta)]], dtype=np.complex128)


_LIBRARY = {
    "H": lambda angle: H(),
    "X": lambda angle: X(),
    "RX": RX,
    "RY": RY,
    "RZ": RZ,
    "P": P,
}


def gate_matrix(name: str, angle: Optional[float] = None) -> Optional[np.ndarray]:
    """Return the 2x2 unitary for *name*, or ``None`` for a two-qubit gate.

    A missing *angle* means 0, which turns every rotation into the identity.
    """

    name = name.upper()
    if name in TWO_QUBIT_GATES:
        return None
    try:
        factory = _LIBRARY[name]
    except KeyError:
        raise ValueError(f"Unknown gate {name!r}") from None
    return factory(0.0 if angle is None else float(angle))


def is_unitary(mat: np.ndarray, atol: float = 1e-10) -> bool:
    return bool(np.allclose(mat.conj().T @ mat, np.eye(mat.shape[0]), atol=atol))
