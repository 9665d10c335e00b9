import math

import pytest

from quantum_canvas.circuit import (
    GATE_POOLS,
    build_circuit,
    build_parametric_circuit,
    build_random_circuit,
)
from quantum_canvas.config import CircuitMode, Style, StyleParameters
from quantum_canvas.gates import TWO_QUBIT_GATES


@pytest.mark.parametrize("style", list(Style))
def test_random_circuit_draws_three_gates_per_qubit_from_pool(rng, style):
    circuit = build_random_circuit(4, GATE_POOLS[style], rng)
    assert circuit.n_qubits == 4
    assert len(circuit) == 12
    assert {g.name for g in circuit} <= set(GATE_POOLS[style])


def test_random_circuit_uses_ring_topology(rng):
    circuit = build_random_circuit(5, ("CX", "CZ", "SWAP"), rng)
    for gate in circuit:
        assert gate.name in TWO_QUBIT_GATES
        assert gate.target == (gate.control + 1) % 5


@pytest.mark.parametrize("requested,expected", [(1, 3), (3, 3), (5, 5), (8, 5)])
def test_random_circuit_clamps_qubits(rng, requested, expected):
    circuit = build_random_circuit(requested, ("H",), rng)
    assert circuit.n_qubits == expected
    assert len(circuit) == 3 * expected


def test_random_circuit_rotation_angles_in_range(rng):
    circuit = build_random_circuit(3, ("RX", "RY", "RZ", "P"), rng)
    assert all(0.0 <= g.angle < 2 * math.pi for g in circuit)


def test_random_circuit_seeded_is_reproducible():
    params = StyleParameters(style=Style.POLLOCK, seed=11)
    assert build_circuit(params).gates == build_circuit(params).gates


def test_parametric_circuit_is_deterministic():
    a = build_parametric_circuit(4, 0.5, 3, 5, 2)
    b = build_parametric_circuit(4, 0.5, 3, 5, 2)
    assert a.gates == b.gates


def test_parametric_circuit_layout():
    n, depth, complexity = 4, 3, 5
    circuit = build_parametric_circuit(n, 0.8, 2, complexity, depth)
    links = math.ceil(n * complexity / 10)
    assert len(circuit) == depth * (2 * n + links)
    counts = circuit.gate_counts()
    assert counts == {"RY": depth * n, "RZ": depth * n, "CX": depth * links}

    first = circuit.gates[0]
    assert first.name == "RY"
    assert first.angle == pytest.approx(math.pi * 0.8 / n)


@pytest.mark.parametrize("requested,expected", [(1, 2), (2, 2), (8, 8), (12, 8)])
def test_parametric_circuit_clamps_qubits(requested, expected):
    assert build_parametric_circuit(requested, 0.5, 3, 5, 1).n_qubits == expected


def test_build_circuit_dispatches_on_mode():
    params = StyleParameters(circuit_mode=CircuitMode.PARAMETRIC, qubit_count=6, seed=1)
    circuit = build_circuit(params)
    assert circuit.n_qubits == 6
    assert set(circuit.gate_counts()) == {"RY", "RZ", "CX"}

    random_params = params.with_changes(circuit_mode=CircuitMode.RANDOM)
    assert build_circuit(random_params).n_qubits == 5


def test_circuit_rejects_out_of_range_qubits():
    from quantum_canvas.circuit import Circuit
    from quantum_canvas.gates import Gate

    with pytest.raises(ValueError):
        Circuit(2, [Gate("H", 2)])
