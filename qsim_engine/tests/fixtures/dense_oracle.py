"""Dense reference simulator (test oracle only, practical up to n ≈ 8).

Builds the full 2^n × 2^n operator for every gate with Kronecker
products, the thing the real applicator must never do.
Endianness: little-endian (qubit 0 = bit 0 = LSB), so the Kronecker
chain runs q_{n-1} ⊗ ... ⊗ q_0.
"""
from __future__ import annotations

from functools import reduce

import numpy as np

from qsim_engine.circuit.io import schedule, validate_circuit_dict
from qsim_engine.kernel import gates as gmod

_I2 = np.eye(2, dtype=np.complex128)
_P1 = np.array([[0, 0], [0, 1]], dtype=np.complex128)


def embed(n: int, local: dict) -> np.ndarray:
    """Full operator with ``local[q]`` on qubit q and identity elsewhere."""
    mats = [local.get(q, _I2) for q in reversed(range(n))]
    return reduce(np.kron, mats)


def controlled_operator(n: int, controls, target: int, U: np.ndarray) -> np.ndarray:
    local = {c: _P1 for c in controls}
    local[target] = U - _I2
    return np.eye(1 << n, dtype=np.complex128) + embed(n, local)


def swap_operator(n: int, a: int, b: int) -> np.ndarray:
    N = 1 << n
    M = np.zeros((N, N), dtype=np.complex128)
    for i in range(N):
        ba, bb = (i >> a) & 1, (i >> b) & 1
        j = i
        if ba != bb:
            j = i ^ (1 << a) ^ (1 << b)
        M[j, i] = 1.0
    return M


def simulate(circuit_dict: dict) -> np.ndarray:
    """Run circuit (measurements skipped), return final state vector."""
    circuit = validate_circuit_dict(circuit_dict)
    n = circuit.num_qubits
    psi = np.zeros(1 << n, dtype=np.complex128)
    psi[0] = 1.0  # |0…0>
    for g in schedule(circuit):
        if gmod.is_measurement(g.gate):
            continue
        if gmod.is_swap(g.gate):
            op = swap_operator(n, g.target, g.control)
        else:
            U = gmod.base_matrix(g.gate, g.angle, g.angles)
            if g.control_set:
                op = controlled_operator(n, g.control_set, g.target, U)
            else:
                op = embed(n, {g.target: U})
        psi = op @ psi
    return psi
