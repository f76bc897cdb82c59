"""Canonical single-qubit gate matrices.

Convention:
  every gate resolves to a 2×2 complex128 ndarray acting on (|0>, |1>)
  of its target qubit.  Multi-qubit behaviour (control, swap) is not
  encoded in a bigger matrix; the applicator handles it with bitmasks.
"""
from __future__ import annotations

import numpy as np

from qsim_engine.circuit.errors import UnknownGateError

_S2 = 1.0 / np.sqrt(2.0)


def _mat(*rows):
    return np.array(rows, dtype=np.complex128)


# ── 1-qubit fixed ───────────────────────────────────────────────────
def I():
    return _mat([1, 0], [0, 1])

def X():
    return _mat([0, 1], [1, 0])

def Y():
    return _mat([0, -1j], [1j, 0])

def Z():
    return _mat([1, 0], [0, -1])

def H():
    return _mat([_S2, _S2], [_S2, -_S2])

def S():
    return _mat([1, 0], [0, 1j])

def Sdg():
    return _mat([1, 0], [0, -1j])

def T():
    return _mat([1, 0], [0, np.exp(1j * np.pi / 4)])

def Tdg():
    return _mat([1, 0], [0, np.exp(-1j * np.pi / 4)])

def SX():
    return _mat([0.5 + 0.5j, 0.5 - 0.5j], [0.5 - 0.5j, 0.5 + 0.5j])


# ── 1-qubit parameterised ──────────────────────────────────────────
def RX(theta: float):
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return _mat([c, -1j * s], [-1j * s, c])

def RY(theta: float):
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return _mat([c, -s], [s, c])

def RZ(theta: float):
    return _mat([np.exp(-0.5j * theta), 0], [0, np.exp(0.5j * theta)])

def P(phi: float):
    return _mat([1, 0], [0, np.exp(1j * phi)])

def U(theta: float, phi: float, lam: float):
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return _mat(
        [c, -np.exp(1j * lam) * s],
        [np.exp(1j * phi) * s, np.exp(1j * (phi + lam)) * c],
    )


# ── registries ──────────────────────────────────────────────────────
FIXED_1Q = {
    "I": I, "X": X, "Y": Y, "Z": Z, "H": H,
    "S": S, "Sdg": Sdg, "T": T, "Tdg": Tdg, "SX": SX,
}
PARAM_1Q = {"Rx": RX, "Ry": RY, "Rz": RZ, "P": P, "U": U}

# controlled gate id → base matrix on the target
CONTROLLED = {"CNOT": X, "CX": X, "CZ": Z, "CCX": X, "TOFFOLI": X, "CCZ": Z}
SWAP_GATES = frozenset({"SWAP"})
MEASURE_GATES = frozenset({"M"})

ALL_GATES = frozenset(FIXED_1Q) | frozenset(PARAM_1Q) | frozenset(CONTROLLED) \
    | SWAP_GATES | MEASURE_GATES

# a missing angle means a half turn
DEFAULT_ANGLE = np.pi


def is_controlled(name: str) -> bool:
    return name in CONTROLLED


def is_swap(name: str) -> bool:
    return name in SWAP_GATES


def is_measurement(name: str) -> bool:
    return name in MEASURE_GATES


# ── dispatcher ──────────────────────────────────────────────────────
def gate_matrix(name: str, angle: float | None = None,
                angles=None) -> np.ndarray:
    """Return the 2×2 unitary for a single-qubit gate id.

    ``angle`` feeds Rx/Ry/Rz/P (default π).  ``angles`` is (θ, φ, λ) for U;
    without it U falls back to (angle, 0, 0).
    """
    if name in FIXED_1Q:
        return FIXED_1Q[name]()
    theta = DEFAULT_ANGLE if angle is None else float(angle)
    if name == "U":
        if angles is None:
            return U(theta, 0.0, 0.0)
        t, p, l = (float(a) for a in angles)
        return U(t, p, l)
    if name in PARAM_1Q:
        return PARAM_1Q[name](theta)
    raise UnknownGateError(name)


def base_matrix(name: str, angle: float | None = None,
                angles=None) -> np.ndarray:
    """Matrix applied to the target of a (possibly controlled) gate.

    CNOT/CZ-style ids map to their X/Z base; any other 1-qubit id
    resolves through ``gate_matrix`` so ``{"gate": "H", "control": 0}``
    means controlled-H.
    """
    if name in CONTROLLED:
        return CONTROLLED[name]()
    return gate_matrix(name, angle, angles)
