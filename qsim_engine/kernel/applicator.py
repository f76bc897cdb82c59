"""In-place gate application on a state vector.

Vectorised numpy, one gate at a time, never building the 2^n × 2^n
operator.  Qubit q ↔ bit q of the amplitude index.

Index sets depend only on (n, qubits), so they are computed once,
frozen read-only and cached; repeated shots reuse them.
"""
from __future__ import annotations

from functools import lru_cache

import numpy as np

from qsim_engine.circuit.errors import DuplicateQubitRoleError, OutOfBoundsQubitError
from qsim_engine.kernel.statevector import StateVector


def _unwrap(state) -> tuple[np.ndarray, int]:
    if isinstance(state, StateVector):
        return state.amps, state.num_qubits
    n = int(len(state)).bit_length() - 1
    return state, n


def _check(n: int, *qubits: int) -> None:
    for q in qubits:
        if not (0 <= q < n):
            raise OutOfBoundsQubitError(q, n)
    if len(set(qubits)) != len(qubits):
        dup = next(q for q in qubits if qubits.count(q) > 1)
        raise DuplicateQubitRoleError(dup)


def _frozen(*arrays):
    for a in arrays:
        a.flags.writeable = False
    return arrays


# ── index sets ───────────────────────────────────────────────────────

@lru_cache(maxsize=512)
def _pair_indices(n: int, q: int):
    """(i0, i1) for every block of 2·stride and offset j < stride."""
    N = 1 << n
    step = 1 << q
    block = step << 1
    base = np.arange(0, N, block)
    off = np.arange(step)
    idx0 = (base[:, None] + off[None, :]).ravel()
    idx1 = idx0 + step
    return _frozen(idx0, idx1)


@lru_cache(maxsize=512)
def _controlled_indices(n: int, cmask: int, tmask: int):
    """Pairs whose control bits are all set, via the target-bit-0 representative."""
    idx = np.arange(1 << n)
    i0 = idx[((idx & cmask) == cmask) & ((idx & tmask) == 0)]
    return _frozen(i0, i0 | tmask)


@lru_cache(maxsize=512)
def _swap_indices(n: int, a: int, b: int):
    """Representatives with bit a = 0, bit b = 1, and their partners."""
    idx = np.arange(1 << n)
    i = idx[((idx >> a) & 1 == 0) & ((idx >> b) & 1 == 1)]
    return _frozen(i, i ^ (1 << a) ^ (1 << b))


def _mix(psi: np.ndarray, i0: np.ndarray, i1: np.ndarray, U: np.ndarray) -> None:
    a, b = psi[i0], psi[i1]
    psi[i0] = U[0, 0] * a + U[0, 1] * b
    psi[i1] = U[1, 0] * a + U[1, 1] * b


# ── public API ───────────────────────────────────────────────────────

def apply_single_qubit(state, target: int, U: np.ndarray) -> None:
    psi, n = _unwrap(state)
    _check(n, target)
    i0, i1 = _pair_indices(n, target)
    _mix(psi, i0, i1, U)


def apply_controlled(state, control: int, target: int, U: np.ndarray) -> None:
    """Apply U to target where the control bit is 1; other amplitudes untouched."""
    psi, n = _unwrap(state)
    _check(n, control, target)
    # single-bit mask: (i & cmask) == cmask  ⇔  (i & cmask) != 0
    i0, i1 = _controlled_indices(n, 1 << control, 1 << target)
    _mix(psi, i0, i1, U)


def apply_multi_controlled(state, controls, target: int, U: np.ndarray) -> None:
    """Apply U to target where every listed control bit is 1."""
    psi, n = _unwrap(state)
    controls = tuple(controls)
    _check(n, *controls, target)
    cmask = 0
    for c in controls:
        cmask |= 1 << c
    i0, i1 = _controlled_indices(n, cmask, 1 << target)
    _mix(psi, i0, i1, U)


def apply_swap(state, a: int, b: int) -> None:
    """Exchange qubits a and b.  Pure data movement, so exact."""
    psi, n = _unwrap(state)
    _check(n, a, b)
    i, j = _swap_indices(n, min(a, b), max(a, b))
    tmp = psi[i]
    psi[i] = psi[j]
    psi[j] = tmp
