"""Born-rule measurement of one qubit with wavefunction collapse."""
from __future__ import annotations

import math
from functools import lru_cache

import numpy as np

from qsim_engine.kernel.statevector import StateVector
from qsim_engine.utils.logging_config import get_logger

log = get_logger("kernel.measure")

# Floor for the collapse denominator.  A branch this unlikely is numeric
# noise; clamping keeps NaN out of the buffer.
MIN_BRANCH_PROBABILITY = 1e-300


@lru_cache(maxsize=256)
def _bit_mask(n: int, target: int) -> np.ndarray:
    idx = np.arange(1 << n)
    ones = ((idx >> target) & 1).astype(bool)
    ones.flags.writeable = False
    return ones


def probability_of_one(state: StateVector, target: int) -> float:
    """Σ|amp[i]|² over indices with bit ``target`` set.  No collapse."""
    state.check_qubit(target, "measure")
    ones = _bit_mask(state.num_qubits, target)
    return float(np.sum(state.probabilities()[ones]))


def measure(state: StateVector, target: int, rng: np.random.Generator,
            min_branch_probability: float = MIN_BRANCH_PROBABILITY) -> int:
    """Sample qubit ``target``, collapse ``state`` in place, return 0 or 1."""
    state.check_qubit(target, "measure")
    ones = _bit_mask(state.num_qubits, target)
    probs = state.probabilities()
    p1 = float(np.sum(probs[ones]))
    p0 = float(np.sum(probs[~ones]))
    total = p0 + p1

    r = rng.random()
    outcome = 1 if r * total < p1 else 0
    p_outcome = p1 if outcome else p0

    if p_outcome < min_branch_probability:
        log.debug(
            "degenerate branch on qubit %d: p=%.3e, clamped to %.1e",
            target, p_outcome, min_branch_probability,
        )
        p_outcome = min_branch_probability

    amps = state.amps
    if outcome:
        amps[~ones] = 0.0
        amps[ones] /= math.sqrt(p_outcome)
    else:
        amps[ones] = 0.0
        amps[~ones] /= math.sqrt(p_outcome)
    return outcome
