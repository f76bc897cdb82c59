"""State-vector buffer for one simulation trial.

Endianness: little-endian (qubit q = bit q of the amplitude index).
The buffer is a single complex128 array; ``.real`` / ``.imag`` are the
two parallel float views.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

from qsim_engine.circuit.errors import OutOfBoundsQubitError

DTYPE = np.complex128


@dataclass
class RawAmplitudes:
    """Final amplitudes of a measurement-free run."""
    real: List[float] = field(default_factory=list)
    imag: List[float] = field(default_factory=list)

    def amplitudes(self) -> np.ndarray:
        return np.asarray(self.real) + 1j * np.asarray(self.imag)

    def to_dict(self) -> dict:
        return {"real": list(self.real), "imag": list(self.imag)}


class StateVector:
    """Owned amplitude buffer, initialised to |0...0>."""

    def __init__(self, num_qubits: int):
        if num_qubits < 1:
            raise ValueError(f"num_qubits must be >= 1, got {num_qubits}")
        self.num_qubits = num_qubits
        self.amps = np.zeros(1 << num_qubits, dtype=DTYPE)
        self.amps[0] = 1.0

    @property
    def dim(self) -> int:
        return len(self.amps)

    @property
    def real(self) -> np.ndarray:
        return self.amps.real

    @property
    def imag(self) -> np.ndarray:
        return self.amps.imag

    def reset(self) -> None:
        """Return to |0...0> without reallocating."""
        self.amps.fill(0.0)
        self.amps[0] = 1.0

    def check_qubit(self, q: int, where: str = "") -> None:
        if not (0 <= q < self.num_qubits):
            raise OutOfBoundsQubitError(q, self.num_qubits, where)

    def probabilities(self) -> np.ndarray:
        return self.amps.real ** 2 + self.amps.imag ** 2

    def norm_squared(self) -> float:
        return float(np.sum(self.probabilities()))

    def is_normalized(self, atol: float = 1e-6) -> bool:
        return abs(self.norm_squared() - 1.0) <= atol

    def copy(self) -> "StateVector":
        other = StateVector.__new__(StateVector)
        other.num_qubits = self.num_qubits
        other.amps = self.amps.copy()
        return other

    def to_raw(self) -> RawAmplitudes:
        return RawAmplitudes(real=self.amps.real.tolist(),
                             imag=self.amps.imag.tolist())

    def __repr__(self) -> str:
        return f"StateVector(num_qubits={self.num_qubits})"
