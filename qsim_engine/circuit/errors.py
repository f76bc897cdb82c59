"""Validation errors raised before any trial runs.

All of them are ValueError subclasses so callers that only care about
"bad circuit" can keep catching ValueError.
"""
from __future__ import annotations


class CircuitValidationError(ValueError):
    """Circuit dict is malformed or exceeds configured limits."""


class OutOfBoundsQubitError(CircuitValidationError):
    """A target or control index lies outside [0, num_qubits)."""

    def __init__(self, qubit, num_qubits: int, where: str = ""):
        self.qubit = qubit
        self.num_qubits = num_qubits
        prefix = f"{where}: " if where else ""
        super().__init__(
            f"{prefix}qubit {qubit} out of range [0, {num_qubits})"
        )


class DuplicateQubitRoleError(CircuitValidationError):
    """A qubit plays two roles in one gate (control == target, repeated control)."""

    def __init__(self, qubit: int, where: str = ""):
        self.qubit = qubit
        prefix = f"{where}: " if where else ""
        super().__init__(f"{prefix}qubit {qubit} used in more than one role")


class UnknownGateError(CircuitValidationError):
    def __init__(self, gate_id, where: str = ""):
        self.gate_id = gate_id
        prefix = f"{where}: " if where else ""
        super().__init__(f"{prefix}unsupported gate '{gate_id}'")
