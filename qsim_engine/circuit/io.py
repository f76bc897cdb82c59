"""Circuit dict validation, parsing, and column scheduling.

Endianness convention: LITTLE-ENDIAN amplitudes.
  qubit 0 = bit 0 (LSB) of the state-vector index.
  |q_{n-1} ... q_1 q_0>  has index  q_0 + 2*q_1 + ... + 2^{n-1}*q_{n-1}.

Bitstring convention: QUBIT-0-FIRST.
  character k of a reported outcome string is the value of qubit k,
  so index 1 on 3 qubits reads "100".  Use index_to_bitstring /
  bitstring_to_index for every conversion.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Optional, Tuple

from qsim_engine.circuit.errors import (
    CircuitValidationError,
    DuplicateQubitRoleError,
    OutOfBoundsQubitError,
    UnknownGateError,
)
from qsim_engine.kernel import gates as gmod

ENDIANNESS = "little"
BITSTRING_ORDER = "qubit0-first"

# gates whose missing control defaults to target - 1
_ADJACENT_CONTROL = frozenset({"CNOT", "CX", "CZ"})
# gates that need at least two controls
_MULTI_CONTROL = frozenset({"CCX", "TOFFOLI", "CCZ"})

_TOP_KEYS = {"numQubits", "number_of_qubits", "gates"}
# editor metadata carried by saved circuits; not simulated
_META_KEYS = {"name", "description", "version", "createdAt", "updatedAt", "repeaters"}
_GATE_KEYS = {"gate", "gateId", "id", "target", "control", "controls",
              "angle", "angles", "column"}


@dataclass(frozen=True)
class GateSpec:
    """One placed gate.

    For SWAP, ``control`` holds the second swapped qubit.
    """
    gate: str
    target: int
    control: Optional[int] = None
    controls: Tuple[int, ...] = ()
    angle: Optional[float] = None
    angles: Optional[Tuple[float, float, float]] = None
    column: int = 0

    @property
    def control_set(self) -> Tuple[int, ...]:
        """Every control qubit, ``control`` first."""
        if gmod.is_swap(self.gate):
            return ()
        head = () if self.control is None else (self.control,)
        return head + self.controls

    @property
    def qubits(self) -> Tuple[int, ...]:
        extra = () if self.control is None else (self.control,)
        return (self.target,) + extra + self.controls


@dataclass(frozen=True)
class Circuit:
    num_qubits: int
    gates: Tuple[GateSpec, ...] = field(default_factory=tuple)


# ── bitstrings ──────────────────────────────────────────────────────
def index_to_bitstring(index: int, num_qubits: int) -> str:
    """Amplitude index → outcome string (qubit 0 first)."""
    return "".join("1" if (index >> q) & 1 else "0" for q in range(num_qubits))


def bitstring_to_index(bits: str) -> int:
    """Outcome string (qubit 0 first) → amplitude index."""
    return sum(1 << q for q, b in enumerate(bits) if b == "1")


def bits_to_bitstring(bits) -> str:
    """Per-qubit measurement list → outcome string."""
    return "".join("1" if b else "0" for b in bits)


# ── validation ──────────────────────────────────────────────────────
def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_finite(v) -> bool:
    return isinstance(v, Real) and not isinstance(v, bool) and math.isfinite(v)


def _qubit(v, nq: int, tag: str, role: str) -> int:
    if not _is_int(v):
        raise CircuitValidationError(f"{tag}: {role} must be int, got {v!r}")
    if v < 0 or v >= nq:
        raise OutOfBoundsQubitError(v, nq, f"{tag} {role}")
    return v


def validate_circuit_dict(d: Any, max_qubits: Optional[int] = None) -> Circuit:
    """Validate and normalise a circuit dict.  Raises CircuitValidationError on bad input."""
    if isinstance(d, Circuit):
        d = circuit_to_dict(d)
    if not isinstance(d, dict):
        raise CircuitValidationError("circuit must be a dict")
    if "gates" not in d or not ({"numQubits", "number_of_qubits"} & set(d)):
        raise CircuitValidationError(
            "missing required keys: need 'numQubits' and 'gates'"
        )
    extra = set(d) - _TOP_KEYS - _META_KEYS
    if extra:
        raise CircuitValidationError(f"unknown top-level keys: {extra}")

    n = d.get("numQubits", d.get("number_of_qubits"))
    if not _is_int(n) or n < 1:
        raise CircuitValidationError(f"numQubits must be positive int, got {n!r}")
    if max_qubits is not None and n > max_qubits:
        raise CircuitValidationError(f"numQubits {n} exceeds limit {max_qubits}")

    if not isinstance(d["gates"], (list, tuple)):
        raise CircuitValidationError("gates must be a list")

    specs = [_validate_gate(g, n, i) for i, g in enumerate(d["gates"])]
    return Circuit(num_qubits=n, gates=tuple(assign_columns(specs, n)))


def _validate_gate(g: Any, nq: int, idx: int) -> dict:
    tag = f"gate[{idx}]"
    if not isinstance(g, dict):
        raise CircuitValidationError(f"{tag}: must be a dict")
    if set(g) - _GATE_KEYS:
        raise CircuitValidationError(f"{tag}: unknown keys {set(g) - _GATE_KEYS}")

    name = g.get("gate", g.get("gateId"))
    if not isinstance(name, str):
        raise CircuitValidationError(f"{tag}: missing 'gate'")
    if name not in gmod.ALL_GATES:
        raise UnknownGateError(name, tag)
    if "target" not in g:
        raise CircuitValidationError(f"{tag}: missing 'target'")

    target = _qubit(g["target"], nq, tag, "target")

    control = g.get("control")
    if control is not None:
        control = _qubit(control, nq, tag, "control")

    raw_controls = g.get("controls") or []
    if not isinstance(raw_controls, (list, tuple)):
        raise CircuitValidationError(f"{tag}: controls must be a list")
    controls = tuple(
        _qubit(c, nq, tag, f"controls[{ci}]") for ci, c in enumerate(raw_controls)
    )

    if gmod.is_measurement(name) and (control is not None or controls):
        raise CircuitValidationError(f"{tag}: measurement takes no controls")

    if gmod.is_swap(name):
        if controls:
            raise CircuitValidationError(f"{tag}: controlled SWAP is not supported")
        if control is None:
            control = _qubit(target + 1, nq, tag, "swap partner")
    elif name in _ADJACENT_CONTROL and control is None and not controls:
        control = _qubit(target - 1, nq, tag, "control")

    roles = (target,) + (() if control is None else (control,)) + controls
    seen = set()
    for q in roles:
        if q in seen:
            raise DuplicateQubitRoleError(q, tag)
        seen.add(q)

    if name in _MULTI_CONTROL and len(roles) - 1 < 2:
        raise CircuitValidationError(f"{tag}: {name} needs at least 2 controls")

    angle = g.get("angle")
    if angle is not None:
        if not _is_finite(angle):
            raise CircuitValidationError(f"{tag}: angle must be a finite number")
        angle = float(angle)

    angles = g.get("angles")
    if angles is not None:
        if not isinstance(angles, (list, tuple)) or len(angles) != 3:
            raise CircuitValidationError(f"{tag}: angles must be a list of 3 numbers")
        if not all(_is_finite(a) for a in angles):
            raise CircuitValidationError(f"{tag}: angles must be finite numbers")
        angles = tuple(float(a) for a in angles)

    column = g.get("column")
    if column is not None and (not _is_int(column) or column < 0):
        raise CircuitValidationError(f"{tag}: column must be a non-negative int")

    return {
        "gate": name, "target": target, "control": control,
        "controls": controls, "angle": angle, "angles": angles,
        "column": column,
    }


# ── scheduling ──────────────────────────────────────────────────────
def assign_columns(entries: list[dict], num_qubits: int) -> list[GateSpec]:
    """Fill missing columns: each gate lands right after the last gate on its qubits."""
    qubit_free = [0] * num_qubits
    out = []
    for e in entries:
        qs = [e["target"]]
        if e["control"] is not None:
            qs.append(e["control"])
        qs.extend(e["controls"])
        col = e["column"]
        if col is None:
            col = max(qubit_free[q] for q in qs)
        for q in qs:
            qubit_free[q] = max(qubit_free[q], col + 1)
        out.append(GateSpec(**{**e, "column": col}))
    return out


def schedule(circuit: Circuit) -> list[GateSpec]:
    """Execution order: ascending column, ties keep input order."""
    return sorted(circuit.gates, key=lambda g: g.column)


def circuit_to_dict(circuit: Circuit) -> dict:
    gates = []
    for g in circuit.gates:
        entry: dict = {"gate": g.gate, "target": g.target, "column": g.column}
        if g.control is not None:
            entry["control"] = g.control
        if g.controls:
            entry["controls"] = list(g.controls)
        if g.angle is not None:
            entry["angle"] = g.angle
        if g.angles is not None:
            entry["angles"] = list(g.angles)
        gates.append(entry)
    return {"numQubits": circuit.num_qubits, "gates": gates}
