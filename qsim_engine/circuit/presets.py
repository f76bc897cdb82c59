"""Preset circuits (ingestion dict format) for demos and smoke runs.

Outcome strings below follow the qubit-0-first convention of
``circuit.io``.
"""
from __future__ import annotations

import math


def bell_phi_plus() -> dict:
    """(|00> + |11>)/√2."""
    return {
        "numQubits": 2,
        "gates": [
            {"gate": "H", "target": 0},
            {"gate": "CNOT", "target": 1, "control": 0},
        ],
    }


def bell_psi_plus() -> dict:
    """(|01> + |10>)/√2: X before the entangler.  Outcomes "01" / "10"."""
    return {
        "numQubits": 2,
        "gates": [
            {"gate": "X", "target": 1},
            {"gate": "H", "target": 0},
            {"gate": "CNOT", "target": 1, "control": 0},
        ],
    }


def ghz(n: int = 3) -> dict:
    """(|0...0> + |1...1>)/√2, fanned out from qubit 0."""
    gates = [{"gate": "H", "target": 0}]
    for q in range(1, n):
        gates.append({"gate": "CNOT", "target": q, "control": 0})
    return {"numQubits": n, "gates": gates}


def deutsch_jozsa_2() -> dict:
    """Balanced oracle: qubit 0 always measures 1."""
    return {
        "numQubits": 2,
        "gates": [
            {"gate": "X", "target": 1},
            {"gate": "H", "target": 0},
            {"gate": "H", "target": 1},
            {"gate": "CNOT", "target": 1, "control": 0},
            {"gate": "H", "target": 0},
            {"gate": "M", "target": 0},
        ],
    }


def grover_2() -> dict:
    """One Grover iteration marking |11>; finds it with certainty."""
    return {
        "numQubits": 2,
        "gates": [
            {"gate": "H", "target": 0},
            {"gate": "H", "target": 1},
            # oracle
            {"gate": "CZ", "target": 1, "control": 0},
            # diffusion
            {"gate": "H", "target": 0},
            {"gate": "H", "target": 1},
            {"gate": "X", "target": 0},
            {"gate": "X", "target": 1},
            {"gate": "CZ", "target": 1, "control": 0},
            {"gate": "X", "target": 0},
            {"gate": "X", "target": 1},
            {"gate": "H", "target": 0},
            {"gate": "H", "target": 1},
        ],
    }


def phase_estimation_simple() -> dict:
    return {
        "numQubits": 3,
        "gates": [
            {"gate": "X", "target": 2},
            {"gate": "H", "target": 0},
            {"gate": "H", "target": 1},
            {"gate": "P", "target": 2, "angle": math.pi / 2},
            {"gate": "P", "target": 2, "angle": math.pi / 4},
            {"gate": "SWAP", "target": 0, "control": 1},
            {"gate": "H", "target": 0},
            {"gate": "P", "target": 0, "angle": -math.pi / 2},
            {"gate": "H", "target": 1},
        ],
    }


def teleportation() -> dict:
    """Teleport |+> from q0 to q2; corrections applied unconditionally."""
    return {
        "numQubits": 3,
        "gates": [
            {"gate": "H", "target": 0},
            {"gate": "H", "target": 1},
            {"gate": "CNOT", "target": 2, "control": 1},
            {"gate": "CNOT", "target": 1, "control": 0},
            {"gate": "H", "target": 0},
            {"gate": "M", "target": 0},
            {"gate": "M", "target": 1},
            {"gate": "X", "target": 2},
            {"gate": "Z", "target": 2},
        ],
    }


def superdense_coding() -> dict:
    """Encodes the message 11 with X·Z; always decodes to "11"."""
    return {
        "numQubits": 2,
        "gates": [
            {"gate": "H", "target": 0},
            {"gate": "CNOT", "target": 1, "control": 0},
            {"gate": "X", "target": 0},
            {"gate": "Z", "target": 0},
            {"gate": "CNOT", "target": 1, "control": 0},
            {"gate": "H", "target": 0},
            {"gate": "M", "target": 0},
            {"gate": "M", "target": 1},
        ],
    }


def entanglement_swapping() -> dict:
    return {
        "numQubits": 4,
        "gates": [
            {"gate": "H", "target": 0},
            {"gate": "CNOT", "target": 1, "control": 0},
            {"gate": "H", "target": 2},
            {"gate": "CNOT", "target": 3, "control": 2},
            {"gate": "CNOT", "target": 2, "control": 1},
            {"gate": "H", "target": 1},
            {"gate": "M", "target": 1},
            {"gate": "M", "target": 2},
        ],
    }


def bit_flip_code() -> dict:
    """Encode |0>, inject X on q1, decode.  Always "010"."""
    return {
        "numQubits": 3,
        "gates": [
            {"gate": "CNOT", "target": 1, "control": 0},
            {"gate": "CNOT", "target": 2, "control": 0},
            {"gate": "X", "target": 1},
            {"gate": "CNOT", "target": 1, "control": 0},
            {"gate": "CNOT", "target": 2, "control": 0},
        ],
    }


def phase_flip_code() -> dict:
    return {
        "numQubits": 3,
        "gates": [
            {"gate": "CNOT", "target": 1, "control": 0},
            {"gate": "CNOT", "target": 2, "control": 0},
            {"gate": "H", "target": 0},
            {"gate": "H", "target": 1},
            {"gate": "H", "target": 2},
            {"gate": "Z", "target": 1},
            {"gate": "H", "target": 0},
            {"gate": "H", "target": 1},
            {"gate": "H", "target": 2},
            {"gate": "CNOT", "target": 1, "control": 0},
            {"gate": "CNOT", "target": 2, "control": 0},
        ],
    }


def steane_encoder() -> dict:
    return {
        "numQubits": 7,
        "gates": [
            {"gate": "H", "target": 3},
            {"gate": "H", "target": 4},
            {"gate": "H", "target": 5},
            {"gate": "CNOT", "target": 6, "control": 3},
            {"gate": "CNOT", "target": 6, "control": 4},
            {"gate": "CNOT", "target": 6, "control": 5},
            {"gate": "CNOT", "target": 0, "control": 3},
            {"gate": "CNOT", "target": 1, "control": 3},
            {"gate": "CNOT", "target": 0, "control": 4},
            {"gate": "CNOT", "target": 2, "control": 4},
            {"gate": "CNOT", "target": 1, "control": 5},
            {"gate": "CNOT", "target": 2, "control": 5},
        ],
    }


PRESETS = {
    "bell_phi_plus": bell_phi_plus,
    "bell_psi_plus": bell_psi_plus,
    "ghz3": lambda: ghz(3),
    "ghz4": lambda: ghz(4),
    "deutsch_jozsa_2": deutsch_jozsa_2,
    "grover_2": grover_2,
    "phase_estimation_simple": phase_estimation_simple,
    "teleportation": teleportation,
    "superdense_coding": superdense_coding,
    "entanglement_swapping": entanglement_swapping,
    "bit_flip_code": bit_flip_code,
    "phase_flip_code": phase_flip_code,
    "steane_encoder": steane_encoder,
}


def get_preset(name: str) -> dict:
    try:
        return PRESETS[name]()
    except KeyError:
        raise KeyError(f"unknown preset {name!r}; choose from {sorted(PRESETS)}") from None
