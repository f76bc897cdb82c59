"""Convert a Qiskit QuantumCircuit to our circuit dict."""
from __future__ import annotations

SUPPORTED_BASIS = [
    "id", "h", "x", "y", "z", "s", "sdg", "t", "tdg", "sx",
    "rx", "ry", "rz", "p", "u", "cx", "cz", "ccx", "swap", "measure",
]

_QISKIT_MAP = {
    "id": "I", "h": "H", "x": "X", "y": "Y", "z": "Z",
    "s": "S", "sdg": "Sdg", "t": "T", "tdg": "Tdg", "sx": "SX",
    "rx": "Rx", "ry": "Ry", "rz": "Rz", "p": "P", "u": "U",
    "cx": "CNOT", "cnot": "CNOT", "cz": "CZ", "ccx": "CCX",
    "swap": "SWAP", "measure": "M",
}

_SKIP = frozenset({"barrier", "delay"})


def qiskit_to_dict(qc, keep_measurements: bool = True) -> dict:
    """Convert a Qiskit QuantumCircuit (already transpiled) to circuit dict.

    Qiskit lists qubits as (controls..., target); we keep that split.
    Gates keep their input order; columns are assigned on load.
    """
    gates = []
    for inst in qc.data:
        op = inst.operation
        name = op.name.lower()
        if name in _SKIP or (name == "measure" and not keep_measurements):
            continue
        if name not in _QISKIT_MAP:
            raise ValueError(
                f"Unsupported gate '{name}'. Transpile to basis {SUPPORTED_BASIS} first."
            )
        qubits = [qc.find_bit(q).index for q in inst.qubits]
        entry: dict = {"gate": _QISKIT_MAP[name], "target": qubits[-1]}
        if name == "swap":
            entry = {"gate": "SWAP", "target": qubits[0], "control": qubits[1]}
        elif len(qubits) == 2:
            entry["control"] = qubits[0]
        elif len(qubits) > 2:
            entry["controls"] = qubits[:-1]
        params = [float(p) for p in op.params]
        if name == "u":
            entry["angles"] = params
        elif params:
            entry["angle"] = params[0]
        gates.append(entry)
    return {"numQubits": qc.num_qubits, "gates": gates}
