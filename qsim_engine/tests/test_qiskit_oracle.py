"""Compare statevector_only against Qiskit Statevector on imported circuits."""
import pytest
import numpy as np

try:
    from qiskit import QuantumCircuit, transpile
    from qiskit.quantum_info import Statevector
    HAS_QISKIT = True
except ImportError:
    HAS_QISKIT = False

from qsim_engine.circuit.import_qiskit import SUPPORTED_BASIS, qiskit_to_dict
from qsim_engine.runner.executor import statevector_only


def _compare(qc, atol=1e-8):
    """Transpile qc, convert, simulate, compare to Qiskit Statevector."""
    qc_t = transpile(qc, basis_gates=SUPPORTED_BASIS, optimization_level=0)
    cd = qiskit_to_dict(qc_t)
    ours = statevector_only(cd).amplitudes()
    ref = np.array(Statevector(qc).data)
    # Global phase may differ; phase-invariant check
    overlap = np.abs(np.vdot(ref, ours))
    assert overlap > 1.0 - atol, f"overlap={overlap}"


@pytest.mark.skipif(not HAS_QISKIT, reason="qiskit not installed")
class TestQiskitDirect:
    def test_bell(self):
        qc = QuantumCircuit(2)
        qc.h(0); qc.cx(0, 1)
        _compare(qc)

    def test_ghz4(self):
        qc = QuantumCircuit(4)
        qc.h(0)
        for i in range(1, 4):
            qc.cx(i - 1, i)
        _compare(qc)

    def test_rotations_and_phases(self):
        qc = QuantumCircuit(3)
        qc.rx(0.3, 0); qc.ry(1.1, 1); qc.rz(-0.7, 2)
        qc.p(0.9, 0); qc.sdg(1); qc.tdg(2); qc.sx(0)
        qc.u(0.4, -1.3, 2.2, 1)
        qc.cz(2, 0)
        _compare(qc)

    def test_swap_and_toffoli(self):
        qc = QuantumCircuit(4)
        qc.h(0); qc.h(1); qc.x(3)
        qc.ccx(0, 1, 2)
        qc.swap(2, 3)
        qc.ccx(3, 0, 1)
        _compare(qc)

    @pytest.mark.parametrize("n", [3, 4, 5])
    def test_random_mixed(self, n):
        qc = QuantumCircuit(n)
        rng = np.random.default_rng(n)
        for _ in range(4 * n):
            q = int(rng.integers(n))
            kind = int(rng.integers(4))
            if kind == 0:
                qc.h(q)
            elif kind == 1:
                qc.rx(float(rng.uniform(-np.pi, np.pi)), q)
            elif kind == 2:
                qc.u(*(float(a) for a in rng.uniform(-np.pi, np.pi, size=3)), q)
            else:
                a, b = rng.choice(n, size=2, replace=False)
                qc.cx(int(a), int(b))
        _compare(qc)

    def test_measurements_dropped_on_request(self):
        qc = QuantumCircuit(2, 2)
        qc.h(0); qc.measure(0, 0)
        assert [g["gate"] for g in qiskit_to_dict(qc)["gates"]] == ["H", "M"]
        assert [g["gate"] for g in qiskit_to_dict(qc, keep_measurements=False)["gates"]] == ["H"]

    def test_unsupported_gate_rejected(self):
        qc = QuantumCircuit(2)
        qc.cry(0.3, 0, 1)
        with pytest.raises(ValueError, match="Unsupported gate"):
            qiskit_to_dict(qc)
