"""Compare the bitmask applicator against the dense Kronecker oracle."""
import numpy as np
import pytest
from qsim_engine.circuit.errors import DuplicateQubitRoleError, OutOfBoundsQubitError
from qsim_engine.kernel import gates as gmod
from qsim_engine.kernel.applicator import (
    apply_controlled, apply_multi_controlled, apply_single_qubit, apply_swap,
)
from qsim_engine.kernel.statevector import StateVector
from qsim_engine.runner.executor import statevector_only
from qsim_engine.tests.fixtures.circuits import (
    bell_2q, ghz, mixed_gates, qft, random_circuit, ry_theta, toffoli_all_ones,
)
from qsim_engine.tests.fixtures.dense_oracle import (
    controlled_operator, embed, simulate, swap_operator,
)


def _random_state(n, seed=0):
    rng = np.random.default_rng(seed)
    psi = rng.normal(size=1 << n) + 1j * rng.normal(size=1 << n)
    return psi / np.linalg.norm(psi)


@pytest.mark.parametrize("circ_fn", [
    bell_2q, ry_theta, toffoli_all_ones, mixed_gates,
    lambda: ghz(4), lambda: qft(3), lambda: qft(5),
    lambda: random_circuit(5, depth=40, seed=11),
])
def test_executor_matches_ref(circ_fn):
    cd = circ_fn()
    ref = simulate(cd)
    got = statevector_only(cd).amplitudes()
    np.testing.assert_allclose(got, ref, atol=1e-10)


@pytest.mark.parametrize("target", [0, 1, 2, 3])
@pytest.mark.parametrize("name", ["H", "Y", "SX", "T"])
def test_single_qubit_vs_ref(name, target):
    n = 4
    U = gmod.gate_matrix(name)
    psi = _random_state(n, seed=target)
    ref = embed(n, {target: U}) @ psi
    apply_single_qubit(psi, target, U)
    np.testing.assert_allclose(psi, ref, atol=1e-12)


@pytest.mark.parametrize("control,target", [(0, 1), (1, 0), (3, 1), (0, 3)])
def test_controlled_vs_ref(control, target):
    n = 4
    U = gmod.gate_matrix("Ry", 0.9)
    psi = _random_state(n, seed=control * 7 + target)
    ref = controlled_operator(n, [control], target, U) @ psi
    apply_controlled(psi, control, target, U)
    np.testing.assert_allclose(psi, ref, atol=1e-12)


@pytest.mark.parametrize("controls,target", [((0, 1), 2), ((3, 0), 1), ((1, 2, 3), 0)])
def test_multi_controlled_vs_ref(controls, target):
    n = 4
    U = gmod.gate_matrix("U", angles=(0.4, 1.2, -0.8))
    psi = _random_state(n, seed=target)
    ref = controlled_operator(n, controls, target, U) @ psi
    apply_multi_controlled(psi, controls, target, U)
    np.testing.assert_allclose(psi, ref, atol=1e-12)


@pytest.mark.parametrize("a,b", [(0, 1), (2, 0), (1, 3)])
def test_swap_vs_ref(a, b):
    n = 4
    psi = _random_state(n, seed=a + b)
    ref = swap_operator(n, a, b) @ psi
    apply_swap(psi, a, b)
    np.testing.assert_array_equal(psi, ref)


def test_controlled_no_op_when_control_is_zero():
    """Amplitudes whose control bit is 0 are left exactly untouched."""
    n = 4
    control, target = 2, 0
    psi = _random_state(n, seed=5)
    before = psi.copy()
    apply_controlled(psi, control, target, gmod.H())
    idx = np.arange(1 << n)
    untouched = (idx & (1 << control)) == 0
    np.testing.assert_array_equal(psi[untouched], before[untouched])
    assert not np.allclose(psi[~untouched], before[~untouched])


def test_multi_controlled_requires_all_controls():
    n = 3
    psi = _random_state(n, seed=9)
    before = psi.copy()
    apply_multi_controlled(psi, (0, 1), 2, gmod.X())
    for i in range(1 << n):
        if (i & 0b011) != 0b011:
            assert psi[i] == before[i]


@pytest.mark.parametrize("n,a,b", [(3, 0, 2), (4, 1, 3), (5, 4, 0)])
def test_swap_exact_on_basis_states(n, a, b):
    """Every basis state maps to the index with bits a and b exchanged, exactly."""
    for i in range(1 << n):
        sv = StateVector(n)
        sv.amps[0] = 0.0
        sv.amps[i] = 1.0
        apply_swap(sv, a, b)
        ba, bb = (i >> a) & 1, (i >> b) & 1
        j = i if ba == bb else i ^ (1 << a) ^ (1 << b)
        assert sv.amps[j] == 1.0
        assert np.count_nonzero(sv.amps) == 1


def test_statevector_and_ndarray_inputs_agree():
    n = 3
    psi = _random_state(n, seed=1)
    sv = StateVector(n)
    sv.amps[:] = psi
    apply_single_qubit(psi, 1, gmod.H())
    apply_single_qubit(sv, 1, gmod.H())
    np.testing.assert_array_equal(psi, sv.amps)


def test_out_of_range_qubit_raises():
    sv = StateVector(2)
    with pytest.raises(OutOfBoundsQubitError, match="out of range"):
        apply_single_qubit(sv, 2, gmod.H())
    with pytest.raises(OutOfBoundsQubitError):
        apply_controlled(sv, -1, 0, gmod.X())


def test_duplicate_roles_raise():
    sv = StateVector(3)
    with pytest.raises(DuplicateQubitRoleError):
        apply_controlled(sv, 1, 1, gmod.X())
    with pytest.raises(DuplicateQubitRoleError):
        apply_multi_controlled(sv, (0, 0), 2, gmod.X())
    with pytest.raises(DuplicateQubitRoleError):
        apply_swap(sv, 2, 2)


def test_cached_indices_are_read_only():
    from qsim_engine.kernel.applicator import _pair_indices
    i0, i1 = _pair_indices(3, 1)
    with pytest.raises(ValueError):
        i0[0] = 5
