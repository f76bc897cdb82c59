"""Shot executor: validate once, fan trials out, reduce counts once.

Architecture:
  circuit dict → validate → compile ops (matrices resolved up front)
  → split shots into batches → pool (serial | threads | processes)
  → each batch owns ONE StateVector (reset per trial) and ONE rng
  → partial Counters → summed once → ExecutionResult.

Seeding: one SeedSequence(config.seed) spawns a child per batch, so a
fixed seed gives the same histogram whatever the backend or pool size.
Cancellation is checked between trials (between batches on the processes
backend), never mid-trial.
"""
from __future__ import annotations

import threading
import time
from collections import Counter
from concurrent.futures import (
    FIRST_COMPLETED, Future, ProcessPoolExecutor, ThreadPoolExecutor, wait,
)
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

import numpy as np

from qsim_engine.circuit.errors import CircuitValidationError
from qsim_engine.circuit.io import (
    Circuit, bits_to_bitstring, bitstring_to_index, schedule,
    validate_circuit_dict,
)
from qsim_engine.config import DEFAULT_CONFIG, SimulatorConfig
from qsim_engine.kernel import gates as gmod
from qsim_engine.kernel.applicator import (
    apply_controlled, apply_multi_controlled, apply_single_qubit, apply_swap,
)
from qsim_engine.kernel.measure import measure
from qsim_engine.kernel.statevector import RawAmplitudes, StateVector
from qsim_engine.utils.logging_config import get_logger

log = get_logger("runner.executor")

# op tags
MEASURE = "measure"
SINGLE = "single"
CONTROLLED = "controlled"
MULTI = "multi"
SWAP = "swap"


# ── results ──────────────────────────────────────────────────────────

@dataclass
class ExecutionResult:
    counts: Dict[str, int]
    shots: int
    execution_time_ms: float
    probabilities: List[float] = field(default_factory=list)
    cancelled = False

    def to_dict(self) -> dict:
        return {
            "counts": dict(self.counts),
            "shots": self.shots,
            "executionTimeMs": self.execution_time_ms,
            "probabilities": list(self.probabilities),
        }


@dataclass
class CancelledResult:
    """Returned instead of a histogram when a run is cancelled."""
    completed_shots: int
    requested_shots: int
    execution_time_ms: float
    cancelled = True

    def to_dict(self) -> dict:
        return {
            "cancelled": True,
            "completedShots": self.completed_shots,
            "requestedShots": self.requested_shots,
            "executionTimeMs": self.execution_time_ms,
        }


# ── op compilation ───────────────────────────────────────────────────

def compile_ops(circuit: Circuit) -> list[tuple]:
    """Column-ordered op tuples with every matrix already resolved."""
    ops = []
    for g in schedule(circuit):
        if gmod.is_measurement(g.gate):
            ops.append((MEASURE, g.target))
        elif gmod.is_swap(g.gate):
            ops.append((SWAP, g.target, g.control))
        else:
            U = gmod.base_matrix(g.gate, g.angle, g.angles)
            ctrl = g.control_set
            if len(ctrl) >= 2:
                ops.append((MULTI, ctrl, g.target, U))
            elif len(ctrl) == 1:
                ops.append((CONTROLLED, ctrl[0], g.target, U))
            else:
                ops.append((SINGLE, g.target, U))
    return ops


def _apply_unitary(state: StateVector, op: tuple) -> None:
    kind = op[0]
    if kind == SINGLE:
        apply_single_qubit(state, op[1], op[2])
    elif kind == CONTROLLED:
        apply_controlled(state, op[1], op[2], op[3])
    elif kind == MULTI:
        apply_multi_controlled(state, op[1], op[2], op[3])
    elif kind == SWAP:
        apply_swap(state, op[1], op[2])
    else:
        raise ValueError(f"not a unitary op: {kind}")


def _trial(ops: list[tuple], state: StateVector, rng: np.random.Generator,
           min_branch: float) -> str:
    n = state.num_qubits
    bits = [0] * n
    measured = [False] * n
    for op in ops:
        if op[0] == MEASURE:
            q = op[1]
            bits[q] = measure(state, q, rng, min_branch)
            measured[q] = True
        else:
            _apply_unitary(state, op)
    for q in range(n):
        if not measured[q]:
            bits[q] = measure(state, q, rng, min_branch)
    return bits_to_bitstring(bits)


def run_batch(ops: list[tuple], num_qubits: int, n_shots: int,
               seed: np.random.SeedSequence, min_branch: float,
               cancel_event: Optional[threading.Event] = None):
    """Run ``n_shots`` trials on one owned buffer.  Returns (counts, completed)."""
    rng = np.random.default_rng(seed)
    state = StateVector(num_qubits)
    counts: Counter = Counter()
    done = 0
    for _ in range(n_shots):
        if cancel_event is not None and cancel_event.is_set():
            break
        state.reset()
        counts[_trial(ops, state, rng, min_branch)] += 1
        done += 1
    return counts, done


def batch_sizes(shots: int, batch: int) -> list[int]:
    full, rest = divmod(shots, batch)
    return [batch] * full + ([rest] if rest else [])


def empirical_probabilities(counts: Dict[str, int], shots: int, num_qubits: int) -> List[float]:
    probs = [0.0] * (1 << num_qubits)
    for bits, c in counts.items():
        probs[bitstring_to_index(bits)] = c / shots
    return probs


# ── background job ───────────────────────────────────────────────────

class SimulationJob:
    """Handle for an ``execute`` running off the caller's thread."""

    def __init__(self, future: Future, cancel_event: threading.Event):
        self._future = future
        self._cancel = cancel_event

    def cancel(self) -> None:
        self._cancel.set()

    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None):
        return self._future.result(timeout)


# ── executor ─────────────────────────────────────────────────────────

class CircuitExecutor:
    """Runs circuits as independent trials and aggregates histograms."""

    def __init__(self, config: Optional[SimulatorConfig] = None):
        self.config = config or DEFAULT_CONFIG
        # parent of the per-call generators used by run_trial
        self._trial_seeds = np.random.SeedSequence(self.config.seed)

    def prepare(self, circuit: Union[Circuit, dict]) -> Circuit:
        """Validate against the configured limits.  Raises CircuitValidationError."""
        return validate_circuit_dict(circuit, max_qubits=self.config.max_qubits)

    def check_shots(self, shots: Optional[int]) -> int:
        if shots is None:
            shots = self.config.default_shots
        if not isinstance(shots, int) or isinstance(shots, bool) or shots < 1:
            raise CircuitValidationError(f"shots must be a positive int, got {shots!r}")
        if shots > self.config.max_shots:
            raise CircuitValidationError(
                f"shots {shots} exceeds limit {self.config.max_shots}"
            )
        return shots

    def run_trial(self, circuit: Union[Circuit, dict],
                  rng: Optional[np.random.Generator] = None,
                  state: Optional[StateVector] = None) -> str:
        """One full trial → outcome bitstring (qubit 0 first).

        Without ``rng``, each call spawns a new generator from the
        executor's SeedSequence, so repeated calls are independent draws.
        """
        circuit = self.prepare(circuit)
        if rng is None:
            rng = np.random.default_rng(self._trial_seeds.spawn(1)[0])
        if state is None:
            state = StateVector(circuit.num_qubits)
        else:
            if state.num_qubits != circuit.num_qubits:
                raise ValueError(
                    f"state has {state.num_qubits} qubits, circuit needs {circuit.num_qubits}"
                )
            state.reset()
        return _trial(compile_ops(circuit), state, rng, self.config.min_branch_probability)

    def execute(self, circuit: Union[Circuit, dict], shots: Optional[int] = None,
                cancel_event: Optional[threading.Event] = None):
        """Run ``shots`` trials.  Returns ExecutionResult or CancelledResult."""
        circuit = self.prepare(circuit)
        shots = self.check_shots(shots)
        ops = compile_ops(circuit)
        cfg = self.config
        cancel_event = cancel_event or threading.Event()

        sizes = batch_sizes(shots, cfg.shot_batch_size)
        seeds = np.random.SeedSequence(cfg.seed).spawn(len(sizes))
        log.info(
            "run %s: %d shots, %d qubits, %d ops, backend=%s, batches=%d",
            cfg.run_id, shots, circuit.num_qubits, len(ops), cfg.backend, len(sizes),
        )

        t0 = time.perf_counter()
        if cfg.backend == "serial":
            partials = self._run_serial(ops, circuit.num_qubits, sizes, seeds, cancel_event)
        elif cfg.backend == "threads":
            partials = self._run_pool(ThreadPoolExecutor, ops, circuit.num_qubits,
                                      sizes, seeds, cancel_event, share_event=True)
        else:
            partials = self._run_pool(ProcessPoolExecutor, ops, circuit.num_qubits,
                                      sizes, seeds, cancel_event, share_event=False)

        total: Counter = Counter()
        completed = 0
        for counts, done in partials:
            total.update(counts)
            completed += done
        elapsed_ms = (time.perf_counter() - t0) * 1000.0

        if completed < shots:
            log.warning("run %s cancelled after %d/%d shots", cfg.run_id, completed, shots)
            return CancelledResult(completed, shots, elapsed_ms)

        log.info("run %s done: %d outcomes in %.1f ms", cfg.run_id, len(total), elapsed_ms)
        counts = dict(total)
        return ExecutionResult(
            counts=counts,
            shots=shots,
            execution_time_ms=elapsed_ms,
            probabilities=empirical_probabilities(counts, shots, circuit.num_qubits),
        )

    def _run_serial(self, ops, n, sizes, seeds, cancel_event):
        partials = []
        for i, (size, seed) in enumerate(zip(sizes, seeds)):
            if cancel_event.is_set():
                break
            partials.append(run_batch(ops, n, size, seed,
                                       self.config.min_branch_probability, cancel_event))
            log.debug("batch %d/%d done", i + 1, len(sizes))
        return partials

    def _run_pool(self, pool_cls, ops, n, sizes, seeds, cancel_event, share_event):
        # processes cannot share a threading.Event; they stop between batches
        event = cancel_event if share_event else None
        workers = self.config.workers
        todo = iter(zip(sizes, seeds))
        partials = []
        with pool_cls(max_workers=workers) as pool:
            in_flight = set()
            while True:
                # at most `workers` batches queued; nothing new once cancelled
                while len(in_flight) < workers and not cancel_event.is_set():
                    nxt = next(todo, None)
                    if nxt is None:
                        break
                    size, seed = nxt
                    in_flight.add(pool.submit(run_batch, ops, n, size, seed,
                                              self.config.min_branch_probability, event))
                if not in_flight:
                    break
                done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                for fut in done:
                    partials.append(fut.result())
                    log.debug("batch %d/%d done", len(partials), len(sizes))
        return partials

    def submit(self, circuit: Union[Circuit, dict], shots: Optional[int] = None) -> SimulationJob:
        """Start ``execute`` on a background thread.  Validation errors raise here."""
        circuit = self.prepare(circuit)
        shots = self.check_shots(shots)
        cancel_event = threading.Event()
        fut: Future = Future()

        def _target():
            if not fut.set_running_or_notify_cancel():
                return
            try:
                fut.set_result(self.execute(circuit, shots, cancel_event))
            except Exception as exc:
                fut.set_exception(exc)

        threading.Thread(target=_target, name=f"qsim-{self.config.run_id}",
                         daemon=True).start()
        return SimulationJob(fut, cancel_event)

    def statevector_only(self, circuit: Union[Circuit, dict]) -> RawAmplitudes:
        """Apply every unitary, skip measurements, return the amplitudes.  No randomness."""
        circuit = self.prepare(circuit)
        state = StateVector(circuit.num_qubits)
        for op in compile_ops(circuit):
            if op[0] != MEASURE:
                _apply_unitary(state, op)
        return state.to_raw()


# ── module-level conveniences ────────────────────────────────────────

def execute(circuit, shots: Optional[int] = None,
            config: Optional[SimulatorConfig] = None):
    return CircuitExecutor(config).execute(circuit, shots)


def statevector_only(circuit, config: Optional[SimulatorConfig] = None) -> RawAmplitudes:
    return CircuitExecutor(config).statevector_only(circuit)
