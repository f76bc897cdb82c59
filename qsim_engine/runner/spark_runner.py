"""Spark runner: shot batches as Spark tasks, counts reduced once.

Each task runs ``run_batch`` (same kernel, seeding and batching as the
local executor) and returns a plain dict; ``reduce`` sums them.  A fixed
``config.seed`` therefore gives the same histogram as the local backends.
"""
from __future__ import annotations

import time
from collections import Counter
from typing import TYPE_CHECKING, Optional

import numpy as np

from qsim_engine.config import SimulatorConfig
from qsim_engine.runner.executor import (
    CircuitExecutor, ExecutionResult, batch_sizes, compile_ops,
    empirical_probabilities, run_batch,
)
from qsim_engine.utils.logging_config import get_logger

if TYPE_CHECKING:
    from pyspark import SparkContext

log = get_logger("runner.spark")


def _spark_batch(args):
    ops, n, size, seed, min_branch = args
    counts, _ = run_batch(ops, n, size, seed, min_branch)
    return dict(counts)


def _merge(a: dict, b: dict) -> dict:
    merged = Counter(a)
    merged.update(b)
    return dict(merged)


def run_shots(
    circuit_dict,
    shots: Optional[int],
    sc: "SparkContext",
    n_partitions: Optional[int] = None,
    config: Optional[SimulatorConfig] = None,
) -> ExecutionResult:
    executor = CircuitExecutor(config)
    cfg = executor.config
    circuit = executor.prepare(circuit_dict)
    shots = executor.check_shots(shots)
    ops = compile_ops(circuit)
    n = circuit.num_qubits

    sizes = batch_sizes(shots, cfg.shot_batch_size)
    seeds = np.random.SeedSequence(cfg.seed).spawn(len(sizes))
    tasks = [(ops, n, size, seed, cfg.min_branch_probability)
             for size, seed in zip(sizes, seeds)]
    n_partitions = n_partitions or min(len(tasks), sc.defaultParallelism)
    log.info("run %s: %d shots as %d spark tasks over %d partitions",
             cfg.run_id, shots, len(tasks), n_partitions)

    t0 = time.perf_counter()
    counts = sc.parallelize(tasks, n_partitions).map(_spark_batch).reduce(_merge)
    elapsed_ms = (time.perf_counter() - t0) * 1000.0

    return ExecutionResult(
        counts=counts,
        shots=shots,
        execution_time_ms=elapsed_ms,
        probabilities=empirical_probabilities(counts, shots, n),
    )
