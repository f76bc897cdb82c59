"""Benchmark: shot throughput per backend."""
from __future__ import annotations

import time
from typing import Optional

from qsim_engine.circuit.presets import ghz, grover_2
from qsim_engine.config import DEFAULT_CONFIG, SimulatorConfig
from qsim_engine.runner.executor import CircuitExecutor
from qsim_engine.utils.logging_config import setup_logging


def bench_shots(circ_fn, circ_name: str, shots: int = 4096, config: Optional[SimulatorConfig] = None):
    cd = circ_fn()
    base = (config or DEFAULT_CONFIG).with_overrides(seed=7)
    results = {}
    for backend in ("serial", "threads", "processes"):
        ex = CircuitExecutor(base.with_overrides(backend=backend))
        t0 = time.perf_counter()
        ex.execute(cd, shots)
        dt = time.perf_counter() - t0
        results[backend] = {"time": dt, "shots_s": shots / dt}
        print(f"  {backend:<10} {dt:.4f}s  {shots / dt:,.0f} shots/s")
    return results


if __name__ == "__main__":
    setup_logging()
    for name, fn in [
        ("GHZ-4", lambda: ghz(4)),
        ("GHZ-10", lambda: ghz(10)),
        ("Grover-2", grover_2),
    ]:
        cd = fn()
        print(f"\n{name}  (n={cd['numQubits']}, gates={len(cd['gates'])})")
        bench_shots(fn, name)
