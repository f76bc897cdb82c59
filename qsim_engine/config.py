"""
Configuration for the shot simulator.
"""
from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field, replace
from typing import Optional

BACKENDS = ("serial", "threads", "processes")


@dataclass(frozen=True)
class SimulatorConfig:
    """Configuration for the quantum circuit simulator."""

    # Run identification
    run_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])

    # Circuit limits
    max_qubits: int = 12
    default_shots: int = 1024
    max_shots: int = 1_000_000

    # Trial fan-out
    backend: str = "threads"  # serial | threads | processes
    max_workers: Optional[int] = None  # None → os.cpu_count()
    shot_batch_size: int = 256  # Trials per task; one StateVector per task

    # Sampling
    seed: Optional[int] = None  # Fixed seed → reproducible counts
    min_branch_probability: float = 1e-300

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"backend must be one of {BACKENDS}, got {self.backend!r}")
        if self.shot_batch_size < 1:
            raise ValueError("shot_batch_size must be >= 1")
        if self.max_qubits < 1:
            raise ValueError("max_qubits must be >= 1")

    @property
    def workers(self) -> int:
        """Effective worker count for the pool backends."""
        return self.max_workers or os.cpu_count() or 1

    def with_overrides(self, **kwargs) -> "SimulatorConfig":
        return replace(self, **kwargs)


# Default configuration instance
DEFAULT_CONFIG = SimulatorConfig()
