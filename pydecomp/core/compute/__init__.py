"""
Shared compute infrastructure for pydecomp.

IMPORTANT: This is NOT where the factorizations live. Those go in
pydecomp.factorization. This module contains shared NUMERIC infrastructure.

Submodules:
    precision: Machine epsilon, auto_epsilon and epsilon-aware comparisons
    context: Explicit execution context for large matrix products
    timing: Execution timing utilities
"""

from pydecomp.core.compute.precision import (
    EPSILON_64,
    auto_epsilon,
    compare,
    has_zero,
    is_zero,
    machine_epsilon,
    resolve_epsilon,
)
from pydecomp.core.compute.context import ExecutionContext
from pydecomp.core.compute.timing import Timer

__all__ = [
    # Precision
    "EPSILON_64",
    "auto_epsilon",
    "compare",
    "has_zero",
    "is_zero",
    "machine_epsilon",
    "resolve_epsilon",
    # Execution
    "ExecutionContext",
    # Timing
    "Timer",
]
