from __future__ import annotations

from .compiler import CompileError, CompiledPolicy, CompiledRule, compile_policy
from .simulation import SimulationResult, Violation, simulate_policy

__version__ = "0.1.0"
