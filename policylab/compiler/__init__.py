from __future__ import annotations

# Public API re-exports (keep small & stable)
from .model import (
    CompiledPolicy,
    CompiledRule,
    RuleBuilder,
    SEVERITIES,
    DEFAULT_POLICY_NAME,
    DEFAULT_REMEDIATION,
)
from .dsl import CompileError, compile_policy
from .patterns import compile_pattern, format_literal
