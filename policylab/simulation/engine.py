from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple
import re

from ..compiler.model import CompiledPolicy, CompiledRule, Severity
from ..compiler.patterns import compile_pattern, format_literal
from .scoring import Verdict, risk_score, snippet, verdict_for
from .segmenter import ClauseCandidate, segment_clauses

# ---- Data classes ----

@dataclass(frozen=True)
class Violation:
    rule_id: str
    clause_type: str
    severity: Severity
    reason: str
    remediation: str
    clause_snippet: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "clauseType": self.clause_type,
            "severity": self.severity,
            "reason": self.reason,
            "remediation": self.remediation,
            "clauseSnippet": self.clause_snippet,
        }

@dataclass(frozen=True)
class SimulationResult:
    clauses_analyzed: int
    violations: Tuple[Violation, ...] = field(default_factory=tuple)
    risk_score: int = 0
    verdict: Verdict = "safe"

    def to_dict(self) -> dict[str, Any]:
        return {
            "clausesAnalyzed": self.clauses_analyzed,
            "violations": [v.to_dict() for v in self.violations],
            "riskScore": self.risk_score,
            "verdict": self.verdict,
        }

# ---- helpers ----

def _violation(rule: CompiledRule, reason: str, text: str = "") -> Violation:
    return Violation(
        rule_id=rule.id,
        clause_type=rule.clause_type,
        severity=rule.severity,
        reason=reason,
        remediation=rule.remediation,
        clause_snippet=snippet(text) if text else "",
    )

def _maybe_compile(pattern: Optional[str], flags: Optional[str]) -> Optional[re.Pattern[str]]:
    return compile_pattern(pattern, flags) if pattern is not None else None

def evaluate_rule(rule: CompiledRule, clauses: List[ClauseCandidate]) -> List[Violation]:
    """
    Violations produced by one rule, in candidate order.

    A rule whose clause type is absent only reports when it REQUIREs
    something; its FORBID pattern cannot match text that is not there.
    """
    matching = [c for c in clauses if c.clause_type == rule.clause_type]

    if not matching:
        if rule.require_pattern is not None:
            return [_violation(rule, f"No clause found for required type {rule.clause_type}")]
        return []

    require_rx = _maybe_compile(rule.require_pattern, rule.require_flags)
    forbid_rx = _maybe_compile(rule.forbid_pattern, rule.forbid_flags)

    out: List[Violation] = []
    for clause in matching:
        if require_rx is not None and not require_rx.search(clause.text):
            literal = format_literal(rule.require_pattern or "", rule.require_flags)
            out.append(_violation(rule, f"Required pattern missing: {literal}", clause.text))
        if forbid_rx is not None and forbid_rx.search(clause.text):
            literal = format_literal(rule.forbid_pattern or "", rule.forbid_flags)
            out.append(_violation(rule, f"Forbidden pattern present: {literal}", clause.text))
    return out

# ---- Public API ----

def simulate_policy(policy: CompiledPolicy, contract_text: str) -> SimulationResult:
    """
    Evaluate every rule (declaration order) against freshly segmented clauses
    and score the findings.
    """
    clauses = segment_clauses(contract_text)

    violations: List[Violation] = []
    for rule in policy.rules:
        violations.extend(evaluate_rule(rule, clauses))

    score = risk_score(v.severity for v in violations)
    return SimulationResult(
        clauses_analyzed=len(clauses),
        violations=tuple(violations),
        risk_score=score,
        verdict=verdict_for(score),
    )
