from __future__ import annotations
from typing import Any, Dict, List
import pandas as pd

from ..compiler.model import CompiledPolicy, SEVERITIES
from .engine import SimulationResult
from .scoring import severity_weight

VIOLATION_COLUMNS: List[str] = [
    "rule_id",
    "clause_type",
    "severity",
    "weight",
    "reason",
    "remediation",
    "clause_snippet",
]


def violations_frame(result: SimulationResult) -> pd.DataFrame:
    """One row per violation, in evaluation order."""
    rows = [
        {
            "rule_id": v.rule_id,
            "clause_type": v.clause_type,
            "severity": v.severity,
            "weight": severity_weight(v.severity),
            "reason": v.reason,
            "remediation": v.remediation,
            "clause_snippet": v.clause_snippet,
        }
        for v in result.violations
    ]
    return pd.DataFrame(rows, columns=VIOLATION_COLUMNS)


def _by_severity(df: pd.DataFrame) -> Dict[str, int]:
    counts = df["severity"].value_counts() if not df.empty else pd.Series(dtype="int64")
    return {s: int(counts.get(s, 0)) for s in SEVERITIES}


def _by_rule(policy: CompiledPolicy, df: pd.DataFrame) -> Dict[str, int]:
    # keep declaration order; duplicate ids share one bucket
    counts = df["rule_id"].value_counts() if not df.empty else pd.Series(dtype="int64")
    out: Dict[str, int] = {}
    for r in policy.rules:
        out[r.id] = int(counts.get(r.id, 0))
    return out


def build_simulation_report(policy: CompiledPolicy, result: SimulationResult) -> Dict[str, Any]:
    df = violations_frame(result)
    by_rule = _by_rule(policy, df)
    return {
        "policy": {
            "name": policy.policy_name,
            "compiled_at": policy.compiled_at,
            "rules": len(policy.rules),
        },
        "clauses_analyzed": result.clauses_analyzed,
        "violations": len(result.violations),
        "risk_score": result.risk_score,
        "verdict": result.verdict,
        "by_severity": _by_severity(df),
        "by_rule": by_rule,
        "rules_without_findings": [rid for rid, n in by_rule.items() if n == 0],
    }


def build_narrative(policy: CompiledPolicy, result: SimulationResult) -> str:
    lines = []
    lines.append(f"# Policy simulation: {policy.policy_name}")
    lines.append(f"- Clauses analyzed: {result.clauses_analyzed}")
    lines.append(f"- Risk score: {result.risk_score}/100")
    lines.append(f"- Verdict: {result.verdict}")
    lines.append("")
    lines.append("## Findings")
    if not result.violations:
        lines.append("- No violations.")
    for v in result.violations:
        where = f" :: \"{v.clause_snippet}\"" if v.clause_snippet else ""
        lines.append(f"- [{v.severity.upper()}] {v.rule_id} ({v.clause_type}): {v.reason}{where}")
        lines.append(f"  - Remediation: {v.remediation}")
    return "\n".join(lines)
