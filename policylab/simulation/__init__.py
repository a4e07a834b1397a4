from __future__ import annotations

# Public API re-exports (keep small & stable)
from .segmenter import ClauseCandidate, infer_clause_type, segment_clauses
from .scoring import SEVERITY_WEIGHTS, risk_score, verdict_for, snippet
from .engine import Violation, SimulationResult, evaluate_rule, simulate_policy
from .report import violations_frame, build_simulation_report, build_narrative
