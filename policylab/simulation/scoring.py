from __future__ import annotations
from typing import Iterable, Literal, Mapping

Verdict = Literal["safe", "review", "high-risk"]

SEVERITY_WEIGHTS: Mapping[str, int] = {
    "critical": 30,
    "high": 20,
    "medium": 12,
    "low": 6,
    "info": 2,
}

MAX_RISK_SCORE = 100
HIGH_RISK_THRESHOLD = 70
REVIEW_THRESHOLD = 35

SNIPPET_MAX_CHARS = 220
SNIPPET_MARKER = "..."


def severity_weight(severity: str) -> int:
    return SEVERITY_WEIGHTS[severity]


def risk_score(severities: Iterable[str]) -> int:
    """Sum of severity weights, clamped at 100 (clamped, not rescaled)."""
    return min(MAX_RISK_SCORE, sum(severity_weight(s) for s in severities))


def verdict_for(score: int) -> Verdict:
    if score >= HIGH_RISK_THRESHOLD:
        return "high-risk"
    if score >= REVIEW_THRESHOLD:
        return "review"
    return "safe"


def snippet(text: str, max_chars: int = SNIPPET_MAX_CHARS) -> str:
    return text if len(text) <= max_chars else f"{text[:max_chars]}{SNIPPET_MARKER}"
