from __future__ import annotations
import pytest

from policylab.simulation.scoring import (
    SEVERITY_WEIGHTS,
    risk_score,
    snippet,
    verdict_for,
)


def test_weight_table_is_exact():
    assert dict(SEVERITY_WEIGHTS) == {"critical": 30, "high": 20, "medium": 12, "low": 6, "info": 2}


@pytest.mark.parametrize(
    "score,verdict",
    [(0, "safe"), (34, "safe"), (35, "review"), (69, "review"), (70, "high-risk"), (100, "high-risk")],
)
def test_verdict_boundaries(score, verdict):
    assert verdict_for(score) == verdict


def test_risk_score_clamps_without_rescaling():
    assert risk_score([]) == 0
    assert risk_score(["high", "medium"]) == 32
    assert risk_score(["critical"] * 3) == 90
    assert risk_score(["critical"] * 4) == 100
    assert risk_score(["critical"] * 3 + ["info"]) == 92


def test_risk_score_monotonic_in_violation_count():
    seq = ["info", "low", "critical", "medium", "high", "critical", "critical", "info"]
    scores = [risk_score(seq[:n]) for n in range(len(seq) + 1)]
    assert scores == sorted(scores)
    assert max(scores) == 100


def test_snippet_truncation_threshold():
    assert snippet("a" * 220) == "a" * 220
    assert snippet("a" * 221) == "a" * 220 + "..."
    assert snippet("") == ""


def test_snippet_counts_code_points():
    # astral characters count once each, not as surrogate pairs
    emoji = "\U0001F600"
    assert snippet(emoji * 220) == emoji * 220
    assert snippet(emoji * 221) == emoji * 220 + "..."
    assert len(snippet(emoji * 300)) == 223
