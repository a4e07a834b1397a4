from __future__ import annotations

from policylab.compiler import compile_policy
from policylab.simulation import build_narrative, build_simulation_report, simulate_policy, violations_frame
from policylab.simulation.report import VIOLATION_COLUMNS
from policylab.templates import SAMPLE_CONTRACT_TEXT, SAMPLE_POLICY_DSL


def _sample():
    policy = compile_policy(SAMPLE_POLICY_DSL)
    return policy, simulate_policy(policy, SAMPLE_CONTRACT_TEXT)


def test_violations_frame_rows_and_weights():
    _, result = _sample()
    df = violations_frame(result)
    assert list(df.columns) == VIOLATION_COLUMNS
    assert df["rule_id"].tolist() == ["liability_cap", "privacy_transfer"]
    assert df["weight"].tolist() == [20, 12]
    assert df["weight"].sum() == result.risk_score


def test_violations_frame_empty_keeps_columns(p1_dsl):
    result = simulate_policy(compile_policy(p1_dsl), "Liability: we cap liability at the fees paid.")
    df = violations_frame(result)
    assert df.empty
    assert list(df.columns) == VIOLATION_COLUMNS


def test_report_counts():
    policy, result = _sample()
    rep = build_simulation_report(policy, result)
    assert rep["policy"]["name"] == "Baseline SaaS Policy"
    assert rep["policy"]["rules"] == 2
    assert rep["clauses_analyzed"] == 2
    assert rep["violations"] == 2
    assert rep["by_severity"] == {"critical": 0, "high": 1, "medium": 1, "low": 0, "info": 0}
    assert list(rep["by_rule"]) == ["liability_cap", "privacy_transfer"]
    assert rep["rules_without_findings"] == []
    assert rep["risk_score"] == result.risk_score
    assert rep["verdict"] == result.verdict


def test_report_lists_rules_without_findings(p1_dsl):
    policy = compile_policy(p1_dsl)
    result = simulate_policy(policy, "Liability: we cap liability at the fees paid.")
    rep = build_simulation_report(policy, result)
    assert rep["by_rule"] == {"r1": 0}
    assert rep["rules_without_findings"] == ["r1"]
    assert sum(rep["by_severity"].values()) == 0


def test_narrative_mentions_findings_and_remediation():
    policy, result = _sample()
    text = build_narrative(policy, result)
    assert text.startswith("# Policy simulation: Baseline SaaS Policy")
    assert "[HIGH] liability_cap (LIABILITY)" in text
    assert "Remediation: Constrain third-party data sharing" in text
    assert f"Risk score: {result.risk_score}/100" in text


def test_narrative_without_findings(p1_dsl):
    policy = compile_policy(p1_dsl)
    text = build_narrative(policy, simulate_policy(policy, "Liability: we cap liability at the fees paid."))
    assert "- No violations." in text
